"""
TheHive API client — alert creation and query execution.

Thin async wrappers over TheHive v1 REST endpoints:
  POST /api/v1/alert   create an alert
  POST /api/v1/query   run a query pipeline (used for getPattern)

No retries: HTTP errors raise httpx.HTTPStatusError and propagate to the
caller unchanged. _build_client() is the patchable seam for tests.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from src.config import Settings, get_settings
from src.models.alert import Alert

logger = logging.getLogger(__name__)


def _build_client(settings: Settings) -> httpx.AsyncClient:
    headers = {
        "Authorization": f"Bearer {settings.thehive_api_key}",
        "Accept": "application/json",
    }
    if settings.thehive_organisation:
        headers["X-Organisation"] = settings.thehive_organisation

    return httpx.AsyncClient(
        base_url=settings.thehive_url.rstrip("/"),
        headers=headers,
        timeout=settings.thehive_timeout,
    )


def _settings() -> Settings:
    settings = get_settings()
    settings.validate_for_integration("thehive")
    return settings


async def create_alert(alert: Alert) -> Any:
    """Create *alert* in TheHive and return the decoded response body."""
    async with _build_client(_settings()) as client:
        resp = await client.post("/api/v1/alert", json=alert.to_payload())
        resp.raise_for_status()
        created = resp.json()

    logger.info(
        "thehive.alert_created",
        extra={"source": alert.source, "source_ref": alert.source_ref},
    )
    return created


async def query(operations: list[dict[str, Any]]) -> Any:
    """Execute a TheHive query pipeline and return the decoded response body."""
    async with _build_client(_settings()) as client:
        resp = await client.post("/api/v1/query", json={"query": operations})
        resp.raise_for_status()
        return resp.json()


async def get_pattern(id_or_name: str) -> Any:
    """Find MITRE patterns by technique ID or name."""
    return await query([{"_name": "getPattern", "idOrName": id_or_name}])
