"""
Webhook routing — pick the source agent for a raw payload.

Used by the generic /api/v1/webhooks endpoint when the caller doesn't say
which product sent the payload.

Entry point: async def run(input: WebhookInput) -> AlertOutput
"""

from __future__ import annotations

import logging
from typing import Any

from src.agents import redcanary, sentinel
from src.models.agent_io import AlertOutput, RedCanaryInput, SentinelInput, WebhookInput
from src.models.alert import AlertSource

logger = logging.getLogger(__name__)


def detect_source(raw: dict[str, Any]) -> AlertSource | None:
    """Infer alert source from payload structure."""
    if isinstance(raw.get("Detection"), dict):
        return AlertSource.REDCANARY
    if isinstance((raw.get("object") or {}).get("properties"), dict):
        return AlertSource.SENTINEL
    return None


async def run(input: WebhookInput) -> AlertOutput:
    """Dispatch a webhook payload to the matching source agent.

    Raises:
        ValueError: If the source cannot be determined from hint or payload shape.
    """
    raw = input.raw_payload
    source = input.source_hint or detect_source(raw)
    if source is None:
        raise ValueError(
            "Webhook router: cannot determine alert source from payload structure. "
            "Expected a Red Canary 'Detection' object or a Sentinel "
            "'object.properties' container."
        )

    logger.info("webhook_router.dispatch", extra={"source": source.value})

    if source is AlertSource.REDCANARY:
        return await redcanary.run(RedCanaryInput(raw_payload=raw))
    return await sentinel.run(SentinelInput(raw_payload=raw))
