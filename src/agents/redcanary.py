"""
RedCanaryAgent — Red Canary detection webhook → TheHive "event" alert.

Payload shape:
  {"Detection": {"id", "headline", "details", "published_at"},
   "Endpoint": {...} | [{...}, ...],          optional
   "EndpointUser": {...} | [{...}, ...]}      optional

One hostname observable per endpoint and one mail observable per endpoint
user. Unlike the Sentinel agent, observables are NOT deduplicated here:
a detection touching the same host twice yields two hostname observables.

Entry point: async def run(input: RedCanaryInput) -> AlertOutput
"""

from __future__ import annotations

import logging
from typing import Any

from src.agents.observables import as_sequence
from src.config import get_settings
from src.models.agent_io import AlertOutput, RedCanaryInput
from src.models.alert import Alert
from src.models.observable import Observable
from src.utils.timestamps import to_epoch_millis

logger = logging.getLogger(__name__)


async def _create_alert(alert: Alert) -> Any:
    """Hand the assembled alert to TheHive."""
    from src.integrations.thehive import create_alert
    return await create_alert(alert)


def _field_observables(records: Any, field: str, data_type: str) -> list[Observable]:
    observables: list[Observable] = []
    for record in as_sequence(records):
        value = record.get(field)
        if value is None or value == "":
            continue
        observables.append(Observable(data_type=data_type, data=value))
    return observables


def build_alert(raw: dict[str, Any]) -> Alert:
    """Assemble the TheHive alert for a Red Canary detection payload.

    Raises:
        ValueError: If the payload has no Detection object.
    """
    detection = raw.get("Detection")
    if not isinstance(detection, dict):
        raise ValueError("RedCanaryAgent: payload has no 'Detection' object")

    observables = _field_observables(raw.get("Endpoint"), "hostname", "hostname")
    observables += _field_observables(raw.get("EndpointUser"), "username", "mail")

    return Alert(
        type="event",
        source=get_settings().redcanary_source_name,
        source_ref=str(detection["id"]),
        title=detection["headline"],
        description=detection["details"],
        date=to_epoch_millis(detection["published_at"]),
        observables=observables,
    )


async def run(input: RedCanaryInput) -> AlertOutput:
    """Normalize a Red Canary detection and create it as a TheHive alert.

    Returns:
        AlertOutput with the assembled alert and TheHive's response verbatim.

    Raises:
        ValueError: If the payload has no Detection object.
    """
    alert = build_alert(input.raw_payload)
    logger.info(
        "redcanary_agent.start",
        extra={"source_ref": alert.source_ref, "observables": len(alert.observables)},
    )

    result = await _create_alert(alert)

    logger.info("redcanary_agent.complete", extra={"source_ref": alert.source_ref})
    return AlertOutput(alert=alert, result=result)
