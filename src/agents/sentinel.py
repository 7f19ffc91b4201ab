"""
SentinelAgent — Microsoft Sentinel incident webhook → TheHive "external" alert.

Payload shape:
  {"object": {"properties": {
      "providerName", "providerIncidentId", "title", "severity",
      "createdTimeUtc", "incidentUrl", "description"?, "alerts"?,
      "relatedEntities": [...], "additionalData": {"techniques"?: [...]}}}}

Builds on the three engine pieces:
  - observables.collect_observables   relatedEntities → deduplicated observables
  - description.build_description     markdown body with related-alerts table
  - techniques.resolve_techniques     technique IDs → MITRE patterns
                                       (tags + procedure timeline)

Entry point: async def run(input: SentinelInput) -> AlertOutput
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Optional

from src.agents.description import build_description
from src.agents.observables import collect_observables
from src.agents.techniques import build_procedures, pattern_tags, resolve_techniques
from src.models.agent_io import AlertOutput, SentinelInput
from src.models.alert import Alert, Pattern
from src.utils.timestamps import to_epoch_millis

logger = logging.getLogger(__name__)

# Sentinel severity → TheHive severity. Anything else leaves severity unset.
_SEVERITY_MAP: dict[str, int] = {
    "Informational": 1,
    "Low": 1,
    "Medium": 2,
    "High": 3,
}


async def _create_alert(alert: Alert) -> Any:
    """Hand the assembled alert to TheHive."""
    from src.integrations.thehive import create_alert
    return await create_alert(alert)


def incident_properties(raw: dict[str, Any]) -> dict[str, Any]:
    """Return object.properties from a Sentinel webhook body.

    Raises:
        ValueError: If the container is missing.
    """
    props = (raw.get("object") or {}).get("properties")
    if not isinstance(props, dict):
        raise ValueError("SentinelAgent: payload has no 'object.properties' container")
    return props


def incident_techniques(props: dict[str, Any]) -> list[str]:
    additional = props.get("additionalData") or {}
    return list(additional.get("techniques") or [])


def map_severity(severity: Optional[str]) -> Optional[int]:
    return _SEVERITY_MAP.get(severity)


def build_alert(raw: dict[str, Any], patterns: Optional[Sequence[Pattern]] = None) -> Alert:
    """Assemble the TheHive alert for a Sentinel incident payload.

    Args:
        raw: The full webhook body.
        patterns: Patterns resolved for the incident's techniques, or None
                  when the incident carries no technique IDs. Tags are only
                  attached when at least one pattern resolved; procedures are
                  attached (possibly empty) whenever patterns is not None.

    Raises:
        ValueError: If object.properties is missing.
    """
    props = incident_properties(raw)

    alert = Alert(
        type="external",
        source=props["providerName"],
        source_ref=str(props["providerIncidentId"]),
        title=props["title"],
        description=build_description(raw),
        severity=map_severity(props.get("severity")),
        status="New",
        date=to_epoch_millis(props["createdTimeUtc"]),
        external_link=props.get("incidentUrl"),
        observables=collect_observables(props.get("relatedEntities") or []),
    )

    if patterns is not None:
        if patterns:
            alert.tags = pattern_tags(patterns)
        alert.procedures = build_procedures(patterns, props["createdTimeUtc"])

    return alert


async def run(input: SentinelInput) -> AlertOutput:
    """Normalize a Sentinel incident and create it as a TheHive alert.

    Returns:
        AlertOutput with the assembled alert and TheHive's response verbatim.

    Raises:
        ValueError: If object.properties is missing.
    """
    raw = input.raw_payload
    props = incident_properties(raw)
    techniques = incident_techniques(props)

    logger.info(
        "sentinel_agent.start",
        extra={
            "incident": props.get("providerIncidentId"),
            "entities": len(props.get("relatedEntities") or []),
            "techniques": len(techniques),
        },
    )

    patterns = await resolve_techniques(techniques) if techniques else None
    alert = build_alert(raw, patterns)

    result = await _create_alert(alert)

    logger.info(
        "sentinel_agent.complete",
        extra={
            "incident": alert.source_ref,
            "observables": len(alert.observables),
            "patterns": len(patterns or []),
        },
    )
    return AlertOutput(alert=alert, result=result)
