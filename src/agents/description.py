"""
Incident description builder — Sentinel incident → markdown alert body.

The body is the incident's own description followed by a "Related Alerts"
section (a table, or a one-line notice when the incident lists none).
The section is omitted entirely when the incident has no alerts field.
The description text is kept verbatim; only the section is rendered, by
templates/related_alerts.md.jinja2.
"""

from __future__ import annotations

from typing import Any, Optional

from src.utils.templates import render_template

NO_DESCRIPTION = "No description available"

_TEMPLATE = "related_alerts.md.jinja2"


def _incident_properties(incident: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
    if not incident:
        return None
    wrapper = incident.get("object")
    if not isinstance(wrapper, dict):
        return None
    props = wrapper.get("properties")
    return props if isinstance(props, dict) else None


def _related_alert_row(alert: dict[str, Any]) -> dict[str, Any]:
    props = alert.get("properties") or {}
    return {
        "title": props.get("alertDisplayName", ""),
        "link": props.get("alertLink", ""),
        "alert_id": alert.get("name", ""),
        "start_time": props.get("startTimeUtc", ""),
    }


def build_description(incident: Optional[dict[str, Any]]) -> str:
    """Render the markdown description for a Sentinel incident payload.

    Args:
        incident: The full webhook body ({"object": {"properties": {...}}}).

    Returns:
        Markdown string, or "No description available" when the payload is
        missing or has no object.properties container.
    """
    props = _incident_properties(incident)
    if props is None:
        return NO_DESCRIPTION

    parts = []
    description = props.get("description")
    if description:
        parts.append(description)

    if "alerts" in props:
        related_alerts = [_related_alert_row(a) for a in props["alerts"] or []]
        section = render_template(_TEMPLATE, related_alerts=related_alerts)
        parts.append(section.rstrip("\n"))

    return "\n\n".join(parts)
