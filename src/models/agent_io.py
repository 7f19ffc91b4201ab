"""
Agent I/O contracts — typed inputs and outputs for every agent.

Raw webhook bodies stay as dicts (only presence is checked, never the full
schema); everything the agents produce crosses boundaries as validated
Pydantic models.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel

from src.models.alert import Alert, AlertSource


# ---------------------------------------------------------------------------
# Source agents — raw webhook payload → TheHive alert
# ---------------------------------------------------------------------------

class RedCanaryInput(BaseModel):
    raw_payload: dict[str, Any]


class SentinelInput(BaseModel):
    raw_payload: dict[str, Any]


class WebhookInput(BaseModel):
    raw_payload: dict[str, Any]
    source_hint: Optional[AlertSource] = None  # if known from webhook routing


class AlertOutput(BaseModel):
    alert: Alert
    result: Any = None  # alert-creation response, passed through untouched
