"""
Alert models — the canonical TheHive alert and its MITRE enrichment.

Alert is the outbound format. Both source agents (Red Canary, Sentinel)
assemble one of these and hand it to the alert-creation integration.
Field names are snake_case in Python and camelCase on the wire
(sourceRef, externalLink, patternId, occurDate); unset optional fields
are dropped from the wire payload entirely.

Import hierarchy (no circular dependencies):
  observable.py     <- no internal imports
  alert.py          <- observable.py
  agent_io.py       <- alert.py
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.models.observable import Observable


class AlertSource(str, Enum):
    REDCANARY = "redcanary"
    SENTINEL = "sentinel"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Pattern(_CamelModel):
    """A MITRE ATT&CK pattern as returned by the TheHive getPattern query."""

    pattern_id: str                                   # e.g. "T1566.001"
    name: str                                         # e.g. "Spearphishing Attachment"
    tactics: list[str]                                # e.g. ["initial-access"]; procedures use the first
    description: Optional[str] = None


class Procedure(_CamelModel):
    """A TTP entry on the alert timeline."""

    pattern_id: str
    tactic: str
    occur_date: int                # epoch millis
    description: Optional[str] = None


class Alert(_CamelModel):
    type: str                      # "event" (Red Canary) / "external" (Sentinel)
    source: str
    source_ref: str
    title: str
    description: str
    severity: Optional[int] = None           # 1 low … 3 high; omitted when unmapped
    status: Optional[str] = None
    date: int                                # epoch millis
    external_link: Optional[str] = None
    observables: list[Observable] = Field(default_factory=list)
    tags: Optional[list[str]] = None
    procedures: Optional[list[Procedure]] = None

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON body expected by TheHive's alert API."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
