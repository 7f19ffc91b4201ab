"""
Observable models — entities in, typed observables out.

Entity is the source-side record embedded in an incident payload
(Sentinel relatedEntities). Observable is the TheHive-side indicator
that ends up on the alert. ObservableRule is one row of the static
entity-kind → observable mapping table in src/agents/observables.py.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class EntityKind(str, Enum):
    """Entity kinds the observable mapper knows how to translate."""

    MAILBOX = "Mailbox"
    FILE = "File"
    FILE_HASH = "FileHash"
    MAIL_CLUSTER = "MailCluster"
    MAIL_MESSAGE = "MailMessage"
    IP = "Ip"


class Entity(BaseModel):
    kind: str                                                # free string; unknown kinds are skipped
    properties: dict[str, Any] = Field(default_factory=dict)


class ObservableRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    data_type: str         # TheHive dataType, e.g. "mail", "ip", "hash"
    value_property: str    # entity property holding the value (scalar or list)
    tags: tuple[str, ...] = ()


class Observable(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    data_type: str
    data: Any
    tags: Optional[list[str]] = None
