"""
Observable mapping — Sentinel entities → deduplicated TheHive observables.

Two stages:
  1. map_entity()        one entity → candidate observables, driven by the
                         static _OBSERVABLE_RULES table (kind → rules)
  2. add_observable()    append-or-merge into an ordered map keyed by
                         (dataType, data); tags are unioned on collision

collect_observables() runs both over every entity and finishes with
finalize_observables(), which returns the list in first-seen order.

Pure functions — no I/O, no shared mutable state.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from types import MappingProxyType
from typing import Any, Mapping

from src.models.observable import Entity, EntityKind, Observable, ObservableRule

logger = logging.getLogger(__name__)

ObservableKey = tuple[str, Any]

# ---------------------------------------------------------------------------
# Entity kind → observable rules
# A kind may expand to several observables (MailMessage). The recipient rule
# is listed twice on purpose; the second pass is absorbed by the dedup merge.
# ---------------------------------------------------------------------------

def _rule(data_type: str, value_property: str, *tags: str) -> ObservableRule:
    return ObservableRule(data_type=data_type, value_property=value_property, tags=tags)


_OBSERVABLE_RULES: Mapping[EntityKind, tuple[ObservableRule, ...]] = MappingProxyType({
    EntityKind.MAILBOX: (
        _rule("mail", "mailboxPrimaryAddress", "mail-mailbox-primary-address"),
    ),
    EntityKind.FILE: (
        _rule("filename", "fileName"),
    ),
    EntityKind.FILE_HASH: (
        _rule("hash", "hashValue"),
    ),
    EntityKind.MAIL_CLUSTER: (
        _rule("other", "networkMessageIds", "mail-network-message-id"),
    ),
    EntityKind.MAIL_MESSAGE: (
        _rule("mail-subject", "subject"),
        _rule("mail", "recipient", "mail-recipient"),
        _rule("mail", "recipient", "mail-recipient"),
        _rule("mail", "p1Sender", "mail-sender"),
        _rule("domain", "p1SenderDomain", "mail-sender-domain"),
        _rule("ip", "senderIP", "mail-sender-ip"),
        _rule("mail", "p2Sender", "mail-sender"),
        _rule("domain", "p2SenderDomain", "mail-sender-domain"),
        _rule("ip", "p2SenderIP", "mail-sender-ip"),
        _rule("other", "internetMessageId", "mail-internet-message-id"),
    ),
    EntityKind.IP: (
        _rule("ip", "address"),
    ),
})

_unmapped = set(EntityKind) - set(_OBSERVABLE_RULES)
if _unmapped:
    raise RuntimeError(
        f"Observable rule table is missing entity kinds: "
        f"{', '.join(sorted(k.value for k in _unmapped))}"
    )

_KINDS_BY_NAME: dict[str, EntityKind] = {kind.value: kind for kind in EntityKind}


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def as_sequence(value: Any) -> list[Any]:
    """Normalize a singular-or-list field to a list of 0..N items.

    None → [], list/tuple → list copy, anything else → [value].
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _is_empty(data: Any) -> bool:
    return data is None or data == ""


# ---------------------------------------------------------------------------
# Mapper
# ---------------------------------------------------------------------------

def rules_for(kind: str) -> tuple[ObservableRule, ...]:
    """Return the mapping rules for an entity kind; () for unknown kinds."""
    entity_kind = _KINDS_BY_NAME.get(kind)
    if entity_kind is None:
        return ()
    return _OBSERVABLE_RULES[entity_kind]


def map_entity(entity: Entity) -> list[Observable]:
    """Translate one entity into candidate observables (not yet deduplicated).

    Unknown kinds yield nothing. List-valued properties yield one observable
    per element. Missing and empty-string values are dropped.
    """
    rules = rules_for(entity.kind)
    if not rules:
        logger.debug("observable_mapper.unmapped_kind", extra={"kind": entity.kind})
        return []

    candidates: list[Observable] = []
    for rule in rules:
        for value in as_sequence(entity.properties.get(rule.value_property)):
            if _is_empty(value):
                continue
            candidates.append(
                Observable(
                    data_type=rule.data_type,
                    data=value,
                    tags=list(rule.tags) or None,
                )
            )
    return candidates


# ---------------------------------------------------------------------------
# Deduplicator
# ---------------------------------------------------------------------------

def add_observable(
    observables: dict[ObservableKey, Observable],
    data_type: str,
    data: Any,
    tags: Iterable[str] | None = None,
) -> None:
    """Append a new observable or merge tags into the existing one.

    Identity is the exact (data_type, data) pair. On collision the existing
    tags become the union of old and new; a new observable only carries tags
    when some were supplied.
    """
    new_tags = list(tags) if tags else []
    key = (data_type, data)

    existing = observables.get(key)
    if existing is None:
        observables[key] = Observable(data_type=data_type, data=data, tags=new_tags or None)
        return

    if new_tags:
        merged = list(existing.tags or [])
        merged.extend(t for t in new_tags if t not in merged)
        existing.tags = merged


def finalize_observables(observables: Iterable[Observable]) -> list[Observable]:
    """Drop empty values and any repeated (data_type, data) pair.

    Keeps the first occurrence of each pair, in order.
    """
    seen: set[ObservableKey] = set()
    result: list[Observable] = []
    for observable in observables:
        key = (observable.data_type, observable.data)
        if _is_empty(observable.data) or key in seen:
            continue
        seen.add(key)
        result.append(observable)
    return result


def collect_observables(entities: Iterable[Entity | dict[str, Any]]) -> list[Observable]:
    """Map every entity and merge the results into one deduplicated list."""
    merged: dict[ObservableKey, Observable] = {}
    count = 0
    for raw in entities:
        entity = raw if isinstance(raw, Entity) else Entity.model_validate(raw)
        count += 1
        for candidate in map_entity(entity):
            add_observable(merged, candidate.data_type, candidate.data, candidate.tags)

    observables = finalize_observables(merged.values())
    logger.debug(
        "observable_mapper.complete",
        extra={"entities": count, "observables": len(observables)},
    )
    return observables
