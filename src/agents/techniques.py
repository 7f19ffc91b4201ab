"""
Technique resolver — MITRE technique IDs → TheHive patterns.

Each technique ID (or name) is looked up with TheHive's getPattern query.
A lookup may return zero, one, or several patterns; all of them are kept,
in technique-list order, without deduplication. The resolved patterns
feed both the alert tags (pattern names) and the procedure timeline.

_lookup_pattern() is the patchable seam for tests.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from src.models.alert import Pattern, Procedure
from src.utils.timestamps import to_epoch_millis

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Patchable integration seam — tests replace this with AsyncMock
# ---------------------------------------------------------------------------

async def _lookup_pattern(id_or_name: str) -> Any:
    """Run the getPattern query in TheHive. Returns a list, or a non-list when nothing matched."""
    from src.integrations.thehive import get_pattern
    return await get_pattern(id_or_name)


def _patterns_from_lookup(result: Any) -> list[Pattern]:
    if not isinstance(result, list):
        return []
    return [p if isinstance(p, Pattern) else Pattern.model_validate(p) for p in result]


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

async def resolve_techniques(technique_ids: Sequence[str] | None) -> list[Pattern]:
    """Look up every technique ID and concatenate the matched patterns.

    Lookups run concurrently; results are reassembled in the order of
    technique_ids. Lookup failures propagate to the caller.
    """
    if not technique_ids:
        return []

    logger.info("technique_resolver.start", extra={"techniques": len(technique_ids)})

    results = await asyncio.gather(*[_lookup_pattern(t) for t in technique_ids])

    patterns: list[Pattern] = []
    for technique_id, result in zip(technique_ids, results):
        matched = _patterns_from_lookup(result)
        if not matched:
            logger.debug("technique_resolver.no_match", extra={"technique": technique_id})
        patterns.extend(matched)

    logger.info(
        "technique_resolver.complete",
        extra={"techniques": len(technique_ids), "patterns": len(patterns)},
    )
    return patterns


def build_procedures(patterns: Sequence[Pattern], occurred_at: str | datetime) -> list[Procedure]:
    """One procedure per pattern, dated at the incident creation time."""
    occur_date = to_epoch_millis(occurred_at)
    return [
        Procedure(
            pattern_id=pattern.pattern_id,
            tactic=pattern.tactics[0],
            occur_date=occur_date,
            description=pattern.description,
        )
        for pattern in patterns
    ]


def pattern_tags(patterns: Sequence[Pattern]) -> list[str]:
    return [pattern.name for pattern in patterns]
