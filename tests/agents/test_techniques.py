"""Tests for src/agents/techniques.py — TheHive lookups are mocked."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from src.agents.techniques import build_procedures, pattern_tags, resolve_techniques
from src.models.alert import Pattern


def pattern_record(pattern_id: str, name: str, tactics: list[str] | None = None) -> dict:
    return {
        "patternId": pattern_id,
        "name": name,
        "tactics": tactics if tactics is not None else ["execution"],
        "description": f"{name} description",
    }


def lookup_table(table: dict):
    async def _lookup(id_or_name: str):
        return table.get(id_or_name)
    return _lookup


class TestResolveTechniques:
    @pytest.mark.asyncio
    async def test_empty_list_skips_lookup(self):
        mock = AsyncMock()
        with patch("src.agents.techniques._lookup_pattern", mock):
            assert await resolve_techniques([]) == []
        mock.assert_not_called()

    @pytest.mark.asyncio
    async def test_none_skips_lookup(self):
        mock = AsyncMock()
        with patch("src.agents.techniques._lookup_pattern", mock):
            assert await resolve_techniques(None) == []
        mock.assert_not_called()

    @pytest.mark.asyncio
    async def test_one_lookup_per_technique(self):
        mock = AsyncMock(return_value=[])
        with patch("src.agents.techniques._lookup_pattern", mock):
            await resolve_techniques(["T1566", "T1059"])
        assert [c.args[0] for c in mock.call_args_list] == ["T1566", "T1059"]

    @pytest.mark.asyncio
    async def test_unmatched_technique_contributes_nothing(self):
        table = {"T1": [pattern_record("T1", "Phishing")]}
        with patch("src.agents.techniques._lookup_pattern", side_effect=lookup_table(table)):
            patterns = await resolve_techniques(["T1", "T2"])
        assert [p.pattern_id for p in patterns] == ["T1"]

    @pytest.mark.asyncio
    async def test_non_list_result_is_no_match(self):
        table = {"T1": {"error": "not found"}, "T2": None, "T3": ""}
        with patch("src.agents.techniques._lookup_pattern", side_effect=lookup_table(table)):
            assert await resolve_techniques(["T1", "T2", "T3"]) == []

    @pytest.mark.asyncio
    async def test_multiple_patterns_per_technique_kept_in_order(self):
        table = {
            "T1": [pattern_record("T1", "A"), pattern_record("T1.001", "B")],
            "T2": [pattern_record("T2", "C")],
        }
        with patch("src.agents.techniques._lookup_pattern", side_effect=lookup_table(table)):
            patterns = await resolve_techniques(["T2", "T1"])
        assert [p.name for p in patterns] == ["C", "A", "B"]

    @pytest.mark.asyncio
    async def test_same_pattern_from_two_ids_not_deduplicated(self):
        record = pattern_record("T1566", "Phishing")
        table = {"T1566": [record], "Phishing": [record]}
        with patch("src.agents.techniques._lookup_pattern", side_effect=lookup_table(table)):
            patterns = await resolve_techniques(["T1566", "Phishing"])
        assert len(patterns) == 2
        assert patterns[0] == patterns[1]

    @pytest.mark.asyncio
    async def test_lookup_failure_propagates(self):
        mock = AsyncMock(side_effect=RuntimeError("TheHive unavailable"))
        with patch("src.agents.techniques._lookup_pattern", mock):
            with pytest.raises(RuntimeError, match="TheHive unavailable"):
                await resolve_techniques(["T1"])


class TestBuildProcedures:
    def test_one_procedure_per_pattern(self):
        patterns = [
            Pattern.model_validate(pattern_record("T1566", "Phishing", ["initial-access", "x"])),
            Pattern.model_validate(pattern_record("T1059", "Command", ["execution"])),
        ]
        procedures = build_procedures(patterns, "2025-01-30T14:32:15Z")
        assert [p.pattern_id for p in procedures] == ["T1566", "T1059"]
        assert [p.tactic for p in procedures] == ["initial-access", "execution"]
        assert all(p.occur_date == 1738247535000 for p in procedures)
        assert procedures[0].description == "Phishing description"

    def test_pattern_with_empty_tactics_fails_loud(self):
        pattern = Pattern.model_validate(pattern_record("T1105", "Ingress", []))
        with pytest.raises(IndexError):
            build_procedures([pattern], "2025-01-30T14:32:15Z")

    def test_empty_patterns(self):
        assert build_procedures([], "2025-01-30T14:32:15Z") == []


class TestPatternTags:
    def test_one_tag_per_pattern(self):
        patterns = [
            Pattern.model_validate(pattern_record("T1", "Phishing")),
            Pattern.model_validate(pattern_record("T1", "Phishing")),
            Pattern.model_validate(pattern_record("T2", "PowerShell")),
        ]
        assert pattern_tags(patterns) == ["Phishing", "Phishing", "PowerShell"]
