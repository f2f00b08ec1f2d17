"""Unit tests for the action sequencer."""

from __future__ import annotations

import pytest

from orc.core.models import (
    ActionType,
    AddWindow,
    ApplyEnrichment,
    CreateSession,
    DesiredWorkbench,
    ObservedWindow,
    TmuxProbe,
    WindowStatus,
)
from orc.core.sequencer import plan_actions


def _wb(name: str) -> DesiredWorkbench:
    return DesiredWorkbench(name=name, path=f"/wb/{name}", id=f"BENCH-{name}", workshop_id="WORK-001")


def _probe(*windows: tuple[str, int], exists: bool = True) -> TmuxProbe:
    return TmuxProbe(
        session_exists=exists,
        session_name="WORK-001",
        observed_windows=[ObservedWindow(name=name, pane_count=count) for name, count in windows],
    )


@pytest.mark.unit
def test_existing_session_adds_only_missing_windows_in_desired_order() -> None:
    result = plan_actions("WORK-001", [_wb("a"), _wb("b"), _wb("c")], _probe(("a", 1)))

    assert [action.type for action in result.actions] == [
        ActionType.ADD_WINDOW,
        ActionType.ADD_WINDOW,
        ActionType.APPLY_ENRICHMENT,
    ]
    assert [action.workbench_name for action in result.actions[:2]] == ["b", "c"]
    assert result.session_exists is True


@pytest.mark.unit
def test_missing_session_creates_with_first_workbench() -> None:
    result = plan_actions("WORK-001", [_wb("a"), _wb("b")], _probe(exists=False))

    assert result.actions == [
        CreateSession(
            session_name="WORK-001",
            workbench_name="a",
            workbench_path="/wb/a",
            workbench_id="BENCH-a",
            workshop_id="WORK-001",
        ),
        AddWindow(
            session_name="WORK-001",
            workbench_name="b",
            workbench_path="/wb/b",
            workbench_id="BENCH-b",
            workshop_id="WORK-001",
        ),
        ApplyEnrichment(session_name="WORK-001"),
    ]
    assert result.session_exists is False


@pytest.mark.unit
def test_empty_desired_list_yields_no_actions() -> None:
    assert plan_actions("WORK-001", [], _probe(exists=False)).actions == []
    assert plan_actions("WORK-001", [], _probe(("stray", 1))).actions == []


def test_all_windows_present_still_enriches() -> None:
    result = plan_actions("WORK-001", [_wb("a"), _wb("b")], _probe(("a", 1), ("b", 2)))

    assert result.actions == [ApplyEnrichment(session_name="WORK-001")]


def test_enrichment_is_always_last_and_unique() -> None:
    result = plan_actions("WORK-001", [_wb("a"), _wb("b"), _wb("c")], _probe(exists=False))

    enrichments = [i for i, action in enumerate(result.actions) if isinstance(action, ApplyEnrichment)]
    assert enrichments == [len(result.actions) - 1]


def test_window_summary_reports_pane_health() -> None:
    result = plan_actions("WORK-001", [_wb("a")], _probe(("a", 1), ("dead", 0)))

    assert result.window_summary == [WindowStatus(name="a", pane_count=1), WindowStatus(name="dead", pane_count=0)]
    assert [status.healthy for status in result.window_summary] == [True, False]


def test_action_targets_and_descriptions() -> None:
    create = CreateSession("WORK-001", "a", "/wb/a", "BENCH-a", "WORK-001")
    add = AddWindow("WORK-001", "b", "/wb/b", "BENCH-b", "WORK-001")
    enrich = ApplyEnrichment("WORK-001")

    assert create.target == "WORK-001:a"
    assert create.description == "Create session WORK-001 with window a"
    assert add.description == "Add window b (BENCH-b)"
    assert enrich.target == "WORK-001"
    assert enrich.type is ActionType.APPLY_ENRICHMENT
