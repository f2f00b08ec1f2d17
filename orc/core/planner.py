"""Plan Generator.

Diffs a pre-fetched desired snapshot against observed state. No I/O:
callers gather every flag and window name beforehand.
"""

from __future__ import annotations

from typing import Iterable

from orc.core.models import (
    ExpectedWindow,
    GatehouseOp,
    Plan,
    PlanInput,
    TMuxSessionOp,
    WindowOp,
    WorkbenchOp,
    WorkbenchSnapshot,
)


def expected_windows_for(workbenches: Iterable[WorkbenchSnapshot]) -> list[ExpectedWindow]:
    """One window per desired workbench, same order."""
    return [ExpectedWindow(name=wb.name, path=wb.path) for wb in workbenches]


def generate_plan(plan_input: PlanInput) -> Plan:
    """Build the Plan for one workshop.

    Existence flags are copied from the input as-is. Orphans handed in by the
    caller exist by definition, so their ops are marked as such.
    """
    gatehouse = plan_input.gatehouse
    gatehouse_op = GatehouseOp(
        id=gatehouse.id,
        path=gatehouse.path,
        exists=gatehouse.dir_exists,
        config_exists=gatehouse.config_exists,
    )

    workbench_ops = [
        WorkbenchOp(
            id=wb.id,
            name=wb.name,
            path=wb.path,
            exists=wb.worktree_exists,
            config_exists=wb.config_exists,
            repo_name=wb.repo_name,
            branch=wb.branch,
        )
        for wb in plan_input.workbenches
    ]

    orphan_workbench_ops = [
        WorkbenchOp(
            id=wb.id,
            name=wb.name,
            path=wb.path,
            exists=True,
            config_exists=True,
            repo_name=wb.repo_name,
            branch=wb.branch,
        )
        for wb in plan_input.orphan_workbenches
    ]

    orphan_gatehouse_ops = [
        GatehouseOp(id=gh.id, path=gh.path, exists=True, config_exists=True) for gh in plan_input.orphan_gatehouses
    ]

    return Plan(
        workshop_id=plan_input.workshop_id,
        workshop_name=plan_input.workshop_name,
        factory_id=plan_input.factory_id,
        factory_name=plan_input.factory_name,
        gatehouse=gatehouse_op,
        tmux_session=_session_op(plan_input),
        workbenches=workbench_ops,
        orphan_workbenches=orphan_workbench_ops,
        orphan_gatehouses=orphan_gatehouse_ops,
    )


def _session_op(plan_input: PlanInput) -> TMuxSessionOp:
    probe = plan_input.tmux
    observed = probe.observed_names
    observed_set = set(observed)
    expected_set = {window.name for window in plan_input.expected_windows}

    windows = [
        WindowOp(name=window.name, path=window.path, exists=window.name in observed_set)
        for window in plan_input.expected_windows
    ]
    orphan_windows = [WindowOp(name=name, path="", exists=True) for name in observed if name not in expected_set]

    return TMuxSessionOp(
        session_name=probe.session_name,
        exists=probe.session_exists,
        windows=windows,
        orphan_windows=orphan_windows,
    )
