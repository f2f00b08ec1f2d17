"""Action Sequencer: turns a session view into an ordered action list."""

from __future__ import annotations

from typing import Sequence

from orc.core.models import (
    Action,
    AddWindow,
    ApplyEnrichment,
    ApplyPlan,
    CreateSession,
    DesiredWorkbench,
    TmuxProbe,
    WindowStatus,
)


def plan_actions(session_name: str, workbenches: Sequence[DesiredWorkbench], probe: TmuxProbe) -> ApplyPlan:
    """Compute the actions that converge tmux to the desired workbench list.

    Without a session, the first workbench creates it and the rest are added.
    With a session, only workbenches without a window of the same name are
    added. Enrichment always runs last unless there is nothing desired.
    """
    actions: list[Action] = []

    if not probe.session_exists:
        for index, wb in enumerate(workbenches):
            if index == 0:
                actions.append(
                    CreateSession(
                        session_name=session_name,
                        workbench_name=wb.name,
                        workbench_path=wb.path,
                        workbench_id=wb.id,
                        workshop_id=wb.workshop_id,
                    )
                )
            else:
                actions.append(_add_window(session_name, wb))
    else:
        observed = set(probe.observed_names)
        for wb in workbenches:
            if wb.name not in observed:
                actions.append(_add_window(session_name, wb))

    if workbenches:
        actions.append(ApplyEnrichment(session_name=session_name))

    summary = [WindowStatus(name=window.name, pane_count=window.pane_count) for window in probe.observed_windows]

    return ApplyPlan(
        session_name=session_name,
        session_exists=probe.session_exists,
        actions=actions,
        window_summary=summary,
    )


def _add_window(session_name: str, wb: DesiredWorkbench) -> AddWindow:
    return AddWindow(
        session_name=session_name,
        workbench_name=wb.name,
        workbench_path=wb.path,
        workbench_id=wb.id,
        workshop_id=wb.workshop_id,
    )
