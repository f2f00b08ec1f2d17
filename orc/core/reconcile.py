"""Plan-then-apply reconciliation for one workshop.

Each call is a single pass: probe, plan, optionally apply. There is no retry
and no rollback. After a partial failure, running apply again plans only
what is still missing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from orc.config.schema import OrcConfig
from orc.core.executor import ActionExecutor, ExecutionResult, tag_session
from orc.core.models import Action, ApplyPlan, DesiredWorkbench, Plan, PlanInput, TmuxProbe
from orc.core.planner import expected_windows_for, generate_plan
from orc.core.probes import DesiredState, locate_session, probe_desired, probe_filesystem, probe_tmux, scan_orphans
from orc.core.sequencer import plan_actions
from orc.core.tmux_bridge import TmuxServer, factory_socket
from orc.core.workspace import MaterializeResult, materialize
from orc.registry import Registry

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    plan: Plan
    apply_plan: ApplyPlan
    materialized: MaterializeResult = field(default_factory=MaterializeResult)
    execution: ExecutionResult = field(default_factory=ExecutionResult)

    @property
    def session_name(self) -> str:
        return self.apply_plan.session_name

    @property
    def applied(self) -> list[Action]:
        return self.execution.applied

    @property
    def enrichment_warnings(self) -> list[str]:
        return self.execution.enrichment_warnings


def server_for_workshop(registry: Registry, workshop_id: str) -> TmuxServer:
    """The tmux server hosting a workshop, selected by its factory."""
    workshop = registry.workshop(workshop_id)
    factory = registry.factory(workshop.factory_id)
    return TmuxServer(socket=factory_socket(factory.name))


def _gather(
    workshop_id: str, registry: Registry, settings: OrcConfig, server: TmuxServer
) -> tuple[DesiredState, Plan, TmuxProbe]:
    desired = probe_desired(registry, workshop_id, settings)
    gatehouse, workbenches = probe_filesystem(desired)
    orphans = scan_orphans(registry, settings)
    probe = probe_tmux(server, workshop_id)

    plan = generate_plan(
        PlanInput(
            workshop_id=desired.workshop.id,
            workshop_name=desired.workshop.name,
            factory_id=desired.factory.id,
            factory_name=desired.factory.name,
            gatehouse=gatehouse,
            tmux=probe,
            workbenches=workbenches,
            expected_windows=expected_windows_for(workbenches),
            orphan_workbenches=orphans.workbenches,
            orphan_gatehouses=orphans.gatehouses,
        )
    )
    return desired, plan, probe


def _windowable(desired: DesiredState, plan: Plan) -> list[DesiredWorkbench]:
    """Desired workbenches that will have a directory once materialized."""
    skipped = {op.id for op in plan.workbenches if not op.exists and op.repo_name}
    return [wb for wb in desired.desired_workbenches() if wb.id not in skipped]


def _sequence(desired: DesiredState, plan: Plan, probe: TmuxProbe) -> ApplyPlan:
    if plan.nothing_to_do:
        return plan_actions(probe.session_name, [], probe)
    return plan_actions(probe.session_name, _windowable(desired, plan), probe)


def build_plan(
    workshop_id: str, registry: Registry, settings: OrcConfig, server: Optional[TmuxServer] = None
) -> tuple[Plan, ApplyPlan]:
    """Probe everything and compute the plan without changing anything.

    Raises:
        RegistryError: unknown workshop or factory.
        ProbeError: tmux could not be queried.
    """
    server = server or server_for_workshop(registry, workshop_id)
    desired, plan, probe = _gather(workshop_id, registry, settings, server)
    return plan, _sequence(desired, plan, probe)


def apply(
    workshop_id: str,
    registry: Registry,
    settings: OrcConfig,
    server: Optional[TmuxServer] = None,
    materialize_fs: bool = True,
) -> ReconcileResult:
    """Converge the filesystem and tmux to the registry for one workshop.

    Raises:
        RegistryError: unknown workshop or factory.
        ProbeError: tmux could not be queried.
        OSError: a directory or config could not be written.
        ActionFailedError: a tmux action failed; later actions were not run.
    """
    server = server or server_for_workshop(registry, workshop_id)
    desired, plan, probe = _gather(workshop_id, registry, settings, server)

    # A session found only by name may predate tagging or an interrupted apply
    if probe.session_exists and not probe.tagged:
        tag_session(server, probe.session_name, workshop_id)

    if plan.nothing_to_do:
        logger.info("Workshop %s is up to date", workshop_id)
        return ReconcileResult(plan=plan, apply_plan=_sequence(desired, plan, probe))

    materialized = materialize(plan) if materialize_fs else MaterializeResult()

    # tmux may have changed since the first probe
    probe = probe_tmux(server, workshop_id)
    apply_plan = plan_actions(probe.session_name, _windowable(desired, plan), probe)

    executor = ActionExecutor(server, settings.tmux.connect_command, settings.tmux.desk_popup)
    execution = executor.execute(apply_plan.actions)

    logger.info("Applied %d actions for workshop %s", len(execution.applied), workshop_id)
    return ReconcileResult(plan=plan, apply_plan=apply_plan, materialized=materialized, execution=execution)


def close_workshop(workshop_id: str, server: TmuxServer) -> Optional[str]:
    """Kill the workshop's session.

    Returns:
        The killed session name, or None if it was not running.
    """
    session = locate_session(server, workshop_id)
    if session is None:
        logger.info("Workshop %s has no running session", workshop_id)
        return None
    server.kill_session(session)
    return session
