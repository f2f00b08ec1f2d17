"""State probes: gather desired and observed state before planning.

Everything the planner needs is collected here, up front. A probe that cannot
collect required state raises ProbeError and planning never starts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from pydantic import ValidationError

from orc.config.schema import FactoryEntry, OrcConfig, WorkshopEntry
from orc.core.models import (
    DesiredWorkbench,
    GatehouseSnapshot,
    ObservedWindow,
    TmuxProbe,
    WorkbenchSnapshot,
)
from orc.core.tmux_bridge import TmuxCommandError, TmuxServer
from orc.core.unit_config import UnitConfig, load_unit_config
from orc.paths import gatehouse_path, home_dir, unit_config_path, workbench_path
from orc.registry import Registry

logger = logging.getLogger(__name__)


class ProbeError(RuntimeError):
    """Observed state could not be collected."""


@dataclass(frozen=True)
class DesiredWorkbenchEntry:
    id: str
    name: str
    path: str
    repo_name: str = ""
    branch: str = ""


@dataclass(frozen=True)
class DesiredState:
    """What the registry says one workshop should look like."""

    workshop: WorkshopEntry
    factory: FactoryEntry
    gatehouse_id: str
    gatehouse_path: str
    workbenches: list[DesiredWorkbenchEntry] = field(default_factory=list)

    def desired_workbenches(self) -> list[DesiredWorkbench]:
        return [
            DesiredWorkbench(name=wb.name, path=wb.path, id=wb.id, workshop_id=self.workshop.id)
            for wb in self.workbenches
        ]


@dataclass(frozen=True)
class OrphanScan:
    workbenches: list[WorkbenchSnapshot] = field(default_factory=list)
    gatehouses: list[GatehouseSnapshot] = field(default_factory=list)


def probe_desired(registry: Registry, workshop_id: str, settings: OrcConfig) -> DesiredState:
    """Resolve a workshop, its factory, gatehouse and active workbenches.

    Raises:
        RegistryError: for an unknown workshop or factory.
    """
    workshop = registry.workshop(workshop_id)
    factory = registry.factory(workshop.factory_id)
    home = home_dir(settings.home_dir)

    workbenches: list[DesiredWorkbenchEntry] = []
    for wb in registry.workbenches_for(workshop_id):
        path = Path(wb.path).expanduser() if wb.path else workbench_path(home, settings.workbench_root, wb.name)
        workbenches.append(
            DesiredWorkbenchEntry(
                id=wb.id,
                name=wb.name,
                path=str(path),
                repo_name=wb.repo or "",
                branch=wb.home_branch or "",
            )
        )

    return DesiredState(
        workshop=workshop,
        factory=factory,
        gatehouse_id=registry.gatehouse_id_for(workshop_id),
        gatehouse_path=str(gatehouse_path(home, settings.gatehouse_root, workshop.id, workshop.name)),
        workbenches=workbenches,
    )


def probe_filesystem(desired: DesiredState) -> tuple[GatehouseSnapshot, list[WorkbenchSnapshot]]:
    """Annotate the desired gatehouse and workbenches with on-disk existence."""
    gatehouse = GatehouseSnapshot(
        id=desired.gatehouse_id,
        path=desired.gatehouse_path,
        dir_exists=Path(desired.gatehouse_path).is_dir(),
        config_exists=unit_config_path(desired.gatehouse_path).is_file(),
    )
    workbenches = [
        WorkbenchSnapshot(
            id=wb.id,
            name=wb.name,
            path=wb.path,
            repo_name=wb.repo_name,
            branch=wb.branch,
            worktree_exists=Path(wb.path).is_dir(),
            config_exists=unit_config_path(wb.path).is_file(),
        )
        for wb in desired.workbenches
    ]
    logger.debug(
        "Filesystem probe for %s: gatehouse dir=%s config=%s, %d workbenches",
        desired.workshop.id,
        gatehouse.dir_exists,
        gatehouse.config_exists,
        len(workbenches),
    )
    return gatehouse, workbenches


def _unit_dirs(root: Path) -> Iterable[Path]:
    if not root.is_dir():
        return []
    return sorted(child for child in root.iterdir() if child.is_dir())


def scan_orphans(registry: Registry, settings: OrcConfig) -> OrphanScan:
    """Find unit directories whose config names an id the registry does not know.

    Directories without a readable config are not orc units and are ignored.
    """
    home = home_dir(settings.home_dir)
    known_workbenches = registry.known_workbench_ids()
    known_gatehouses = registry.known_gatehouse_ids()

    orphan_workbenches: list[WorkbenchSnapshot] = []
    for unit_dir in _unit_dirs(home / settings.workbench_root):
        config = _read_config(unit_dir)
        if config is None or not config.workbench_id:
            continue
        if config.workbench_id not in known_workbenches:
            orphan_workbenches.append(
                WorkbenchSnapshot(
                    id=config.workbench_id,
                    name=unit_dir.name,
                    path=str(unit_dir),
                    worktree_exists=True,
                    config_exists=True,
                )
            )

    orphan_gatehouses: list[GatehouseSnapshot] = []
    for unit_dir in _unit_dirs(home / settings.gatehouse_root):
        config = _read_config(unit_dir)
        if config is None or not config.place_id:
            continue
        if config.place_id not in known_gatehouses:
            orphan_gatehouses.append(
                GatehouseSnapshot(id=config.place_id, path=str(unit_dir), dir_exists=True, config_exists=True)
            )

    return OrphanScan(workbenches=orphan_workbenches, gatehouses=orphan_gatehouses)


def _read_config(unit_dir: Path) -> Optional[UnitConfig]:
    if not unit_config_path(unit_dir).is_file():
        return None
    try:
        return load_unit_config(unit_dir)
    except (OSError, ValidationError) as e:
        logger.warning("Skipping %s: unreadable unit config: %s", unit_dir, e)
        return None


def locate_session(server: TmuxServer, workshop_id: str) -> Optional[str]:
    """Find a workshop's session: ORC_WORKSHOP_ID tag first, then by name."""
    return _locate(server, workshop_id)[0]


def _locate(server: TmuxServer, workshop_id: str) -> tuple[Optional[str], bool]:
    session = server.find_session_by_workshop_id(workshop_id)
    if session:
        return session, True
    if workshop_id in server.list_sessions():
        return workshop_id, False
    return None, False


def probe_tmux(server: TmuxServer, workshop_id: str) -> TmuxProbe:
    """Observe the workshop's session and its windows.

    Raises:
        ProbeError: when tmux is running but cannot be queried.
    """
    try:
        session, tagged = _locate(server, workshop_id)
        if session is None:
            logger.debug("No tmux session for %s on %r", workshop_id, server)
            return TmuxProbe(session_exists=False, session_name=workshop_id)

        windows = [
            ObservedWindow(name=name, pane_count=count) for name, count in server.list_window_pane_counts(session)
        ]
    except TmuxCommandError as e:
        raise ProbeError(f"Failed to probe tmux for {workshop_id}: {e}") from e

    logger.debug("Session %s for %s has windows %s", session, workshop_id, [w.name for w in windows])
    return TmuxProbe(session_exists=True, session_name=session, observed_windows=windows, tagged=tagged)
