"""Value types for workshop infrastructure reconciliation.

Snapshots are built once per invocation by the probes and never mutated.
Plans and actions are transient: rebuilt on every run, discarded after use.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Union

# Desired/observed snapshots


@dataclass(frozen=True)
class WorkbenchSnapshot:
    """A registry workbench annotated with what exists on disk."""

    id: str
    name: str
    path: str
    repo_name: str = ""
    branch: str = ""
    worktree_exists: bool = False
    config_exists: bool = False


@dataclass(frozen=True)
class GatehouseSnapshot:
    """A workshop's gatehouse annotated with what exists on disk."""

    id: str
    path: str
    dir_exists: bool = False
    config_exists: bool = False


@dataclass(frozen=True)
class ExpectedWindow:
    name: str
    path: str


@dataclass(frozen=True)
class ObservedWindow:
    name: str
    pane_count: int = 0


@dataclass(frozen=True)
class TmuxProbe:
    """Observed tmux state for one workshop.

    session_name is the actual session name, which may differ from the
    workshop id after a rename.
    """

    session_exists: bool
    session_name: str
    observed_windows: list[ObservedWindow] = field(default_factory=list)
    # Whether the session carries the ORC_WORKSHOP_ID tag
    tagged: bool = False

    @property
    def observed_names(self) -> list[str]:
        return [window.name for window in self.observed_windows]


@dataclass(frozen=True)
class PlanInput:
    """Pre-fetched desired and observed state. The planner performs no I/O."""

    workshop_id: str
    workshop_name: str
    factory_id: str
    factory_name: str
    gatehouse: GatehouseSnapshot
    tmux: TmuxProbe
    workbenches: list[WorkbenchSnapshot] = field(default_factory=list)
    expected_windows: list[ExpectedWindow] = field(default_factory=list)
    # Exist on disk but not in the registry; classified by the caller
    orphan_workbenches: list[WorkbenchSnapshot] = field(default_factory=list)
    orphan_gatehouses: list[GatehouseSnapshot] = field(default_factory=list)


# Plan


@dataclass(frozen=True)
class GatehouseOp:
    id: str
    path: str
    exists: bool
    config_exists: bool

    @property
    def ready(self) -> bool:
        return self.exists and self.config_exists


@dataclass(frozen=True)
class WorkbenchOp:
    id: str
    name: str
    path: str
    exists: bool
    config_exists: bool
    repo_name: str = ""
    branch: str = ""

    @property
    def ready(self) -> bool:
        return self.exists and self.config_exists


@dataclass(frozen=True)
class WindowOp:
    name: str
    path: str
    exists: bool


@dataclass(frozen=True)
class TMuxSessionOp:
    session_name: str
    exists: bool
    windows: list[WindowOp] = field(default_factory=list)
    # Present in the session but not expected (workbench deleted or archived)
    orphan_windows: list[WindowOp] = field(default_factory=list)

    @property
    def missing_windows(self) -> list[WindowOp]:
        return [window for window in self.windows if not window.exists]


@dataclass(frozen=True)
class Plan:
    """Infrastructure state for one workshop: what exists and what is orphaned."""

    workshop_id: str
    workshop_name: str
    factory_id: str
    factory_name: str
    gatehouse: GatehouseOp
    tmux_session: TMuxSessionOp
    workbenches: list[WorkbenchOp] = field(default_factory=list)
    orphan_workbenches: list[WorkbenchOp] = field(default_factory=list)
    orphan_gatehouses: list[GatehouseOp] = field(default_factory=list)

    @property
    def nothing_to_do(self) -> bool:
        """True when every desired resource is already materialized."""
        return (
            self.gatehouse.ready
            and all(op.ready for op in self.workbenches)
            and self.tmux_session.exists
            and not self.tmux_session.missing_windows
        )

    @property
    def has_orphans(self) -> bool:
        return bool(self.orphan_workbenches or self.orphan_gatehouses or self.tmux_session.orphan_windows)


# Actions


class ActionType(str, Enum):
    """Closed set of reconciliation steps."""

    CREATE_SESSION = "CreateSession"
    ADD_WINDOW = "AddWindow"
    APPLY_ENRICHMENT = "ApplyEnrichment"


@dataclass(frozen=True)
class DesiredWorkbench:
    """A workbench that should exist as a window."""

    name: str
    path: str
    id: str
    workshop_id: str


@dataclass(frozen=True)
class CreateSession:
    """Create the session together with its first workbench window."""

    type: ClassVar[ActionType] = ActionType.CREATE_SESSION

    session_name: str
    workbench_name: str
    workbench_path: str
    workbench_id: str
    workshop_id: str

    @property
    def target(self) -> str:
        return f"{self.session_name}:{self.workbench_name}"

    @property
    def description(self) -> str:
        return f"Create session {self.session_name} with window {self.workbench_name}"


@dataclass(frozen=True)
class AddWindow:
    """Add a workbench window to an existing session."""

    type: ClassVar[ActionType] = ActionType.ADD_WINDOW

    session_name: str
    workbench_name: str
    workbench_path: str
    workbench_id: str
    workshop_id: str

    @property
    def target(self) -> str:
        return f"{self.session_name}:{self.workbench_name}"

    @property
    def description(self) -> str:
        return f"Add window {self.workbench_name} ({self.workbench_id})"


@dataclass(frozen=True)
class ApplyEnrichment:
    """Apply key bindings and pane titles to every window of the session."""

    type: ClassVar[ActionType] = ActionType.APPLY_ENRICHMENT

    session_name: str

    @property
    def target(self) -> str:
        return self.session_name

    @property
    def description(self) -> str:
        return "Apply ORC enrichment (bindings, pane titles)"


Action = Union[CreateSession, AddWindow, ApplyEnrichment]


@dataclass(frozen=True)
class WindowStatus:
    """Live pane count of an observed window. Display only."""

    name: str
    pane_count: int

    @property
    def healthy(self) -> bool:
        return self.pane_count > 0


@dataclass(frozen=True)
class ApplyPlan:
    session_name: str
    session_exists: bool
    actions: list[Action] = field(default_factory=list)
    window_summary: list[WindowStatus] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.actions
