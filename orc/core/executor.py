"""Executor: applies reconciliation actions through the tmux control plane.

Actions run strictly in order. The first failure aborts the run; nothing
already applied is undone. Recovery is a fresh plan against refreshed state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from orc.constants import (
    BENCH_ID_OPTION,
    ENRICHED_WINDOW_OPTION,
    GOBLIN_PANE_ROLE,
    PANE_ROLE_OPTION,
    WORKSHOP_ENV_VAR,
    WORKSHOP_ID_OPTION,
)
from orc.core.models import Action, AddWindow, ApplyEnrichment, CreateSession
from orc.core.tmux_bridge import DEFAULT_DESK_POPUP, TmuxCommandError, TmuxServer

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_COMMAND = ("orc", "connect")


class ActionFailedError(RuntimeError):
    """An action could not be applied. Later actions were not run."""

    def __init__(self, action: Action, index: int, cause: Exception) -> None:
        self.action = action
        self.index = index
        self.cause = cause
        super().__init__(f"{action.type.value} failed for {action.target}: {cause}")


def tag_session(server: TmuxServer, session_name: str, workshop_id: str) -> None:
    """Record the workshop id in the session so renames do not orphan it. Failures only warn."""
    try:
        server.set_environment(session_name, WORKSHOP_ENV_VAR, workshop_id)
    except TmuxCommandError as e:
        # Lookup falls back to the session name
        logger.warning("Failed to tag session %s with %s: %s", session_name, WORKSHOP_ENV_VAR, e)


@dataclass
class ExecutionResult:
    applied: list[Action] = field(default_factory=list)
    # Per-window enrichment failures; never fatal
    enrichment_warnings: list[str] = field(default_factory=list)


class ActionExecutor:
    """Dispatches each action variant to its tmux operations."""

    def __init__(
        self,
        server: TmuxServer,
        connect_command: Sequence[str] = DEFAULT_CONNECT_COMMAND,
        desk_popup: str = DEFAULT_DESK_POPUP,
    ) -> None:
        self.server = server
        self.connect_command = list(connect_command)
        self.desk_popup = desk_popup

    def execute(self, actions: Sequence[Action]) -> ExecutionResult:
        """Apply actions in order.

        Raises:
            ActionFailedError: for the first action that fails.
        """
        result = ExecutionResult()
        for index, action in enumerate(actions):
            logger.info("Applying %s: %s", action.type.value, action.description)
            try:
                warnings = self._dispatch(action)
            except TmuxCommandError as e:
                logger.error("%s failed for %s: %s", action.type.value, action.target, e)
                raise ActionFailedError(action, index, e) from e
            result.applied.append(action)
            result.enrichment_warnings.extend(warnings)
        return result

    def _dispatch(self, action: Action) -> list[str]:
        if isinstance(action, CreateSession):
            pane_id = self.server.create_session(action.session_name, action.workbench_name, action.workbench_path)
            tag_session(self.server, action.session_name, action.workshop_id)
            self._setup_workbench_pane(pane_id, action.workbench_id, action.workshop_id)
            return []
        if isinstance(action, AddWindow):
            pane_id = self.server.create_window(action.session_name, action.workbench_name, action.workbench_path)
            self._setup_workbench_pane(pane_id, action.workbench_id, action.workshop_id)
            return []
        if isinstance(action, ApplyEnrichment):
            return self._enrich_session(action.session_name)
        raise TypeError(f"Unknown action: {action!r}")

    def _setup_workbench_pane(self, pane_id: str, workbench_id: str, workshop_id: str) -> None:
        """Make the connect command the pane's root process and tag its identity."""
        self.server.respawn_pane(pane_id, self.connect_command)
        self.server.set_pane_option(pane_id, PANE_ROLE_OPTION, GOBLIN_PANE_ROLE)
        self.server.set_pane_option(pane_id, BENCH_ID_OPTION, workbench_id)
        self.server.set_pane_option(pane_id, WORKSHOP_ID_OPTION, workshop_id)

    def _enrich_session(self, session_name: str) -> list[str]:
        self.server.apply_global_bindings(self.desk_popup)

        warnings: list[str] = []
        for window_name in self.server.list_windows(session_name):
            try:
                self._enrich_window(session_name, window_name)
            except TmuxCommandError as e:
                logger.warning("Failed to enrich window %s:%s: %s", session_name, window_name, e)
                warnings.append(f"{window_name}: {e}")
        return warnings

    def _enrich_window(self, session_name: str, window_name: str) -> None:
        for pane in self.server.list_panes(session_name, window_name):
            if not pane.has_role:
                continue
            try:
                self.server.set_pane_title(pane.id, f"{pane.role} [{window_name}]")
            except TmuxCommandError as e:
                logger.warning("Failed to title pane %s in %s:%s: %s", pane.id, session_name, window_name, e)
        self.server.set_window_option(session_name, window_name, ENRICHED_WINDOW_OPTION, "1")
