"""tmux control plane for orc.

Primitive blocking operations against one tmux server. The default server
and per-factory sockets (`tmux -L <socket>`) share this single boundary.
No diffing happens here.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import Optional, Sequence

from orc.constants import (
    DEFAULT_FACTORY_NAME,
    FACTORY_SOCKET_PREFIX,
    PANE_ROLE_OPTION,
    WORKSHOP_ENV_VAR,
)
from orc.runtime.binaries import resolve_tmux_binary

logger = logging.getLogger(__name__)

DEFAULT_DESK_POPUP = "$HOME/.orc/tmux/orc-desk-popup.sh"

# stderr fragments tmux prints when no server is listening on the socket
_NO_SERVER_MARKERS = ("no server running", "error connecting to", "No such file or directory")


class TmuxCommandError(RuntimeError):
    """A tmux invocation exited non-zero or could not be started."""

    def __init__(self, command: Sequence[str], returncode: int, stderr: str) -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr.strip()
        detail = self.stderr or f"exit code {returncode}"
        super().__init__(f"tmux {' '.join(self.command)}: {detail}")

    @property
    def server_not_running(self) -> bool:
        return any(marker in self.stderr for marker in _NO_SERVER_MARKERS)


@dataclass(frozen=True)
class PaneInfo:
    """A pane as seen by list-panes."""

    id: str  # e.g. "%3"
    index: int
    role: str = ""  # value of @pane_role, empty when unset

    @property
    def has_role(self) -> bool:
        return bool(self.role)


def factory_socket(factory_name: str) -> Optional[str]:
    """Derive the tmux socket for a factory. None selects the default server."""
    normalized = factory_name.strip().replace(" ", "-").lower()
    if not normalized or normalized == DEFAULT_FACTORY_NAME:
        return None
    return f"{FACTORY_SOCKET_PREFIX}{normalized}"


def exact_session(session_name: str) -> str:
    """Target a session by exact name; tmux otherwise prefix-matches."""
    return f"={session_name}"


def exact_window(session_name: str, window_name: str) -> str:
    return f"{exact_session(session_name)}:{window_name}"


_CONTEXT_MENU_TEMPLATE = (
    ("Show Summary", "s", "display-popup -E -w 80% -h 80% -T ' ORC Desk ' '{desk_popup}'"),
    (
        "Archive Workbench",
        "a",
        "display-popup -E -w 80 -h 20 -T 'Archive Workbench' 'cd #{{pane_current_path}} && orc tmux archive-workbench'",
    ),
    ("", "", ""),
    ("Swap Left", "<", "swap-window -t :-1"),
    ("Swap Right", ">", "swap-window -t :+1"),
    ("#{{?pane_marked,Unmark,Mark}}", "m", "select-pane -m"),
    ("Kill", "X", "kill-window"),
    ("Respawn", "R", "respawn-window -k"),
    ("Rename", "r", "command-prompt -I \"#W\" \"rename-window -- '%%'\""),
    ("New Window", "c", "new-window"),
)


class TmuxServer:
    """One tmux server, addressed through an optional socket name."""

    def __init__(self, socket: Optional[str] = None, binary: Optional[str] = None) -> None:
        self.socket = socket
        self.binary = binary or resolve_tmux_binary()

    def __repr__(self) -> str:
        return f"TmuxServer(socket={self.socket!r})"

    def _argv(self, *args: str) -> list[str]:
        argv = [self.binary]
        if self.socket:
            argv += ["-L", self.socket]
        return argv + list(args)

    def _run_tmux(self, *args: str) -> str:
        """Run a tmux command and return stripped stdout.

        Raises:
            TmuxCommandError: on non-zero exit or a missing binary.
        """
        argv = self._argv(*args)
        try:
            result = subprocess.run(argv, capture_output=True, text=True, check=True)
        except subprocess.CalledProcessError as e:
            raise TmuxCommandError(args, e.returncode, e.stderr or "") from e
        except OSError as e:
            raise TmuxCommandError(args, 127, str(e)) from e
        return result.stdout.strip()

    def _try_tmux(self, *args: str) -> Optional[str]:
        """Run a tmux command, returning None instead of raising."""
        try:
            return self._run_tmux(*args)
        except TmuxCommandError as e:
            logger.debug("tmux %s failed: %s", args[0], e.stderr)
            return None

    # Sessions

    def list_sessions(self) -> list[str]:
        """Session names on this server. A server that is not running has none."""
        try:
            output = self._run_tmux("list-sessions", "-F", "#{session_name}")
        except TmuxCommandError as e:
            if e.server_not_running:
                return []
            raise
        return [line for line in output.split("\n") if line]

    def create_session(self, name: str, window_name: str, working_dir: str) -> str:
        """Create a detached session whose first window is named window_name.

        Returns:
            The pane id of the first window's pane.
        """
        pane_id = self._run_tmux(
            "new-session", "-d", "-s", name, "-n", window_name, "-c", working_dir, "-P", "-F", "#{pane_id}"
        )
        # Windows and panes number from 1
        self._try_tmux("set-option", "-t", exact_session(name), "base-index", "1")
        self._try_tmux("set-option", "-t", exact_session(name), "pane-base-index", "1")
        logger.info("Created tmux session %s (window %s, pane %s)", name, window_name, pane_id)
        return pane_id

    def kill_session(self, name: str) -> None:
        self._run_tmux("kill-session", "-t", exact_session(name))
        logger.info("Killed tmux session %s", name)

    def set_environment(self, session_name: str, key: str, value: str) -> None:
        self._run_tmux("set-environment", "-t", exact_session(session_name), key, value)

    def get_environment(self, session_name: str, key: str) -> Optional[str]:
        """Session environment value, or None when unset."""
        output = self._try_tmux("show-environment", "-t", exact_session(session_name), key)
        if output is None:
            return None
        prefix = f"{key}="
        if output.startswith(prefix):
            return output[len(prefix) :]
        return None

    def find_session_by_workshop_id(self, workshop_id: str) -> Optional[str]:
        """Find the session tagged with ORC_WORKSHOP_ID=workshop_id."""
        for session in self.list_sessions():
            if self.get_environment(session, WORKSHOP_ENV_VAR) == workshop_id:
                return session
        return None

    # Windows

    def create_window(self, session_name: str, name: str, working_dir: str) -> str:
        """Append a detached window to a session.

        Returns:
            The pane id of the new window's pane.
        """
        pane_id = self._run_tmux(
            "new-window",
            "-d",
            "-t",
            f"{exact_session(session_name)}:",
            "-n",
            name,
            "-c",
            working_dir,
            "-P",
            "-F",
            "#{pane_id}",
        )
        logger.info("Created tmux window %s:%s (pane %s)", session_name, name, pane_id)
        return pane_id

    def kill_window(self, session_name: str, window_name: str) -> None:
        self._run_tmux("kill-window", "-t", exact_window(session_name, window_name))
        logger.info("Killed tmux window %s:%s", session_name, window_name)

    def list_windows(self, session_name: str) -> list[str]:
        output = self._run_tmux("list-windows", "-t", exact_session(session_name), "-F", "#{window_name}")
        return [line for line in output.split("\n") if line]

    def list_window_pane_counts(self, session_name: str) -> list[tuple[str, int]]:
        """(window name, pane count) for each window, in window order."""
        output = self._run_tmux(
            "list-windows", "-t", exact_session(session_name), "-F", "#{window_name}\t#{window_panes}"
        )
        windows: list[tuple[str, int]] = []
        for line in output.split("\n"):
            if not line:
                continue
            name, _, count = line.rpartition("\t")
            try:
                windows.append((name, int(count)))
            except ValueError:
                logger.warning("Unexpected list-windows line for %s: %r", session_name, line)
        return windows

    def set_window_option(self, session_name: str, window_name: str, option: str, value: str) -> None:
        self._run_tmux("set-option", "-w", "-t", exact_window(session_name, window_name), option, value)

    # Panes

    def list_panes(self, session_name: str, window_name: str) -> list[PaneInfo]:
        output = self._run_tmux(
            "list-panes",
            "-t",
            exact_window(session_name, window_name),
            "-F",
            f"#{{pane_id}}\t#{{pane_index}}\t#{{{PANE_ROLE_OPTION}}}",
        )
        panes: list[PaneInfo] = []
        for line in output.split("\n"):
            # An unset role leaves a trailing tab, lost on the last line when stdout is stripped
            parts = line.split("\t", 2)
            if len(parts) < 2:
                continue
            pane_id, index = parts[0], parts[1]
            role = parts[2] if len(parts) == 3 else ""
            try:
                panes.append(PaneInfo(id=pane_id, index=int(index), role=role.strip()))
            except ValueError:
                continue
        return panes

    def set_pane_option(self, pane_id: str, option: str, value: str) -> None:
        self._run_tmux("set-option", "-p", "-t", pane_id, option, value)

    def get_pane_option(self, pane_id: str, option: str) -> str:
        output = self._try_tmux("display-message", "-t", pane_id, "-p", f"#{{{option}}}")
        return output or ""

    def set_pane_title(self, pane_id: str, title: str) -> None:
        self._run_tmux("select-pane", "-t", pane_id, "-T", title)

    def respawn_pane(self, target: str, command: Sequence[str]) -> None:
        """Kill whatever runs in the pane and make command its root process."""
        self._run_tmux("respawn-pane", "-t", target, "-k", *command)

    # Enrichment

    def apply_global_bindings(self, desk_popup: str = DEFAULT_DESK_POPUP) -> None:
        """Install orc's key bindings on this server.

        Idempotent. Individual binding failures are ignored.
        """
        popup_args = ("display-popup", "-E", "-w", "80%", "-h", "80%", "-T", " ORC Desk ", desk_popup)
        self._try_tmux("bind-key", "-T", "root", "DoubleClick1Status", *popup_args)
        self._try_tmux("bind-key", "-T", "prefix", "u", *popup_args)

        menu: list[str] = []
        for label, key, command in _CONTEXT_MENU_TEMPLATE:
            menu += [label.format(desk_popup=desk_popup), key, command.format(desk_popup=desk_popup)]
        menu_args = ("display-menu", "-O", "-T", " ORC ", "-x", "M", "-y", "M")
        self._try_tmux("bind-key", "-T", "root", "MouseDown3Status", *menu_args, *menu)

    def attach_instructions(self, session_name: str) -> str:
        attach = "tmux"
        if self.socket:
            attach += f" -L {self.socket}"
        return (
            f"Attach to session: {attach} attach -t {session_name}\n"
            "\n"
            "Window Layout:\n"
            "  Each window has a single goblin pane (orc connect)\n"
            "\n"
            "TMux Commands:\n"
            "  Switch windows: Ctrl+b then window number (1, 2, 3...)\n"
            "  Detach session: Ctrl+b then d\n"
            "  Open desk: Double-click status bar or Ctrl+b then u\n"
            "  List windows: Ctrl+b then w\n"
        )
