"""Runtime binary resolution policy.

These paths are internal platform policy, not user-configurable settings.
"""

from __future__ import annotations

import sys
from pathlib import Path

_MACOS_TMUX_CANDIDATES = (
    Path("/opt/homebrew/bin/tmux"),
    Path("/usr/local/bin/tmux"),
)
_UNIX_TMUX_BINARY = "tmux"


def _is_macos() -> bool:
    return sys.platform == "darwin"


def resolve_tmux_binary() -> str:
    """Resolve tmux binary by platform.

    macOS GUI launches often miss Homebrew on PATH, so prefer known locations.
    """
    if _is_macos():
        for candidate in _MACOS_TMUX_CANDIDATES:
            if candidate.exists():
                return str(candidate)
    return _UNIX_TMUX_BINARY
