"""orc: workshop infrastructure reconciliation."""

from __future__ import annotations

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

_DIST_NAME = "orc-infra"
_UNKNOWN_VERSION = "0.0.0"


def _pyproject_version() -> str:
    """Version declared in the checkout's pyproject.toml, if there is one."""
    pyproject = Path(__file__).resolve().parent.parent / "pyproject.toml"
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError):
        return _UNKNOWN_VERSION

    project = data.get("project")
    declared = project.get("version") if isinstance(project, dict) else None
    return declared if isinstance(declared, str) else _UNKNOWN_VERSION


def _resolve_version() -> str:
    local = _pyproject_version()
    try:
        installed = version(_DIST_NAME)
    except PackageNotFoundError:
        return local

    # An editable install can lag behind a bumped pyproject
    if local != _UNKNOWN_VERSION and local != installed:
        return local
    return installed


__version__ = _resolve_version()

__all__ = ["__version__"]
