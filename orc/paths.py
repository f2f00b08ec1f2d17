"""Filesystem layout policy for gatehouses and workbenches."""

from __future__ import annotations

import os
import re
from pathlib import Path

from orc.constants import ENV_HOME, UNIT_CONFIG_DIR, UNIT_CONFIG_FILE

_SLUG_DROP = re.compile(r"[^a-z0-9-]")


def home_dir(configured: str | None = None) -> Path:
    """Resolve the orc home directory.

    ORC_HOME wins over the configured value so tests can redirect all paths.
    """
    env_home = os.getenv(ENV_HOME)
    if env_home:
        return Path(env_home).expanduser()
    return Path(configured or "~").expanduser()


def slugify(name: str) -> str:
    """Lowercase, map spaces to hyphens, drop everything but [a-z0-9-]."""
    slug = name.lower().replace(" ", "-")
    return _SLUG_DROP.sub("", slug)


def gatehouse_path(home: Path, gatehouse_root: str, workshop_id: str, workshop_name: str) -> Path:
    """Return <home>/<gatehouse_root>/<workshop_id>-<slug>."""
    return home / gatehouse_root / f"{workshop_id}-{slugify(workshop_name)}"


def workbench_path(home: Path, workbench_root: str, workbench_name: str) -> Path:
    """Return the canonical workbench path: <home>/<workbench_root>/<name>."""
    return home / workbench_root / workbench_name


def unit_config_path(unit_dir: Path | str) -> Path:
    return Path(unit_dir) / UNIT_CONFIG_DIR / UNIT_CONFIG_FILE
