"""Filesystem materialization for gatehouses and workbench configs.

Git worktrees are not created here. A repo-backed workbench whose worktree is
missing is reported as skipped and gets neither a config nor a tmux window.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from orc.core.models import GatehouseOp, Plan, WorkbenchOp
from orc.core.unit_config import gatehouse_config, save_unit_config, workbench_config

logger = logging.getLogger(__name__)


@dataclass
class MaterializeResult:
    created: list[str] = field(default_factory=list)
    skipped_worktrees: list[WorkbenchOp] = field(default_factory=list)


def ensure_gatehouse(op: GatehouseOp) -> list[str]:
    """Create the gatehouse directory and its GOBLIN config when missing.

    Returns:
        Paths that were created.
    """
    created: list[str] = []
    path = Path(op.path)
    if not op.exists:
        path.mkdir(parents=True, exist_ok=True)
        created.append(str(path))
        logger.info("Created gatehouse directory %s", path)
    if not op.config_exists:
        config_file = save_unit_config(path, gatehouse_config(op.id))
        created.append(str(config_file))
        logger.info("Wrote gatehouse config %s (%s)", config_file, op.id)
    return created


def ensure_workbench_config(op: WorkbenchOp) -> list[str]:
    """Write the IMP config into an existing worktree that lacks one."""
    if not op.exists or op.config_exists:
        return []
    config_file = save_unit_config(op.path, workbench_config(op.id))
    logger.info("Wrote workbench config %s (%s)", config_file, op.id)
    return [str(config_file)]


def ensure_workbench(op: WorkbenchOp) -> tuple[list[str], bool]:
    """Materialize one workbench.

    Repo-less workbenches are plain directories and are created here.

    Returns:
        (created paths, skipped) where skipped means the worktree is missing.
    """
    if op.exists:
        return ensure_workbench_config(op), False
    if op.repo_name:
        logger.warning("Workbench %s has no worktree at %s, skipping", op.id, op.path)
        return [], True

    Path(op.path).mkdir(parents=True, exist_ok=True)
    logger.info("Created workbench directory %s", op.path)
    config_file = save_unit_config(op.path, workbench_config(op.id))
    return [op.path, str(config_file)], False


def materialize(plan: Plan) -> MaterializeResult:
    """Bring the filesystem in line with the plan.

    Raises:
        OSError: when a directory or config cannot be written.
    """
    result = MaterializeResult()
    result.created.extend(ensure_gatehouse(plan.gatehouse))
    for op in plan.workbenches:
        created, skipped = ensure_workbench(op)
        result.created.extend(created)
        if skipped:
            result.skipped_worktrees.append(op)
    return result
