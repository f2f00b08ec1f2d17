"""Per-unit `.orc/config.json` files written into gatehouses and workbenches."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

from orc.constants import ROLE_GOBLIN, ROLE_IMP, UNIT_CONFIG_VERSION
from orc.paths import unit_config_path

# "ORC" is the pre-rename spelling of GOBLIN
UnitRole = Literal["GOBLIN", "IMP", "ORC"]


class UnitConfig(BaseModel):
    model_config = ConfigDict(extra="allow")

    version: str = UNIT_CONFIG_VERSION
    role: UnitRole
    workbench_id: Optional[str] = None  # IMP units
    place_id: Optional[str] = None  # Gatehouse id for GOBLIN units
    commission_id: Optional[str] = None
    current_focus: Optional[str] = None


def gatehouse_config(gatehouse_id: str) -> UnitConfig:
    return UnitConfig(role=ROLE_GOBLIN, place_id=gatehouse_id)


def workbench_config(workbench_id: str) -> UnitConfig:
    return UnitConfig(role=ROLE_IMP, workbench_id=workbench_id)


def load_unit_config(unit_dir: Path | str) -> UnitConfig:
    """Read and validate a unit's config.

    Raises:
        OSError: when the file cannot be read.
        pydantic.ValidationError: when the content is not a valid unit config.
    """
    path = unit_config_path(unit_dir)
    return UnitConfig.model_validate_json(path.read_text(encoding="utf-8"))


def save_unit_config(unit_dir: Path | str, config: UnitConfig) -> Path:
    """Write the config as 2-space indented JSON, creating `.orc/` as needed."""
    path = unit_config_path(unit_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = config.model_dump(exclude_none=True)
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    return path
