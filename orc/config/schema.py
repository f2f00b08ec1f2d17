from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from orc.constants import STATUS_ACTIVE

EntityStatus = Literal["active", "archived"]


class TmuxSettings(BaseModel):
    model_config = ConfigDict(extra="allow")
    # Root process of every workbench pane
    connect_command: List[str] = Field(default_factory=lambda: ["orc", "connect"])
    desk_popup: str = "$HOME/.orc/tmux/orc-desk-popup.sh"

    @field_validator("connect_command")
    @classmethod
    def validate_connect_command(cls, v: List[str]) -> List[str]:
        if not v or not all(part.strip() for part in v):
            raise ValueError("connect_command must be a non-empty list of non-empty strings")
        return v


class OrcConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    home_dir: Optional[str] = None
    registry_path: str = "~/.orc/registry.yml"
    workbench_root: str = "wb"
    gatehouse_root: str = ".orc/ws"
    tmux: TmuxSettings = Field(default_factory=TmuxSettings)


class FactoryEntry(BaseModel):
    model_config = ConfigDict(extra="allow")
    id: str
    name: str
    status: EntityStatus = STATUS_ACTIVE


class WorkshopEntry(BaseModel):
    model_config = ConfigDict(extra="allow")
    id: str
    factory_id: str
    name: str
    status: EntityStatus = STATUS_ACTIVE


class WorkbenchEntry(BaseModel):
    model_config = ConfigDict(extra="allow")
    id: str
    workshop_id: str
    name: str
    repo: Optional[str] = None
    home_branch: Optional[str] = None
    path: Optional[str] = None  # Defaults to <home>/<workbench_root>/<name>
    status: EntityStatus = STATUS_ACTIVE

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        # Window names are addressed as session:window, so ':' and '.' would split the target
        if not v or any(ch in v for ch in ":."):
            raise ValueError(f"Invalid workbench name: {v!r}")
        return v


class GatehouseEntry(BaseModel):
    model_config = ConfigDict(extra="allow")
    id: str
    workshop_id: str
    status: EntityStatus = STATUS_ACTIVE


class RegistryFile(BaseModel):
    model_config = ConfigDict(extra="allow")
    factories: List[FactoryEntry] = []
    workshops: List[WorkshopEntry] = []
    workbenches: List[WorkbenchEntry] = []
    gatehouses: List[GatehouseEntry] = []

    @model_validator(mode="after")
    def validate_unique_ids(self) -> "RegistryFile":
        for label, entries in (
            ("factories", self.factories),
            ("workshops", self.workshops),
            ("workbenches", self.workbenches),
            ("gatehouses", self.gatehouses),
        ):
            seen: set[str] = set()
            for entry in entries:
                if entry.id in seen:
                    raise ValueError(f"Duplicate id {entry.id} in {label}")
                seen.add(entry.id)
        return self
