"""Registry of factories, workshops, workbenches and gatehouses.

The registry is the desired-state source: reconciliation materializes what it
lists and reports anything on disk or in tmux that it does not.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from orc.config.loader import load_registry_file
from orc.config.schema import FactoryEntry, GatehouseEntry, RegistryFile, WorkbenchEntry, WorkshopEntry
from orc.constants import STATUS_ACTIVE

_WORKSHOP_NUMBER = re.compile(r"^WORK-(\d+)$")


class RegistryError(LookupError):
    """Unknown registry id."""


def derived_gatehouse_id(workshop_id: str) -> str:
    """GATE-<n> for WORK-<n>, otherwise GATE-<workshop id>."""
    match = _WORKSHOP_NUMBER.match(workshop_id)
    if match:
        return f"GATE-{match.group(1)}"
    return f"GATE-{workshop_id}"


@dataclass(frozen=True)
class Registry:
    data: RegistryFile

    @classmethod
    def load(cls, path: Path) -> "Registry":
        return cls(load_registry_file(path))

    def workshop(self, workshop_id: str) -> WorkshopEntry:
        for workshop in self.data.workshops:
            if workshop.id == workshop_id:
                return workshop
        raise RegistryError(f"Workshop {workshop_id} not found")

    def factory(self, factory_id: str) -> FactoryEntry:
        for factory in self.data.factories:
            if factory.id == factory_id:
                return factory
        raise RegistryError(f"Factory {factory_id} not found")

    def workbenches_for(self, workshop_id: str, active_only: bool = True) -> list[WorkbenchEntry]:
        """Workbenches of a workshop in registry order."""
        return [
            wb
            for wb in self.data.workbenches
            if wb.workshop_id == workshop_id and (not active_only or wb.status == STATUS_ACTIVE)
        ]

    def gatehouse_for(self, workshop_id: str) -> Optional[GatehouseEntry]:
        for gatehouse in self.data.gatehouses:
            if gatehouse.workshop_id == workshop_id:
                return gatehouse
        return None

    def gatehouse_id_for(self, workshop_id: str) -> str:
        gatehouse = self.gatehouse_for(workshop_id)
        if gatehouse is not None:
            return gatehouse.id
        return derived_gatehouse_id(workshop_id)

    def known_workbench_ids(self) -> set[str]:
        """Every registered workbench id, archived included."""
        return {wb.id for wb in self.data.workbenches}

    def known_gatehouse_ids(self) -> set[str]:
        """Registered gatehouse ids plus the derived ids of workshops without one."""
        ids = {gatehouse.id for gatehouse in self.data.gatehouses}
        ids.update(self.gatehouse_id_for(workshop.id) for workshop in self.data.workshops)
        return ids
