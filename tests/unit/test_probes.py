"""Unit tests for desired/observed state probes."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import Mock

import pytest

from orc.config.schema import OrcConfig, RegistryFile
from orc.core.probes import ProbeError, probe_desired, probe_filesystem, probe_tmux, scan_orphans
from orc.core.tmux_bridge import TmuxCommandError, TmuxServer
from orc.core.unit_config import UnitConfig, gatehouse_config, save_unit_config, workbench_config
from orc.registry import Registry, RegistryError


def _registry() -> Registry:
    return Registry(
        RegistryFile.model_validate(
            {
                "factories": [{"id": "FACT-001", "name": "default"}],
                "workshops": [{"id": "WORK-001", "factory_id": "FACT-001", "name": "Main Workshop"}],
                "workbenches": [
                    {"id": "BENCH-001", "workshop_id": "WORK-001", "name": "alpha", "repo": "orc"},
                    {"id": "BENCH-002", "workshop_id": "WORK-001", "name": "beta", "status": "archived"},
                    {"id": "BENCH-003", "workshop_id": "WORK-001", "name": "gamma", "home_branch": "dev"},
                ],
            }
        )
    )


def _settings(home: Path) -> OrcConfig:
    return OrcConfig(home_dir=str(home))


@pytest.mark.unit
def test_probe_desired_resolves_paths_and_active_workbenches(tmp_path: Path) -> None:
    desired = probe_desired(_registry(), "WORK-001", _settings(tmp_path))

    assert desired.workshop.id == "WORK-001"
    assert desired.factory.id == "FACT-001"
    assert desired.gatehouse_id == "GATE-001"
    assert desired.gatehouse_path == str(tmp_path / ".orc" / "ws" / "WORK-001-main-workshop")
    assert [wb.name for wb in desired.workbenches] == ["alpha", "gamma"]
    assert desired.workbenches[0].path == str(tmp_path / "wb" / "alpha")
    assert desired.workbenches[0].repo_name == "orc"
    assert desired.workbenches[1].branch == "dev"
    assert [wb.workshop_id for wb in desired.desired_workbenches()] == ["WORK-001", "WORK-001"]


def test_probe_desired_unknown_workshop(tmp_path: Path) -> None:
    with pytest.raises(RegistryError):
        probe_desired(_registry(), "WORK-404", _settings(tmp_path))


def test_probe_desired_honours_explicit_workbench_path(tmp_path: Path) -> None:
    data = _registry().data.model_copy(deep=True)
    data.workbenches[0].path = str(tmp_path / "elsewhere")

    desired = probe_desired(Registry(data), "WORK-001", _settings(tmp_path))

    assert desired.workbenches[0].path == str(tmp_path / "elsewhere")


@pytest.mark.unit
def test_probe_filesystem_reports_existence(tmp_path: Path) -> None:
    desired = probe_desired(_registry(), "WORK-001", _settings(tmp_path))
    save_unit_config(desired.gatehouse_path, gatehouse_config("GATE-001"))
    (tmp_path / "wb" / "alpha").mkdir(parents=True)

    gatehouse, workbenches = probe_filesystem(desired)

    assert gatehouse.dir_exists and gatehouse.config_exists
    assert [(wb.name, wb.worktree_exists, wb.config_exists) for wb in workbenches] == [
        ("alpha", True, False),
        ("gamma", False, False),
    ]


def test_scan_orphans_classifies_by_config_id(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    save_unit_config(tmp_path / "wb" / "alpha", workbench_config("BENCH-001"))
    save_unit_config(tmp_path / "wb" / "beta", workbench_config("BENCH-002"))  # archived but known
    save_unit_config(tmp_path / "wb" / "ghost", workbench_config("BENCH-099"))
    (tmp_path / "wb" / "plain").mkdir(parents=True)
    save_unit_config(tmp_path / ".orc" / "ws" / "WORK-001-main-workshop", gatehouse_config("GATE-001"))
    save_unit_config(tmp_path / ".orc" / "ws" / "WORK-009-old", gatehouse_config("GATE-009"))

    orphans = scan_orphans(_registry(), settings)

    assert [(wb.id, wb.name) for wb in orphans.workbenches] == [("BENCH-099", "ghost")]
    assert orphans.workbenches[0].worktree_exists and orphans.workbenches[0].config_exists
    assert [gh.id for gh in orphans.gatehouses] == ["GATE-009"]


def test_scan_orphans_skips_unreadable_configs(tmp_path: Path) -> None:
    broken = tmp_path / "wb" / "broken" / ".orc"
    broken.mkdir(parents=True)
    (broken / "config.json").write_text("{not json", encoding="utf-8")
    save_unit_config(tmp_path / "wb" / "goblin", UnitConfig(role="GOBLIN"))

    orphans = scan_orphans(_registry(), _settings(tmp_path))

    assert orphans.workbenches == []
    assert orphans.gatehouses == []


def test_scan_orphans_without_roots(tmp_path: Path) -> None:
    orphans = scan_orphans(_registry(), _settings(tmp_path / "empty"))

    assert orphans.workbenches == [] and orphans.gatehouses == []


@pytest.mark.unit
def test_probe_tmux_prefers_workshop_tag() -> None:
    server = Mock(spec=TmuxServer)
    server.find_session_by_workshop_id.return_value = "renamed"
    server.list_window_pane_counts.return_value = [("alpha", 1), ("stray", 0)]

    probe = probe_tmux(server, "WORK-001")

    assert probe.session_exists is True
    assert probe.session_name == "renamed"
    assert probe.tagged is True
    assert probe.observed_names == ["alpha", "stray"]
    assert probe.observed_windows[1].pane_count == 0
    server.list_window_pane_counts.assert_called_once_with("renamed")


def test_probe_tmux_falls_back_to_session_name() -> None:
    server = Mock(spec=TmuxServer)
    server.find_session_by_workshop_id.return_value = None
    server.list_sessions.return_value = ["WORK-001"]
    server.list_window_pane_counts.return_value = [("alpha", 1)]

    probe = probe_tmux(server, "WORK-001")

    assert probe.session_exists is True
    assert probe.session_name == "WORK-001"
    assert probe.tagged is False


def test_probe_tmux_without_session() -> None:
    server = Mock(spec=TmuxServer)
    server.find_session_by_workshop_id.return_value = None
    server.list_sessions.return_value = []

    probe = probe_tmux(server, "WORK-001")

    assert probe.session_exists is False
    assert probe.session_name == "WORK-001"
    assert probe.observed_windows == []


def test_probe_tmux_raises_probe_error_on_query_failure() -> None:
    server = Mock(spec=TmuxServer)
    server.find_session_by_workshop_id.return_value = "WORK-001"
    server.list_window_pane_counts.side_effect = TmuxCommandError(["list-windows"], 1, "lost server")

    with pytest.raises(ProbeError):
        probe_tmux(server, "WORK-001")
