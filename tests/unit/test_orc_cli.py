"""Unit tests for the orc command line."""

from __future__ import annotations

import os
from io import StringIO
from pathlib import Path
from unittest.mock import Mock, patch

import pytest
from rich.console import Console

from orc.cli import orc as orc_cli
from orc.core.executor import ActionFailedError
from orc.core.models import ApplyEnrichment
from orc.core.tmux_bridge import TmuxCommandError, TmuxServer
from orc.logging_config import setup_logging

REGISTRY = """
factories:
  - {id: FACT-001, name: default}
workshops:
  - {id: WORK-001, factory_id: FACT-001, name: Main Workshop}
workbenches:
  - {id: BENCH-001, workshop_id: WORK-001, name: alpha}
"""


@pytest.fixture
def home(tmp_path: Path) -> Path:
    (tmp_path / "registry.yml").write_text(REGISTRY, encoding="utf-8")
    (tmp_path / "orc.yml").write_text(
        f"home_dir: {tmp_path}\nregistry_path: {tmp_path / 'registry.yml'}\n", encoding="utf-8"
    )
    return tmp_path


def _console() -> tuple[Console, StringIO]:
    buffer = StringIO()
    return Console(file=buffer, width=200, color_system=None), buffer


def _server(session: str | None = None, windows: list[str] | None = None) -> Mock:
    server = Mock(spec=TmuxServer)
    server.find_session_by_workshop_id.return_value = session
    server.list_sessions.return_value = [session] if session else []
    server.list_window_pane_counts.return_value = [(name, 1) for name in windows or []]
    server.list_windows.return_value = windows or []
    server.list_panes.return_value = []
    server.create_session.return_value = "%1"
    server.attach_instructions.return_value = "Attach to session: tmux attach -t WORK-001\n"
    return server


@pytest.mark.unit
def test_plan_renders_report(home: Path) -> None:
    console, buffer = _console()

    with patch("orc.core.reconcile.server_for_workshop", return_value=_server()):
        code = orc_cli.run(["infra", "plan", "WORK-001"], console=console)

    output = buffer.getvalue()
    assert code == 0
    assert "Workshop WORK-001" in output
    assert "Pending actions" in output
    assert "CreateSession" in output
    assert "ApplyEnrichment" in output
    assert not (home / ".orc").exists()


def test_plan_unknown_workshop_exits_1(home: Path, capsys: pytest.CaptureFixture[str]) -> None:
    console, _ = _console()

    code = orc_cli.run(["infra", "plan", "WORK-404"], console=console)

    assert code == 1
    assert "orc error: Workshop WORK-404 not found" in capsys.readouterr().err


def test_apply_with_yes_applies_and_prints_attach(home: Path) -> None:
    console, buffer = _console()
    server = _server()
    server.list_windows.return_value = ["alpha"]

    with patch("orc.cli.orc.reconcile.server_for_workshop", return_value=server):
        code = orc_cli.run(["infra", "apply", "WORK-001", "--yes"], console=console)

    assert code == 0
    server.create_session.assert_called_once()
    assert (home / "wb" / "alpha" / ".orc" / "config.json").is_file()
    assert "tmux attach -t WORK-001" in buffer.getvalue()


def test_apply_declined_changes_nothing(home: Path) -> None:
    console, buffer = _console()
    server = _server()

    with (
        patch("orc.cli.orc.reconcile.server_for_workshop", return_value=server),
        patch("orc.cli.orc.Confirm.ask", return_value=False),
    ):
        code = orc_cli.run(["infra", "apply", "WORK-001"], console=console)

    assert code == 0
    assert "Aborted." in buffer.getvalue()
    server.create_session.assert_not_called()
    assert not (home / "wb").exists()


def test_apply_failure_exits_1(home: Path, capsys: pytest.CaptureFixture[str]) -> None:
    console, _ = _console()
    failure = ActionFailedError(ApplyEnrichment("WORK-001"), 1, TmuxCommandError(["list-windows"], 1, "gone"))

    with (
        patch("orc.cli.orc.reconcile.server_for_workshop", return_value=_server()),
        patch("orc.cli.orc.reconcile.apply", side_effect=failure),
    ):
        code = orc_cli.run(["infra", "apply", "WORK-001", "-y"], console=console)

    assert code == 1
    assert "ApplyEnrichment failed for WORK-001" in capsys.readouterr().err


def test_close_reports_session(home: Path) -> None:
    console, buffer = _console()
    server = _server("WORK-001")

    with patch("orc.cli.orc.reconcile.server_for_workshop", return_value=server):
        code = orc_cli.run(["workshop", "close", "WORK-001"], console=console)

    assert code == 0
    server.kill_session.assert_called_once_with("WORK-001")
    assert "Closed session WORK-001" in buffer.getvalue()


def test_log_level_flag_sets_environment(home: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    console, _ = _console()
    monkeypatch.setenv("ORC_LOG_LEVEL", "INFO")

    with patch("orc.core.reconcile.server_for_workshop", return_value=_server()):
        orc_cli.run(["--log-level", "DEBUG", "infra", "plan", "WORK-001"], console=console)

    assert os.environ["ORC_LOG_LEVEL"] == "DEBUG"


def test_version_flag_reports_project_version(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        orc_cli.run(["--version"])

    assert exc_info.value.code == 0
    assert capsys.readouterr().out.strip() == "orc 0.1.0"


def test_setup_logging_configures_orc_app(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ORC_LOG_LEVEL", "INFO")

    with patch("orc.logging_config.configure_logging") as configure:
        setup_logging("WARNING")

    configure.assert_called_once_with("orc")
    assert os.environ["ORC_LOG_LEVEL"] == "WARNING"


def test_main_exits_130_on_keyboard_interrupt() -> None:
    with patch("orc.cli.orc.run", side_effect=KeyboardInterrupt):
        with pytest.raises(SystemExit) as exc_info:
            orc_cli.main()

    assert exc_info.value.code == 130


def test_main_exits_with_run_status() -> None:
    with patch("orc.cli.orc.run", return_value=1):
        with pytest.raises(SystemExit) as exc_info:
            orc_cli.main()

    assert exc_info.value.code == 1
