from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from lazytables.cli.app import APP_VERSION, app
from lazytables.core.config import LazyTablesSettings
from lazytables.core.connections import ConnectionDescriptor, ConnectionStore

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LAZYTABLES_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.delenv("LAZYTABLES_CONFIG", raising=False)


def _config(tmp_path: Path) -> Path:
    config_path = tmp_path / "config.yml"
    config_path.write_text(
        f"app:\n  connections_path: {tmp_path / 'connections.json'}\n",
        encoding="utf-8",
    )
    return config_path


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert f"LazyTables {APP_VERSION}" in result.output


def test_connections_lists_saved_entries(tmp_path: Path) -> None:
    config_path = _config(tmp_path)
    store = ConnectionStore(tmp_path / "connections.json")
    store.save_connection(ConnectionDescriptor(id="conn_1", name="Local", username="me"))
    result = runner.invoke(app, ["--config", str(config_path), "connections"])
    assert result.exit_code == 0, result.output
    assert "conn_1" in result.output
    assert "Local" in result.output
    assert (tmp_path / "logs" / "lazytables.log").exists()


def test_connections_when_none_saved(tmp_path: Path) -> None:
    result = runner.invoke(app, ["--config", str(_config(tmp_path)), "connections"])
    assert result.exit_code == 0
    assert "No saved connections" in result.output


def test_missing_config_exits_with_error(tmp_path: Path) -> None:
    result = runner.invoke(app, ["--config", str(tmp_path / "absent.yml"), "connections"])
    assert result.exit_code == 1


def test_no_subcommand_launches_tui(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    launched: list[LazyTablesSettings] = []

    async def fake_launch(settings: LazyTablesSettings) -> None:
        launched.append(settings)

    monkeypatch.setattr("lazytables.ui_tui.launch_tui", fake_launch)
    result = runner.invoke(app, ["--config", str(_config(tmp_path))])
    assert result.exit_code == 0, result.output
    assert len(launched) == 1
    assert launched[0].app.connections_path == tmp_path / "connections.json"
