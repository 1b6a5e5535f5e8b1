import subprocess

import pytest

from apps.nginx_manager.hooks.backup_config import backup_configuration
from apps.nginx_manager.layout import ensure_directories
from apps.nginx_manager.settings import DEFAULTS, save_config
from cli import restore_menu
from cli.restore_menu import restore_defaults


@pytest.fixture
def deployed(settings):
    save_config(settings.config_file, dict(DEFAULTS))
    settings.compose_file.write_text("services: {}\n")
    ensure_directories(settings.work_dir, DEFAULTS["DATA_BASE_DIR"])
    (settings.work_dir / "dockernpm-data" / "data" / "nginxmanager.db").write_text("db")
    return settings


@pytest.fixture
def compose_calls(monkeypatch):
    calls = []

    def fake_run_compose(settings, *args, capture=True):
        calls.append(list(args))
        return subprocess.CompletedProcess([], 0, "", "")

    monkeypatch.setattr(restore_menu, "run_compose", fake_run_compose)
    monkeypatch.setattr("cli.ui.clear_screen", lambda: None)
    return calls


def test_restore_removes_everything(deployed, compose_calls):
    assert restore_defaults(deployed, interactive=False) is True

    assert compose_calls == [["down"], ["down", "-v"]]
    assert not deployed.config_file.exists()
    assert not deployed.compose_file.exists()
    assert not (deployed.work_dir / "dockernpm-data").exists()


def test_restore_requires_typed_yes(deployed, compose_calls, monkeypatch):
    monkeypatch.setattr("builtins.input", lambda prompt: "y")
    assert restore_defaults(deployed, interactive=True) is False

    assert compose_calls == []
    assert deployed.config_file.exists()
    assert (deployed.work_dir / "dockernpm-data" / "data" / "nginxmanager.db").exists()


def test_restore_confirmed(deployed, compose_calls, monkeypatch):
    monkeypatch.setattr("builtins.input", lambda prompt: "YES ")
    assert restore_defaults(deployed, interactive=True) is True
    assert not deployed.config_file.exists()


def test_restore_uses_configured_data_dir(settings, compose_calls, tmp_path_factory):
    elsewhere = tmp_path_factory.mktemp("npm-data")
    save_config(settings.config_file, dict(DEFAULTS, DATA_BASE_DIR=str(elsewhere)))

    assert restore_defaults(settings, interactive=False) is True
    assert not elsewhere.exists()


def test_restore_stops_stack_when_compose_file_was_deleted(settings, compose_calls):
    save_config(settings.config_file, dict(DEFAULTS))

    assert restore_defaults(settings, interactive=False) is True

    assert compose_calls == [["down"], ["down", "-v"]]
    assert not settings.compose_file.exists()
    assert not settings.config_file.exists()


def test_restore_refuses_work_dir_as_data_dir(settings, compose_calls):
    save_config(settings.config_file, dict(DEFAULTS, DATA_BASE_DIR="."))
    assert restore_defaults(settings, interactive=False) is False
    assert settings.config_file.exists()


def test_backup_copies_config_compose_and_data(deployed):
    backup_dir = backup_configuration(deployed, dict(DEFAULTS), timestamp="20260101_120000")

    assert backup_dir == deployed.work_dir / "backup_20260101_120000"
    assert (backup_dir / "config.env").read_text() == deployed.config_file.read_text()
    assert (backup_dir / "docker-compose.yml").exists()
    assert (backup_dir / "dockernpm-data" / "data" / "nginxmanager.db").read_text() == "db"


def test_backup_without_data_dir(settings):
    save_config(settings.config_file, dict(DEFAULTS))
    backup_dir = backup_configuration(settings, dict(DEFAULTS), timestamp="t1")
    assert (backup_dir / "config.env").exists()
    assert not (backup_dir / "dockernpm-data").exists()


def test_backup_skips_data_dir_containing_work_dir(settings):
    save_config(settings.config_file, dict(DEFAULTS, DATA_BASE_DIR="."))
    backup_dir = backup_configuration(settings, dict(DEFAULTS, DATA_BASE_DIR="."), timestamp="t2")
    assert sorted(p.name for p in backup_dir.iterdir()) == ["config.env"]


def test_maintenance_backup_keeps_config_as_written(settings):
    from cli.maintenance_menu import backup_config

    partial = "EXTERNAL_HTTP_PORT=9000\nthis is junk\n"
    settings.config_file.write_text(partial)

    assert backup_config(settings) is True

    backups = list(settings.work_dir.glob("backup_*"))
    assert len(backups) == 1
    assert (backups[0] / "config.env").read_text() == partial
    assert settings.config_file.read_text() == partial


def test_maintenance_backup_without_config_creates_nothing(settings):
    from cli.maintenance_menu import backup_config

    assert backup_config(settings) is True
    assert not settings.config_file.exists()
