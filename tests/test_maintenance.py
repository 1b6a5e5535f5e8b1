import subprocess

import pytest

from apps.nginx_manager.settings import DEFAULTS, save_config
from cli import maintenance_menu


@pytest.fixture
def docker(monkeypatch):
    calls = []

    def with_progress(command, message, cwd=None):
        calls.append(command)
        return subprocess.CompletedProcess(command, 0, "", "")

    def run_compose(settings, *args, capture=True):
        calls.append(['docker', 'compose', *args])
        return subprocess.CompletedProcess([], 0, "nginx-manager  Up", "")

    monkeypatch.setattr(maintenance_menu, "run_docker_with_progress", with_progress)
    monkeypatch.setattr(maintenance_menu, "run_compose", run_compose)
    monkeypatch.setattr(maintenance_menu, "compose_args", lambda settings, *args: ['docker', 'compose', *args])
    return calls


def test_start_regenerates_compose(settings, docker):
    save_config(settings.config_file, dict(DEFAULTS, LOCALHOST_ONLY="true"))

    assert maintenance_menu.start_services(settings) is True
    assert ['docker', 'compose', 'up', '-d'] in docker
    assert "127.0.0.1:7000:5000" in settings.compose_file.read_text()


def test_start_refuses_invalid_config(settings, docker):
    settings.config_file.write_text("NGINX_HTTPS_PORT=0\n")
    assert maintenance_menu.start_services(settings) is False
    assert docker == []
    assert not settings.compose_file.exists()


def test_stop_runs_down(settings, docker):
    assert maintenance_menu.stop_services(settings) is True
    assert docker == [['docker', 'compose', 'down']]


def test_failed_restart_is_reported(settings, docker, monkeypatch):
    monkeypatch.setattr(
        maintenance_menu, "run_docker_with_progress",
        lambda command, message, cwd=None: subprocess.CompletedProcess(command, 1, "", "Error: no such service"),
    )
    assert maintenance_menu.restart_services(settings) is False


def test_status_without_compose_file(settings, docker):
    assert maintenance_menu.show_service_status(settings) is False
    assert docker == []


def test_cleanup_reports_partial_failure(settings, monkeypatch):
    monkeypatch.setattr(maintenance_menu, "prune_resources",
                        lambda: [("stopped containers", True), ("unused volumes", False)])
    assert maintenance_menu.cleanup(settings) is False
