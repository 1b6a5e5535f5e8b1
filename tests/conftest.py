import os as _os
import sys

import pytest

# Ensure project root is importable (so `import apps...` works without installing)
_project_root = _os.path.dirname(_os.path.dirname(__file__))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from config import Settings  # noqa: E402


@pytest.fixture
def settings(tmp_path):
    return Settings(work_dir=tmp_path, image="docker.io/wtation/nginx-manager:latest")


@pytest.fixture
def no_docker_calls(monkeypatch):
    """Fail loudly if a test reaches a real subprocess."""
    import subprocess

    def _boom(*args, **kwargs):
        raise AssertionError(f"unexpected subprocess call: {args!r}")

    monkeypatch.setattr(subprocess, "run", _boom)
    monkeypatch.setattr(subprocess, "Popen", _boom)
