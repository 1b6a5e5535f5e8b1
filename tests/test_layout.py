import pytest

from apps.nginx_manager.layout import ensure_directories, remove_data_tree, resolve_data_dir, DATA_SUBDIRS


def _snapshot(root):
    return sorted((str(p.relative_to(root)), p.stat().st_mtime_ns) for p in root.rglob("*"))


def test_creates_all_subdirectories(tmp_path):
    report = ensure_directories(tmp_path, "./dockernpm-data")

    base = tmp_path / "dockernpm-data"
    assert base.is_dir()
    for sub in ("data", "nginx-instances", "ssl", "logs", "www", "temp"):
        assert (base / sub).is_dir()
    assert len(report) == 1 + len(DATA_SUBDIRS)
    assert all(created for _, created in report)


def test_second_run_changes_nothing(tmp_path):
    ensure_directories(tmp_path, "./dockernpm-data")
    (tmp_path / "dockernpm-data" / "data" / "nginxmanager.db").write_text("db")
    before = _snapshot(tmp_path)

    report = ensure_directories(tmp_path, "./dockernpm-data")

    assert not any(created for _, created in report)
    assert _snapshot(tmp_path) == before
    assert (tmp_path / "dockernpm-data" / "data" / "nginxmanager.db").read_text() == "db"


def test_only_missing_directories_are_created(tmp_path):
    (tmp_path / "npm" / "ssl").mkdir(parents=True)
    report = dict(ensure_directories(tmp_path, "npm"))
    assert report[tmp_path / "npm"] is False
    assert report[tmp_path / "npm" / "ssl"] is False
    assert report[tmp_path / "npm" / "logs"] is True


def test_absolute_data_dir(tmp_path):
    target = tmp_path / "elsewhere"
    ensure_directories(tmp_path / "work", str(target))
    assert (target / "www").is_dir()
    assert resolve_data_dir("/ignored", str(target)) == target


def test_remove_data_tree(tmp_path):
    ensure_directories(tmp_path, "./dockernpm-data")
    assert remove_data_tree(tmp_path, "./dockernpm-data") is True
    assert not (tmp_path / "dockernpm-data").exists()
    assert remove_data_tree(tmp_path, "./dockernpm-data") is False


def test_remove_refuses_work_dir(tmp_path):
    (tmp_path / "config.env").write_text("")
    with pytest.raises(ValueError):
        remove_data_tree(tmp_path, ".")
    assert (tmp_path / "config.env").exists()
