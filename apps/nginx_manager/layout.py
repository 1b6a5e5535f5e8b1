# Nginx Manager Deploy v1.0
import logging
import shutil
from pathlib import Path

from apps.nginx_manager.compose import DATA_MOUNTS

_log = logging.getLogger(__name__)

DATA_SUBDIRS = tuple(sub for sub, _ in DATA_MOUNTS)


def resolve_data_dir(root, base_dir):
    '''Absolute data directory; relative paths are taken from root'''
    path = Path(base_dir).expanduser()
    if not path.is_absolute():
        path = Path(root) / path
    return path


def ensure_directories(root, base_dir):
    '''Create base_dir and its subdirectories where missing.
    Existing directories are left alone. Returns [(path, created), ...].
    '''
    base = resolve_data_dir(root, base_dir)
    report = []

    for path in [base] + [base / sub for sub in DATA_SUBDIRS]:
        if path.is_dir():
            report.append((path, False))
            continue
        path.mkdir(parents=True, exist_ok=True)
        _log.info("Created directory %s", path)
        report.append((path, True))

    return report


def remove_data_tree(root, base_dir):
    '''Delete the data directory tree. Returns True if something was removed.'''
    base = resolve_data_dir(root, base_dir).resolve()
    if not base.exists():
        return False

    root = Path(root).resolve()
    if base == root or base in root.parents:
        raise ValueError(f"Refusing to delete {base}: it contains the working directory")

    shutil.rmtree(base)
    _log.info("Removed data directory %s", base)
    return True
