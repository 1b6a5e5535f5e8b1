# Nginx Manager Deploy v1.0
'''Backup hook for Nginx Manager: config.env, compose file and data tree'''

import logging
import shutil
from datetime import datetime
from pathlib import Path

from apps.nginx_manager.layout import resolve_data_dir

_log = logging.getLogger(__name__)


def backup_configuration(settings, record, timestamp=None) -> Path:
    '''Copy config + compose file + data directory into backup_<timestamp>/.
    Returns the backup directory.
    '''
    timestamp = timestamp or datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_dir = Path(settings.work_dir) / f"backup_{timestamp}"
    backup_dir.mkdir(parents=True, exist_ok=True)

    for source in (settings.config_file, settings.compose_file):
        if source.is_file():
            shutil.copy2(source, backup_dir / source.name)

    data_dir = resolve_data_dir(settings.work_dir, record['DATA_BASE_DIR']).resolve()
    work_dir = Path(settings.work_dir).resolve()
    if data_dir == work_dir or data_dir in work_dir.parents:
        _log.warning("Data directory %s contains the work dir, not copied", data_dir)
    elif data_dir.is_dir():
        shutil.copytree(data_dir, backup_dir / data_dir.name, dirs_exist_ok=True)

    _log.info("Backup written to %s", backup_dir)
    return backup_dir
