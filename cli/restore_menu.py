import logging

from cli.ui import show_panel, show_success, show_error, show_info, show_warning
from apps.nginx_manager.settings import load_config
from apps.nginx_manager.layout import remove_data_tree
from apps.nginx_manager.compose import write_compose
from utils.docker_utils import run_compose

_log = logging.getLogger(__name__)


def restore_defaults(settings, interactive=True):
    '''Stop the stack and delete config.env, the compose file and the data tree.
    Returns True when the restore ran, False when cancelled or it failed.'''
    show_panel("Restore to Default Configuration",
               "Remove configuration, compose file and data", style="red", clear=interactive)

    show_warning("This will restore Nginx Manager to the default configuration.")
    show_warning("All custom settings and application data will be lost.")
    print()

    if interactive:
        confirm = input("Are you sure you want to continue? (yes/no): ").strip().lower()
        if confirm != 'yes':
            show_info("Operation cancelled")
            return False

    # Read before deleting: the data dir location lives in config.env
    record, _ = load_config(settings.config_file)

    # compose needs the file to find the project; it is deleted again below
    if not settings.compose_file.exists():
        write_compose(settings.compose_file, record, settings.image)

    # Failures ignored: nothing may be running
    show_info("Stopping services...")
    run_compose(settings, 'down')
    show_info("Removing containers and volumes...")
    run_compose(settings, 'down', '-v')

    try:
        if remove_data_tree(settings.work_dir, record['DATA_BASE_DIR']):
            show_info(f"Removed data directory {record['DATA_BASE_DIR']}")
    except (OSError, ValueError) as e:
        _log.error("Could not remove data directory: %s", e)
        show_error(f"Could not remove data directory: {e}")
        return False

    for path in (settings.config_file, settings.compose_file):
        if path.exists():
            path.unlink()
            show_info(f"Removed {path.name}")

    _log.info("Restored defaults in %s", settings.work_dir)
    show_success("Restoration completed. Run the tool again to perform a fresh installation.")
    return True
