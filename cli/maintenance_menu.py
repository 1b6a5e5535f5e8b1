from cli.ui import select_from_list, show_panel, show_success, show_error, show_info, show_warning, pause
from apps.hook_loader import HookLoader
from apps.nginx_manager.manifest import MANIFEST
from apps.nginx_manager.settings import load_config, reconcile_config, validate_config
from apps.nginx_manager.compose import write_compose
from utils.docker_utils import run_compose, compose_args, prune_resources
from utils.docker_progress import run_docker_with_progress, run_docker_pull_with_progress, filter_docker_errors


def _load_and_generate(settings):
    '''Reconcile config.env and rewrite the compose file. Returns record or None.'''
    result = reconcile_config(settings.config_file)
    for warning in result['warnings']:
        show_warning(warning)

    errors = validate_config(result['record'])
    if errors:
        for error in errors:
            show_error(error)
        show_error(f"Fix {settings.config_file.name} before starting services")
        return None

    write_compose(settings.compose_file, result['record'], settings.image)
    show_info(f"Generated {settings.compose_file.name}")
    return result['record']


def _report(result, success_message, failure_message):
    if result is None:
        show_error(f"{failure_message}: docker compose not found")
        return False
    if result.returncode == 0:
        show_success(success_message)
        return True
    show_error(failure_message)
    detail = filter_docker_errors(result.stderr or '')
    if detail:
        print(detail)
    return False


def show_service_status(settings):
    '''Print compose ps output; returns False when nothing could be listed'''
    if not settings.compose_file.exists():
        show_info("No services deployed")
        return False
    result = run_compose(settings, 'ps')
    if result is None or result.returncode != 0 or not result.stdout.strip():
        show_info("No services running")
        return False
    print(result.stdout.rstrip())
    return True


def start_services(settings):
    if _load_and_generate(settings) is None:
        return False
    result = run_docker_with_progress(compose_args(settings, 'up', '-d'), "Starting services",
                                      cwd=str(settings.work_dir))
    if _report(result, "Services started successfully", "Failed to start services"):
        show_service_status(settings)
        return True
    return False


def stop_services(settings):
    result = run_docker_with_progress(compose_args(settings, 'down'), "Stopping services",
                                      cwd=str(settings.work_dir))
    return _report(result, "Services stopped successfully", "Failed to stop services")


def restart_services(settings):
    if _load_and_generate(settings) is None:
        return False
    result = run_docker_with_progress(compose_args(settings, 'restart'), "Restarting services",
                                      cwd=str(settings.work_dir))
    if _report(result, "Services restarted successfully", "Failed to restart services"):
        show_service_status(settings)
        return True
    return False


def update_image(settings):
    '''Pull the latest image and recreate the stack with it'''
    result = run_docker_pull_with_progress(settings.image)
    if result.returncode != 0:
        show_error("Failed to update image")
        return False
    show_success("Image updated successfully")

    if _load_and_generate(settings) is None:
        return False

    show_info("Restarting services with new image...")
    result = run_docker_with_progress(compose_args(settings, 'up', '-d'), "Recreating services",
                                      cwd=str(settings.work_dir))
    if _report(result, "Services updated and restarted", "Failed to restart services"):
        show_service_status(settings)
        return True
    return False


def view_logs(settings):
    choice = select_from_list("Choose log option", [
        "📄 View last 50 lines",
        "📡 Follow logs (Ctrl+C to exit)",
        "⬅️  Back"
    ])

    if "Back" in choice:
        return True

    if "Follow" in choice:
        show_info("Press Ctrl+C to exit log view")
        try:
            result = run_compose(settings, 'logs', '-f', capture=False)
        except KeyboardInterrupt:
            return True
    else:
        result = run_compose(settings, 'logs', '--tail=50', capture=False)

    if result is None or result.returncode != 0:
        show_error("Failed to view logs")
        return False
    return True


def view_status(settings):
    result = run_compose(settings, 'ps', capture=False)
    if result is None or result.returncode != 0:
        show_error("Failed to get status")
        return False
    return True


def cleanup(settings):
    '''Prune stopped containers, unused images and volumes'''
    ok = True
    for description, success in prune_resources():
        if success:
            show_info(f"Removed {description}")
        else:
            show_warning(f"Could not remove {description}")
            ok = False
    if ok:
        show_success("Cleanup completed")
    return ok


def backup_config(settings):
    if not HookLoader.has_hook(MANIFEST, 'backup'):
        show_warning("Backup is not available")
        return False

    # Read only: the backup must hold config.env exactly as the operator left it
    record, _ = load_config(settings.config_file)
    try:
        backup_dir = HookLoader.execute_hook(MANIFEST, 'backup', settings, record)
    except OSError as e:
        show_error(f"Backup failed: {e}")
        return False
    show_success(f"Configuration backed up to: {backup_dir}")
    return True


MAINTENANCE_ACTIONS = [
    ("▶️  Start Services", start_services),
    ("⏸️  Stop Services", stop_services),
    ("🔄 Restart Services", restart_services),
    ("⬆️  Update Docker Image", update_image),
    ("📝 View Service Logs", view_logs),
    ("📊 View Container Status", view_status),
    ("🧹 Clean Up (remove stopped containers)", cleanup),
    ("💾 Backup Configuration", backup_config),
]


def show_maintenance_menu(settings):
    '''Maintenance & management submenu'''

    actions = dict(MAINTENANCE_ACTIONS)

    while True:
        show_panel("Maintenance & Management", "Manage the Nginx Manager services")

        choices = [label for label, _ in MAINTENANCE_ACTIONS] + ["⬅️  Back to Main Menu"]
        choice = select_from_list("Select a maintenance option", choices)

        if "Back" in choice:
            break

        actions[choice](settings)
        pause()
