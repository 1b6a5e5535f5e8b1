import logging

from cli.ui import select_from_list, show_panel, show_warning, pause, console
from cli.maintenance_menu import show_service_status

_log = logging.getLogger(__name__)

MENU_OPTIONS = {
    1: "🚀 Default One-Click Installation",
    2: "🛠️  Custom Installation (ports, paths, binding)",
    3: "🔧 Maintenance & Management",
    4: "♻️  Restore to Default Configuration",
    5: "❌ Exit",
}


def run_menu_option(settings, option, interactive=True, force=False):
    '''Run one main-menu option. Returns the process exit code.'''
    _log.info("Menu option %s (interactive=%s, force=%s)", option, interactive, force)

    if option == 1:
        from cli.install_menu import run_default_installation
        return 0 if run_default_installation(settings, interactive=interactive, force=force) else 1

    if option == 2:
        from cli.install_menu import run_custom_installation
        return 0 if run_custom_installation(settings, interactive=interactive, force=force) else 1

    if option == 3:
        from cli.maintenance_menu import show_maintenance_menu
        show_maintenance_menu(settings)
        return 0

    if option == 4:
        from cli.restore_menu import restore_defaults
        restore_defaults(settings, interactive=interactive)
        return 0

    if option == 5:
        return 0

    show_warning(f"Invalid menu option: {option}")
    return 1


def run_main_loop(settings, force=False):
    '''Main application loop'''

    labels = {label: number for number, label in MENU_OPTIONS.items()}

    while True:
        show_panel("Nginx Manager Deployment & Management Tool",
                   f"Working directory: {settings.work_dir}")

        console.print("  [bold]Current Status:[/bold]")
        show_service_status(settings)
        print()

        choice = select_from_list("Main Menu", list(MENU_OPTIONS.values()))
        option = labels[choice]

        if option == 5:
            print("\n👋 Goodbye!\n")
            break

        run_menu_option(settings, option, interactive=True, force=force)

        # The maintenance submenu has its own pauses
        if option != 3:
            pause("Press Enter to return to main menu...")
