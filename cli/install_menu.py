from cli.ui import show_panel, show_info, show_warning
from apps.nginx_manager.manifest import MANIFEST
from apps.nginx_manager.settings import load_config


def get_installer(settings, interactive=True, force=False):
    '''Installer instance for the managed app'''
    installer_class = MANIFEST['installer_class']
    return installer_class(MANIFEST, settings, interactive=interactive, force=force)


def run_default_installation(settings, interactive=True, force=False):
    '''Default one-click installation. Returns True on success.'''
    show_panel("Default One-Click Installation",
               f"{MANIFEST['icon']} {MANIFEST['display_name']} - {MANIFEST['description']}",
               clear=interactive)
    installer = get_installer(settings, interactive=interactive, force=force)
    return installer.install()


def run_custom_installation(settings, interactive=True, force=False):
    '''Prompt for ports, data directory and binding, then install'''
    show_panel("Custom Installation",
               "Configure ports, data directory and network binding",
               clear=interactive)

    if not interactive:
        show_warning("Custom installation needs an interactive terminal")
        return False

    show_info("This will guide you through configuring Nginx Manager with custom settings.")

    installer = get_installer(settings, interactive=True, force=force)

    current, warnings = load_config(settings.config_file)
    for warning in warnings:
        show_warning(warning)

    config = installer.get_configuration(current)
    if config is None:
        show_warning("Installation cancelled by user")
        return False

    return installer.install(config)
