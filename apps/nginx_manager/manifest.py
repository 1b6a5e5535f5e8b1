# Nginx Manager Deploy v1.0
from apps.nginx_manager.installer import NginxManagerInstaller

MANIFEST = {
    # Identity
    'name': 'nginx-manager',
    'display_name': 'Nginx Manager',
    'description': 'Web UI for managing Nginx instances and SSL sites',
    'icon': '🌐',

    # Classes
    'installer_class': NginxManagerInstaller,

    # Hooks
    'hooks': {
        'backup': 'apps.nginx_manager.hooks.backup_config.backup_configuration',
        'ready_check': 'apps.nginx_manager.hooks.ready_check.check_health',
        'success_message': 'apps.nginx_manager.hooks.success_message.get_success_message'
    }
}
