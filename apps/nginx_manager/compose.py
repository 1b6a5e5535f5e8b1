# Nginx Manager Deploy v1.0
import logging
from pathlib import Path

import yaml

from config import SERVICE_NAME, NETWORK_NAME
from apps.nginx_manager.settings import DEFAULTS, is_localhost_only

_log = logging.getLogger(__name__)

LOCALHOST_ADDRESS = '127.0.0.1'

# (host subdirectory, container path), in compose order
DATA_MOUNTS = (
    ('data', '/app/data'),
    ('nginx-instances', '/app/nginx-instances'),
    ('ssl', '/app/ssl'),
    ('logs', '/app/logs'),
    ('www', '/var/www/html'),
    ('temp', '/tmp'),
)

HEALTHCHECK = {
    'interval': '30s',
    'timeout': '10s',
    'retries': 3,
    'start_period': '40s',
}

MEMORY_LIMIT = '1G'
MEMORY_RESERVATION = '256M'


def _value(record, key):
    return str(record.get(key, DEFAULTS[key])).strip()


def get_bind_address(record):
    '''127.0.0.1 in localhost-only mode, None for all interfaces'''
    return LOCALHOST_ADDRESS if is_localhost_only(record) else None


def get_port_bindings(record):
    '''Host port bindings: app HTTP, app HTTPS, proxy HTTP, proxy HTTPS'''
    pairs = [
        (_value(record, 'EXTERNAL_HTTP_PORT'), _value(record, 'INTERNAL_HTTP_PORT')),
        (_value(record, 'EXTERNAL_HTTPS_PORT'), _value(record, 'INTERNAL_HTTPS_PORT')),
        (_value(record, 'NGINX_HTTP_PORT'), '80'),
        (_value(record, 'NGINX_HTTPS_PORT'), '443'),
    ]

    address = get_bind_address(record)
    if address:
        return [f"{address}:{external}:{internal}" for external, internal in pairs]
    return [f"{external}:{internal}" for external, internal in pairs]


def get_volume_mounts(record):
    base_dir = _value(record, 'DATA_BASE_DIR').rstrip('/\\') or '.'
    return [f"{base_dir}/{sub}:{target}:rw" for sub, target in DATA_MOUNTS]


def build_compose(record, image):
    '''Compose document as a dict (insertion order is output order)'''
    internal_http = _value(record, 'INTERNAL_HTTP_PORT')
    internal_https = _value(record, 'INTERNAL_HTTPS_PORT')

    service = {
        'image': image,
        'container_name': SERVICE_NAME,
        'restart': 'unless-stopped',
        'ports': get_port_bindings(record),
        'environment': [
            f"ASPNETCORE_ENVIRONMENT={_value(record, 'ASPNETCORE_ENVIRONMENT')}",
            f"ASPNETCORE_URLS=http://+:{internal_http};https://+:{internal_https}",
            'DOTNET_RUNNING_IN_CONTAINER=true',
            f"ConnectionStrings__Default=Data Source={_value(record, 'DATABASE_PATH')}",
            'NginxManager__DefaultDataDir=/app/data',
            'NginxManager__DefaultNginxDir=/app/nginx-instances',
            'NginxManager__DefaultSslDir=/app/ssl',
            'NginxManager__DefaultLogDir=/app/logs',
            'NginxManager__DefaultWebRootDir=/var/www/html',
        ],
        'volumes': get_volume_mounts(record),
        'networks': [NETWORK_NAME],
        'healthcheck': {
            'test': ['CMD', 'curl', '-f', f"http://localhost:{internal_http}/health"],
            **HEALTHCHECK,
        },
        'deploy': {
            'resources': {
                'limits': {'memory': MEMORY_LIMIT},
                'reservations': {'memory': MEMORY_RESERVATION},
            }
        },
    }

    return {
        'version': '3.8',
        'services': {SERVICE_NAME: service},
        'networks': {NETWORK_NAME: {'driver': 'bridge'}},
    }


def render_compose(record, image) -> str:
    '''docker-compose.yml text for record. Same input, same bytes.'''
    mode = "localhost only (127.0.0.1)" if is_localhost_only(record) else "all interfaces (0.0.0.0)"
    header = (
        "# Generated from config.env - edit that file instead, changes here are overwritten\n"
        f"# Port binding: {mode}\n\n"
    )
    body = yaml.safe_dump(
        build_compose(record, image),
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
    return header + body


def write_compose(path, record, image) -> str:
    '''Regenerate the compose file wholesale. Returns the written text.'''
    content = render_compose(record, image)
    path = Path(path)
    with open(path, 'w', encoding='utf-8', newline='\n') as f:
        f.write(content)
    _log.info("Wrote %s (%s)", path, ', '.join(get_port_bindings(record)))
    return content
