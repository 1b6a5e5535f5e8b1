# Nginx Manager Deploy v1.0
'''Post-deploy health probe for Nginx Manager'''

import logging

import requests

from apps.nginx_manager.settings import get_port

_log = logging.getLogger(__name__)

HEALTH_TIMEOUT = 10


def get_health_url(record) -> str:
    return f"http://localhost:{get_port(record, 'EXTERNAL_HTTP_PORT')}/health"


def check_health(record, timeout: float = HEALTH_TIMEOUT):
    '''GET /health on the published HTTP port.
    Returns (healthy, message). Only HTTP 200 counts as healthy.
    '''
    try:
        url = get_health_url(record)
    except ValueError as e:
        return False, f"Invalid EXTERNAL_HTTP_PORT: {e}"

    try:
        response = requests.get(url, timeout=timeout)
    except requests.exceptions.Timeout:
        _log.warning("Health check %s timed out after %ss", url, timeout)
        return False, f"No answer from {url} within {timeout}s"
    except requests.exceptions.RequestException as e:
        _log.warning("Health check %s failed: %s", url, e)
        return False, f"Cannot reach {url}"

    _log.info("Health check %s -> HTTP %s", url, response.status_code)
    if response.status_code == 200:
        return True, f"{url} returned 200"
    return False, f"{url} returned HTTP {response.status_code}"
