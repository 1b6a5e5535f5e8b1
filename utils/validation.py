# Nginx Manager Deploy v1.0 - Input validation
import re

_PORT_RE = re.compile(r'^[0-9]+$')


def validate_port(port):
    '''Validate port number. Returns int or raises ValueError.'''
    if isinstance(port, bool):
        raise ValueError("Port must be a number")

    if isinstance(port, str):
        port = port.strip()
        # int() would accept "+80", " 80", "8_0"; ports are plain digits only
        if not _PORT_RE.match(port):
            raise ValueError("Port must be a number")

    try:
        port = int(port)
    except (ValueError, TypeError):
        raise ValueError("Port must be a number")

    if not (1 <= port <= 65535):
        raise ValueError("Port must be between 1 and 65535")

    return port


def parse_port_input(value, default):
    '''Parse operator input for a port.
    Empty input selects the default. Returns (port, error) where exactly
    one of the two is None.
    '''
    if value is None or not str(value).strip():
        return validate_port(default), None

    try:
        return validate_port(value), None
    except ValueError as e:
        return None, f"{e} (got '{str(value).strip()}')"


def validate_data_dir(path):
    '''Validate a data directory path. Returns stripped path or raises ValueError.'''
    if not path or not isinstance(path, str) or not path.strip():
        raise ValueError("Data directory is required")

    path = path.strip()

    if '\x00' in path or '\n' in path:
        raise ValueError("Invalid characters in data directory")

    return path
