# Nginx Manager Deploy v1.0
'''Persisted config.env record: load, backfill defaults, save.

The record is a plain dict of string values. Nothing here caches it; every
caller gets a fresh dict and passes it on explicitly.
'''

import io
import logging
import re
from pathlib import Path

from dotenv import dotenv_values
from dotenv.parser import parse_stream

from utils.validation import validate_port, validate_data_dir

_log = logging.getLogger(__name__)

# Canonical order; save() writes keys in this order
DEFAULTS = {
    'EXTERNAL_HTTP_PORT': '7000',
    'EXTERNAL_HTTPS_PORT': '8443',
    'INTERNAL_HTTP_PORT': '5000',
    'INTERNAL_HTTPS_PORT': '5001',
    'NGINX_HTTP_PORT': '80',
    'NGINX_HTTPS_PORT': '443',
    'DATA_BASE_DIR': './dockernpm-data',
    'DATABASE_PATH': '/app/data/nginxmanager.db',
    'ASPNETCORE_ENVIRONMENT': 'Production',
    'LOCALHOST_ONLY': 'false',
}

PORT_KEYS = (
    'EXTERNAL_HTTP_PORT',
    'EXTERNAL_HTTPS_PORT',
    'INTERNAL_HTTP_PORT',
    'INTERNAL_HTTPS_PORT',
    'NGINX_HTTP_PORT',
    'NGINX_HTTPS_PORT',
)

# Ports published on the host, in compose order
EXPOSED_PORT_KEYS = (
    'EXTERNAL_HTTP_PORT',
    'EXTERNAL_HTTPS_PORT',
    'NGINX_HTTP_PORT',
    'NGINX_HTTPS_PORT',
)

_SECTIONS = [
    ("External access ports", ['EXTERNAL_HTTP_PORT', 'EXTERNAL_HTTPS_PORT']),
    ("Container ports (usually unchanged)", ['INTERNAL_HTTP_PORT', 'INTERNAL_HTTPS_PORT']),
    ("Nginx proxy ports", ['NGINX_HTTP_PORT', 'NGINX_HTTPS_PORT']),
    ("Host directory holding all persistent data", ['DATA_BASE_DIR']),
    ("Database location inside the container", ['DATABASE_PATH']),
    ("Application environment", ['ASPNETCORE_ENVIRONMENT']),
    ("true: publish ports on 127.0.0.1 only; false: all interfaces", ['LOCALHOST_ONLY']),
]


def default_config():
    '''Fresh record holding only the documented defaults'''
    return dict(DEFAULTS)


def is_localhost_only(record) -> bool:
    return str(record.get('LOCALHOST_ONLY', DEFAULTS['LOCALHOST_ONLY'])).strip().lower() == 'true'


def get_port(record, key) -> int:
    '''Port value of key as int. Raises ValueError on an invalid value.'''
    return validate_port(record.get(key, DEFAULTS[key]))


def _read_file(path):
    '''Raw key/value pairs from path. Returns (values, problems); any
    problem means the file has to be rebuilt.'''
    path = Path(path)

    if not path.exists():
        return {}, []

    try:
        with open(path, encoding='utf-8') as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        _log.warning("Cannot read %s: %s", path, e)
        return {}, [f"{path.name} could not be read ({e}); rebuilding it from defaults"]

    problems = []
    for binding in parse_stream(io.StringIO(text)):
        # "KEY" without "=" parses with value None, junk with error set
        if binding.error or (binding.key is not None and binding.value is None):
            line = binding.original.line
            _log.warning("%s line %d is not KEY=VALUE: %r", path, line, binding.original.string.strip())
            problems.append(f"line {line} of {path.name} is not KEY=VALUE; ignored")

    # interpolate=False keeps "$VAR" and similar text verbatim
    raw = dotenv_values(stream=io.StringIO(text), interpolate=False)
    values = {key: value for key, value in raw.items() if value is not None}

    return values, problems


def validate_config(record):
    '''Return a list of human-readable problems; empty when the record is usable'''
    errors = []

    for key in PORT_KEYS:
        try:
            validate_port(record.get(key, DEFAULTS[key]))
        except ValueError as e:
            errors.append(f"{key}={record.get(key)!s}: {e}")

    try:
        validate_data_dir(record.get('DATA_BASE_DIR', ''))
    except ValueError as e:
        errors.append(f"DATA_BASE_DIR: {e}")

    return errors


def load_config(path):
    '''Load config.env and fill in defaults for every missing key.
    Never raises for file problems. Returns (record, warnings).
    '''
    values, problems = _read_file(path)
    warnings = list(problems)

    record = default_config()
    record.update(values)

    for problem in validate_config(record):
        warnings.append(f"Invalid value in {Path(path).name}: {problem}")

    return record, warnings


# Characters python-dotenv strips or reads as a comment in an unquoted value
_NEEDS_QUOTES = re.compile(r"[\s#'\"\\]")


def _format_value(value):
    '''Value as written to config.env; dotenv_values reads it back verbatim'''
    value = str(value)
    if not _NEEDS_QUOTES.search(value):
        return value
    escaped = value.replace('\\', '\\\\').replace("'", "\\'")
    return f"'{escaped}'"


def save_config(path, record):
    '''Write the record as KEY=VALUE lines, recognized keys first'''
    path = Path(path)

    lines = [
        "# Nginx Manager Environment Configuration",
        "# Edit the values below; docker-compose.yml is regenerated from this file.",
    ]

    for title, keys in _SECTIONS:
        lines.append("")
        lines.append(f"# {title}")
        for key in keys:
            lines.append(f"{key}={_format_value(record.get(key, DEFAULTS[key]))}")

    extra = [k for k in record if k not in DEFAULTS]
    if extra:
        lines.append("")
        lines.append("# Additional settings")
        for key in extra:
            lines.append(f"{key}={_format_value(record[key])}")

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8', newline='\n') as f:
        f.write('\n'.join(lines) + '\n')

    _log.info("Wrote %s (%d keys)", path, len(DEFAULTS) + len(extra))


def reconcile_config(path):
    '''Load the record and rewrite the file when it is missing, unreadable,
    malformed or lacks keys. Returns dict with record, created, backfilled, warnings.
    '''
    path = Path(path)
    existed = path.exists()

    values, problems = _read_file(path)
    record, warnings = load_config(path)

    backfilled = [key for key in DEFAULTS if key not in values]
    created = not existed

    if created or problems or backfilled:
        save_config(path, record)
        if created:
            _log.info("Created %s with defaults", path)
        elif backfilled:
            _log.info("Backfilled %s in %s", ', '.join(backfilled), path)

    return {
        'record': record,
        'created': created,
        'backfilled': [] if created else backfilled,
        'warnings': warnings,
    }
