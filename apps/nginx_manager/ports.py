# Nginx Manager Deploy v1.0
'''Host port conflict detection.

How a bound port is found (and who owns it) differs per platform, so the
lookup is a probe object handed to check_port_conflicts(). A probe only has
to implement find_listener(address, port) -> None | dict.
'''

import errno
import logging
import socket

import psutil

from apps.nginx_manager.settings import EXPOSED_PORT_KEYS, is_localhost_only, get_port
from utils.system import is_windows

_log = logging.getLogger(__name__)

LOCALHOST_ADDRESS = '127.0.0.1'
WILDCARD_ADDRESS = '0.0.0.0'

_ADDR_IN_USE = {errno.EADDRINUSE, getattr(errno, 'WSAEADDRINUSE', errno.EADDRINUSE)}


def get_probe_address(record):
    '''Address the published ports will bind to'''
    return LOCALHOST_ADDRESS if is_localhost_only(record) else WILDCARD_ADDRESS


def _matches_scope(listen_ip, address):
    # Wildcard probe: any listener on the port counts.
    # Loopback probe: only listeners bound exactly to that address.
    if address == WILDCARD_ADDRESS:
        return True
    return listen_ip == address


class SocketPortProbe:
    '''Detects a conflict by trying to bind the address. No owner detail.

    Coarser than the psutil lookup: a 127.0.0.1 bind also fails while a
    0.0.0.0 listener holds the port, so that case reads as a conflict.
    '''

    def find_listener(self, address, port):
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            if not is_windows():
                # Sockets lingering in TIME_WAIT must not count as listeners
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((address, port))
        except OSError as e:
            if e.errno in _ADDR_IN_USE:
                return {'pid': None, 'process': None}
            # EACCES on privileged ports only says we are not root
            _log.debug("Bind probe %s:%s inconclusive: %s", address, port, e)
            return None
        finally:
            sock.close()
        return None


class PsutilPortProbe:
    '''Looks up listening sockets with psutil, falling back to a bind test
    where the platform refuses to enumerate connections (macOS without root).'''

    def __init__(self, fallback=None):
        self.fallback = fallback or SocketPortProbe()

    def find_listener(self, address, port):
        try:
            connections = psutil.net_connections(kind='inet')
        except psutil.AccessDenied:
            _log.debug("psutil.net_connections denied, using bind probe")
            return self.fallback.find_listener(address, port)

        for conn in connections:
            if conn.status != psutil.CONN_LISTEN or not conn.laddr:
                continue
            if conn.laddr.port != port or not _matches_scope(conn.laddr.ip, address):
                continue
            return {'pid': conn.pid, 'process': _process_name(conn.pid)}

        return None


def _process_name(pid):
    '''Best-effort process name; None when it cannot be determined'''
    if not pid:
        return None
    try:
        return psutil.Process(pid).name()
    except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
        return None


def get_default_probe():
    return PsutilPortProbe()


def check_port_conflicts(record, probe=None):
    '''Probe every published port of record.

    Returns:
        {'address': str, 'conflicts': bool,
         'ports': [{'key', 'port', 'free', 'pid', 'process'}, ...]}
    Ports with an invalid value are reported as not free with process None
    and an 'error' entry.
    '''
    probe = probe or get_default_probe()
    address = get_probe_address(record)
    ports = []

    for key in EXPOSED_PORT_KEYS:
        entry = {'key': key, 'port': None, 'free': True, 'pid': None, 'process': None}
        try:
            entry['port'] = get_port(record, key)
        except ValueError as e:
            entry.update(free=False, error=str(e))
            ports.append(entry)
            continue

        owner = probe.find_listener(address, entry['port'])
        if owner is not None:
            entry['free'] = False
            entry['pid'] = owner.get('pid')
            entry['process'] = owner.get('process')

        _log.info("Port %s:%s (%s) %s", address, entry['port'], key,
                  "free" if entry['free'] else f"in use (pid={entry['pid']}, process={entry['process']})")
        ports.append(entry)

    return {
        'address': address,
        'conflicts': any(not p['free'] for p in ports),
        'ports': ports,
    }
