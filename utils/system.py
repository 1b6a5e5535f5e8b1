# Nginx Manager Deploy v1.0
import os
import platform


def get_platform():
    '''Detect platform (linux/windows/darwin)'''
    return platform.system().lower()


def is_windows():
    '''Check if running on Windows'''
    return get_platform() == 'windows'


def is_root():
    '''Running as root (never true on Windows)'''
    if is_windows():
        return False
    return os.geteuid() == 0


def get_docker_install_hint():
    '''Operator hint for installing Docker on this platform'''
    if is_windows():
        return "Install Docker Desktop: https://www.docker.com/products/docker-desktop"
    return "Install command: curl -fsSL https://get.docker.com | sh"


def get_docker_start_hint():
    '''Operator hint for starting the Docker daemon on this platform'''
    if is_windows():
        return "Start Docker Desktop and wait for the green tray icon"
    return "Start command: sudo systemctl start docker"
