import logging
import subprocess

_log = logging.getLogger(__name__)


def get_docker_compose_command():
    """Get the correct docker compose command for the system"""

    try:
        # Try new format: docker compose (Docker 20.10+)
        result = subprocess.run(
            ['docker', 'compose', '--version'],
            capture_output=True,
            text=True
        )

        if result.returncode == 0:
            return ['docker', 'compose']
    except FileNotFoundError:
        pass

    try:
        # Fallback to old format: docker-compose (legacy)
        result = subprocess.run(
            ['docker-compose', '--version'],
            capture_output=True,
            text=True
        )

        if result.returncode == 0:
            return ['docker-compose']
    except FileNotFoundError:
        pass

    # Default to new format (will provide helpful error if neither available)
    return ['docker', 'compose']


def safe_docker_run(command, **kwargs):
    """Run a docker command safely - returns None if Docker is not installed."""
    _log.debug("Running: %s", ' '.join(str(c) for c in command))
    try:
        return subprocess.run(command, **kwargs)
    except FileNotFoundError:
        _log.warning("Command not found: %s", command[0])
        return None


def check_docker_status():
    """Check Docker availability and return detailed status."""
    try:
        result = subprocess.run(
            ['docker', 'info'],
            capture_output=True,
            text=True,
            timeout=10
        )
        if result.returncode == 0:
            return {'installed': True, 'running': True, 'message': 'Docker is running'}
        else:
            # Docker installed but daemon not running
            stderr = result.stderr.lower()
            if 'cannot connect' in stderr or 'is the docker daemon running' in stderr:
                return {'installed': True, 'running': False, 'message': 'Docker is installed but not running.'}
            if 'permission denied' in stderr:
                return {'installed': True, 'running': False, 'message': 'Permission denied talking to Docker. Add your user to the docker group or use sudo.'}
            return {'installed': True, 'running': False, 'message': f'Docker error: {result.stderr.strip()[:100]}'}
    except FileNotFoundError:
        return {'installed': False, 'running': False, 'message': 'Docker is not installed.'}
    except subprocess.TimeoutExpired:
        return {'installed': True, 'running': False, 'message': 'Docker is not responding (timeout). Restart Docker.'}


def compose_args(settings, *args):
    """Full compose command line for the managed project"""
    return get_docker_compose_command() + [
        '-f', str(settings.compose_file),
        '--env-file', str(settings.config_file),
        *args
    ]


def run_compose(settings, *args, capture=True):
    """Run a compose subcommand in the work dir.
    capture=False streams output straight to the terminal.
    Returns CompletedProcess, or None if the compose binary is missing.
    """
    command = compose_args(settings, *args)
    kwargs = {'cwd': str(settings.work_dir)}
    if capture:
        kwargs.update(capture_output=True, text=True, encoding='utf-8', errors='ignore')

    result = safe_docker_run(command, **kwargs)
    if result is not None:
        _log.info("compose %s -> exit %s", ' '.join(args), result.returncode)
    return result


def _short_image_name(image):
    return image[len('docker.io/'):] if image.startswith('docker.io/') else image


def image_exists(image):
    """Check the local image cache for image, with and without the docker.io/ prefix"""
    for name in dict.fromkeys([image, _short_image_name(image)]):
        result = safe_docker_run(
            ['docker', 'images', name, '--format', '{{.Repository}}:{{.Tag}}'],
            capture_output=True,
            text=True,
            encoding='utf-8',
            errors='ignore'
        )
        if result is None or result.returncode != 0:
            continue
        listed = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        if any(_short_image_name(line) == _short_image_name(image) for line in listed):
            return True
    return False


PRUNE_TARGETS = [
    ('container', "stopped containers"),
    ('image', "unused images"),
    ('volume', "unused volumes"),
]


def prune_resources():
    """Remove stopped containers, dangling images and unused volumes.
    Returns [(description, ok), ...].
    """
    results = []
    for kind, description in PRUNE_TARGETS:
        result = safe_docker_run(
            ['docker', kind, 'prune', '-f'],
            capture_output=True,
            text=True,
            encoding='utf-8',
            errors='ignore'
        )
        ok = result is not None and result.returncode == 0
        _log.info("docker %s prune -> %s", kind, "ok" if ok else "failed")
        results.append((description, ok))
    return results
