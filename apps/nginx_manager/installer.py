# Nginx Manager Deploy v1.0
import logging
import time
from enum import Enum

from apps.installer_base import BaseInstaller
from apps.hook_loader import HookLoader
from apps.nginx_manager.settings import (
    reconcile_config, save_config, validate_config, is_localhost_only, DEFAULTS
)
from apps.nginx_manager.compose import write_compose, get_port_bindings
from apps.nginx_manager.layout import ensure_directories
from apps.nginx_manager.ports import check_port_conflicts
from utils.docker_utils import check_docker_status, image_exists, compose_args, run_compose
from utils.docker_progress import run_docker_with_progress, run_docker_pull_with_progress, filter_docker_errors
from utils.system import get_docker_install_hint, get_docker_start_hint
from utils.validation import parse_port_input, validate_data_dir

_log = logging.getLogger(__name__)

CUSTOM_PORT_PROMPTS = [
    ('EXTERNAL_HTTP_PORT', "HTTP port for the web interface"),
    ('EXTERNAL_HTTPS_PORT', "HTTPS port for the web interface"),
    ('NGINX_HTTP_PORT', "Nginx HTTP port"),
    ('NGINX_HTTPS_PORT', "Nginx HTTPS port"),
]


class DeployState(Enum):
    """Progress of one install run"""
    UNINITIALIZED = "UNINITIALIZED"
    CONFIGURED = "CONFIGURED"
    PORTS_CHECKED = "PORTS_CHECKED"
    DEPLOYED = "DEPLOYED"
    VERIFIED = "VERIFIED"
    FAILED = "FAILED"


def _ask_to_continue(message):
    from cli.ui import step_confirm
    return step_confirm(message, default=False)


class NginxManagerInstaller(BaseInstaller):
    '''Installer for Nginx Manager (single compose service)'''

    # Seconds to let the container start before probing /health
    settle_seconds = 5

    def __init__(self, manifest, settings, interactive=True, force=False, probe=None, confirm=None):
        super().__init__(manifest, settings)
        self.interactive = interactive
        self.force = force
        self.probe = probe
        self.confirm = confirm or _ask_to_continue
        self.state = DeployState.UNINITIALIZED

    def _set_state(self, state):
        _log.info("Deploy state %s -> %s", self.state.value, state.value)
        self.state = state

    def _fail(self, message):
        from cli.ui import show_step_final
        show_step_final(message, success=False)
        self._set_state(DeployState.FAILED)
        return False

    # ── Preconditions ────────────────────────────────────────────────────────

    def check_dependencies(self):
        '''Docker installed and daemon reachable'''
        from cli.ui import show_step, show_step_detail

        status = check_docker_status()
        if not status['installed']:
            show_step("Docker not found", "error")
            show_step_detail(get_docker_install_hint())
            return False
        if not status['running']:
            show_step(status['message'], "error")
            show_step_detail(get_docker_start_hint())
            return False

        show_step("Docker is running")
        return True

    def ensure_image(self):
        '''Pull the image unless it is already cached locally'''
        from cli.ui import show_step, show_step_detail

        image = self.settings.image
        if image_exists(image):
            show_step(f"Image present: {image}")
            return True

        show_step(f"Image not found locally: {image}", "active")
        result = run_docker_pull_with_progress(image)
        if result.returncode != 0:
            detail = filter_docker_errors(result.stdout)
            if detail:
                show_step_detail(detail)
            show_step_detail("Check your internet connection and try again.")
            return False
        return True

    # ── Configuration ────────────────────────────────────────────────────────

    def load_configuration(self):
        '''Reconcile config.env with defaults and report what changed'''
        from cli.ui import show_step, show_step_detail, show_warning

        result = reconcile_config(self.settings.config_file)
        for warning in result['warnings']:
            show_warning(warning)

        if result['created']:
            show_step(f"Created default {self.settings.config_file.name}")
        elif result['backfilled']:
            show_step(f"Updated {self.settings.config_file.name}")
            show_step_detail(f"Added defaults for: {', '.join(result['backfilled'])}")
        else:
            show_step(f"Using existing {self.settings.config_file.name}")

        self._set_state(DeployState.CONFIGURED)
        return result['record']

    def get_configuration(self, record=None):
        '''Interactive custom configuration. Returns the new record, or None
        if the operator does not confirm it. Nothing is written here.'''
        from cli.ui import show_step_detail, show_step_line, step_input, step_confirm, show_result_panel

        config = dict(record or DEFAULTS)

        show_step_line()
        show_step_detail("Enter custom configuration (press Enter to keep the value in brackets)")
        show_step_line()

        for key, label in CUSTOM_PORT_PROMPTS:
            config[key] = str(self._prompt_port(key, label, config.get(key, DEFAULTS[key])))

        while True:
            value = step_input(f"Data directory path [{config['DATA_BASE_DIR']}]: ").strip()
            if not value:
                break
            try:
                config['DATA_BASE_DIR'] = validate_data_dir(value)
                break
            except ValueError as e:
                show_step_detail(f"[yellow]{e}[/yellow]")

        localhost = step_confirm("Bind to localhost only? (y/n) [y]: ", default=True)
        config['LOCALHOST_ONLY'] = 'true' if localhost else 'false'

        summary = "\n".join([
            f"HTTP port:        {config['EXTERNAL_HTTP_PORT']}",
            f"HTTPS port:       {config['EXTERNAL_HTTPS_PORT']}",
            f"Nginx HTTP port:  {config['NGINX_HTTP_PORT']}",
            f"Nginx HTTPS port: {config['NGINX_HTTPS_PORT']}",
            f"Data directory:   {config['DATA_BASE_DIR']}",
            f"Localhost only:   {config['LOCALHOST_ONLY']}",
        ])
        show_result_panel(summary, title="Configuration Summary")

        if not step_confirm("Proceed with this configuration? (y/N): ", default=False):
            return None
        return config

    def _prompt_port(self, key, label, default):
        from cli.ui import step_input, show_step_detail

        # A broken value in config.env must not become the prompt default
        if parse_port_input(default, DEFAULTS[key])[1] is not None:
            default = DEFAULTS[key]

        while True:
            value = step_input(f"{label} [{default}]: ")
            port, error = parse_port_input(value, default)
            if error is None:
                return port
            show_step_detail(f"[yellow]Invalid port number: {error}. Enter a number between 1-65535.[/yellow]")

    def create_directories(self, record):
        from cli.ui import show_step, show_step_detail

        report = ensure_directories(self.settings.work_dir, record['DATA_BASE_DIR'])
        for path, created in report:
            show_step_detail(f"{'Created' if created else 'Exists'}: {path}")
        show_step("Data directories ready")

    # ── Ports ────────────────────────────────────────────────────────────────

    def check_ports(self, record):
        '''Probe published ports. Returns True when the deploy may proceed.'''
        from cli.ui import show_step, show_step_detail

        report = check_port_conflicts(record, probe=self.probe)
        address = report['address']

        for entry in report['ports']:
            if entry['free']:
                show_step_detail(f"Port {address}:{entry['port']} available")
                continue
            if entry.get('error'):
                show_step_detail(f"[red]{entry['key']}: {entry['error']}[/red]")
                continue
            owner = ""
            if entry['process'] or entry['pid']:
                owner = f" by {entry['process'] or 'unknown'} (pid {entry['pid'] or '?'})"
            show_step_detail(f"[yellow]Port {address}:{entry['port']} is already in use{owner}[/yellow]")

        self._set_state(DeployState.PORTS_CHECKED)

        if not report['conflicts']:
            show_step("All ports available")
            return True

        show_step("Port conflict detected", "error")
        show_step_detail(f"Change the ports in {self.settings.config_file.name} "
                         "(e.g. EXTERNAL_HTTP_PORT=7001) or stop the process using them.")

        if self.force:
            show_step_detail("--force given, deploying anyway")
            proceed = True
        elif self.interactive:
            proceed = self.confirm("Continue deploying anyway? (y/N): ")
        else:
            proceed = False

        if not proceed:
            _log.info("Deploy aborted because of port conflicts")
            self._set_state(DeployState.CONFIGURED)
        return proceed

    # ── Deploy ───────────────────────────────────────────────────────────────

    def generate_compose(self, record):
        write_compose(self.settings.compose_file, record, self.settings.image)
        mode = "localhost only" if is_localhost_only(record) else "all interfaces"
        return mode

    def deploy(self, record):
        '''Regenerate the compose file, stop any old stack and start it again'''
        from cli.ui import show_step, show_step_detail

        mode = self.generate_compose(record)
        show_step(f"Generated {self.settings.compose_file.name} ({mode})")
        for binding in get_port_bindings(record):
            show_step_detail(binding)

        # An old stack may not exist; failures here are expected
        run_compose(self.settings, 'down')

        result = run_docker_with_progress(
            compose_args(self.settings, 'up', '-d'),
            "Starting nginx-manager",
            cwd=str(self.settings.work_dir)
        )
        if result is None or result.returncode != 0:
            if result is not None:
                detail = filter_docker_errors(result.stderr) or result.stdout.strip()
                if detail:
                    show_step_detail(f"[red]{detail}[/red]")
            show_step_detail("Check that the ports are free, Docker is running, "
                             f"and {self.settings.config_file.name} is valid.")
            return False

        self._set_state(DeployState.DEPLOYED)
        return True

    def verify_installation(self, record):
        '''Show container status and probe /health. Failure is only a warning.'''
        from cli.ui import show_step, show_step_detail

        if self.settle_seconds:
            time.sleep(self.settle_seconds)

        status = run_compose(self.settings, 'ps')
        if status is not None and status.returncode == 0 and status.stdout.strip():
            for line in status.stdout.strip().splitlines():
                show_step_detail(line)

        result = HookLoader.execute_hook(self.manifest, 'ready_check', record)
        healthy, message = result if result else (False, "No health check available")
        if healthy:
            show_step(f"Health check passed: {message}")
        else:
            show_step(f"Health check failed - the service may still be starting ({message})", "error")

        self._set_state(DeployState.VERIFIED)
        return healthy

    def show_deployment_info(self, record):
        from cli.ui import show_result_panel

        message = HookLoader.execute_hook(
            self.manifest, 'success_message', record, self.settings.config_file.name
        )
        if message:
            show_result_panel(message, title="🎉 Nginx Manager deployed")

    def install(self, config=None):
        '''Full installation. config, when given, is saved before reconciling.
        Returns True when the stack was deployed.'''
        from cli.ui import show_step, show_step_final, show_step_detail

        show_step("Checking Docker environment", "active")
        if not self.check_dependencies():
            return self._fail("Docker is not available")

        if not self.ensure_image():
            return self._fail("Failed to pull image")

        if config is not None:
            save_config(self.settings.config_file, config)

        record = self.load_configuration()

        errors = validate_config(record)
        if errors:
            for error in errors:
                show_step_detail(f"[red]{error}[/red]")
            return self._fail(f"Fix {self.settings.config_file.name} and try again")

        self.create_directories(record)

        if not self.check_ports(record):
            show_step_final("Deployment cancelled", success=False)
            return False

        if not self.deploy(record):
            return self._fail("Deployment failed")

        self.verify_installation(record)
        show_step_final("Nginx Manager is up")
        self.show_deployment_info(record)
        return True
