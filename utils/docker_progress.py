import logging
import subprocess
from typing import List, Optional

from rich.live import Live
from rich.progress import Progress, BarColumn, TextColumn, TimeElapsedColumn
from rich.spinner import Spinner

from cli.ui import console, SYMBOLS, STEP_PREFIX
from utils.system import is_windows

_log = logging.getLogger(__name__)

SPINNER_STYLE = "line" if is_windows() else "dots"

# Lines docker prints while working; none of them is an error
PROGRESS_MARKERS = (
    'Pulling', 'Download', 'Extracting', 'Pull complete', 'Waiting',
    'Verifying', 'Already exists', 'Digest:', 'Status:',
    'Image is up to date', 'Downloaded newer image',
)
# compose v2 resource lines, e.g. " Container nginx-manager  Started"
COMPOSE_STATUS_PREFIXES = ('Container ', 'Network ', 'Volume ')

PULL_TAIL_LINES = 10


class DockerProgressMonitor:
    """Spinner shown while a docker command runs, with an outcome line after."""

    def __init__(self, message: str = "Docker operation in progress"):
        self.message = message
        self.result = None
        self._live = Live(Spinner(SPINNER_STYLE, text=f"│     {message}"),
                          console=console, refresh_per_second=10)

    @property
    def success(self):
        return self.result is not None and self.result.returncode == 0

    def __enter__(self):
        self._live.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._live.stop()
        if self.success:
            console.print(f"{STEP_PREFIX}{SYMBOLS['done']} {self.message} - Complete!", style="bold green")
        else:
            reason = " (Exception)" if exc_type is not None else ""
            console.print(f"{STEP_PREFIX}{SYMBOLS['error']} {self.message} - Failed{reason}", style="bold red")

    def set_result(self, result):
        self.result = result


def run_docker_with_progress(
    command: List[str],
    message: str,
    cwd: Optional[str] = None
) -> Optional[subprocess.CompletedProcess]:
    """Run a docker command behind a spinner.
    Returns None when the executable is missing."""
    _log.debug("Running: %s", ' '.join(command))
    with DockerProgressMonitor(message) as monitor:
        try:
            monitor.set_result(subprocess.run(
                command,
                cwd=cwd,
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='ignore'
            ))
        except FileNotFoundError:
            _log.warning("Command not found: %s", command[0])

    if monitor.result is not None:
        _log.info("%s -> exit %s", message, monitor.result.returncode)
    return monitor.result


def _is_noise(line):
    if any(marker in line for marker in PROGRESS_MARKERS):
        return True
    return line.strip().startswith(COMPOSE_STATUS_PREFIXES) and 'Error' not in line


def filter_docker_errors(stderr: str) -> str:
    """Drop progress and status lines from docker output, keep the errors."""
    if not stderr:
        return ""
    return '\n'.join(line for line in stderr.split('\n') if line.strip() and not _is_noise(line))


class _LayerTracker:
    '''Percentage of image layers pulled, from `docker pull` output'''

    def __init__(self):
        self.total = 0
        self.done = 0

    def feed(self, line):
        if 'Pulling fs layer' in line:
            self.total += 1
        elif 'Pull complete' in line or 'Already exists' in line:
            self.done += 1

    @property
    def percent(self):
        return int(self.done * 100 / self.total) if self.total else 0


def run_docker_pull_with_progress(image: str) -> subprocess.CompletedProcess:
    """
    Pull an image, showing a bar driven by completed layers.

    The returned stdout holds the last lines of output for error reporting.
    Exit code 127 means the docker executable was not found.
    """
    command = ['docker', 'pull', image]
    console.print(f"{STEP_PREFIX}Pulling image {image}...")
    _log.info("Pulling %s", image)

    try:
        process = subprocess.Popen(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            encoding='utf-8',
            errors='ignore',
            bufsize=1
        )
    except FileNotFoundError:
        console.print(f"{STEP_PREFIX}{SYMBOLS['error']} docker not found!", style="bold red")
        return subprocess.CompletedProcess(command, 127, '', 'docker not found')

    layers = _LayerTracker()
    tail = []

    with Progress(
        TextColumn(STEP_PREFIX + "[progress.description]{task.description}"),
        BarColumn(bar_width=40),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        TimeElapsedColumn(),
        console=console
    ) as progress:
        task = progress.add_task("Pulling layers...", total=100)
        for line in process.stdout:
            tail = (tail + [line.rstrip()])[-PULL_TAIL_LINES:]
            layers.feed(line)
            if layers.total:
                progress.update(task, completed=layers.percent,
                                description=f"Pulled {layers.done}/{layers.total} layers")

    process.wait()

    if process.returncode == 0:
        console.print(f"{STEP_PREFIX}{SYMBOLS['done']} Image pulled successfully!", style="bold green")
    else:
        console.print(f"{STEP_PREFIX}{SYMBOLS['error']} Image pull failed!", style="bold red")
    _log.info("Pull %s -> exit %s", image, process.returncode)

    return subprocess.CompletedProcess(command, process.returncode, '\n'.join(tail), '')
