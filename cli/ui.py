from rich.console import Console
from rich.panel import Panel
from rich.text import Text
import inquirer
import os

from utils.system import is_windows

console = Console()

VERSION = "1.0"

# cmd.exe cannot render the emoji set
if is_windows():
    SYMBOLS = {"done": "[OK]", "active": "[..]", "error": "[X]", "warning": "[!]", "info": "[i]"}
else:
    SYMBOLS = {"done": "✅", "active": "⏳", "error": "❌", "warning": "⚠️ ", "info": "ℹ️ "}

STATUS_STYLES = {
    "done": "bold green",
    "active": "bold cyan",
    "error": "bold red",
    "warning": "yellow",
    "info": "bold blue",
}

STEP_PREFIX = "  │     "


def clear_screen():
    '''Clear terminal screen'''
    os.system('cls' if os.name == 'nt' else 'clear')


def _message(status, message):
    console.print(f"  {SYMBOLS[status]} {message}", style=STATUS_STYLES[status])


def show_success(message):
    _message("done", message)


def show_error(message):
    _message("error", message)


def show_warning(message):
    _message("warning", message)


def show_info(message):
    _message("info", message)


def print_header():
    '''Tool banner'''
    logo = Text()
    logo.append("  NGINX MANAGER\n", style="bold cyan")
    logo.append("  Deployment & Management Tool\n\n", style="cyan")
    logo.append(f"  v{VERSION}", style="bold white")
    logo.append("  |  Docker Compose", style="dim")
    console.print(Panel(logo, border_style="cyan", padding=(1, 2)))


def show_panel(title, content, style="cyan", clear=True):
    '''Screen title panel; clear=False keeps earlier output (silent mode)'''
    if clear:
        clear_screen()
        print_header()
    console.print(Panel(content, title=title, border_style=style))


# Step flow: every step hangs off one vertical line
#
#   │
#   ├── ✅ Docker is running
#   │     detail
#   └── ✅ Nginx Manager is up

def show_step_line():
    console.print("  │", style="dim cyan")


def show_step(message, status="done"):
    '''status: "done", "active" or "error"'''
    show_step_line()
    console.print(f"  ├── {SYMBOLS.get(status, '•')} {message}", style=STATUS_STYLES.get(status, "white"))


def show_step_final(message, success=True):
    status = "done" if success else "error"
    show_step_line()
    console.print(f"  └── {SYMBOLS[status]} {message}", style=STATUS_STYLES[status])


def show_step_detail(message):
    console.print(f"{STEP_PREFIX}{message}", style="dim green")


def step_input(prompt):
    console.print("  │", style="dim cyan", end="")
    return input(f"     {prompt}")


def step_confirm(prompt, default=False):
    '''Yes/no question in the step flow; empty answer picks default'''
    while True:
        answer = step_input(prompt).strip().lower()
        if not answer:
            return default
        if answer in ('y', 'yes'):
            return True
        if answer in ('n', 'no'):
            return False
        console.print(f"{STEP_PREFIX}Please enter 'y' for yes or 'n' for no.", style="dim red")


def show_result_panel(content, title="Success"):
    console.print()
    console.print(Panel(content, title=f"[bold green]{title}[/bold green]",
                        border_style="green", padding=(1, 2)))


def select_from_list(message, choices):
    '''Arrow-key menu; returns the chosen label'''
    answer = inquirer.prompt([inquirer.List('selection', message=message, choices=choices)])
    if not answer:
        # Ctrl+C inside inquirer returns None
        raise KeyboardInterrupt
    return answer['selection']


def pause(message="Press Enter to continue..."):
    input(f"\n{message}")
