import argparse
import logging
import sys

from config import load_settings

_log = logging.getLogger("nginx_manager_deploy")


def setup_logging(settings):
    '''Log to a file in the work dir; the terminal belongs to the rich UI'''
    settings.work_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=str(settings.log_file),
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_parser():
    p = argparse.ArgumentParser(
        description="Nginx Manager deployment & management tool",
        epilog=(
            "Menu options: 1 default installation, 2 custom installation, "
            "3 maintenance menu, 4 restore defaults, 5 exit"
        ),
    )
    p.add_argument("-m", "--menu-option", type=int, choices=range(1, 6), metavar="N",
                   help="Run menu option N directly (1-5)")
    p.add_argument("-s", "--silent", action="store_true",
                   help="Non-interactive default installation")
    p.add_argument("-f", "--force", action="store_true",
                   help="Deploy even when ports are already in use")
    p.add_argument("--workdir", default=None,
                   help="Directory holding config.env and docker-compose.yml (default: current directory)")
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    settings = load_settings(args.workdir)
    setup_logging(settings)
    _log.info("Started with %s (work dir %s)", vars(args), settings.work_dir)

    from cli.ui import print_header, show_warning, show_info
    from utils.system import is_root

    if is_root():
        show_warning("Running as root is not recommended; use an account in the docker group if possible.")

    try:
        if args.silent:
            from cli.main_menu import run_menu_option
            return run_menu_option(settings, 1, interactive=False, force=args.force)

        if args.menu_option is not None:
            from cli.main_menu import run_menu_option
            return run_menu_option(settings, args.menu_option, interactive=True, force=args.force)

        print_header()
        from cli.main_menu import run_main_loop
        run_main_loop(settings, force=args.force)
        return 0
    except KeyboardInterrupt:
        print()
        show_info("Cancelled")
        _log.info("Interrupted by user")
        return 130


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
