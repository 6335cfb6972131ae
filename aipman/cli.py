"""Command line entry point for aip-man."""

import argparse
import sys

import sentry_sdk  # type: ignore
from colorama import Fore, Style, deinit, init  # type: ignore

from . import __version__
from .backup import create_backup, restore_backup
from .bundle import BundleMaterializer
from .catalog import fetch_catalog
from .config import load_settings
from .console import Console
from .errors import AipManError
from .lifecycle import Lifecycle
from .manifest import ManifestStore
from .prompt import ask_yes_no, assume_yes
from .transport import build_headers


def create_argument_parser():
    """Create and configure the argument parser for the aip-man CLI."""
    parser = argparse.ArgumentParser(
        prog="aip-man",
        description="aip-man - AppImage Package Manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
{Fore.CYAN}Examples:{Style.RESET_ALL}
  aip-man install package-name     Install a package
  aip-man remove package-name      Remove an installed package
  aip-man upgrade                  Upgrade all installed packages
  aip-man list                     List installed packages
  aip-man run app -- --flag        Run an installed application
  aip-man --repo file:///path/pkgs.json upgrade
                                   Upgrade from a local package list
        """,
    )

    # Global options
    parser.add_argument(
        "--ask", "-a",
        action="store_true",
        help="Ask before changing package information",
    )
    parser.add_argument(
        "--backup", "-b",
        action="store_true",
        help="Create a backup of the application directory before running the command",
    )
    parser.add_argument(
        "--repo", "-r",
        help="Use a different package list than the default one. Works with local lists via file://",
    )
    parser.add_argument(
        "--config", "-c",
        help="Path to a YAML config file",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"aip-man {__version__}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        metavar="<command>",
    )

    install_parser = subparsers.add_parser("install", help="Install an AppImage from the package list")
    install_parser.add_argument("package", help="Package to install")

    remove_parser = subparsers.add_parser("remove", help="Remove an installed AppImage")
    remove_parser.add_argument("package", help="Package to uninstall")

    subparsers.add_parser("upgrade", help="Upgrade installed packages")
    subparsers.add_parser("list", help="List installed packages")

    run_parser = subparsers.add_parser("run", help="Run an installed application")
    run_parser.add_argument("app", help="Installed application to run")
    run_parser.add_argument("app_args", nargs=argparse.REMAINDER, help="Arguments to pass to the application")

    subparsers.add_parser("backup", help="Create a backup of the application directory")
    subparsers.add_parser("restore", help="Restore the application directory from backup")

    search_parser = subparsers.add_parser("search", help="Search the package list")
    search_parser.add_argument("term", nargs="?", default="", help="Text to look for in names and descriptions")

    info_parser = subparsers.add_parser("info", help="Show package details")
    info_parser.add_argument("package", help="Package to show")

    return parser


def build_lifecycle(settings, console, confirm, repo=None) -> Lifecycle:
    headers = build_headers(settings.github_token)
    catalog_location = repo or settings.catalog_url

    def catalog_source():
        return fetch_catalog(catalog_location, headers=headers, timeout=settings.timeout, console=console)

    return Lifecycle(
        store=ManifestStore(settings.manifest_path, console=console),
        materializer=BundleMaterializer(
            settings.app_dir,
            extension=settings.artifact_extension,
            headers=headers,
            timeout=settings.timeout,
            console=console,
        ),
        catalog_source=catalog_source,
        confirm=confirm,
        console=console,
    )


def run_command(args, settings, console) -> int:
    ask = args.ask or settings.ask
    confirm = ask_yes_no if ask else assume_yes

    if args.backup and args.command not in ("backup", "restore"):
        if settings.app_dir.is_dir():
            create_backup(settings.app_dir, settings.backup_path, console=console)
        else:
            console.warn(f"Skipping backup: {settings.app_dir} does not exist yet")

    if args.command == "backup":
        create_backup(settings.app_dir, settings.backup_path, console=console)
        return 0
    if args.command == "restore":
        # Restoring deletes the current directory, so it always asks
        restore_backup(settings.app_dir, settings.backup_path, ask_yes_no, console=console)
        return 0

    lifecycle = build_lifecycle(settings, console, confirm, repo=args.repo)
    if args.command == "install":
        lifecycle.install(args.package)
    elif args.command == "remove":
        lifecycle.remove(args.package)
    elif args.command == "upgrade":
        lifecycle.upgrade()
    elif args.command == "list":
        lifecycle.list()
    elif args.command == "run":
        app_args = list(args.app_args)
        if app_args and app_args[0] == "--":
            app_args = app_args[1:]
        return lifecycle.run(args.app, app_args)
    elif args.command == "search":
        lifecycle.search(args.term)
    elif args.command == "info":
        lifecycle.info(args.package)
    return 0


def main(argv=None) -> int:
    # Initialize colorama for colored output
    init(autoreset=True)
    try:
        return _main(argv)
    finally:
        deinit()


def _main(argv) -> int:
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    console = Console(verbose=args.verbose)
    try:
        settings = load_settings(args.config)
        if settings.sentry_dsn:
            sentry_sdk.init(dsn=settings.sentry_dsn, release=f"aip-man@{__version__}")
            console.verbose("Sentry error reporting enabled")
        console.verbose(f"Application directory: {settings.app_dir}")
        return run_command(args, settings, console)
    except KeyboardInterrupt:
        console.verbose("Operation cancelled by user (KeyboardInterrupt)")
        print(f"\n{Fore.YELLOW}Operation cancelled by user.")
        return 1
    except AipManError as e:
        console.error(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
