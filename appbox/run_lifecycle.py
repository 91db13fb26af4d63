# appbox/run_lifecycle.py
"""Command line entrypoint for app lifecycle actions."""

import argparse
import logging
import sys
from typing import List, Optional

from appbox.config.settings import settings
from appbox.container import Services, build_services
from appbox.core.errors import AppboxError
from appbox.core.models import App

logger = logging.getLogger(__name__)


ACTIONS = ("list", "install", "start", "stop", "restart", "uninstall", "rebuild")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="appbox", description="Manage multi-container apps")
    parser.add_argument("action", choices=ACTIONS)
    parser.add_argument("app", nargs="?", help="App name")
    parser.add_argument(
        "--dir",
        dest="app_dir",
        help="App directory (install only; registers the app)",
    )
    args = parser.parse_args(argv)

    if args.action != "list" and not (args.app or args.app_dir):
        parser.error(f"{args.action} needs an app name or --dir")
    return args


def resolve_app(services: Services, args: argparse.Namespace) -> App:
    if args.app_dir:
        config_loader = services.config_loader
        name = args.app or config_loader.read_app_name(args.app_dir)
        config = config_loader.get_app_config(name, args.app_dir)
        return services.assembler.assemble(name, config)
    return services.registry.get(args.app)


def run(services: Services, args: argparse.Namespace) -> int:
    if args.action == "list":
        for app in services.registry.list():
            print(f"{app.name}\t{app.url}\t{app.root}")
        return 0

    app = resolve_app(services, args)
    services.plugins.load_app_plugins(app)
    lifecycle = services.lifecycle

    if args.action in ("start", "stop", "restart"):
        errors = getattr(lifecycle, args.action)(app)
        for error in errors:
            logger.error(f"❌ {error}")
        return 1 if errors else 0

    getattr(lifecycle, args.action)(app)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    args = parse_args(argv)

    try:
        services = build_services(settings)
        return run(services, args)
    except AppboxError as e:
        logger.error(f"❌ {args.action} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
