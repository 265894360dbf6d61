"""Command-line entry point: ``python -m deskbridge <command>``."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from deskbridge.config import DesktopConfig
from deskbridge.errors import ClipboardUnavailable
from deskbridge.services.desktop_service import DesktopService

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="deskbridge",
        description="DeskBridge - active window and clipboard access from the command line"
    )

    parser.add_argument(
        "-e", "--env-file",
        type=Path,
        default=None,
        help="Read DESKBRIDGE_* settings from this .env file"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("window", help="Print the focused window")
    commands.add_parser("windows", help="List titled top-level windows")
    commands.add_parser("read", help="Print the clipboard text")

    write = commands.add_parser("write", help="Replace the clipboard text")
    write.add_argument("text", nargs="?", default=None,
                       help="Text to copy (default: read stdin)")

    running = commands.add_parser("running", help="Exit 0 if an app with this name has a window")
    running.add_argument("name")

    watch = commands.add_parser("watch", help="Print clipboard changes until interrupted")
    watch.add_argument(
        "-i", "--interval",
        type=float,
        default=None,
        help="Polling interval in seconds (default: DESKBRIDGE_MONITOR_INTERVAL or 1.0)"
    )

    return parser.parse_args(argv)


async def run_command(args: argparse.Namespace, desktop: DesktopService) -> int:
    if args.command == "window":
        window = await desktop.get_active_window()
        print(window.model_dump_json(indent=2))
        return 1 if window.is_default() else 0

    if args.command == "windows":
        for window in await desktop.list_windows():
            print(f"{window.process_name}\t{window.process_id or '-'}\t{window.title}")
        return 0

    if args.command == "read":
        sys.stdout.write(await desktop.read_text())
        return 0

    if args.command == "write":
        text = args.text if args.text is not None else sys.stdin.read()
        return 0 if await desktop.write_text(text) else 1

    if args.command == "running":
        return 0 if await desktop.is_app_running(args.name) else 1

    desktop.monitor.add_listener(lambda text: print("Text copied:", text))
    await desktop.monitor.start_monitoring(args.interval)
    await asyncio.Event().wait()
    return 0


async def _main(args: argparse.Namespace) -> int:
    config = DesktopConfig.from_env(env_path=args.env_file)
    async with DesktopService(config) as desktop:
        return await run_command(args, desktop)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="[%(levelname)s] %(message)s")

    try:
        return asyncio.run(_main(args))
    except KeyboardInterrupt:
        return 0
    except ClipboardUnavailable as e:
        logger.error(f"{e}")
        return 1
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
