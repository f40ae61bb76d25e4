"""Command-line entry point for the sim tool."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from .constants import SimCliError
from .devices import list_devices
from .lifecycle import (
    delete_device,
    restart_device,
    show_last_device,
    shutdown_device,
    start_device,
    start_last_device,
    stop_device,
)
from .media import record_screen, take_screenshot

VERSION = "1.2.0"

_ART_LINES = [
    " ███████╗██╗███╗   ███╗      ██████╗██╗     ██╗",
    " ██╔════╝██║████╗ ████║     ██╔════╝██║     ██║",
    " ███████╗██║██╔████╔██║     ██║     ██║     ██║",
    " ╚════██║██║██║╚██╔╝██║     ██║     ██║     ██║",
    " ███████║██║██║ ╚═╝ ██║     ╚██████╗███████╗██║",
    " ╚══════╝╚═╝╚═╝     ╚═╝      ╚═════╝╚══════╝╚═╝",
    " " * 52,
]
ASCII_ART = "\n" + "\n".join(_ART_LINES) + "\n"

SHORT_DESCRIPTION = "CLI tool to manage iOS simulators and Android emulators"
LONG_DESCRIPTION = """\
SIM-CLI is a command-line tool for managing iOS simulators and Android emulators.

It provides a simple interface to:
- List available simulators and emulators
- Start, stop, shutdown, and restart devices
- Delete simulators and emulators
- Take screenshots and record screen
- Manage device lifecycle efficiently"""

_DEVICE_COMMANDS = [
    (
        "start",
        ["s"],
        "Start an iOS simulator or Android emulator",
        "Start a specific iOS simulator or Android emulator by name or UDID.\n"
        "Use 'lts' to start the last started device.",
        start_device,
    ),
    (
        "stop",
        ["st"],
        "Stop a running iOS simulator or Android emulator",
        "Stop a specific running iOS simulator or Android emulator by name or UDID.",
        stop_device,
    ),
    (
        "shutdown",
        ["sd"],
        "Shutdown an iOS simulator or Android emulator",
        "Shutdown a specific iOS simulator or Android emulator by name or UDID.",
        shutdown_device,
    ),
    (
        "restart",
        ["r"],
        "Restart an iOS simulator or Android emulator",
        "Restart a specific iOS simulator or Android emulator by name or UDID.",
        restart_device,
    ),
    (
        "delete",
        ["d", "del"],
        "Delete an iOS simulator or Android emulator",
        "Delete a specific iOS simulator or Android emulator by name or UDID. "
        "This will permanently remove the device.",
        delete_device,
    ),
]


def _print_banner() -> None:
    print(ASCII_ART, end="")
    print("iOS Simulator & Android Emulator Manager")
    print(f"Version: {VERSION}\n")
    print("Use 'sim help' to see available commands")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with every subcommand."""
    parser = argparse.ArgumentParser(
        prog="sim",
        description=LONG_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--version", action="store_true", help="Show version information"
    )
    commands = parser.add_subparsers(dest="command", metavar="<command>")

    listing = commands.add_parser(
        "list",
        aliases=["l", "ls"],
        help="List available iOS simulators and Android emulators",
        description="Display a list of all available iOS simulators and Android "
        "emulators with their current status.",
    )
    listing.set_defaults(handler=lambda args: list_devices())

    for name, aliases, short, long, action in _DEVICE_COMMANDS:
        sub = commands.add_parser(
            name,
            aliases=aliases,
            help=short,
            description=long,
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        sub.add_argument("device", metavar="device-name-or-udid")
        sub.set_defaults(handler=lambda args, action=action: action(args.device))

    last = commands.add_parser(
        "last",
        help="Show the last started device",
        description="Display information about the last started device.",
    )
    last.set_defaults(handler=lambda args: show_last_device())

    lts = commands.add_parser(
        "lts",
        help="Start the last started device",
        description="Start the last started device quickly. "
        "This is a shortcut for 'sim start lts'.",
    )
    lts.set_defaults(handler=lambda args: start_last_device())

    screenshot = commands.add_parser(
        "screenshot",
        aliases=["ss", "shot"],
        help="Take a screenshot of a device",
        description="Take a screenshot of a running iOS simulator or Android "
        "emulator and save it to a file. If no device is specified, it will try "
        "to find the active one.",
        usage="sim screenshot [-h] [-c] [device-name-or-udid] [output-file]",
    )
    screenshot.add_argument("args", nargs="*", metavar="ARG")
    screenshot.add_argument(
        "-c", "--copy", action="store_true", help="Copy the screenshot to the clipboard"
    )
    screenshot.set_defaults(handler=lambda args: take_screenshot(args.args, args.copy))

    record = commands.add_parser(
        "record",
        aliases=["rec"],
        help="Record screen of a device",
        description="Start screen recording of a running iOS simulator or Android "
        "emulator.\nIf no device is specified, it will try to find the active one.\n"
        "The recording can be stopped by pressing Ctrl+C or by specifying a duration.",
        usage="sim record [-h] [-d N] [-g] [-c] [device-name-or-udid] [output-file]",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    record.add_argument("args", nargs="*", metavar="ARG")
    record.add_argument(
        "-d",
        "--duration",
        type=int,
        default=0,
        help="Duration of the recording in seconds (default: unlimited)",
    )
    record.add_argument(
        "-g", "--gif", action="store_true", help="Convert the recording to a GIF"
    )
    record.add_argument(
        "-c", "--copy", action="store_true", help="Copy the recording to the clipboard"
    )
    record.set_defaults(
        handler=lambda args: record_screen(args.args, args.duration, args.gif, args.copy)
    )

    help_command = commands.add_parser("help", help="Help about any command")
    help_command.add_argument("topic", nargs="?")

    def show_help(args: argparse.Namespace) -> None:
        if args.topic is None:
            parser.print_help()
            return
        target = commands.choices.get(args.topic)
        if target is None:
            print(f"Unknown help topic {args.topic!r}")
            parser.print_help()
            return
        target.print_help()

    help_command.set_defaults(handler=show_help)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line and return the exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"SIM-CLI version {VERSION}")
        return 0

    handler = getattr(args, "handler", None)
    if handler is None:
        _print_banner()
        return 0

    try:
        handler(args)
    except SimCliError as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())