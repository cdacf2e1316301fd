"""
Command-line interface for the Cowboy BLE library.

Provides subcommands for listing and encoding commands offline, scanning,
and sending commands to a bike.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Callable

from .connection import CowboyConnection, scan_for_bikes
from .errors import CowboyError
from .protocol import (
    SERVICE_COWBOY,
    SERVICE_SETTINGS,
    Command,
    CommandDefinition,
    all_command_defs,
    encode,
    is_strictly_read,
    write_mode,
)
from .types import FieldWeakening, HallInterpolation, Speed, TorqueGain, TorqueMode
from . import protocol as p


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


# ---------------------------------------------------------------------------
# Command construction from CLI arguments
# ---------------------------------------------------------------------------


def _parse_bool(text: str) -> bool:
    lowered = text.lower()
    if lowered in ("1", "on", "true", "yes"):
        return True
    if lowered in ("0", "off", "false", "no"):
        return False
    raise ValueError(f"Expected on/off, got {text!r}")


def _parse_int(text: str) -> int:
    return int(text, 0)


# Commands that take a value: command type -> builder from the argument text
_VALUE_BUILDERS: dict[type, Callable[[str], Command]] = {
    p.SetLight: lambda v: p.SetLight(_parse_bool(v)),
    p.SetAutoLock: lambda v: p.SetAutoLock(_parse_bool(v)),
    p.SetLock: lambda v: p.SetLock(_parse_bool(v)),
    p.SetMaxAssistedSpeed: lambda v: p.SetMaxAssistedSpeed(Speed(_parse_int(v))),
    p.SetFieldWeakening: lambda v: p.SetFieldWeakening(FieldWeakening(_parse_int(v))),
    p.SetHallInterpolation: lambda v: p.SetHallInterpolation(
        HallInterpolation(_parse_int(v))
    ),
    p.SetTorqueGain: lambda v: p.SetTorqueGain(TorqueGain(_parse_int(v))),
    p.SetMotorTorqueMode: lambda v: p.SetMotorTorqueMode(TorqueMode(_parse_bool(v))),
    p.ReadRegister: lambda v: p.ReadRegister(_parse_int(v)),
}

_COMMANDS_BY_NAME: dict[str, CommandDefinition] = {
    cd.name: cd for cd in all_command_defs().values()
}


def build_command(name: str, value: str | None = None) -> Command:
    """
    Build a command from its CLI name and optional value text.

    Raises KeyError for unknown names and ValueError for a missing,
    superfluous, or invalid value.
    """
    cd = _COMMANDS_BY_NAME[name]
    builder = _VALUE_BUILDERS.get(cd.command_type)
    if builder is None:
        if value is not None:
            raise ValueError(f"{name} takes no value")
        return cd.command_type()
    if value is None:
        raise ValueError(f"{name} requires a value")
    return builder(value)


def _command_or_exit(args: argparse.Namespace) -> Command:
    if args.name not in _COMMANDS_BY_NAME:
        print(f"Unknown command: {args.name}")
        print("Use 'commands' to see available commands.")
        sys.exit(1)
    try:
        return build_command(args.name, getattr(args, "value", None))
    except ValueError as exc:
        print(f"Invalid value: {exc}")
        sys.exit(1)


# ---------------------------------------------------------------------------
# commands / encode (offline)
# ---------------------------------------------------------------------------


def _cmd_commands(args: argparse.Namespace) -> None:
    """List every known command."""
    print("Available commands:\n")
    for name, cd in sorted(_COMMANDS_BY_NAME.items()):
        mode = cd.mode.value if cd.mode else "read"
        service = "settings" if cd.service == SERVICE_SETTINGS else "cowboy"
        arg = "VALUE" if cd.command_type in _VALUE_BUILDERS else ""
        print(f"  {name:<26s} {arg:<6s} [{mode}]  ({service})")


def _cmd_encode(args: argparse.Namespace) -> None:
    """Print the frame for a command without touching Bluetooth."""
    command = _command_or_exit(args)
    try:
        packet = encode(command)
        mode = write_mode(command)
    except CowboyError as exc:
        print(f"Cannot encode: {exc}")
        sys.exit(1)

    if args.format == "json":
        print(
            json.dumps(
                {
                    "command": args.name,
                    "packet": packet.hex(),
                    "checksum": list(packet[-2:]),
                    "mode": mode.value,
                }
            )
        )
    else:
        print(f"{packet.hex(' ')}  [{mode.value}]")


# ---------------------------------------------------------------------------
# scan
# ---------------------------------------------------------------------------


async def _cmd_scan(args: argparse.Namespace) -> None:
    """Scan for nearby Cowboy bikes."""
    print(f"Scanning for Cowboy bikes ({args.timeout}s) ...")
    results = await scan_for_bikes(timeout=args.timeout)

    if not results:
        print("No Cowboy bikes found.")
        print("Make sure the bike is awake and Bluetooth is enabled.")
        return

    print(f"\nFound {len(results)} bike(s):\n")
    for device, adv in results:
        print(f"  Name:    {device.name or '(unknown)'}")
        print(f"  Address: {device.address}")
        print(f"  RSSI:    {adv.rssi} dBm")
        if SERVICE_COWBOY in (u.lower() for u in adv.service_uuids):
            print("  Service: cowboy")
        print()


# ---------------------------------------------------------------------------
# send / read
# ---------------------------------------------------------------------------


async def _cmd_send(args: argparse.Namespace) -> None:
    """Connect, send one command, and disconnect."""
    command = _command_or_exit(args)
    try:
        write_mode(command)
    except CowboyError as exc:
        print(f"Cannot send: {exc}")
        sys.exit(1)
    print(f"Connecting to {args.address} to send '{args.name}' ...")

    async with CowboyConnection(args.address) as conn:
        packet = await conn.send(command)
        print(f"Sent {packet.hex(' ')}")


async def _cmd_read(args: argparse.Namespace) -> None:
    """Connect, read a strictly-read value, and disconnect."""
    command = _command_or_exit(args)
    if not is_strictly_read(command):
        print(f"{args.name} is not a read-only command, use 'send'")
        sys.exit(1)
    print(f"Connecting to {args.address} to read '{args.name}' ...")

    async with CowboyConnection(args.address) as conn:
        data = await conn.read(command)
        if args.format == "json":
            print(json.dumps({"command": args.name, "raw": data.hex()}))
        else:
            print(f"{args.name} = {data.hex(' ')}")


# ---------------------------------------------------------------------------
# main
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="cowboy-ble",
        description="Send commands to Cowboy e-bikes over Bluetooth LE",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    # --- commands ---
    sub.add_parser("commands", help="List available commands")

    # --- encode ---
    p_enc = sub.add_parser("encode", help="Print the packet for a command (offline)")
    p_enc.add_argument("name", help="Command name (see 'commands')")
    p_enc.add_argument("value", nargs="?", default=None, help="Command value")
    p_enc.add_argument("-f", "--format", choices=["table", "json"], default="table")

    # --- scan ---
    p_scan = sub.add_parser("scan", help="Scan for nearby Cowboy bikes")
    p_scan.add_argument(
        "-t", "--timeout", type=float, default=10.0, help="Scan duration (seconds)"
    )

    # --- send ---
    p_send = sub.add_parser("send", help="Send a command to a bike")
    p_send.add_argument("address", help="BLE address")
    p_send.add_argument("name", help="Command name (see 'commands')")
    p_send.add_argument("value", nargs="?", default=None, help="Command value")

    # --- read ---
    p_read = sub.add_parser("read", help="Read lock, dashboard, trip or fitness data")
    p_read.add_argument("address", help="BLE address")
    p_read.add_argument("name", help="Command name (e.g. read_lock)")
    p_read.add_argument("-f", "--format", choices=["table", "json"], default="table")

    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    if args.command == "commands":
        _cmd_commands(args)
        return
    if args.command == "encode":
        _cmd_encode(args)
        return

    coro = {
        "scan": _cmd_scan,
        "send": _cmd_send,
        "read": _cmd_read,
    }[args.command](args)

    try:
        asyncio.run(coro)
    except KeyboardInterrupt:
        print("\nInterrupted.")


if __name__ == "__main__":
    main()
