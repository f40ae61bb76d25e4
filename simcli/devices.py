"""Discovery and listing of iOS simulators and Android emulators."""

from __future__ import annotations

import json
import subprocess
import sys
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from tabulate import tabulate

from .constants import (
    CMD_ADB,
    CMD_EMULATOR,
    CMD_SIMCTL,
    CMD_XCRUN,
    DARWIN_OS,
    STATE_BOOTED,
    STATE_SHUTDOWN,
    TYPE_ANDROID_EMULATOR,
    TYPE_IOS_SIMULATOR,
)

_RUNTIME_PREFIX = "com.apple.CoreSimulator.SimRuntime."
_TABLE_HEADERS = ("Type", "Name", "State", "UDID", "Runtime")


@dataclass
class Device:
    """A simulator or emulator known to the host."""

    name: str
    udid: str
    state: str
    type: str
    runtime: str = ""
    device_type: str = ""

    def to_dict(self) -> dict[str, str]:
        """Return the JSON form, leaving out empty optional fields."""
        data = {
            "name": self.name,
            "udid": self.udid,
            "state": self.state,
            "type": self.type,
        }
        if self.runtime:
            data["runtime"] = self.runtime
        if self.device_type:
            data["deviceTypeIdentifier"] = self.device_type
        return data

    @classmethod
    def from_dict(cls, data: Mapping) -> Device:
        """Build a device from its JSON form; missing fields become empty."""
        if not isinstance(data, Mapping):
            raise TypeError("device entry must be a JSON object")

        def text(key: str) -> str:
            value = data.get(key)
            if value is None:
                return ""
            if not isinstance(value, str):
                raise TypeError(f"device field {key!r} must be a string")
            return value

        return cls(
            name=text("name"),
            udid=text("udid"),
            state=text("state"),
            type=text("type"),
            runtime=text("runtime"),
            device_type=text("deviceTypeIdentifier"),
        )


def _command_output(*args: str) -> str:
    """Run a command and return its standard output; raise on failure."""
    result = subprocess.run(list(args), capture_output=True, text=True, check=True)
    return result.stdout


def format_runtime(runtime_value: str) -> str:
    """Turn a CoreSimulator runtime identifier into a short label."""
    if _RUNTIME_PREFIX in runtime_value:
        parts = runtime_value.split(".")
        if len(parts) >= 4:
            platform, *version = parts[-1].split("-")
            if version:
                return f"{platform} {'.'.join(version)}"
    if "Android" in runtime_value:
        return "Android"
    return runtime_value


def get_ios_simulators() -> list[Device]:
    """Return every simulator reported by simctl, or an empty list."""
    try:
        output = _command_output(CMD_XCRUN, CMD_SIMCTL, "list", "devices", "--json")
    except (OSError, subprocess.CalledProcessError):
        return []

    try:
        groups = json.loads(output).get("devices") or {}
        return [
            Device(
                name=entry.get("name") or "",
                udid=entry.get("udid") or "",
                state=entry.get("state") or "",
                type=TYPE_IOS_SIMULATOR,
                runtime=runtime,
                device_type=entry.get("deviceTypeIdentifier") or "",
            )
            for runtime, entries in groups.items()
            for entry in entries or []
        ]
    except (ValueError, AttributeError, TypeError):
        return []


def get_available_avds() -> set[str]:
    """Return the names of the Android virtual devices on this host."""
    try:
        output = _command_output(CMD_EMULATOR, "-list-avds")
    except (OSError, subprocess.CalledProcessError) as err:
        print(
            f"Could not run 'emulator -list-avds': {err}. "
            "Only running emulators will be listed."
        )
        return set()
    return {line.strip() for line in output.strip().splitlines() if line.strip()}


def is_valid_emulator_line(line: str) -> bool:
    """Tell whether a line of 'adb devices' output names an emulator."""
    return (
        "emulator-" in line
        and "device" in line
        and "List of devices attached" not in line
    )


def get_emulator_name(udid: str) -> str | None:
    """Ask a running emulator for its AVD name."""
    try:
        output = _command_output(CMD_ADB, "-s", udid, "emu", "avd", "name")
    except (OSError, subprocess.CalledProcessError):
        return None
    lines = output.strip().splitlines()
    return lines[0].strip() if lines else ""


def parse_emulator_line(line: str) -> tuple[str, str] | None:
    """Return (name, udid) for an online emulator line, else None."""
    parts = line.split()
    if len(parts) < 2 or parts[1] != "device":
        return None
    udid = parts[0]
    name = get_emulator_name(udid)
    if not name:
        return None
    return name, udid


def get_running_android_devices() -> dict[str, str]:
    """Return running emulators as a mapping of AVD name to serial."""
    try:
        output = _command_output(CMD_ADB, "devices")
    except (OSError, subprocess.CalledProcessError):
        return {}

    running: dict[str, str] = {}
    for raw in output.strip().splitlines():
        line = raw.strip()
        if not is_valid_emulator_line(line):
            continue
        parsed = parse_emulator_line(line)
        if parsed:
            name, udid = parsed
            running[name] = udid
    return running


def build_android_device_list(
    avds: Iterable[str], running: Mapping[str, str]
) -> list[Device]:
    """Merge known AVDs with running emulators; running ones come first."""
    devices = [
        Device(
            name=name,
            udid=udid,
            state=STATE_BOOTED,
            type=TYPE_ANDROID_EMULATOR,
            runtime="Android",
        )
        for name, udid in running.items()
    ]
    devices.extend(
        Device(
            name=avd,
            udid="N/A",
            state=STATE_SHUTDOWN,
            type=TYPE_ANDROID_EMULATOR,
            runtime="Android",
        )
        for avd in sorted(set(avds) - set(running))
    )
    return devices


def get_android_emulators() -> list[Device]:
    """Return every known or running Android emulator."""
    return build_android_device_list(get_available_avds(), get_running_android_devices())


def render_device_table(devices: Iterable[Device]) -> str:
    """Render devices as a text table."""
    rows = [
        (d.type, d.name, d.state, d.udid, format_runtime(d.runtime)) for d in devices
    ]
    return tabulate(rows, headers=_TABLE_HEADERS, tablefmt="grid")


def list_devices() -> list[Device]:
    """Print a table of all devices and return them."""
    devices: list[Device] = []
    if sys.platform == DARWIN_OS:
        devices.extend(get_ios_simulators())
    devices.extend(get_android_emulators())

    if not devices:
        print("No simulators or emulators found")
        return devices

    print(render_device_table(devices))
    return devices