"""Starting, stopping, restarting and deleting simulators and emulators."""

from __future__ import annotations

import subprocess
import sys

from .config import get_last_started_device, save_last_started_device
from .constants import (
    CMD_ADB,
    CMD_AVDMANAGER,
    CMD_EMULATOR,
    CMD_SIMCTL,
    CMD_XCRUN,
    DARWIN_OS,
    STATE_BOOTED,
    TYPE_ANDROID_EMULATOR,
    SimCliError,
)
from .devices import Device, get_ios_simulators

_COMMAND_ERRORS = (OSError, subprocess.CalledProcessError)
_NO_LAST_DEVICE = "No last started device found. Start a device first to use 'lts'."


def _run(*args: str) -> None:
    """Run a command to completion; raise if it cannot start or fails."""
    subprocess.run(list(args), capture_output=True, check=True)


def _output(*args: str) -> str | None:
    """Return a command's standard output, or None if it failed."""
    try:
        result = subprocess.run(list(args), capture_output=True, text=True, check=True)
    except _COMMAND_ERRORS:
        return None
    return result.stdout


def _remember(device: Device) -> None:
    try:
        save_last_started_device(device)
    except SimCliError as err:
        print(f"Warning: Could not save last started device: {err}")


def _open_simulator_app() -> None:
    try:
        _run("open", "-a", "Simulator")
    except _COMMAND_ERRORS as err:
        print(f"Warning: Could not open Simulator app: {err}")


def _looks_like_udid(device_id: str) -> bool:
    return len(device_id) == 36 and device_id.count("-") == 4


def _on_darwin() -> bool:
    return sys.platform == DARWIN_OS


# --- Lookup ---


def find_ios_simulator(device_id: str) -> tuple[str, str] | None:
    """Return (udid, name) of the simulator with this UDID or name."""
    simulators = get_ios_simulators()
    if _looks_like_udid(device_id):
        for sim in simulators:
            if sim.udid == device_id:
                return sim.udid, sim.name
    wanted = device_id.casefold()
    for sim in simulators:
        if sim.name.casefold() == wanted:
            return sim.udid, sim.name
    return None


def find_ios_simulator_by_id(device_id: str) -> Device | None:
    """Return the simulator whose name (any case) or UDID matches."""
    wanted = device_id.casefold()
    for sim in get_ios_simulators():
        if sim.name.casefold() == wanted or sim.udid == device_id:
            return sim
    return None


def does_android_avd_exist(avd_name: str) -> bool:
    """Tell whether an Android virtual device of this name exists."""
    output = _output(CMD_EMULATOR, "-list-avds")
    if output is None:
        return False
    return any(line.strip() == avd_name for line in output.strip().split("\n"))


def find_running_android_emulator(avd_name: str) -> tuple[str, str] | None:
    """Return (serial, name) of a running emulator; an empty name matches any."""
    output = _output(CMD_ADB, "devices")
    if output is None:
        return None

    for line in output.split("\n"):
        if "emulator-" not in line or "device" not in line:
            continue
        parts = line.split()
        if not parts:
            continue
        serial = parts[0]
        name_output = _output(CMD_ADB, "-s", serial, "emu", "avd", "name")
        if name_output is None:
            continue
        actual = next(
            (
                stripped
                for stripped in (n.strip() for n in name_output.strip().split("\n"))
                if stripped and stripped != "OK"
            ),
            "",
        )
        if actual and (not avd_name or actual == avd_name):
            return serial, actual
    return None


def is_android_emulator_running(avd_name: str) -> bool:
    """Tell whether an emulator running this AVD is attached."""
    return find_running_android_emulator(avd_name) is not None


# --- iOS simulators ---


def start_ios_simulator(device_id: str) -> bool:
    """Boot a simulator and open the Simulator app."""
    device = find_ios_simulator_by_id(device_id)
    if device is None:
        return False

    print(f"Starting iOS simulator '{device_id}'...")
    try:
        _run(CMD_XCRUN, CMD_SIMCTL, "boot", device.udid)
    except _COMMAND_ERRORS as err:
        print(f"Error starting iOS simulator: {err}")
        return False

    _open_simulator_app()
    device.state = STATE_BOOTED
    _remember(device)
    print(f"iOS simulator '{device_id}' started successfully")
    return True


def stop_ios_simulator(device_id: str) -> bool:
    """Shut a simulator down."""
    found = find_ios_simulator(device_id)
    if found is None or not found[0]:
        return False
    udid, _ = found

    print(f"Stopping iOS simulator '{device_id}'...")
    try:
        _run(CMD_XCRUN, CMD_SIMCTL, "shutdown", udid)
    except _COMMAND_ERRORS as err:
        print(f"Error stopping iOS simulator: {err}")
        return False

    print(f"iOS simulator '{device_id}' stopped successfully")
    return True


def shutdown_ios_simulator(device_id: str) -> bool:
    """Shut a simulator down; the same as stopping it."""
    return stop_ios_simulator(device_id)


def restart_ios_simulator(device_id: str) -> bool:
    """Shut a simulator down, if running, and boot it again."""
    device = find_ios_simulator_by_id(device_id)
    if device is None:
        return False

    print(f"Restarting iOS simulator '{device_id}'...")
    try:
        _run(CMD_XCRUN, CMD_SIMCTL, "shutdown", device.udid)
    except _COMMAND_ERRORS:
        pass  # already shut down

    try:
        _run(CMD_XCRUN, CMD_SIMCTL, "boot", device.udid)
    except _COMMAND_ERRORS as err:
        print(f"Error restarting iOS simulator: {err}")
        return False

    _open_simulator_app()
    device.state = STATE_BOOTED
    _remember(device)
    print(f"iOS simulator '{device_id}' restarted successfully")
    return True


def delete_ios_simulator(device_id: str) -> bool:
    """Shut a simulator down and delete it."""
    found = find_ios_simulator(device_id)
    if found is None or not found[0]:
        return False
    udid, _ = found

    print(f"Deleting iOS simulator '{device_id}'...")
    try:
        _run(CMD_XCRUN, CMD_SIMCTL, "shutdown", udid)
    except _COMMAND_ERRORS:
        pass

    try:
        _run(CMD_XCRUN, CMD_SIMCTL, "delete", udid)
    except _COMMAND_ERRORS as err:
        print(f"Error deleting iOS simulator: {err}")
        return False

    print(f"iOS simulator '{device_id}' deleted successfully")
    return True


# --- Android emulators ---


def start_android_emulator(device_id: str) -> bool:
    """Launch an emulator for an AVD, unless one is already running."""
    running = find_running_android_emulator(device_id)
    if running is not None:
        print(f"Android emulator '{device_id}' is already running")
        serial, name = running
        _remember(
            Device(name=name, udid=serial, state=STATE_BOOTED, type=TYPE_ANDROID_EMULATOR)
        )
        return True

    if not does_android_avd_exist(device_id):
        return False

    print(f"Starting Android emulator '{device_id}'...")
    try:
        subprocess.Popen(
            [CMD_EMULATOR, "-avd", device_id],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except OSError as err:
        print(f"Error starting Android emulator: {err}")
        return False

    _remember(
        Device(name=device_id, udid="starting", state=STATE_BOOTED, type=TYPE_ANDROID_EMULATOR)
    )
    print(f"Android emulator '{device_id}' started successfully")
    return True


def stop_android_emulator(device_id: str) -> bool:
    """Kill a running emulator."""
    running = find_running_android_emulator(device_id)
    if running is None:
        return False
    serial, _ = running

    print(f"Stopping Android emulator '{device_id}'...")
    try:
        _run(CMD_ADB, "-s", serial, "emu", "kill")
    except _COMMAND_ERRORS as err:
        print(f"Error stopping Android emulator: {err}")
        return False

    print(f"Android emulator '{device_id}' stopped successfully")
    return True


def restart_android_emulator(device_id: str) -> bool:
    """Stop an emulator if it runs, then start it."""
    print(f"Restarting Android emulator '{device_id}'...")
    stop_android_emulator(device_id)

    if not start_android_emulator(device_id):
        return False
    _remember(
        Device(name=device_id, udid="restarting", state=STATE_BOOTED, type=TYPE_ANDROID_EMULATOR)
    )
    return True


def delete_android_emulator(device_id: str) -> bool:
    """Stop an emulator if it runs and delete its AVD."""
    if not does_android_avd_exist(device_id):
        return False

    print(f"Deleting Android emulator '{device_id}'...")
    stop_android_emulator(device_id)

    try:
        _run(CMD_AVDMANAGER, "delete", "avd", "-n", device_id)
    except _COMMAND_ERRORS as err:
        print(f"Error deleting Android emulator: {err}")
        return False

    print(f"Android emulator '{device_id}' deleted successfully")
    return True


# --- Commands ---


def _last_device_or_none() -> Device | None:
    try:
        return get_last_started_device()
    except SimCliError:
        return None


def _start_resolved(device_id: str) -> bool:
    if _on_darwin() and start_ios_simulator(device_id):
        return True
    if start_android_emulator(device_id):
        return True
    print(f"Device '{device_id}' not found or failed to start")
    return False


def start_device(device_id: str) -> bool:
    """Start a device by name or UDID; 'lts' starts the last one started."""
    if device_id == "lts":
        return start_last_device()
    return _start_resolved(device_id)


def start_last_device() -> bool:
    """Start the device that was started last."""
    last = _last_device_or_none()
    if last is None:
        print(_NO_LAST_DEVICE)
        return False
    print(f"Starting last device: {last.name} ({last.type})")
    return _start_resolved(last.name)


def stop_device(device_id: str) -> bool:
    """Stop a running device by name or UDID."""
    if _on_darwin() and stop_ios_simulator(device_id):
        return True
    if stop_android_emulator(device_id):
        return True
    print(f"Device '{device_id}' not found or failed to stop")
    return False


def shutdown_device(device_id: str) -> bool:
    """Shut a device down by name or UDID."""
    if _on_darwin() and shutdown_ios_simulator(device_id):
        return True
    if stop_android_emulator(device_id):
        return True
    print(f"Device '{device_id}' not found or failed to shutdown")
    return False


def restart_device(device_id: str) -> bool:
    """Restart a device by name or UDID."""
    if _on_darwin() and restart_ios_simulator(device_id):
        return True
    if restart_android_emulator(device_id):
        return True
    print(f"Device '{device_id}' not found or failed to restart")
    return False


def delete_device(device_id: str) -> bool:
    """Delete a device permanently by name or UDID."""
    if _on_darwin() and delete_ios_simulator(device_id):
        return True
    if delete_android_emulator(device_id):
        return True
    print(f"Device '{device_id}' not found or failed to delete")
    return False


def show_last_device() -> Device | None:
    """Print the device that was started last and return it."""
    try:
        last = get_last_started_device()
    except SimCliError as err:
        print(f"Error getting last started device: {err}")
        return None

    if last is None:
        print("No last started device found. Start a device first.")
        return None

    print("Last started device:")
    print(f"  Name: {last.name}")
    print(f"  Type: {last.type}")
    print(f"  UDID: {last.udid}")
    if last.runtime:
        print(f"  Runtime: {last.runtime}")
    return last