"""Screenshots and screen recordings of running devices."""

from __future__ import annotations

import contextlib
import os
import signal
import subprocess
import sys
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from .constants import (
    CMD_ADB,
    CMD_SIMCTL,
    CMD_XCRUN,
    DARWIN_OS,
    EXT_GIF,
    EXT_MP4,
    EXT_PNG,
    PREFIX_RECORDING,
    PREFIX_SCREENSHOT,
    STATE_BOOTED,
    AndroidEmulatorNotRunningError,
    DeviceNotRunningError,
    IOSSimulatorNotRunningError,
    NoActiveDeviceError,
    NoRunningAndroidEmulatorError,
    NoRunningIOSSimulatorError,
    SimCliError,
)
from .devices import get_ios_simulators
from .lifecycle import find_ios_simulator, find_running_android_emulator
from .utils import (
    convert_to_gif,
    copy_file_to_clipboard,
    ensure_extension,
    generate_filename,
)


def _on_darwin() -> bool:
    return sys.platform == DARWIN_OS


def _spawn(command: list[str]) -> subprocess.Popen:
    return subprocess.Popen(
        command,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )


def _interrupt_and_wait(
    process: subprocess.Popen, signal_target: str, recording: str
) -> None:
    """Ask a recording process to finish and wait for it to exit."""
    try:
        process.send_signal(signal.SIGINT)
    except (OSError, ValueError) as err:
        with contextlib.suppress(OSError):
            process.kill()
        raise SimCliError(
            f"failed to send interrupt signal to {signal_target}: {err}"
        ) from err
    try:
        process.wait()
    except OSError as err:
        raise SimCliError(f"error during {recording} screen recording: {err}") from err


class Capturer(ABC):
    """A running device whose screen can be captured."""

    name: str

    @abstractmethod
    def screenshot(self, output_file: str) -> str:
        """Save a screenshot and return the path written."""

    @abstractmethod
    def record(self, stop_event: threading.Event, output_file: str) -> str:
        """Record the screen until stop_event is set; return the path written."""


@dataclass
class IOSSimulator(Capturer):
    """A simulator driven through simctl."""

    udid: str
    name: str

    def screenshot(self, output_file: str) -> str:
        print(f"Taking screenshot of iOS simulator '{self.name}'...")
        full_path = ensure_extension(output_file, EXT_PNG)
        try:
            subprocess.run(
                [CMD_XCRUN, CMD_SIMCTL, "io", self.udid, "screenshot", full_path],
                capture_output=True,
                check=True,
            )
        except (OSError, subprocess.CalledProcessError) as err:
            raise SimCliError(f"failed to take iOS screenshot: {err}") from err
        print(f"Screenshot saved to: {full_path}")
        return full_path

    def record(self, stop_event: threading.Event, output_file: str) -> str:
        print(f"Recording iOS simulator '{self.name}' screen...")
        full_path = ensure_extension(output_file, EXT_MP4)
        command = [
            CMD_XCRUN,
            CMD_SIMCTL,
            "io",
            self.udid,
            "recordVideo",
            "--codec=h264",
            "--force",
            full_path,
        ]
        try:
            process = _spawn(command)
        except OSError as err:
            raise SimCliError(f"failed to start iOS screen recording: {err}") from err

        print("Recording started. Press Ctrl+C to stop.")
        stop_event.wait()
        _interrupt_and_wait(process, "recording process", "iOS")

        print(f"\nRecording saved to: {full_path}")
        return full_path


@dataclass
class AndroidEmulator(Capturer):
    """An emulator driven through adb."""

    udid: str
    name: str

    def run_adb(self, *args: str) -> None:
        """Run an adb command against this emulator; raise on failure."""
        command = [CMD_ADB, "-s", self.udid, *args]
        try:
            result = subprocess.run(
                command, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True
            )
        except OSError as err:
            raise SimCliError(f"adb command failed: {err}\nOutput: ") from err
        if result.returncode != 0:
            raise SimCliError(
                f"adb command failed: exit status {result.returncode}\n"
                f"Output: {result.stdout}"
            )

    def _remove_device_file(self, device_path: str) -> None:
        with contextlib.suppress(SimCliError):
            self.run_adb("shell", "rm", device_path)

    def screenshot(self, output_file: str) -> str:
        print(f"Taking screenshot of Android emulator '{self.name}'...")
        full_path = ensure_extension(output_file, EXT_PNG)
        device_path = "/sdcard/screenshot.png"
        try:
            try:
                self.run_adb("shell", "screencap", "-p", device_path)
            except SimCliError as err:
                raise SimCliError(f"failed to take Android screenshot: {err}") from err
            try:
                self.run_adb("pull", device_path, full_path)
            except SimCliError as err:
                raise SimCliError(f"failed to pull Android screenshot: {err}") from err
        finally:
            self._remove_device_file(device_path)

        print(f"Screenshot saved to: {full_path}")
        return full_path

    def record(self, stop_event: threading.Event, output_file: str) -> str:
        print(f"Recording Android emulator '{self.name}' screen...")
        full_path = ensure_extension(output_file, EXT_MP4)
        device_path = "/sdcard/recording.mp4"
        try:
            try:
                process = _spawn(
                    [CMD_ADB, "-s", self.udid, "shell", "screenrecord", device_path]
                )
            except OSError as err:
                raise SimCliError(
                    f"failed to start Android screen recording: {err}"
                ) from err

            print("Recording started. Press Ctrl+C to stop.")
            stop_event.wait()
            _interrupt_and_wait(process, "adb process", "Android")

            try:
                self.run_adb("pull", device_path, full_path)
            except SimCliError as err:
                raise SimCliError(f"failed to pull Android recording: {err}") from err
        finally:
            self._remove_device_file(device_path)

        print(f"\nRecording saved to: {full_path}")
        return full_path


def open_ios_simulator(device_name_or_udid: str) -> IOSSimulator:
    """Return the simulator with this name or UDID."""
    found = find_ios_simulator(device_name_or_udid)
    if found is None or not found[0]:
        raise IOSSimulatorNotRunningError()
    udid, name = found
    return IOSSimulator(udid=udid, name=name)


def open_android_emulator(device_name_or_udid: str) -> AndroidEmulator:
    """Return the running emulator of this AVD name."""
    found = find_running_android_emulator(device_name_or_udid)
    if found is None or not found[0]:
        raise AndroidEmulatorNotRunningError()
    udid, name = found
    return AndroidEmulator(udid=udid, name=name)


def get_running_ios_simulator() -> IOSSimulator:
    """Return the first booted simulator."""
    for sim in get_ios_simulators():
        if sim.state == STATE_BOOTED:
            return IOSSimulator(udid=sim.udid, name=sim.name)
    raise NoRunningIOSSimulatorError()


def get_running_android_emulator() -> AndroidEmulator:
    """Return any running emulator."""
    found = find_running_android_emulator("")
    if found is None or not found[0]:
        raise NoRunningAndroidEmulatorError()
    udid, name = found
    return AndroidEmulator(udid=udid, name=name)


def get_active_device() -> Capturer:
    """Return the running device, preferring a simulator on macOS."""
    if _on_darwin():
        try:
            sim = get_running_ios_simulator()
        except SimCliError:
            pass
        else:
            print(f"Active device found: iOS Simulator '{sim.name}'")
            return sim

    try:
        emu = get_running_android_emulator()
    except SimCliError:
        raise NoActiveDeviceError() from None
    print(f"Active device found: Android Emulator '{emu.name}'")
    return emu


def get_capturer(device_id: str) -> Capturer:
    """Return the device to capture; an empty id picks the active one."""
    if not device_id:
        return get_active_device()

    if _on_darwin():
        with contextlib.suppress(SimCliError):
            return open_ios_simulator(device_id)
    with contextlib.suppress(SimCliError):
        return open_android_emulator(device_id)
    raise DeviceNotRunningError()


def _is_device(candidate: str) -> bool:
    for opener in (open_ios_simulator, open_android_emulator):
        try:
            opener(candidate)
        except SimCliError:
            continue
        return True
    return False


def resolve_arguments(args: Sequence[str]) -> tuple[str, str]:
    """Split command arguments into (device id, output file); either may be empty."""
    args = list(args)
    if len(args) > 2:
        raise SimCliError(f"accepts between 0 and 2 arg(s), received {len(args)}")
    if not args:
        return "", ""
    if _is_device(args[0]):
        return args[0], args[1] if len(args) > 1 else ""
    return "", args[0]


@contextlib.contextmanager
def _stop_on_signals(stop_event: threading.Event) -> Iterator[None]:
    """Set stop_event on Ctrl+C or termination while the block runs."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def handler(signum, frame):
        print("\nStopping recording...")
        stop_event.set()

    signums = [signal.SIGINT]
    if hasattr(signal, "SIGTERM"):
        signums.append(signal.SIGTERM)
    previous = {signum: signal.signal(signum, handler) for signum in signums}
    try:
        yield
    finally:
        for signum, old in previous.items():
            signal.signal(signum, old if old is not None else signal.SIG_DFL)


def handle_recording(
    capturer: Capturer,
    output_file: str,
    duration: int,
    convert_to_gif: bool,
    should_copy: bool,
) -> str:
    """Record until stopped or for duration seconds; return the final file."""
    stop_event = threading.Event()
    timer = None
    if duration > 0:
        print(f"Recording for {duration} seconds...")
        timer = threading.Timer(duration, stop_event.set)
        timer.daemon = True
        timer.start()

    try:
        with _stop_on_signals(stop_event):
            capturer.record(stop_event, output_file)
    finally:
        if timer is not None:
            timer.cancel()

    final_path = output_file
    if convert_to_gif:
        base = output_file[: -len(EXT_MP4)] if output_file.endswith(EXT_MP4) else output_file
        gif_path = base + EXT_GIF
        _convert(output_file, gif_path)
        final_path = gif_path
        try:
            os.remove(output_file)
        except OSError as err:
            print(f"Warning: could not remove original MP4 file: {err}")

    if should_copy:
        try:
            copy_file_to_clipboard(final_path)
        except SimCliError as err:
            print(f"Warning: could not copy to clipboard: {err}")
        else:
            file_type = os.path.splitext(final_path)[1].removeprefix(".").upper()
            print(f"{file_type} file copied to clipboard.")

    return final_path


_convert = convert_to_gif


def take_screenshot(args: Sequence[str], should_copy: bool) -> str:
    """Screenshot a device chosen from the arguments; return the file name used."""
    device_id, output_file = resolve_arguments(args)
    capturer = get_capturer(device_id)
    if not output_file:
        output_file = generate_filename(PREFIX_SCREENSHOT, capturer.name, EXT_PNG)

    capturer.screenshot(output_file)

    if should_copy:
        try:
            copy_file_to_clipboard(output_file)
        except SimCliError as err:
            print(f"Warning: could not copy to clipboard: {err}")
        else:
            print("Screenshot copied to clipboard.")
    return output_file


def record_screen(
    args: Sequence[str], duration: int, convert_to_gif: bool, should_copy: bool
) -> str:
    """Record a device chosen from the arguments; return the final file."""
    device_id, output_file = resolve_arguments(args)
    capturer = get_capturer(device_id)
    if not output_file:
        output_file = generate_filename(PREFIX_RECORDING, capturer.name, EXT_MP4)
    return handle_recording(capturer, output_file, duration, convert_to_gif, should_copy)