import json
import subprocess
import sys

import pytest

from simcli import lifecycle
from simcli.config import get_config_path, get_last_started_device, save_last_started_device
from simcli.devices import Device

SIM_UDID = "11111111-2222-3333-4444-555555555555"
OTHER_UDID = "aaaaaaaa-bbbb-cccc-dddd-eeeeeeeeeeee"
RUNTIME = "com.apple.CoreSimulator.SimRuntime.iOS-17-0"


class FakeHost:
    """Answers the commands the lifecycle module runs."""

    def __init__(self):
        self.simulators = [
            {"name": "iPhone 15", "udid": SIM_UDID, "state": "Shutdown"},
            {"name": "iPad Air", "udid": OTHER_UDID, "state": "Shutdown"},
        ]
        self.avds = ["Pixel_7_API_34", "Pixel_8_API_34"]
        self.running = {}
        self.calls = []
        self.launched = []
        self.failing = set()
        self.missing = set()

    def _fails(self, cmd):
        return any(tuple(cmd[: len(p)]) == p for p in self.failing)

    def run(self, cmd, *args, **kwargs):
        cmd = list(cmd)
        self.calls.append(cmd)
        if cmd[0] in self.missing:
            raise FileNotFoundError(2, "No such file or directory", cmd[0])
        if self._fails(cmd):
            if kwargs.get("check"):
                raise subprocess.CalledProcessError(1, cmd, output="", stderr="")
            return subprocess.CompletedProcess(cmd, 1, "", "")
        return subprocess.CompletedProcess(cmd, 0, self._answer(cmd), "")

    def popen(self, cmd, *args, **kwargs):
        cmd = list(cmd)
        if cmd[0] in self.missing:
            raise FileNotFoundError(2, "No such file or directory", cmd[0])
        self.launched.append(cmd)
        return object()

    def _answer(self, cmd):
        if cmd[:2] == ["xcrun", "simctl"]:
            action = cmd[2]
            if action == "list":
                return json.dumps({"devices": {RUNTIME: self.simulators}})
            if action == "boot":
                self._sim(cmd[3])["state"] = "Booted"
            elif action == "shutdown":
                self._sim(cmd[3])["state"] = "Shutdown"
            elif action == "delete":
                self.simulators = [s for s in self.simulators if s["udid"] != cmd[3]]
            return ""
        if cmd == ["emulator", "-list-avds"]:
            return "\n".join(self.avds) + "\n"
        if cmd == ["adb", "devices"]:
            lines = ["List of devices attached"]
            lines += [f"{serial}\tdevice" for serial in self.running]
            return "\n".join(lines) + "\n\n"
        if cmd[0] == "adb" and cmd[3:] == ["emu", "avd", "name"]:
            return f"{self.running[cmd[2]]}\r\nOK\r\n"
        if cmd[0] == "adb" and cmd[3:] == ["emu", "kill"]:
            self.running.pop(cmd[2], None)
            return ""
        if cmd[:4] == ["avdmanager", "delete", "avd", "-n"]:
            self.avds.remove(cmd[4])
            return ""
        return ""

    def _sim(self, udid):
        return next(s for s in self.simulators if s["udid"] == udid)


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path


@pytest.fixture
def host(monkeypatch, home):
    fake = FakeHost()
    monkeypatch.setattr(subprocess, "run", fake.run)
    monkeypatch.setattr(subprocess, "Popen", fake.popen)
    return fake


@pytest.fixture
def darwin(monkeypatch):
    monkeypatch.setattr(sys, "platform", "darwin")


@pytest.fixture
def linux(monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")


# --- lookup ---


def test_find_ios_simulator_by_udid(host):
    assert lifecycle.find_ios_simulator(SIM_UDID) == (SIM_UDID, "iPhone 15")


def test_find_ios_simulator_by_name_ignores_case(host):
    assert lifecycle.find_ios_simulator("ipad air") == (OTHER_UDID, "iPad Air")


def test_find_ios_simulator_unknown_udid(host):
    assert lifecycle.find_ios_simulator("12345678-1234-5678-9012-123456789012") is None


def test_find_ios_simulator_invalid_udid(host):
    assert lifecycle.find_ios_simulator("invalid-udid") is None


def test_find_ios_simulator_by_id_non_existent(host):
    assert lifecycle.find_ios_simulator_by_id("non-existent-device") is None


def test_find_ios_simulator_by_id_matches(host):
    device = lifecycle.find_ios_simulator_by_id("IPHONE 15")
    assert device.udid == SIM_UDID
    assert device.runtime == RUNTIME


def test_find_ios_simulator_without_xcrun(host):
    host.missing.add("xcrun")
    assert lifecycle.find_ios_simulator("iPhone 15") is None


def test_does_android_avd_exist(host):
    assert lifecycle.does_android_avd_exist("Pixel_7_API_34") is True
    assert lifecycle.does_android_avd_exist("non-existent-avd") is False


def test_does_android_avd_exist_without_emulator(host):
    host.missing.add("emulator")
    assert lifecycle.does_android_avd_exist("Pixel_7_API_34") is False


def test_find_running_android_emulator_non_existent(host):
    host.running["emulator-5554"] = "Pixel_7_API_34"
    assert lifecycle.find_running_android_emulator("non-existent-emulator") is None


def test_find_running_android_emulator_by_name(host):
    host.running["emulator-5554"] = "Pixel_7_API_34"
    host.running["emulator-5556"] = "Pixel_8_API_34"
    assert lifecycle.find_running_android_emulator("Pixel_8_API_34") == (
        "emulator-5556",
        "Pixel_8_API_34",
    )


def test_find_running_android_emulator_any(host):
    host.running["emulator-5554"] = "Pixel_7_API_34"
    assert lifecycle.find_running_android_emulator("") == ("emulator-5554", "Pixel_7_API_34")


def test_is_android_emulator_running(host):
    host.running["emulator-5554"] = "Pixel_7_API_34"
    assert lifecycle.is_android_emulator_running("Pixel_7_API_34") is True
    assert lifecycle.is_android_emulator_running("non-existent-emulator") is False


def test_is_android_emulator_running_without_adb(host):
    host.missing.add("adb")
    assert lifecycle.is_android_emulator_running("Pixel_7_API_34") is False


# --- iOS operations ---


def test_start_ios_simulator_boots_and_remembers(host):
    assert lifecycle.start_ios_simulator("iPhone 15") is True
    assert ["xcrun", "simctl", "boot", SIM_UDID] in host.calls
    assert ["open", "-a", "Simulator"] in host.calls
    last = get_last_started_device()
    assert (last.name, last.udid, last.state) == ("iPhone 15", SIM_UDID, "Booted")


def test_start_ios_simulator_boot_failure(host, capsys):
    host.failing.add(("xcrun", "simctl", "boot"))
    assert lifecycle.start_ios_simulator("iPhone 15") is False
    assert "Error starting iOS simulator" in capsys.readouterr().out
    assert get_last_started_device() is None


def test_start_ios_simulator_open_failure_is_warning(host, capsys):
    host.missing.add("open")
    assert lifecycle.start_ios_simulator("iPhone 15") is True
    assert "Warning: Could not open Simulator app" in capsys.readouterr().out


def test_stop_ios_simulator(host):
    assert lifecycle.stop_ios_simulator("non-existent-device") is False
    assert lifecycle.stop_ios_simulator("iPhone 15") is True
    assert ["xcrun", "simctl", "shutdown", SIM_UDID] in host.calls


def test_stop_ios_simulator_failure(host):
    host.failing.add(("xcrun", "simctl", "shutdown"))
    assert lifecycle.stop_ios_simulator("iPhone 15") is False


def test_shutdown_ios_simulator(host):
    assert lifecycle.shutdown_ios_simulator("non-existent-device") is False
    assert lifecycle.shutdown_ios_simulator(SIM_UDID) is True


def test_restart_ios_simulator_order(host):
    assert lifecycle.restart_ios_simulator("non-existent-device") is False
    assert lifecycle.restart_ios_simulator("iPhone 15") is True
    simctl = [c[2] for c in host.calls if c[:2] == ["xcrun", "simctl"] and c[2] != "list"]
    assert simctl == ["shutdown", "boot"]


def test_restart_ios_simulator_ignores_shutdown_failure(host):
    host.failing.add(("xcrun", "simctl", "shutdown"))
    assert lifecycle.restart_ios_simulator("iPhone 15") is True
    assert get_last_started_device().state == "Booted"


def test_delete_ios_simulator(host):
    assert lifecycle.delete_ios_simulator("non-existent-device") is False
    assert lifecycle.delete_ios_simulator("iPad Air") is True
    assert [s["name"] for s in host.simulators] == ["iPhone 15"]


def test_delete_ios_simulator_failure(host):
    host.failing.add(("xcrun", "simctl", "delete"))
    assert lifecycle.delete_ios_simulator("iPad Air") is False


# --- Android operations ---


def test_start_android_emulator_launches(host):
    assert lifecycle.start_android_emulator("Pixel_7_API_34") is True
    assert host.launched == [["emulator", "-avd", "Pixel_7_API_34"]]
    last = get_last_started_device()
    assert (last.name, last.udid, last.type) == ("Pixel_7_API_34", "starting", "Android Emulator")


def test_start_android_emulator_already_running(host, capsys):
    host.running["emulator-5554"] = "Pixel_7_API_34"
    assert lifecycle.start_android_emulator("Pixel_7_API_34") is True
    assert host.launched == []
    assert "already running" in capsys.readouterr().out
    assert get_last_started_device().udid == "emulator-5554"


def test_start_android_emulator_unknown(host):
    assert lifecycle.start_android_emulator("non-existent-emulator") is False
    assert host.launched == []


def test_start_android_emulator_launch_failure(host, monkeypatch):
    def refuse(*args, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", "emulator")

    monkeypatch.setattr(subprocess, "Popen", refuse)
    assert lifecycle.start_android_emulator("Pixel_7_API_34") is False


def test_stop_android_emulator(host):
    assert lifecycle.stop_android_emulator("non-existent-emulator") is False
    host.running["emulator-5554"] = "Pixel_7_API_34"
    assert lifecycle.stop_android_emulator("Pixel_7_API_34") is True
    assert host.running == {}


def test_restart_android_emulator(host):
    assert lifecycle.restart_android_emulator("non-existent-emulator") is False
    host.running["emulator-5554"] = "Pixel_7_API_34"
    assert lifecycle.restart_android_emulator("Pixel_7_API_34") is True
    assert ["adb", "-s", "emulator-5554", "emu", "kill"] in host.calls
    assert host.launched == [["emulator", "-avd", "Pixel_7_API_34"]]
    assert get_last_started_device().udid == "restarting"


def test_delete_android_emulator(host):
    assert lifecycle.delete_android_emulator("non-existent-emulator") is False
    host.running["emulator-5554"] = "Pixel_8_API_34"
    assert lifecycle.delete_android_emulator("Pixel_8_API_34") is True
    assert host.avds == ["Pixel_7_API_34"]
    assert host.running == {}


def test_delete_android_emulator_failure(host):
    host.failing.add(("avdmanager",))
    assert lifecycle.delete_android_emulator("Pixel_8_API_34") is False
    assert "Pixel_8_API_34" in host.avds


# --- commands ---


def test_start_device_prefers_ios_on_darwin(host, darwin):
    assert lifecycle.start_device("iPhone 15") is True
    assert host.launched == []


def test_start_device_skips_ios_elsewhere(host, linux, capsys):
    assert lifecycle.start_device("iPhone 15") is False
    assert not any(c[0] == "xcrun" for c in host.calls)
    assert "Device 'iPhone 15' not found or failed to start" in capsys.readouterr().out


def test_start_device_android(host, linux):
    assert lifecycle.start_device("Pixel_8_API_34") is True
    assert host.launched == [["emulator", "-avd", "Pixel_8_API_34"]]


def test_start_device_lts_without_last(host, capsys):
    assert lifecycle.start_device("lts") is False
    assert "No last started device found" in capsys.readouterr().out


def test_start_device_lts_uses_last_name(host, linux, capsys):
    save_last_started_device(
        Device(name="Pixel_7_API_34", udid="emulator-5554", state="Booted", type="Android Emulator")
    )
    assert lifecycle.start_device("lts") is True
    assert host.launched == [["emulator", "-avd", "Pixel_7_API_34"]]
    assert "Starting last device: Pixel_7_API_34 (Android Emulator)" in capsys.readouterr().out


def test_start_last_device_none(host, capsys):
    assert lifecycle.start_last_device() is False
    assert host.launched == []


def test_start_last_device_ios(host, darwin):
    save_last_started_device(
        Device(name="iPad Air", udid=OTHER_UDID, state="Shutdown", type="iOS Simulator")
    )
    assert lifecycle.start_last_device() is True
    assert ["xcrun", "simctl", "boot", OTHER_UDID] in host.calls


def test_stop_device_not_found(host, darwin, capsys):
    assert lifecycle.stop_device("non-existent-device") is False
    assert "Device 'non-existent-device' not found or failed to stop" in capsys.readouterr().out


def test_stop_device_android(host, linux):
    host.running["emulator-5554"] = "Pixel_7_API_34"
    assert lifecycle.stop_device("Pixel_7_API_34") is True


def test_shutdown_device(host, darwin, capsys):
    assert lifecycle.shutdown_device("iPhone 15") is True
    assert lifecycle.shutdown_device("non-existent-device") is False
    assert "failed to shutdown" in capsys.readouterr().out


def test_restart_device(host, darwin, capsys):
    assert lifecycle.restart_device("iPhone 15") is True
    assert lifecycle.restart_device("non-existent-device") is False
    assert "failed to restart" in capsys.readouterr().out


def test_delete_device(host, linux, capsys):
    assert lifecycle.delete_device("Pixel_7_API_34") is True
    assert lifecycle.delete_device("non-existent-device") is False
    assert "failed to delete" in capsys.readouterr().out


# --- last device ---


def test_show_last_device_none(home, capsys):
    assert lifecycle.show_last_device() is None
    assert "No last started device found. Start a device first." in capsys.readouterr().out


def test_show_last_device_prints_details(home, capsys):
    save_last_started_device(
        Device(
            name="Test Last Device",
            udid="test-last-udid",
            state="Booted",
            type="iOS Simulator",
            runtime="iOS 17.0",
        )
    )
    device = lifecycle.show_last_device()
    assert device.name == "Test Last Device"
    out = capsys.readouterr().out
    assert "  Name: Test Last Device" in out
    assert "  UDID: test-last-udid" in out
    assert "  Runtime: iOS 17.0" in out


def test_show_last_device_without_runtime(home, capsys):
    save_last_started_device(Device(name="Plain", udid="plain-udid", state="", type="iOS Simulator"))
    assert lifecycle.show_last_device().udid == "plain-udid"
    assert "Runtime" not in capsys.readouterr().out


def test_show_last_device_corrupted_config(home, capsys):
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("invalid json {", encoding="utf-8")
    assert lifecycle.show_last_device() is None
    assert "Error getting last started device" in capsys.readouterr().out


def test_last_device_round_trip_after_start(host):
    assert get_last_started_device() is None
    assert lifecycle.start_ios_simulator(SIM_UDID) is True
    assert get_last_started_device().name == "iPhone 15"