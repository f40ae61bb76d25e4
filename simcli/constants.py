"""Shared constants and error types."""

DARWIN_OS = "darwin"

STATE_BOOTED = "Booted"
STATE_SHUTDOWN = "Shutdown"

TYPE_IOS_SIMULATOR = "iOS Simulator"
TYPE_ANDROID_EMULATOR = "Android Emulator"

PLATFORM_IOS = "ios"
PLATFORM_ANDROID = "android"

EXT_PNG = ".png"
EXT_MP4 = ".mp4"
EXT_GIF = ".gif"

CMD_XCRUN = "xcrun"
CMD_SIMCTL = "simctl"
CMD_ADB = "adb"
CMD_EMULATOR = "emulator"
CMD_AVDMANAGER = "avdmanager"
CMD_FFMPEG = "ffmpeg"
CMD_OSASCRIPT = "osascript"

PREFIX_SCREENSHOT = "screenshot"
PREFIX_RECORDING = "recording"


class SimCliError(Exception):
    """Base class for every error raised by simcli."""

    default_message = "sim-cli error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class NoRunningIOSSimulatorError(SimCliError):
    default_message = "no running iOS simulator found"


class NoRunningAndroidEmulatorError(SimCliError):
    default_message = "no running Android emulator found"


class IOSSimulatorNotRunningError(SimCliError):
    default_message = "iOS simulator not found or not running"


class AndroidEmulatorNotRunningError(SimCliError):
    default_message = "android emulator not found or not running"


class DeviceNotRunningError(SimCliError):
    default_message = (
        "device not found or not a running iOS simulator or Android emulator"
    )


class NoActiveDeviceError(SimCliError):
    default_message = "no active iOS simulator or Android emulator found"


class FFmpegNotInstalledError(SimCliError):
    default_message = (
        "ffmpeg is not installed. Please install ffmpeg to use the GIF "
        "conversion feature"
    )