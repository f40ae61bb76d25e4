"""File naming, clipboard and video conversion helpers."""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
from datetime import datetime

from .constants import CMD_FFMPEG, CMD_OSASCRIPT, DARWIN_OS, EXT_PNG, FFmpegNotInstalledError, SimCliError


def _extension(path: str) -> str:
    """Return the extension of the last path element, dot included."""
    separator = max(path.rfind("/"), path.rfind(os.sep))
    dot = path.rfind(".")
    return path[dot:] if dot > separator else ""


def generate_filename(prefix: str, device_id: str, extension: str) -> str:
    """Build a timestamped file name for a capture of a device."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    sanitized = device_id.replace(" ", "_")
    return f"{prefix}_{sanitized}_{timestamp}{extension}"


def ensure_extension(filename: str, ext: str) -> str:
    """Give a file name the wanted extension, replacing any other one."""
    if filename.lower().endswith(ext):
        return filename
    current = _extension(filename)
    stem = filename[: -len(current)] if current else filename
    return stem + ext


def _clipboard_commands() -> list[list[str]]:
    if sys.platform == DARWIN_OS:
        return [["pbcopy"]]
    if sys.platform.startswith("win") or sys.platform == "cygwin":
        return [["clip"]]
    return [
        ["xsel", "--input", "--clipboard"],
        ["xclip", "-in", "-selection", "clipboard"],
        ["wl-copy"],
        ["termux-clipboard-set"],
    ]


def copy_to_clipboard(text: str) -> None:
    """Place text on the system clipboard."""
    for command in _clipboard_commands():
        if shutil.which(command[0]) is None:
            continue
        try:
            subprocess.run(command, input=text, text=True, capture_output=True, check=True)
        except (OSError, subprocess.CalledProcessError) as err:
            raise SimCliError(f"clipboard command {command[0]} failed: {err}") from err
        return
    raise SimCliError(
        "No clipboard utilities available. Please install xsel, xclip, "
        "wl-copy or Termux:API add-on for termux-clipboard-get/set."
    )


def copy_file_to_clipboard(file_path: str) -> None:
    """Copy a file to the clipboard; PNG images go as pictures on macOS."""
    if sys.platform != DARWIN_OS:
        copy_to_clipboard(file_path)
        return

    if _extension(file_path).lower() == EXT_PNG:
        script = f'set the clipboard to (read (POSIX file "{file_path}") as TIFF picture)'
    else:
        script = f'set the clipboard to POSIX file "{file_path}"'
    try:
        subprocess.run([CMD_OSASCRIPT, "-e", script], capture_output=True, check=True)
    except (OSError, subprocess.CalledProcessError) as err:
        raise SimCliError(f"failed to copy file to clipboard: {err}") from err


def command_exists(cmd: str) -> bool:
    """Tell whether a program can be found on the search path."""
    return shutil.which(cmd) is not None


def convert_to_gif(input_file: str, output_file: str) -> None:
    """Convert a video to an animated GIF with ffmpeg."""
    if not command_exists(CMD_FFMPEG):
        raise FFmpegNotInstalledError()

    print("Converting to GIF...")
    command = [
        CMD_FFMPEG,
        "-i",
        input_file,
        "-vf",
        "fps=10,scale=480:-1:flags=lanczos",
        "-c",
        "gif",
        "-f",
        "gif",
        output_file,
    ]
    try:
        result = subprocess.run(command, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True)
    except OSError as err:
        raise SimCliError(f"failed to convert to GIF: {err}") from err
    if result.returncode != 0:
        raise SimCliError(
            f"failed to convert to GIF: exit status {result.returncode}\nOutput: {result.stdout}"
        )
    print(f"GIF saved to: {output_file}")