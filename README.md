# simcli

`sim` is a small command-line tool for managing iOS simulators and Android
emulators from one place. It drives the platform tools (`xcrun simctl`,
`emulator`, `adb`, `avdmanager`) through a handful of short commands.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

Requirements at run time:

- **iOS simulators** (macOS only): Xcode command-line tools, so that
  `xcrun simctl` works.
- **Android emulators**: the Android SDK's `emulator`, `adb` and `avdmanager`
  on your `PATH`.
- **GIF conversion** (optional): `ffmpeg` on your `PATH`.
- **Clipboard** (optional): on macOS `osascript`; on Windows `clip`; elsewhere
  one of `xsel`, `xclip`, `wl-copy` or `termux-clipboard-set`.

## Usage

```
sim                         # banner and version
sim --version               # print the version (also -v)
sim help [command]          # help for the tool or for one command
sim list                    # list simulators and emulators (aliases: l, ls)
sim start "iPhone 15"       # start a device by name or UDID (alias: s)
sim start lts               # start the last started device
sim lts                     # same as 'sim start lts'
sim last                    # show the last started device
sim stop "iPhone 15"        # stop a running device (alias: st)
sim shutdown Pixel_7_API_34 # shut a device down (alias: sd)
sim restart Pixel_7_API_34  # restart a device (alias: r)
sim delete Pixel_7_API_34   # delete a device permanently (aliases: d, del)
```

Devices are looked up first among iOS simulators (on macOS only) and then
among Android virtual devices. iOS names match case-insensitively; a
36-character UDID can be given instead of a name. Android devices are matched
by their AVD name.

`sim list` prints a table with the columns Type, Name, State, UDID and
Runtime. iOS runtimes are shown in short form (for example `iOS 17.0`).
Running emulators are listed first, followed by the other known AVDs in
alphabetical order with the UDID `N/A`.

Starting an iOS simulator boots it and opens the Simulator app. Starting an
Android emulator launches `emulator -avd <name>` in the background. If that
AVD is already running, `sim` only reports this.

### Screenshots and recordings

```
sim screenshot                          # active device, auto-named PNG
sim screenshot "iPhone 15" shot.png     # given device and file
sim screenshot out.png --copy           # copy the image to the clipboard
sim record                              # record until Ctrl+C
sim record Pixel_7_API_34 demo.mp4 -d 10
sim record --gif --copy                 # convert to GIF, then copy it
```

Aliases: `ss` and `shot` for `screenshot`, `rec` for `record`.

Options of `record`:

- `-d N`, `--duration N`: stop after N seconds. The default is 0, which records
  until Ctrl+C.
- `-g`, `--gif`: convert the recording to a GIF with `ffmpeg` (10 fps, 480
  pixels wide) and remove the MP4.
- `-c`, `--copy`: copy the result to the clipboard.

`screenshot` accepts `-c`, `--copy` as well.

When no device is given, `sim` uses the first booted iOS simulator (on macOS)
or else the first running Android emulator. If the first argument does not
name a device, it is taken as the output file. When no output file is given,
the file is named `screenshot_<device>_<YYYYMMDD_HHMMSS>.png` or
`recording_<device>_<YYYYMMDD_HHMMSS>.mp4`, with spaces in the device name
replaced by underscores. A file name with a different extension gets `.png` or
`.mp4` instead.

On macOS, copying a PNG puts the image itself on the clipboard, and other
files are copied as file references. On other systems the file's path is
copied as text.

When a command fails, `sim` prints `Error: <message>` to standard error and
exits with status 1.

## Configuration

The last started device is stored in `~/.sim-cli/config.json`. If no home
directory can be found, the file is kept in the system temporary directory
instead. The file is created readable and writable by its owner only.

## Using it from Python

The commands are plain functions:

- `simcli.devices`: `Device`, `get_ios_simulators()`, `get_android_emulators()`,
  `format_runtime()`, `render_device_table()`, `list_devices()`.
- `simcli.lifecycle`: `start_device()`, `stop_device()`, `shutdown_device()`,
  `restart_device()`, `delete_device()`, `show_last_device()`,
  `start_last_device()`. Each returns whether it succeeded.
- `simcli.media`: `take_screenshot()`, `record_screen()`, `get_capturer()`,
  `IOSSimulator`, `AndroidEmulator`.
- `simcli.config`: `Config`, `load_config()`, `save_config()`,
  `get_last_started_device()`, `save_last_started_device()`.
- `simcli.utils`: `generate_filename()`, `ensure_extension()`,
  `convert_to_gif()`, `copy_file_to_clipboard()`.
- `simcli.cli`: `build_parser()`, `main()`.

Errors are raised as subclasses of `simcli.constants.SimCliError`.

## What it does not do

`sim` works only with devices that already exist. It does not create new
simulators or Android virtual devices, and it does not install SDKs or
runtimes.