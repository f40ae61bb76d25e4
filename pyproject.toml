[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "simcli"
version = "1.2.0"
description = "Command-line tool to manage iOS simulators and Android emulators"
requires-python = ">=3.10"
dependencies = [
    "tabulate",
]
keywords = [
    "ios",
    "android",
    "simulator",
    "emulator",
    "simctl",
    "adb",
    "avd",
    "screenshot",
    "screen-recording",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: MacOS",
    "Operating System :: POSIX :: Linux",
    "Operating System :: Microsoft :: Windows",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Testing",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
sim = "simcli.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["simcli"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
