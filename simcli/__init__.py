"""Manage iOS simulators and Android emulators: list, start, stop, delete and capture screens."""

__version__ = "1.2.0"