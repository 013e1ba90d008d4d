"""The devices controller: device access rules."""

from __future__ import annotations

import dataclasses
import os

from .control import DEFAULT_DIR_PERM, Name, Subsystem, _join_path, retrying_write_file
from .resources import LinuxDeviceCgroup, LinuxResources

ALLOW_DEVICE_FILE = "devices.allow"
DENY_DEVICE_FILE = "devices.deny"
WILDCARD = -1


def _device_number(number: int | None) -> str:
    if number is None or number == WILDCARD:
        return "*"
    return str(number)


def device_string(device: LinuxDeviceCgroup) -> str:
    """Format a rule as written to devices.allow or devices.deny."""
    return (
        f"{device.type} {_device_number(device.major)}:"
        f"{_device_number(device.minor)} {device.access}"
    )


class DevicesController(Subsystem):
    """Device access subsystem."""

    name = Name.DEVICES

    def __init__(self, root: str) -> None:
        super().__init__(root)

    def path(self, path: str) -> str:
        return _join_path(self.root, path)

    def create(self, path: str, resources: LinuxResources) -> None:
        """Create the cgroup directory and write each device rule."""
        directory = self.path(path)
        os.makedirs(directory, DEFAULT_DIR_PERM, exist_ok=True)
        for device in resources.devices:
            file_name = ALLOW_DEVICE_FILE if device.allow else DENY_DEVICE_FILE
            if not device.type:
                device = dataclasses.replace(device, type="a")
            retrying_write_file(_join_path(directory, file_name), device_string(device))

    def update(self, path: str, resources: LinuxResources) -> None:
        self.create(path, resources)