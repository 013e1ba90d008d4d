"""Errors raised by cgroup operations and the checks run on subsystems."""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass
from typing import Any, Callable


class CgroupError(Exception):
    """Base class of cgroup errors."""

    default_message = "cgroups: error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InvalidPidError(CgroupError):
    default_message = "cgroups: pid must be greater than 0"


class MountPointNotExistError(CgroupError):
    default_message = "cgroups: cgroup mountpoint does not exist"


class InvalidFormatError(CgroupError):
    default_message = "cgroups: parsing file with invalid format failed"


class FreezerNotSupportedError(CgroupError):
    default_message = "cgroups: freezer cgroup not supported on this system"


class MemoryNotSupportedError(CgroupError):
    default_message = "cgroups: memory cgroup not supported on this system"


class CgroupDeletedError(CgroupError):
    default_message = "cgroups: cgroup deleted"


class NoCgroupMountDestinationError(CgroupError):
    default_message = "cgroups: cannot find cgroup mount destination"


class ControllerNotActiveError(CgroupError):
    default_message = "controller is not supported"


class DevicesRequiredError(CgroupError):
    default_message = "devices subsystem is required"


class IgnoreSubsystem(Exception):
    """Raised by an init check to skip a subsystem that is not active."""

    def __init__(self, message: str = "skip subsystem") -> None:
        super().__init__(message)


def ignore_not_exist(err: BaseException) -> BaseException | None:
    """Error handler that drops errors about missing files."""
    if isinstance(err, FileNotFoundError):
        return None
    return err


def _check_required(subsystem: Any, required: Collection[str]) -> None:
    """Fail for a required subsystem, skip any other."""
    if str(subsystem.name) in required:
        raise DevicesRequiredError()
    raise IgnoreSubsystem()


def allow_any(subsystem: Any, path: Any, err: BaseException) -> None:
    """Init check that skips any inactive subsystem."""
    _check_required(subsystem, frozenset())


def require_devices(subsystem: Any, path: Any, err: BaseException) -> None:
    """Init check that requires the devices subsystem and skips the others."""
    _check_required(subsystem, frozenset({"devices"}))


@dataclass
class InitConfig:
    """Options for creating or loading a cgroup."""

    init_check: Callable[[Any, Any, BaseException], None] | None = require_devices