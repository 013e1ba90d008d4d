"""Functions that map a subsystem name to the cgroup path inside it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .control import Subsystem, _join_path

CgroupPath = Callable[[str], str]
Hierarchy = Callable[[], list[Subsystem]]


@dataclass(frozen=True)
class _FixedPath:
    """A path function with one outcome for every subsystem."""

    path: str = ""
    error: BaseException | None = None

    def __call__(self, subsystem: str) -> str:
        if self.error is not None:
            raise self.error
        return self.path


_ROOT = _FixedPath(path="/")


def root_path(subsystem: str) -> str:
    """Place the cgroup at the root of every subsystem."""
    return _ROOT(subsystem)


def static_path(path: str) -> CgroupPath:
    """Return a path function giving the same path for every subsystem."""
    return _FixedPath(path=path)


def sub_path(path: CgroupPath, sub_name: str) -> CgroupPath:
    """Return a path function for the child ``sub_name`` of ``path``."""

    def _path(subsystem: str) -> str:
        return _join_path(path(subsystem), sub_name)

    return _path


def error_path(err: BaseException) -> CgroupPath:
    """Return a path function that always raises ``err``."""
    return _FixedPath(error=err)