"""The cpuset controller: CPU and memory node placement."""

from __future__ import annotations

import os
import posixpath

from .control import (
    DEFAULT_DIR_PERM,
    Name,
    Subsystem,
    _join_path,
    retrying_write_file,
)
from .errors import CgroupError
from .resources import LinuxResources


def _read_optional(path: str) -> bytes:
    try:
        with open(path, "rb") as handle:
            return handle.read()
    except FileNotFoundError:
        return b""


def _get_values(path: str) -> tuple[bytes, bytes]:
    return (
        _read_optional(_join_path(path, "cpuset.cpus")),
        _read_optional(_join_path(path, "cpuset.mems")),
    )


def _is_empty(data: bytes) -> bool:
    return len(data.strip(b"\n")) == 0


class CpusetController(Subsystem):
    """CPU and memory node placement subsystem."""

    name = Name.CPUSET

    def __init__(self, root: str) -> None:
        super().__init__(root)

    def path(self, path: str) -> str:
        return _join_path(self.root, path)

    def create(self, path: str, resources: LinuxResources) -> None:
        """Create the cgroup, inheriting cpus and mems from its parents."""
        directory = self.path(path)
        self.ensure_parent(directory, self.root)
        os.makedirs(directory, DEFAULT_DIR_PERM, exist_ok=True)
        self.copy_if_needed(directory, posixpath.dirname(directory))
        cpu = resources.cpu
        if cpu is None:
            return
        for name, value in (("cpus", cpu.cpus), ("mems", cpu.mems)):
            if value:
                retrying_write_file(_join_path(directory, "cpuset." + name), value)

    def update(self, path: str, resources: LinuxResources) -> None:
        self.create(path, resources)

    def ensure_parent(self, current: str, root: str) -> None:
        """Create the parents of ``current`` up to ``root``, populating cpus and mems."""
        parent = posixpath.dirname(current)
        if posixpath.isabs(root) != posixpath.isabs(parent):
            return
        if parent == current:
            raise CgroupError("cpuset: cgroup parent path outside cgroup root")
        if posixpath.normpath(parent) != root:
            self.ensure_parent(parent, root)
        os.makedirs(current, DEFAULT_DIR_PERM, exist_ok=True)
        self.copy_if_needed(current, parent)

    def copy_if_needed(self, current: str, parent: str) -> None:
        """Copy cpuset.cpus and cpuset.mems from ``parent`` where ``current``'s are empty."""
        current_cpus, current_mems = _get_values(current)
        parent_cpus, parent_mems = _get_values(parent)
        if _is_empty(current_cpus):
            retrying_write_file(_join_path(current, "cpuset.cpus"), parent_cpus)
        if _is_empty(current_mems):
            retrying_write_file(_join_path(current, "cpuset.mems"), parent_mems)