"""The pids controller: limits on the number of processes."""

from __future__ import annotations

import os

from .control import (
    DEFAULT_DIR_PERM,
    Name,
    Subsystem,
    _join_path,
    parse_uint,
    read_uint,
    retrying_write_file,
)
from .metrics import Metrics, PidsStat
from .resources import LinuxResources


class PidsController(Subsystem):
    """Process number subsystem."""

    name = Name.PIDS

    def __init__(self, root: str) -> None:
        super().__init__(root)

    def path(self, path: str) -> str:
        return _join_path(self.root, path)

    def create(self, path: str, resources: LinuxResources) -> None:
        """Create the cgroup directory and write pids.max when a limit is set."""
        directory = self.path(path)
        os.makedirs(directory, DEFAULT_DIR_PERM, exist_ok=True)
        if resources.pids is not None and resources.pids.limit > 0:
            retrying_write_file(_join_path(directory, "pids.max"), str(resources.pids.limit))

    def update(self, path: str, resources: LinuxResources) -> None:
        self.create(path, resources)

    def stat(self, path: str, stats: Metrics) -> None:
        """Fill ``stats.pids``; a limit of ``max`` reads as 0."""
        directory = self.path(path)
        current = read_uint(_join_path(directory, "pids.current"))
        with open(_join_path(directory, "pids.max"), "rb") as handle:
            text = handle.read().decode("utf-8", errors="replace").strip()
        limit = 0 if text == "max" else parse_uint(text)
        stats.pids = PidsStat(current=current, limit=limit)