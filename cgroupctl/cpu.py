"""The cpu controller: CFS and realtime scheduling settings and throttling stats."""

from __future__ import annotations

import os

from .control import (
    DEFAULT_DIR_PERM,
    Name,
    Subsystem,
    _join_path,
    parse_kv,
    retrying_write_file,
)
from .metrics import CPUStat, Metrics
from .resources import LinuxResources


class CpuController(Subsystem):
    """CPU scheduling subsystem."""

    name = Name.CPU

    def __init__(self, root: str) -> None:
        super().__init__(root)

    def path(self, path: str) -> str:
        return _join_path(self.root, path)

    def create(self, path: str, resources: LinuxResources) -> None:
        """Create the cgroup directory and apply the CPU settings that are set."""
        directory = self.path(path)
        os.makedirs(directory, DEFAULT_DIR_PERM, exist_ok=True)
        cpu = resources.cpu
        if cpu is None:
            return
        settings = (
            ("rt_period_us", cpu.realtime_period),
            ("rt_runtime_us", cpu.realtime_runtime),
            ("shares", cpu.shares),
            ("cfs_period_us", cpu.period),
            ("cfs_quota_us", cpu.quota),
        )
        for name, value in settings:
            if value is not None:
                retrying_write_file(_join_path(directory, "cpu." + name), str(value))

    def update(self, path: str, resources: LinuxResources) -> None:
        self.create(path, resources)

    def stat(self, path: str, stats: Metrics) -> None:
        """Fill the throttling counters of ``stats.cpu`` from cpu.stat."""
        with open(_join_path(self.path(path), "cpu.stat"), encoding="utf-8") as handle:
            lines = handle.read().splitlines()
        if stats.cpu is None:
            stats.cpu = CPUStat()
        throttling = stats.cpu.throttling
        for line in lines:
            key, value = parse_kv(line)
            if key == "nr_periods":
                throttling.periods = value
            elif key == "nr_throttled":
                throttling.throttled_periods = value
            elif key == "throttled_time":
                throttling.throttled_time = value