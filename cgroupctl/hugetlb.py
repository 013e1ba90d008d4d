"""The hugetlb controller: huge page limits and usage."""

from __future__ import annotations

import os
from collections.abc import Iterable

from .control import (
    DEFAULT_DIR_PERM,
    Name,
    Subsystem,
    _join_path,
    read_uint,
    retrying_write_file,
)
from .metrics import HugetlbStat, Metrics
from .resources import LinuxResources

# (file suffix, attribute of HugetlbStat)
_STAT_FIELDS = (
    ("usage_in_bytes", "usage"),
    ("max_usage_in_bytes", "max"),
    ("failcnt", "failcnt"),
)


class HugetlbController(Subsystem):
    """Huge page subsystem for a fixed set of page sizes such as ``"2MB"``."""

    name = Name.HUGETLB

    def __init__(self, root: str, sizes: Iterable[str]) -> None:
        super().__init__(root)
        self.sizes = list(sizes)

    def path(self, path: str) -> str:
        return _join_path(self.root, path)

    def create(self, path: str, resources: LinuxResources) -> None:
        """Create the cgroup directory and write each huge page limit."""
        directory = self.path(path)
        os.makedirs(directory, DEFAULT_DIR_PERM, exist_ok=True)
        for limit in resources.hugepage_limits:
            file_name = f"hugetlb.{limit.pagesize}.limit_in_bytes"
            retrying_write_file(_join_path(directory, file_name), str(limit.limit))

    def stat(self, path: str, stats: Metrics) -> None:
        """Append one HugetlbStat per page size to ``stats.hugetlb``."""
        for size in self.sizes:
            stats.hugetlb.append(self._read_size_stat(path, size))

    def _read_size_stat(self, path: str, size: str) -> HugetlbStat:
        stat = HugetlbStat(pagesize=size)
        directory = self.path(path)
        for suffix, attr in _STAT_FIELDS:
            value = read_uint(_join_path(directory, f"hugetlb.{size}.{suffix}"))
            setattr(stat, attr, value)
        return stat