"""The cpuacct controller: CPU time accounting."""

from __future__ import annotations

import os
import re

from .control import Name, Subsystem, _join_path, read_uint
from .errors import InvalidFormatError
from .metrics import CPUStat, Metrics

NANOSECONDS_IN_SECOND = 1_000_000_000

_UINT64_MAX = (1 << 64) - 1
_DIGITS = re.compile(r"[0-9]+")


def _clock_ticks() -> int:
    try:
        ticks = os.sysconf("SC_CLK_TCK")
    except (ValueError, OSError, AttributeError):
        return 100
    return ticks if ticks > 0 else 100


CLOCK_TICKS = _clock_ticks()


def _uint64(text: str) -> int:
    if not _DIGITS.fullmatch(text):
        raise ValueError(f"invalid unsigned integer: {text!r}")
    value = int(text)
    if value > _UINT64_MAX:
        raise ValueError(f"value out of range: {text!r}")
    return value


class CpuacctController(Subsystem):
    """CPU accounting subsystem."""

    name = Name.CPUACCT

    def __init__(self, root: str) -> None:
        super().__init__(root)

    def path(self, path: str) -> str:
        return _join_path(self.root, path)

    def stat(self, path: str, stats: Metrics) -> None:
        """Fill the usage section of ``stats.cpu``."""
        user, kernel = self.get_usage(path)
        total = read_uint(_join_path(self.path(path), "cpuacct.usage"))
        per_cpu = self.percpu_usage(path)
        if stats.cpu is None:
            stats.cpu = CPUStat()
        usage = stats.cpu.usage
        usage.total = total
        usage.user = user
        usage.kernel = kernel
        usage.per_cpu = per_cpu

    def percpu_usage(self, path: str) -> list[int]:
        """Return the usage of each CPU from cpuacct.usage_percpu."""
        file_name = _join_path(self.path(path), "cpuacct.usage_percpu")
        with open(file_name, encoding="utf-8") as handle:
            return [_uint64(value) for value in handle.read().split()]

    def get_usage(self, path: str) -> tuple[int, int]:
        """Return (user, kernel) time in nanoseconds from cpuacct.stat."""
        stat_path = _join_path(self.path(path), "cpuacct.stat")
        with open(stat_path, encoding="utf-8") as handle:
            fields = handle.read().split()
        if len(fields) != 4:
            raise InvalidFormatError(f"{stat_path!r} is expected to have 4 fields")
        values = []
        for index, name in ((0, "user"), (2, "system")):
            if fields[index] != name:
                raise InvalidFormatError(
                    f"expected field {name!r} but found {fields[index]!r} in {stat_path!r}"
                )
            values.append(_uint64(fields[index + 1]))
        user, kernel = values
        return (
            user * NANOSECONDS_IN_SECOND // CLOCK_TICKS,
            kernel * NANOSECONDS_IN_SECOND // CLOCK_TICKS,
        )