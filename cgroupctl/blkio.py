"""The blkio controller: block device weights, throttling and I/O statistics."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Iterator

from .control import (
    DEFAULT_DIR_PERM,
    Name,
    Subsystem,
    _join_path,
    retrying_write_file,
)
from .errors import InvalidFormatError
from .metrics import BlkIOEntry, BlkIOStat, Metrics
from .resources import LinuxBlockIO, LinuxResources

_UINT64_MAX = (1 << 64) - 1
_DIGITS = re.compile(r"[0-9]+")
_FIELD_SEPARATORS = re.compile(r"[ :]")

# (file name below "blkio.", attribute of BlkIOStat)
_CFQ_STATS = (
    ("sectors_recursive", "sectors_recursive"),
    ("io_service_bytes_recursive", "io_service_bytes_recursive"),
    ("io_serviced_recursive", "io_serviced_recursive"),
    ("io_queued_recursive", "io_queued_recursive"),
    ("io_service_time_recursive", "io_service_time_recursive"),
    ("io_wait_time_recursive", "io_wait_time_recursive"),
    ("io_merged_recursive", "io_merged_recursive"),
    ("time_recursive", "io_time_recursive"),
)
_THROTTLE_STATS = (
    ("throttle.io_serviced", "io_serviced_recursive"),
    ("throttle.io_service_bytes", "io_service_bytes_recursive"),
)


def _uint64(text: str) -> int:
    if not _DIGITS.fullmatch(text):
        raise ValueError(f"invalid unsigned integer: {text!r}")
    value = int(text)
    if value > _UINT64_MAX:
        raise ValueError(f"value out of range: {text!r}")
    return value


def _blkio_settings(blkio: LinuxBlockIO) -> Iterator[tuple[str, str]]:
    """Yield (file suffix, value) pairs for every setting that is present."""
    if blkio.weight is not None:
        yield "weight", str(blkio.weight)
    if blkio.leaf_weight is not None:
        yield "leaf_weight", str(blkio.leaf_weight)
    for wd in blkio.weight_device:
        if wd.weight is not None:
            yield "weight_device", f"{wd.major}:{wd.minor} {wd.weight}"
        if wd.leaf_weight is not None:
            yield "leaf_weight_device", f"{wd.major}:{wd.minor} {wd.leaf_weight}"
    throttles = (
        ("throttle.read_bps_device", blkio.throttle_read_bps_device),
        ("throttle.read_iops_device", blkio.throttle_read_iops_device),
        ("throttle.write_bps_device", blkio.throttle_write_bps_device),
        ("throttle.write_iops_device", blkio.throttle_write_iops_device),
    )
    for name, devices in throttles:
        for td in devices:
            yield name, f"{td.major}:{td.minor} {td.rate}"


def get_devices(lines: Iterable[str]) -> dict[tuple[int, int], str]:
    """Map (major, minor) to a /dev path from the lines of /proc/partitions.

    The two header lines are skipped; the first occurrence of a device wins.
    """
    devices: dict[tuple[int, int], str] = {}
    for number, line in enumerate(lines):
        if number < 2:
            continue
        fields = line.split()
        key = (int(fields[0]), int(fields[1]))
        if key in devices:
            continue
        devices[key] = _join_path("/dev", fields[3])
    return devices


class BlkioController(Subsystem):
    """Block I/O subsystem."""

    name = Name.BLKIO

    def __init__(self, root: str, proc_root: str = "/proc") -> None:
        super().__init__(root)
        self.proc_root = proc_root

    def path(self, path: str) -> str:
        return _join_path(self.root, path)

    def create(self, path: str, resources: LinuxResources) -> None:
        """Create the cgroup directory and apply the block I/O settings."""
        directory = self.path(path)
        os.makedirs(directory, DEFAULT_DIR_PERM, exist_ok=True)
        if resources.block_io is None:
            return
        for name, value in _blkio_settings(resources.block_io):
            retrying_write_file(_join_path(directory, "blkio." + name), value)

    def update(self, path: str, resources: LinuxResources) -> None:
        self.create(path, resources)

    def stat(self, path: str, stats: Metrics) -> None:
        """Fill ``stats.blkio`` from the CFQ files, falling back to throttle files."""
        stats.blkio = BlkIOStat()
        directory = self.path(path)
        settings: tuple[tuple[str, str], ...] = ()
        if os.path.lexists(_join_path(directory, "blkio.io_serviced_recursive")):
            settings = _CFQ_STATS

        with open(_join_path(self.proc_root, "partitions"), encoding="utf-8") as handle:
            devices = get_devices(handle.read().splitlines())

        size = 0
        for name, attr in settings:
            entries = getattr(stats.blkio, attr)
            entries.extend(self._read_entry(devices, path, name))
            size += len(entries)
        if size > 0:
            return

        # The cgroup may not use CFQ-scheduled devices; use the throttle files.
        for name, attr in _THROTTLE_STATS:
            getattr(stats.blkio, attr).extend(self._read_entry(devices, path, name))

    def _read_entry(
        self, devices: dict[tuple[int, int], str], path: str, name: str
    ) -> list[BlkIOEntry]:
        entries = []
        file_name = _join_path(self.path(path), "blkio." + name)
        with open(file_name, encoding="utf-8") as handle:
            lines = handle.read().splitlines()
        for line in lines:
            fields = [f for f in _FIELD_SEPARATORS.split(line) if f]
            if len(fields) < 3:
                if len(fields) == 2 and fields[0] == "Total":
                    continue
                raise InvalidFormatError(
                    f"invalid line found while parsing {path}: {line}"
                )
            major = _uint64(fields[0])
            minor = _uint64(fields[1])
            op = ""
            value_field = 2
            if len(fields) == 4:
                op = fields[2]
                value_field = 3
            entries.append(
                BlkIOEntry(
                    op=op,
                    device=devices.get((major, minor), ""),
                    major=major,
                    minor=minor,
                    value=_uint64(fields[value_field]),
                )
            )
        return entries