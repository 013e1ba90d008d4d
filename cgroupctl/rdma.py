"""The rdma controller: limits on RDMA handles and objects per device."""

from __future__ import annotations

import os
from collections.abc import Iterable

from .control import (
    DEFAULT_DIR_PERM,
    Name,
    Subsystem,
    _join_path,
    parse_uint,
    retrying_write_file,
)
from .metrics import Metrics, RdmaEntry, RdmaStat
from .resources import LinuxRdma, LinuxResources

_UINT32_MAX = (1 << 32) - 1


def create_cmd_string(device: str, limits: LinuxRdma) -> str:
    """Format the limits of ``device`` as written to rdma.max."""
    parts = [device]
    if limits.hca_handles is not None:
        parts.append(f"hca_handle={limits.hca_handles}")
    if limits.hca_objects is not None:
        parts.append(f"hca_object={limits.hca_objects}")
    return " ".join(parts)


def _parse_rdma_kv(raw: str, entry: RdmaEntry) -> None:
    parts = raw.split("=")
    if len(parts) != 2:
        return
    key, text = parts
    if text == "max":
        value = _UINT32_MAX
    else:
        try:
            value = parse_uint(text)
        except ValueError:
            return
        if value > _UINT32_MAX:
            return
    if key == "hca_handle":
        entry.hca_handles = value
    elif key == "hca_object":
        entry.hca_objects = value


def to_rdma_entries(lines: Iterable[str]) -> list[RdmaEntry]:
    """Parse ``device hca_handle=N hca_object=M`` lines, skipping malformed ones."""
    entries = []
    for line in lines:
        parts = line.split()
        if len(parts) != 3:
            continue
        entry = RdmaEntry(device=parts[0])
        _parse_rdma_kv(parts[1], entry)
        _parse_rdma_kv(parts[2], entry)
        entries.append(entry)
    return entries


class RdmaController(Subsystem):
    """RDMA subsystem."""

    name = Name.RDMA

    def __init__(self, root: str) -> None:
        super().__init__(root)

    def path(self, path: str) -> str:
        return _join_path(self.root, path)

    def create(self, path: str, resources: LinuxResources) -> None:
        """Create the cgroup directory and write the first device limit that is set."""
        directory = self.path(path)
        os.makedirs(directory, DEFAULT_DIR_PERM, exist_ok=True)
        for device, limit in resources.rdma.items():
            if device and (limit.hca_handles is not None or limit.hca_objects is not None):
                retrying_write_file(
                    _join_path(directory, "rdma.max"), create_cmd_string(device, limit)
                )
                return

    def update(self, path: str, resources: LinuxResources) -> None:
        self.create(path, resources)

    def stat(self, path: str, stats: Metrics) -> None:
        """Fill ``stats.rdma`` unless the devices changed between the two reads."""
        directory = self.path(path)
        with open(_join_path(directory, "rdma.current"), encoding="utf-8") as handle:
            current = handle.read().split("\n")
        with open(_join_path(directory, "rdma.max"), encoding="utf-8") as handle:
            maximum = handle.read().split("\n")
        if len(current) != len(maximum):
            return
        stats.rdma = RdmaStat(current=to_rdma_entries(current), limit=to_rdma_entries(maximum))