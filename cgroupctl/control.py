"""Core types and file helpers shared by the cgroup v1 controllers."""

from __future__ import annotations

import os
import posixpath
import re
from dataclasses import dataclass
from enum import Enum

from .errors import InvalidFormatError

CGROUP_PROCS = "cgroup.procs"
CGROUP_TASKS = "tasks"
DEFAULT_DIR_PERM = 0o755
DEFAULT_FILE_PERM = 0o644

_UNSIGNED = re.compile(r"[0-9]+")
_NEGATIVE = re.compile(r"-[0-9]+")
_UINT64_MAX = (1 << 64) - 1


class Name(str, Enum):
    """Names of the cgroup v1 subsystems."""

    BLKIO = "blkio"
    CPU = "cpu"
    CPUACCT = "cpuacct"
    CPUSET = "cpuset"
    DEVICES = "devices"
    FREEZER = "freezer"
    HUGETLB = "hugetlb"
    MEMORY = "memory"
    NET_CLS = "net_cls"
    NET_PRIO = "net_prio"
    PERF_EVENT = "perf_event"
    PIDS = "pids"
    RDMA = "rdma"

    def __str__(self) -> str:
        return self.value


class State(str, Enum):
    """Freezer state of a cgroup."""

    UNKNOWN = ""
    THAWED = "thawed"
    FROZEN = "frozen"
    FREEZING = "freezing"
    DELETED = "deleted"

    def __str__(self) -> str:
        return self.value


@dataclass
class Process:
    """A process or task found inside a cgroup."""

    pid: int
    subsystem: str = ""
    path: str = ""


def _join_path(*parts: str) -> str:
    """Join path elements and clean the result, keeping absolute elements joined."""
    joined = "/".join(str(p) for p in parts if p)
    if not joined:
        return ""
    cleaned = posixpath.normpath(joined)
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


class Subsystem:
    """A controller mounted in its own directory below a cgroup root."""

    name: str

    def __init__(self, root: str) -> None:
        self.root = _join_path(root, str(self.name))

    def path(self, path: str) -> str:
        """Return the directory of the cgroup ``path`` in this subsystem."""
        return _join_path(self.root, path)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={str(self.name)!r}, root={self.root!r})"


def retrying_write_file(path: str, data: bytes | str) -> None:
    """Write ``data`` to ``path`` as one file, retrying on interrupted calls."""
    payload = data.encode() if isinstance(data, str) else bytes(data)
    while True:
        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, DEFAULT_FILE_PERM)
            try:
                view = memoryview(payload)
                while view:
                    written = os.write(fd, view)
                    view = view[written:]
            finally:
                os.close(fd)
            return
        except InterruptedError:
            continue


def parse_uint(text: str) -> int:
    """Parse an unsigned 64-bit decimal; negative integers read as 0."""
    if _UNSIGNED.fullmatch(text):
        value = int(text)
        if value <= _UINT64_MAX:
            return value
        raise ValueError(f"value out of range: {text!r}")
    if _NEGATIVE.fullmatch(text):
        return 0
    raise ValueError(f"invalid unsigned integer: {text!r}")


def read_uint(path: str) -> int:
    """Read a file holding a single unsigned integer."""
    with open(path, encoding="utf-8") as handle:
        return parse_uint(handle.read().strip())


def parse_kv(line: str) -> tuple[str, int]:
    """Split a ``key value`` line into its key and unsigned value."""
    parts = line.split()
    if len(parts) != 2:
        raise InvalidFormatError()
    return parts[0], parse_uint(parts[1])