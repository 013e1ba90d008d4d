"""The memory controller: limits, statistics and event notifications."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum

from .control import (
    DEFAULT_DIR_PERM,
    Name,
    Subsystem,
    _join_path,
    parse_kv,
    read_uint,
    retrying_write_file,
)
from .errors import InvalidFormatError
from .metrics import MemoryEntry, MemoryOomControl, MemoryStat, Metrics
from .resources import LinuxMemory, LinuxResources


class MemoryPressureLevel(str, Enum):
    """Memory pressure levels of the memory cgroup notifications."""

    LOW = "low"
    MEDIUM = "medium"
    CRITICAL = "critical"

    def __str__(self) -> str:
        return self.value


class EventNotificationMode(str, Enum):
    """How pressure notifications propagate through the hierarchy."""

    DEFAULT = "default"
    LOCAL = "local"
    HIERARCHY = "hierarchy"

    def __str__(self) -> str:
        return self.value


class MemoryEvent(ABC):
    """A memory cgroup notification that can be registered."""

    @abstractmethod
    def arg(self) -> str:
        """Argument written after the file descriptors to cgroup.event_control."""

    @abstractmethod
    def event_file(self) -> str:
        """Name of the file that supports the notification."""


@dataclass(frozen=True)
class MemoryThresholdEvent(MemoryEvent):
    """Notification when usage crosses ``threshold`` bytes."""

    threshold: int
    swap: bool = False

    def arg(self) -> str:
        return str(self.threshold)

    def event_file(self) -> str:
        if self.swap:
            return "memory.memsw.usage_in_bytes"
        return "memory.usage_in_bytes"


@dataclass(frozen=True)
class OOMEvent(MemoryEvent):
    """Notification of out-of-memory events."""

    def arg(self) -> str:
        return ""

    def event_file(self) -> str:
        return "memory.oom_control"


@dataclass(frozen=True)
class MemoryPressureEvent(MemoryEvent):
    """Notification of memory pressure at a given level."""

    pressure_level: MemoryPressureLevel
    hierarchy: EventNotificationMode

    def arg(self) -> str:
        level = MemoryPressureLevel(self.pressure_level).value
        mode = EventNotificationMode(self.hierarchy).value
        return f"{level},{mode}"

    def event_file(self) -> str:
        return "memory.pressure_level"


MemoryOption = Callable[["MemoryController"], None]


def ignore_modules(*args: str) -> MemoryOption:
    """Option that skips the given modules (e.g. ``"memsw"``) when reading stats."""

    def _apply(controller: MemoryController) -> None:
        controller.ignored.update(args)

    return _apply


def optional_swap() -> MemoryOption:
    """Option that skips swap statistics when swap is not accounted."""

    def _apply(controller: MemoryController) -> None:
        if not os.path.exists(_join_path(controller.root, "memory.memsw.usage_in_bytes")):
            controller.ignored.add("memsw")

    return _apply


# (key in memory.stat, attribute of MemoryStat)
_STAT_FIELDS = (
    ("cache", "cache"),
    ("rss", "rss"),
    ("rss_huge", "rss_huge"),
    ("mapped_file", "mapped_file"),
    ("dirty", "dirty"),
    ("writeback", "writeback"),
    ("pgpgin", "pg_pg_in"),
    ("pgpgout", "pg_pg_out"),
    ("pgfault", "pg_fault"),
    ("pgmajfault", "pg_maj_fault"),
    ("inactive_anon", "inactive_anon"),
    ("active_anon", "active_anon"),
    ("inactive_file", "inactive_file"),
    ("active_file", "active_file"),
    ("unevictable", "unevictable"),
    ("hierarchical_memory_limit", "hierarchical_memory_limit"),
    ("hierarchical_memsw_limit", "hierarchical_swap_limit"),
    ("total_cache", "total_cache"),
    ("total_rss", "total_rss"),
    ("total_rss_huge", "total_rss_huge"),
    ("total_mapped_file", "total_mapped_file"),
    ("total_dirty", "total_dirty"),
    ("total_writeback", "total_writeback"),
    ("total_pgpgin", "total_pg_pg_in"),
    ("total_pgpgout", "total_pg_pg_out"),
    ("total_pgfault", "total_pg_fault"),
    ("total_pgmajfault", "total_pg_maj_fault"),
    ("total_inactive_anon", "total_inactive_anon"),
    ("total_active_anon", "total_active_anon"),
    ("total_inactive_file", "total_inactive_file"),
    ("total_active_file", "total_active_file"),
    ("total_unevictable", "total_unevictable"),
)

_OOM_FIELDS = (
    ("oom_kill_disable", "oom_kill_disable"),
    ("under_oom", "under_oom"),
    ("oom_kill", "oom_kill"),
)

# (module inserted after "memory.", attribute of MemoryStat)
_MODULES = (
    ("", "usage"),
    ("memsw", "swap"),
    ("kmem", "kernel"),
    ("kmem.tcp", "kernel_tcp"),
)

# (file suffix, attribute of MemoryEntry)
_ENTRY_FIELDS = (
    ("usage_in_bytes", "usage"),
    ("max_usage_in_bytes", "max"),
    ("failcnt", "failcnt"),
    ("limit_in_bytes", "limit"),
)


def _read_kv_lines(lines: Iterable[str]) -> dict[str, int]:
    raw: dict[str, int] = {}
    for number, line in enumerate(lines):
        try:
            key, value = parse_kv(line)
        except (InvalidFormatError, ValueError) as exc:
            raise InvalidFormatError(f"{number}: {exc}") from exc
        raw[key] = value
    return raw


def _memory_settings(memory: LinuxMemory) -> list[tuple[str, int | None]]:
    oom_control = 1 if memory.disable_oom_killer else None
    return [
        ("limit_in_bytes", memory.limit),
        ("soft_limit_in_bytes", memory.reservation),
        ("memsw.limit_in_bytes", memory.swap),
        ("kmem.limit_in_bytes", memory.kernel),
        ("kmem.tcp.limit_in_bytes", memory.kernel_tcp),
        ("oom_control", oom_control),
        ("swappiness", memory.swappiness),
    ]


class MemoryController(Subsystem):
    """Memory subsystem."""

    name = Name.MEMORY

    def __init__(self, root: str, *args: MemoryOption) -> None:
        super().__init__(root)
        self.ignored: set[str] = set()
        for option in args:
            option(self)

    def path(self, path: str) -> str:
        return _join_path(self.root, path)

    def create(self, path: str, resources: LinuxResources) -> None:
        """Create the cgroup directory and apply the memory limits."""
        os.makedirs(self.path(path), DEFAULT_DIR_PERM, exist_ok=True)
        if resources.memory is None:
            return
        self._set(path, _memory_settings(resources.memory))

    def update(self, path: str, resources: LinuxResources) -> None:
        """Apply new memory limits, ordering writes so the kernel accepts them."""
        memory = resources.memory
        if memory is None:
            return
        settings = _memory_settings(memory)
        if memory.limit is not None and memory.limit > 0 and memory.swap is not None and memory.swap > 0:
            current = read_uint(_join_path(self.path(path), "memory.limit_in_bytes"))
            if current < memory.swap:
                settings[0], settings[1] = settings[1], settings[0]
        self._set(path, settings)

    def stat(self, path: str, stats: Metrics) -> None:
        """Fill ``stats.memory`` and ``stats.memory_oom_control``."""
        directory = self.path(path)
        with open(_join_path(directory, "memory.stat"), encoding="utf-8") as handle:
            stats.memory = MemoryStat(
                usage=MemoryEntry(),
                swap=MemoryEntry(),
                kernel=MemoryEntry(),
                kernel_tcp=MemoryEntry(),
            )
            self.parse_stats(handle, stats.memory)

        with open(_join_path(directory, "memory.oom_control"), encoding="utf-8") as handle:
            stats.memory_oom_control = MemoryOomControl()
            self.parse_oom_control_stats(handle, stats.memory_oom_control)

        for module, attr in _MODULES:
            if module in self.ignored:
                continue
            entry = getattr(stats.memory, attr)
            prefix = f"memory.{module}." if module else "memory."
            for suffix, field_name in _ENTRY_FIELDS:
                value = read_uint(_join_path(directory, prefix + suffix))
                setattr(entry, field_name, value)

    def parse_stats(self, lines: Iterable[str], stat: MemoryStat) -> None:
        """Fill ``stat`` from the ``key value`` lines of memory.stat."""
        raw = _read_kv_lines(lines)
        for key, attr in _STAT_FIELDS:
            setattr(stat, attr, raw.get(key, 0))

    def parse_oom_control_stats(self, lines: Iterable[str], stat: MemoryOomControl) -> None:
        """Fill ``stat`` from the lines of memory.oom_control."""
        raw = _read_kv_lines(lines)
        for key, attr in _OOM_FIELDS:
            setattr(stat, attr, raw.get(key, 0))

    def memory_event(self, path: str, event: MemoryEvent) -> int:
        """Register ``event`` and return the eventfd that signals it."""
        root = self.path(path)
        efd = os.eventfd(0, os.EFD_CLOEXEC)
        try:
            event_fd = os.open(
                _join_path(root, event.event_file()), os.O_RDONLY | os.O_CLOEXEC
            )
        except BaseException:
            os.close(efd)
            raise
        try:
            data = f"{efd} {event_fd} {event.arg()}"
            retrying_write_file(_join_path(root, "cgroup.event_control"), data)
        except BaseException:
            os.close(efd)
            raise
        finally:
            os.close(event_fd)
        return efd

    def _set(self, path: str, settings: list[tuple[str, int | None]]) -> None:
        directory = self.path(path)
        for name, value in settings:
            if value is not None:
                retrying_write_file(_join_path(directory, "memory." + name), str(value))