"""A control group spread over the v1 subsystems of a hierarchy."""

from __future__ import annotations

import os
import shutil
import threading
import time
from collections.abc import Callable, Iterator

from .control import (
    CGROUP_PROCS,
    CGROUP_TASKS,
    DEFAULT_DIR_PERM,
    Name,
    Process,
    State,
    Subsystem,
    _join_path,
    retrying_write_file,
)
from .errors import (
    CgroupDeletedError,
    CgroupError,
    ControllerNotActiveError,
    FreezerNotSupportedError,
    IgnoreSubsystem,
    InvalidPidError,
    MemoryNotSupportedError,
    require_devices,
)
from .memory import MemoryEvent, OOMEvent
from .metrics import Metrics
from .paths import CgroupPath, Hierarchy, sub_path
from .resources import LinuxResources

InitCheck = Callable[[Subsystem, CgroupPath, BaseException], None]
ErrorHandler = Callable[[BaseException], "BaseException | None"]


def _initialize_subsystem(subsystem: Subsystem, path: CgroupPath, resources: LinuxResources) -> None:
    p = path(subsystem.name)
    create = getattr(subsystem, "create", None)
    if callable(create):
        create(p, resources)
    else:
        os.makedirs(subsystem.path(p), DEFAULT_DIR_PERM, exist_ok=True)


def _run_init_check(
    init_check: InitCheck | None, subsystem: Subsystem, path: CgroupPath, err: BaseException
) -> None:
    if init_check is None:
        return
    try:
        init_check(subsystem, path, err)
    except IgnoreSubsystem:
        pass


def _remove_all(path: str) -> None:
    try:
        os.rmdir(path)
    except FileNotFoundError:
        return
    except OSError:
        shutil.rmtree(path)


def _remove(path: str) -> None:
    """Remove a cgroup directory, retrying with a growing delay."""
    delay = 0.01
    for attempt in range(5):
        if attempt:
            time.sleep(delay)
            delay *= 2
        try:
            _remove_all(path)
            return
        except OSError:
            continue
    raise CgroupError(f"cgroups: unable to remove path {path!r}")


def _read_pids(directory: str, subsystem: str, proc_type: str) -> list[Process]:
    with open(_join_path(directory, proc_type), encoding="utf-8") as handle:
        return [
            Process(pid=int(line), subsystem=subsystem, path=directory)
            for line in (raw.strip() for raw in handle)
            if line
        ]


def _walk_tree(directory: str, recursive: bool) -> Iterator[tuple[str, list[str]]]:
    """Yield each directory with its sorted file names, depth first."""
    with os.scandir(directory) as it:
        entries = sorted(it, key=lambda entry: entry.name)
    subdirs = [entry for entry in entries if entry.is_dir(follow_symlinks=False)]
    files = [entry.name for entry in entries if not entry.is_dir(follow_symlinks=False)]
    yield directory, files
    if recursive:
        for entry in subdirs:
            yield from _walk_tree(entry.path, True)


def _walk_dirs(root: str, recursive: bool) -> Iterator[tuple[str, list[str]]]:
    os.lstat(root)
    yield from _walk_tree(root, recursive)


def new(
    hierarchy: Hierarchy,
    path: CgroupPath,
    resources: LinuxResources,
    init_check: InitCheck | None = require_devices,
) -> Cgroup:
    """Create a cgroup in every active subsystem of ``hierarchy``."""
    active = []
    for subsystem in hierarchy():
        try:
            _initialize_subsystem(subsystem, path, resources)
        except ControllerNotActiveError as err:
            _run_init_check(init_check, subsystem, path, err)
            continue
        active.append(subsystem)
    return Cgroup(path, active)


def load(
    hierarchy: Hierarchy,
    path: CgroupPath,
    init_check: InitCheck | None = require_devices,
) -> Cgroup:
    """Load an existing cgroup, keeping only the subsystems where it exists."""
    active = []
    for subsystem in hierarchy():
        try:
            p = path(subsystem.name)
        except FileNotFoundError:
            raise CgroupDeletedError() from None
        except ControllerNotActiveError as err:
            _run_init_check(init_check, subsystem, path, err)
            continue
        try:
            os.lstat(subsystem.path(p))
        except FileNotFoundError:
            continue
        active.append(subsystem)
    if not active:
        raise CgroupDeletedError()
    return Cgroup(path, active)


class Cgroup:
    """A control group and the subsystems it is present in."""

    def __init__(self, path: CgroupPath, subsystems: list[Subsystem]) -> None:
        self._path = path
        self.subsystems = list(subsystems)
        self._lock = threading.Lock()
        self._err: CgroupError | None = None

    def _check_alive(self) -> None:
        if self._err is not None:
            raise self._err

    def _get_subsystem(self, name: str) -> Subsystem | None:
        for subsystem in self.subsystems:
            if str(subsystem.name) == str(name):
                return subsystem
        return None

    def new(self, name: str, resources: LinuxResources) -> Cgroup:
        """Create a child cgroup called ``name``."""
        with self._lock:
            self._check_alive()
            path = sub_path(self._path, name)
            for subsystem in self.subsystems:
                _initialize_subsystem(subsystem, path, resources)
            return Cgroup(path, self.subsystems)

    def add(self, process: Process) -> None:
        """Move a process into the cgroup (cgroup.procs)."""
        self._add(process, CGROUP_PROCS)

    def add_proc(self, pid: int) -> None:
        """Move the process with id ``pid`` into the cgroup."""
        self._add(Process(pid=int(pid)), CGROUP_PROCS)

    def add_task(self, process: Process) -> None:
        """Move a thread into the cgroup (tasks)."""
        self._add(process, CGROUP_TASKS)

    def _add(self, process: Process, proc_type: str) -> None:
        if process.pid <= 0:
            raise InvalidPidError()
        with self._lock:
            self._check_alive()
            for subsystem in self.subsystems:
                p = self._path(subsystem.name)
                retrying_write_file(_join_path(subsystem.path(p), proc_type), str(process.pid))

    def delete(self) -> None:
        """Remove the cgroup from every subsystem."""
        with self._lock:
            self._check_alive()
            failed = []
            for subsystem in self.subsystems:
                deleter = getattr(subsystem, "delete", None)
                sp = self._path(subsystem.name)
                if callable(deleter):
                    try:
                        deleter(sp)
                    except Exception:
                        failed.append(str(subsystem.name))
                    continue
                path = subsystem.path(sp)
                try:
                    _remove(path)
                except CgroupError:
                    failed.append(path)
            if failed:
                raise CgroupError(f"cgroups: unable to remove paths {', '.join(failed)}")
            self._err = CgroupDeletedError()

    def stat(self, *args: ErrorHandler) -> Metrics:
        """Collect the statistics of every subsystem; handlers may drop errors."""
        handlers = args or (lambda err: err,)
        with self._lock:
            self._check_alive()
            stats = Metrics.new()
            errors: list[BaseException] = []
            for subsystem in self.subsystems:
                stat = getattr(subsystem, "stat", None)
                if not callable(stat):
                    continue
                sp = self._path(subsystem.name)
                try:
                    stat(sp, stats)
                except Exception as err:
                    for handler in handlers:
                        handled = handler(err)
                        if handled is not None:
                            errors.append(handled)
            if errors:
                raise errors[0]
            return stats

    def update(self, resources: LinuxResources) -> None:
        """Apply new resource settings to every subsystem that supports it."""
        with self._lock:
            self._check_alive()
            for subsystem in self.subsystems:
                updater = getattr(subsystem, "update", None)
                if callable(updater):
                    updater(self._path(subsystem.name), resources)

    def processes(self, subsystem: str, recursive: bool) -> list[Process]:
        """Return the processes of the cgroup in ``subsystem``."""
        with self._lock:
            self._check_alive()
            return self._processes(subsystem, recursive, CGROUP_PROCS)

    def tasks(self, subsystem: str, recursive: bool) -> list[Process]:
        """Return the tasks (threads) of the cgroup in ``subsystem``."""
        with self._lock:
            self._check_alive()
            return self._processes(subsystem, recursive, CGROUP_TASKS)

    def _processes(self, name: str, recursive: bool, proc_type: str) -> list[Process]:
        subsystem = self._get_subsystem(name)
        if subsystem is None:
            raise ControllerNotActiveError()
        root = subsystem.path(self._path(subsystem.name))
        found: list[Process] = []
        for directory, files in _walk_dirs(root, recursive):
            if proc_type in files:
                found.extend(_read_pids(directory, str(subsystem.name), proc_type))
        return found

    def freeze(self) -> None:
        """Freeze every process in the cgroup."""
        with self._lock:
            self._check_alive()
            freezer = self._get_subsystem(Name.FREEZER)
            if freezer is None:
                raise FreezerNotSupportedError()
            freezer.freeze(self._path(Name.FREEZER))

    def thaw(self) -> None:
        """Resume every process in the cgroup."""
        with self._lock:
            self._check_alive()
            freezer = self._get_subsystem(Name.FREEZER)
            if freezer is None:
                raise FreezerNotSupportedError()
            freezer.thaw(self._path(Name.FREEZER))

    def oom_event_fd(self) -> int:
        """Return an eventfd signalled on out-of-memory events."""
        return self.register_memory_event(OOMEvent())

    def register_memory_event(self, event: MemoryEvent) -> int:
        """Register a memory notification and return its eventfd."""
        with self._lock:
            self._check_alive()
            memory = self._get_subsystem(Name.MEMORY)
            if memory is None:
                raise MemoryNotSupportedError()
            return memory.memory_event(self._path(Name.MEMORY), event)

    def state(self) -> State:
        """Return the freezer state, or DELETED once the cgroup is gone."""
        with self._lock:
            self._check_exists()
            if isinstance(self._err, CgroupDeletedError):
                return State.DELETED
            freezer = self._get_subsystem(Name.FREEZER)
            if freezer is None:
                return State.THAWED
            try:
                return freezer.state(self._path(Name.FREEZER))
            except Exception:
                return State.UNKNOWN

    def move_to(self, destination: Cgroup) -> None:
        """Move every process, subsystem by subsystem, into ``destination``."""
        with self._lock:
            self._check_alive()
            for subsystem in self.subsystems:
                for process in self._processes(subsystem.name, True, CGROUP_PROCS):
                    try:
                        destination.add(process)
                    except Exception as err:
                        if "no such process" in str(err).lower():
                            continue
                        raise

    def _check_exists(self) -> None:
        for subsystem in self.subsystems:
            try:
                p = self._path(subsystem.name)
            except Exception:
                return
            try:
                os.lstat(subsystem.path(p))
            except FileNotFoundError:
                self._err = CgroupDeletedError()
                return
            except OSError:
                continue