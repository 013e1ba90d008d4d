# cgroupctl

A library for managing Linux cgroup v1 groups: creating them, applying
resource limits, moving processes in, freezing and thawing, registering memory
notifications and collecting usage metrics from each controller.

## Installation

```
pip install cgroupctl
```

## Concepts

- **Controllers (subsystems).** Each controller is built from the cgroup mount
  root (for example `/sys/fs/cgroup`) and works in its own directory below it.
  All derive from `cgroupctl.control.Subsystem` and have a `name` and a
  `path(path)` method.

  | Module | Class | Directory |
  | --- | --- | --- |
  | `cgroupctl.blkio` | `BlkioController(root, proc_root="/proc")` | `blkio` |
  | `cgroupctl.cpu` | `CpuController(root)` | `cpu` |
  | `cgroupctl.cpuacct` | `CpuacctController(root)` | `cpuacct` |
  | `cgroupctl.cpuset` | `CpusetController(root)` | `cpuset` |
  | `cgroupctl.devices` | `DevicesController(root)` | `devices` |
  | `cgroupctl.freezer` | `FreezerController(root)` | `freezer` |
  | `cgroupctl.hugetlb` | `HugetlbController(root, sizes)` | `hugetlb` |
  | `cgroupctl.memory` | `MemoryController(root, *options)` | `memory` |
  | `cgroupctl.network` | `NetClsController(root)`, `NetPrioController(root)` | `net_cls`, `net_prio` |
  | `cgroupctl.pids` | `PidsController(root)` | `pids` |
  | `cgroupctl.rdma` | `RdmaController(root)` | `rdma` |
  | `cgroupctl.named` | `PerfEventController(root)`, `NamedController(root, name)` | `perf_event`, `<name>` |

  `MemoryController` accepts the options `ignore_modules("memsw", ...)` and
  `optional_swap()`, which skip statistics of the given modules, or of swap
  when `memory.memsw.usage_in_bytes` does not exist.
- **Hierarchy**: a callable with no arguments returning the list of
  controllers to manage.
- **Path**: a callable taking a subsystem name and returning the group's path
  inside that subsystem. `cgroupctl.paths` provides `static_path(path)`,
  `root_path`, `sub_path(path, sub_name)` and `error_path(err)`.
- **Resources**: `LinuxResources` and its parts (`LinuxMemory`, `LinuxCPU`,
  `LinuxPids`, `LinuxBlockIO`, `LinuxDeviceCgroup`, `LinuxNetwork`,
  `LinuxHugepageLimit`, `LinuxRdma`, ...) in `cgroupctl.resources` hold the
  settings to write.
- **Metrics**: `Cgroup.stat()` returns a `cgroupctl.metrics.Metrics` whose
  sections (`cpu`, `memory`, `memory_oom_control`, `pids`, `blkio`, `rdma`,
  `hugetlb`) are filled by the controllers that report them.

## Example

```python
from cgroupctl.cgroup import new, load
from cgroupctl.control import Name, Process
from cgroupctl.cpu import CpuController
from cgroupctl.memory import MemoryController, MemoryThresholdEvent, optional_swap
from cgroupctl.pids import PidsController
from cgroupctl.freezer import FreezerController
from cgroupctl.errors import allow_any, ignore_not_exist
from cgroupctl.paths import static_path
from cgroupctl.resources import LinuxResources, LinuxMemory, LinuxPids

ROOT = "/sys/fs/cgroup"

def hierarchy():
    return [
        CpuController(ROOT),
        MemoryController(ROOT, optional_swap()),
        PidsController(ROOT),
        FreezerController(ROOT),
    ]

resources = LinuxResources(
    memory=LinuxMemory(limit=256 * 1024 * 1024),
    pids=LinuxPids(limit=64),
)

group = new(hierarchy, static_path("/example"), resources, allow_any)
group.add(Process(pid=4242))

metrics = group.stat(ignore_not_exist)
print(metrics.pids.current, metrics.memory.usage.usage)

group.freeze()
print(group.state())   # State.FROZEN
group.thaw()

for proc in group.processes(Name.FREEZER, True):
    print(proc.pid, proc.path)

efd = group.register_memory_event(MemoryThresholdEvent(200 * 1024 * 1024))

child = group.new("worker", LinuxResources())

same_group = load(hierarchy, static_path("/example"), allow_any)
same_group.delete()
```

`Cgroup` also offers `add_proc(pid)`, `add_task(process)`, `tasks(...)`,
`update(resources)`, `oom_event_fd()` and `move_to(destination)`.

## Errors

Failures raise exceptions derived from `cgroupctl.errors.CgroupError`:
`InvalidPidError` for a pid that is not positive, `CgroupDeletedError` once a
group has been deleted or cannot be found, `FreezerNotSupportedError` and
`MemoryNotSupportedError` when the group lacks that controller,
`InvalidFormatError` for control files that cannot be parsed, and a plain
`CgroupError` when directories cannot be removed. File system problems come
through as the usual `OSError` subclasses.

When a path function raises `ControllerNotActiveError` for a subsystem,
`new` and `load` run an init check: the default, `require_devices`, raises
`DevicesRequiredError` for the devices controller and skips any other;
`allow_any` skips them all.

`Cgroup.stat(*handlers)` passes each controller's error through the handlers;
`ignore_not_exist` drops errors about missing files. The first remaining error
is raised.

## What it does not do

- There is no command-line tool; it is a library only.
- It does not find cgroup mount points, read `/proc/<pid>/cgroup`, or detect
  whether the system runs the legacy, hybrid or unified layout. Hierarchies and
  paths are built by the caller.
- It does not manage the cgroup v2 unified hierarchy or systemd-managed groups.
- `HugetlbController` does not discover huge page sizes; pass them in.

## Requirements

Python 3.10 or later on Linux with cgroup v1 controllers mounted. Changing
groups needs the matching privileges.