"""Resource settings applied to cgroups."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class LinuxWeightDevice:
    """Per-device block I/O weight."""

    major: int
    minor: int
    weight: int | None = None
    leaf_weight: int | None = None


@dataclass
class LinuxThrottleDevice:
    """Per-device block I/O rate limit."""

    major: int
    minor: int
    rate: int


@dataclass
class LinuxBlockIO:
    """Block I/O settings."""

    weight: int | None = None
    leaf_weight: int | None = None
    weight_device: list[LinuxWeightDevice] = field(default_factory=list)
    throttle_read_bps_device: list[LinuxThrottleDevice] = field(default_factory=list)
    throttle_write_bps_device: list[LinuxThrottleDevice] = field(default_factory=list)
    throttle_read_iops_device: list[LinuxThrottleDevice] = field(default_factory=list)
    throttle_write_iops_device: list[LinuxThrottleDevice] = field(default_factory=list)


@dataclass
class LinuxCPU:
    """CPU scheduling and placement settings."""

    shares: int | None = None
    quota: int | None = None
    period: int | None = None
    realtime_runtime: int | None = None
    realtime_period: int | None = None
    cpus: str = ""
    mems: str = ""


@dataclass
class LinuxMemory:
    """Memory limits."""

    limit: int | None = None
    reservation: int | None = None
    swap: int | None = None
    kernel: int | None = None
    kernel_tcp: int | None = None
    swappiness: int | None = None
    disable_oom_killer: bool | None = None


@dataclass
class LinuxDeviceCgroup:
    """A device access rule; None for major or minor means any."""

    allow: bool
    type: str = ""
    major: int | None = None
    minor: int | None = None
    access: str = ""


@dataclass
class LinuxHugepageLimit:
    """Limit for one huge page size."""

    pagesize: str
    limit: int


@dataclass
class LinuxInterfacePriority:
    """Network priority of one interface."""

    name: str
    priority: int


@dataclass
class LinuxNetwork:
    """Network class id and interface priorities."""

    class_id: int | None = None
    priorities: list[LinuxInterfacePriority] = field(default_factory=list)


@dataclass
class LinuxPids:
    """Process count limit."""

    limit: int = 0


@dataclass
class LinuxRdma:
    """RDMA resource limits for one device."""

    hca_handles: int | None = None
    hca_objects: int | None = None


@dataclass
class LinuxResources:
    """Everything that can be set on a cgroup."""

    devices: list[LinuxDeviceCgroup] = field(default_factory=list)
    memory: LinuxMemory | None = None
    cpu: LinuxCPU | None = None
    pids: LinuxPids | None = None
    block_io: LinuxBlockIO | None = None
    hugepage_limits: list[LinuxHugepageLimit] = field(default_factory=list)
    network: LinuxNetwork | None = None
    rdma: dict[str, LinuxRdma] = field(default_factory=dict)