"""Statistics gathered from cgroup v1 controllers."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Throttle:
    """CFS throttling counters."""

    periods: int = 0
    throttled_periods: int = 0
    throttled_time: int = 0


@dataclass
class CPUUsage:
    """CPU time consumed, in nanoseconds."""

    total: int = 0
    kernel: int = 0
    user: int = 0
    per_cpu: list[int] = field(default_factory=list)


@dataclass
class CPUStat:
    """CPU usage and throttling."""

    usage: CPUUsage = field(default_factory=CPUUsage)
    throttling: Throttle = field(default_factory=Throttle)


@dataclass
class BlkIOEntry:
    """One line of a blkio statistics file."""

    op: str = ""
    device: str = ""
    major: int = 0
    minor: int = 0
    value: int = 0


@dataclass
class BlkIOStat:
    """Block I/O statistics."""

    io_service_bytes_recursive: list[BlkIOEntry] = field(default_factory=list)
    io_serviced_recursive: list[BlkIOEntry] = field(default_factory=list)
    io_queued_recursive: list[BlkIOEntry] = field(default_factory=list)
    io_service_time_recursive: list[BlkIOEntry] = field(default_factory=list)
    io_wait_time_recursive: list[BlkIOEntry] = field(default_factory=list)
    io_merged_recursive: list[BlkIOEntry] = field(default_factory=list)
    io_time_recursive: list[BlkIOEntry] = field(default_factory=list)
    sectors_recursive: list[BlkIOEntry] = field(default_factory=list)


@dataclass
class MemoryEntry:
    """Usage counters for one memory module."""

    limit: int = 0
    usage: int = 0
    max: int = 0
    failcnt: int = 0


@dataclass
class MemoryStat:
    """Memory statistics of a cgroup."""

    cache: int = 0
    rss: int = 0
    rss_huge: int = 0
    mapped_file: int = 0
    dirty: int = 0
    writeback: int = 0
    pg_pg_in: int = 0
    pg_pg_out: int = 0
    pg_fault: int = 0
    pg_maj_fault: int = 0
    inactive_anon: int = 0
    active_anon: int = 0
    inactive_file: int = 0
    active_file: int = 0
    unevictable: int = 0
    hierarchical_memory_limit: int = 0
    hierarchical_swap_limit: int = 0
    total_cache: int = 0
    total_rss: int = 0
    total_rss_huge: int = 0
    total_mapped_file: int = 0
    total_dirty: int = 0
    total_writeback: int = 0
    total_pg_pg_in: int = 0
    total_pg_pg_out: int = 0
    total_pg_fault: int = 0
    total_pg_maj_fault: int = 0
    total_inactive_anon: int = 0
    total_active_anon: int = 0
    total_inactive_file: int = 0
    total_active_file: int = 0
    total_unevictable: int = 0
    usage: MemoryEntry = field(default_factory=MemoryEntry)
    swap: MemoryEntry = field(default_factory=MemoryEntry)
    kernel: MemoryEntry = field(default_factory=MemoryEntry)
    kernel_tcp: MemoryEntry = field(default_factory=MemoryEntry)


@dataclass
class MemoryOomControl:
    """Contents of memory.oom_control."""

    oom_kill_disable: int = 0
    under_oom: int = 0
    oom_kill: int = 0


@dataclass
class HugetlbStat:
    """Huge page usage for one page size."""

    pagesize: str = ""
    usage: int = 0
    max: int = 0
    failcnt: int = 0


@dataclass
class PidsStat:
    """Process count and limit."""

    current: int = 0
    limit: int = 0


@dataclass
class RdmaEntry:
    """RDMA resource counts for one device."""

    device: str = ""
    hca_handles: int = 0
    hca_objects: int = 0


@dataclass
class RdmaStat:
    """Current RDMA usage and limits."""

    current: list[RdmaEntry] = field(default_factory=list)
    limit: list[RdmaEntry] = field(default_factory=list)


@dataclass
class Metrics:
    """All statistics of a cgroup; sections stay None until filled."""

    hugetlb: list[HugetlbStat] = field(default_factory=list)
    pids: PidsStat | None = None
    cpu: CPUStat | None = None
    memory: MemoryStat | None = None
    memory_oom_control: MemoryOomControl | None = None
    blkio: BlkIOStat | None = None
    rdma: RdmaStat | None = None

    @classmethod
    def new(cls) -> Metrics:
        """Return metrics with the CPU section ready to be filled in."""
        return cls(cpu=CPUStat())