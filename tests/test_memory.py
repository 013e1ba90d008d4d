import os

import pytest

from cgroupctl.errors import InvalidFormatError
from cgroupctl.memory import (
    EventNotificationMode,
    MemoryController,
    MemoryPressureEvent,
    MemoryPressureLevel,
    MemoryThresholdEvent,
    OOMEvent,
    ignore_modules,
    optional_swap,
)
from cgroupctl.metrics import MemoryOomControl, MemoryStat, Metrics
from cgroupctl.resources import LinuxMemory, LinuxResources

MEMORY_DATA = """cache 1
rss 2
rss_huge 3
mapped_file 4
dirty 5
writeback 6
pgpgin 7
pgpgout 8
pgfault 9
pgmajfault 10
inactive_anon 11
active_anon 12
inactive_file 13
active_file 14
unevictable 15
hierarchical_memory_limit 16
hierarchical_memsw_limit 17
total_cache 18
total_rss 19
total_rss_huge 20
total_mapped_file 21
total_dirty 22
total_writeback 23
total_pgpgin 24
total_pgpgout 25
total_pgfault 26
total_pgmajfault 27
total_inactive_anon 28
total_active_anon 29
total_inactive_file 30
total_active_file 31
total_unevictable 32
"""

MEMORY_OOM_CONTROL_DATA = """oom_kill_disable 1
under_oom 2
oom_kill 3
"""

ALL_MODULES = ["", "memsw", "kmem", "kmem.tcp"]
NO_SWAP_MODULES = ["", "kmem", "kmem.tcp"]
METRICS = ["usage_in_bytes", "max_usage_in_bytes", "failcnt", "limit_in_bytes"]


def build_memory_metrics(root, modules):
    directory = root / "memory"
    directory.mkdir(parents=True)
    (directory / "memory.stat").write_text(MEMORY_DATA)
    (directory / "memory.oom_control").write_text(MEMORY_OOM_CONTROL_DATA)
    count = 0
    for module in modules:
        for metric in METRICS:
            name = f"memory.{module}.{metric}" if module else f"memory.{metric}"
            (directory / name).write_text(f"{count}\n")
            count += 1
    return str(root)


def entry_values(entry):
    return [entry.usage, entry.max, entry.failcnt, entry.limit]


def test_parse_memory_stats():
    stat = MemoryStat()
    MemoryController("/unused").parse_stats(MEMORY_DATA.splitlines(), stat)
    values = [
        stat.cache, stat.rss, stat.rss_huge, stat.mapped_file, stat.dirty,
        stat.writeback, stat.pg_pg_in, stat.pg_pg_out, stat.pg_fault,
        stat.pg_maj_fault, stat.inactive_anon, stat.active_anon,
        stat.inactive_file, stat.active_file, stat.unevictable,
        stat.hierarchical_memory_limit, stat.hierarchical_swap_limit,
        stat.total_cache, stat.total_rss, stat.total_rss_huge,
        stat.total_mapped_file, stat.total_dirty, stat.total_writeback,
        stat.total_pg_pg_in, stat.total_pg_pg_out, stat.total_pg_fault,
        stat.total_pg_maj_fault, stat.total_inactive_anon,
        stat.total_active_anon, stat.total_inactive_file,
        stat.total_active_file, stat.total_unevictable,
    ]
    assert values == list(range(1, 33))


def test_parse_memory_oom_control():
    stat = MemoryOomControl()
    MemoryController("/unused").parse_oom_control_stats(
        MEMORY_OOM_CONTROL_DATA.splitlines(), stat
    )
    assert [stat.oom_kill_disable, stat.under_oom, stat.oom_kill] == [1, 2, 3]


def test_parse_stats_rejects_bad_line():
    with pytest.raises(InvalidFormatError):
        MemoryController("/unused").parse_stats(["cache 1", "broken"], MemoryStat())


def test_stat_complete(tmp_path):
    root = build_memory_metrics(tmp_path, ALL_MODULES)
    stats = Metrics()
    MemoryController(root).stat("", stats)
    mem = stats.memory
    values = (
        entry_values(mem.usage)
        + entry_values(mem.swap)
        + entry_values(mem.kernel)
        + entry_values(mem.kernel_tcp)
    )
    assert values == list(range(16))
    assert stats.memory_oom_control.oom_kill == 3
    assert mem.total_unevictable == 32


def check_no_swap(mem):
    assert entry_values(mem.swap) == [0, 0, 0, 0]
    values = entry_values(mem.usage) + entry_values(mem.kernel) + entry_values(mem.kernel_tcp)
    assert values == list(range(12))


def test_stat_ignore_modules(tmp_path):
    root = build_memory_metrics(tmp_path, NO_SWAP_MODULES)
    stats = Metrics()
    MemoryController(root, ignore_modules("memsw")).stat("", stats)
    check_no_swap(stats.memory)


def test_stat_without_swap_files_fails(tmp_path):
    root = build_memory_metrics(tmp_path, NO_SWAP_MODULES)
    with pytest.raises(FileNotFoundError):
        MemoryController(root).stat("", Metrics())


def test_stat_optional_swap_has_swap(tmp_path):
    root = build_memory_metrics(tmp_path, ALL_MODULES)
    controller = MemoryController(root, optional_swap())
    assert "memsw" not in controller.ignored
    stats = Metrics()
    controller.stat("", stats)
    assert entry_values(stats.memory.swap) == [4, 5, 6, 7]


def test_stat_optional_swap_no_swap(tmp_path):
    root = build_memory_metrics(tmp_path, NO_SWAP_MODULES)
    controller = MemoryController(root, optional_swap())
    assert "memsw" in controller.ignored
    stats = Metrics()
    controller.stat("", stats)
    check_no_swap(stats.memory)


def test_event_args():
    assert MemoryThresholdEvent(1024, False).arg() == "1024"
    assert MemoryThresholdEvent(1024, False).event_file() == "memory.usage_in_bytes"
    assert MemoryThresholdEvent(1024, True).event_file() == "memory.memsw.usage_in_bytes"
    assert OOMEvent().arg() == ""
    assert OOMEvent().event_file() == "memory.oom_control"
    event = MemoryPressureEvent(MemoryPressureLevel.CRITICAL, EventNotificationMode.LOCAL)
    assert event.arg() == "critical,local"
    assert event.event_file() == "memory.pressure_level"


def test_create_writes_settings(tmp_path):
    controller = MemoryController(str(tmp_path))
    resources = LinuxResources(
        memory=LinuxMemory(limit=4096, swappiness=10, disable_oom_killer=True)
    )
    controller.create("test", resources)
    directory = tmp_path / "memory" / "test"
    assert (directory / "memory.limit_in_bytes").read_text() == "4096"
    assert (directory / "memory.swappiness").read_text() == "10"
    assert (directory / "memory.oom_control").read_text() == "1"
    assert not (directory / "memory.soft_limit_in_bytes").exists()


def test_create_without_memory_only_makes_directory(tmp_path):
    MemoryController(str(tmp_path)).create("test", LinuxResources())
    directory = tmp_path / "memory" / "test"
    assert directory.is_dir()
    assert list(directory.iterdir()) == []


def test_update_with_limit_and_swap(tmp_path):
    controller = MemoryController(str(tmp_path))
    controller.create("test", LinuxResources())
    directory = tmp_path / "memory" / "test"
    (directory / "memory.limit_in_bytes").write_text("100\n")
    controller.update("test", LinuxResources(memory=LinuxMemory(limit=200, swap=300)))
    assert (directory / "memory.limit_in_bytes").read_text() == "200"
    assert (directory / "memory.memsw.limit_in_bytes").read_text() == "300"


def test_update_requires_current_limit(tmp_path):
    controller = MemoryController(str(tmp_path))
    controller.create("test", LinuxResources())
    with pytest.raises(FileNotFoundError):
        controller.update("test", LinuxResources(memory=LinuxMemory(limit=200, swap=300)))


def test_memory_event_registers(tmp_path):
    controller = MemoryController(str(tmp_path))
    controller.create("test", LinuxResources())
    directory = tmp_path / "memory" / "test"
    (directory / "memory.usage_in_bytes").write_text("0\n")
    efd = controller.memory_event("test", MemoryThresholdEvent(2048, False))
    try:
        content = (directory / "cgroup.event_control").read_text()
        parts = content.split(" ")
        assert parts[0] == str(efd)
        assert parts[2] == "2048"
        assert len(parts) == 3
    finally:
        os.close(efd)


def test_memory_event_missing_file(tmp_path):
    controller = MemoryController(str(tmp_path))
    controller.create("test", LinuxResources())
    with pytest.raises(FileNotFoundError):
        controller.memory_event("test", OOMEvent())