import pytest

from cgroupctl.cpuset import CpusetController
from cgroupctl.errors import CgroupError
from cgroupctl.resources import LinuxCPU, LinuxResources


def _read(path):
    with open(path, encoding="utf-8") as handle:
        return handle.read()


def _root(tmp_path, value="0-3"):
    root = tmp_path / "cpuset"
    root.mkdir()
    (root / "cpuset.cpus").write_text(value)
    (root / "cpuset.mems").write_text(value)
    return CpusetController(str(tmp_path))


def test_path():
    assert CpusetController("/sys/fs/cgroup").path("test") == "/sys/fs/cgroup/cpuset/test"


def test_parent_values_copied(tmp_path):
    ctrl = _root(tmp_path)
    ctrl.create("/parent/child", LinuxResources())
    for name in (
        "parent/cpuset.cpus",
        "parent/cpuset.mems",
        "parent/child/cpuset.cpus",
        "parent/child/cpuset.mems",
    ):
        assert _read(tmp_path / "cpuset" / name) == "0-3"


def test_explicit_values_written(tmp_path):
    ctrl = _root(tmp_path)
    ctrl.create("test", LinuxResources(cpu=LinuxCPU(cpus="1", mems="0")))
    directory = tmp_path / "cpuset" / "test"
    assert _read(directory / "cpuset.cpus") == "1"
    assert _read(directory / "cpuset.mems") == "0"


def test_update_keeps_unset_values(tmp_path):
    ctrl = _root(tmp_path)
    ctrl.create("test", LinuxResources())
    ctrl.update("test", LinuxResources(cpu=LinuxCPU(cpus="2")))
    directory = tmp_path / "cpuset" / "test"
    assert _read(directory / "cpuset.cpus") == "2"
    assert _read(directory / "cpuset.mems") == "0-3"


def test_copy_if_needed_keeps_existing(tmp_path):
    ctrl = _root(tmp_path)
    child = tmp_path / "cpuset" / "child"
    child.mkdir()
    (child / "cpuset.cpus").write_text("1\n")
    (child / "cpuset.mems").write_text("\n")
    ctrl.copy_if_needed(str(child), str(tmp_path / "cpuset"))
    assert _read(child / "cpuset.cpus") == "1\n"
    assert _read(child / "cpuset.mems") == "0-3"


def test_copy_if_needed_missing_parent_files(tmp_path):
    ctrl = CpusetController(str(tmp_path))
    parent = tmp_path / "p"
    child = parent / "c"
    child.mkdir(parents=True)
    ctrl.copy_if_needed(str(child), str(parent))
    assert _read(child / "cpuset.cpus") == ""
    assert _read(child / "cpuset.mems") == ""


def test_ensure_parent_outside_root():
    ctrl = CpusetController("/b")
    with pytest.raises(CgroupError):
        ctrl.ensure_parent("/a", "/b/c")


def test_ensure_parent_mixed_relative_does_nothing(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    ctrl = CpusetController(str(tmp_path))
    assert ctrl.ensure_parent("rel/x", "/root") is None
    assert not (tmp_path / "rel").exists()