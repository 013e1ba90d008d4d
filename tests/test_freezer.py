import pytest

from cgroupctl.control import State
from cgroupctl.errors import InvalidFormatError
from cgroupctl.freezer import FreezerController


@pytest.fixture
def controller(tmp_path):
    (tmp_path / "freezer" / "test").mkdir(parents=True)
    return FreezerController(str(tmp_path))


def test_freeze_and_thaw(controller, tmp_path):
    state_file = tmp_path / "freezer" / "test" / "freezer.state"
    controller.freeze("test")
    assert state_file.read_text() == "FROZEN"
    assert controller.state("test") is State.FROZEN
    controller.thaw("test")
    assert state_file.read_text() == "THAWED"
    assert controller.state("test") is State.THAWED


def test_state_reads_kernel_format(controller, tmp_path):
    (tmp_path / "freezer" / "test" / "freezer.state").write_text("FREEZING\n")
    assert controller.state("test") is State.FREEZING


def test_state_missing_file(controller):
    with pytest.raises(FileNotFoundError):
        controller.state("test")


def test_state_unknown_value(controller, tmp_path):
    (tmp_path / "freezer" / "test" / "freezer.state").write_text("bogus\n")
    with pytest.raises(InvalidFormatError):
        controller.state("test")


def test_path(controller, tmp_path):
    assert controller.path("test") == str(tmp_path / "freezer" / "test")