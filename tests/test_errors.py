import pytest

from cgroupctl.control import Name, Subsystem
from cgroupctl.errors import (
    CgroupDeletedError,
    CgroupError,
    ControllerNotActiveError,
    DevicesRequiredError,
    IgnoreSubsystem,
    InitConfig,
    InvalidPidError,
    allow_any,
    ignore_not_exist,
    require_devices,
)


class _Devices(Subsystem):
    name = Name.DEVICES


class _Memory(Subsystem):
    name = Name.MEMORY


def test_messages():
    assert str(InvalidPidError()) == "cgroups: pid must be greater than 0"
    assert str(CgroupDeletedError()) == "cgroups: cgroup deleted"
    assert str(ControllerNotActiveError()) == "controller is not supported"


def test_custom_message_kept():
    assert str(CgroupDeletedError("gone")) == "gone"


@pytest.mark.parametrize("error_class", [InvalidPidError, CgroupDeletedError])
def test_errors_share_base(error_class):
    err = error_class()
    assert isinstance(err, CgroupError)
    assert str(err).startswith("cgroups: ")


def test_ignore_not_exist_drops_missing_file():
    assert ignore_not_exist(FileNotFoundError("x")) is None


def test_ignore_not_exist_keeps_other_errors():
    err = PermissionError("denied")
    assert ignore_not_exist(err) is err


def test_allow_any_skips():
    with pytest.raises(IgnoreSubsystem):
        allow_any(_Devices("/r"), None, ControllerNotActiveError())


def test_require_devices_fails_for_devices():
    with pytest.raises(DevicesRequiredError):
        require_devices(_Devices("/r"), None, ControllerNotActiveError())


def test_require_devices_skips_others():
    with pytest.raises(IgnoreSubsystem):
        require_devices(_Memory("/r"), None, ControllerNotActiveError())


def test_init_config_default_check():
    assert InitConfig().init_check is require_devices
    assert InitConfig(init_check=allow_any).init_check is allow_any