"""The net_cls and net_prio controllers: network class ids and interface priorities."""

from __future__ import annotations

import os

from .control import DEFAULT_DIR_PERM, Name, Subsystem, _join_path, retrying_write_file
from .resources import LinuxResources


def format_prio(name: str, prio: int) -> str:
    """Format an interface priority as written to net_prio.ifpriomap."""
    return f"{name} {prio}"


class NetClsController(Subsystem):
    """Network classifier subsystem."""

    name = Name.NET_CLS

    def __init__(self, root: str) -> None:
        super().__init__(root)

    def path(self, path: str) -> str:
        return _join_path(self.root, path)

    def create(self, path: str, resources: LinuxResources) -> None:
        """Create the cgroup directory and set the class id when it is positive."""
        directory = self.path(path)
        os.makedirs(directory, DEFAULT_DIR_PERM, exist_ok=True)
        network = resources.network
        if network is not None and network.class_id is not None and network.class_id > 0:
            retrying_write_file(_join_path(directory, "net_cls.classid"), str(network.class_id))

    def update(self, path: str, resources: LinuxResources) -> None:
        self.create(path, resources)


class NetPrioController(Subsystem):
    """Network priority subsystem."""

    name = Name.NET_PRIO

    def __init__(self, root: str) -> None:
        super().__init__(root)

    def path(self, path: str) -> str:
        return _join_path(self.root, path)

    def create(self, path: str, resources: LinuxResources) -> None:
        """Create the cgroup directory and write each interface priority."""
        directory = self.path(path)
        os.makedirs(directory, DEFAULT_DIR_PERM, exist_ok=True)
        if resources.network is None:
            return
        for prio in resources.network.priorities:
            retrying_write_file(
                _join_path(directory, "net_prio.ifpriomap"),
                format_prio(prio.name, prio.priority),
            )