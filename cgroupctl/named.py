"""Controllers that only provide a directory: named hierarchies and perf_event."""

from __future__ import annotations

from .control import Name, Subsystem, _join_path


class NamedController(Subsystem):
    """A named hierarchy such as ``name=systemd``."""

    def __init__(self, root: str, name: str) -> None:
        self.root = root
        self.name = name

    def path(self, path: str) -> str:
        return _join_path(self.root, str(self.name), path)


class PerfEventController(Subsystem):
    """The perf_event subsystem."""

    name = Name.PERF_EVENT

    def __init__(self, root: str) -> None:
        super().__init__(root)

    def path(self, path: str) -> str:
        return _join_path(self.root, path)