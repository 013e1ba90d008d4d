"""The freezer controller: pausing and resuming every process of a cgroup."""

from __future__ import annotations

import time

from .control import Name, State, Subsystem, _join_path, retrying_write_file
from .errors import InvalidFormatError


class FreezerController(Subsystem):
    """Freezer subsystem."""

    name = Name.FREEZER

    def __init__(self, root: str) -> None:
        super().__init__(root)

    def path(self, path: str) -> str:
        return _join_path(self.root, path)

    def freeze(self, path: str) -> None:
        """Freeze the cgroup and wait until it reports frozen."""
        self._wait_state(path, State.FROZEN)

    def thaw(self, path: str) -> None:
        """Thaw the cgroup and wait until it reports thawed."""
        self._wait_state(path, State.THAWED)

    def state(self, path: str) -> State:
        """Return the current freezer state of the cgroup."""
        with open(_join_path(self.root, path, "freezer.state"), encoding="utf-8") as handle:
            text = handle.read().strip().lower()
        try:
            return State(text)
        except ValueError:
            raise InvalidFormatError(f"unknown freezer state: {text!r}") from None

    def _change_state(self, path: str, state: State) -> None:
        retrying_write_file(
            _join_path(self.root, path, "freezer.state"), state.value.upper()
        )

    def _wait_state(self, path: str, state: State) -> None:
        while True:
            self._change_state(path, state)
            if self.state(path) == state:
                return
            time.sleep(0.001)