"""Management of Linux cgroup v1 groups: controllers, limits, processes, freezing and metrics."""

__version__ = "0.1.0"