[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cgroupctl"
version = "0.1.0"
description = "Create, configure, inspect and tear down Linux cgroup v1 groups"
requires-python = ">=3.10"
dependencies = []
keywords = ["cgroups", "linux", "containers", "resources", "metrics"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System Kernels :: Linux",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["cgroupctl"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
