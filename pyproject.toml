[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hwinfo"
version = "0.1.0"
description = "Discover hardware information about the host: CPU, block storage, GPU, chassis, BIOS and baseboard."
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["hardware", "inventory", "sysfs", "cpu", "block", "gpu", "dmi", "bios"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Operating System :: MacOS",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Hardware",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
hwinfo = "hwinfo.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["hwinfo"]

[tool.pytest.ini_options]
addopts = "-ra"
