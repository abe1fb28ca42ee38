"""Discover block storage, CPU, GPU, chassis, BIOS and baseboard information about the host."""

__version__ = "0.1.0"

__all__ = [
    "baseboard",
    "bios",
    "block",
    "block_darwin",
    "block_linux",
    "chassis",
    "cli",
    "context",
    "cpu",
    "dmi",
    "gpu",
    "host",
    "marshal",
    "paths",
]