"""Filesystem locations of the kernel interfaces read during discovery."""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass

from hwinfo.context import Context

UNKNOWN = "unknown"


def _join(*parts: str) -> str:
    joined = "/".join(p for p in parts if p)
    if not joined:
        return "."
    return posixpath.normpath(re.sub("/+", "/", joined))


@dataclass(frozen=True)
class PathRoots:
    """Roots of the filesystem subtrees that are read."""

    etc: str = "/etc"
    proc: str = "/proc"
    run: str = "/run"
    sys: str = "/sys"
    var: str = "/var"


def default_path_roots() -> PathRoots:
    """Return the standard roots."""
    return PathRoots()


def path_roots_from_context(ctx: Context) -> PathRoots:
    """Return the roots, applying any overrides from the context."""
    overrides = ctx.path_overrides or {}
    default = default_path_roots()
    return PathRoots(
        etc=overrides.get("/etc", default.etc),
        proc=overrides.get("/proc", default.proc),
        run=overrides.get("/run", default.run),
        sys=overrides.get("/sys", default.sys),
        var=overrides.get("/var", default.var),
    )


@dataclass(frozen=True)
class Paths:
    """Resolved paths relative to a context's chroot and roots."""

    var_log: str
    proc_meminfo: str
    proc_cpuinfo: str
    proc_mounts: str
    sys_kernel_mm_hugepages: str
    sys_block: str
    sys_devices_system_node: str
    sys_devices_system_memory: str
    sys_bus_pci_devices: str
    sys_class_drm: str
    sys_class_dmi: str
    sys_class_net: str
    run_udev_data: str

    def node_cpu(self, node_id: int, lp_id: int) -> str:
        return _join(self.sys_devices_system_node, f"node{node_id}", f"cpu{lp_id}")

    def node_cpu_cache(self, node_id: int, lp_id: int) -> str:
        return _join(self.node_cpu(node_id, lp_id), "cache")

    def node_cpu_cache_index(self, node_id: int, lp_id: int, cache_index: int) -> str:
        return _join(self.node_cpu_cache(node_id, lp_id), f"index{cache_index}")


def new_paths(ctx: Context) -> Paths:
    """Build the paths for the given context."""
    roots = path_roots_from_context(ctx)
    root = ctx.chroot
    return Paths(
        var_log=_join(root, roots.var, "log"),
        proc_meminfo=_join(root, roots.proc, "meminfo"),
        proc_cpuinfo=_join(root, roots.proc, "cpuinfo"),
        proc_mounts=_join(root, roots.proc, "self", "mounts"),
        sys_kernel_mm_hugepages=_join(root, roots.sys, "kernel", "mm", "hugepages"),
        sys_block=_join(root, roots.sys, "block"),
        sys_devices_system_node=_join(root, roots.sys, "devices", "system", "node"),
        sys_devices_system_memory=_join(root, roots.sys, "devices", "system", "memory"),
        sys_bus_pci_devices=_join(root, roots.sys, "bus", "pci", "devices"),
        sys_class_drm=_join(root, roots.sys, "class", "drm"),
        sys_class_dmi=_join(root, roots.sys, "class", "dmi"),
        sys_class_net=_join(root, roots.sys, "class", "net"),
        run_udev_data=_join(root, roots.run, "udev", "data"),
    )


def safe_int_from_file(ctx: Context, path: str) -> int:
    """Read an integer from a file, returning -1 (with a warning) on failure."""
    try:
        with open(path, "rb") as handle:
            text = handle.read().decode("utf-8", "replace").strip()
    except OSError as exc:
        ctx.warn("Unable to read %s: %s\n", path, exc)
        return -1
    try:
        return int(text)
    except ValueError as exc:
        ctx.warn("Unable to parse %s: %s\n", path, exc)
        return -1