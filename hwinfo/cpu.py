"""Central processing unit discovery."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from hwinfo.context import Context, Option, new_context
from hwinfo.marshal import safe_json, safe_yaml
from hwinfo.paths import new_paths, safe_int_from_file


def _format_int_list(values: List[int]) -> str:
    return "[" + " ".join(str(v) for v in values) + "]"


@dataclass
class ProcessorCore:
    """A physical core within a processor package."""

    id: int = 0
    index: int = 0
    num_threads: int = 0
    logical_processors: List[int] = field(default_factory=list)

    def __str__(self) -> str:
        return (
            f"processor core #{self.index} ({self.num_threads} threads), "
            f"logical processors {_format_int_list(self.logical_processors)}"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "index": self.index,
            "total_threads": self.num_threads,
            "logical_processors": list(self.logical_processors),
        }


@dataclass
class Processor:
    """A physical processor package."""

    id: int = 0
    num_cores: int = 0
    num_threads: int = 0
    vendor: str = ""
    model: str = ""
    capabilities: List[str] = field(default_factory=list)
    cores: List[ProcessorCore] = field(default_factory=list)

    def has_capability(self, find: str) -> bool:
        """Return True if the processor reports the given cpuid flag."""
        return find in self.capabilities

    def __str__(self) -> str:
        ncs = "core" if self.num_cores == 1 else "cores"
        nts = "thread" if self.num_threads == 1 else "threads"
        return (
            f"physical package #{self.id} ({self.num_cores} {ncs}, "
            f"{self.num_threads} hardware {nts})"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "total_cores": self.num_cores,
            "total_threads": self.num_threads,
            "vendor": self.vendor,
            "model": self.model,
            "capabilities": list(self.capabilities),
            "cores": [c.to_dict() for c in self.cores],
        }


@dataclass
class CpuInfo:
    """All CPU functionality on a host."""

    ctx: Optional[Context] = field(default=None, repr=False, compare=False)
    total_cores: int = 0
    total_threads: int = 0
    processors: List[Processor] = field(default_factory=list)

    def __str__(self) -> str:
        nps = "package" if len(self.processors) == 1 else "packages"
        ncs = "core" if self.total_cores == 1 else "cores"
        nts = "thread" if self.total_threads == 1 else "threads"
        return (
            f"cpu ({len(self.processors)} physical {nps}, {self.total_cores} {ncs}, "
            f"{self.total_threads} hardware {nts})"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_cores": self.total_cores,
            "total_threads": self.total_threads,
            "processors": [p.to_dict() for p in self.processors],
        }

    def _context(self) -> Context:
        return self.ctx if self.ctx is not None else new_context()

    def yaml_string(self) -> str:
        """Return the information as YAML under a top-level ``cpu`` key."""
        return safe_yaml(self._context(), {"cpu": self})

    def json_string(self, indent: bool) -> str:
        """Return the information as JSON under a top-level ``cpu`` key."""
        return safe_json(self._context(), {"cpu": self}, indent)


def _parse_blocks(text: str) -> List[Dict[str, str]]:
    blocks: List[Dict[str, str]] = []
    current: Dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            blocks.append(current)
            current = {}
            continue
        parts = line.split(":")
        if len(parts) < 2:
            continue
        current[parts[0].strip()] = parts[1].strip()
    return blocks


def _to_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def processors_from_cpuinfo(text: str) -> List[Processor]:
    """Build the physical processors described by /proc/cpuinfo content."""
    blocks = _parse_blocks(text)
    physical_ids = sorted(
        {pid for pid in (_to_int(b.get("physical id")) for b in blocks) if pid is not None}
    )
    procs: List[Processor] = []
    for pid in physical_ids:
        logical = [b for b in blocks if _to_int(b.get("physical id")) == pid]
        first = logical[0]
        num_cores = _to_int(first.get("cpu cores"))
        num_threads = _to_int(first.get("siblings"))
        if num_cores is None or num_threads is None:
            continue
        proc = Processor(
            id=pid,
            num_cores=num_cores,
            num_threads=num_threads,
            vendor=first.get("vendor_id", ""),
            model=first.get("model name", ""),
            capabilities=first.get("flags", "").split(" "),
        )
        cores: List[ProcessorCore] = []
        for attrs in logical:
            lp_id = _to_int(attrs.get("processor"))
            core_id = _to_int(attrs.get("core id"))
            if lp_id is None or core_id is None:
                continue
            core = next((c for c in cores if c.id == core_id), None)
            if core is None:
                cores.append(
                    ProcessorCore(
                        id=core_id,
                        index=len(cores),
                        num_threads=1,
                        logical_processors=[lp_id],
                    )
                )
            else:
                core.logical_processors.append(lp_id)
                core.num_threads = len(core.logical_processors)
        proc.cores = cores
        procs.append(proc)
    return procs


def cores_for_node(ctx: Context, node_id: int) -> List[ProcessorCore]:
    """Return the cores whose logical processors belong to the NUMA node."""
    path = os.path.join(new_paths(ctx).sys_devices_system_node, f"node{node_id}")
    cores: List[ProcessorCore] = []
    for filename in sorted(os.listdir(path)):
        if not filename.startswith("cpu") or filename in ("cpumap", "cpulist"):
            continue
        try:
            proc_id = int(filename[3:])
        except ValueError:
            sys.stderr.write(
                f"failed to determine procID from {filename}. "
                "Expected integer after 3rd char."
            )
            continue
        core_id = safe_int_from_file(
            ctx, os.path.join(path, filename, "topology", "core_id")
        )
        core = next((c for c in cores if c.id == core_id), None)
        if core is None:
            core = ProcessorCore(id=core_id, index=len(cores))
            cores.append(core)
        core.logical_processors.append(proc_id)
    for core in cores:
        core.num_threads = len(core.logical_processors)
    return cores


def _load(info: CpuInfo) -> None:
    if not sys.platform.startswith("linux"):
        raise OSError(f"CPU information is not supported on {sys.platform}")
    path = new_paths(info.ctx).proc_cpuinfo
    try:
        with open(path, encoding="utf-8", errors="replace") as handle:
            text = handle.read()
    except OSError:
        info.processors = []
    else:
        info.processors = processors_from_cpuinfo(text)
    info.total_cores = sum(p.num_cores for p in info.processors)
    info.total_threads = sum(p.num_threads for p in info.processors)


def new(*args: Option) -> CpuInfo:
    """Describe the CPUs on the host system."""
    ctx = new_context(*args)
    info = CpuInfo(ctx=ctx)
    ctx.do(lambda: _load(info))
    return info