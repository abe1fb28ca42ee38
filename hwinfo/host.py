"""Combined description of the host system's hardware."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from hwinfo import baseboard as _baseboard
from hwinfo import bios as _bios
from hwinfo import block_darwin, block_linux
from hwinfo import chassis as _chassis
from hwinfo import cpu as _cpu
from hwinfo import gpu as _gpu
from hwinfo.baseboard import BaseboardInfo
from hwinfo.bios import BiosInfo
from hwinfo.block import BlockInfo
from hwinfo.chassis import ChassisInfo
from hwinfo.context import Context, Option, new_context
from hwinfo.cpu import CpuInfo
from hwinfo.gpu import GpuInfo
from hwinfo.marshal import safe_json, safe_yaml


def _load_block(ctx: Context) -> BlockInfo:
    if sys.platform.startswith("linux"):
        return block_linux.load(ctx)
    if sys.platform == "darwin":
        return block_darwin.load(ctx)
    raise OSError(f"block information is not supported on {sys.platform}")


def block(*args: Option) -> BlockInfo:
    """Describe the block storage resources of the host system."""
    ctx = new_context(*args)
    return ctx.do(lambda: _load_block(ctx))


@dataclass
class HostInfo:
    """Hardware information about the host, one record per component."""

    ctx: Optional[Context] = field(default=None, repr=False, compare=False)
    block: BlockInfo = field(default_factory=BlockInfo)
    cpu: CpuInfo = field(default_factory=CpuInfo)
    gpu: GpuInfo = field(default_factory=GpuInfo)
    chassis: ChassisInfo = field(default_factory=ChassisInfo)
    bios: BiosInfo = field(default_factory=BiosInfo)
    baseboard: BaseboardInfo = field(default_factory=BaseboardInfo)

    def __str__(self) -> str:
        parts = (self.block, self.cpu, self.gpu, self.chassis, self.bios, self.baseboard)
        return "".join(f"{part}\n" for part in parts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "block": self.block.to_dict(),
            "cpu": self.cpu.to_dict(),
            "gpu": self.gpu.to_dict(),
            "chassis": self.chassis.to_dict(),
            "bios": self.bios.to_dict(),
            "baseboard": self.baseboard.to_dict(),
        }

    def _context(self) -> Context:
        return self.ctx if self.ctx is not None else new_context()

    def yaml_string(self) -> str:
        """Return the host information as YAML."""
        return safe_yaml(self._context(), self)

    def json_string(self, indent: bool) -> str:
        """Return the host information as JSON."""
        return safe_json(self._context(), self, indent)


def host(*args: Option) -> HostInfo:
    """Gather information about every supported component of the host."""
    ctx = new_context(*args)
    block_info = block(*args)
    cpu_info = _cpu.new(*args)
    gpu_info = _gpu.new(*args)
    chassis_info = _chassis.new(*args)
    bios_info = _bios.new(*args)
    baseboard_info = _baseboard.new(*args)
    return HostInfo(
        ctx=ctx,
        block=block_info,
        cpu=cpu_info,
        gpu=gpu_info,
        chassis=chassis_info,
        bios=bios_info,
        baseboard=baseboard_info,
    )