"""Graphics card discovery."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from hwinfo.context import Context, Option, new_context
from hwinfo.marshal import safe_json, safe_yaml
from hwinfo.paths import new_paths, safe_int_from_file

_WARN_NO_SYS_CLASS_DRM = """
/sys/class/drm does not exist on this system (likely the host system is a
virtual machine or container with no graphics). Therefore,
GPUInfo.GraphicsCards will be an empty array.
"""


@dataclass
class GraphicsCard:
    """A graphics card found on the host."""

    address: str = ""
    index: int = 0
    device_info: Optional[Any] = None
    node_id: Optional[int] = None
    video_mode_description: str = ""
    caption: str = ""
    creation_class_name: str = ""
    description: str = ""
    device_id: str = ""
    system_creation_class_name: str = ""
    name: str = ""
    system_name: str = ""
    video_architecture: int = 0
    video_memory_type: int = 0
    video_processor: str = ""

    def __str__(self) -> str:
        device = str(self.device_info) if self.device_info is not None else self.address
        node = (
            f" [affined to NUMA node {self.node_id}]" if self.node_id is not None else ""
        )
        return f"card #{self.index} {node}@{device}"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "address": self.address,
            "index": self.index,
            "pci": self.device_info,
        }
        if self.node_id is not None:
            data["node"] = self.node_id
        data.update(
            {
                "video_mode_description": self.video_mode_description,
                "caption": self.caption,
                "creation_class_name": self.creation_class_name,
                "description": self.description,
                "device_id": self.device_id,
                "system_creation_class_name": self.system_creation_class_name,
                "name": self.name,
                "system_name": self.system_name,
                "video_architecture": self.video_architecture,
                "video_memory_type": self.video_memory_type,
                "video_processor": self.video_processor,
            }
        )
        return data


@dataclass
class GpuInfo:
    """The graphics cards on the host system."""

    ctx: Optional[Context] = field(default=None, repr=False, compare=False)
    graphics_cards: List[GraphicsCard] = field(default_factory=list)

    def __str__(self) -> str:
        word = "card" if len(self.graphics_cards) == 1 else "cards"
        return f"gpu ({len(self.graphics_cards)} graphics {word})"

    def to_dict(self) -> Dict[str, Any]:
        return {"cards": [c.to_dict() for c in self.graphics_cards]}

    def _context(self) -> Context:
        return self.ctx if self.ctx is not None else new_context()

    def yaml_string(self) -> str:
        """Return the information as YAML under a top-level ``gpu`` key."""
        return safe_yaml(self._context(), {"gpu": self})

    def json_string(self, indent: bool) -> str:
        """Return the information as JSON under a top-level ``gpu`` key."""
        return safe_json(self._context(), {"gpu": self}, indent)


def _fill_numa_nodes(ctx: Context, drm_dir: str, cards: List[GraphicsCard]) -> None:
    for card in cards:
        path = os.path.join(drm_dir, f"card{card.index}", "device", "numa_node")
        node = safe_int_from_file(ctx, path)
        if node != -1:
            card.node_id = node


def _load(info: GpuInfo) -> None:
    if not sys.platform.startswith("linux"):
        raise OSError(f"GPU information is not supported on {sys.platform}")
    ctx = info.ctx
    drm_dir = new_paths(ctx).sys_class_drm
    try:
        names = sorted(os.listdir(drm_dir))
    except OSError:
        ctx.warn(_WARN_NO_SYS_CLASS_DRM)
        return
    cards: List[GraphicsCard] = []
    for name in names:
        if not name.startswith("card") or "-" in name:
            continue
        try:
            index = int(name[4:])
        except ValueError:
            index = -1
        try:
            dest = os.readlink(os.path.join(drm_dir, name))
        except OSError:
            continue
        parts = dest.split("/")
        if len(parts) < 3:
            continue
        cards.append(GraphicsCard(address=parts[-3], index=index))
    _fill_numa_nodes(ctx, drm_dir, cards)
    info.graphics_cards = cards


def new(*args: Option) -> GpuInfo:
    """Describe the graphics cards on the host system."""
    ctx = new_context(*args)
    info = GpuInfo(ctx=ctx)
    ctx.do(lambda: _load(info))
    return info