"""Chassis identification."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from hwinfo import dmi
from hwinfo.context import Context, Option, new_context
from hwinfo.marshal import safe_json, safe_yaml
from hwinfo.paths import UNKNOWN

# SMBIOS chassis type names, in order of their numeric code starting at 1.
_CHASSIS_TYPE_NAMES = (
    "Other",
    "Unknown",
    "Desktop",
    "Low profile desktop",
    "Pizza box",
    "Mini tower",
    "Tower",
    "Portable",
    "Laptop",
    "Notebook",
    "Hand held",
    "Docking station",
    "All in one",
    "Sub notebook",
    "Space-saving",
    "Lunch box",
    "Main server chassis",
    "Expansion chassis",
    "SubChassis",
    "Bus Expansion chassis",
    "Peripheral chassis",
    "RAID chassis",
    "Rack mount chassis",
    "Sealed-case PC",
    "Multi-system chassis",
    "Compact PCI",
    "Advanced TCA",
    "Blade",
    "Blade enclosure",
    "Tablet",
    "Convertible",
    "Detachable",
    "IoT gateway",
    "Embedded PC",
    "Mini PC",
    "Stick PC",
)

CHASSIS_TYPE_DESCRIPTIONS: Dict[str, str] = {
    str(code): name for code, name in enumerate(_CHASSIS_TYPE_NAMES, start=1)
}


@dataclass
class ChassisInfo:
    """Chassis release information."""

    ctx: Optional[Context] = field(default=None, repr=False, compare=False)
    asset_tag: str = ""
    serial_number: str = ""
    type: str = ""
    type_description: str = ""
    vendor: str = ""
    version: str = ""

    def __str__(self) -> str:
        parts = [f"chassis type={self.type_description}"]
        if self.vendor:
            parts.append(f"vendor={self.vendor}")
        if self.serial_number and self.serial_number != UNKNOWN:
            parts.append(f"serial={self.serial_number}")
        if self.version:
            parts.append(f"version={self.version}")
        return " ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "asset_tag": self.asset_tag,
            "serial_number": self.serial_number,
            "type": self.type,
            "type_description": self.type_description,
            "vendor": self.vendor,
            "version": self.version,
        }

    def _context(self) -> Context:
        return self.ctx if self.ctx is not None else new_context()

    def yaml_string(self) -> str:
        """Return the information as YAML under a top-level ``chassis`` key."""
        return safe_yaml(self._context(), {"chassis": self})

    def json_string(self, indent: bool) -> str:
        """Return the information as JSON under a top-level ``chassis`` key."""
        return safe_json(self._context(), {"chassis": self}, indent)


def _load(info: ChassisInfo) -> None:
    if not sys.platform.startswith("linux"):
        raise OSError(f"chassis information is not supported on {sys.platform}")
    ctx = info.ctx
    info.asset_tag = dmi.item(ctx, "chassis_asset_tag")
    info.serial_number = dmi.item(ctx, "chassis_serial")
    info.type = dmi.item(ctx, "chassis_type")
    info.type_description = CHASSIS_TYPE_DESCRIPTIONS.get(info.type, UNKNOWN)
    info.vendor = dmi.item(ctx, "chassis_vendor")
    info.version = dmi.item(ctx, "chassis_version")


def new(*args: Option) -> ChassisInfo:
    """Describe the host's chassis."""
    ctx = new_context(*args)
    info = ChassisInfo(ctx=ctx)
    ctx.do(lambda: _load(info))
    return info