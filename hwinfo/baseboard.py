"""Baseboard (motherboard) identification."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from hwinfo import dmi
from hwinfo.context import Context, Option, new_context
from hwinfo.marshal import safe_json, safe_yaml
from hwinfo.paths import UNKNOWN


@dataclass
class BaseboardInfo:
    """Baseboard release information."""

    ctx: Optional[Context] = field(default=None, repr=False, compare=False)
    asset_tag: str = ""
    serial_number: str = ""
    vendor: str = ""
    version: str = ""
    product: str = ""

    def __str__(self) -> str:
        vendor = f" vendor={self.vendor}" if self.vendor else ""
        serial = (
            f" serial={self.serial_number}"
            if self.serial_number and self.serial_number != UNKNOWN
            else ""
        )
        version = f" version={self.version}" if self.version else ""
        product = f" product={self.product}" if self.product else ""
        return "baseboard" + vendor + serial + version + product

    def to_dict(self) -> Dict[str, Any]:
        return {
            "asset_tag": self.asset_tag,
            "serial_number": self.serial_number,
            "vendor": self.vendor,
            "version": self.version,
            "product": self.product,
        }

    def _context(self) -> Context:
        return self.ctx if self.ctx is not None else new_context()

    def yaml_string(self) -> str:
        """Return the information as YAML under a top-level ``baseboard`` key."""
        return safe_yaml(self._context(), {"baseboard": self})

    def json_string(self, indent: bool) -> str:
        """Return the information as JSON under a top-level ``baseboard`` key."""
        return safe_json(self._context(), {"baseboard": self}, indent)


def _load(info: BaseboardInfo) -> None:
    if not sys.platform.startswith("linux"):
        raise OSError(f"baseboard information is not supported on {sys.platform}")
    ctx = info.ctx
    info.asset_tag = dmi.item(ctx, "board_asset_tag")
    info.serial_number = dmi.item(ctx, "board_serial")
    info.vendor = dmi.item(ctx, "board_vendor")
    info.version = dmi.item(ctx, "board_version")
    info.product = dmi.item(ctx, "board_name")


def new(*args: Option) -> BaseboardInfo:
    """Describe the host's baseboard."""
    ctx = new_context(*args)
    info = BaseboardInfo(ctx=ctx)
    ctx.do(lambda: _load(info))
    return info