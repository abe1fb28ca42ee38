"""BIOS identification."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from hwinfo import dmi
from hwinfo.context import Context, Option, new_context
from hwinfo.marshal import safe_json, safe_yaml
from hwinfo.paths import UNKNOWN


@dataclass
class BiosInfo:
    """BIOS release information."""

    ctx: Optional[Context] = field(default=None, repr=False, compare=False)
    vendor: str = ""
    version: str = ""
    date: str = ""

    def __str__(self) -> str:
        vendor = f" vendor={self.vendor}" if self.vendor else ""
        version = f" version={self.version}" if self.version else ""
        date = f" date={self.date}" if self.date and self.date != UNKNOWN else ""
        return f"bios{vendor}{version}{date}"

    def to_dict(self) -> Dict[str, Any]:
        return {"vendor": self.vendor, "version": self.version, "date": self.date}

    def _context(self) -> Context:
        return self.ctx if self.ctx is not None else new_context()

    def yaml_string(self) -> str:
        """Return the information as YAML under a top-level ``bios`` key."""
        return safe_yaml(self._context(), {"bios": self})

    def json_string(self, indent: bool) -> str:
        """Return the information as JSON under a top-level ``bios`` key."""
        return safe_json(self._context(), {"bios": self}, indent)


def _load(info: BiosInfo) -> None:
    if not sys.platform.startswith("linux"):
        raise OSError(f"BIOS information is not supported on {sys.platform}")
    ctx = info.ctx
    info.vendor = dmi.item(ctx, "bios_vendor")
    info.version = dmi.item(ctx, "bios_version")
    info.date = dmi.item(ctx, "bios_date")


def new(*args: Option) -> BiosInfo:
    """Describe the host's BIOS."""
    ctx = new_context(*args)
    info = BiosInfo(ctx=ctx)
    ctx.do(lambda: _load(info))
    return info