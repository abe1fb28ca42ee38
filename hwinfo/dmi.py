"""Reading of DMI identification values from sysfs."""

from __future__ import annotations

import os

from hwinfo.context import Context
from hwinfo.paths import UNKNOWN, new_paths


def item(ctx: Context, value: str) -> str:
    """Return the named DMI value, or ``"unknown"`` if it cannot be read."""
    path = os.path.join(new_paths(ctx).sys_class_dmi, "id", value)
    try:
        with open(path, "rb") as handle:
            data = handle.read()
    except OSError as exc:
        ctx.warn("Unable to read %s: %s\n", value, exc)
        return UNKNOWN
    return data.decode("utf-8", "replace").strip()