"""Serialisation of information records to JSON and YAML."""

from __future__ import annotations

import json
from typing import Any

import yaml

from hwinfo.context import Context


def _default(obj: Any) -> Any:
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def safe_yaml(ctx: Context, data: Any) -> str:
    """Return ``data`` as YAML, or an empty string (with a warning) on failure."""
    try:
        text = json.dumps(data, default=_default, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        ctx.warn("error marshalling JSON: %s", exc)
        return ""
    try:
        return yaml.safe_dump(json.loads(text), default_flow_style=False, allow_unicode=True)
    except yaml.YAMLError as exc:
        ctx.warn("error converting JSON to YAML: %s", exc)
        return ""


def safe_json(ctx: Context, data: Any, indent: bool) -> str:
    """Return ``data`` as JSON, indented by two spaces when ``indent`` is true."""
    try:
        if indent:
            return json.dumps(data, default=_default, ensure_ascii=False, indent=2)
        return json.dumps(data, default=_default, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        ctx.warn("error marshalling JSON: %s", exc)
        return ""