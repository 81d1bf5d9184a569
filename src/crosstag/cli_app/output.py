"""Rendering of command results."""

import argparse
import json
from typing import Any


def _render_text(payload: Any, indent: int = 0) -> list[str]:
    pad = "  " * indent
    if isinstance(payload, dict):
        lines = []
        for key, value in payload.items():
            if isinstance(value, (dict, list)):
                lines.append(f"{pad}{key}:")
                lines.extend(_render_text(value, indent + 1))
            else:
                lines.append(f"{pad}{key}: {value}")
        return lines
    if isinstance(payload, list):
        lines = []
        for entry in payload:
            if isinstance(entry, (dict, list)):
                lines.append(f"{pad}-")
                lines.extend(_render_text(entry, indent + 1))
            else:
                lines.append(f"{pad}- {entry}")
        return lines
    return [f"{pad}{payload}"]


def emit(args: argparse.Namespace, payload: Any) -> None:
    """Print a payload in the format selected by ``--output``."""
    if getattr(args, "output", "json") == "text":
        print("\n".join(_render_text(payload)))
        return
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))
