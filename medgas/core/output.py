"""
Output formatters for CLI display.

Supports human-readable, JSON, and markdown output modes. Nested result
dicts are flattened to dotted parameter names for the tabular modes.
"""

import json
from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class OutputFormat(str, Enum):
    HUMAN = "human"
    JSON = "json"
    MARKDOWN = "markdown"


def format_result(
    result: Any,
    fmt: OutputFormat = OutputFormat.HUMAN,
    title: Optional[str] = None,
) -> str:
    """Format a result object for display."""
    fmt = OutputFormat(fmt)
    if fmt == OutputFormat.JSON:
        return _format_json(result)
    elif fmt == OutputFormat.MARKDOWN:
        return _format_markdown(result, title)
    else:
        return _format_human(result, title)


def _to_dict(result: Any) -> Dict:
    if hasattr(result, "to_dict"):
        return result.to_dict()
    elif is_dataclass(result):
        return asdict(result)
    elif isinstance(result, dict):
        return result
    elif hasattr(result, "__dict__"):
        return result.__dict__
    return {"value": str(result)}


def _flatten(data: Dict, prefix: str = "") -> List[Tuple[str, Any]]:
    items = []
    for key, value in data.items():
        name = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict) and value:
            items.extend(_flatten(value, name))
        else:
            items.append((name, value))
    return items


def format_number(value: float) -> str:
    """Three decimals below 100, thousands separators above."""
    return f"{value:.3f}" if abs(value) < 100 else f"{value:,.1f}"


def _label(name: str) -> str:
    return " / ".join(part.replace("_", " ").title() for part in name.split("."))


def _format_json(result: Any) -> str:
    return json.dumps(_to_dict(result), indent=2, default=str)


def _format_human(result: Any, title: Optional[str] = None) -> str:
    lines = []
    if title:
        lines.extend([title, "=" * len(title), ""])

    items = _flatten(_to_dict(result))
    labels = [_label(k) for k, _ in items]
    width = max((len(lbl) for lbl in labels), default=0)

    for label, (_, value) in zip(labels, items):
        if isinstance(value, bool):
            formatted = "yes" if value else "no"
        elif isinstance(value, float):
            formatted = format_number(value)
        elif isinstance(value, list):
            formatted = "\n".join(f"  - {v}" for v in value) if value else "(none)"
            if value:
                formatted = "\n" + formatted
        elif value is None:
            formatted = "-"
        else:
            formatted = str(value)
        lines.append(f"{label:<{width + 2}}: {formatted}")

    return "\n".join(lines)


def _format_markdown(result: Any, title: Optional[str] = None) -> str:
    lines = []
    if title:
        lines.extend([f"# {title}", ""])

    lines.extend(["| Parameter | Value |", "|-----------|-------|"])

    for key, value in _flatten(_to_dict(result)):
        if isinstance(value, float) and not isinstance(value, bool):
            formatted = format_number(value)
        elif isinstance(value, list):
            formatted = ", ".join(str(v) for v in value) if value else "-"
        elif value is None:
            formatted = "-"
        else:
            formatted = str(value)
        lines.append(f"| {_label(key)} | {formatted} |")

    return "\n".join(lines)
