"""Field formatting helpers used by the template renderer."""

from __future__ import annotations

from typing import Any


def stringify(value: Any) -> str:
    """Coerce a JSON value to text the way the payloads were written.

    Booleans become ``true``/``false``, ``None`` becomes ``null`` and
    integral floats drop their fractional part, so ``3.0`` renders as ``3``.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def nl2br(text: str) -> str:
    """Convert newlines to <br> tags."""
    if not text:
        return ""
    return text.replace("\n", "<br>")


def list_block(text: str) -> str:
    """Format a multi-line field as a paragraph or a bullet list.

    Blank lines are dropped.  One remaining line becomes ``<p>``; anything
    else becomes a ``<ul>`` with the leading "- " marker stripped from each
    item.  Whitespace-only input yields an empty ``<ul></ul>``.
    """
    lines = [line.strip() for line in (text or "").split("\n")]
    lines = [line for line in lines if line]

    if len(lines) == 1:
        return f"<p>{lines[0]}</p>"

    items = "".join(f"<li>{_strip_marker(line)}</li>" for line in lines)
    return f"<ul>{items}</ul>"


def _strip_marker(line: str) -> str:
    if line.startswith("- "):
        line = line[2:]
    return line.strip()


def format_date(iso_date: str | None) -> str:
    """'2024-03-07' -> '07 / 03 / 2024'.  Empty input gives ''."""
    if not iso_date:
        return ""
    parts = str(iso_date).split("-")
    year = parts[0]
    month = parts[1] if len(parts) > 1 else ""
    day = parts[2] if len(parts) > 2 else ""
    return f"{day} / {month} / {year}"
