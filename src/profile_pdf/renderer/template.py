"""Placeholder substitution for the profile HTML template.

Tokens look like ``{{ name }}`` (whitespace optional).  There are no
directives: each token is replaced once, in a single left-to-right pass.

  - Fields missing from the map leave the token text exactly as written.
  - LIST_FIELDS render as ``<p>`` (one line) or ``<ul>`` (several lines).
  - Everything else has newlines turned into ``<br>``.

Values are trusted markup; nothing is escaped.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

from profile_pdf.renderer.filters import list_block, nl2br, stringify

TOKEN_RE = re.compile(r"\{\{\s*(\w+)\s*\}\}")

LIST_FIELDS = frozenset({
    "interests",
    "webinars",
    "team",
    "position",
    "trips",
    "tasks",
    "leadershipAcademy",
})


def format_field(key: str, value: Any) -> str:
    """Format one present field value for insertion into the template."""
    text = stringify(value)
    if key in LIST_FIELDS:
        return list_block(text)
    return nl2br(text)


def render(template: str, fields: Mapping[str, Any]) -> str:
    """Substitute every token in *template* from *fields*."""

    def _replace(match: re.Match) -> str:
        key = match.group(1)
        if key not in fields:
            return match.group(0)
        return format_field(key, fields[key])

    return TOKEN_RE.sub(_replace, template)


def unresolved_tokens(html: str) -> list[str]:
    """Names of tokens still present in *html*, in order of appearance."""
    return TOKEN_RE.findall(html)
