"""Profile PDF service: JSON profile payload -> styled PDF -> disk or Drive."""

from __future__ import annotations

from profile_pdf.version import __version__

__all__ = ["__version__"]
