"""Document rendering package: template substitution and print-ready PDFs.

Uses plain token substitution for the HTML and Playwright (headless
Chromium) for section pruning, chart capture and PDF generation.
"""

from __future__ import annotations

from profile_pdf.renderer.pdf_engine import render_profile_pdf
from profile_pdf.renderer.pruner import AcademyRule, PrunerOptions, is_blank, prune
from profile_pdf.renderer.template import LIST_FIELDS, render

__all__ = [
    "AcademyRule",
    "LIST_FIELDS",
    "PrunerOptions",
    "is_blank",
    "prune",
    "render",
    "render_profile_pdf",
]
