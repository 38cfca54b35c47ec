"""HTTP surface: FastAPI app for the OAuth flow and PDF uploads."""

from __future__ import annotations


def launch() -> None:
    """Start the profile PDF web service."""
    from profile_pdf.web.app import main

    main()
