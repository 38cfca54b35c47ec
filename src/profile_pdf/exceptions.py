"""Custom exception hierarchy for profile_pdf."""

from __future__ import annotations


class ProfilePdfError(Exception):
    """Base exception for all profile_pdf errors."""


class MissingTemplateError(ProfilePdfError):
    """The HTML template file does not exist."""


class RenderingError(ProfilePdfError):
    """Errors while driving the headless browser (evaluate, PDF capture)."""


class ContentLoadTimeout(RenderingError):
    """The page did not settle within the configured load timeout."""


class StorageError(ProfilePdfError):
    """Writing the PDF to disk or uploading it to Drive failed."""


class AuthError(ProfilePdfError):
    """Missing, rejected, or unrefreshable Google OAuth credentials."""
