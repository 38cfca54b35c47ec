"""Google Drive client package: OAuth tokens and PDF uploads."""

from profile_pdf.drive.client import DriveClient
from profile_pdf.drive.models import OAuthTokens, StoredFile
from profile_pdf.drive.oauth import GoogleOAuth, TokenStore

__all__ = [
    "DriveClient",
    "GoogleOAuth",
    "OAuthTokens",
    "StoredFile",
    "TokenStore",
]
