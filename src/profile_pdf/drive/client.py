"""
Google Drive client: uploads generated PDFs.

All interaction with the Drive v3 REST API goes through this module.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Optional

import httpx

from profile_pdf.drive.models import StoredFile
from profile_pdf.drive.oauth import GoogleOAuth, _error_detail
from profile_pdf.exceptions import AuthError, StorageError

logger = logging.getLogger(__name__)

UPLOAD_URL = "https://www.googleapis.com/upload/drive/v3/files"


def build_multipart_body(metadata: dict, content: bytes, mime_type: str,
                         boundary: str) -> bytes:
    """Assemble a ``multipart/related`` body: JSON metadata then file bytes."""
    head = (
        f"--{boundary}\r\n"
        "Content-Type: application/json; charset=UTF-8\r\n\r\n"
        f"{json.dumps(metadata)}\r\n"
        f"--{boundary}\r\n"
        f"Content-Type: {mime_type}\r\n\r\n"
    ).encode("utf-8")
    tail = f"\r\n--{boundary}--\r\n".encode("utf-8")
    return head + content + tail


class DriveClient:
    """HTTP client for Google Drive uploads."""

    def __init__(self, oauth: GoogleOAuth, *, http: httpx.Client | None = None,
                 timeout: float = 60.0):
        self.oauth = oauth
        self.client = http or httpx.Client(timeout=timeout)

    def upload(self, pdf_bytes: bytes, file_name: str,
               folder_id: Optional[str] = None) -> StoredFile:
        """Upload a PDF, optionally into *folder_id*.

        Returns:
            StoredFile with the Drive file id and its web view link.

        Raises:
            AuthError: Not authenticated or Drive rejected the token.
            StorageError: Any other upload failure.
        """
        metadata: dict = {"name": file_name}
        if folder_id:
            metadata["parents"] = [folder_id]

        boundary = f"profile-pdf-{uuid.uuid4().hex}"
        body = build_multipart_body(metadata, pdf_bytes, "application/pdf", boundary)
        headers = {
            "Authorization": f"Bearer {self.oauth.access_token()}",
            "Content-Type": f"multipart/related; boundary={boundary}",
        }

        try:
            logger.debug("Uploading %s (%d bytes) to Drive", file_name, len(pdf_bytes))
            resp = self.client.post(
                UPLOAD_URL,
                params={"uploadType": "multipart", "fields": "id, webViewLink"},
                content=body,
                headers=headers,
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            detail = _error_detail(exc.response)
            if status == 401:
                raise AuthError(f"Drive rejected the access token: {detail}") from exc
            raise StorageError(f"Drive upload failed (HTTP {status}): {detail}") from exc
        except httpx.TimeoutException as exc:
            raise StorageError("Drive upload timed out") from exc
        except httpx.RequestError as exc:
            raise StorageError(f"Network error uploading to Drive: {exc}") from exc

        data = resp.json()
        logger.info("Uploaded %s to Drive as %s", file_name, data.get("id"))
        return StoredFile(
            file_name=file_name,
            file_id=data.get("id", ""),
            view_link=data.get("webViewLink", ""),
        )

    def close(self):
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
