"""Where generated PDFs go: a local folder (test mode) or Google Drive."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Protocol

from profile_pdf.drive.client import DriveClient
from profile_pdf.drive.models import StoredFile
from profile_pdf.exceptions import StorageError

logger = logging.getLogger(__name__)


class PdfStorage(Protocol):
    def store(self, pdf_bytes: bytes, file_name: str,
              folder_id: Optional[str] = None) -> StoredFile: ...


class LocalStore:
    """Writes PDFs under a fixed output directory, creating it on demand."""

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)

    def store(self, pdf_bytes: bytes, file_name: str,
              folder_id: Optional[str] = None) -> StoredFile:
        # folder_id only applies to Drive
        local_path = self.output_dir / file_name
        if local_path.resolve().parent != self.output_dir.resolve():
            raise StorageError(f"Refusing to write {file_name!r} outside {self.output_dir}")
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            local_path.write_bytes(pdf_bytes)
        except OSError as exc:
            raise StorageError(f"Could not write {local_path}: {exc}") from exc
        logger.info("PDF saved locally: %s", local_path)
        return StoredFile(file_name=file_name, local_path=local_path.resolve())


class DriveStore:
    """Uploads PDFs through a DriveClient."""

    def __init__(self, client: DriveClient):
        self.client = client

    def store(self, pdf_bytes: bytes, file_name: str,
              folder_id: Optional[str] = None) -> StoredFile:
        return self.client.upload(pdf_bytes, file_name, folder_id)
