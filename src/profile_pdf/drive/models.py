"""Data models for stored PDFs and OAuth tokens."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class StoredFile:
    """Where a generated PDF ended up: local disk or Google Drive."""
    file_name: str
    local_path: Optional[Path] = None   # set for local saves
    file_id: str = ""                   # set for Drive uploads
    view_link: str = ""

    @property
    def is_local(self) -> bool:
        return self.local_path is not None

    def to_response(self) -> dict:
        """Storage keys of the JSON success payload."""
        if self.is_local:
            return {"localPath": str(self.local_path), "fileName": self.file_name}
        return {"fileId": self.file_id, "viewLink": self.view_link}


@dataclass
class OAuthTokens:
    """Google OAuth token set, stored in the same shape googleapis writes.

    ``expiry_date`` is milliseconds since the epoch (0 = unknown).
    """
    access_token: str
    refresh_token: str = ""
    token_type: str = "Bearer"
    scope: str = ""
    expiry_date: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "OAuthTokens":
        return cls(
            access_token=data.get("access_token", ""),
            refresh_token=data.get("refresh_token", "") or "",
            token_type=data.get("token_type", "Bearer") or "Bearer",
            scope=data.get("scope", "") or "",
            expiry_date=int(data.get("expiry_date") or 0),
        )

    def to_dict(self) -> dict:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "token_type": self.token_type,
            "scope": self.scope,
            "expiry_date": self.expiry_date,
        }

    def is_expired(self, now_ms: int, leeway_ms: int = 60_000) -> bool:
        if not self.expiry_date:
            return False
        return now_ms >= self.expiry_date - leeway_ms
