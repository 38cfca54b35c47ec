"""
Google OAuth 2.0: consent URL, code exchange, token cache and refresh.

Tokens are kept in memory and mirrored to ``tokens.json`` so a restart
does not require the consent flow again.  The cache is shared by all
requests; concurrent refreshes simply overwrite each other.
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Optional
from urllib.parse import urlencode

import httpx

from profile_pdf.drive.models import OAuthTokens
from profile_pdf.exceptions import AuthError

logger = logging.getLogger(__name__)

AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
DRIVE_SCOPE = "https://www.googleapis.com/auth/drive"


class TokenStore:
    """JSON file holding the current token set."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Optional[OAuthTokens]:
        """Read tokens from disk; None if the file is absent or unreadable."""
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.error("Failed to load tokens from %s: %s", self.path, exc)
            return None
        tokens = OAuthTokens.from_dict(data)
        if not tokens.access_token and not tokens.refresh_token:
            return None
        logger.info("Loaded existing tokens")
        return tokens

    def save(self, tokens: OAuthTokens) -> None:
        """Write tokens with 0600 permissions."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(tokens.to_dict(), indent=2), encoding="utf-8")
        try:
            self.path.chmod(0o600)
        except OSError:
            logger.debug("Could not chmod %s", self.path, exc_info=True)


class GoogleOAuth:
    """OAuth client for the installed-web-app flow used by the upload endpoint."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        store: TokenStore,
        *,
        http: httpx.Client | None = None,
        timeout: float = 30.0,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.store = store
        self.client = http or httpx.Client(timeout=timeout)
        self._tokens: Optional[OAuthTokens] = None

    # -- Token cache --------------------------------------------------------

    @property
    def tokens(self) -> Optional[OAuthTokens]:
        """Cached tokens, reloaded from disk while none are held."""
        if self._tokens is None:
            self._tokens = self.store.load()
        return self._tokens

    @property
    def is_authenticated(self) -> bool:
        return self.tokens is not None

    def set_tokens(self, tokens: OAuthTokens) -> None:
        self._tokens = tokens
        self.store.save(tokens)

    # -- Consent flow -------------------------------------------------------

    def authorization_url(self) -> str:
        """URL of the Google consent screen (offline access, forced prompt)."""
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "access_type": "offline",
            "prompt": "consent",
            "scope": DRIVE_SCOPE,
        }
        return f"{AUTH_URL}?{urlencode(params)}"

    def exchange_code(self, code: str) -> OAuthTokens:
        """Trade an authorization code for tokens and persist them."""
        data = self._post_token({
            "code": code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
            "grant_type": "authorization_code",
        })
        tokens = self._tokens_from_response(data)
        self.set_tokens(tokens)
        logger.info("OAuth code exchanged; tokens saved to %s", self.store.path)
        return tokens

    # -- Access tokens ------------------------------------------------------

    def access_token(self) -> str:
        """Return a usable access token, refreshing it when expired.

        Raises:
            AuthError: No tokens are held, or the refresh was rejected.
        """
        tokens = self.tokens
        if tokens is None:
            raise AuthError("Not authenticated")

        if tokens.is_expired(_now_ms()) or not tokens.access_token:
            tokens = self.refresh()
        return tokens.access_token

    def refresh(self) -> OAuthTokens:
        """Refresh the access token using the stored refresh token."""
        current = self.tokens
        if current is None or not current.refresh_token:
            raise AuthError("Access token expired and no refresh token is stored")

        data = self._post_token({
            "refresh_token": current.refresh_token,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "grant_type": "refresh_token",
        })
        tokens = self._tokens_from_response(data, previous=current)
        self.set_tokens(tokens)
        logger.info("Access token refreshed")
        return tokens

    # -- HTTP helpers -------------------------------------------------------

    def _post_token(self, form: dict) -> dict:
        try:
            resp = self.client.post(TOKEN_URL, data=form)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            detail = _error_detail(exc.response)
            raise AuthError(
                f"Google token endpoint returned HTTP {status}: {detail}"
            ) from exc
        except httpx.RequestError as exc:
            raise AuthError(f"Network error contacting Google OAuth: {exc}") from exc

    @staticmethod
    def _tokens_from_response(data: dict, previous: OAuthTokens | None = None) -> OAuthTokens:
        expires_in = data.get("expires_in")
        expiry = _now_ms() + int(expires_in) * 1000 if expires_in else 0
        return OAuthTokens(
            access_token=data.get("access_token", ""),
            # Google omits refresh_token on refresh responses
            refresh_token=data.get("refresh_token") or (previous.refresh_token if previous else ""),
            token_type=data.get("token_type", "Bearer"),
            scope=data.get("scope", previous.scope if previous else ""),
            expiry_date=expiry,
        )

    def close(self):
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def _now_ms() -> int:
    return int(time.time() * 1000)


def _error_detail(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text[:200]
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict):
            return err.get("message", "") or str(err)
        return data.get("error_description") or str(err or data)
    return str(data)
