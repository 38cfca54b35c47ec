"""HTTP entry point: FastAPI app exposing the OAuth flow and /upload-pdf.

Handlers are plain ``def`` so FastAPI runs them in its threadpool; each
request drives its own headless browser via the sync Playwright API.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import Body, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, RedirectResponse

from profile_pdf.config import Settings
from profile_pdf.drive.client import DriveClient
from profile_pdf.drive.oauth import GoogleOAuth, TokenStore
from profile_pdf.exceptions import (
    AuthError,
    MissingTemplateError,
    ProfilePdfError,
)
from profile_pdf.service import ProfileService
from profile_pdf.storage import DriveStore, LocalStore, PdfStorage
from profile_pdf.version import __version__
from profile_pdf.web.pages import status_page

logger = logging.getLogger(__name__)


def _status_for(error: Exception) -> int:
    """HTTP status for a pipeline exception."""
    if isinstance(error, MissingTemplateError):
        return 400
    if isinstance(error, AuthError):
        return 401
    return 500


def _build_storage(settings: Settings, oauth: GoogleOAuth) -> PdfStorage:
    if settings.test_mode:
        return LocalStore(settings.output_dir)
    return DriveStore(DriveClient(oauth))


def _validation_message(exc: RequestValidationError) -> str:
    messages = [err.get("msg", "") for err in exc.errors()]
    return "Invalid request body: " + ("; ".join(m for m in messages if m) or "malformed")


def create_app(
    settings: Optional[Settings] = None,
    *,
    oauth: Optional[GoogleOAuth] = None,
    service: Optional[ProfileService] = None,
) -> FastAPI:
    """Build the FastAPI application.

    *oauth* and *service* can be injected (tests); by default they are
    built from *settings*.  HTTP clients built here are closed on shutdown.
    """
    settings = settings or Settings.from_env()
    owned: list = []
    if oauth is None:
        oauth = GoogleOAuth(
            settings.google_client_id,
            settings.google_client_secret,
            settings.oauth_callback_url,
            TokenStore(settings.tokens_path),
        )
        owned.append(oauth)
    if service is None:
        storage = _build_storage(settings, oauth)
        if isinstance(storage, DriveStore):
            owned.append(storage.client)
        service = ProfileService(settings, storage)

    app = FastAPI(title="profile-pdf", version=__version__)
    app.state.settings = settings
    app.state.oauth = oauth
    app.state.service = service

    @app.on_event("shutdown")
    def _close_clients() -> None:
        for client in owned:
            client.close()

    @app.exception_handler(RequestValidationError)
    async def _invalid_request(request: Request, exc: RequestValidationError):
        message = _validation_message(exc)
        logger.warning("Rejected request to %s: %s", request.url.path, message)
        return JSONResponse(status_code=400, content={"error": message})

    # ── OAuth ────────────────────────────────────────────────────────

    @app.get("/auth")
    def auth():
        if settings.test_mode:
            return HTMLResponse(status_page(
                "Test Mode Active",
                "PDFs will be saved locally. No authentication needed.",
            ))
        return RedirectResponse(oauth.authorization_url())

    @app.get("/oauth/callback")
    def oauth_callback(code: Optional[str] = None):
        if settings.test_mode:
            return HTMLResponse(status_page(
                "Test Mode Active", "No authentication needed in test mode.",
            ))
        if not code:
            return PlainTextResponse("Missing code", status_code=400)
        try:
            oauth.exchange_code(code)
        except AuthError:
            logger.exception("OAuth error")
            return HTMLResponse(
                status_page("Authentication failed", error=True),
                status_code=500,
            )
        return HTMLResponse(status_page(
            "Authentication successful!", "You can now upload PDFs.",
        ))

    @app.get("/auth-status")
    def auth_status():
        if settings.test_mode:
            return {"authenticated": True, "testMode": True}
        if oauth.is_authenticated:
            return {"authenticated": True, "testMode": False}
        return {"authenticated": False, "authUrl": "/auth", "testMode": False}

    # ── PDF generation ───────────────────────────────────────────────

    @app.post("/upload-pdf")
    def upload_pdf(payload: dict[str, Any] = Body(...)):
        logger.debug("Full request body: %s", payload)

        if not settings.test_mode and not oauth.is_authenticated:
            return JSONResponse(
                status_code=401,
                content={"error": "Not authenticated", "authUrl": "/auth"},
            )

        try:
            return service.generate(payload)
        except MissingTemplateError as e:
            logger.warning("%s", e)
            return JSONResponse(status_code=400, content={"error": str(e)})
        except ProfilePdfError as e:
            logger.error("PDF generation error: %s", e)
            return JSONResponse(status_code=_status_for(e), content={"error": str(e)})
        except Exception as e:
            logger.exception("Unexpected error generating PDF")
            return JSONResponse(status_code=500, content={"error": str(e)})

    return app


def main() -> None:
    """Run the service with uvicorn."""
    import uvicorn
    from dotenv import load_dotenv

    load_dotenv()
    settings = Settings.from_env()

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    app = create_app(settings)

    logger.info("PDF API running on http://localhost:%d", settings.port)
    if settings.test_mode:
        logger.warning("TEST MODE: PDFs will be saved locally in '%s'", settings.output_dir)
    else:
        logger.info("Visit http://localhost:%d/auth to authenticate", settings.port)

    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
