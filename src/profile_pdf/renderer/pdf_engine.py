"""Playwright-based PDF rendering engine with single-page sizing.

The rendered template is loaded into headless Chromium, optional sections
are pruned, charts are rasterized, and the whole document is printed onto
one A4-wide page whose height follows the content.
"""

from __future__ import annotations

import io
import logging
from typing import Any, Mapping, Optional

from profile_pdf.exceptions import ContentLoadTimeout, RenderingError
from profile_pdf.renderer.pruner import (
    CanvasSnapshot,
    PrunerOptions,
    prune,
    rasterize_canvases,
)

logger = logging.getLogger(__name__)

# Page dimensions in millimetres (A4 portrait)
PAGE_WIDTH_MM = 210
MIN_PAGE_HEIGHT_MM = 297

# CSS px -> mm at 96 DPI
PX_TO_MM = 0.264583

MARGINS_NONE = {
    "top": "0mm",
    "right": "0mm",
    "bottom": "0mm",
    "left": "0mm",
}

# Set by the template once Chart.js has finished drawing.
CHARTS_READY_EXPR = "() => window.chartsReady === true"

_SNAPSHOT_JS = """canvas => ({
    data_url: canvas.toDataURL("image/png", 1.0),
    style_width: canvas.style.width,
    style_height: canvas.style.height,
    width: canvas.width,
    height: canvas.height,
})"""

_REPLACE_JS = """(canvas, img) => {
    const el = document.createElement("img");
    el.src = img.src;
    el.style.width = img.width;
    el.style.height = img.height;
    canvas.replaceWith(el);
}"""


# ── Page sizing ──────────────────────────────────────────────────────

def page_height_mm(content_height_px: float) -> float:
    """Height of the single output page for content of the given pixel height."""
    return max(MIN_PAGE_HEIGHT_MM, content_height_px * PX_TO_MM)


def pdf_options(height_mm: float) -> dict:
    """Keyword arguments for ``page.pdf`` producing one variable-length page."""
    return {
        "print_background": True,
        "margin": MARGINS_NONE,
        "width": f"{PAGE_WIDTH_MM}mm",
        "height": f"{height_mm}mm",
    }


# ── DocumentHandle over a Playwright page ────────────────────────────

class PlaywrightDocument:
    """Adapts a Playwright ``Page`` to the pruner's DocumentHandle protocol."""

    def __init__(self, page: Any) -> None:
        self.page = page

    def find_by_id(self, element_id: str) -> Optional[Any]:
        return self.page.query_selector(f'[id="{element_id}"]')

    def remove(self, element: Any) -> None:
        element.evaluate("el => el.remove()")

    def canvases(self) -> list[Any]:
        return self.page.query_selector_all("canvas")

    def snapshot_canvas(self, canvas: Any) -> CanvasSnapshot:
        data = canvas.evaluate(_SNAPSHOT_JS)
        return CanvasSnapshot(
            data_url=data["data_url"],
            style_width=data.get("style_width") or "",
            style_height=data.get("style_height") or "",
            width=int(data["width"]),
            height=int(data["height"]),
        )

    def replace_with_image(self, canvas: Any, src: str, width: str, height: str) -> None:
        canvas.evaluate(_REPLACE_JS, {"src": src, "width": width, "height": height})

    def scroll_height(self) -> int:
        return int(self.page.evaluate("() => document.body.scrollHeight"))


# ── Browser steps ────────────────────────────────────────────────────

def load_content(page: Any, html_string: str, timeout_ms: int) -> None:
    """Load *html_string* and wait for the network to go idle.

    Raises:
        ContentLoadTimeout: The page did not settle within *timeout_ms*.
    """
    from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

    try:
        page.set_content(html_string, wait_until="networkidle", timeout=timeout_ms)
    except PlaywrightTimeoutError as exc:
        raise ContentLoadTimeout(
            f"Page content did not load within {timeout_ms} ms"
        ) from exc


def wait_for_charts(page: Any, timeout_ms: int) -> bool:
    """Wait for the template's chart-ready signal, at most *timeout_ms*.

    Returns False when the signal never arrived; rendering carries on with
    whatever has been drawn by then.
    """
    from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

    if timeout_ms <= 0:
        return False
    try:
        page.wait_for_function(CHARTS_READY_EXPR, timeout=timeout_ms)
        return True
    except PlaywrightTimeoutError:
        logger.debug("No chart-ready signal after %d ms, continuing", timeout_ms)
        return False


def count_pages(pdf_bytes: bytes) -> int | None:
    """Count pages in PDF bytes. Returns None on failure."""
    try:
        from pypdf import PdfReader
        from pypdf.errors import PyPdfError
    except ImportError:
        return None
    try:
        return len(PdfReader(io.BytesIO(pdf_bytes)).pages)
    except (OSError, ValueError, PyPdfError):
        logger.warning("Could not count pages in rendered PDF")
        return None


def render_profile_pdf(
    html_string: str,
    fields: Mapping[str, Any],
    *,
    options: PrunerOptions | None = None,
    load_timeout_ms: int = 30_000,
    chart_wait_ms: int = 3_000,
) -> bytes:
    """Render a filled-in profile template to PDF bytes via headless Chromium.

    Args:
        html_string: Complete HTML document with tokens already substituted.
        fields: The field map used for rendering; drives section pruning.
        options: Which optional sections are active and the academy rule.
        load_timeout_ms: Upper bound for ``set_content`` to reach network idle.
        chart_wait_ms: Upper bound for the chart-ready signal.

    Returns:
        The PDF document as bytes.

    Raises:
        ContentLoadTimeout: The content did not settle in time.
        RenderingError: Any other browser failure.
    """
    from playwright.sync_api import Error as PlaywrightError
    from playwright.sync_api import sync_playwright

    try:
        with sync_playwright() as p:
            browser = p.chromium.launch()
            try:
                page = browser.new_page()
                load_content(page, html_string, load_timeout_ms)
                wait_for_charts(page, chart_wait_ms)

                document = PlaywrightDocument(page)
                prune(document, fields, options)
                rasterize_canvases(document)

                height_mm = page_height_mm(document.scroll_height())
                pdf_bytes = page.pdf(**pdf_options(height_mm))
            finally:
                browser.close()
    except PlaywrightError as exc:
        raise RenderingError(str(exc)) from exc

    pages = count_pages(pdf_bytes)
    logger.info("Rendered PDF: %d bytes, %s page(s), height %.1fmm",
                len(pdf_bytes), pages if pages is not None else "?", height_mm)
    return pdf_bytes
