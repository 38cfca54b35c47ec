"""Tests for the Playwright PDF engine, with the browser mocked out."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from profile_pdf.exceptions import ContentLoadTimeout, RenderingError
from profile_pdf.renderer.pdf_engine import (
    CHARTS_READY_EXPR,
    MIN_PAGE_HEIGHT_MM,
    PlaywrightDocument,
    count_pages,
    page_height_mm,
    pdf_options,
    render_profile_pdf,
    wait_for_charts,
)
from profile_pdf.renderer.pruner import AcademyRule, PrunerOptions


def _mock_browser(elements=None, canvases=None, scroll_height=800, pdf=b"%PDF-fake"):
    """Build (sync_playwright mock, browser, page) with the given DOM."""
    elements = elements or {}
    page = MagicMock()
    page.query_selector.side_effect = lambda selector: elements.get(selector)
    page.query_selector_all.return_value = canvases or []
    page.evaluate.return_value = scroll_height
    page.pdf.return_value = pdf

    browser = MagicMock()
    browser.new_page.return_value = page

    playwright = MagicMock()
    playwright.chromium.launch.return_value = browser

    sync_pw = MagicMock()
    sync_pw.return_value.__enter__.return_value = playwright
    return sync_pw, browser, page


class TestPageSizing:
    def test_short_content_gets_a4_height(self):
        assert page_height_mm(100) == MIN_PAGE_HEIGHT_MM

    def test_tall_content_scales(self):
        assert page_height_mm(2000) == pytest.approx(529.166)

    def test_boundary(self):
        # 297 / 0.264583 ~ 1122.5 px
        assert page_height_mm(1122) == MIN_PAGE_HEIGHT_MM
        assert page_height_mm(1123) > MIN_PAGE_HEIGHT_MM

    def test_pdf_options(self):
        opts = pdf_options(297)
        assert opts["width"] == "210mm"
        assert opts["height"] == "297mm"
        assert opts["print_background"] is True
        assert opts["margin"] == {"top": "0mm", "right": "0mm", "bottom": "0mm", "left": "0mm"}


class TestPlaywrightDocument:
    def test_find_by_id_uses_attribute_selector(self):
        page = MagicMock()
        PlaywrightDocument(page).find_by_id("story-link")
        page.query_selector.assert_called_once_with('[id="story-link"]')

    def test_find_missing_returns_none(self):
        page = MagicMock()
        page.query_selector.return_value = None
        assert PlaywrightDocument(page).find_by_id("academy") is None

    def test_remove(self):
        element = MagicMock()
        PlaywrightDocument(MagicMock()).remove(element)
        element.evaluate.assert_called_once_with("el => el.remove()")

    def test_snapshot_canvas(self):
        canvas = MagicMock()
        canvas.evaluate.return_value = {
            "data_url": "data:image/png;base64,AA",
            "style_width": "",
            "style_height": "70mm",
            "width": 720,
            "height": 300,
        }
        snap = PlaywrightDocument(MagicMock()).snapshot_canvas(canvas)
        assert snap.data_url == "data:image/png;base64,AA"
        assert snap.style_width == ""
        assert snap.style_height == "70mm"
        assert (snap.width, snap.height) == (720, 300)

    def test_replace_with_image_passes_size(self):
        canvas = MagicMock()
        PlaywrightDocument(MagicMock()).replace_with_image(canvas, "data:x", "10px", "20px")
        args = canvas.evaluate.call_args[0]
        assert args[1] == {"src": "data:x", "width": "10px", "height": "20px"}

    def test_scroll_height(self):
        page = MagicMock()
        page.evaluate.return_value = 1500
        assert PlaywrightDocument(page).scroll_height() == 1500


class TestWaitForCharts:
    def test_signal_received(self):
        page = MagicMock()
        assert wait_for_charts(page, 3000) is True
        page.wait_for_function.assert_called_once_with(CHARTS_READY_EXPR, timeout=3000)

    def test_timeout_is_not_fatal(self):
        page = MagicMock()
        page.wait_for_function.side_effect = PlaywrightTimeoutError("timeout")
        assert wait_for_charts(page, 100) is False

    def test_zero_disables_wait(self):
        page = MagicMock()
        assert wait_for_charts(page, 0) is False
        page.wait_for_function.assert_not_called()


class TestCountPages:
    def test_garbage_returns_none(self):
        assert count_pages(b"not a pdf") is None


class TestRenderProfilePdf:
    def test_returns_pdf_bytes(self):
        sync_pw, browser, page = _mock_browser(pdf=b"%PDF-1.7 bytes")
        with patch("playwright.sync_api.sync_playwright", sync_pw):
            result = render_profile_pdf("<html></html>", {"name": "Ana"})
        assert result == b"%PDF-1.7 bytes"
        browser.close.assert_called_once()

    def test_load_uses_timeout(self):
        sync_pw, _, page = _mock_browser()
        with patch("playwright.sync_api.sync_playwright", sync_pw):
            render_profile_pdf("<p>x</p>", {}, load_timeout_ms=1234)
        page.set_content.assert_called_once_with(
            "<p>x</p>", wait_until="networkidle", timeout=1234,
        )

    def test_prunes_before_pdf(self):
        chart = MagicMock()
        story = MagicMock()
        sync_pw, _, page = _mock_browser(elements={
            '[id="chart-container"]': chart,
            '[id="story"]': story,
        })
        with patch("playwright.sync_api.sync_playwright", sync_pw):
            render_profile_pdf("<html></html>", {"storyText": "kept"})
        chart.evaluate.assert_called_once_with("el => el.remove()")
        story.evaluate.assert_not_called()

    def test_academy_rule_forwarded(self):
        academy = MagicMock()
        sync_pw, _, _ = _mock_browser(elements={'[id="academy"]': academy})
        options = PrunerOptions(academy_rule=AcademyRule.ACADEMY_AND_STORY)
        with patch("playwright.sync_api.sync_playwright", sync_pw):
            render_profile_pdf("<html></html>", {"storyText": "kept"}, options=options)
        academy.evaluate.assert_not_called()

    def test_page_height_from_content(self):
        sync_pw, _, page = _mock_browser(scroll_height=2000)
        with patch("playwright.sync_api.sync_playwright", sync_pw):
            render_profile_pdf("<html></html>", {})
        kwargs = page.pdf.call_args.kwargs
        assert kwargs["width"] == "210mm"
        assert kwargs["height"] == f"{2000 * 0.264583}mm"

    def test_load_timeout_raises_and_closes(self):
        sync_pw, browser, page = _mock_browser()
        page.set_content.side_effect = PlaywrightTimeoutError("Timeout 30000ms exceeded")
        with patch("playwright.sync_api.sync_playwright", sync_pw):
            with pytest.raises(ContentLoadTimeout):
                render_profile_pdf("<html></html>", {})
        browser.close.assert_called_once()
        page.pdf.assert_not_called()

    def test_content_timeout_is_rendering_error(self):
        assert issubclass(ContentLoadTimeout, RenderingError)

    def test_pdf_failure_wrapped_and_closes(self):
        sync_pw, browser, page = _mock_browser()
        page.pdf.side_effect = PlaywrightError("Target closed")
        with patch("playwright.sync_api.sync_playwright", sync_pw):
            with pytest.raises(RenderingError, match="Target closed"):
                render_profile_pdf("<html></html>", {})
        browser.close.assert_called_once()

    def test_launch_failure_wrapped(self):
        sync_pw, _, _ = _mock_browser()
        playwright = sync_pw.return_value.__enter__.return_value
        playwright.chromium.launch.side_effect = PlaywrightError("Executable doesn't exist")
        with patch("playwright.sync_api.sync_playwright", sync_pw):
            with pytest.raises(RenderingError, match="Executable"):
                render_profile_pdf("<html></html>", {})

    def test_unexpected_error_still_closes(self):
        sync_pw, browser, page = _mock_browser()
        page.evaluate.side_effect = RuntimeError("boom")
        with patch("playwright.sync_api.sync_playwright", sync_pw):
            with pytest.raises(RuntimeError):
                render_profile_pdf("<html></html>", {})
        browser.close.assert_called_once()
