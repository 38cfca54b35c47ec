"""Request pipeline: payload -> field map -> HTML -> PDF -> storage.

``ProfileService.generate`` is what the upload endpoint calls.  It is
synchronous and keeps no state between requests beyond what it is
constructed with.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from profile_pdf.config import Settings
from profile_pdf.exceptions import MissingTemplateError
from profile_pdf.renderer.filters import format_date
from profile_pdf.renderer.pdf_engine import render_profile_pdf
from profile_pdf.renderer.pruner import OPTIONAL_FIELDS
from profile_pdf.renderer.template import render, unresolved_tokens
from profile_pdf.storage import PdfStorage

logger = logging.getLogger(__name__)

# Payload keys that feed the template.  Anything else is ignored.
TEMPLATE_FIELDS = (
    "name", "region", "community", "age", "status", "img",
    "interests", "team", "position", "webinars", "trips", "tasks",
    "leadershipAcademy", "communityActivities", "outsideActivities",
    "feadback", "giverPosition", "giver",
    "previousMonths", "previousCourses", "previousTrips",
    "previousVolunteering", "previousTasks",
    "currentMonths", "currentCourses", "currentTrips",
    "currentVolunteering", "currentTasks",
    "date", "futurePlans",
    "storyImg", "storyTitle", "storyText", "storyLink",
)

Renderer = Callable[..., bytes]


def build_field_map(
    payload: Mapping[str, Any],
    extra_fields: frozenset[str] = OPTIONAL_FIELDS,
) -> dict[str, Any]:
    """Pick the template fields out of a request payload.

    Missing keys stay missing so their tokens survive rendering.  Optional
    fields not listed in *extra_fields* are dropped the same way.  ``date``
    is always present, reformatted for display ("" when not supplied).
    """
    skipped = OPTIONAL_FIELDS - extra_fields
    fields = {
        key: payload[key]
        for key in TEMPLATE_FIELDS
        if key in payload and key not in skipped
    }
    fields["date"] = format_date(payload.get("date"))
    return fields


def resolve_file_name(file_name: Optional[str], now: Optional[float] = None) -> str:
    """'report' -> 'report.pdf'; nothing -> 'document-<epoch ms>.pdf'."""
    if file_name:
        return f"{file_name}.pdf"
    stamp = int((time.time() if now is None else now) * 1000)
    return f"document-{stamp}.pdf"


def load_template(path: Path) -> str:
    """Read the HTML template.

    Raises:
        MissingTemplateError: *path* does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise MissingTemplateError(f"{path.name} file not found")
    return path.read_text(encoding="utf-8")


class ProfileService:
    """Generates one profile PDF per call and hands it to storage."""

    def __init__(self, settings: Settings, storage: PdfStorage,
                 renderer: Renderer = render_profile_pdf):
        self.settings = settings
        self.storage = storage
        self.renderer = renderer

    def render_html(self, fields: Mapping[str, Any]) -> str:
        """Load the template and substitute *fields* into it."""
        template = load_template(self.settings.template_path)
        html = render(template, fields)

        leftover = unresolved_tokens(html)
        if leftover:
            logger.debug("Unresolved template tokens: %s", ", ".join(sorted(set(leftover))))
        return html

    def generate(self, payload: Mapping[str, Any]) -> dict:
        """Run the full pipeline for one request payload.

        Returns:
            The success payload: ``success``, ``testMode`` and the storage
            keys (``localPath``/``fileName`` or ``fileId``/``viewLink``).

        Raises:
            MissingTemplateError: Before any browser is launched.
            RenderingError: Including ContentLoadTimeout.
            StorageError, AuthError: From the storage backend.
        """
        fields = build_field_map(payload, self.settings.extra_fields)
        html = self.render_html(fields)
        file_name = resolve_file_name(payload.get("fileName"))

        pdf_bytes = self.renderer(
            html,
            fields,
            options=self.settings.pruner_options,
            load_timeout_ms=self.settings.load_timeout_ms,
            chart_wait_ms=self.settings.chart_wait_ms,
        )

        stored = self.storage.store(pdf_bytes, file_name, payload.get("folderId"))

        result = {"success": True, "testMode": self.settings.test_mode}
        result.update(stored.to_response())
        if stored.is_local:
            result["message"] = f"PDF saved locally in {self.settings.output_dir} folder"
        return result
