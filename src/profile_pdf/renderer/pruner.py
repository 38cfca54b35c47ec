"""Conditional section pruning and canvas rasterization.

Runs against the live page after the template has been rendered and loaded.
Optional sections are removed when the fields backing them are blank, then
every ``<canvas>`` (Chart.js output) is swapped for a static ``<img>`` so the
PDF capture keeps the drawn chart.

All page access goes through the narrow ``DocumentHandle`` protocol.  The
Playwright adapter lives in pdf_engine; tests use an in-memory fake.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Protocol

from profile_pdf.renderer.filters import stringify

logger = logging.getLogger(__name__)


# ── Section ids ──────────────────────────────────────────────────────

SECTION_ACADEMY = "academy"
SECTION_STORY = "story"
SECTION_TEAM = "team"
SECTION_STORY_LINK = "story-link"
SECTION_CHART = "chart-container"

ALL_SECTIONS = frozenset({
    SECTION_ACADEMY,
    SECTION_STORY,
    SECTION_TEAM,
    SECTION_STORY_LINK,
    SECTION_CHART,
})

# Removed together when ``team`` is blank, in this order.
TEAM_CLUSTER_IDS = ("team", "position", "team-break-line", "feadback")

# Template fields only some deployments fill in.
OPTIONAL_FIELDS = frozenset({"futurePlans"})

PREVIOUS_PERIOD_FIELDS = (
    "previousMonths",
    "previousCourses",
    "previousTrips",
    "previousVolunteering",
    "previousTasks",
)


class AcademyRule(str, Enum):
    """When the leadership academy block is dropped."""

    ACADEMY_ONLY = "academy"               # leadershipAcademy blank
    ACADEMY_AND_STORY = "academy_and_story"  # leadershipAcademy and storyText blank


@dataclass(frozen=True)
class PrunerOptions:
    """Active optional sections and extra fields, plus the academy rule."""

    academy_rule: AcademyRule = AcademyRule.ACADEMY_ONLY
    sections: frozenset[str] = field(default_factory=lambda: ALL_SECTIONS)
    extra_fields: frozenset[str] = field(default_factory=lambda: OPTIONAL_FIELDS)


@dataclass
class CanvasSnapshot:
    data_url: str        # "data:image/png;base64,..."
    style_width: str     # inline CSS width, "" if unset
    style_height: str
    width: int           # intrinsic pixel size
    height: int


class DocumentHandle(Protocol):
    """The subset of a live DOM the pruner needs."""

    def find_by_id(self, element_id: str) -> Optional[Any]: ...

    def remove(self, element: Any) -> None: ...

    def canvases(self) -> list[Any]: ...

    def snapshot_canvas(self, canvas: Any) -> CanvasSnapshot: ...

    def replace_with_image(self, canvas: Any, src: str, width: str, height: str) -> None: ...

    def scroll_height(self) -> int: ...


# ── Pure rules ───────────────────────────────────────────────────────

def is_blank(value: Any) -> bool:
    """True for None or whitespace-only text.  ``0`` and ``"0"`` are not blank."""
    if value is None:
        return True
    return stringify(value).strip() == ""


def _academy_blank(fields: Mapping[str, Any], rule: AcademyRule) -> bool:
    if rule is AcademyRule.ACADEMY_AND_STORY:
        return is_blank(fields.get("leadershipAcademy")) and is_blank(fields.get("storyText"))
    return is_blank(fields.get("leadershipAcademy"))


def sections_to_remove(
    fields: Mapping[str, Any],
    options: PrunerOptions | None = None,
) -> list[str]:
    """Return the element ids to remove, in removal order."""
    options = options or PrunerOptions()
    active = options.sections
    ids: list[str] = []

    if SECTION_ACADEMY in active and _academy_blank(fields, options.academy_rule):
        ids.append(SECTION_ACADEMY)

    if SECTION_STORY in active and is_blank(fields.get("storyText")):
        ids.append(SECTION_STORY)

    if SECTION_TEAM in active and is_blank(fields.get("team")):
        ids.extend(TEAM_CLUSTER_IDS)

    if SECTION_STORY_LINK in active and is_blank(fields.get("storyLink")):
        ids.append(SECTION_STORY_LINK)

    if SECTION_CHART in active and any(
        is_blank(fields.get(name)) for name in PREVIOUS_PERIOD_FIELDS
    ):
        ids.append(SECTION_CHART)

    return ids


# ── Document mutation ────────────────────────────────────────────────

def prune(
    document: DocumentHandle,
    fields: Mapping[str, Any],
    options: PrunerOptions | None = None,
) -> list[str]:
    """Remove blank optional sections in place.

    Ids that are not present in the document are skipped.

    Returns:
        The ids that were actually removed.
    """
    removed = []
    for element_id in sections_to_remove(fields, options):
        element = document.find_by_id(element_id)
        if element is None:
            continue
        document.remove(element)
        removed.append(element_id)

    if removed:
        logger.debug("Pruned sections: %s", ", ".join(removed))
    return removed


def image_size(snapshot: CanvasSnapshot) -> tuple[str, str]:
    """CSS width/height for the replacement image.

    Inline style size wins; otherwise the canvas's intrinsic pixel size.
    """
    width = snapshot.style_width or f"{snapshot.width}px"
    height = snapshot.style_height or f"{snapshot.height}px"
    return width, height


def rasterize_canvases(document: DocumentHandle) -> int:
    """Replace every canvas with a PNG snapshot of its current pixels.

    Returns:
        Number of canvases replaced.
    """
    count = 0
    for canvas in document.canvases():
        snapshot = document.snapshot_canvas(canvas)
        width, height = image_size(snapshot)
        document.replace_with_image(canvas, snapshot.data_url, width, height)
        count += 1

    logger.debug("Rasterized %d canvas element(s)", count)
    return count
