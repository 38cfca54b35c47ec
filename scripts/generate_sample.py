"""
Generate sample profile PDFs locally, without the HTTP server or Drive.

Usage:
    source venv/bin/activate
    python scripts/generate_sample.py

Produces PDF files (via template.html + Playwright) in output/ directory:
one fully populated profile, and one minimal profile where every optional
section is pruned.
"""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from profile_pdf.config import Settings
from profile_pdf.renderer.pruner import sections_to_remove
from profile_pdf.service import ProfileService, build_field_map
from profile_pdf.storage import LocalStore

ROOT = Path(__file__).resolve().parents[1]
OUTPUT_DIR = ROOT / "output"


# ── Sample payloads ─────────────────────────────────────────────────

FULL_PROFILE = {
    "name": "Ani Petrosyan",
    "region": "Shirak",
    "community": "Gyumri",
    "age": "17",
    "status": "Volunteer since 2022",
    "img": "https://picsum.photos/seed/ani/300/300",
    "interests": "- Robotics\n- Debate\n- Photography",
    "webinars": "Public speaking basics",
    "team": "- Youth council\n- Eco club",
    "position": "Coordinator",
    "trips": "- Dilijan camp\n- Yerevan forum\n",
    "tasks": "- Organised a clean-up day\n- Ran the school newsletter",
    "leadershipAcademy": "Graduated the spring cohort",
    "communityActivities": "Weekly tutoring\nLibrary reading hour",
    "outsideActivities": "Chess club",
    "feadback": "Reliable and full of ideas.",
    "giver": "Narek H.",
    "giverPosition": "Regional mentor",
    "previousMonths": "6",
    "previousCourses": "2",
    "previousTrips": "1",
    "previousVolunteering": "12",
    "previousTasks": "0",
    "currentMonths": "12",
    "currentCourses": "4",
    "currentTrips": "3",
    "currentVolunteering": "30",
    "currentTasks": "5",
    "date": "2026-03-07",
    "futurePlans": "Study engineering\nStart a robotics club",
    "storyTitle": "A library for the village",
    "storyImg": "https://picsum.photos/seed/library/800/400",
    "storyText": "Together with friends, Ani collected 400 books...",
    "storyLink": "https://example.org/stories/library",
    "fileName": "sample-full",
}

MINIMAL_PROFILE = {
    "name": "Ana",
    "fileName": "sample-minimal",
}


def main():
    OUTPUT_DIR.mkdir(exist_ok=True)

    settings = Settings(test_mode=True, template_path=ROOT / "template.html",
                        output_dir=OUTPUT_DIR)
    service = ProfileService(settings, LocalStore(OUTPUT_DIR))

    print("=" * 60)
    print("Generating sample profile PDFs")
    print("=" * 60)

    for label, payload in (("Full", FULL_PROFILE), ("Minimal", MINIMAL_PROFILE)):
        fields = build_field_map(payload)
        pruned = sections_to_remove(fields, settings.pruner_options)
        print(f"\n{label} profile")
        print(f"   Fields: {len(fields)}")
        print(f"   Sections to prune: {', '.join(pruned) or '(none)'}")
        result = service.generate(payload)
        print(f"   Saved: {result['localPath']}")

    print("\n" + "=" * 60)
    print(f"Done! Files in: {OUTPUT_DIR}")
    print("=" * 60)


if __name__ == "__main__":
    main()
