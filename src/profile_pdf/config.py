"""Process configuration read from the environment (and ``.env``)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from profile_pdf.renderer.pruner import (
    ALL_SECTIONS,
    OPTIONAL_FIELDS,
    AcademyRule,
    PrunerOptions,
)

DEFAULT_PORT = 3000
DEFAULT_LOAD_TIMEOUT_MS = 30_000
DEFAULT_CHART_WAIT_MS = 3_000


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true")


def _int(value: Optional[str], default: int) -> int:
    try:
        return int(value) if value not in (None, "") else default
    except ValueError:
        raise ValueError(f"Expected an integer, got {value!r}") from None


def _name_set(name: str, value: Optional[str], default: frozenset[str],
              allowed: frozenset[str]) -> frozenset[str]:
    """Parse a comma-separated list; unset keeps *default*, "none" is empty."""
    if value is None or not value.strip():
        return default
    if value.strip().lower() == "none":
        return frozenset()
    names = frozenset(part.strip() for part in value.split(",") if part.strip())
    unknown = names - allowed
    if unknown:
        raise ValueError(
            f"{name} has unknown entries {', '.join(sorted(unknown))}; "
            f"allowed: {', '.join(sorted(allowed))}"
        )
    return names


@dataclass
class Settings:
    """Runtime settings for the service.

    Paths are relative to the working directory unless absolute, matching
    how the template and token files are looked up at request time.
    """
    port: int = DEFAULT_PORT
    host: str = "0.0.0.0"
    test_mode: bool = False
    debug: bool = False

    template_path: Path = Path("template.html")
    output_dir: Path = Path("test-pdfs")
    tokens_path: Path = Path("tokens.json")

    # ── Google OAuth ──
    google_client_id: str = ""
    google_client_secret: str = ""
    oauth_callback_url: str = ""

    # ── Rendering ──
    load_timeout_ms: int = DEFAULT_LOAD_TIMEOUT_MS
    chart_wait_ms: int = DEFAULT_CHART_WAIT_MS
    academy_rule: AcademyRule = AcademyRule.ACADEMY_ONLY
    sections: frozenset[str] = field(default_factory=lambda: ALL_SECTIONS)
    extra_fields: frozenset[str] = field(default_factory=lambda: OPTIONAL_FIELDS)

    def __post_init__(self) -> None:
        if not self.oauth_callback_url:
            self.oauth_callback_url = f"http://localhost:{self.port}/oauth/callback"

    @property
    def pruner_options(self) -> PrunerOptions:
        return PrunerOptions(
            academy_rule=self.academy_rule,
            sections=self.sections,
            extra_fields=self.extra_fields,
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from *environ* (default ``os.environ``).

        Call ``load_dotenv()`` first if ``.env`` should be honoured.
        """
        env = os.environ if environ is None else environ

        rule = env.get("ACADEMY_RULE", AcademyRule.ACADEMY_ONLY.value).strip().lower()
        try:
            academy_rule = AcademyRule(rule)
        except ValueError:
            raise ValueError(
                f"ACADEMY_RULE must be one of "
                f"{', '.join(r.value for r in AcademyRule)}; got {rule!r}"
            ) from None

        return cls(
            port=_int(env.get("PORT"), DEFAULT_PORT),
            host=env.get("HOST", "0.0.0.0"),
            test_mode=env.get("TEST_MODE", "") == "true",
            debug=_flag(env.get("DEBUG")),
            template_path=Path(env.get("TEMPLATE_PATH", "template.html")),
            output_dir=Path(env.get("OUTPUT_DIR", "test-pdfs")),
            tokens_path=Path(env.get("TOKENS_PATH", "tokens.json")),
            google_client_id=env.get("GOOGLE_CLIENT_ID", ""),
            google_client_secret=env.get("GOOGLE_CLIENT_SECRET", ""),
            oauth_callback_url=env.get("OAUTH_CALLBACK_URL", ""),
            load_timeout_ms=_int(env.get("LOAD_TIMEOUT_MS"), DEFAULT_LOAD_TIMEOUT_MS),
            chart_wait_ms=_int(env.get("CHART_WAIT_MS"), DEFAULT_CHART_WAIT_MS),
            academy_rule=academy_rule,
            sections=_name_set("OPTIONAL_SECTIONS", env.get("OPTIONAL_SECTIONS"),
                               ALL_SECTIONS, ALL_SECTIONS),
            extra_fields=_name_set("EXTRA_FIELDS", env.get("EXTRA_FIELDS"),
                                   OPTIONAL_FIELDS, OPTIONAL_FIELDS),
        )
