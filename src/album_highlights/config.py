from __future__ import annotations

import os
from pathlib import Path

from album_highlights.models import HighlightOptions


def load_local_env_file(env_path: str = ".env") -> None:
    """Load key=value pairs from a local .env file into process env.

    Existing environment variables are preserved and not overwritten.
    """

    path = Path(env_path)
    if not path.exists():
        return

    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")

        if key and key not in os.environ:
            os.environ[key] = value


def env_int(name: str, fallback: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return fallback
    try:
        return int(raw)
    except ValueError:
        return fallback


def env_float(name: str, fallback: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return fallback
    try:
        return float(raw)
    except ValueError:
        return fallback


def highlight_options_from_env() -> HighlightOptions:
    defaults = HighlightOptions()
    return HighlightOptions(
        max_highlights=env_int("HIGHLIGHT_MAX_COUNT", defaults.max_highlights),
        min_duration=env_float("HIGHLIGHT_MIN_DURATION", defaults.min_duration),
        max_duration=env_float("HIGHLIGHT_MAX_DURATION", defaults.max_duration),
        min_score=env_float("HIGHLIGHT_MIN_SCORE", defaults.min_score),
        tempo_policy=os.getenv("HIGHLIGHT_TEMPO_POLICY", "").strip() or defaults.tempo_policy,
    )
