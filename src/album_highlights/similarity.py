from __future__ import annotations

import math

from album_highlights.models import AudioFeatures

_DIMENSIONS = 5


def track_similarity(a: AudioFeatures | None, b: AudioFeatures | None) -> float:
    """1 minus the euclidean distance of the feature vectors, scaled by sqrt(5)."""
    if a is None or b is None or a.limited or b.limited:
        return 0.0
    distance = math.sqrt(sum((x - y) ** 2 for x, y in zip(a.vector(), b.vector())))
    return min(max(1.0 - distance / math.sqrt(_DIMENSIONS), 0.0), 1.0)


def rank_by_similarity(
    seed: AudioFeatures | None,
    candidates: list[tuple[dict, AudioFeatures | None]],
) -> list[tuple[dict, float]]:
    scored = [(track, track_similarity(seed, features)) for track, features in candidates]
    scored.sort(key=lambda item: item[1], reverse=True)
    return scored
