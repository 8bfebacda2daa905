from __future__ import annotations

import structlog

from album_highlights.models import (
    AudioFeatures,
    Highlight,
    HighlightOptions,
    ScoredSection,
    TrackAnalysis,
)
from album_highlights.scoring import DEFAULT_TRACK_TEMPO, rate_section

log = structlog.get_logger()

PREVIEW_REASON = "Preview segment"
PREVIEW_SCORE = 0.7
PREVIEW_TRACK_DURATION = 30.0
PREVIEW_ENERGY = 0.5
PREVIEW_LOUDNESS = -10.0


def intervals_overlap(start_a: float, duration_a: float, start_b: float, duration_b: float) -> bool:
    """Half-open interval test: touching intervals do not overlap."""
    return start_a < start_b + duration_b and start_b < start_a + duration_a


def _degraded_reason(analysis: TrackAnalysis | None, features: AudioFeatures | None) -> str | None:
    if analysis is None:
        return "missing analysis"
    if features is None:
        return "missing features"
    if analysis.limited or features.limited:
        return "limited data"
    if not analysis.sections:
        return "no sections"
    return None


def preview_highlight(
    analysis: TrackAnalysis | None,
    features: AudioFeatures | None,
    options: HighlightOptions | None = None,
) -> Highlight:
    """Synthetic segment from the top of the track, used when real selection is impossible."""

    options = options or HighlightOptions()
    track_duration = PREVIEW_TRACK_DURATION
    if analysis is not None and analysis.track.duration > 0:
        track_duration = analysis.track.duration

    return Highlight(
        start=0.0,
        duration=min(options.max_duration, track_duration),
        loudness=features.loudness if features is not None else PREVIEW_LOUDNESS,
        tempo=features.tempo if features is not None and features.tempo > 0 else DEFAULT_TRACK_TEMPO,
        energy=features.energy if features is not None else PREVIEW_ENERGY,
        score=PREVIEW_SCORE,
        reason=PREVIEW_REASON,
    )


def _to_highlight(rated: ScoredSection, duration: float, features: AudioFeatures) -> Highlight:
    section = rated.section
    return Highlight(
        start=section.start,
        duration=duration,
        loudness=section.loudness,
        tempo=section.tempo,
        energy=features.energy,
        score=rated.score,
        reason=rated.reason,
        confidence=section.confidence,
    )


def _pick_non_overlapping(
    candidates: list[ScoredSection],
    features: AudioFeatures,
    options: HighlightOptions,
) -> list[Highlight]:
    selected: list[Highlight] = []
    for rated in candidates:
        if len(selected) >= options.max_highlights:
            break
        duration = min(rated.section.duration, options.max_duration)
        if any(intervals_overlap(rated.section.start, duration, h.start, h.duration) for h in selected):
            continue
        selected.append(_to_highlight(rated, duration, features))
    return selected


def select_highlights(
    analysis: TrackAnalysis | None,
    features: AudioFeatures | None,
    options: HighlightOptions | None = None,
) -> list[Highlight]:
    """Pick up to ``options.max_highlights`` segments worth previewing, in playback order.

    Degraded or missing input yields a single preview segment at the start of
    the track. Malformed sections are ignored. When nothing clears the score
    and duration thresholds, the best section is returned on its own with its
    duration clamped into ``[min_duration, max_duration]`` and never past the
    end of the track.
    """

    options = options or HighlightOptions()

    degraded = _degraded_reason(analysis, features)
    if degraded is not None:
        log.debug("highlights.preview_fallback", reason=degraded)
        return [preview_highlight(analysis, features, options)]

    track_tempo = features.tempo if features.tempo > 0 else analysis.track.tempo
    rated = [
        rate_section(section, features, options.tempo_policy, track_tempo)
        for section in analysis.sections
        if section.is_well_formed()
    ]
    if not rated:
        log.debug("highlights.preview_fallback", reason="no well-formed sections")
        return [preview_highlight(analysis, features, options)]

    # Ties resolve to the earlier section so repeated calls agree.
    rated.sort(key=lambda r: (-r.score, r.section.start))

    candidates = [
        r for r in rated
        if r.score >= options.min_score and r.section.duration >= options.min_duration
    ]
    if not candidates:
        best = rated[0]
        duration = min(max(best.section.duration, options.min_duration), options.max_duration)
        remaining = analysis.track.duration - best.section.start
        if remaining > 0:
            duration = min(duration, remaining)
        log.debug("highlights.best_section_fallback", score=best.score, start=best.section.start)
        return [_to_highlight(best, duration, features)]

    selected = _pick_non_overlapping(candidates, features, options)
    if not selected:
        # May hand back overlapping segments; callers still get something to play.
        log.debug("highlights.overlap_fallback", candidates=len(candidates))
        selected = [
            _to_highlight(r, min(r.section.duration, options.max_duration), features)
            for r in candidates[: options.max_highlights]
        ]

    return sorted(selected, key=lambda h: h.start)
