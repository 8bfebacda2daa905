from __future__ import annotations

from album_highlights.models import (
    AnalysisSection,
    AnalysisSegment,
    AudioFeatures,
    TrackAnalysis,
    TrackSummary,
)

# Segment loudness_max maps from this floor (0) to 0 dB (1).
_SEGMENT_LOUDNESS_FLOOR_DB = -60.0


def _float(payload: dict, key: str, fallback: float) -> float:
    value = payload.get(key)
    if value is None:
        return fallback
    return float(value)


def _int(payload: dict, key: str, fallback: int) -> int:
    value = payload.get(key)
    if value is None:
        return fallback
    return int(value)


def parse_audio_features(payload: dict | None) -> AudioFeatures | None:
    if not payload:
        return None

    limited = bool(payload.get("_limited", False))
    neutral = AudioFeatures.unavailable() if limited else AudioFeatures()

    return AudioFeatures(
        energy=_float(payload, "energy", neutral.energy),
        danceability=_float(payload, "danceability", neutral.danceability),
        valence=_float(payload, "valence", neutral.valence),
        acousticness=_float(payload, "acousticness", neutral.acousticness),
        instrumentalness=_float(payload, "instrumentalness", neutral.instrumentalness),
        liveness=_float(payload, "liveness", neutral.liveness),
        speechiness=_float(payload, "speechiness", neutral.speechiness),
        tempo=_float(payload, "tempo", neutral.tempo),
        loudness=_float(payload, "loudness", neutral.loudness),
        key=_int(payload, "key", -1),
        mode=_int(payload, "mode", 1),
        limited=limited,
    )


def parse_audio_analysis(payload: dict | None) -> TrackAnalysis | None:
    if not payload:
        return None

    sections = [
        AnalysisSection(
            start=_float(raw, "start", 0.0),
            duration=_float(raw, "duration", 0.0),
            loudness=_float(raw, "loudness", -60.0),
            tempo=_float(raw, "tempo", 0.0),
            confidence=_float(raw, "confidence", 0.0),
        )
        for raw in payload.get("sections") or []
    ]
    segments = [
        AnalysisSegment(
            start=_float(raw, "start", 0.0),
            duration=_float(raw, "duration", 0.0),
            confidence=_float(raw, "confidence", 0.0),
            loudness_max=_float(raw, "loudness_max", -60.0),
        )
        for raw in payload.get("segments") or []
    ]
    track = payload.get("track") or {}

    return TrackAnalysis(
        sections=sections,
        segments=segments,
        track=TrackSummary(
            duration=_float(track, "duration", 0.0),
            loudness_max=_float(track, "loudness_max", -60.0),
            tempo=_float(track, "tempo", 0.0),
            time_signature=_int(track, "time_signature", 4),
        ),
        limited=bool(payload.get("_limited", False)),
    )


def average_segment_value(segments: list[AnalysisSegment], attribute: str) -> float:
    if not segments:
        return 0.0
    return sum(getattr(s, attribute) or 0.0 for s in segments) / len(segments)


def find_significant_segments(
    analysis: TrackAnalysis | None,
    confidence_threshold: float = 0.7,
    loudness_threshold: float = -20.0,
) -> list[AnalysisSegment]:
    if analysis is None:
        return []
    return [
        s for s in analysis.segments
        if s.confidence >= confidence_threshold and s.loudness_max >= loudness_threshold
    ]


def energy_distribution(analysis: TrackAnalysis | None, buckets: int = 50) -> list[float]:
    """Spread segment loudness over ``buckets`` equal slices of the track.

    Each slice holds the summed normalized ``loudness_max`` of the segments
    starting in it, divided by the average number of segments per slice and
    clamped to [0, 1].
    """

    if buckets < 1:
        raise ValueError(f"buckets must be at least 1, got {buckets}")
    if analysis is None or not analysis.segments:
        return [0.0] * buckets

    track_duration = analysis.track.duration
    if track_duration <= 0:
        track_duration = max(s.start + s.duration for s in analysis.segments)
    if track_duration <= 0:
        return [0.0] * buckets

    bucket_duration = track_duration / buckets
    distribution = [0.0] * buckets
    for segment in analysis.segments:
        index = min(max(int(segment.start // bucket_duration), 0), buckets - 1)
        level = (segment.loudness_max - _SEGMENT_LOUDNESS_FLOOR_DB) / -_SEGMENT_LOUDNESS_FLOOR_DB
        distribution[index] += min(max(level, 0.0), 1.0)

    per_bucket = len(analysis.segments) / buckets
    return [min(value / per_bucket, 1.0) for value in distribution]
