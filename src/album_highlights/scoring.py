"""Fixed heuristic that rates analysis sections as highlight candidates.

A section's score is a weighted blend of four factors, each in [0, 1]:

* loudness of the section, mapped linearly from ``LOUDNESS_FLOOR_DB`` (0) to 0 dB (1)
* the track-level ``energy`` feature
* tempo, either as closeness to the track's global tempo (``"track"`` policy)
  or as section BPM on a fixed 0-160 scale (``"fixed"`` policy)
* the detector ``confidence`` of the section

The blend is then multiplied by a duration factor that keeps sections in the
preferred 20-40 s band at full value and discounts very short ones. Every
weight is non-negative, so the score never decreases when loudness, energy or
confidence increase.
"""
from __future__ import annotations

from album_highlights.models import AnalysisSection, AudioFeatures, ScoredSection

LOUDNESS_FLOOR_DB = -30.0
FIXED_TEMPO_SCALE_BPM = 160.0
DEFAULT_TRACK_TEMPO = 120.0

LOUDNESS_WEIGHT = 0.4
ENERGY_WEIGHT = 0.2
TEMPO_WEIGHT = 0.2
CONFIDENCE_WEIGHT = 0.2

PREFERRED_DURATION_RANGE = (20.0, 40.0)
SHORT_SECTION_SECONDS = 10.0
SHORT_SECTION_FACTOR = 0.6
OFF_BAND_FACTOR = 0.85

REASON_THRESHOLD = 0.8
HIGH_ENERGY_REASON = "High energy section"
LOUD_REASON = "Prominent, loud section"
FAST_REASON = "Fast-paced section"
DEFAULT_REASON = "Key musical moment"


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return min(max(value, low), high)


def normalize_loudness(loudness_db: float) -> float:
    return _clamp((loudness_db - LOUDNESS_FLOOR_DB) / -LOUDNESS_FLOOR_DB)


def tempo_closeness(section_tempo: float, track_tempo: float) -> float:
    if track_tempo <= 0:
        track_tempo = DEFAULT_TRACK_TEMPO
    return 1.0 - min(abs(section_tempo - track_tempo) / track_tempo, 1.0)


def tempo_scale(section_tempo: float) -> float:
    return _clamp(section_tempo / FIXED_TEMPO_SCALE_BPM)


def duration_factor(duration: float) -> float:
    low, high = PREFERRED_DURATION_RANGE
    if duration < SHORT_SECTION_SECONDS:
        return SHORT_SECTION_FACTOR
    if low <= duration <= high:
        return 1.0
    return OFF_BAND_FACTOR


def _reference_tempo(features: AudioFeatures | None, track_tempo: float | None) -> float:
    if track_tempo is not None and track_tempo > 0:
        return track_tempo
    if features is not None and features.tempo > 0:
        return features.tempo
    return DEFAULT_TRACK_TEMPO


def _factors(
    section: AnalysisSection,
    features: AudioFeatures | None,
    tempo_policy: str,
    track_tempo: float | None,
) -> dict[str, float]:
    energy = features.energy if features is not None else AudioFeatures.unavailable().energy
    if tempo_policy == "fixed":
        tempo = tempo_scale(section.tempo)
    else:
        tempo = tempo_closeness(section.tempo, _reference_tempo(features, track_tempo))
    return {
        "loudness": normalize_loudness(section.loudness),
        "energy": _clamp(energy),
        "tempo": tempo,
        "confidence": _clamp(section.confidence),
    }


def score_section(
    section: AnalysisSection,
    features: AudioFeatures | None,
    tempo_policy: str = "track",
    track_tempo: float | None = None,
) -> float:
    """Score one section; malformed sections score 0."""

    if not section.is_well_formed():
        return 0.0

    factors = _factors(section, features, tempo_policy, track_tempo)
    blend = (
        LOUDNESS_WEIGHT * factors["loudness"]
        + ENERGY_WEIGHT * factors["energy"]
        + TEMPO_WEIGHT * factors["tempo"]
        + CONFIDENCE_WEIGHT * factors["confidence"]
    )
    return blend * duration_factor(section.duration)


def section_reason(section: AnalysisSection, features: AudioFeatures | None) -> str:
    if not section.is_well_formed():
        return DEFAULT_REASON

    energy = features.energy if features is not None else AudioFeatures.unavailable().energy
    # Pace is always judged on the fixed scale: closeness to the track tempo says nothing about speed.
    candidates = (
        (HIGH_ENERGY_REASON, _clamp(energy)),
        (LOUD_REASON, normalize_loudness(section.loudness)),
        (FAST_REASON, tempo_scale(section.tempo)),
    )
    label, value = max(candidates, key=lambda item: item[1])
    return label if value >= REASON_THRESHOLD else DEFAULT_REASON


def rate_section(
    section: AnalysisSection,
    features: AudioFeatures | None,
    tempo_policy: str = "track",
    track_tempo: float | None = None,
) -> ScoredSection:
    return ScoredSection(
        section=section,
        score=score_section(section, features, tempo_policy, track_tempo),
        reason=section_reason(section, features),
    )
