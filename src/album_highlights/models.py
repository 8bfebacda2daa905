from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field

TEMPO_POLICIES = ("track", "fixed")


@dataclass(slots=True)
class AudioFeatures:
    energy: float = 0.0
    danceability: float = 0.0
    valence: float = 0.0
    acousticness: float = 0.0
    instrumentalness: float = 0.0
    liveness: float = 0.0
    speechiness: float = 0.0
    tempo: float = 120.0
    loudness: float = -10.0
    key: int = -1
    mode: int = 1
    # True when the values are stand-ins because the upstream fetch was restricted.
    limited: bool = False

    @classmethod
    def unavailable(cls) -> AudioFeatures:
        return cls(energy=0.5, tempo=120.0, loudness=-10.0, key=-1, limited=True)

    def vector(self) -> tuple[float, float, float, float, float]:
        return (
            self.energy,
            self.danceability,
            self.valence,
            self.acousticness,
            self.instrumentalness,
        )


@dataclass(slots=True)
class AnalysisSection:
    start: float
    duration: float
    loudness: float = -60.0
    tempo: float = 0.0
    confidence: float = 0.0

    @property
    def end(self) -> float:
        return self.start + self.duration

    def is_well_formed(self) -> bool:
        values = (self.start, self.duration, self.loudness, self.tempo, self.confidence)
        if not all(math.isfinite(v) for v in values):
            return False
        return self.start >= 0 and self.duration > 0 and 0.0 <= self.confidence <= 1.0


@dataclass(slots=True)
class AnalysisSegment:
    start: float
    duration: float
    confidence: float = 0.0
    loudness_max: float = -60.0


@dataclass(slots=True)
class TrackSummary:
    duration: float = 0.0
    loudness_max: float = -60.0
    tempo: float = 0.0
    time_signature: int = 4


@dataclass(slots=True)
class TrackAnalysis:
    sections: list[AnalysisSection] = field(default_factory=list)
    segments: list[AnalysisSegment] = field(default_factory=list)
    track: TrackSummary = field(default_factory=TrackSummary)
    limited: bool = False


@dataclass(slots=True)
class ScoredSection:
    section: AnalysisSection
    score: float
    reason: str


@dataclass(slots=True)
class Highlight:
    start: float
    duration: float
    loudness: float
    tempo: float
    energy: float
    score: float
    reason: str
    confidence: float | None = None

    @property
    def end(self) -> float:
        return self.start + self.duration

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(slots=True)
class HighlightOptions:
    """Tunable knobs of the highlight selector.

    ``tempo_policy`` is ``"track"`` (closeness to the track's global tempo) or
    ``"fixed"`` (section BPM on a 0-160 scale).
    """

    max_highlights: int = 3
    min_duration: float = 20.0
    max_duration: float = 30.0
    min_score: float = 0.6
    tempo_policy: str = "track"

    def __post_init__(self) -> None:
        if self.max_highlights < 1:
            raise ValueError(f"max_highlights must be at least 1, got {self.max_highlights}")
        if self.max_duration <= 0:
            raise ValueError(f"max_duration must be positive, got {self.max_duration}")
        if self.min_duration < 0 or self.min_duration > self.max_duration:
            raise ValueError(
                f"min_duration must be within [0, max_duration], got {self.min_duration} "
                f"with max_duration={self.max_duration}"
            )
        if self.tempo_policy not in TEMPO_POLICIES:
            raise ValueError(
                f"Unknown tempo_policy {self.tempo_policy!r}; expected one of {', '.join(TEMPO_POLICIES)}"
            )


@dataclass(slots=True)
class UserPreferences:
    favorite_genres: list[str] = field(default_factory=list)
    favorite_artist_ids: list[str] = field(default_factory=list)


@dataclass(slots=True)
class HydratedTrack:
    track: dict
    features: AudioFeatures | None
    analysis: TrackAnalysis | None
