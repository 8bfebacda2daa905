"""FastAPI web server for album highlight previews."""

import structlog
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from spotipy.exceptions import SpotifyException

from album_highlights.analysis import average_segment_value, energy_distribution, find_significant_segments
from album_highlights.characteristics import (
    analyze_track_characteristics,
    feature_explanation,
    tempo_description,
    time_signature_label,
)
from album_highlights.config import highlight_options_from_env
from album_highlights.highlights import select_highlights
from album_highlights.models import HighlightOptions, HydratedTrack, UserPreferences
from album_highlights.reasons import explain_recommendation
from album_highlights.spotify_service import SpotifyService

log = structlog.get_logger()

app = FastAPI(title="Album Highlights")

# Enable CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Response models
class HighlightInfo(BaseModel):
    """One playable segment, in seconds."""
    start: float
    duration: float
    loudness: float
    tempo: float
    energy: float
    score: float
    reason: str
    confidence: float | None = None


class TrackHighlights(BaseModel):
    track_id: str
    name: str = ""
    limited: bool = False
    highlights: list[HighlightInfo]


class AlbumHighlights(BaseModel):
    album_id: str
    tracks: list[TrackHighlights]


class CharacteristicInfo(BaseModel):
    value: float
    label: str
    description: str = ""


class TrackCharacteristics(BaseModel):
    """Labels are left empty for whichever half of the data Spotify withheld."""
    track_id: str
    limited: bool = False
    characteristics: dict[str, CharacteristicInfo]
    explanations: dict[str, str] = {}
    pace: str | None = None
    time_signature: str | None = None
    average_loudness: float | None = None
    significant_segments: int = 0
    energy_curve: list[float] = []


class TrackReasons(BaseModel):
    track_id: str
    reasons: list[str]


class SimilarTrack(BaseModel):
    id: str
    name: str
    artist: str
    similarity: float
    preview_url: str | None = None


class SimilarTracks(BaseModel):
    track_id: str
    tracks: list[SimilarTrack]


def get_spotify_service() -> SpotifyService:
    """Initialize the Spotify service (raises ValueError without credentials)."""
    return SpotifyService()


def _build_options(
    max_highlights: int | None,
    min_duration: float | None,
    max_duration: float | None,
    min_score: float | None,
    tempo_policy: str | None,
) -> HighlightOptions:
    defaults = highlight_options_from_env()
    try:
        return HighlightOptions(
            max_highlights=max_highlights if max_highlights is not None else defaults.max_highlights,
            min_duration=min_duration if min_duration is not None else defaults.min_duration,
            max_duration=max_duration if max_duration is not None else defaults.max_duration,
            min_score=min_score if min_score is not None else defaults.min_score,
            tempo_policy=tempo_policy or defaults.tempo_policy,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


def _to_http_error(exc: Exception, action: str) -> HTTPException:
    log.warning("api.request_failed", action=action, error=str(exc))
    if isinstance(exc, SpotifyException) and exc.http_status == 404:
        return HTTPException(status_code=404, detail=f"Not found while trying to {action}")
    if isinstance(exc, ValueError):
        return HTTPException(status_code=500, detail=str(exc))
    return HTTPException(status_code=500, detail=f"Error: {str(exc)}")


def _track_highlights(hydrated: HydratedTrack, options: HighlightOptions) -> TrackHighlights:
    highlights = select_highlights(hydrated.analysis, hydrated.features, options)
    limited = bool(
        (hydrated.features is not None and hydrated.features.limited)
        or (hydrated.analysis is not None and hydrated.analysis.limited)
    )
    return TrackHighlights(
        track_id=hydrated.track.get("id", ""),
        name=hydrated.track.get("name", ""),
        limited=limited,
        highlights=[HighlightInfo(**h.to_dict()) for h in highlights],
    )


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/api/tracks/{track_id}/highlights", response_model=TrackHighlights)
def track_highlights(
    track_id: str,
    max_highlights: int | None = None,
    min_duration: float | None = None,
    max_duration: float | None = None,
    min_score: float | None = None,
    tempo_policy: str | None = None,
):
    """Pick the segments of one track worth previewing."""
    options = _build_options(max_highlights, min_duration, max_duration, min_score, tempo_policy)
    try:
        service = get_spotify_service()
        return _track_highlights(service.hydrate_track(track_id), options)
    except HTTPException:
        raise
    except Exception as e:
        raise _to_http_error(e, f"detect highlights for track {track_id}")


@app.get("/api/albums/{album_id}/highlights", response_model=AlbumHighlights)
def album_highlights(
    album_id: str,
    max_highlights: int | None = None,
    min_duration: float | None = None,
    max_duration: float | None = None,
    min_score: float | None = None,
    tempo_policy: str | None = None,
):
    """Preview a whole album: highlights for every track, in track order."""
    options = _build_options(max_highlights, min_duration, max_duration, min_score, tempo_policy)
    try:
        service = get_spotify_service()
        track_ids = [t["id"] for t in service.album_tracks(album_id) if t.get("id")]
        return AlbumHighlights(
            album_id=album_id,
            tracks=[_track_highlights(service.hydrate_track(tid), options) for tid in track_ids],
        )
    except HTTPException:
        raise
    except Exception as e:
        raise _to_http_error(e, f"preview album {album_id}")


_EXPLAINED_FEATURES = (
    "danceability",
    "energy",
    "valence",
    "acousticness",
    "instrumentalness",
    "liveness",
    "speechiness",
)


@app.get("/api/tracks/{track_id}/characteristics", response_model=TrackCharacteristics)
def track_characteristics(track_id: str):
    """Describe a track from its audio features and, when available, its analysis."""
    try:
        service = get_spotify_service()
        hydrated = service.hydrate_track(track_id)
    except Exception as e:
        raise _to_http_error(e, f"describe track {track_id}")

    features, analysis = hydrated.features, hydrated.analysis
    response = TrackCharacteristics(
        track_id=track_id,
        limited=bool(features.limited or analysis.limited),
        characteristics={},
    )

    # Stand-in values from a restricted endpoint say nothing about the track.
    if not features.limited:
        characteristics = analyze_track_characteristics(features) or {}
        response.characteristics = {
            name: CharacteristicInfo(value=c.value, label=c.label, description=c.description)
            for name, c in characteristics.items()
        }
        response.explanations = {
            name: feature_explanation(name, getattr(features, name)) for name in _EXPLAINED_FEATURES
        }
        response.pace = tempo_description(features.tempo)

    if not analysis.limited:
        response.time_signature = time_signature_label(analysis.track.time_signature)
        if analysis.segments:
            response.average_loudness = average_segment_value(analysis.segments, "loudness_max")
            response.significant_segments = len(find_significant_segments(analysis))
            response.energy_curve = energy_distribution(analysis)

    return response


@app.get("/api/tracks/{track_id}/reasons", response_model=TrackReasons)
def track_reasons(track_id: str, genre: str | None = None, artist_ids: str | None = None):
    """Explain a recommendation; ``artist_ids`` is a comma separated list of favorite artists."""
    preferences = None
    if genre or artist_ids:
        preferences = UserPreferences(
            favorite_genres=[genre] if genre else [],
            favorite_artist_ids=[a.strip() for a in (artist_ids or "").split(",") if a.strip()],
        )
    try:
        service = get_spotify_service()
        track = service.track(track_id)
        features = service.audio_features(track_id)
    except Exception as e:
        raise _to_http_error(e, f"explain track {track_id}")

    return TrackReasons(track_id=track_id, reasons=explain_recommendation(track, features, preferences))


@app.get("/api/tracks/{track_id}/similar", response_model=SimilarTracks)
def similar_tracks(track_id: str, limit: int = 20):
    try:
        service = get_spotify_service()
        features = service.audio_features(track_id)
        ranked = service.similar_tracks(track_id, features, limit=limit)
    except Exception as e:
        raise _to_http_error(e, f"find tracks similar to {track_id}")

    return SimilarTracks(
        track_id=track_id,
        tracks=[
            SimilarTrack(
                id=track["id"],
                name=track.get("name", ""),
                artist=track["artists"][0]["name"] if track.get("artists") else "Unknown",
                similarity=score,
                preview_url=track.get("preview_url"),
            )
            for track, score in ranked
        ],
    )
