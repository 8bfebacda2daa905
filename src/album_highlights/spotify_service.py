from __future__ import annotations

import os
import warnings

import spotipy
from requests.exceptions import HTTPError
from spotipy.exceptions import SpotifyException
from spotipy.oauth2 import SpotifyClientCredentials

from album_highlights.analysis import parse_audio_analysis, parse_audio_features
from album_highlights.models import (
    AudioFeatures,
    HydratedTrack,
    TrackAnalysis,
    TrackSummary,
)
from album_highlights.similarity import rank_by_similarity


def _status(exc: HTTPError | SpotifyException) -> int | None:
    if isinstance(exc, HTTPError):
        return exc.response.status_code if exc.response is not None else None
    return exc.http_status


class SpotifyService:
    # Spotify rejects album-track pages above 50 items.
    ALBUM_PAGE_LIMIT = 50
    # /v1/audio-features accepts at most 100 ids per call.
    FEATURES_BATCH_LIMIT = 100

    def __init__(self) -> None:
        self._validate_credentials()
        self.client = spotipy.Spotify(auth_manager=SpotifyClientCredentials())

    @staticmethod
    def _validate_credentials() -> None:
        missing = [name for name in ("SPOTIPY_CLIENT_ID", "SPOTIPY_CLIENT_SECRET") if not os.getenv(name)]
        if missing:
            missing_list = ", ".join(missing)
            raise ValueError(
                f"Missing Spotify credentials: {missing_list}. "
                "Set them in environment variables or local .env file."
            )

    def track(self, track_id: str) -> dict:
        return self.client.track(track_id, market="US")

    def album_tracks(self, album_id: str, limit: int = 50) -> list[dict]:
        tracks: list[dict] = []
        offset = 0
        while len(tracks) < limit:
            page_size = min(self.ALBUM_PAGE_LIMIT, limit - len(tracks))
            try:
                page = self.client.album_tracks(album_id, limit=page_size, offset=offset, market="US")
            except (HTTPError, SpotifyException) as exc:
                if _status(exc) == 400:
                    warnings.warn(
                        f"Spotify album-tracks returned 400 Bad Request (limit={page_size}, offset={offset}). "
                        "Returning tracks collected so far.",
                        RuntimeWarning,
                        stacklevel=2,
                    )
                    break
                raise
            items = page.get("items", [])
            if not items:
                break
            tracks.extend(items)
            offset += len(items)
            if not page.get("next"):
                break
        return tracks[:limit]

    def audio_features(self, track_id: str) -> AudioFeatures:
        """Features for one track; a limited stand-in when the endpoint is restricted."""
        try:
            result = self.client.audio_features([track_id])
        except (HTTPError, SpotifyException) as exc:
            if _status(exc) == 403:
                warnings.warn(
                    "Spotify audio-features endpoint returned 403 Forbidden. "
                    "This endpoint may be restricted for your app credentials. "
                    "Falling back to limited features.",
                    RuntimeWarning,
                    stacklevel=2,
                )
                return AudioFeatures.unavailable()
            raise
        features = parse_audio_features(result[0] if result else None)
        return features if features is not None else AudioFeatures.unavailable()

    def audio_analysis(self, track_id: str) -> TrackAnalysis:
        """Structural analysis for one track; empty and limited when the endpoint is restricted."""
        try:
            result = self.client.audio_analysis(track_id)
        except (HTTPError, SpotifyException) as exc:
            if _status(exc) == 403:
                warnings.warn(
                    "Spotify audio-analysis endpoint returned 403 Forbidden. "
                    "This endpoint may be restricted for your app credentials. "
                    "Falling back to limited analysis.",
                    RuntimeWarning,
                    stacklevel=2,
                )
                return TrackAnalysis(limited=True)
            raise
        analysis = parse_audio_analysis(result)
        return analysis if analysis is not None else TrackAnalysis(limited=True)

    def hydrate_track(self, track_id: str) -> HydratedTrack:
        track = self.track(track_id)
        features = self.audio_features(track_id)
        analysis = self.audio_analysis(track_id)
        if analysis.limited and analysis.track.duration <= 0:
            duration_ms = track.get("duration_ms") or 0
            analysis.track = TrackSummary(duration=duration_ms / 1000.0)
        return HydratedTrack(track=track, features=features, analysis=analysis)

    def hydrate_tracks(self, track_ids: list[str]) -> list[HydratedTrack]:
        return [self.hydrate_track(tid) for tid in track_ids]

    def batch_audio_features(self, track_ids: list[str]) -> dict[str, AudioFeatures]:
        by_id: dict[str, AudioFeatures] = {}
        for i in range(0, len(track_ids), self.FEATURES_BATCH_LIMIT):
            chunk = track_ids[i:i + self.FEATURES_BATCH_LIMIT]
            try:
                results = self.client.audio_features(chunk) or []
            except (HTTPError, SpotifyException) as exc:
                if _status(exc) == 403:
                    warnings.warn(
                        "Spotify audio-features endpoint returned 403 Forbidden. "
                        "Candidates will not be ranked by similarity.",
                        RuntimeWarning,
                        stacklevel=2,
                    )
                    return by_id
                raise
            for payload in results:
                features = parse_audio_features(payload)
                if features is not None and payload.get("id"):
                    by_id[payload["id"]] = features
        return by_id

    def similar_tracks(
        self,
        track_id: str,
        features: AudioFeatures | None,
        limit: int = 20,
    ) -> list[tuple[dict, float]]:
        """Recommendations aimed at the track's feature vector, most similar first."""

        kwargs: dict = {"seed_tracks": [track_id], "limit": limit}
        if features is not None and not features.limited:
            kwargs.update(
                target_energy=features.energy,
                target_danceability=features.danceability,
                target_valence=features.valence,
                target_acousticness=features.acousticness,
                target_instrumentalness=features.instrumentalness,
            )
        try:
            result = self.client.recommendations(**kwargs)
        except (HTTPError, SpotifyException) as exc:
            if _status(exc) in (403, 404):
                warnings.warn(
                    f"Spotify recommendations endpoint returned {_status(exc)}. "
                    "Returning no similar tracks.",
                    RuntimeWarning,
                    stacklevel=2,
                )
                return []
            raise

        tracks = [t for t in result.get("tracks", []) if t.get("id") and t["id"] != track_id]
        candidate_features = self.batch_audio_features([t["id"] for t in tracks])
        return rank_by_similarity(features, [(t, candidate_features.get(t["id"])) for t in tracks])
