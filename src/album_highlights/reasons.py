from __future__ import annotations

from album_highlights.models import AudioFeatures, UserPreferences

MAX_REASONS = 3
MIN_SPECIFIC_REASONS = 2
POPULAR_THRESHOLD = 70
FILLER_REASON = "Musical elements that complement your listening history"

# Checked in order; earlier entries describe more distinguishing features.
_FEATURE_REASONS = (
    ("energy", 0.7, "High energy track that matches your preference for energetic music"),
    ("danceability", 0.7, "Highly danceable rhythm similar to other tracks you enjoy"),
    ("valence", 0.7, "Upbeat and positive mood that aligns with your listening patterns"),
    ("acousticness", 0.7, "Acoustic elements that match your interest in organic sounds"),
    ("instrumentalness", 0.5, "Instrumental composition with minimal vocals"),
)


def explain_recommendation(
    track: dict | None,
    features: AudioFeatures | None,
    user_preferences: UserPreferences | None = None,
) -> list[str]:
    """Short reasons a track was recommended, most distinguishing first.

    Stand-in values on limited features are not described, but a generic
    reason still keeps the result non-empty.
    """

    if features is None:
        return []

    track = track or {}
    artists = track.get("artists") or []
    reasons: list[str] = []

    if not features.limited:
        for attribute, threshold, text in _FEATURE_REASONS:
            if getattr(features, attribute) > threshold:
                reasons.append(text)

    if int(track.get("popularity") or 0) > POPULAR_THRESHOLD:
        reasons.append("Currently trending track with high popularity")

    if artists and artists[0].get("name"):
        reasons.append(f"Created by {artists[0]['name']}, an artist that matches your taste")

    if user_preferences is not None:
        if user_preferences.favorite_genres:
            reasons.append(f"Fits within your preferred {user_preferences.favorite_genres[0]} genre")
        artist_ids = {a.get("id") for a in artists}
        if any(artist_id in artist_ids for artist_id in user_preferences.favorite_artist_ids):
            reasons.append("From an artist in your top played list")

    if len(reasons) < MIN_SPECIFIC_REASONS:
        reasons.append(FILLER_REASON)

    return reasons[:MAX_REASONS]
