from __future__ import annotations

from dataclasses import dataclass

from album_highlights.models import AudioFeatures

KEY_NAMES = ["C", "C♯/D♭", "D", "D♯/E♭", "E", "F", "F♯/G♭", "G", "G♯/A♭", "A", "A♯/B♭", "B"]

_TEMPO_BANDS = (
    (60, "Very slow"),
    (80, "Slow"),
    (110, "Moderate"),
    (140, "Fast"),
    (170, "Very fast"),
)

_FEATURE_EXPLANATIONS = {
    "danceability": ("Not very danceable", "Moderately danceable", "Very danceable"),
    "energy": ("Low energy", "Moderate energy", "High energy"),
    "valence": ("Negative/sad mood", "Neutral mood", "Positive/happy mood"),
    "acousticness": ("Not acoustic", "Partially acoustic", "Highly acoustic"),
    "instrumentalness": ("Contains vocals", "Mix of vocals and instrumental", "Primarily instrumental"),
    "liveness": ("Studio recording", "Possible live elements", "Live performance"),
    "speechiness": ("Music, not speech", "Mix of music and speech", "Speech-heavy"),
}
NO_EXPLANATION = "No explanation available"


@dataclass(slots=True)
class Characteristic:
    value: float
    label: str
    description: str = ""


def key_name(key: int, mode: int) -> str:
    if key is None or not 0 <= key < len(KEY_NAMES):
        return "Unknown"
    return f"{KEY_NAMES[key]} {'Major' if mode == 1 else 'Minor'}"


def tempo_description(bpm: float) -> str:
    for upper, label in _TEMPO_BANDS:
        if bpm < upper:
            return label
    return "Extremely fast"


def time_signature_label(beats: int) -> str:
    if beats < 1:
        return "Unknown"
    return f"{beats}/4"


def feature_explanation(feature: str, value: float) -> str:
    levels = _FEATURE_EXPLANATIONS.get(feature)
    if levels is None:
        return NO_EXPLANATION
    for threshold, text in zip((0.3, 0.6, 1.0), levels):
        if value <= threshold:
            return text
    return NO_EXPLANATION


def _band(value: float, high: float, low: float) -> int:
    """0 above ``high``, 2 below ``low``, 1 in between."""
    if value > high:
        return 0
    if value < low:
        return 2
    return 1


def analyze_track_characteristics(features: AudioFeatures | None) -> dict[str, Characteristic] | None:
    if features is None:
        return None

    energy = _band(features.energy, 0.7, 0.4)
    dance = _band(features.danceability, 0.7, 0.4)
    valence = _band(features.valence, 0.7, 0.3)
    acoustic = _band(features.acousticness, 0.7, 0.3)
    tempo = _band(features.tempo, 120, 80)
    instrumental = features.instrumentalness > 0.5

    return {
        "energy": Characteristic(
            features.energy,
            ("High Energy", "Moderate Energy", "Low Energy")[energy],
            (
                "This track has high intensity and activity",
                "This track has a balanced energy level",
                "This track has a calm, relaxed feel",
            )[energy],
        ),
        "danceability": Characteristic(
            features.danceability,
            ("Very Danceable", "Moderately Danceable", "Less Danceable")[dance],
            (
                "This track has a strong, danceable rhythm",
                "This track has a moderate dance rhythm",
                "This track has a less conventional rhythm for dancing",
            )[dance],
        ),
        "valence": Characteristic(
            features.valence,
            ("Positive", "Neutral", "Melancholic")[valence],
            (
                "This track conveys positive, happy emotions",
                "This track has a balanced emotional tone",
                "This track conveys negative emotions like sadness",
            )[valence],
        ),
        "acousticness": Characteristic(
            features.acousticness,
            ("Acoustic", "Mixed", "Electronic")[acoustic],
            (
                "This track features primarily acoustic instruments",
                "This track blends acoustic and electronic elements",
                "This track features primarily electronic elements",
            )[acoustic],
        ),
        "instrumentalness": Characteristic(
            features.instrumentalness,
            "Instrumental" if instrumental else "Vocal",
            "This track contains few or no vocals" if instrumental else "This track features prominent vocals",
        ),
        "tempo": Characteristic(
            features.tempo,
            ("Fast", "Moderate", "Slow")[tempo],
            f"This track has a tempo of {round(features.tempo)} BPM",
        ),
        "key": Characteristic(features.key, key_name(features.key, features.mode)),
    }
