from __future__ import annotations

import argparse

from album_highlights.characteristics import analyze_track_characteristics
from album_highlights.config import highlight_options_from_env, load_local_env_file
from album_highlights.highlights import select_highlights
from album_highlights.models import Highlight, HighlightOptions, TEMPO_POLICIES
from album_highlights.reasons import explain_recommendation


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    defaults = highlight_options_from_env()
    parser = argparse.ArgumentParser(description="Preview the highlights of a track")
    parser.add_argument("--track-id", required=True, help="Spotify track id")
    parser.add_argument(
        "--max-highlights",
        type=int,
        default=defaults.max_highlights,
        help="Maximum number of highlights (defaults to HIGHLIGHT_MAX_COUNT env or 3)",
    )
    parser.add_argument(
        "--min-duration",
        type=float,
        default=defaults.min_duration,
        help="Shortest section considered, in seconds (defaults to HIGHLIGHT_MIN_DURATION env or 20)",
    )
    parser.add_argument(
        "--max-duration",
        type=float,
        default=defaults.max_duration,
        help="Longest highlight, in seconds (defaults to HIGHLIGHT_MAX_DURATION env or 30)",
    )
    parser.add_argument(
        "--min-score",
        type=float,
        default=defaults.min_score,
        help="Minimum section score (defaults to HIGHLIGHT_MIN_SCORE env or 0.6)",
    )
    parser.add_argument(
        "--tempo-policy",
        choices=TEMPO_POLICIES,
        default=defaults.tempo_policy,
        help="How section tempo is scored (defaults to HIGHLIGHT_TEMPO_POLICY env or track)",
    )
    return parser.parse_args(argv)


def options_from_args(args: argparse.Namespace) -> HighlightOptions:
    return HighlightOptions(
        max_highlights=args.max_highlights,
        min_duration=args.min_duration,
        max_duration=args.max_duration,
        min_score=args.min_score,
        tempo_policy=args.tempo_policy,
    )


def format_highlight(index: int, highlight: Highlight) -> str:
    start_min, start_sec = divmod(int(highlight.start), 60)
    return (
        f"{index}. {start_min}:{start_sec:02d} for {highlight.duration:.1f}s "
        f"score={highlight.score:.3f} ({highlight.reason})"
    )


def main(argv: list[str] | None = None) -> None:
    load_local_env_file()
    args = parse_args(argv)
    options = options_from_args(args)
    from album_highlights.spotify_service import SpotifyService

    service = SpotifyService()
    hydrated = service.hydrate_track(args.track_id)
    artist_names = ", ".join(a.get("name", "") for a in hydrated.track.get("artists", []))
    print(f"Track: {hydrated.track.get('name')} - {artist_names} ({args.track_id})")

    highlights = select_highlights(hydrated.analysis, hydrated.features, options)
    print("Highlights")
    for index, highlight in enumerate(highlights, start=1):
        print(format_highlight(index, highlight))

    characteristics = analyze_track_characteristics(hydrated.features) or {}
    if characteristics and not hydrated.features.limited:
        print("Character")
        for name, characteristic in characteristics.items():
            print(f"  {name}: {characteristic.label}")

    print("Why")
    for reason in explain_recommendation(hydrated.track, hydrated.features):
        print(f"  - {reason}")


if __name__ == "__main__":
    main()
