import io
import unittest
from contextlib import redirect_stdout
from unittest.mock import MagicMock, patch

from album_highlights.app import format_highlight, main, options_from_args, parse_args
from album_highlights.models import (
    AnalysisSection,
    AudioFeatures,
    Highlight,
    HydratedTrack,
    TrackAnalysis,
    TrackSummary,
)


class ParseArgsTests(unittest.TestCase):
    def test_defaults(self) -> None:
        with patch.dict("os.environ", {}, clear=True):
            args = parse_args(["--track-id", "abc123"])
        options = options_from_args(args)

        self.assertEqual(args.track_id, "abc123")
        self.assertEqual(options.max_highlights, 3)
        self.assertEqual(options.max_duration, 30.0)
        self.assertEqual(options.tempo_policy, "track")

    def test_env_overrides_defaults(self) -> None:
        with patch.dict("os.environ", {"HIGHLIGHT_MAX_COUNT": "5", "HIGHLIGHT_MIN_SCORE": "oops"}):
            args = parse_args(["--track-id", "abc123"])

        self.assertEqual(args.max_highlights, 5)
        self.assertEqual(args.min_score, 0.6)

    def test_env_selects_tempo_policy(self) -> None:
        with patch.dict("os.environ", {"HIGHLIGHT_TEMPO_POLICY": "fixed", "HIGHLIGHT_MIN_DURATION": "10"}):
            args = parse_args(["--track-id", "abc123"])

        self.assertEqual(args.tempo_policy, "fixed")
        self.assertEqual(options_from_args(args).min_duration, 10.0)

    def test_flag_beats_env_tempo_policy(self) -> None:
        with patch.dict("os.environ", {"HIGHLIGHT_TEMPO_POLICY": "fixed"}):
            args = parse_args(["--track-id", "abc123", "--tempo-policy", "track"])

        self.assertEqual(args.tempo_policy, "track")

    def test_flags(self) -> None:
        args = parse_args(["--track-id", "abc123", "--max-highlights", "1", "--tempo-policy", "fixed"])
        options = options_from_args(args)

        self.assertEqual(options.max_highlights, 1)
        self.assertEqual(options.tempo_policy, "fixed")


class FormatHighlightTests(unittest.TestCase):
    def test_format(self) -> None:
        highlight = Highlight(start=75.4, duration=30, loudness=-5, tempo=120, energy=0.8,
                              score=0.91234, reason="High energy section")
        self.assertEqual(
            format_highlight(2, highlight),
            "2. 1:15 for 30.0s score=0.912 (High energy section)",
        )


class MainTests(unittest.TestCase):
    def test_main_prints_highlights_and_reasons(self) -> None:
        hydrated = HydratedTrack(
            track={"id": "abc123", "name": "Song", "artists": [{"id": "a1", "name": "Artist"}]},
            features=AudioFeatures(energy=0.9, tempo=120.0),
            analysis=TrackAnalysis(
                sections=[AnalysisSection(start=30, duration=30, loudness=-3, tempo=120, confidence=0.9)],
                track=TrackSummary(duration=200.0),
            ),
        )
        service = MagicMock()
        service.hydrate_track = MagicMock(return_value=hydrated)

        out = io.StringIO()
        with patch("album_highlights.spotify_service.SpotifyService", return_value=service), \
             patch("album_highlights.app.load_local_env_file"), \
             redirect_stdout(out):
            main(["--track-id", "abc123"])

        printed = out.getvalue()
        self.assertIn("Track: Song - Artist (abc123)", printed)
        self.assertIn("1. 0:30 for 30.0s", printed)
        self.assertIn("energy: High Energy", printed)
        self.assertIn("High energy track", printed)


if __name__ == "__main__":
    unittest.main()
