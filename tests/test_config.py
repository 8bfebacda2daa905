import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from album_highlights.config import env_float, env_int, highlight_options_from_env, load_local_env_file


class ConfigTests(unittest.TestCase):
    def test_load_local_env_file_loads_missing_values_only(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            env_path = Path(tmpdir) / ".env"
            env_path.write_text(
                """
# comment
SPOTIPY_CLIENT_ID=test-id
SPOTIPY_CLIENT_SECRET="test-secret"
KEEP_ME=from_file
                """.strip(),
                encoding="utf-8",
            )

            original_keep = os.environ.get("KEEP_ME")
            os.environ["KEEP_ME"] = "existing"
            os.environ.pop("SPOTIPY_CLIENT_ID", None)
            os.environ.pop("SPOTIPY_CLIENT_SECRET", None)
            try:
                load_local_env_file(str(env_path))
                self.assertEqual(os.environ.get("SPOTIPY_CLIENT_ID"), "test-id")
                self.assertEqual(os.environ.get("SPOTIPY_CLIENT_SECRET"), "test-secret")
                self.assertEqual(os.environ.get("KEEP_ME"), "existing")
            finally:
                os.environ.pop("SPOTIPY_CLIENT_ID", None)
                os.environ.pop("SPOTIPY_CLIENT_SECRET", None)
                if original_keep is None:
                    os.environ.pop("KEEP_ME", None)
                else:
                    os.environ["KEEP_ME"] = original_keep

    def test_missing_env_file_is_ignored(self) -> None:
        load_local_env_file("/nonexistent/.env")

    def test_env_helpers_fall_back_on_empty_and_invalid(self) -> None:
        with patch.dict("os.environ", {"HIGHLIGHT_MAX_COUNT": "", "HIGHLIGHT_MIN_SCORE": "high"}):
            self.assertEqual(env_int("HIGHLIGHT_MAX_COUNT", 3), 3)
            self.assertEqual(env_float("HIGHLIGHT_MIN_SCORE", 0.6), 0.6)
        with patch.dict("os.environ", {"HIGHLIGHT_MAX_COUNT": "4", "HIGHLIGHT_MIN_SCORE": "0.75"}):
            self.assertEqual(env_int("HIGHLIGHT_MAX_COUNT", 3), 4)
            self.assertEqual(env_float("HIGHLIGHT_MIN_SCORE", 0.6), 0.75)

    def test_highlight_options_from_env(self) -> None:
        env = {
            "HIGHLIGHT_MAX_COUNT": "5",
            "HIGHLIGHT_MIN_DURATION": "10",
            "HIGHLIGHT_MAX_DURATION": "20",
            "HIGHLIGHT_MIN_SCORE": "0.5",
            "HIGHLIGHT_TEMPO_POLICY": "fixed",
        }
        with patch.dict("os.environ", env):
            options = highlight_options_from_env()

        self.assertEqual(options.max_highlights, 5)
        self.assertEqual(options.min_duration, 10.0)
        self.assertEqual(options.max_duration, 20.0)
        self.assertEqual(options.min_score, 0.5)
        self.assertEqual(options.tempo_policy, "fixed")

    def test_highlight_options_from_env_defaults(self) -> None:
        with patch.dict("os.environ", {}, clear=True):
            options = highlight_options_from_env()
        self.assertEqual(options.max_highlights, 3)
        self.assertEqual(options.tempo_policy, "track")


if __name__ == "__main__":
    unittest.main()
