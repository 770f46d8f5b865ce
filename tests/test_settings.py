from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path
import unittest
from unittest import mock

from pydantic import ValidationError

PROJECT_ROOT = Path(__file__).resolve().parent.parent
API_CODE_PATH = PROJECT_ROOT / "api-code"
if str(API_CODE_PATH) not in sys.path:
    sys.path.insert(0, str(API_CODE_PATH))

from env_loader import load_local_env
from settings import DEFAULT_MAX_BODY_BYTES, Settings


class SettingsTest(unittest.TestCase):
    def test_defaults(self) -> None:
        settings = Settings.model_validate({})

        self.assertEqual(settings.port, 3000)
        self.assertEqual(settings.lm_studio_base_url, "http://localhost:1234")
        self.assertEqual(settings.lm_studio_api_key, "lm-studio")
        self.assertEqual(settings.max_body_bytes, DEFAULT_MAX_BODY_BYTES)
        self.assertEqual(settings.allowed_origins, ["*"])

    def test_from_env_reads_aliases(self) -> None:
        env = {
            "PORT": "8080",
            "LM_STUDIO_BASE_URL": "http://gpu-box:1234",
            "LM_STUDIO_API_KEY": "token",
            "CORS_ALLOW_ORIGINS": "http://a.test, http://b.test",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            settings = Settings.from_env()

        self.assertEqual(settings.port, 8080)
        self.assertEqual(settings.lm_studio_base_url, "http://gpu-box:1234")
        self.assertEqual(settings.lm_studio_api_key, "token")
        self.assertEqual(settings.allowed_origins, ["http://a.test", "http://b.test"])

    def test_settings_are_immutable(self) -> None:
        settings = Settings.model_validate({})
        with self.assertRaises(ValidationError):
            settings.port = 9000  # type: ignore[misc]


class EnvLoaderTest(unittest.TestCase):
    def test_loads_pairs_without_overriding_existing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            env_file = Path(tmp) / ".env"
            env_file.write_text(
                "# comment\n"
                "LM_RELAY_TEST_A='quoted'\n"
                "export LM_RELAY_TEST_B=plain\n"
                "not-a-pair\n"
                "LM_RELAY_TEST_C=from-file\n"
            )
            with mock.patch.dict(os.environ, {"LM_RELAY_TEST_C": "from-shell"}):
                applied = load_local_env(env_file)

                self.assertEqual(applied, 2)
                self.assertEqual(os.environ["LM_RELAY_TEST_A"], "quoted")
                self.assertEqual(os.environ["LM_RELAY_TEST_B"], "plain")
                self.assertEqual(os.environ["LM_RELAY_TEST_C"], "from-shell")

    def test_missing_file_is_ignored(self) -> None:
        self.assertEqual(load_local_env(Path("/nonexistent/.env")), 0)


if __name__ == "__main__":
    unittest.main()
