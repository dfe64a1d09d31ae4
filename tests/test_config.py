import os
from unittest import TestCase, mock

from src.main.config import DEFAULT_DB_PATH, Settings


class TestSettings(TestCase):
    @mock.patch("src.main.config.load_dotenv")
    def test_defaults(self, _load_dotenv) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            settings = Settings.from_env()
        self.assertEqual(settings.db_path, DEFAULT_DB_PATH)
        self.assertEqual(settings.reddit_host, "www.reddit.com")
        self.assertEqual(settings.default_subreddits, ["EarthPorn", "wallpaper", "wallpapers"])
        self.assertEqual(settings.api_port, 8090)

    @mock.patch("src.main.config.load_dotenv")
    def test_environment_overrides(self, _load_dotenv) -> None:
        env = {
            "SUBREDDITS_DB_PATH": "/tmp/x.db",
            "REDDIT_HOST": "old.reddit.com",
            "REQUEST_TIMEOUT": "2.5",
            "DEFAULT_SUBREDDITS": " aww , pics ,,",
            "API_PORT": "9000",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            settings = Settings.from_env()
        self.assertEqual(settings.db_path, "/tmp/x.db")
        self.assertEqual(settings.reddit_host, "old.reddit.com")
        self.assertEqual(settings.request_timeout, 2.5)
        self.assertEqual(settings.default_subreddits, ["aww", "pics"])
        self.assertEqual(settings.api_port, 9000)

    @mock.patch("src.main.config.load_dotenv")
    def test_bad_number(self, _load_dotenv) -> None:
        with mock.patch.dict(os.environ, {"API_PORT": "eighty"}, clear=True):
            with self.assertRaises(ValueError):
                Settings.from_env()
