"""
Tests for environment-driven settings.
"""

import os
import pytest
from pathlib import Path

from contentops.config import Settings
from contentops.env import load_env


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ["CONTENTOPS_DB", "CONTENTOPS_LOG_LEVEL", "CONTENTOPS_LOG_DIR", "CONTENTOPS_VERSION_ATTEMPTS"]:
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_env()

        assert settings.db_path == Path("data/content.db")
        assert settings.log_level == "INFO"
        assert settings.log_dir == Path("logs")
        assert settings.version_attempts == 3

    def test_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CONTENTOPS_DB", str(tmp_path / "x.db"))
        monkeypatch.setenv("CONTENTOPS_LOG_LEVEL", "debug")
        monkeypatch.setenv("CONTENTOPS_VERSION_ATTEMPTS", "5")

        settings = Settings.from_env()

        assert settings.db_path == tmp_path / "x.db"
        assert settings.log_level == "DEBUG"
        assert settings.version_attempts == 5

    def test_attempts_at_least_one(self, monkeypatch):
        monkeypatch.setenv("CONTENTOPS_VERSION_ATTEMPTS", "0")
        assert Settings.from_env().version_attempts == 1

    def test_bad_attempts(self, monkeypatch):
        monkeypatch.setenv("CONTENTOPS_VERSION_ATTEMPTS", "many")
        with pytest.raises(SystemExit):
            Settings.from_env()


class TestLoadEnv:

    def test_loads_dotenv_from_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        # Registered so teardown removes whatever load_env sets
        monkeypatch.setenv("CONTENTOPS_DOTENV_SAMPLE", "unset")
        monkeypatch.delenv("CONTENTOPS_DOTENV_SAMPLE")
        (tmp_path / ".env").write_text("CONTENTOPS_DOTENV_SAMPLE=from-dotenv\n")

        load_env()

        assert os.environ["CONTENTOPS_DOTENV_SAMPLE"] == "from-dotenv"

    def test_existing_environment_wins(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("CONTENTOPS_DOTENV_SAMPLE", "from-shell")
        (tmp_path / ".env").write_text("CONTENTOPS_DOTENV_SAMPLE=from-dotenv\n")

        load_env()

        assert os.environ["CONTENTOPS_DOTENV_SAMPLE"] == "from-shell"

    def test_missing_dotenv_is_ignored(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        load_env()
