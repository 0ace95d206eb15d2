"""Tests for src/config.py — TamanConfig, TOML loading, CLI overrides."""

from pathlib import Path

import pytest
from pydantic import ValidationError
from taman.config import TamanConfig, load_config, merge_cli_overrides


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Remove env vars that _apply_env_vars reads so tests see TOML values."""
    for key in ("TAMAN_STORAGE_DIR", "TAMAN_TIMEZONE", "TAMAN_MODEL", "TAMAN_TRASH_DAYS"):
        monkeypatch.delenv(key, raising=False)


class TestTamanConfigDefaults:
    def test_default_storage(self):
        cfg = TamanConfig()
        assert cfg.storage.directory == "./.taman"
        assert cfg.storage.posts_key == "lumina_posts"
        assert cfg.storage.seed_examples is True

    def test_default_retention(self):
        cfg = TamanConfig()
        assert cfg.retention.trash_days == 30
        assert cfg.retention.sweep_on_save is True

    def test_default_drafts(self):
        cfg = TamanConfig()
        assert cfg.drafts.max_snapshots == 3
        assert cfg.drafts.autosave_delay_ms == 2000
        assert cfg.drafts.new_post_key == "new_temp"

    def test_default_stats(self):
        cfg = TamanConfig()
        assert cfg.stats.timezone == "Asia/Jakarta"
        assert cfg.stats.tzinfo.key == "Asia/Jakarta"

    def test_unknown_timezone_rejected(self):
        with pytest.raises(ValidationError):
            TamanConfig.model_validate({"stats": {"timezone": "Mars/Olympus"}})

    def test_trash_days_must_be_positive(self):
        with pytest.raises(ValidationError):
            TamanConfig.model_validate({"retention": {"trash_days": 0}})


class TestLoadConfig:
    def test_explicit_path(self, tmp_path: Path):
        toml = tmp_path / "custom.toml"
        toml.write_text(
            '[storage]\ndirectory = "/data/taman"\n\n'
            "[retention]\ntrash_days = 7\n\n"
            '[stats]\ntimezone = "UTC"\n'
        )
        cfg = load_config(toml)
        assert cfg.storage.directory == "/data/taman"
        assert cfg.retention.trash_days == 7
        assert cfg.stats.timezone == "UTC"
        assert cfg.drafts.max_snapshots == 3

    def test_missing_explicit_path_uses_defaults(self, tmp_path: Path):
        cfg = load_config(tmp_path / "nope.toml")
        assert cfg == TamanConfig()

    def test_finds_file_in_cwd(self, tmp_path: Path, monkeypatch):
        (tmp_path / ".taman.toml").write_text("[drafts]\nmax_snapshots = 5\n")
        monkeypatch.chdir(tmp_path)
        assert load_config().drafts.max_snapshots == 5

    def test_invalid_toml_falls_back(self, tmp_path: Path):
        toml = tmp_path / "bad.toml"
        toml.write_text("[storage\nbroken")
        assert load_config(toml) == TamanConfig()


class TestEnvVars:
    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch):
        toml = tmp_path / "c.toml"
        toml.write_text('[storage]\ndirectory = "/from/toml"\n')
        monkeypatch.setenv("TAMAN_STORAGE_DIR", "/from/env")
        monkeypatch.setenv("TAMAN_MODEL", "sonnet")
        cfg = load_config(toml)
        assert cfg.storage.directory == "/from/env"
        assert cfg.assist.model == "sonnet"

    def test_trash_days(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("TAMAN_TRASH_DAYS", "14")
        assert load_config(tmp_path / "none.toml").retention.trash_days == 14

    def test_bad_trash_days_ignored(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("TAMAN_TRASH_DAYS", "sebulan")
        assert load_config(tmp_path / "none.toml").retention.trash_days == 30


class TestMergeCliOverrides:
    def test_overrides_set_values(self, tmp_path: Path):
        cfg = merge_cli_overrides(TamanConfig(), storage_dir=tmp_path, trash_days=3)
        assert cfg.storage.directory == str(tmp_path)
        assert cfg.storage_path == tmp_path
        assert cfg.retention.trash_days == 3

    def test_none_values_ignored(self):
        cfg = merge_cli_overrides(TamanConfig(), storage_dir=None, model=None)
        assert cfg == TamanConfig()

    def test_unknown_keys_ignored(self):
        assert merge_cli_overrides(TamanConfig(), verbose=True) == TamanConfig()
