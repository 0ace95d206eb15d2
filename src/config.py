"""Unified configuration loaded from .taman.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".taman.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "taman" / "config.toml"


class StorageConfig(BaseModel):
    """[storage] section."""

    directory: str = "./.taman"
    posts_key: str = "lumina_posts"
    messages_key: str = "lumina_messages"
    users_key: str = "lumina_users"
    session_key: str = "lumina_current_user_username"
    seed_examples: bool = True


class RetentionConfig(BaseModel):
    """[retention] section."""

    trash_days: int = Field(default=30, ge=1)
    sweep_on_save: bool = True


class DraftsConfig(BaseModel):
    """[drafts] section."""

    max_snapshots: int = Field(default=3, ge=1)
    autosave_delay_ms: int = Field(default=2000, ge=0)
    new_post_key: str = "new_temp"


class StatsConfig(BaseModel):
    """[stats] section."""

    timezone: str = "Asia/Jakarta"
    words_per_minute: int = Field(default=200, ge=1)

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


class AssistConfig(BaseModel):
    """[assist] section: LLM polishing and summaries."""

    model: str | None = None
    timeout: int = 120


class TamanConfig(BaseModel):
    """Top-level configuration model."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    retention: RetentionConfig = Field(default_factory=RetentionConfig)
    drafts: DraftsConfig = Field(default_factory=DraftsConfig)
    stats: StatsConfig = Field(default_factory=StatsConfig)
    assist: AssistConfig = Field(default_factory=AssistConfig)

    @property
    def storage_path(self) -> Path:
        return Path(self.storage.directory).expanduser()


def load_config(path: str | Path | None = None) -> TamanConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .taman.toml in CWD
    3. ~/.config/taman/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged TamanConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG_PATH.exists():
            data = _load_toml(GLOBAL_CONFIG_PATH)
            logger.info("Loaded config from %s", GLOBAL_CONFIG_PATH)

    config = TamanConfig.model_validate(data) if data else TamanConfig()

    return _apply_env_vars(config)


def merge_cli_overrides(config: TamanConfig, **cli_kwargs: object) -> TamanConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "storage_dir": ("storage", "directory"),
        "trash_days": ("retention", "trash_days"),
        "timezone": ("stats", "timezone"),
        "model": ("assist", "model"),
    }

    for key, value in cli_kwargs.items():
        if value is None or key not in mapping:
            continue
        section, field = mapping[key]
        data[section][field] = str(value) if isinstance(value, Path) else value

    return TamanConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: TamanConfig) -> TamanConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "TAMAN_STORAGE_DIR": ("storage", "directory"),
        "TAMAN_TIMEZONE": ("stats", "timezone"),
        "TAMAN_MODEL": ("assist", "model"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    days_raw = os.environ.get("TAMAN_TRASH_DAYS")
    if days_raw is not None:
        try:
            data["retention"]["trash_days"] = int(days_raw)
        except ValueError:
            logger.warning("Ignoring non-integer TAMAN_TRASH_DAYS=%r", days_raw)

    return TamanConfig.model_validate(data)
