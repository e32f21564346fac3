"""Configuration management for bear-backup."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

DEFAULT_CONFIG_DIR = Path("~/.config/bear-backup").expanduser()
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.toml"
CONFIG_SECTION = "bearbackup"

DEFAULT_BEAR_DB = Path(
    "~/Library/Group Containers/9K33E3U3T4.net.shinyfrog.bear/"
    "Application Data/database.sqlite"
).expanduser()
DEFAULT_LOCAL_FILES_PATH = DEFAULT_BEAR_DB.parent / "Local Files"


class ConfigError(RuntimeError):
    """Base error for configuration related issues."""


class MissingConfigError(ConfigError):
    """Raised when an explicitly requested configuration file cannot be found."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Configuration file not found at {path}")
        self.path = path


class InvalidConfigError(ConfigError):
    """Raised when the configuration file holds malformed values."""


@dataclass(slots=True)
class BearBackupConfig:
    """In-memory representation of the bear-backup configuration file."""

    database_path: Path = DEFAULT_BEAR_DB
    local_files_path: Path | None = DEFAULT_LOCAL_FILES_PATH
    use_tags_as_directories: bool = False
    max_concurrency: int | None = None
    source_path: Path | None = None


def _optional_path(section: dict[str, Any], key: str, base_dir: Path) -> Path | None:
    raw = section.get(key)
    if raw is None:
        return None
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidConfigError(f"'{key}' must be a non-empty string when provided")
    path = Path(raw.strip()).expanduser()
    return path if path.is_absolute() else (base_dir / path).resolve()


def _optional_bool(section: dict[str, Any], key: str, default: bool) -> bool:
    raw = section.get(key, default)
    if not isinstance(raw, bool):
        raise InvalidConfigError(f"'{key}' must be a boolean when provided")
    return raw


def load_config(path: Path | None = None) -> BearBackupConfig:
    """Load configuration from ``path`` or the default location.

    Parameters
    ----------
    path:
        Optional location of the configuration file. When ``None`` the default
        path (``~/.config/bear-backup/config.toml``) is used, and a missing
        file simply yields the built-in defaults.

    Raises
    ------
    MissingConfigError
        If ``path`` was given explicitly and does not exist.
    InvalidConfigError
        If a setting has the wrong type.
    """

    config_path = (path or DEFAULT_CONFIG_PATH).expanduser()
    if not config_path.exists():
        if path is not None:
            raise MissingConfigError(config_path)
        return BearBackupConfig()

    with config_path.open("rb") as fh:
        try:
            raw = tomllib.load(fh)
        except tomllib.TOMLDecodeError as exc:
            raise InvalidConfigError(f"Invalid TOML in {config_path}: {exc}") from exc

    section = raw.get(CONFIG_SECTION, {})
    if not isinstance(section, dict):
        raise InvalidConfigError(f"'{CONFIG_SECTION}' must be a table")

    # Relative paths are resolved against the directory holding the file.
    base_dir = config_path.parent

    database_path = _optional_path(section, "database_path", base_dir) or DEFAULT_BEAR_DB

    local_files_path = (
        _optional_path(section, "local_files_path", base_dir) or DEFAULT_LOCAL_FILES_PATH
    )
    if not _optional_bool(section, "copy_attachments", True):
        local_files_path = None

    max_concurrency = section.get("max_concurrency")
    if max_concurrency is not None and (
        isinstance(max_concurrency, bool)
        or not isinstance(max_concurrency, int)
        or max_concurrency < 1
    ):
        raise InvalidConfigError("'max_concurrency' must be a positive integer")

    return BearBackupConfig(
        database_path=database_path,
        local_files_path=local_files_path,
        use_tags_as_directories=_optional_bool(
            section, "use_tags_as_directories", False
        ),
        max_concurrency=max_concurrency,
        source_path=config_path,
    )


def bootstrap_config_file(path: Path) -> bool:
    """Create a default config file if missing.

    Returns True when the file was created, False if it already existed.
    """

    if path.exists():
        return False

    path.parent.mkdir(parents=True, exist_ok=True)
    default_content = (
        f"[{CONFIG_SECTION}]\n"
        f'# database_path = "{DEFAULT_BEAR_DB}"\n'
        f'# local_files_path = "{DEFAULT_LOCAL_FILES_PATH}"\n'
        "copy_attachments = true\n"
        "use_tags_as_directories = false\n"
        "# max_concurrency = 64\n"
    )
    path.write_text(default_content, encoding="utf-8")
    return True
