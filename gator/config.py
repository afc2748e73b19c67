from pathlib import Path

from loguru import logger
from pydantic import BaseModel, ValidationError

from .constants import CONFIG_PATH
from .errors import ConfigError


class Config(BaseModel):
    """Settings persisted between invocations in a JSON file."""

    db_url: str | None = None
    current_user_name: str | None = None

    def set_user(self, name: str, path: Path | None = None) -> None:
        self.current_user_name = name
        write_config(self, path)


def read_config(path: Path | None = None) -> Config:
    """Read the config file, or return an empty config if there is none yet.

    Raises:
        ConfigError: the file exists but cannot be read or parsed.
    """
    path = path or CONFIG_PATH
    if not path.exists():
        logger.debug(f"No config file at {path}, using defaults")
        return Config()
    try:
        return Config.model_validate_json(path.read_text())
    except (OSError, ValidationError) as e:
        raise ConfigError(f"error reading config {path}: {e}") from e


def write_config(config: Config, path: Path | None = None) -> None:
    path = path or CONFIG_PATH
    try:
        path.write_text(config.model_dump_json(indent=2))
    except OSError as e:
        raise ConfigError(f"error writing config {path}: {e}") from e
    logger.debug(f"Wrote config to {path}")
