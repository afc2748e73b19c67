from os import getenv
from pathlib import Path

CONFIG_PATH = Path(getenv("GATOR_CONFIG", "~/.gatorconfig.json")).expanduser()
DATABASE_URL = getenv("DATABASE_URL")
DEBUG = bool(getenv("DEBUG", False))
LOG_LEVEL = getenv("LOG_LEVEL", "WARNING")

USER_AGENT = "gator"
FETCH_TIMEOUT = float(getenv("GATOR_FETCH_TIMEOUT", "30"))
