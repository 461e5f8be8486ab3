import os
from pathlib import Path
from typing import Optional

CONFIG_DIR = Path(os.environ.get("NODERESOLVE_HOME", Path.home() / ".noderesolve"))
CONFIG_FILE = CONFIG_DIR / "config"
CACHE_DIR = CONFIG_DIR / "cache"

DEFAULT_INDEX_BASE = "https://nodejs.org/dist"
INDEX_URL_KEY = "NODE_INDEX_URL"


def index_url(base: str) -> str:
    """the url of index.json under a distribution server base url."""
    return f"{base.rstrip('/')}/index.json"


def _read_config(config_file: Path) -> dict:
    config = {}
    if not config_file.exists():
        return config

    try:
        with open(config_file, "r") as f:
            for line in f:
                line = line.strip()
                if "=" in line:
                    key, value = line.split("=", 1)
                    config[key] = value
    except (IOError, PermissionError, OSError):
        # if we can't read the file, treat as not configured
        return {}
    return config


def get_index_base(config_file: Path = CONFIG_FILE) -> str:
    """get the configured distribution server, falling back to the public node server."""
    return _read_config(config_file).get(INDEX_URL_KEY) or DEFAULT_INDEX_BASE


def get_configured_base(config_file: Path = CONFIG_FILE) -> Optional[str]:
    """get the distribution server override, if one is set."""
    return _read_config(config_file).get(INDEX_URL_KEY) or None


def set_index_base(url: str, config_file: Path = CONFIG_FILE):
    """set the distribution server in config file, preserving other config values."""
    config_file.parent.mkdir(parents=True, exist_ok=True)

    config = _read_config(config_file)
    config[INDEX_URL_KEY] = url

    try:
        with open(config_file, "w") as f:
            for key, value in config.items():
                f.write(f"{key}={value}\n")
    except (IOError, PermissionError, OSError) as e:
        raise RuntimeError(f"failed to write config file: {e}") from e
