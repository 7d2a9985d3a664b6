# hfget/core/config.py
from __future__ import annotations
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import AlreadyExistsError, AuthMissingError, SettingsWriteError

logger = logging.getLogger(__name__)

# ---- schema & defaults -------------------------------------------------------
DEFAULT_DOWNLOAD_DIR = "/opt/llms/models"
DEFAULT_SEARCH_LIMIT = 20
DEFAULT_STRATEGY = "organized"
STRATEGIES = ("flat", "organized")
TOKEN_ENV = "HF_TOKEN"

# JSON key <-> attribute
_KEYS = {
    "token": "token",
    "defaultDownloadDir": "default_download_dir",
    "defaultSearchLimit": "default_search_limit",
    "storageStrategy": "storage_strategy",
}


@dataclass
class Settings:
    """Raw settings as stored on disk. None means the key is absent."""

    token: Optional[str] = None
    default_download_dir: Optional[str] = None
    default_search_limit: Optional[int] = None
    storage_strategy: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Settings":
        kwargs = {attr: raw[key] for key, attr in _KEYS.items() if key in raw}
        # older files used "hfToken"
        if "token" not in kwargs and "hfToken" in raw:
            kwargs["token"] = raw["hfToken"]
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for key, attr in _KEYS.items():
            val = getattr(self, attr)
            if val is not None:
                out[key] = val
        return out

    # ---- accessors with defaults ----
    def download_dir(self) -> str:
        return self.default_download_dir or DEFAULT_DOWNLOAD_DIR

    def search_limit(self) -> int:
        limit = self.default_search_limit
        if isinstance(limit, int) and not isinstance(limit, bool) and limit > 0:
            return limit
        return DEFAULT_SEARCH_LIMIT

    def strategy(self) -> str:
        if self.storage_strategy in STRATEGIES:
            return self.storage_strategy
        return DEFAULT_STRATEGY

    def resolve_token(self) -> Optional[str]:
        """File value wins; the environment is consulted only when the file has none."""
        return self.token or os.environ.get(TOKEN_ENV) or None

    def require_token(self) -> str:
        token = self.resolve_token()
        if not token:
            raise AuthMissingError(f"{TOKEN_ENV} not set.")
        return token


# ---- locations ---------------------------------------------------------------
# Override with HFGET_CONFIG=<full path to config.json>
def _xdg_config_home() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))

def config_dir() -> Path:
    return _xdg_config_home() / "hfget"

def config_path() -> Path:
    env_path = os.environ.get("HFGET_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return config_dir() / "config.json"


# ---- load / save -------------------------------------------------------------
def load_cfg() -> Settings:
    p = config_path()
    if not p.exists():
        return Settings()
    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError("top-level value is not an object")
        return Settings.from_dict(raw)
    except (OSError, ValueError, TypeError) as e:
        logger.warning("Failed to load config from %s: %s", p, e)
        return Settings()

def save_cfg(settings: Settings) -> Path:
    p = config_path()
    tmp = p.with_suffix(".tmp")
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        # Atomic-ish write
        tmp.write_text(json.dumps(settings.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(p)
    except OSError as e:
        raise SettingsWriteError(p, e) from e
    logger.debug("Saved config to %s", p)
    return p

def init_cfg() -> Path:
    p = config_path()
    if p.exists():
        raise AlreadyExistsError(f"Config file already exists at {p}")
    return save_cfg(Settings(
        token="",
        default_download_dir=DEFAULT_DOWNLOAD_DIR,
        default_search_limit=DEFAULT_SEARCH_LIMIT,
        storage_strategy=DEFAULT_STRATEGY,
    ))
