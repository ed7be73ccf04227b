from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import streamlit as st

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "settings.json"
DB_FILE_NAME = "tracker.db"
ENV_DATA_DIR = "SHOP_TRACKER_DATA_DIR"
ENV_ALLOW_NEGATIVE_STOCK = "SHOP_TRACKER_ALLOW_NEGATIVE_STOCK"
ENV_LOG_LEVEL = "SHOP_TRACKER_LOG_LEVEL"
SESSION_DATA_DIR_KEY = "shop_tracker_data_dir"


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    db_path: Path
    currency: str = "PHP"
    # Overselling tolerance: when True, sales may take stock below zero.
    allow_negative_stock: bool = True
    # Product list warning vs. Restock page listing
    low_stock_threshold: int = 3
    restock_threshold: int = 5
    log_level: str = "INFO"

    @property
    def log_dir(self) -> Path:
        return self.data_dir / "logs"


def _default_data_dir() -> Path:
    # Not a hard-coded absolute path: uses the user's home directory.
    return Path.home() / ".shop_tracker"


def _load_persisted_settings(data_dir: Path) -> dict:
    cfg = data_dir / CONFIG_FILE_NAME
    if cfg.exists():
        try:
            return json.loads(cfg.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable %s: %s", cfg, e)
            return {}
    return {}


def _env_bool(name: str) -> Optional[bool]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def load_settings(data_dir: Optional[str | Path] = None) -> Settings:
    # Priority order for the data directory:
    # 1) Explicit argument (session state when called from get_settings)
    # 2) Environment variable
    # 3) Persisted settings in default folder
    # 4) Default folder
    if data_dir:
        resolved = Path(data_dir).expanduser().resolve()
    elif os.getenv(ENV_DATA_DIR):
        resolved = Path(os.getenv(ENV_DATA_DIR, "")).expanduser().resolve()
    else:
        default_dir = _default_data_dir()
        persisted = _load_persisted_settings(default_dir)
        resolved = Path(persisted.get("data_dir", default_dir)).expanduser().resolve()

    resolved.mkdir(parents=True, exist_ok=True)
    persisted = _load_persisted_settings(resolved)

    allow_negative = _env_bool(ENV_ALLOW_NEGATIVE_STOCK)
    if allow_negative is None:
        allow_negative = bool(persisted.get("allow_negative_stock", True))

    return Settings(
        data_dir=resolved,
        db_path=resolved / DB_FILE_NAME,
        currency=str(persisted.get("currency", "PHP")),
        allow_negative_stock=allow_negative,
        low_stock_threshold=int(persisted.get("low_stock_threshold", 3)),
        restock_threshold=int(persisted.get("restock_threshold", 5)),
        log_level=str(os.getenv(ENV_LOG_LEVEL) or persisted.get("log_level", "INFO")).upper(),
    )


def persist_data_dir(data_dir_str: str) -> None:
    data_dir = Path(data_dir_str).expanduser().resolve()
    data_dir.mkdir(parents=True, exist_ok=True)

    cfg = data_dir / CONFIG_FILE_NAME
    payload = _load_persisted_settings(data_dir)
    payload["data_dir"] = str(data_dir)
    cfg.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    # The default folder remembers where the data lives
    default_dir = _default_data_dir()
    if default_dir != data_dir:
        default_dir.mkdir(parents=True, exist_ok=True)
        pointer = _load_persisted_settings(default_dir)
        pointer["data_dir"] = str(data_dir)
        (default_dir / CONFIG_FILE_NAME).write_text(json.dumps(pointer, indent=2), encoding="utf-8")

    # Update session for immediate effect
    st.session_state[SESSION_DATA_DIR_KEY] = str(data_dir)


@st.cache_resource
def get_settings() -> Settings:
    return load_settings(st.session_state.get(SESSION_DATA_DIR_KEY))
