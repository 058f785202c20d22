"""Configuration loader that keeps all runtime constants centralized."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_DIR = Path(__file__).resolve().parent
CONFIG_PATH = CONFIG_DIR / "app_config.yaml"
CONFIG_ENV = "SCORES_CONFIG"


@dataclass(frozen=True)
class AppConfig:
    """Strongly-typed wrapper over the raw YAML document."""

    raw: Dict[str, Any]

    @property
    def version(self) -> str:
        return str(self.raw.get("version", "v1"))

    @property
    def server(self) -> Dict[str, Any]:
        return self.raw.get("server") or {}

    @property
    def storage(self) -> Dict[str, Any]:
        return self.raw.get("storage") or {}

    @property
    def database_backend(self) -> str:
        return str(self.storage.get("backend", "sqlite")).lower()

    @property
    def seed_file(self) -> Optional[Path]:
        value = self.storage.get("seed_file")
        if not value:
            return None
        path = Path(value)
        return path if path.is_absolute() else CONFIG_DIR / path

    @property
    def max_rating(self) -> int:
        return int((self.raw.get("scoring") or {}).get("max_rating", 5))

    @property
    def log_level(self) -> str:
        return str((self.raw.get("logging") or {}).get("level", "INFO")).upper()


@lru_cache(maxsize=1)
def get_settings(path: Path | None = None) -> AppConfig:
    """Load configuration once per process."""

    config_path = path or Path(os.environ.get(CONFIG_ENV) or CONFIG_PATH)
    data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):  # pragma: no cover - invalid file guard
        raise ValueError("Configuration file must define a mapping at the top level.")
    return AppConfig(raw=data)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
