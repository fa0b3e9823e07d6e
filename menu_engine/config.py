from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

from .data_models import DEFAULT_MENU_SIZE
from .registries import CONTEXT_SCOPES, LEGACY_SCOPES

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/engine.json")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class EngineConfig:
    # Seconds between scheduler ticks; refresh intervals are counted in ticks
    tick_seconds: float = 0.05
    menus_dir: str = "menus"
    default_size: int = DEFAULT_MENU_SIZE
    log_level: str = "INFO"
    legacy_handler_scopes: List[str] = field(default_factory=lambda: list(LEGACY_SCOPES))
    context_handler_scopes: List[str] = field(default_factory=lambda: list(CONTEXT_SCOPES))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("[EngineConfig] Ignoring unknown keys: %s", ", ".join(unknown))
        return cls(**{key: value for key, value in data.items() if key in known})

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "EngineConfig":
        config_path = Path(path or DEFAULT_CONFIG_PATH)
        try:
            with open(config_path, "r") as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.info("[EngineConfig] Config file not found at '%s'. Using safe defaults.", config_path)
            return cls()
        except Exception as e:
            logger.warning("[EngineConfig] Failed to load config '%s': %s. Using safe defaults.", config_path, e)
            return cls()
        if not isinstance(data, dict):
            logger.warning("[EngineConfig] Config '%s' is not a JSON object. Using safe defaults.", config_path)
            return cls()
        return cls.from_dict(data)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)
