# Kanban board — configuration
# Override settings via kanban.yaml, KANBAN_* environment variables or CLI args.

import logging
import os
import sys
from copy import deepcopy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .store import DEFAULT_SEED

CONFIG_PATH = Path("kanban.yaml")

LOG_FORMAT = "%(asctime)s [kanban] %(levelname)s: %(message)s"

# env var -> (field, coercion)
ENV_OVERRIDES = {
    "KANBAN_HOST": ("host", str),
    "KANBAN_PORT": ("port", int),
    "KANBAN_API_URL": ("api_url", str),
    "KANBAN_LOG_LEVEL": ("log_level", str),
}


class ConfigError(Exception):
    """Raised when the config file or an override is invalid."""
    pass


@dataclass
class Config:
    """Runtime configuration for the kanban server and board client."""

    # Server
    host: str = "127.0.0.1"
    port: int = 3000
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    seed_cards: List[Dict[str, Any]] = field(default_factory=lambda: deepcopy(DEFAULT_SEED))

    # Client (board view)
    api_url: str = "http://127.0.0.1:3000"
    request_timeout: float = 5.0
    max_retries: int = 2

    log_level: str = "INFO"

    def apply_env(self, environ: Optional[Dict[str, str]] = None) -> "Config":
        """Apply KANBAN_* environment overrides in place."""
        environ = os.environ if environ is None else environ
        for var, (name, coerce) in ENV_OVERRIDES.items():
            raw = environ.get(var)
            if raw is None or not raw.strip():
                continue
            try:
                setattr(self, name, coerce(raw.strip()))
            except ValueError:
                raise ConfigError(f"{var} has invalid value {raw!r}") from None
        return self

    @classmethod
    def load(cls, path: Optional[str] = None, environ: Optional[Dict[str, str]] = None) -> "Config":
        """Load config from YAML file, falling back to defaults, then apply env overrides."""
        environ = os.environ if environ is None else environ
        cfg_path = Path(path or environ.get("KANBAN_CONFIG") or CONFIG_PATH)
        if cfg_path.exists():
            try:
                with open(cfg_path, "r") as f:
                    data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Cannot parse {cfg_path}: {e}") from e
            if not isinstance(data, dict):
                raise ConfigError(f"{cfg_path} must contain a mapping")
            cfg = cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})
        else:
            cfg = cls()
        return cfg.apply_env(environ)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
