"""
Configuration loader.

Reads config.yaml, then applies environment overrides. Credentials are never
stored in the file: trello.key_env / trello.token_env name the environment
variables that hold them.

    server:
      base_url: https://sync.example.com
      host: 0.0.0.0
      port: 3000
    trello:
      key_env: TRELLO_KEY
      token_env: TRELLO_TOKEN
      boards: [5f1c0a..., 60aa3b...]
      field: Status
      timeout: 10
      webhook_description: trello-notifications
    sync:
      max_pending: 1000
    logging:
      level: INFO
"""
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Dict, Any

import yaml

from .client import DEFAULT_TIMEOUT
from .suppress import DEFAULT_MAX_PENDING
from .webhooks import WEBHOOK_DESCRIPTION

CONFIG_PATH = Path("config.yaml")


class ConfigError(Exception):
    """Raised when configuration is invalid or incomplete."""
    pass


def _split(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [str(v).strip() for v in value if str(v).strip()]


@dataclass
class SyncConfig:
    """Runtime configuration for the sync server."""

    base_url: str = ""
    host: str = "127.0.0.1"
    port: int = 3000

    key: str = ""
    token: str = ""
    boards: List[str] = field(default_factory=list)
    field_name: str = ""
    timeout: float = DEFAULT_TIMEOUT
    webhook_description: str = WEBHOOK_DESCRIPTION

    max_pending: int = DEFAULT_MAX_PENDING
    log_level: str = "INFO"

    @property
    def callback_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/webhook"

    @classmethod
    def from_dict(cls, raw: Dict[str, Any], environ: Optional[Dict[str, str]] = None) -> "SyncConfig":
        env = os.environ if environ is None else environ
        server = raw.get("server") or {}
        trello = raw.get("trello") or {}
        sync = raw.get("sync") or {}
        log = raw.get("logging") or {}

        key_env = trello.get("key_env", "TRELLO_KEY")
        token_env = trello.get("token_env", "TRELLO_TOKEN")

        try:
            cfg = cls(
                base_url=env.get("BASE_URL") or server.get("base_url", ""),
                host=env.get("HOST") or server.get("host", "127.0.0.1"),
                port=int(env.get("PORT") or server.get("port", 3000)),
                key=env.get(key_env, ""),
                token=env.get(token_env, ""),
                boards=_split(env.get("TRELLO_BOARDS") or trello.get("boards")),
                field_name=env.get("TRELLO_FIELD") or trello.get("field", ""),
                timeout=float(trello.get("timeout", DEFAULT_TIMEOUT)),
                webhook_description=str(trello.get("webhook_description") or WEBHOOK_DESCRIPTION),
                max_pending=int(sync.get("max_pending", DEFAULT_MAX_PENDING)),
                log_level=(env.get("LOG_LEVEL") or log.get("level", "INFO")).upper(),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration value: {e}") from e

        if not cfg.key:
            raise ConfigError(
                f"Environment variable {key_env} is not set.\n"
                f"Set it:  export {key_env}=your_api_key"
            )
        if not cfg.token:
            raise ConfigError(
                f"Environment variable {token_env} is not set.\n"
                f"Set it:  export {token_env}=your_token"
            )
        cfg.validate()
        return cfg

    def validate(self) -> None:
        if not self.base_url:
            raise ConfigError("server.base_url (or BASE_URL) is required for webhook callbacks")
        if not self.boards:
            raise ConfigError("trello.boards (or TRELLO_BOARDS) must list at least one board id")
        if not self.field_name:
            raise ConfigError("trello.field (or TRELLO_FIELD) must name the status custom field")
        if self.max_pending < 1:
            raise ConfigError(f"sync.max_pending must be positive, got {self.max_pending}")
        if logging.getLevelName(self.log_level) == f"Level {self.log_level}":
            raise ConfigError(f"Unknown logging.level: {self.log_level}")

    @classmethod
    def load(cls, path: Optional[str] = None, environ: Optional[Dict[str, str]] = None) -> "SyncConfig":
        """Load config from YAML (optional) plus environment overrides."""
        cfg_path = Path(path) if path else CONFIG_PATH
        raw: Dict[str, Any] = {}
        if cfg_path.exists():
            try:
                with open(cfg_path) as f:
                    raw = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Cannot parse {cfg_path}: {e}") from e
            if not isinstance(raw, dict):
                raise ConfigError(f"{cfg_path} must contain a mapping")
        elif path:
            raise ConfigError(f"Config file not found: {cfg_path}")
        return cls.from_dict(raw, environ)
