# =============================================================================
# GOVERNANCE PROPOSAL WATCHER - CONFIGURATION
# =============================================================================
#
# Configuration is loaded ONCE at startup from a YAML file (default:
# config.yaml). Secrets may also come from the environment or a .env file
# next to the config file:
#
#   TELEGRAM_BOT_TOKEN  -> telegram.bot_token
#   TELEGRAM_CHAT_ID    -> telegram.chat_id
#   REDIS_PASSWORD      -> redis.password
#
# Any problem here raises ConfigError, which is fatal.
#
# =============================================================================

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from dotenv import load_dotenv

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.yaml")

STORAGE_BACKENDS = ("redis", "file")

# Go-style durations: "300ms", "1.5h", "1h30m", "-2s"
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")
_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(text: str) -> float:
    """
    Parse a duration string into seconds.

    Accepts the Go duration syntax used by the original config files,
    e.g. "5m", "30s", "1h30m", "250ms". A bare "0" is zero.

    Args:
        text: Duration string

    Returns:
        Duration in seconds

    Raises:
        ConfigError: If the string is not a valid duration
    """
    if not isinstance(text, str):
        raise ConfigError(f"Invalid duration {text!r}: expected a string like '5m'")

    raw = text.strip()
    if not raw:
        raise ConfigError("Invalid duration: empty string")

    sign = 1.0
    if raw[0] in "+-":
        sign = -1.0 if raw[0] == "-" else 1.0
        raw = raw[1:]

    if raw == "0":
        return 0.0

    total = 0.0
    pos = 0
    while pos < len(raw):
        match = _DURATION_PART.match(raw, pos)
        if match is None:
            raise ConfigError(f"Invalid duration {text!r}")
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()

    if pos == 0:
        raise ConfigError(f"Invalid duration {text!r}")

    return sign * total


@dataclass
class RedisSettings:
    """Connection settings for the Redis proposal store."""
    addr: str = "localhost:6379"
    password: str = ""
    db_index: int = 0

    @property
    def host(self) -> str:
        host, _, _ = self.addr.rpartition(":")
        return host or self.addr

    @property
    def port(self) -> int:
        _, sep, port = self.addr.rpartition(":")
        if not sep:
            return 6379
        try:
            return int(port)
        except ValueError:
            raise ConfigError(f"Invalid redis.addr {self.addr!r}: port must be a number")


@dataclass
class StorageSettings:
    """Which store backend to use."""
    backend: str = "redis"
    path: str = "data/proposals.json"


@dataclass
class TelegramSettings:
    """Telegram bot credentials and destination chat."""
    bot_token: str
    chat_id: Union[int, str]


@dataclass
class LoggingSettings:
    level: str = "INFO"
    file: bool = True
    dir: str = "logs"


@dataclass
class AppConfig:
    """Complete watcher configuration."""
    api_url: str
    explorer_base_url: str
    telegram: TelegramSettings
    poll_interval: str
    redis: RedisSettings = field(default_factory=RedisSettings)
    storage: StorageSettings = field(default_factory=StorageSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    api_timeout: float = 30.0

    @property
    def poll_interval_seconds(self) -> float:
        return parse_duration(self.poll_interval)


def _get_project_root() -> Path:
    """Get the project root directory."""
    # This file is at shared/config.py
    return Path(__file__).resolve().parent.parent


def resolve_project_path(path: Union[str, Path]) -> Path:
    """Resolve a configured path; relative paths are taken from the project root."""
    path = Path(path)
    if not path.is_absolute():
        path = _get_project_root() / path
    return path


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    """Return a top-level mapping section (empty if absent)."""
    value = data.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"Config section '{name}' must be a mapping")
    return value


def _require(section: Dict[str, Any], key: str, path: str) -> Any:
    value = section.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ConfigError(f"Missing required config value: {path}")
    return value


def _parse_chat_id(value: Any) -> Union[int, str]:
    """Numeric chat IDs become ints, channel names (@name) stay strings."""
    if isinstance(value, bool):
        raise ConfigError(f"Invalid telegram.chat_id: {value!r}")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        return text


def build_config(data: Dict[str, Any]) -> AppConfig:
    """
    Build and validate an AppConfig from a parsed YAML document.

    Environment overrides are applied here so tests can use patch.dict.

    Args:
        data: Parsed YAML mapping

    Returns:
        Validated AppConfig

    Raises:
        ConfigError: If required values are missing or invalid
    """
    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a mapping at the top level")

    api = _section(data, "api")
    explorer = _section(data, "explorer")
    redis_cfg = _section(data, "redis")
    storage_cfg = _section(data, "storage")
    telegram_cfg = dict(_section(data, "telegram"))
    ticker = _section(data, "ticker")
    logging_cfg = _section(data, "logging")

    # Environment overrides (secrets)
    env_token = os.getenv("TELEGRAM_BOT_TOKEN", "").strip()
    if env_token:
        telegram_cfg["bot_token"] = env_token
    env_chat = os.getenv("TELEGRAM_CHAT_ID", "").strip()
    if env_chat:
        telegram_cfg["chat_id"] = env_chat
    env_password = os.getenv("REDIS_PASSWORD", "").strip()
    redis_password = env_password or redis_cfg.get("password") or ""

    storage = StorageSettings(
        backend=str(storage_cfg.get("backend", "redis")).strip().lower(),
        path=str(resolve_project_path(storage_cfg.get("path") or StorageSettings.path)),
    )
    if storage.backend not in STORAGE_BACKENDS:
        raise ConfigError(
            f"Unknown storage.backend {storage.backend!r} "
            f"(expected one of: {', '.join(STORAGE_BACKENDS)})"
        )

    if storage.backend == "redis":
        addr = str(_require(redis_cfg, "addr", "redis.addr"))
    else:
        addr = str(redis_cfg.get("addr") or RedisSettings.addr)

    try:
        db_index = int(redis_cfg.get("db_index", 0) or 0)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid redis.db_index: {redis_cfg.get('db_index')!r}")

    try:
        api_timeout = float(api.get("timeout_seconds", 30.0))
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid api.timeout_seconds: {api.get('timeout_seconds')!r}")
    if api_timeout <= 0:
        raise ConfigError("api.timeout_seconds must be positive")

    config = AppConfig(
        api_url=str(_require(api, "url", "api.url")).strip(),
        explorer_base_url=str(_require(explorer, "url", "explorer.url")).strip(),
        telegram=TelegramSettings(
            bot_token=str(_require(telegram_cfg, "bot_token", "telegram.bot_token")).strip(),
            chat_id=_parse_chat_id(_require(telegram_cfg, "chat_id", "telegram.chat_id")),
        ),
        poll_interval=str(_require(ticker, "interval", "ticker.interval")).strip(),
        redis=RedisSettings(addr=addr, password=str(redis_password), db_index=db_index),
        storage=storage,
        logging=LoggingSettings(
            level=str(logging_cfg.get("level", "INFO")).upper(),
            file=bool(logging_cfg.get("file", True)),
            dir=str(logging_cfg.get("dir", "logs")),
        ),
        api_timeout=api_timeout,
    )

    # Validate derived values early so startup fails fast
    if config.poll_interval_seconds <= 0:
        raise ConfigError(f"ticker.interval must be positive, got {config.poll_interval!r}")
    if storage.backend == "redis" and not 0 < config.redis.port < 65536:
        raise ConfigError(f"Invalid redis.addr {config.redis.addr!r}: port out of range")

    return config


def load_config(path: Optional[Union[str, Path]] = None) -> AppConfig:
    """
    Load configuration from a YAML file.

    A .env file next to the config file is loaded first; variables that
    are already set in the environment win.

    Args:
        path: Path to the YAML file. Defaults to config.yaml

    Returns:
        Validated AppConfig

    Raises:
        ConfigError: If the file is missing, unreadable or invalid
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH

    env_file = config_path.parent / ".env"
    if env_file.exists():
        load_dotenv(env_file, override=False)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {config_path}")
    except OSError as e:
        raise ConfigError(f"Could not read config file {config_path}: {e}")
    except yaml.YAMLError as e:
        raise ConfigError(f"In file {str(config_path)!r}: {e}")

    if data is None:
        raise ConfigError(f"Config file is empty: {config_path}")

    config = build_config(data)
    logger.info(f"Loaded config from {config_path}")
    return config
