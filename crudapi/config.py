"""Configuration for the demo APIs."""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from crudapi.utils.logging_utils import get_logger

logger = get_logger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent
CONFIG_PATH = PROJECT_ROOT / "config" / "api.yml"

# ${VAR} or ${VAR:-default}
_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


def resolve_env(value: Any) -> Any:
    """Replace ${VAR} / ${VAR:-default} placeholders in strings, recursively."""
    if isinstance(value, dict):
        return {key: resolve_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return [resolve_env(item) for item in value]
    if not isinstance(value, str):
        return value

    def _substitute(match):
        name, default = match.group(1), match.group(2)
        return os.environ.get(name, default if default is not None else "")

    return _ENV_PATTERN.sub(_substitute, value)


def as_bool(value: Any, default: bool) -> bool:
    """Read a YAML or environment value as a boolean ('false', '0', 'no' are False)."""
    if value is None or value == "":
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return bool(value)


@dataclass
class RateLimitConfig:
    """Fixed-window rate limiting per client IP."""

    enabled: bool = True
    max_requests: int = 100
    window_seconds: int = 15 * 60
    message: str = "Too many requests from this IP, try again in 15 minutes."


@dataclass
class DatabaseConfig:
    """Connection settings for the SQL-backed demo."""

    url: str = ""
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = ""
    name: str = "bd_tasks"

    @property
    def sqlalchemy_url(self) -> str:
        """Explicit URL if configured, otherwise a MySQL (PyMySQL) URL."""
        if self.url:
            return self.url
        credentials = self.user
        if self.password:
            credentials = f"{self.user}:{self.password}"
        return f"mysql+pymysql://{credentials}@{self.host}:{self.port}/{self.name}"


@dataclass
class ServerConfig:
    """Top-level settings for a demo app."""

    host: str = "0.0.0.0"
    port: int = 3333
    environment: str = "development"
    version: str = "1.0.0"
    cors_origins: List[str] = field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"]
    )
    cors_allow_credentials: bool = True
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ServerConfig":
        """Build a config from the (already resolved) YAML mapping."""
        server = raw.get("server") or {}
        cors = raw.get("cors") or {}
        rate_limit = raw.get("rate_limit") or {}
        database = raw.get("database") or {}

        defaults = cls()
        return cls(
            host=str(server.get("host") or defaults.host),
            port=int(server.get("port") or defaults.port),
            environment=str(server.get("environment") or defaults.environment),
            version=str(server.get("version") or defaults.version),
            cors_origins=list(cors.get("origins") or defaults.cors_origins),
            cors_allow_credentials=as_bool(
                cors.get("allow_credentials"), defaults.cors_allow_credentials
            ),
            rate_limit=RateLimitConfig(
                enabled=as_bool(rate_limit.get("enabled"), True),
                max_requests=int(rate_limit.get("max_requests", 100)),
                window_seconds=int(rate_limit.get("window_seconds", 15 * 60)),
                message=str(rate_limit.get("message") or RateLimitConfig.message),
            ),
            database=DatabaseConfig(
                url=str(database.get("url") or ""),
                host=str(database.get("host") or "localhost"),
                port=int(database.get("port") or 3306),
                user=str(database.get("user") or "root"),
                password=str(database.get("password") or ""),
                name=str(database.get("name") or "bd_tasks"),
            ),
        )


def load_config(path: Optional[Path] = None) -> ServerConfig:
    """
    Load configuration from the YAML config file.

    The path is taken from the argument, then CRUDAPI_CONFIG, then
    ``config/api.yml``. A missing file yields the built-in defaults.

    Args:
        path: Optional explicit config file path

    Returns:
        ServerConfig with environment placeholders resolved
    """
    load_dotenv()

    if path is None:
        path = Path(os.environ.get("CRUDAPI_CONFIG", CONFIG_PATH))

    if not Path(path).exists():
        logger.warning(f"Config file {path} not found, using defaults")
        return ServerConfig()

    try:
        with open(path, "r") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        logger.error(f"Error loading configuration from {path}: {e}")
        raise

    logger.debug(f"Loaded configuration from {path}")
    return ServerConfig.from_dict(resolve_env(raw))
