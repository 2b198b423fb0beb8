"""
Configuration management with schema validation.
Single source of truth for portal settings.

Settings are read from an optional YAML file (``data/settings.yaml`` or the
path in ``PORTAL_SETTINGS_FILE``), then overridden by environment variables
(a ``.env`` file is loaded first).
"""

import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigError

# Load environment variables
load_dotenv()

DATA_DIR = Path("data")
SETTINGS_FILE = DATA_DIR / "settings.yaml"
DEFAULT_DATABASE_URL = f"sqlite:///{DATA_DIR / 'users.db'}"


class AppSettings(BaseModel):
    name: str = "User Portal"
    version: str = "1.0.0"
    environment: str = "development"


class ServerSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 3000


class DatabaseSettings(BaseModel):
    url: str = DEFAULT_DATABASE_URL
    echo: bool = False


class AdminSeedSettings(BaseModel):
    """Seed admin identity, created once at startup if missing"""
    username: Optional[str] = None
    password: Optional[str] = None
    email: Optional[str] = None

    def is_complete(self) -> bool:
        return bool(self.username and self.password and self.email)


class AuthSettings(BaseModel):
    password_scheme: Literal["plain", "bcrypt"] = "plain"
    cookie_name: str = "sessionId"


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: Literal["json", "console"] = "console"
    file_path: Optional[str] = None
    max_bytes: int = 10485760
    backup_count: int = 5


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    admin: AdminSeedSettings = Field(default_factory=AdminSeedSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @property
    def is_production(self) -> bool:
        return self.app.environment.strip().lower() == "production"


def _substitute_env_vars(value: Any) -> Any:
    """Recursively substitute ``${VAR}`` and ``${VAR:default}`` values"""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            var_expr = value[2:-1]
            if ":" in var_expr:
                var_name, default = var_expr.split(":", 1)
                return os.getenv(var_name.strip(), default.strip())
            return os.getenv(var_expr, value)
    elif isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_substitute_env_vars(item) for item in value]
    return value


def _database_url_from_env() -> Optional[str]:
    """DATABASE_URL wins; otherwise compose a postgres URL from DB_* parts"""
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    host = os.getenv("DB_HOST")
    if not host:
        return None
    user = os.getenv("DB_USER", "")
    password = os.getenv("DB_PASSWORD", "")
    port = os.getenv("DB_PORT", "5432")
    name = os.getenv("DB_NAME", "")
    credentials = f"{user}:{password}@" if user else ""
    return f"postgresql+psycopg2://{credentials}{host}:{port}/{name}"


def _env_overrides() -> Dict[str, Dict[str, Any]]:
    env_map = {
        "app": {"environment": "ENVIRONMENT"},
        "server": {"host": "HOST", "port": "PORT"},
        "admin": {
            "username": "ADMIN_USERNAME",
            "password": "ADMIN_PASSWORD",
            "email": "ADMIN_EMAIL",
        },
        "auth": {"password_scheme": "PASSWORD_SCHEME"},
        "logging": {
            "level": "LOG_LEVEL",
            "format": "LOG_FORMAT",
            "file_path": "LOG_FILE",
        },
    }
    overrides: Dict[str, Dict[str, Any]] = {}
    for section, fields in env_map.items():
        for field_name, var_name in fields.items():
            value = os.getenv(var_name)
            if value not in (None, ""):
                overrides.setdefault(section, {})[field_name] = value
    database_url = _database_url_from_env()
    if database_url:
        overrides.setdefault("database", {})["url"] = database_url
    return overrides


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load and validate settings from YAML (optional) plus environment"""
    settings_path = Path(
        path or os.getenv("PORTAL_SETTINGS_FILE") or SETTINGS_FILE
    )
    raw_data: Dict[str, Any] = {}
    if settings_path.exists():
        try:
            with open(settings_path, "r", encoding="utf-8") as f:
                raw_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to read settings from {settings_path}: {e}")
        if not isinstance(raw_data, dict):
            raise ConfigError(f"Settings file {settings_path} must contain a mapping")

    data = _substitute_env_vars(raw_data)
    for section, values in _env_overrides().items():
        merged = dict(data.get(section) or {})
        merged.update(values)
        data[section] = merged

    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}")
