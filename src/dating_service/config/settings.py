"""
Configuration management for the Dating Service.

Hybrid configuration system using YAML files and environment variables.
Priority: Environment variables > environment-specific YAML > default YAML >
Pydantic defaults
"""

import os
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    """
    Dating Service configuration schema.

    Loads configuration from:
    1. Environment variables (highest priority)
    2. YAML configuration files
    3. Pydantic defaults (lowest priority)

    Database credentials should come from the environment (or a .env
    file), never from YAML.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        frozen=True,
    )

    # Application
    APP_NAME: str = "Dating Service"
    APP_VERSION: str = "0.1.0"
    ENV: str = Field(default="production", description="Environment name")
    DEBUG: bool = Field(default=False, description="Debug mode")

    # API Server
    API_HOST: str = Field(default="0.0.0.0")
    API_PORT: int = Field(default=5004, ge=1, le=65535)

    # Database (explicit URL wins over the individual parts)
    DATABASE_URL: Optional[str] = Field(
        default=None,
        description="Full SQLAlchemy database URL",
    )
    DB_HOST: str = Field(default="localhost")
    DB_PORT: int = Field(default=5432, ge=1, le=65535)
    DB_USER: str = Field(default="postgres")
    DB_PASSWORD: str = Field(default="")
    DB_NAME: str = Field(default="dating")
    DB_SSLMODE: str = Field(default="disable")

    DATABASE_ECHO: bool = Field(default=False)
    DATABASE_POOL_SIZE: int = Field(default=20, ge=1)
    DATABASE_MAX_OVERFLOW: int = Field(default=10, ge=0)
    DATABASE_POOL_TIMEOUT: int = Field(default=30, ge=1)
    DATABASE_POOL_RECYCLE: int = Field(default=3600, ge=1)
    DATABASE_CONNECT_TIMEOUT: float = Field(
        default=10.0,
        gt=0,
        description="Seconds to wait for the initial database connection",
    )

    # Graceful Shutdown
    SHUTDOWN_TIMEOUT: float = Field(
        default=10.0,
        gt=0,
        description="Maximum seconds for the whole shutdown sequence",
    )
    FORCE_EXIT_ON_SECOND_SIGNAL: bool = Field(
        default=True,
        description="Exit immediately on a second signal during shutdown",
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"Invalid LOG_LEVEL. Must be one of: {allowed}")
        return v_upper

    @field_validator("DB_SSLMODE")
    @classmethod
    def validate_sslmode(cls, v: str) -> str:
        """Validate PostgreSQL SSL mode."""
        allowed = ["disable", "allow", "prefer", "require", "verify-ca", "verify-full"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"Invalid DB_SSLMODE. Must be one of: {allowed}")
        return v_lower

    @property
    def database_url(self) -> str:
        """
        Effective database URL.

        Returns:
            DATABASE_URL if set, otherwise an asyncpg URL built from DB_* parts
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL

        url = URL.create(
            drivername="postgresql+asyncpg",
            username=self.DB_USER,
            password=self.DB_PASSWORD or None,
            host=self.DB_HOST,
            port=self.DB_PORT,
            database=self.DB_NAME,
            query={"ssl": self.DB_SSLMODE},
        )
        return url.render_as_string(hide_password=False)

    @property
    def listen_address(self) -> str:
        """Address the HTTP server binds to (host:port)."""
        return f"{self.API_HOST}:{self.API_PORT}"

    @property
    def uvicorn_log_level(self) -> str:
        """LOG_LEVEL in the lowercase form uvicorn expects."""
        return self.LOG_LEVEL.lower()


def _read_yaml(path: Path) -> dict:
    """
    Read a YAML config file.

    Returns:
        Mapping of setting names to values (empty if the file is missing
        or empty)

    Raises:
        ValueError: If the top-level document is not a mapping
    """
    if not path.exists():
        return {}

    with open(path, "r") as f:
        loaded = yaml.safe_load(f)

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(
            f"{path.name}: expected a mapping at top level, "
            f"got {type(loaded).__name__}"
        )
    return loaded


def load_config(
    config_file: Optional[str] = None,
    env_file: Optional[str] = None,
    env: Optional[str] = None,
    project_root: Optional[Path] = None,
) -> Settings:
    """
    Load configuration from YAML files and environment variables.

    Priority: ENV vars > environment-specific YAML > default YAML > defaults

    Args:
        config_file: Optional YAML config filename override
        env_file: Optional .env filename (e.g., ".env.development")
        env: Optional environment name override
        project_root: Directory holding config/ and .env files
            (defaults to the repository root)

    Returns:
        Settings instance

    Raises:
        ValidationError: If values fail validation
        ValueError: If a YAML file is not a mapping
    """
    if project_root is None:
        # Find project root (4 levels up from this file)
        project_root = Path(__file__).resolve().parent.parent.parent.parent
    config_dir = project_root / "config"

    # Determine environment (explicit parameter > ENV var > default)
    environment = env or os.getenv("ENV", "production")

    env_map = {
        "production": (".env.production", "production.yaml"),
        "development": (".env.development", "development.yaml"),
        "test": (".env.test", "test.yaml"),
    }

    # Load .env file FIRST (before Settings initialization)
    if env_file is None:
        default_env_file, default_config_file = env_map.get(
            environment, (".env.production", "production.yaml")
        )
        env_file = default_env_file
        if config_file is None:
            config_file = default_config_file

    env_file_path = project_root / env_file
    if env_file_path.exists():
        load_dotenv(env_file_path, override=False)

    merged_config = _read_yaml(config_dir / "default.yaml")

    # Environment-specific config overrides defaults
    if config_file:
        merged_config.update(_read_yaml(config_dir / config_file))

    merged_config.setdefault("ENV", environment)

    # Init kwargs outrank the environment in pydantic-settings, so drop
    # YAML keys the environment already provides.
    yaml_overrides = {
        key: value for key, value in merged_config.items() if key not in os.environ
    }

    return Settings(**yaml_overrides)


# Global settings singleton (lazy initialization)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or initialize global settings singleton.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def override_settings(new_settings: Settings) -> None:
    """Override global settings (for testing)."""
    global _settings
    _settings = new_settings


def reset_settings() -> None:
    """Reset settings to force re-initialization (for testing)."""
    global _settings
    _settings = None
