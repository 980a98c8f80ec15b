"""Configuration with JSON file, secrets.yml, and env variable support.

Load order (later overrides earlier):
1. config.json - base configuration
2. secrets.yml - WhatsApp tokens and encryption material
3. Environment variables - runtime overrides (prefix STATUSBOT_)
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

ENV_PREFIX = "STATUSBOT_"


def _find_repo_root(*, start: Path) -> Path:
    """Best-effort repository root discovery.

    Relative paths in the config (scripts, screenshots, logs) are resolved
    against the repo root so the service can be launched from any working
    directory.

    - first directory containing `pyproject.toml`
    - otherwise fall back to the current working directory
    """

    try:
        start = start.resolve()
        for p in [start, *start.parents]:
            if (p / "pyproject.toml").exists():
                return p
    except OSError:
        pass

    return Path.cwd()


def _flatten_secrets_mapping(secrets: dict) -> dict:
    """Flatten nested secrets into BotConfig-compatible keys.

        whatsapp.token      -> whatsapp_token
        encryption.key      -> encryption_key
    """
    flat = {}
    for section, values in secrets.items():
        if isinstance(values, dict):
            for key, value in values.items():
                flat[f"{section}_{key}"] = value
        else:
            flat[section] = values
    return flat


def _load_secrets(secrets_path: Path) -> dict:
    """Load and flatten secrets from YAML file."""
    if not secrets_path.exists():
        return {}

    with open(secrets_path) as f:
        secrets = yaml.safe_load(f) or {}

    if not isinstance(secrets, dict):
        logger.warning("Ignoring %s: top level is not a mapping", secrets_path)
        return {}

    return _flatten_secrets_mapping(secrets)


def resolve_path(raw: str) -> Path:
    """Resolve a possibly-relative config path against the repo root."""
    p = Path(raw).expanduser()
    if not p.is_absolute():
        p = _find_repo_root(start=Path(__file__)) / p
    return p.resolve()


class BotConfig(BaseSettings):
    """Configuration with JSON file + secrets.yml + env var support.

    Prefix: STATUSBOT_ (e.g., STATUSBOT_WHATSAPP_TOKEN)
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # WhatsApp Cloud API
    whatsapp_phone_number_id: str = Field(default="")
    whatsapp_token: str = Field(default="")
    whatsapp_verify_token: str = Field(default="")
    whatsapp_api_version: str = Field(default="v21.0")
    whatsapp_api_base_url: str = Field(default="https://graph.facebook.com")
    whatsapp_request_timeout_seconds: float = Field(default=30.0)

    # Credential encryption (hex-encoded key / iv)
    encryption_algorithm: str = Field(default="aes-256-cbc")
    encryption_key: str = Field(default="")
    encryption_iv: str = Field(default="")

    # Database settings
    database_url: str = Field(default="sqlite+aiosqlite:///./journal_data.db")
    auto_create_tables: bool = Field(
        default=False,
        description=(
            "If true, create tables from ORM metadata on startup instead of "
            "relying on Alembic migrations."
        ),
    )

    # Automation
    screenshot_folder: str = Field(default="./screenshots")
    scripts_dir: str = Field(default="./scripts")
    helpers_dir: str = Field(default="./handlers")
    helper_python: str = Field(default="python")
    helper_timeout_seconds: int = Field(default=600)
    chrome_driver_path: str | None = Field(default=None)
    headless: bool = Field(default=True)
    navigation_timeout_seconds: float = Field(default=30.0)
    post_navigation_delay_ms: int = Field(default=5000)
    unknown_opcode_delay_ms: int = Field(
        default=200_000,
        description=(
            "Pause issued after an unrecognized script instruction. "
            "Set to 0 to skip unknown instructions without waiting."
        ),
    )

    # Sessions and delivery
    delivery_grace_seconds: float = Field(default=5.0)
    session_max_age_minutes: int = Field(default=30)
    session_sweep_interval_seconds: int = Field(default=900)
    default_whatsapp_number: str | None = Field(default=None)

    # Error log file
    error_log_file_enabled: bool = Field(default=True)
    error_log_file_path: str = Field(default="./logs/errors.log")
    error_log_level: str = Field(default="WARNING")
    error_log_max_bytes: int = Field(default=10_485_760)
    error_log_backup_count: int = Field(default=5)

    # API settings
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8004)

    def model_post_init(self, __context) -> None:  # type: ignore[override]
        """Resolve relative directories against the repository root."""
        self.screenshot_folder = str(resolve_path(self.screenshot_folder))
        self.scripts_dir = str(resolve_path(self.scripts_dir))
        self.helpers_dir = str(resolve_path(self.helpers_dir))

    @property
    def session_max_age_seconds(self) -> float:
        return self.session_max_age_minutes * 60.0

    @classmethod
    def from_json_file(
        cls,
        config_path: str = "config.json",
        secrets_path: str = "secrets.yml",
    ) -> "BotConfig":
        """Load config from JSON + secrets.yml with env var overrides.

        Args:
            config_path: Path to JSON config file.
            secrets_path: Path to secrets YAML file.

        Returns:
            Configured BotConfig instance.
        """
        config_data: dict[str, Any] = {}

        json_path = Path(config_path)
        if json_path.exists():
            with open(json_path) as f:
                config_data = json.load(f)

        config_data.update(_load_secrets(Path(secrets_path)))

        # Env vars must win over file values; drop the file value so
        # pydantic-settings reads the environment instead of the kwarg.
        for key in [k for k in config_data if f"{ENV_PREFIX}{k.upper()}" in os.environ]:
            del config_data[key]

        return cls(**config_data)
