"""Configuration management for the AWS service description converter."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

_config_logger = logging.getLogger(__name__)


class LoggingSettings(BaseModel):
    level: str = Field(default="INFO", description="Python logging level name")
    file: str | None = Field(default=None, description="Optional log file path")


class ConversionSettings(BaseModel):
    """Constants stamped into every converted document."""

    openapi_version: str = Field(default="3.0.0")
    map_parameter_cap: int = Field(
        default=3,
        ge=1,
        le=50,
        description="Number of indexed key/value pairs emitted for a map query parameter.",
    )
    first_synthetic_error_status: int = Field(default=480, ge=400, le=599)
    provider_name: str = Field(default="amazonaws.com")
    categories: tuple[str, ...] = Field(default=("cloud",))
    docs_base_url: str = Field(default="https://docs.aws.amazon.com/")
    origin_url_template: str = Field(
        default="https://raw.githubusercontent.com/aws/aws-sdk-js/master/apis/{filename}"
    )
    client_registration_url: str = Field(
        default="https://portal.aws.amazon.com/gp/aws/developer/registration/index.html?nc2=h_ct"
    )
    logo_url: str = Field(default="https://twitter.com/awscloud/profile_image?size=original")
    logo_background: str = Field(default="#FFFFFF")
    terms_of_service: str = Field(default="https://aws.amazon.com/service-terms/")
    license_name: str = Field(default="Apache 2.0 License")
    license_url: str = Field(default="http://www.apache.org/licenses/")
    contact_name: str | None = Field(default=None)
    contact_email: str | None = Field(default=None)
    contact_url: str | None = Field(default=None)

    @field_validator("docs_base_url")
    @classmethod
    def _validate_docs_base_url(cls, value: str) -> str:
        return value if value.endswith("/") else value + "/"


class Settings(BaseModel):
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    conversion: ConversionSettings = Field(default_factory=ConversionSettings)


ENV_KEYS = {
    "log_level": "LOG_LEVEL",
    "log_file": "LOG_FILE",
    "openapi_version": "OPENAPI_VERSION",
    "map_parameter_cap": "MAP_PARAMETER_CAP",
    "first_synthetic_error_status": "FIRST_SYNTHETIC_ERROR_STATUS",
    "provider_name": "PROVIDER_NAME",
    "categories": "API_CATEGORIES",
    "docs_base_url": "DOCS_BASE_URL",
    "origin_url_template": "ORIGIN_URL_TEMPLATE",
    "contact_name": "CONTACT_NAME",
    "contact_email": "CONTACT_EMAIL",
    "contact_url": "CONTACT_URL",
}


def _split_csv_preserve_case(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _resolve_path(path: str) -> str:
    candidate = Path(path)
    root = _project_root().resolve()
    if candidate.is_absolute():
        resolved = candidate.resolve()
    else:
        resolved = (root / candidate).resolve()
    if not resolved.is_relative_to(root):
        raise ValueError(f"Path traversal detected: '{path}' resolves outside project root")
    return str(resolved)


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        _config_logger.warning(
            "Invalid integer value for %s: %r, using default %d", key, value, default
        )
        return default


def _env_optional(key: str) -> str | None:
    value = os.getenv(key)
    if value is None:
        return None
    return value.strip() or None


def load_settings() -> Settings:
    """Load configuration and cache the result."""

    return _load_settings_cached()


@lru_cache(maxsize=1)
def _load_settings_cached() -> Settings:
    load_dotenv(dotenv_path=_project_root() / ".env")
    log_file_env = os.getenv(ENV_KEYS["log_file"])
    defaults = ConversionSettings()

    settings_data: dict[str, object] = {
        "logging": {
            "level": os.getenv(ENV_KEYS["log_level"], LoggingSettings().level),
            "file": _resolve_path(log_file_env) if log_file_env else None,
        },
        "conversion": {
            "openapi_version": os.getenv(ENV_KEYS["openapi_version"], defaults.openapi_version),
            "map_parameter_cap": _env_int(
                ENV_KEYS["map_parameter_cap"], defaults.map_parameter_cap
            ),
            "first_synthetic_error_status": _env_int(
                ENV_KEYS["first_synthetic_error_status"],
                defaults.first_synthetic_error_status,
            ),
            "provider_name": os.getenv(ENV_KEYS["provider_name"], defaults.provider_name),
            "categories": tuple(
                _split_csv_preserve_case(os.getenv(ENV_KEYS["categories"]))
                or defaults.categories
            ),
            "docs_base_url": os.getenv(ENV_KEYS["docs_base_url"], defaults.docs_base_url),
            "origin_url_template": os.getenv(
                ENV_KEYS["origin_url_template"], defaults.origin_url_template
            ),
            "contact_name": _env_optional(ENV_KEYS["contact_name"]),
            "contact_email": _env_optional(ENV_KEYS["contact_email"]),
            "contact_url": _env_optional(ENV_KEYS["contact_url"]),
        },
    }

    try:
        settings = Settings.model_validate(settings_data)
    except ValidationError as exc:
        raise RuntimeError(f"Invalid configuration: {exc}") from exc

    return settings
