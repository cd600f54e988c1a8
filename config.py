"""
Configuration management for Relief Triage
"""
import os
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "RELIEF_"


class Settings(BaseModel):
    """Application settings with environment variable support"""

    # Application
    app_name: str = "Relief Triage"
    app_version: str = "1.0.0"
    debug: bool = False

    # Logging Configuration
    log_level: str = "INFO"
    log_format: str = "json"

    # Privacy
    blur_radius_meters: float = Field(200.0, ge=0)

    # Reverse geocoding (Nominatim)
    geocoding_enabled: bool = True
    geocoding_url: str = "https://nominatim.openstreetmap.org/reverse"
    geocoding_user_agent: str = "ReliefTriage/1.0"
    geocoding_timeout_seconds: float = Field(10.0, gt=0)
    geocoding_max_attempts: int = Field(3, ge=1)
    geocoding_retry_min_wait_seconds: float = Field(2.0, ge=0)

    # Dashboard
    high_priority_limit: int = Field(10, ge=1)

    @field_validator('debug', 'geocoding_enabled', mode='before')
    @classmethod
    def parse_bool(cls, v):
        if isinstance(v, str):
            return v.lower() in ('true', '1', 'yes', 'on')
        return v

    @field_validator('log_level', mode='before')
    @classmethod
    def parse_log_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator('log_format')
    @classmethod
    def check_log_format(cls, v):
        if v not in ('json', 'console'):
            raise ValueError("log_format must be 'json' or 'console'")
        return v

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "Settings":
        """Build settings from RELIEF_* environment variables"""
        environ = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        for name in cls.model_fields:
            key = f"{ENV_PREFIX}{name.upper()}"
            if key in environ:
                values[name] = environ[key]
        return cls(**values)


# Global settings instance
settings = Settings.from_env()
