# SPDX-License-Identifier: Apache-2.0
"""All configuration via environment variables (12-factor). No hardcoded values."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DECLARED_COLUMNS = [
    "urn:ohmage:context:user",
    "urn:ohmage:context:client",
    "urn:ohmage:context:timestamp",
    "urn:ohmage:context:timezone",
    "urn:ohmage:context:utc_timestamp",
    "urn:ohmage:context:survey_launch_context",
    "urn:ohmage:context:location:status",
    "urn:ohmage:context:location:latitude",
    "urn:ohmage:context:location:longitude",
    "urn:ohmage:context:location:timestamp",
    "urn:ohmage:context:location:accuracy",
    "urn:ohmage:context:location:provider",
    "urn:ohmage:context:campaign:name",
    "urn:ohmage:context:campaign:version",
    "urn:ohmage:context:repeatable_set:id",
    "urn:ohmage:context:repeatable_set:iteration",
]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="OHMAGE_",
        extra="ignore",
    )

    # Database
    database_url: str = Field(default="sqlite:///./ohmage.db", description="Database URL")

    # CORS
    allowed_origins: list[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Level for the 'ohmage' logger")

    # Requester identity, set by the authenticating proxy in front of the API
    requester_header: str = Field(default="X-Ohmage-User", min_length=1)

    # Survey response projection
    declared_columns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DECLARED_COLUMNS),
        description="Columns returned for urn:ohmage:special:all",
    )
    projection_enforce_grouping: bool = Field(
        default=True,
        description="Reject result rows whose identities are not contiguous",
    )


settings = Settings()

SQL_URL = settings.database_url
DECLARED_COLUMNS = settings.declared_columns
LOCATION_STATUS_UNAVAILABLE = "unavailable"
NOT_AVAILABLE = "NA"
