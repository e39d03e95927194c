"""capsync configuration settings using pydantic-settings."""

from functools import cached_property
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

EXPO_PUSH_URL = "https://exp.host/--/api/v2/push/send"

MIN_BIRTH_YEAR = 1900
MAX_BIRTH_YEAR = 2100


def check_birth_year(v: int) -> int:
    if v < MIN_BIRTH_YEAR or v > MAX_BIRTH_YEAR:
        raise ValueError(f"birth_year must be between {MIN_BIRTH_YEAR} and {MAX_BIRTH_YEAR}")
    return v


class Identity(BaseModel):
    """Identity written into every record, after profile overlay."""

    first: str
    last: str
    born: int

    @field_validator("born")
    @classmethod
    def validate_born(cls, v: int) -> int:
        return check_birth_year(v)


class Settings(BaseSettings):
    """Configuration settings for the capture-to-sync client.

    Settings are loaded from environment variables with the CAPSYNC_ prefix.
    For example, CAPSYNC_COLLECTION=people sets collection to "people".
    """

    model_config = SettingsConfigDict(
        env_prefix="CAPSYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Identity written into every record
    first_name: str = "Beverly"
    last_name: str = "Vladislav Tan"
    birth_year: int = 2005
    profile_file: Path = Path("~/.config/capsync/profile.yaml")

    # Remote persistence
    collection: str = "users"
    storage_namespace: str = "test-app"
    image_object_name: str = "newImage"

    # Photo capture
    photo_max_width: int = 2000
    photo_max_height: int = 2000

    # Location capture
    location_timeout_ms: int = 15_000
    location_maximum_age_ms: int = 10_000
    location_distance_filter: float = 0.0
    location_high_accuracy: bool = False

    # False on platforms where location is granted at install time
    runtime_permissions: bool = True

    # Push notifications
    push_url: str = EXPO_PUSH_URL
    push_title: str = "Record saved"
    push_body: str = "Your capture was synced."
    push_timeout: float = 10.0
    notification_echo_timeout: float = 0.0  # seconds; 0 disables waiting

    # Logging
    log_level: str = "INFO"
    log_file: Path | None = None

    @field_validator("photo_max_width", "photo_max_height", "location_timeout_ms")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Ensure sizes and timeouts are positive."""
        if v < 1:
            raise ValueError("value must be at least 1")
        return v

    @field_validator("location_maximum_age_ms")
    @classmethod
    def validate_maximum_age(cls, v: int) -> int:
        if v < 0:
            raise ValueError("location_maximum_age_ms cannot be negative")
        return v

    @field_validator("push_timeout", "notification_echo_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v < 0:
            raise ValueError("timeouts cannot be negative")
        return v

    @field_validator("birth_year")
    @classmethod
    def validate_birth_year(cls, v: int) -> int:
        """Ensure the birth year is plausible."""
        return check_birth_year(v)

    @field_validator("storage_namespace")
    @classmethod
    def validate_namespace(cls, v: str) -> str:
        """Strip slashes so object keys never contain empty segments."""
        v = v.strip("/")
        if not v:
            raise ValueError("storage_namespace cannot be empty")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v.upper()

    @cached_property
    def profile_path(self) -> Path:
        """Return expanded profile file path."""
        return self.profile_file.expanduser()

    def load_identity(self) -> dict[str, Any]:
        """Load the record identity.

        Starts from the environment-backed fields and overlays the YAML
        profile file (keys ``first``, ``last``, ``born``) when it exists.
        An unreadable, malformed or invalid profile (for example a
        non-numeric or implausible ``born``) falls back to the defaults.
        """
        identity: dict[str, Any] = {
            "first": self.first_name,
            "last": self.last_name,
            "born": self.birth_year,
        }

        if not self.profile_path.exists():
            return identity

        try:
            with open(self.profile_path) as f:
                profile = yaml.safe_load(f) or {}
        except (yaml.YAMLError, OSError) as e:
            import logging

            logging.warning(f"Failed to load profile from {self.profile_path}: {e}")
            return identity

        if not isinstance(profile, dict):
            import logging

            logging.warning(f"Ignoring profile {self.profile_path}: expected a mapping")
            return identity

        merged = dict(identity)
        for key in ("first", "last", "born"):
            if profile.get(key) is not None:
                merged[key] = profile[key]

        try:
            checked = Identity(**merged)
        except ValidationError as e:
            import logging

            logging.warning(f"Ignoring invalid profile {self.profile_path}: {e}")
            return identity
        return checked.model_dump()
