"""
Pydantic model for application configuration.
Provides validation for player, catalog and timing settings.
"""

from pydantic import BaseModel, Field, field_validator

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
)


class PlayerConfig(BaseModel):
    """A validated configuration model for the player."""

    # External player
    mpv_path: str = "mpv"
    user_agent: str = DEFAULT_USER_AGENT
    video_host: str = "www.youtube.com"

    # Catalog
    search_limit: int = 20

    # Timing (seconds)
    settle_delay: float = 1.0
    advance_delay: float = 0.5
    spawn_retry_delay: float = 1.0
    kill_grace_period: float = 2.0
    shutdown_delay: float = 1.0

    # Internal fields not loaded from INI file
    config_path: str = Field("", repr=False)

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("mpv_path", "user_agent")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("Value cannot be empty.")
        return v

    @field_validator("video_host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        """Ensures the host is a bare hostname such as 'www.youtube.com'."""
        if not v:
            raise ValueError("Video host cannot be empty.")
        if "://" in v or "/" in v:
            raise ValueError(
                f"Video host must be a bare hostname without scheme or path, got: {v}"
            )
        return v

    @field_validator("search_limit")
    @classmethod
    def validate_search_limit(cls, v: int) -> int:
        if v < 1 or v > 100:
            raise ValueError("Search limit must be between 1 and 100.")
        return v

    @field_validator("settle_delay", "advance_delay", "spawn_retry_delay", "shutdown_delay")
    @classmethod
    def validate_short_delay(cls, v: float) -> float:
        if v < 0 or v > 10:
            raise ValueError("Delays must be between 0 and 10 seconds.")
        return v

    @field_validator("kill_grace_period")
    @classmethod
    def validate_grace_period(cls, v: float) -> float:
        if v < 0 or v > 30:
            raise ValueError("Kill grace period must be between 0 and 30 seconds.")
        return v

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}
