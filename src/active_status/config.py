"""Environment-based configuration for the status board."""

from typing import Any, Literal

from pydantic import AliasChoices, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from active_status.exceptions import ConfigurationError
from active_status.progress import default_progress_formatter
from active_status.types import ProgressFormatter


class BoardSettings(BaseSettings):
    """Status board configuration.

    All scalar settings can be overridden via environment variables with
    ACTIVE_STATUS_ prefix. For example:
        ACTIVE_STATUS_DIM_AFTER_MILLIS=2000
        ACTIVE_STATUS_REFRESH_INTERVAL_MILLIS=50

    The terminal type falls back to TERM when ACTIVE_STATUS_TERMINAL_TYPE
    is not set.

    Mode "minimal" selects the line-per-change board, for consoles that
    cannot move the cursor.
    """

    # Timing
    dim_after_millis: int = Field(default=1000, gt=0)
    refresh_interval_millis: int = Field(default=100, gt=0)

    # Queue capacities
    update_queue_size: int = Field(default=3, gt=0)
    composite_queue_size: int = Field(default=10, gt=0)
    registration_queue_size: int = Field(default=1, gt=0)

    # Recent non-fatal failures kept on the board
    failure_history: int = Field(default=100, gt=0)

    terminal_type: str = Field(
        default="xterm",
        min_length=1,
        validation_alias=AliasChoices("ACTIVE_STATUS_TERMINAL_TYPE", "TERM"),
    )

    mode: Literal["console", "minimal"] = "console"

    progress_formatter: ProgressFormatter = default_progress_formatter

    model_config = SettingsConfigDict(
        env_prefix="ACTIVE_STATUS_",
        populate_by_name=True,
    )

    @property
    def dim_after(self) -> float:
        """Dim window in seconds."""
        return self.dim_after_millis / 1000

    @property
    def refresh_interval(self) -> float:
        """Refresh interval in seconds."""
        return self.refresh_interval_millis / 1000


def load_settings(**overrides: Any) -> BoardSettings:
    """
    Build board settings from the environment plus explicit overrides.

    Args:
        **overrides: Field values that take precedence over the environment

    Returns:
        Validated BoardSettings

    Raises:
        ConfigurationError: If any value is invalid (e.g. non-positive interval)
    """
    try:
        return BoardSettings(**overrides)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid status board configuration: {e}") from e
