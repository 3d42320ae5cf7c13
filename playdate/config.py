"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.aggregation import IntensityThresholds
from .domain.time_grid import TimeGrid


class GridConfig(BaseModel):
    """Bookable hours of a day."""
    start_hour: int = 9
    end_hour: int = 20
    slot_minutes: int = 30

    @field_validator("start_hour", "end_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 23."""
        if not 0 <= v <= 23:
            raise ValueError(f"Hour must be between 0 and 23, got {v}")
        return v

    @field_validator("slot_minutes")
    @classmethod
    def validate_slot_minutes(cls, value: int) -> int:
        """Slots must tile an hour exactly."""
        if value <= 0 or 60 % value:
            raise ValueError(f"slot_minutes must be a positive divisor of 60, got {value}")
        return value

    @model_validator(mode="after")
    def validate_hours_order(self) -> "GridConfig":
        """Ensure the grid opens before it closes."""
        if self.end_hour <= self.start_hour:
            raise ValueError("end_hour must be later than start_hour")
        return self

    def build(self) -> TimeGrid:
        return TimeGrid(
            start_hour=self.start_hour,
            end_hour=self.end_hour,
            slot_minutes=self.slot_minutes,
        )


class IntensityConfig(BaseModel):
    """When a slot is shown as FULL rather than PARTIAL."""
    full_count: int = 2
    full_ratio: Optional[float] = None  # proportional variant, e.g. 0.5

    @field_validator("full_count")
    @classmethod
    def validate_full_count(cls, value: int) -> int:
        if value < 1:
            raise ValueError("full_count must be at least 1")
        return value

    @field_validator("full_ratio")
    @classmethod
    def validate_full_ratio(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and not 0 < value <= 1:
            raise ValueError(f"full_ratio must be in (0, 1], got {value}")
        return value

    def build(self) -> IntensityThresholds:
        return IntensityThresholds(full_count=self.full_count, full_ratio=self.full_ratio)


class StoreConfig(BaseModel):
    """Where the shared records live."""
    backend: Literal["memory", "file", "rest"] = "file"
    path: Path = Field(default_factory=lambda: Path.home() / ".playdate")
    url: Optional[str] = None
    table: str = "playdate_state"
    api_key: Optional[str] = None
    timeout_seconds: float = 10.0
    poll_interval_seconds: float = 5.0

    @field_validator("timeout_seconds", "poll_interval_seconds")
    @classmethod
    def validate_positive_seconds(cls, value: float) -> float:
        if value <= 0:
            raise ValueError(f"Value must be positive, got {value}")
        return value

    @model_validator(mode="after")
    def validate_backend(self) -> "StoreConfig":
        """The REST backend cannot work without a URL."""
        if self.backend == "rest" and not self.url:
            raise ValueError("store.url is required for the rest backend")
        return self


class AppConfig(BaseModel):
    """Application configuration."""
    window_days: int = 7
    require_phone: bool = False
    save_status_seconds: float = 2.0
    top_slots_limit: int = 5
    timezone: str = "local"
    grid: GridConfig = Field(default_factory=GridConfig)
    intensity: IntensityConfig = Field(default_factory=IntensityConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)

    @field_validator("window_days", "top_slots_limit")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError(f"Value must be at least 1, got {value}")
        return value

    @field_validator("save_status_seconds")
    @classmethod
    def validate_non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("save_status_seconds must not be negative")
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "AppConfig":
        """Load the given file, or the default file if present, else built-in defaults."""
        if config_path is not None:
            return cls.load_from_yaml(config_path)

        default_path = get_default_config_path()
        if default_path.exists():
            return cls.load_from_yaml(default_path)
        return cls()


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of playdate/)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
