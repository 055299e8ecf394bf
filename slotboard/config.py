"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.layout import DAY_METRICS, WEEK_METRICS, LayoutMetrics
from .domain.models import SlotConfig, WorkingHours


class WorkingHoursConfig(BaseModel):
    """Visible window of the timeline."""
    start_hour: int = 0
    end_hour: int = 24

    @field_validator("start_hour", "end_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 24."""
        if not 0 <= v <= 24:
            raise ValueError(f"Hour must be between 0 and 24, got {v}")
        return v

    @model_validator(mode="after")
    def validate_hours_order(self) -> "WorkingHoursConfig":
        """Ensure the configured window opens before it closes."""
        if self.end_hour <= self.start_hour:
            raise ValueError("end_hour must be later than start_hour")
        return self


class MetricsConfig(BaseModel):
    """Pixel geometry of one timeline view."""
    pixels_per_minute: float
    padding: float = 0.0
    min_height: float = 0.0

    @field_validator("pixels_per_minute")
    @classmethod
    def validate_density(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("pixels_per_minute must be greater than zero")
        return value

    @classmethod
    def from_metrics(cls, metrics: LayoutMetrics) -> "MetricsConfig":
        return cls(
            pixels_per_minute=metrics.pixels_per_minute,
            padding=metrics.padding,
            min_height=metrics.min_height,
        )

    def to_metrics(self) -> LayoutMetrics:
        return LayoutMetrics(
            pixels_per_minute=self.pixels_per_minute,
            padding=self.padding,
            min_height=self.min_height,
        )


class LayoutConfig(BaseModel):
    """Day and week timeline geometry."""
    day: MetricsConfig = Field(default_factory=lambda: MetricsConfig.from_metrics(DAY_METRICS))
    week: MetricsConfig = Field(default_factory=lambda: MetricsConfig.from_metrics(WEEK_METRICS))


class AppConfig(BaseModel):
    """Application configuration."""
    slot_duration: int = 15
    working_hours: WorkingHoursConfig = Field(default_factory=WorkingHoursConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    bookings_file: str = "bookings.json"

    @field_validator("slot_duration")
    @classmethod
    def validate_slot_duration(cls, value: int) -> int:
        """Slots must be positive and tile an hour exactly."""
        if value <= 0:
            raise ValueError("slot_duration must be greater than zero")
        if 60 % value:
            raise ValueError(f"slot_duration must evenly divide 60, got {value}")
        return value

    def to_slot_config(self) -> SlotConfig:
        """Snapshot the grid settings for the domain layer."""
        return SlotConfig(
            slot_duration=self.slot_duration,
            working_hours=WorkingHours(
                start=self.working_hours.start_hour,
                end=self.working_hours.end_hour,
            ),
        )

    def resolve_bookings_path(self, config_path: Optional[Path] = None) -> Path:
        """
        Resolve ``bookings_file``; relative paths are taken relative to the
        config file's directory when one is known.
        """
        path = Path(self.bookings_file)
        if path.is_absolute() or config_path is None:
            return path
        return config_path.parent / path

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


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
