"""
Timeline Configuration Module.
Defines geometry, buffer and zoom settings for the timeline engine.
"""

import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from dotenv import find_dotenv, load_dotenv

from timelane.app.constants import (
    DEFAULT_BASE_WIDTH,
    DEFAULT_CONTAINER_HEIGHT,
    DEFAULT_CONTAINER_WIDTH,
    DEFAULT_DATE_PADDING_DAYS,
    DEFAULT_HEADER_HEIGHT,
    DEFAULT_ITEM_BUFFER_DAYS,
    DEFAULT_LANE_BUFFER,
    DEFAULT_LANE_GAP_DAYS,
    DEFAULT_LANE_HEIGHT,
    DEFAULT_MARKER_SLACK,
    DEFAULT_ZOOM,
    ENV_PREFIX,
    LANE_STRATEGIES,
    LANE_STRATEGY_SCAN,
    MAX_ZOOM,
    MIN_ZOOM,
    ZOOM_STEP,
)

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when configuration values are malformed."""


@dataclass(frozen=True)
class TimelineConfig:
    """
    Configuration settings for the timeline engine.

    Attributes:
        base_width: Pixel width of the full date range at zoom 1.0.
        lane_height: Pixel height of one lane row.
        header_height: Pixel height of the date-axis header.
        lane_buffer: Lanes rendered beyond the top and bottom of the viewport.
        item_buffer_days: Days rendered beyond the left and right edges.
        marker_slack: Extra pixels around the window for month markers.
        lane_gap_days: Minimum days between two items sharing a lane.
            Independent of item_buffer_days.
        date_padding_days: Days added around the union of item spans.
        min_zoom: Lowest zoom level.
        max_zoom: Highest zoom level.
        zoom_step: Factor applied per zoom in/out request.
        default_zoom: Zoom level at construction and after reset.
        default_container_width: Viewport width before the first resize.
        default_container_height: Viewport height before the first resize.
        lane_strategy: ``"scan"`` or ``"indexed"`` lane search.
    """

    base_width: float = DEFAULT_BASE_WIDTH
    lane_height: int = DEFAULT_LANE_HEIGHT
    header_height: int = DEFAULT_HEADER_HEIGHT
    lane_buffer: int = DEFAULT_LANE_BUFFER
    item_buffer_days: int = DEFAULT_ITEM_BUFFER_DAYS
    marker_slack: float = DEFAULT_MARKER_SLACK
    lane_gap_days: int = DEFAULT_LANE_GAP_DAYS
    date_padding_days: int = DEFAULT_DATE_PADDING_DAYS
    min_zoom: float = MIN_ZOOM
    max_zoom: float = MAX_ZOOM
    zoom_step: float = ZOOM_STEP
    default_zoom: float = DEFAULT_ZOOM
    default_container_width: int = DEFAULT_CONTAINER_WIDTH
    default_container_height: int = DEFAULT_CONTAINER_HEIGHT
    lane_strategy: str = LANE_STRATEGY_SCAN

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """
        Checks value ranges.

        Raises:
            ConfigError: If any value is out of range.
        """
        positive = (
            "base_width",
            "lane_height",
            "min_zoom",
            "max_zoom",
            "default_container_width",
            "default_container_height",
        )
        for name in positive:
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive, got {getattr(self, name)}")

        non_negative = (
            "header_height",
            "lane_buffer",
            "item_buffer_days",
            "marker_slack",
            "lane_gap_days",
            "date_padding_days",
        )
        for name in non_negative:
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must not be negative, got {getattr(self, name)}")

        if self.min_zoom > self.max_zoom:
            raise ConfigError(
                f"min_zoom ({self.min_zoom}) is greater than max_zoom ({self.max_zoom})"
            )
        if self.zoom_step <= 1.0:
            raise ConfigError(f"zoom_step must be greater than 1, got {self.zoom_step}")
        if self.lane_strategy not in LANE_STRATEGIES:
            raise ConfigError(f"Unknown lane strategy: {self.lane_strategy!r}")

    def clamp_zoom(self, zoom_level: float) -> float:
        """Clamps a zoom level to [min_zoom, max_zoom]."""
        return max(self.min_zoom, min(self.max_zoom, zoom_level))

    def to_dict(self) -> dict:
        """
        Converts the config to a dictionary for JSON serialization.

        Returns:
            dict: Dictionary representation of the configuration.
        """
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TimelineConfig":
        """
        Creates a TimelineConfig from a dictionary.

        Unknown keys are ignored and missing keys keep their defaults.

        Args:
            data: Dictionary containing configuration values.

        Returns:
            TimelineConfig: A new TimelineConfig instance.
        """
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "TimelineConfig":
        """
        Creates a TimelineConfig from ``TIMELANE_<FIELD>`` variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            TimelineConfig: A new TimelineConfig instance.

        Raises:
            ConfigError: If a variable cannot be converted to its field type.
        """
        environ = os.environ if environ is None else environ
        values = {}
        for f in fields(cls):
            raw = environ.get(f"{ENV_PREFIX}{f.name.upper()}")
            if raw is None or not raw.strip():
                continue
            values[f.name] = _convert(f.name, raw.strip(), type(f.default))
        return cls.from_dict(values)


def load_config(env_file: Optional[Union[str, Path]] = None) -> TimelineConfig:
    """
    Loads configuration from the environment, reading a ``.env`` file first.

    Variables already set in the environment are never overwritten.

    Args:
        env_file: Optional path to the ``.env`` file. When None, python-dotenv
            searches for ``.env`` starting from the working directory.

    Returns:
        TimelineConfig: The loaded configuration.
    """
    if env_file is not None:
        loaded = load_dotenv(dotenv_path=env_file, override=False)
    else:
        loaded = load_dotenv(find_dotenv(usecwd=True), override=False)
    logger.debug(f"Loaded .env file: {loaded}")
    return TimelineConfig.from_env()


def _convert(name: str, raw: str, target: type) -> Any:
    try:
        if target is int:
            return int(raw)
        if target is float:
            return float(raw)
    except ValueError as e:
        raise ConfigError(
            f"Invalid value for {ENV_PREFIX}{name.upper()}: {raw!r}"
        ) from e
    return raw
