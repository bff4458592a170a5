"""Region subsystem configuration loaded from environment variables.

All values have sensible defaults; the environment only overrides them.

Fail-fast validation:
    ``from_env()`` raises ``ConfigValidationError`` if any value is out of
    its valid range.  Bad configuration is caught at startup instead of on
    the first export.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from ds9_regions import __version__
from ds9_regions.core.constants import (
    DEFAULT_LINE_DELIMITER,
    PARAMETER_DELIMITERS,
    PROPERTY_MARKER,
)
from ds9_regions.core.exceptions import RegionError
from ds9_regions.models.properties import Ds9GlobalProperties


class ConfigValidationError(RegionError):
    """A configuration value failed validation.

    Attributes:
        key: Environment variable name of the rejected value.
        value: The rejected value.
        message: What a valid value looks like.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class RegionConfig:
    """Immutable region import/export configuration.

    Attributes:
        format_version: Version written into the export header banner.
        line_delimiter: Extra character separating logical region lines.
        global_color: Default region color in the ``global`` header line.
        global_font: Default font in the ``global`` header line.
    """

    format_version: str = __version__
    line_delimiter: str = DEFAULT_LINE_DELIMITER
    global_color: str = "green"
    global_font: str = "helvetica 10 normal roman"

    @classmethod
    def from_env(cls) -> RegionConfig:
        """Build a config from ``DS9_*`` environment variables and validate it.

        Raises:
            ConfigValidationError: If a value is empty or malformed.
        """
        config = cls(
            format_version=os.getenv("DS9_FORMAT_VERSION", __version__),
            line_delimiter=os.getenv("DS9_LINE_DELIMITER", DEFAULT_LINE_DELIMITER),
            global_color=os.getenv("DS9_GLOBAL_COLOR", "green"),
            global_font=os.getenv("DS9_GLOBAL_FONT", "helvetica 10 normal roman"),
        )
        _validate(config)
        return config

    def global_properties(self) -> Ds9GlobalProperties:
        """Return the style defaults written in the export header."""
        return Ds9GlobalProperties(color=self.global_color, font=self.global_font)


def _validate(config: RegionConfig) -> None:
    """Validate configuration values.  Raises ``ConfigValidationError``."""
    if not config.format_version.strip():
        raise ConfigValidationError(
            "DS9_FORMAT_VERSION",
            config.format_version,
            "must not be empty",
        )

    if len(config.line_delimiter) != 1:
        raise ConfigValidationError(
            "DS9_LINE_DELIMITER",
            config.line_delimiter,
            "must be exactly one character",
        )

    if config.line_delimiter in PARAMETER_DELIMITERS + PROPERTY_MARKER + "\n":
        raise ConfigValidationError(
            "DS9_LINE_DELIMITER",
            config.line_delimiter,
            "must not be a parameter delimiter",
        )

    if not config.global_color.strip():
        raise ConfigValidationError(
            "DS9_GLOBAL_COLOR",
            config.global_color,
            "must not be empty",
        )

    if not config.global_font.strip():
        raise ConfigValidationError(
            "DS9_GLOBAL_FONT",
            config.global_font,
            "must not be empty",
        )
