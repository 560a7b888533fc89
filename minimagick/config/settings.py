"""Settings injected into the executor."""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from minimagick.config.manager import ConfigManager
from minimagick.exceptions import ConfigError

logger = logging.getLogger(__name__)


def _check_seconds(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(
            f"{name} must be a positive number of seconds, got {value!r}"
        )


@dataclass(frozen=True)
class MagickSettings:
    """Settings that apply to every command an executor runs.

    Attributes:
        processor: Prefix placed before each verb ("" for plain ImageMagick,
            "gm" for GraphicsMagick)
        timeout: Seconds before a command is killed (None waits forever)
        http_timeout: Seconds to wait when fetching images from URLs
    """
    processor: str = ""
    timeout: Optional[float] = None
    http_timeout: float = 30

    def __post_init__(self):
        if not isinstance(self.processor, str):
            raise ConfigError(
                f"processor must be a string, got {self.processor!r}"
            )
        if self.timeout is not None:
            _check_seconds("timeout", self.timeout)
        _check_seconds("http_timeout", self.http_timeout)

    @classmethod
    def from_config(cls, config: ConfigManager) -> "MagickSettings":
        """Build settings from a loaded configuration.

        Args:
            config: Configuration manager

        Returns:
            MagickSettings instance

        Raises:
            ConfigError: If a value is of the wrong type or out of range
        """
        return cls(
            processor=config.get("magick.processor", "") or "",
            timeout=config.get("magick.timeout"),
            http_timeout=config.get("http.timeout", 30),
        )


@lru_cache(maxsize=None)
def default_settings() -> MagickSettings:
    """Return the process-wide default settings.

    Loaded from the standard configuration locations on first use and
    cached; the result is immutable.
    """
    settings = MagickSettings.from_config(ConfigManager.load())
    logger.debug(f"Default settings: {settings}")
    return settings
