"""Default configuration values for minimagick."""

from pathlib import Path

# Default configuration dictionary
DEFAULT_CONFIG = {
    # Tool invocation
    "magick": {
        "processor": "",  # e.g. "gm" to run GraphicsMagick
        "timeout": None,  # seconds, None waits forever
    },

    # Fetching images from URLs
    "http": {
        "timeout": 30,
    },

    # Logging Configuration
    "logging": {
        "level": "INFO",
        "file": None,
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    },
}

# Where a new configuration file is written
DEFAULT_CONFIG_PATH = Path.home() / ".minimagick" / "config.yaml"
