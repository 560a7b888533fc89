"""minimagick - a thin wrapper around the ImageMagick command line tools.

Build identify/mogrify/composite command lines from Python calls, run them
with a timeout, and get back either the tool's output or a typed error that
separates undecodable input from everything else that can go wrong.
"""

from minimagick._version import __version__, __version_info__
from minimagick.command import CommandBuilder
from minimagick.config import ConfigManager, MagickSettings
from minimagick.exceptions import (
    MiniMagickError,
    DispatchError,
    InvalidInputError,
    GenericExecutionError,
    CommandTimeoutError,
    ImageFetchError,
    ConfigError,
)
from minimagick.execution import Executor
from minimagick.image import Image
from minimagick.tempfiles import ManagedTempFile

__license__ = "MIT"
__all__ = [
    "__version__",
    "__version_info__",
    "CommandBuilder",
    "ConfigManager",
    "MagickSettings",
    "MiniMagickError",
    "DispatchError",
    "InvalidInputError",
    "GenericExecutionError",
    "CommandTimeoutError",
    "ImageFetchError",
    "ConfigError",
    "Executor",
    "Image",
    "ManagedTempFile",
]
