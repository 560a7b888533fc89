"""Command line construction for the ImageMagick tool suite."""

from minimagick.command.builder import CommandBuilder
from minimagick.command.options import (
    FORMAT_OPTION,
    RECOGNIZED_OPTIONS,
    is_recognized,
    normalize_option_name,
)

__all__ = [
    "CommandBuilder",
    "FORMAT_OPTION",
    "RECOGNIZED_OPTIONS",
    "is_recognized",
    "normalize_option_name",
]
