#!/usr/bin/env python3
"""minimagick - command line interface.

Runs the library's image operations from the shell, mostly useful for
checking an ImageMagick installation and the configured settings.

Usage:
    python -m minimagick info photo.jpg
    python -m minimagick info photo.jpg width height "EXIF:Model"
    python -m minimagick mogrify photo.jpg -o resize=50% -o strip --output small.jpg
    python -m minimagick convert photo.tiff png --output photo.png
"""

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from ._version import __version__
from .config import ConfigManager, MagickSettings
from .exceptions import ConfigError, InvalidInputError, MiniMagickError
from .execution import Executor
from .image import Image

logger = logging.getLogger(__name__)

DEFAULT_INFO_ATTRIBUTES = ["format", "width", "height"]


def setup_logging(
    verbose: bool = False,
    quiet: bool = False,
    config: Optional[ConfigManager] = None
) -> None:
    """Configure logging for the application.

    Args:
        verbose: If True, enable DEBUG level logging
        quiet: If True, only log errors
        config: Configuration with optional logging.file and logging.format
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(
        logging.Formatter('%(levelname)s - %(name)s - %(message)s')
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if verbose else level)
    root_logger.addHandler(console_handler)

    # Also log to file if configured
    log_file = config.get("logging.file") if config else None
    if not log_file:
        return

    log_path = Path(log_file).expanduser()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
    except OSError as e:
        logger.warning(f"Could not open log file {log_path}: {e}")
        return

    file_handler.setLevel(config.get("logging.level", "INFO"))
    file_handler.setFormatter(
        logging.Formatter(
            config.get(
                "logging.format",
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )
        )
    )
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(file_handler)


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Arguments to parse (sys.argv[1:] if not provided)

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        prog="minimagick",
        description="minimagick - drive ImageMagick from the command line",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show format and size of an image
  minimagick info photo.jpg

  # Read arbitrary identify attributes
  minimagick info photo.jpg dimensions "EXIF:DateTimeOriginal"

  # Resize a copy of an image
  minimagick mogrify photo.jpg -o resize=50% -o auto-orient --output small.jpg

  # Use GraphicsMagick with a 30 second timeout
  minimagick --processor gm --timeout 30 info photo.jpg
"""
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"minimagick {__version__}"
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Path to config file (default: ~/.minimagick/config.yaml)"
    )
    parser.add_argument(
        "--processor",
        metavar="NAME",
        help="Prefix placed before each tool command (e.g. gm)"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        metavar="SECONDS",
        help="Kill commands that run longer than this"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose debug logging"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress all output except errors"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    info_parser = subparsers.add_parser("info", help="Print image attributes")
    info_parser.add_argument("file", help="Image file")
    info_parser.add_argument(
        "attributes",
        nargs="*",
        metavar="ATTRIBUTE",
        help="Attributes to print (default: format width height)"
    )

    mogrify_parser = subparsers.add_parser(
        "mogrify", help="Apply mogrify options to an image"
    )
    mogrify_parser.add_argument("file", help="Image file")
    mogrify_parser.add_argument(
        "--option", "-o",
        action="append",
        default=[],
        metavar="NAME[=VALUE]",
        dest="options",
        help="Option to apply, in order (repeatable)"
    )
    mogrify_parser.add_argument(
        "--output",
        metavar="PATH",
        help="Write the result here instead of modifying the file in place"
    )

    convert_parser = subparsers.add_parser(
        "convert", help="Convert an image to another format"
    )
    convert_parser.add_argument("file", help="Image file")
    convert_parser.add_argument("format", help="Target format (jpg, png, ...)")
    convert_parser.add_argument(
        "--output",
        metavar="PATH",
        help="Output path (default: input path with the new extension)"
    )

    return parser.parse_args(argv)


def parse_option(spec: str) -> Tuple[str, List[str]]:
    """Split a NAME[=VALUE] option argument.

    Examples:
        >>> parse_option("resize=50%")
        ('resize', ['50%'])
        >>> parse_option("strip")
        ('strip', [])
    """
    name, sep, value = spec.partition("=")
    return name, [value] if sep else []


def build_settings(args: argparse.Namespace, config: ConfigManager) -> MagickSettings:
    """Combine configuration file settings with command line overrides."""
    settings = MagickSettings.from_config(config)
    overrides = {}
    if args.processor is not None:
        overrides["processor"] = args.processor
    if args.timeout is not None:
        overrides["timeout"] = args.timeout
    return dataclasses.replace(settings, **overrides)


def run_info(args: argparse.Namespace, executor: Executor) -> None:
    image = Image(args.file, executor=executor)
    for attribute in args.attributes or DEFAULT_INFO_ATTRIBUTES:
        value = image[attribute]
        if isinstance(value, list):
            value = " ".join(str(v) for v in value)
        print(f"{attribute}: {value}")


def run_mogrify(args: argparse.Namespace, executor: Executor) -> None:
    if args.output:
        image = Image.open(args.file, executor=executor)
    else:
        image = Image(args.file, executor=executor)

    with image:
        with image.combine_options() as command:
            for spec in args.options:
                name, values = parse_option(spec)
                command.add_option(name, *values)
        if args.output:
            image.write(args.output)
            logger.info(f"Wrote {args.output}")


def run_convert(args: argparse.Namespace, executor: Executor) -> None:
    output = args.output or str(Path(args.file).with_suffix(f".{args.format}"))
    with Image.open(args.file, executor=executor) as image:
        image.format(args.format)
        image.write(output)
    logger.info(f"Wrote {output}")
    print(output)


COMMANDS = {
    "info": run_info,
    "mogrify": run_mogrify,
    "convert": run_convert,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the minimagick CLI.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    args = parse_arguments(argv)

    try:
        config = ConfigManager.load(config_path=args.config)
    except ConfigError as e:
        setup_logging(args.verbose, args.quiet)
        logger.error(f"Configuration error: {e}")
        return 2

    setup_logging(args.verbose, args.quiet, config)

    try:
        executor = Executor(build_settings(args, config))
        COMMANDS[args.command](args, executor)
        return 0

    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 2

    except InvalidInputError as e:
        logger.error(f"Not a valid image: {args.file}")
        logger.debug(f"Tool output: {e.output}")
        return 3

    except (MiniMagickError, OSError) as e:
        logger.error(f"{e}", exc_info=args.verbose)
        return 1

    except KeyboardInterrupt:
        if not args.quiet:
            print()
            print("Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
