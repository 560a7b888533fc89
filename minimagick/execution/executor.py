"""Executes rendered commands and turns their results into return values or errors."""

import logging
from typing import Any, Optional

from minimagick.command import CommandBuilder
from minimagick.config.settings import MagickSettings, default_settings
from minimagick.exceptions import (
    CommandTimeoutError,
    GenericExecutionError,
    InvalidInputError,
)
from minimagick.execution.classifier import OutcomeKind, classify
from minimagick.execution.runner import ProcessRunner, SubprocessRunner
from minimagick.tempfiles import ManagedTempFile

logger = logging.getLogger(__name__)


class Executor:
    """Runs commands built by ``CommandBuilder`` and classifies the result.

    Settings are fixed at construction. An executor holds no per-command
    state, but the commands and resources passed to it must not be shared
    between threads.

    Attributes:
        settings: Processor prefix and timeout used for every command
        runner: Process runner that executes rendered command strings

    Examples:
        >>> executor = Executor(MagickSettings(timeout=30))
        >>> executor.run_command("identify", "photo.jpg")
        'photo.jpg JPEG 640x480 640x480+0+0 8-bit sRGB 52.1KB 0.000u 0:00.000\\n'
    """

    def __init__(
        self,
        settings: Optional[MagickSettings] = None,
        runner: Optional[ProcessRunner] = None
    ) -> None:
        """Initialize executor.

        Args:
            settings: Settings to use (process-wide defaults if not provided)
            runner: Process runner (SubprocessRunner if not provided)
        """
        self.settings = settings if settings is not None else default_settings()
        self.runner = runner if runner is not None else SubprocessRunner()

    def command(self, verb: str, *args: Any) -> CommandBuilder:
        """Create a builder carrying this executor's processor prefix."""
        return CommandBuilder(verb, *args, processor=self.settings.processor)

    def run_command(
        self,
        verb: str,
        *args: Any,
        resource: Optional[ManagedTempFile] = None
    ) -> str:
        """Build and execute a command in one step.

        Args:
            verb: Tool subcommand
            *args: Tokens for the command
            resource: Resource to release if the command fails

        Returns:
            Captured output of the command
        """
        return self.execute(self.command(verb, *args), resource=resource)

    def execute(
        self,
        command: CommandBuilder,
        resource: Optional[ManagedTempFile] = None
    ) -> str:
        """Execute a command and classify its result.

        The configured processor prefix is applied at this point to any
        builder that does not carry its own. On failure the resource, if
        given, is released before the error is raised.

        Args:
            command: Builder to render and run
            resource: Resource owned by the failing operation

        Returns:
            Captured output, unmodified, when the exit status is 0

        Raises:
            InvalidInputError: If the tool could not decode or produce an image
            CommandTimeoutError: If the command was killed after the timeout
            GenericExecutionError: For any other non-zero exit status
        """
        rendered = command.render(processor=self.settings.processor)
        timeout = self.settings.timeout
        logger.debug(f"Executing: {rendered}")

        try:
            result = self.runner.run(rendered, timeout=timeout)
        except Exception:
            self._release(resource)
            raise

        outcome = classify(result)
        if outcome.kind is OutcomeKind.SUCCESS:
            return outcome.output

        self._release(resource)
        logger.warning(
            f"Command failed with status {outcome.exit_status}: {rendered}"
        )

        if outcome.kind is OutcomeKind.INVALID_INPUT:
            raise InvalidInputError(outcome.output)
        if result.timed_out:
            raise CommandTimeoutError(
                rendered, outcome.exit_status, outcome.output, timeout=timeout
            )
        raise GenericExecutionError(rendered, outcome.exit_status, outcome.output)

    @staticmethod
    def _release(resource: Optional[ManagedTempFile]) -> None:
        if resource is not None:
            logger.debug(f"Releasing resource after failure: {resource.path}")
            resource.release()
