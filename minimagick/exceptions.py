"""Custom exceptions for minimagick operations."""

from typing import Optional


class MiniMagickError(Exception):
    """Base exception for minimagick errors."""
    pass


class DispatchError(MiniMagickError, AttributeError):
    """Raised when an option name cannot be dispatched to the command line.

    This covers option names outside the recognized option set as well as
    the reserved ``format`` option, which must go through
    ``Image.format`` so the file can be renamed alongside the conversion.
    """
    pass


class InvalidInputError(MiniMagickError):
    """Raised when the tool could not decode or produce an image.

    Attributes:
        output: Captured tool output that identified the input as invalid
    """

    def __init__(self, output: str = ""):
        """Initialize invalid input error.

        Args:
            output: Captured tool output
        """
        super().__init__(output)
        self.output = output


class GenericExecutionError(MiniMagickError):
    """Raised when a command exits non-zero for any other reason.

    Attributes:
        command: Rendered command string that failed
        exit_status: Exit status reported for the process
        output: Full captured output (stdout and stderr combined)
    """

    def __init__(self, command: str, exit_status: int, output: str = ""):
        """Initialize execution error.

        Args:
            command: Rendered command string
            exit_status: Process exit status
            output: Captured output
        """
        self.command = command
        self.exit_status = exit_status
        self.output = output
        details = {"status_code": exit_status, "output": output}
        super().__init__(f"Command ({command}) failed: {details!r}")


class CommandTimeoutError(GenericExecutionError):
    """Raised when a command is killed after exceeding its timeout.

    Attributes:
        timeout: Timeout in seconds that was exceeded
    """

    def __init__(
        self,
        command: str,
        exit_status: int,
        output: str = "",
        timeout: Optional[float] = None
    ):
        super().__init__(command, exit_status, output)
        self.timeout = timeout

    def __str__(self) -> str:
        """Return string representation of error."""
        base = super().__str__()
        if self.timeout is not None:
            return f"{base} (timed out after {self.timeout}s)"
        return base


class ImageFetchError(MiniMagickError):
    """Raised when image data cannot be read from a stream or URL."""
    pass


class ConfigError(MiniMagickError):
    """Exception raised for configuration errors."""
    pass
