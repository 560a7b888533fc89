"""Classification of command results into outcome kinds.

The tool suite has no structured error channel, so invalid input is
recognized from its diagnostic text. The markers below match the wording
ImageMagick 6 and 7 print when a file cannot be decoded; keep every marker
in INVALID_INPUT_MARKERS so wording changes in the tool are a one-line fix.
"""

from dataclasses import dataclass
from enum import Enum

from minimagick.execution.runner import ExecutionResult

INVALID_INPUT_MARKERS = (
    "no decode delegate",
    "did not return an image",
)


class OutcomeKind(Enum):
    """Classification of a finished command."""
    SUCCESS = "success"
    INVALID_INPUT = "invalid_input"
    GENERIC_ERROR = "generic_error"


@dataclass(frozen=True)
class Outcome:
    """Classified result of one command.

    Attributes:
        kind: Outcome classification
        output: Captured output (returned on success, diagnostic otherwise)
        exit_status: Process exit status
    """
    kind: OutcomeKind
    output: str
    exit_status: int

    @property
    def succeeded(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS


def is_invalid_input(output: str) -> bool:
    """Check captured output for an invalid-input marker (case-insensitive)."""
    text = output.lower()
    return any(marker in text for marker in INVALID_INPUT_MARKERS)


def classify(result: ExecutionResult) -> Outcome:
    """Classify an execution result.

    Args:
        result: Result reported by the process runner

    Returns:
        SUCCESS for exit status 0, INVALID_INPUT when a non-zero exit carries
        an invalid-input marker, GENERIC_ERROR otherwise
    """
    if result.exit_status == 0:
        kind = OutcomeKind.SUCCESS
    elif is_invalid_input(result.output):
        kind = OutcomeKind.INVALID_INPUT
    else:
        kind = OutcomeKind.GENERIC_ERROR
    return Outcome(kind=kind, output=result.output, exit_status=result.exit_status)
