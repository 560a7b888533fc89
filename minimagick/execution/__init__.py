"""Command execution and result classification."""

from minimagick.execution.runner import (
    TIMEOUT_EXIT_STATUS,
    ExecutionResult,
    ProcessRunner,
    SubprocessRunner,
)
from minimagick.execution.classifier import (
    INVALID_INPUT_MARKERS,
    Outcome,
    OutcomeKind,
    classify,
)
from minimagick.execution.executor import Executor

__all__ = [
    "TIMEOUT_EXIT_STATUS",
    "ExecutionResult",
    "ProcessRunner",
    "SubprocessRunner",
    "INVALID_INPUT_MARKERS",
    "Outcome",
    "OutcomeKind",
    "classify",
    "Executor",
]
