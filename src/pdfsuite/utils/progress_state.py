"""
PdfSuite - Progress State Module

This module provides the processing status of a tool request and a small
tracker used to throttle progress display.
"""

from dataclasses import dataclass, field, replace
from enum import Enum


class ProcessingStatus(Enum):
    """Lifecycle of a single tool request."""

    IDLE = "idle"
    LOADING = "loading"
    PROCESSING = "processing"
    SUCCESS = "success"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (ProcessingStatus.SUCCESS, ProcessingStatus.ERROR)


# Allowed status transitions; a new request starts from a fresh IDLE state
_TRANSITIONS: dict[ProcessingStatus, frozenset[ProcessingStatus]] = {
    ProcessingStatus.IDLE: frozenset({ProcessingStatus.LOADING, ProcessingStatus.PROCESSING}),
    ProcessingStatus.LOADING: frozenset({ProcessingStatus.PROCESSING, ProcessingStatus.ERROR}),
    ProcessingStatus.PROCESSING: frozenset(
        {ProcessingStatus.PROCESSING, ProcessingStatus.SUCCESS, ProcessingStatus.ERROR}
    ),
    ProcessingStatus.SUCCESS: frozenset(),
    ProcessingStatus.ERROR: frozenset(),
}


@dataclass(frozen=True)
class ProcessingState:
    """Immutable snapshot of a request's status.

    Each transition returns a new snapshot; nothing is shared between requests.

    Attributes:
        status: Current lifecycle status
        progress: Progress percentage (0-100)
        message: Status or error text shown to the user
        result_name: File name of the produced artifact, once successful
    """

    status: ProcessingStatus = ProcessingStatus.IDLE
    progress: int = 0
    message: str = ""
    result_name: str = ""

    def _to(self, status: ProcessingStatus, **changes) -> "ProcessingState":
        if status not in _TRANSITIONS[self.status]:
            raise ValueError(f"Invalid status transition: {self.status.value} -> {status.value}")
        return replace(self, status=status, **changes)

    def loading(self, message: str = "") -> "ProcessingState":
        return self._to(ProcessingStatus.LOADING, progress=0, message=message)

    def processing(self, progress: int, message: str = "") -> "ProcessingState":
        """Move to PROCESSING with a clamped progress percentage."""
        progress = max(0, min(100, int(progress)))
        return self._to(ProcessingStatus.PROCESSING, progress=progress, message=message)

    def succeeded(self, result_name: str = "", message: str = "") -> "ProcessingState":
        return self._to(
            ProcessingStatus.SUCCESS, progress=100, message=message, result_name=result_name
        )

    def failed(self, message: str) -> "ProcessingState":
        return self._to(ProcessingStatus.ERROR, progress=0, message=message, result_name="")


def progress_percent(current: int, total: int) -> int:
    """Percentage of *current* out of *total*, rounded like the tools display it."""
    if total <= 0:
        return 100
    return round(current / total * 100)


@dataclass
class ProgressTracker:
    """Track the state of progress display to avoid redundant updates.

    Attributes:
        fraction: Last displayed progress fraction (0.0-1.0)
        text: Last displayed message
    """

    fraction: float = 0.0
    text: str = ""

    # Threshold for progress update (1%)
    _threshold: float = field(default=0.01, repr=False)

    def update(self, current: int, total: int, text: str = "") -> bool:
        """Record new progress, returning True when it is worth displaying.

        Args:
            current: Units completed
            total: Units overall
            text: Message accompanying the progress

        Returns:
            True if the fraction moved by at least 1% or the text changed
        """
        new_fraction = 1.0 if total <= 0 else current / total
        changed = False
        if abs(new_fraction - self.fraction) >= self._threshold or new_fraction >= 1.0:
            self.fraction = new_fraction
            changed = True
        if text and text != self.text:
            self.text = text
            changed = True
        return changed
