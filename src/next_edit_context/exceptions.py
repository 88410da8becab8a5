# next_edit_context/exceptions.py
"""
Exceptions raised by the next-edit context core.

Recoverable conditions (a section that does not fit its budget, a missing
intent tag, a blank baseline document) are reported through result models
instead. The exceptions here mark caller mistakes and cancellation.
"""

from collections.abc import Callable

# Host callback polled between history iterations
CancelCheck = Callable[[], bool]


class NextEditError(Exception):
    """Base class for all next-edit context errors."""


class InvalidOptionsError(NextEditError, ValueError):
    """Raised when prompt options cannot be used (e.g. a non-positive page size)."""


class UnknownPromptingStrategyError(NextEditError, KeyError):
    """Raised when a prompting strategy has no registered formatter."""

    def __init__(self, strategy: object):
        self.strategy = strategy
        super().__init__(f"Unknown prompting strategy: {strategy}")

    def __str__(self) -> str:
        return self.args[0]


class AssemblyCancelledError(NextEditError):
    """Raised when the host cancels prompt assembly between history iterations."""


def raise_if_cancelled(should_cancel: CancelCheck | None) -> None:
    """Raise ``AssemblyCancelledError`` when the host's cancellation callback says so."""
    if should_cancel is not None and should_cancel():
        raise AssemblyCancelledError("Prompt assembly was cancelled")
