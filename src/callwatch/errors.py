"""Exceptions raised by callwatch itself.

Failures of an instrumented unit of work are never wrapped in these; they
reach the caller unchanged.
"""


class CallwatchError(Exception):
    """Base exception for callwatch errors."""
    pass


class RegistrationError(CallwatchError):
    """Raised when a class cannot be registered for instrumentation."""
    pass


class TimingNotFinishedError(CallwatchError):
    """Raised when elapsed time is read from an unfinished timing record."""
    pass
