"""Call-level timing and logging for arbitrary units of work."""
from callwatch.descriptor import InvocationDescriptor
from callwatch.errors import CallwatchError, RegistrationError, TimingNotFinishedError
from callwatch.interceptor import (
    CallInterceptor,
    get_default_interceptor,
    instrument,
    instrument_async,
    instrumented,
    reset_default_interceptor,
    wrap,
)
from callwatch.monitoring.metrics import TimingRecord, monotonic_clock
from callwatch.registration import instrument_class

__all__ = [
    "CallInterceptor",
    "CallwatchError",
    "InvocationDescriptor",
    "RegistrationError",
    "TimingNotFinishedError",
    "TimingRecord",
    "get_default_interceptor",
    "instrument",
    "instrument_async",
    "instrument_class",
    "instrumented",
    "monotonic_clock",
    "reset_default_interceptor",
    "wrap",
]
