"""Monotonic timing of a single call."""
import time
from dataclasses import dataclass
from typing import Callable, Optional

from callwatch.errors import TimingNotFinishedError

# A clock returns integer nanoseconds from a monotonic source
Clock = Callable[[], int]

NANOS_PER_MILLI = 1_000_000


def monotonic_clock() -> int:
    """Default clock: the high resolution performance counter, in ns."""
    return time.perf_counter_ns()


@dataclass
class TimingRecord:
    """
    Start and end readings of one invocation, taken from the same clock.

    Lives only for the duration of a single call.
    """

    start_ns: int
    end_ns: Optional[int] = None

    @classmethod
    def begin(cls, clock: Clock = monotonic_clock) -> "TimingRecord":
        return cls(start_ns=clock())

    def finish(self, clock: Clock = monotonic_clock) -> "TimingRecord":
        self.end_ns = clock()
        return self

    @property
    def finished(self) -> bool:
        return self.end_ns is not None

    @property
    def elapsed_ms(self) -> int:
        """Elapsed time in whole milliseconds, truncated and never negative."""
        if self.end_ns is None:
            raise TimingNotFinishedError("Timing record has not been finished")
        return max(0, self.end_ns - self.start_ns) // NANOS_PER_MILLI
