"""
Call interceptor: logs entry, elapsed time and exit around a unit of work.

A unit of work is a zero-argument callable. Its result is returned as is.
If it raises, the exception reaches the caller untouched and only the
"starts" line will have been logged; the timing and "ends" lines are
written on the success path only.

Example:
    descriptor = InvocationDescriptor(group="OrderService", operation="placeOrder")
    result = instrument(descriptor, lambda: service.place_order(order))
"""
import functools
import inspect
import logging
import threading
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from callwatch.config import get_config
from callwatch.descriptor import InvocationDescriptor
from callwatch.monitoring.logger import get_logger
from callwatch.monitoring.metrics import Clock, TimingRecord, monotonic_clock

R = TypeVar("R")

START_MESSAGE = "==> %s starts ..."
ELAPSED_MESSAGE = "==> Execution time of %s :: %d ms"
END_MESSAGE = "==> %s ends ..."


class CallInterceptor:
    """
    Stateless wrapper that times and logs invocations.

    Nothing is stored between calls, so one instance can serve any number of
    concurrent callers; the logging handler serializes the writes.
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        clock: Optional[Clock] = None,
        enabled: Optional[bool] = None,
    ):
        """
        Args:
            logger: Sink for the log lines. Defaults to the LOGGER_NAME logger,
                whose level and format are set from the current settings.
            clock: Monotonic nanosecond clock. Defaults to the performance counter.
            enabled: When False, units of work run without logging or timing.
                Defaults to the INTERCEPTOR_ENABLED setting.
        """
        config = get_config()
        if logger is None:
            logger = get_logger(config.LOGGER_NAME, reconfigure=True)
        self.logger = logger
        self.clock = clock if clock is not None else monotonic_clock
        self.enabled = config.INTERCEPTOR_ENABLED if enabled is None else enabled

    def __call__(self, descriptor: InvocationDescriptor, unit_of_work: Callable[[], R]) -> R:
        if not self.enabled:
            return unit_of_work()

        self._log_start(descriptor)
        timing = TimingRecord.begin(self.clock)
        try:
            result = unit_of_work()
        finally:
            timing.finish(self.clock)
        self._log_completion(descriptor, timing)
        return result

    async def run_async(
        self,
        descriptor: InvocationDescriptor,
        awaitable_factory: Callable[[], Awaitable[R]],
    ) -> R:
        """Coroutine variant of ``__call__``; the factory is called and awaited once."""
        if not self.enabled:
            return await awaitable_factory()

        self._log_start(descriptor)
        timing = TimingRecord.begin(self.clock)
        try:
            result = await awaitable_factory()
        finally:
            timing.finish(self.clock)
        self._log_completion(descriptor, timing)
        return result

    def wrap(self, descriptor: InvocationDescriptor, fn: Callable[..., Any]) -> Callable[..., Any]:
        """Return ``fn`` wrapped so that each call goes through this interceptor."""
        return wrap(descriptor, fn, interceptor=self)

    def _log_start(self, descriptor: InvocationDescriptor) -> None:
        self.logger.info(START_MESSAGE, descriptor.qualified_name, extra=_extra(descriptor))

    def _log_completion(self, descriptor: InvocationDescriptor, timing: TimingRecord) -> None:
        elapsed = timing.elapsed_ms
        self.logger.info(
            ELAPSED_MESSAGE,
            descriptor.qualified_name,
            elapsed,
            extra=_extra(descriptor, elapsed_ms=elapsed),
        )
        self.logger.info(END_MESSAGE, descriptor.qualified_name, extra=_extra(descriptor))


def _extra(descriptor: InvocationDescriptor, **fields: Any) -> Dict[str, Any]:
    extra = {"call_group": descriptor.group, "call_operation": descriptor.operation}
    extra.update(fields)
    return extra


_default_interceptor: Optional[CallInterceptor] = None
_default_lock = threading.Lock()


def get_default_interceptor() -> CallInterceptor:
    """Get the process-wide interceptor, building it from settings on first use."""
    global _default_interceptor
    interceptor = _default_interceptor
    if interceptor is None:
        with _default_lock:
            if _default_interceptor is None:
                _default_interceptor = CallInterceptor()
            interceptor = _default_interceptor
    return interceptor


def reset_default_interceptor() -> None:
    """
    Drop the process-wide interceptor so it is rebuilt from current settings.

    The rebuild re-reads LOGGER_NAME and INTERCEPTOR_ENABLED and applies
    LOG_LEVEL and LOG_FORMAT to the logger's stdout handler.
    """
    global _default_interceptor
    with _default_lock:
        _default_interceptor = None


def _resolve(
    interceptor: Optional[CallInterceptor],
    logger: Optional[logging.Logger] = None,
    clock: Optional[Clock] = None,
) -> CallInterceptor:
    base = interceptor if interceptor is not None else get_default_interceptor()
    if logger is None and clock is None:
        return base
    return CallInterceptor(
        logger=logger if logger is not None else base.logger,
        clock=clock if clock is not None else base.clock,
        enabled=base.enabled,
    )


def instrument(
    descriptor: InvocationDescriptor,
    unit_of_work: Callable[[], R],
    *,
    logger: Optional[logging.Logger] = None,
    clock: Optional[Clock] = None,
) -> R:
    """
    Run ``unit_of_work`` once, logging its start, elapsed time and end.

    Args:
        descriptor: Name of the unit of work
        unit_of_work: Zero-argument callable to execute
        logger: Optional logger for this call only
        clock: Optional nanosecond clock for this call only

    Returns:
        Whatever ``unit_of_work`` returns

    Raises:
        Whatever ``unit_of_work`` raises, unchanged
    """
    return _resolve(None, logger, clock)(descriptor, unit_of_work)


async def instrument_async(
    descriptor: InvocationDescriptor,
    awaitable_factory: Callable[[], Awaitable[R]],
    *,
    logger: Optional[logging.Logger] = None,
    clock: Optional[Clock] = None,
) -> R:
    """Await ``awaitable_factory()`` with the same logging as ``instrument``."""
    return await _resolve(None, logger, clock).run_async(descriptor, awaitable_factory)


def wrap(
    descriptor: InvocationDescriptor,
    fn: Callable[..., Any],
    interceptor: Optional[CallInterceptor] = None,
) -> Callable[..., Any]:
    """
    Wrap ``fn`` so that every call to it is instrumented under ``descriptor``.

    Coroutine functions get a coroutine wrapper. Without an explicit
    interceptor the default one is looked up on each call, so
    ``reset_default_interceptor`` affects already wrapped functions.
    """
    if inspect.iscoroutinefunction(fn):
        @functools.wraps(fn)
        async def async_wrapper(*args, **kwargs):
            return await _resolve(interceptor).run_async(
                descriptor, functools.partial(fn, *args, **kwargs)
            )

        return async_wrapper

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        return _resolve(interceptor)(descriptor, functools.partial(fn, *args, **kwargs))

    return wrapper


def instrumented(
    group: str,
    operation: Optional[str] = None,
    *,
    interceptor: Optional[CallInterceptor] = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator that instruments every call of the decorated function.

    Example:
        @instrumented("OrderService", "placeOrder")
        def place_order(order):
            ...

    Args:
        group: Logical group, e.g. the owning service
        operation: Operation name. Defaults to the function's ``__name__``.
        interceptor: Interceptor to use instead of the default one
    """
    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        descriptor = InvocationDescriptor(group=group, operation=operation or fn.__name__)
        return wrap(descriptor, fn, interceptor=interceptor)

    return decorator
