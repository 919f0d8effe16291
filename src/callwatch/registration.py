"""
Explicit registration of a class's methods for instrumentation.

Instead of matching every method under a package at runtime, the application
names the classes (and optionally the methods) it wants timed:

    @instrument_class()
    class OrderService:
        def place_order(self, order):
            ...

Each call of ``OrderService().place_order`` is then logged as
``OrderService.place_order``.
"""
import inspect
from typing import Any, Callable, Iterable, List, Optional, Type, TypeVar

from callwatch.descriptor import InvocationDescriptor
from callwatch.errors import RegistrationError
from callwatch.interceptor import CallInterceptor, wrap

C = TypeVar("C", bound=type)

_MISSING = object()


def _is_method(attr: Any) -> bool:
    return isinstance(attr, (staticmethod, classmethod)) or inspect.isfunction(attr)


def _is_generator(attr: Any) -> bool:
    fn = attr.__func__ if isinstance(attr, (staticmethod, classmethod)) else attr
    return inspect.isgeneratorfunction(fn) or inspect.isasyncgenfunction(fn)


def _public_methods(cls: Type[Any]) -> List[str]:
    """Public functions defined directly in the class body, in definition order."""
    return [
        name for name, attr in vars(cls).items()
        if not name.startswith("_") and _is_method(attr) and not _is_generator(attr)
    ]


def _instrument_attr(attr: Any, descriptor: InvocationDescriptor,
                     interceptor: Optional[CallInterceptor]) -> Any:
    if isinstance(attr, staticmethod):
        return staticmethod(wrap(descriptor, attr.__func__, interceptor))
    if isinstance(attr, classmethod):
        return classmethod(wrap(descriptor, attr.__func__, interceptor))
    return wrap(descriptor, attr, interceptor)


def instrument_class(
    group: Optional[str] = None,
    methods: Optional[Iterable[str]] = None,
    interceptor: Optional[CallInterceptor] = None,
) -> Callable[[C], C]:
    """
    Class decorator that instruments the methods of the decorated class.

    Only plain functions, staticmethods and classmethods can be wrapped.
    Properties, ``functools.partialmethod`` objects, ``lru_cache`` wrapped
    methods and other callable descriptors are skipped when ``methods`` is
    omitted. Generator and async generator functions are skipped too, since
    a call only creates the generator and timing it would measure nothing.

    Args:
        group: Group name for every method. Defaults to the class name.
        methods: Names of the methods to instrument; a single string is taken
            as one name. Defaults to every public function, staticmethod and
            classmethod defined in the class body; inherited methods are only
            instrumented when named here.
        interceptor: Interceptor to use instead of the default one

    Returns:
        A decorator that modifies the class in place and returns it

    Raises:
        RegistrationError: If a named method does not exist, is not a
            plain function, staticmethod or classmethod, or is a generator
    """
    def decorator(cls: C) -> C:
        group_name = group or cls.__name__
        if isinstance(methods, str):
            names = [methods]
        elif methods is not None:
            names = list(methods)
        else:
            names = _public_methods(cls)

        for name in names:
            attr = inspect.getattr_static(cls, name, _MISSING)
            if attr is _MISSING:
                raise RegistrationError(f"{cls.__name__} has no attribute '{name}'")
            if not _is_method(attr):
                raise RegistrationError(
                    f"{cls.__name__}.{name} is not a method and cannot be instrumented"
                )
            if _is_generator(attr):
                raise RegistrationError(
                    f"{cls.__name__}.{name} is a generator function and cannot be instrumented"
                )

            descriptor = InvocationDescriptor(group=group_name, operation=name)
            setattr(cls, name, _instrument_attr(attr, descriptor, interceptor))

        return cls

    return decorator
