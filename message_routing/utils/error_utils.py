import inspect
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

from message_routing.handlers.exception_handler import ErrorHandler, ExceptionHandler

T = TypeVar("T")


def safe_execute(
    default: Any = None,
    default_factory: Optional[Callable[[], Any]] = None,
    suppress_on_error: bool = True,
    on_error: Optional[ErrorHandler] = None,
    handler: Optional[ExceptionHandler] = None,
):
    """Decorator routing every call through an ExceptionHandler."""
    guard = handler if handler is not None else ExceptionHandler()

    def decorator(fn: Callable[..., T]) -> Callable[..., T]:
        context = fn.__qualname__

        if inspect.iscoroutinefunction(fn):
            @wraps(fn)
            async def async_wrapper(*args: Any, **kwargs: Any) -> T:
                return await guard.get_async(
                    lambda: fn(*args, **kwargs),
                    suppress_on_error=suppress_on_error,
                    on_error=on_error,
                    context=context,
                    default=default,
                    default_factory=default_factory,
                )
            return async_wrapper

        @wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            return guard.get(
                lambda: fn(*args, **kwargs),
                suppress_on_error=suppress_on_error,
                on_error=on_error,
                context=context,
                default=default,
                default_factory=default_factory,
            )
        return wrapper
    return decorator
