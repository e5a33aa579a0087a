"""
Guarded invocation of caller-supplied functions.

ExceptionHandler runs a zero-argument function, intercepts any failure,
routes it to a custom handler or the logger collaborator, and then either
returns a default value or re-raises the original exception.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional, TypeVar

from loguru import logger

from message_routing.core.invocation import (
    InvocationOptions,
    Outcome,
    caller_name,
    fallback,
)
from message_routing.logs.logger import Logger, LoguruLogger

T = TypeVar("T")

ErrorHandler = Callable[[BaseException], Any]
DefaultFactory = Callable[[], Any]

NULL_FUNCTION_MESSAGE = "The function delegate to execute was null"

# Cancellation is routed like any other failure.
INTERCEPTED = (Exception, asyncio.CancelledError)

# Per-call outcome tracing is opt-in (see config.configure_logging).
logger.disable(__name__)


class ExceptionHandler:
    """
    Execute potentially unsafe functions and handle failures cleanly.

    - get / get_async return the function's value, or ``default`` (the very
      object passed in) when the failure is suppressed. Pass
      ``default_factory`` instead to build a new value per fallback.
    - execute / execute_async are fire-and-forget: failures never propagate.
    - on_error, when given, fully replaces logging for that call.
    - context labels log entries; when None it is the caller's function name.
    """

    def __init__(self, logger: Optional[Logger] = None) -> None:
        self._logger: Logger = logger if logger is not None else LoguruLogger()

    # ------------------------------------------------------------------ #
    # Value-returning variants
    # ------------------------------------------------------------------ #

    def get(
        self,
        fn: Optional[Callable[[], T]],
        suppress_on_error: bool = True,
        on_error: Optional[ErrorHandler] = None,
        context: Optional[str] = None,
        default: Any = None,
        default_factory: Optional[DefaultFactory] = None,
    ) -> T:
        """
        Run ``fn`` and return its result.

        Set suppress_on_error=False to re-raise after the failure has been
        handled; otherwise the fallback value is returned.
        """
        if context is None:
            context = caller_name()
        if fn is None:
            self._warn_null(context)
            return fallback(default, default_factory)

        try:
            result = fn()
        except INTERCEPTED as exc:
            self._route(exc, on_error, context)
            if not suppress_on_error:
                _trace(context, Outcome.FAILED_PROPAGATED)
                raise
            _trace(context, Outcome.FAILED_SUPPRESSED)
            return fallback(default, default_factory)

        _trace(context, Outcome.SUCCEEDED)
        return result

    def get_async(
        self,
        fn: Optional[Callable[[], Awaitable[T]]],
        suppress_on_error: bool = True,
        on_error: Optional[ErrorHandler] = None,
        context: Optional[str] = None,
        default: Any = None,
        default_factory: Optional[DefaultFactory] = None,
    ) -> Awaitable[T]:
        """
        Asynchronous counterpart of get.

        The context is resolved and a missing function is reported when this
        method is called, not when the returned awaitable is awaited.
        """
        if context is None:
            context = caller_name()
        if fn is None:
            self._warn_null(context)
            return _resolved(fallback(default, default_factory))
        return self._get_async(
            fn, suppress_on_error, on_error, context, default, default_factory
        )

    def run(self, fn: Optional[Callable[[], T]], options: InvocationOptions) -> T:
        """Run ``fn`` with settings taken from an InvocationOptions."""
        return self.get(
            fn,
            suppress_on_error=options.suppress_on_error,
            on_error=options.on_error,
            context=options.context if options.context is not None else caller_name(),
            default=options.default,
            default_factory=options.default_factory,
        )

    # ------------------------------------------------------------------ #
    # Fire-and-forget variants
    # ------------------------------------------------------------------ #

    def execute(
        self,
        fn: Optional[Callable[[], Any]],
        on_error: Optional[ErrorHandler] = None,
        context: Optional[str] = None,
    ) -> None:
        """Run ``fn`` for its side effects; failures are always absorbed."""
        if context is None:
            context = caller_name()
        if fn is None:
            self._warn_null(context)
            return

        try:
            fn()
        except INTERCEPTED as exc:
            self._route(exc, on_error, context)
            _trace(context, Outcome.FAILED_SUPPRESSED)
            return

        _trace(context, Outcome.SUCCEEDED)

    def execute_async(
        self,
        fn: Optional[Callable[[], Awaitable[Any]]],
        on_error: Optional[ErrorHandler] = None,
        context: Optional[str] = None,
    ) -> Awaitable[None]:
        if context is None:
            context = caller_name()
        if fn is None:
            self._warn_null(context)
            return _resolved(None)
        return self._execute_async(fn, on_error, context)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    async def _get_async(
        self,
        fn: Callable[[], Awaitable[T]],
        suppress_on_error: bool,
        on_error: Optional[ErrorHandler],
        context: str,
        default: Any,
        default_factory: Optional[DefaultFactory],
    ) -> T:
        try:
            result = await _call_and_await(fn)
        except INTERCEPTED as exc:
            self._route(exc, on_error, context)
            if not suppress_on_error:
                _trace(context, Outcome.FAILED_PROPAGATED)
                raise
            _trace(context, Outcome.FAILED_SUPPRESSED)
            return fallback(default, default_factory)

        _trace(context, Outcome.SUCCEEDED)
        return result

    async def _execute_async(
        self,
        fn: Callable[[], Awaitable[Any]],
        on_error: Optional[ErrorHandler],
        context: str,
    ) -> None:
        try:
            await _call_and_await(fn)
        except INTERCEPTED as exc:
            self._route(exc, on_error, context)
            _trace(context, Outcome.FAILED_SUPPRESSED)
            return

        _trace(context, Outcome.SUCCEEDED)

    def _route(
        self, exc: BaseException, on_error: Optional[ErrorHandler], context: str
    ) -> None:
        if on_error is not None:
            on_error(exc)
        else:
            self._logger.log_exception(exc, context)

    def _warn_null(self, context: str) -> None:
        self._logger.log_warning(NULL_FUNCTION_MESSAGE, context)
        _trace(context, Outcome.SKIPPED)


async def _call_and_await(fn: Callable[[], Any]) -> Any:
    result = fn()
    if inspect.isawaitable(result):
        return await result
    return result


async def _resolved(value: T) -> T:
    return value


def _trace(context: str, outcome: Outcome) -> None:
    logger.debug("guarded call in {} -> {}", context, outcome.value)
