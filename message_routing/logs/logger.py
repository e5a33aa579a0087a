from typing import Protocol

from loguru import logger


class Logger(Protocol):
    """Collaborator the exception handler reports to."""

    def log_warning(self, message: str, context: str) -> None:
        ...

    def log_exception(self, error: BaseException, context: str) -> None:
        ...


class LoguruLogger:
    """
    Default logger collaborator backed by loguru.

    Every record carries the context label as the ``context`` extra field,
    so sinks can filter or format on it.
    """

    def __init__(self, name: str = "message_routing") -> None:
        self._log = logger.bind(name=name)

    def log_warning(self, message: str, context: str) -> None:
        self._log.bind(context=context).warning("{}: {}", context, message)

    def log_exception(self, error: BaseException, context: str) -> None:
        self._log.bind(context=context).opt(exception=error).error(
            "Unhandled {} in {}: {}", type(error).__name__, context, error
        )
