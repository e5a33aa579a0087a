import sys
from enum import Enum
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict

UNKNOWN_CONTEXT = "<unknown>"


# ------------------------------------------------------------
# Per-call options
# ------------------------------------------------------------
class InvocationOptions(BaseModel):
    """Named settings for a single guarded call."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    suppress_on_error: bool = True
    on_error: Optional[Callable[[BaseException], Any]] = None
    # None -> derived from the call stack
    context: Optional[str] = None
    default: Any = None
    # called per fallback; takes precedence over default
    default_factory: Optional[Callable[[], Any]] = None


# ------------------------------------------------------------
# Terminal states of a call
# ------------------------------------------------------------
class Outcome(str, Enum):
    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED_SUPPRESSED = "failed-suppressed"
    FAILED_PROPAGATED = "failed-propagated"


def caller_name(depth: int = 2) -> str:
    """
    Return the name of the function ``depth`` frames above this one.

    With the default depth, a method calling ``caller_name()`` gets the
    name of whoever called that method.
    """
    try:
        frame = sys._getframe(depth)
    except ValueError:
        return UNKNOWN_CONTEXT
    return frame.f_code.co_name


def fallback(default: Any, default_factory: Optional[Callable[[], Any]] = None) -> Any:
    """Value handed back when there is no result: a fresh one from
    ``default_factory`` if given, otherwise ``default`` itself."""
    if default_factory is not None:
        return default_factory()
    return default
