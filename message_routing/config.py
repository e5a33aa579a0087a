"""
Environment-driven settings and loguru sink setup.

Values are read from the process environment after loading the
project-level .env file (if present).
"""

import os
import sys
from typing import Optional

from dotenv import load_dotenv
from loguru import logger
from pydantic import BaseModel

# BASE_DIR = project root (parent of the message_routing package)
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
ENV_PATH = os.path.join(BASE_DIR, ".env")

LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{extra[context]} | {message}"
)

TRACE_MODULE = "message_routing.handlers.exception_handler"


class Settings(BaseModel):
    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_serialize: bool = False
    # per-call outcome lines from the exception handler (DEBUG)
    log_trace: bool = False


def load_settings(env_path: Optional[str] = ENV_PATH) -> Settings:
    if env_path:
        load_dotenv(env_path)
    return Settings(
        log_level=os.getenv("MESSAGE_ROUTING_LOG_LEVEL", "INFO").upper(),
        log_file=os.getenv("MESSAGE_ROUTING_LOG_FILE") or None,
        log_serialize=os.getenv("MESSAGE_ROUTING_LOG_SERIALIZE", "0") == "1",
        log_trace=os.getenv("MESSAGE_ROUTING_LOG_TRACE", "0") == "1",
    )


def configure_logging(settings: Optional[Settings] = None) -> Settings:
    """
    Replace all loguru sinks with the ones described by ``settings``.

    - stderr sink at settings.log_level.
    - Optional file sink when settings.log_file is set.
    - Records without a bound context show "-" in that column.
    - Outcome tracing is enabled only when settings.log_trace is set.

    Raises ValueError for an unknown log level (raised by loguru).
    """
    settings = settings or load_settings()

    logger.remove()
    logger.configure(extra={"context": "-"})
    if settings.log_trace:
        logger.enable(TRACE_MODULE)
    else:
        logger.disable(TRACE_MODULE)
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format=LOG_FORMAT,
        serialize=settings.log_serialize,
    )
    if settings.log_file:
        logger.add(
            settings.log_file,
            level=settings.log_level,
            format=LOG_FORMAT,
            serialize=settings.log_serialize,
        )

    logger.debug(
        "Logging configured: level={}, file={}, serialize={}, trace={}",
        settings.log_level,
        settings.log_file,
        settings.log_serialize,
        settings.log_trace,
    )
    return settings
