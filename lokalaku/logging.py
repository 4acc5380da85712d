# lokalaku/logging.py
# structlog setup shared by the API process and the test suite.

import logging
import sys
import structlog
from lokalaku.core.config import settings

# Third-party loggers that install their own handlers; routed to the root logger instead
ROUTED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "httpx", "httpcore")

def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.CallsiteParameterAdder(
            {
                structlog.processors.CallsiteParameter.MODULE,
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            }
        ),
    ]

def configure_logging(level: str | None = None) -> None:
    """
    Console output while developing, one JSON object per line everywhere else.
    Safe to call more than once (every create_app() does).
    """
    level_name = (level or settings.LOG_LEVEL).upper()

    if settings.ENV.lower() == "development":
        renderers = [structlog.dev.ConsoleRenderer()]
    else:
        renderers = [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=_shared_processors() + renderers,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # force=True replaces handlers left by an earlier call
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level_name, force=True)

    for name in ROUTED_LOGGERS:
        routed = logging.getLogger(name)
        routed.handlers = []
        routed.propagate = True

    # Request lines carry the weather API key in the query string
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
