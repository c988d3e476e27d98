"""Log output for the collectible service.

JSON lines in deployments, the console renderer when `LCC_LOG_FORMAT` is
anything else. `LCC_LOG_LEVEL` applies to the `lcc` logger tree.
"""

import logging

import structlog

from lcc.config import Settings


def setup_logging(settings: Settings) -> None:
    """Install the structlog pipeline and the `lcc` log level."""
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if settings.log_format == "json" else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # the snapshot store and quest modules log through plain lcc.* loggers
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    logging.getLogger("lcc").setLevel(level)
