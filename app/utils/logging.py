import inspect
import logging
import sys

from loguru import logger


class InterceptHandler(logging.Handler):
    """Route records from stdlib loggers (discord.py, uvicorn, sqlalchemy) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(filename: str, *, level: str = "INFO") -> None:
    logger.remove()
    logger.add(sys.stderr, level=level)
    logger.add(f"logs/{filename}", level="DEBUG", rotation="5 MB", retention=5, encoding="utf-8")

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ("discord", "uvicorn", "uvicorn.error", "uvicorn.access"):
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False
