import os
import sys

from loguru import logger

LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | diary-bot | "
    "{name}:{function}:{line} - {message}"
)


def setup_logging() -> None:
    from src.config import settings

    log_dir = os.path.dirname(settings.log_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    level = settings.log_level.upper()
    logger.remove()
    logger.add(sys.stdout, level=level, format=LOG_FORMAT)
    logger.add(
        settings.log_path,
        rotation="10 MB",
        retention=settings.log_retention,
        level=level,
        format=LOG_FORMAT,
        encoding="utf-8",
    )
