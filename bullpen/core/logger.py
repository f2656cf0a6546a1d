"""Logger configuration for the bullpen session engine.

Session code logs with keyword context (``logger.info("Pitch logged",
session_id=..., pitch_number=...)``); loguru stores those keywords in
``record["extra"]``, and the formats below render them after the message.
"""

import sys
from pathlib import Path

from loguru import logger

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"


def _with_context(base: str):
    def _format(record) -> str:
        if not record["extra"]:
            return base + "\n{exception}"
        context = " ".join(f"{key}={{extra[{key}]}}" for key in record["extra"])
        return f"{base} | {context}\n{{exception}}"

    return _format


def setup_logger(
    level: str = "INFO",
    log_file: str | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
    serialize_file: bool = False,
) -> None:
    """Configure loguru with a console sink and an optional rotating file sink.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file. If None, only console logging.
        rotation: Log rotation size (e.g., "10 MB", "1 day")
        retention: Log retention period (e.g., "7 days", "1 month")
        serialize_file: Write the file sink as JSON lines instead of text
    """
    logger.remove()

    logger.add(
        sys.stderr,
        format=_with_context(_CONSOLE_FORMAT),
        level=level,
        colorize=True,
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_path,
            format=_with_context(_FILE_FORMAT),
            level=level,
            rotation=rotation,
            retention=retention,
            compression="zip",
            serialize=serialize_file,
            backtrace=True,
            diagnose=False,
        )

    logger.info(f"Logger initialized with level={level}")
