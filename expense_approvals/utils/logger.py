"""
Logging Configuration
Console, application, error and audit sinks for the approvals service
"""

from loguru import logger
import sys
from pathlib import Path

from expense_approvals.config.settings import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"
AUDIT_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | USER_ID={extra[user_id]} | ACTION={extra[action]} | {message}"

_configured = False


def is_audit_record(record) -> bool:
    return "AUDIT" in record["extra"]


def _file_sinks(log_dir: Path):
    """(path, options) for every file sink"""
    return [
        (settings.LOG_FILE, {"format": FILE_FORMAT, "level": settings.LOG_LEVEL, "retention": "30 days"}),
        (log_dir / "error.log", {"format": FILE_FORMAT, "level": "ERROR", "retention": "90 days"}),
        # Approval decisions are kept for a year
        (log_dir / "audit.log", {"format": AUDIT_FORMAT, "filter": is_audit_record, "retention": "365 days"}),
    ]


def setup_logger():
    """
    Setup application logger with file and console output

    Sinks are installed once per process; later calls return the
    already-configured logger. Variable values are only shown in
    tracebacks in DEBUG, since locals there can hold passwords and tokens.

    Returns:
        logger: Configured logger instance
    """
    global _configured
    if _configured:
        return logger

    logger.remove()

    log_dir = Path(settings.LOG_FILE).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    logger.add(
        sys.stdout,
        format=CONSOLE_FORMAT,
        level=settings.LOG_LEVEL,
        colorize=True,
        diagnose=settings.DEBUG,
    )

    for path, options in _file_sinks(log_dir):
        logger.add(path, rotation="10 MB", compression="zip", diagnose=settings.DEBUG, **options)

    _configured = True
    return logger


def log_audit(user_id: int, action: str, **details):
    """
    Log audit trail entry

    Args:
        user_id: User ID who performed the action
        action: Action performed, e.g. register, create_expense, rejected_expense
        **details: Rendered as key=value pairs in a stable order
    """
    rendered = " ".join(f"{key}={details[key]}" for key in sorted(details))
    logger.bind(AUDIT=True, user_id=user_id, action=action, **details).info(rendered)
