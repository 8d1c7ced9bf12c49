import os
import re
import sys

from loguru import logger

# httpx errors echo the request URL; Etherscan carries its key in the query string
_SECRET_PATTERNS = [
    (re.compile(r"(apikey=)[^&\s'\"]+", re.IGNORECASE), r"\1***"),
    (re.compile(r"(Bearer\s+)[A-Za-z0-9._\-]+"), r"\1***"),
    (re.compile(r"(x-cg-demo-api-key['\"]?:\s*['\"]?)[^'\"\s,}]+", re.IGNORECASE), r"\1***"),
]


def redact(message: str) -> str:
    """Mask upstream API keys in a log message."""
    for pattern, repl in _SECRET_PATTERNS:
        message = pattern.sub(repl, message)
    return message


def _redact_record(record: dict) -> None:
    record["message"] = redact(record["message"])


def setup_logger(*, json_logs: bool = False, level: str = "INFO") -> None:
    """Configure loguru for the application.

    Console level controlled by LOG_LEVEL env (default: INFO).
    File always captures DEBUG so per-source misses and timeouts can be traced.
    Every record passes through ``redact`` before reaching a sink.
    """
    console_level = os.getenv("LOG_LEVEL", level).upper()
    logger.remove()
    logger.configure(patcher=_redact_record)

    if json_logs:
        logger.add(sys.stdout, serialize=True, level=console_level)
    else:
        logger.add(
            sys.stdout,
            format=(
                "<green>{time:HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
                "<level>{message}</level>"
            ),
            level=console_level,
            colorize=True,
        )

    logger.add(
        "logs/scam_detector_{time:YYYY-MM-DD}.log",
        rotation="50 MB",
        retention="3 days",
        compression="gz",
        level="DEBUG",
        serialize=json_logs,
    )
