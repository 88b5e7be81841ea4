import logging
import sys

from pythonjsonlogger import jsonlogger

from .config import get_settings

PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

_configured = False


def setup_logging(level: str | None = None, json_output: bool | None = None) -> logging.Logger:
    """
    Configure root and uvicorn logging once and return the root logger.

    JSON lines on stdout by default (``log_json`` setting); the plain format
    is easier to read when running the session client in a terminal.
    """
    global _configured
    root_logger = logging.getLogger()
    if _configured:
        return root_logger

    settings = get_settings()
    level_name = (level or settings.log_level).upper()
    use_json = settings.log_json if json_output is None else json_output

    if use_json:
        formatter: logging.Formatter = jsonlogger.JsonFormatter(JSON_FORMAT)
    else:
        formatter = logging.Formatter(PLAIN_FORMAT)
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)

    log_level = getattr(logging, level_name, logging.INFO)
    root_logger.setLevel(log_level)
    root_logger.handlers = []
    root_logger.addHandler(stream_handler)

    for logger_name in ["uvicorn", "uvicorn.access", "uvicorn.error"]:
        u_logger = logging.getLogger(logger_name)
        u_logger.setLevel(log_level)
        u_logger.handlers = []
        u_logger.addHandler(stream_handler)
        u_logger.propagate = False

    # The SDKs log every request at INFO.
    for noisy in ("openai", "httpx", "httpcore", "botocore", "boto3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    _configured = True
    return root_logger
