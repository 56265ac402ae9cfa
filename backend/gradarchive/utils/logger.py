import logging
import os
import sys
from pythonjsonlogger import jsonlogger
import contextvars

# Context variables for request correlation
ctx_request_id = contextvars.ContextVar("request_id", default=None)
ctx_username = contextvars.ContextVar("username", default=None)
ctx_stage = contextvars.ContextVar("stage", default=None)

_TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class CorrelationJsonFormatter(jsonlogger.JsonFormatter):
    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        # Inject context variables if present
        request_id = ctx_request_id.get()
        if request_id:
            log_record["request_id"] = request_id

        username = ctx_username.get()
        if username:
            log_record["username"] = username

        stage = ctx_stage.get()
        if stage:
            log_record["stage"] = stage


def _build_formatter(log_format: str) -> logging.Formatter:
    if log_format.lower() == "json":
        return CorrelationJsonFormatter(
            '%(asctime)s %(levelname)s %(name)s %(message)s',
            rename_fields={"levelname": "level", "asctime": "timestamp"}
        )
    return logging.Formatter(_TEXT_FORMAT)


def setup_logger(log_format: str = "text", log_level: str = "INFO", log_dir: str | None = None):
    """Configure the root logger."""
    root_logger = logging.getLogger()

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = _build_formatter(log_format)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        combined = logging.FileHandler(os.path.join(log_dir, "combined.log"))
        combined.setFormatter(formatter)
        root_logger.addHandler(combined)

        errors = logging.FileHandler(os.path.join(log_dir, "error.log"))
        errors.setLevel(logging.ERROR)
        errors.setFormatter(formatter)
        root_logger.addHandler(errors)

    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    root_logger.setLevel(numeric_level)

    # Silence third-party noise
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("alembic").setLevel(logging.WARNING)

    return root_logger
