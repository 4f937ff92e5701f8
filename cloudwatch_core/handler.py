"""
Python logging integration for the CloudWatch sink.

Usage:
    import logging
    import boto3
    from cloudwatch_core import CoreConfig, setup_logging

    core = setup_logging(
        CoreConfig(group_name="/app/billing", stream_name="worker-1"),
        client=boto3.client("logs"),
    )

    logger = logging.getLogger(__name__)
    logger.info("Payment processed", extra={"user_id": "u123", "amount": 99.99})
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

import boto3

from .config import CoreConfig, config_from_env
from .core import CloudWatchCore
from .encoding import Encoder, LogRecord, Output
from .levels import Level

# Attributes every stdlib LogRecord carries; anything else came from extra=
_RESERVED_ATTRS = frozenset((
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "taskName", "message", "asctime",
))

# Loggers of the shipping path itself; their records would feed back into it
_SHIPPING_LOGGERS = ("botocore", "boto3", "urllib3", "cloudwatch_core")


def _from_shipping_path(name: str) -> bool:
    return any(name == prefix or name.startswith(prefix + ".") for prefix in _SHIPPING_LOGGERS)


def _extract_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Collect JSON-serializable extra attributes from a log record."""
    fields = {}
    for key, value in record.__dict__.items():
        if key in _RESERVED_ATTRS:
            continue
        if isinstance(value, (str, int, float, bool, type(None))):
            fields[key] = value
        elif isinstance(value, (list, dict)):
            try:
                json.dumps(value)
                fields[key] = value
            except (TypeError, ValueError):
                pass
    return fields


class CloudWatchHandler(logging.Handler):
    """
    Python logging handler that ships records through a CloudWatchCore.

    Integrates with standard Python logging so existing code
    works without modification.
    """

    def __init__(self, core: CloudWatchCore, min_level: int = logging.INFO):
        """
        Initialize the handler.

        Args:
            core: CloudWatchCore instance
            min_level: Minimum stdlib level to pass to the core (default: INFO)
        """
        super().__init__(level=min_level)
        self.core = core

    def emit(self, record: logging.LogRecord):
        """Emit a log record."""
        try:
            if _from_shipping_path(record.name):
                return

            level = Level.from_levelno(record.levelno)
            if level is None or not self.core.should_handle(level):
                return

            entry = LogRecord(
                level=level,
                timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc),
                message=self.format(record),
                logger_name=record.name,
            )
            self.core.handle(entry, _extract_fields(record))

        except Exception:
            self.handleError(record)

    def flush(self):
        """Flush the core's local output."""
        self.acquire()
        try:
            self.core.flush()
        finally:
            self.release()


def setup_logging(
    config: CoreConfig,
    client: Any,
    also_console: bool = True,
    encoder: Optional[Encoder] = None,
    output: Optional[Output] = None,
) -> CloudWatchCore:
    """
    Set up Python logging to ship records to CloudWatch Logs.

    Call this once at startup and all existing logging calls ship to the
    configured stream.

    Args:
        config: Sink configuration
        client: boto3 CloudWatch Logs client
        also_console: Also log to console (default: True)
        encoder: Message encoder (default: JSONEncoder)
        output: Local output flushed on high-severity records

    Returns:
        CloudWatchCore instance (for stats/manual flush)
    """
    core = CloudWatchCore(config, client, encoder=encoder, output=output)

    handler = CloudWatchHandler(core, min_level=config.min_level)
    handler.setFormatter(logging.Formatter("%(message)s"))

    root_logger = logging.getLogger()
    root_logger.addHandler(handler)

    if also_console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        root_logger.addHandler(console_handler)

    if root_logger.level == logging.NOTSET or root_logger.level > config.min_level:
        root_logger.setLevel(config.min_level)

    return core


def from_env(client: Any = None, **overrides: Any) -> CloudWatchCore:
    """
    Create a CloudWatchCore from environment variables.

    See cloudwatch_core.config for the variables read.

    Args:
        client: boto3 CloudWatch Logs client (default: boto3.client("logs"))
        **overrides: group_name/stream_name overriding the env vars

    Returns:
        Configured CloudWatchCore instance
    """
    config = config_from_env(**overrides)

    if client is None:
        client = boto3.client("logs")

    return CloudWatchCore(config, client)
