"""cloudwatch_core - ship Python log records to AWS CloudWatch Logs."""

from .config import CoreConfig, config_from_env, load_config
from .core import CloudWatchCore
from .encoding import ConsoleEncoder, JSONEncoder, LogRecord, NullOutput, StreamOutput
from .errors import CloudWatchCoreError, EncodingError, StreamRegistrationError
from .handler import CloudWatchHandler, from_env, setup_logging
from .levels import ALL_LEVELS, Level, LevelFilter, level_threshold

__version__ = "1.0.0"

__all__ = [
    "ALL_LEVELS",
    "CloudWatchCore",
    "CloudWatchCoreError",
    "CloudWatchHandler",
    "ConsoleEncoder",
    "CoreConfig",
    "EncodingError",
    "JSONEncoder",
    "Level",
    "LevelFilter",
    "LogRecord",
    "NullOutput",
    "StreamOutput",
    "StreamRegistrationError",
    "config_from_env",
    "from_env",
    "level_threshold",
    "load_config",
    "setup_logging",
]
