"""Exceptions raised by cloudwatch_core."""


class CloudWatchCoreError(Exception):
    """Base exception for CloudWatch sink errors."""


class StreamRegistrationError(CloudWatchCoreError):
    """Raised when the log group or log stream cannot be ensured remotely."""


class EncodingError(CloudWatchCoreError):
    """Raised when a record cannot be rendered into a message body."""
