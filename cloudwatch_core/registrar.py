"""
Remote stream registration for CloudWatch Logs.

Makes sure the target log group and log stream exist before the first write
and recovers the stream's current upload sequence token.
"""

import logging
from typing import Any, Optional

from botocore.exceptions import BotoCoreError, ClientError

from .errors import StreamRegistrationError

logger = logging.getLogger(__name__)

ALREADY_EXISTS = "ResourceAlreadyExistsException"


def _error_code(error: Exception) -> str:
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code", "")
    return ""


def _group_exists(client: Any, group_name: str) -> bool:
    resp = client.describe_log_groups(logGroupNamePrefix=group_name, limit=1)
    return any(g.get("logGroupName") == group_name for g in resp.get("logGroups", []))


def _find_stream(client: Any, group_name: str, stream_name: str) -> Optional[dict]:
    resp = client.describe_log_streams(
        logGroupName=group_name,
        logStreamNamePrefix=stream_name,
    )
    for stream in resp.get("logStreams", []):
        if stream.get("logStreamName") == stream_name:
            return stream
    return None


def _create(create, what: str, group_name: str, stream_name: str, **params) -> None:
    """Run a create call, treating an already-exists race as success."""
    try:
        create(**params)
    except ClientError as e:
        if _error_code(e) != ALREADY_EXISTS:
            raise
        logger.debug("group=%s stream=%s created=%s already_exists=true", group_name, stream_name, what)
    else:
        logger.info("group=%s stream=%s created=%s", group_name, stream_name, what)


def ensure_log_stream(client: Any, group_name: str, stream_name: str) -> Optional[str]:
    """
    Ensure the log group and log stream exist and return the stream's token.

    Args:
        client: boto3 CloudWatch Logs client (or anything with the same calls)
        group_name: Log group name
        stream_name: Log stream name within the group

    Returns:
        The stream's upload sequence token, or None for a fresh stream.

    Raises:
        StreamRegistrationError: if any remote call fails.
    """
    try:
        if not _group_exists(client, group_name):
            _create(
                client.create_log_group, "group", group_name, stream_name,
                logGroupName=group_name,
            )

        stream = _find_stream(client, group_name, stream_name)
        if stream is not None:
            token = stream.get("uploadSequenceToken")
            logger.debug(
                "group=%s stream=%s registered=existing has_token=%s",
                group_name, stream_name, token is not None,
            )
            return token

        # A new stream has no token until its first write
        _create(
            client.create_log_stream, "stream", group_name, stream_name,
            logGroupName=group_name,
            logStreamName=stream_name,
        )
        return None

    except (ClientError, BotoCoreError) as e:
        logger.error(
            "group=%s stream=%s registration=failed error_type=%s",
            group_name, stream_name, type(e).__name__,
        )
        raise StreamRegistrationError(
            f"Cannot register log stream {group_name}/{stream_name}: {e}"
        ) from e
