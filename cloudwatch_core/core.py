"""
CloudWatch sink core.

Usage:
    import boto3
    from cloudwatch_core import CloudWatchCore, CoreConfig

    core = CloudWatchCore(
        CoreConfig(group_name="/app/api", stream_name="web-1"),
        client=boto3.client("logs"),
    )
    request_core = core.with_fields({"request_id": "r123"})
    request_core.handle(record)

Construction registers the log group and stream remotely, so a core that
exists is always ready to write. Cores derived with with_fields() share the
stream, its sequence token and the token's lock with their parent.
"""

import copy
from typing import Any, Callable, Mapping, Optional

from .config import CoreConfig
from .encoding import Encoder, JSONEncoder, LogRecord, NullOutput, Output
from .errors import EncodingError
from .levels import Level, LevelFilter
from .registrar import ensure_log_stream
from .writer import SequencedWriter, SequenceTokenHolder


def _always_enabled(level: Level) -> bool:
    return True


class CloudWatchCore:
    """Ships log records to one CloudWatch Logs stream."""

    def __init__(
        self,
        config: CoreConfig,
        client: Any,
        encoder: Optional[Encoder] = None,
        output: Optional[Output] = None,
        enabled: Optional[Callable[[Level], bool]] = None,
    ):
        """
        Initialize the core and register its stream.

        Args:
            config: Group, stream, dispatch mode and level settings
            client: boto3 CloudWatch Logs client
            encoder: Renders records into message bodies (default: JSONEncoder)
            output: Local output flushed by flush() (default: NullOutput)
            enabled: Extra level gate supplied by the caller

        Raises:
            ValueError: if no client is given
            StreamRegistrationError: if the group or stream cannot be ensured
        """
        if client is None:
            raise ValueError("CloudWatch Logs client required")

        self.config = config
        self.client = client
        self.level_filter = LevelFilter.from_threshold(config.min_level)
        self._enabled = enabled or _always_enabled
        self._encoder = encoder if encoder is not None else JSONEncoder()
        self._output = output if output is not None else NullOutput()

        token = ensure_log_stream(client, config.group_name, config.stream_name)

        self._writer = SequencedWriter(
            client,
            config.group_name,
            config.stream_name,
            SequenceTokenHolder(token),
            level_filter=self.level_filter,
            async_dispatch=config.async_dispatch,
        )

    @property
    def group_name(self) -> str:
        return self.config.group_name

    @property
    def stream_name(self) -> str:
        return self.config.stream_name

    @property
    def sequence_token(self) -> Optional[str]:
        """The token the next write will carry."""
        return self._writer.token_holder.token

    @property
    def encoder(self) -> Encoder:
        return self._encoder

    def should_handle(self, level: int) -> bool:
        """Check whether a record at this level would be shipped."""
        return self._enabled(level) and self.level_filter.accepts(level)

    def handle(self, record: LogRecord, fields: Optional[Mapping[str, Any]] = None) -> None:
        """
        Encode a record and write it to the stream.

        Records above the flush level also flush the output, since the
        process may be about to exit. Flush errors on that path are ignored.

        Raises:
            EncodingError: if the encoder fails; the record is dropped.
            Exception: whatever the client raised, in synchronous mode.
        """
        try:
            message = self._encoder.encode(record, fields)
        except Exception as e:
            raise EncodingError(f"Failed to encode record: {e}") from e

        self._writer.write(record.level, message)

        if record.level > self.config.flush_level:
            try:
                self.flush()
            except Exception:
                pass

    def with_fields(self, fields: Mapping[str, Any]) -> "CloudWatchCore":
        """Return a derived core whose encoder carries the given fields."""
        clone = copy.copy(self)
        clone._encoder = self._encoder.clone()
        for key, value in fields.items():
            clone._encoder.add_field(key, value)
        return clone

    def flush(self) -> None:
        self._output.flush()

    def get_stats(self) -> dict:
        """Get shipping statistics for the stream."""
        return self._writer.get_stats()

    def __repr__(self) -> str:
        return (
            f"CloudWatchCore(group={self.group_name!r}, stream={self.stream_name!r}, "
            f"async={self.config.async_dispatch}, levels={self.level_filter!r})"
        )
