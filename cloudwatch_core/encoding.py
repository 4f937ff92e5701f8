"""
Log records, encoders and outputs.

An encoder renders a LogRecord plus fields into the message body shipped to
CloudWatch. Encoders accumulate context fields (see CloudWatchCore.with_fields)
and must be cloneable so derived sinks never share that state.
"""

import json
import sys
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional, Protocol, TextIO, runtime_checkable

from .levels import Level


@dataclass(frozen=True)
class LogRecord:
    """A record handed to the sink by the logging pipeline."""

    level: Level
    timestamp: datetime
    message: str
    logger_name: Optional[str] = None
    fields: Mapping[str, Any] = field(default_factory=dict)


@runtime_checkable
class Encoder(Protocol):
    def encode(self, record: LogRecord, fields: Optional[Mapping[str, Any]] = None) -> str: ...

    def clone(self) -> "Encoder": ...

    def add_field(self, key: str, value: Any) -> None: ...


@runtime_checkable
class Output(Protocol):
    def flush(self) -> None: ...


class _FieldEncoder:
    """Shared field accumulation for the bundled encoders."""

    def __init__(self, fields: Optional[Mapping[str, Any]] = None):
        self._fields: dict[str, Any] = dict(fields or {})

    @property
    def fields(self) -> dict[str, Any]:
        return dict(self._fields)

    def add_field(self, key: str, value: Any) -> None:
        self._fields[key] = value

    def clone(self):
        return type(self)(self._fields)

    def _merged(self, record: LogRecord, fields: Optional[Mapping[str, Any]]) -> dict[str, Any]:
        merged = dict(self._fields)
        merged.update(record.fields)
        if fields:
            merged.update(fields)
        return merged


class JSONEncoder(_FieldEncoder):
    """Renders one JSON object per record."""

    def encode(self, record: LogRecord, fields: Optional[Mapping[str, Any]] = None) -> str:
        entry: dict[str, Any] = {
            "timestamp": record.timestamp.isoformat(),
            "level": record.level.name,
        }
        if record.logger_name:
            entry["logger"] = record.logger_name
        entry["message"] = record.message

        for key, value in self._merged(record, fields).items():
            # Reserved keys keep their record values
            if key not in entry:
                entry[key] = value

        return json.dumps(entry, default=str)


class ConsoleEncoder(_FieldEncoder):
    """Renders tab-separated text, fields as trailing key=value pairs."""

    def encode(self, record: LogRecord, fields: Optional[Mapping[str, Any]] = None) -> str:
        parts = [record.timestamp.isoformat(), record.level.name]
        if record.logger_name:
            parts.append(record.logger_name)
        parts.append(record.message)

        merged = self._merged(record, fields)
        if merged:
            parts.append(" ".join(f"{k}={v}" for k, v in merged.items()))
        return "\t".join(parts)


class StreamOutput:
    """Output backed by a text stream."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream if stream is not None else sys.stderr

    def flush(self) -> None:
        self.stream.flush()


class NullOutput:
    """Output with nothing to flush."""

    def flush(self) -> None:
        pass
