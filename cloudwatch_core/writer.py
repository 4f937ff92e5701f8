"""
Sequenced writer for CloudWatch Logs.

CloudWatch rejects a PutLogEvents call unless it carries the token returned
by the previous write to the same stream. The writer sends one event per
call and advances the token under a lock shared by every sink that targets
the stream.

Fire-and-forget dispatch runs each send on its own daemon thread. Nothing
joins or bounds those threads, and a failed send is only visible through
get_stats(): delivery is at-most-once and best-effort.

The client may log while a send is in progress (botocore and urllib3 do).
When those records find their way back to this writer on the sending thread
they are dropped and counted, since that thread already holds the token lock.
"""

import threading
import time
from contextlib import contextmanager
from typing import Any, Optional

from .levels import LevelFilter


class SequenceTokenHolder:
    """The one authoritative sequence token for a stream, plus its lock."""

    def __init__(self, token: Optional[str] = None):
        self._token = token
        self.lock = threading.Lock()
        self._local = threading.local()

    @property
    def token(self) -> Optional[str]:
        return self._token

    def advance(self, token: Optional[str]) -> None:
        """Store the token returned by a successful write. Caller holds lock."""
        self._token = token

    def held_by_current_thread(self) -> bool:
        """True while this thread is inside a send holding the lock."""
        return getattr(self._local, "sending", False)

    @contextmanager
    def sending(self):
        """Hold the lock and mark this thread as inside a send."""
        with self.lock:
            self._local.sending = True
            try:
                yield
            finally:
                self._local.sending = False


class SequencedWriter:
    """Submits one record per PutLogEvents call with the last-known token."""

    def __init__(
        self,
        client: Any,
        group_name: str,
        stream_name: str,
        token_holder: SequenceTokenHolder,
        level_filter: Optional[LevelFilter] = None,
        async_dispatch: bool = False,
    ):
        self.client = client
        self.group_name = group_name
        self.stream_name = stream_name
        self.token_holder = token_holder
        self.level_filter = level_filter or LevelFilter()
        self.async_dispatch = async_dispatch

        self._stats_lock = threading.Lock()
        self._sent_count = 0
        self._error_count = 0
        self._dropped_count = 0
        self._last_error: Optional[str] = None

    def write(self, level: int, message: str) -> None:
        """
        Ship a rendered message.

        Levels the filter rejects are dropped silently. In synchronous mode
        the client's exception propagates unchanged; in fire-and-forget mode
        this returns as soon as the send thread is started.
        """
        if not self.level_filter.accepts(level):
            return

        if self.token_holder.held_by_current_thread():
            # Logged by the client from inside a send on this thread
            with self._stats_lock:
                self._dropped_count += 1
            return

        event = {
            "timestamp": int(time.time() * 1000),
            "message": message,
        }

        if self.async_dispatch:
            thread = threading.Thread(target=self._send_detached, args=(event,), daemon=True)
            thread.start()
            return

        self._send(event)

    def _send(self, event: dict) -> None:
        params = {
            "logGroupName": self.group_name,
            "logStreamName": self.stream_name,
            "logEvents": [event],
        }
        with self.token_holder.sending():
            token = self.token_holder.token
            # The first write to a fresh stream carries no token
            if token is not None:
                params["sequenceToken"] = token

            try:
                resp = self.client.put_log_events(**params)
            except Exception as e:
                self._record_error(e)
                raise

            self.token_holder.advance(resp.get("nextSequenceToken"))

        with self._stats_lock:
            self._sent_count += 1

    def _send_detached(self, event: dict) -> None:
        try:
            self._send(event)
        except Exception:
            # Already counted in stats; there is no caller to report to
            pass

    def _record_error(self, error: Exception) -> None:
        with self._stats_lock:
            self._error_count += 1
            self._last_error = f"{type(error).__name__}: {error}"

    def get_stats(self) -> dict:
        """Get shipping statistics."""
        with self._stats_lock:
            return {
                "sent_count": self._sent_count,
                "error_count": self._error_count,
                "dropped_count": self._dropped_count,
                "last_error": self._last_error,
            }
