"""
Pytest fixtures for cloudwatch_core tests.
"""

import logging
import threading

import boto3
import pytest
from botocore.exceptions import ClientError

from cloudwatch_core import CoreConfig


def client_error(code: str = "ServiceUnavailableException", operation: str = "PutLogEvents") -> ClientError:
    """Build a botocore ClientError like the CloudWatch Logs API raises."""
    return ClientError(
        {"Error": {"Code": code, "Message": f"{code} (test)"}},
        operation,
    )


class FakeLogsClient:
    """
    In-memory stand-in for a boto3 CloudWatch Logs client.

    put_log_events returns tokens t1, t2, ... in call order.
    """

    def __init__(self, groups=None, streams=None):
        self.groups = set(groups or ())
        # (group, stream) -> upload sequence token
        self.streams = dict(streams or {})
        self.calls: list[tuple[str, dict]] = []
        self.errors: dict[str, Exception] = {}
        self.put_errors: list[Exception] = []
        self.fail_all_puts: Exception | None = None
        self.put_gate: threading.Event | None = None
        self._lock = threading.Lock()
        self._put_count = 0

    def _record(self, op: str, kwargs: dict) -> None:
        with self._lock:
            self.calls.append((op, kwargs))
        if op in self.errors:
            raise self.errors[op]

    def calls_to(self, op: str) -> list[dict]:
        return [kwargs for name, kwargs in self.calls if name == op]

    def describe_log_groups(self, **kwargs):
        self._record("describe_log_groups", kwargs)
        prefix = kwargs.get("logGroupNamePrefix", "")
        names = sorted(g for g in self.groups if g.startswith(prefix))
        names = names[: kwargs.get("limit", 50)]
        return {"logGroups": [{"logGroupName": n} for n in names]}

    def create_log_group(self, **kwargs):
        self._record("create_log_group", kwargs)
        self.groups.add(kwargs["logGroupName"])
        return {}

    def describe_log_streams(self, **kwargs):
        self._record("describe_log_streams", kwargs)
        group = kwargs["logGroupName"]
        prefix = kwargs.get("logStreamNamePrefix", "")
        streams = []
        for (g, s), token in sorted(self.streams.items()):
            if g == group and s.startswith(prefix):
                stream = {"logStreamName": s}
                if token is not None:
                    stream["uploadSequenceToken"] = token
                streams.append(stream)
        return {"logStreams": streams}

    def create_log_stream(self, **kwargs):
        self._record("create_log_stream", kwargs)
        self.streams[(kwargs["logGroupName"], kwargs["logStreamName"])] = None
        return {}

    def put_log_events(self, **kwargs):
        if self.put_gate is not None:
            self.put_gate.wait(5)
        self._record("put_log_events", kwargs)
        with self._lock:
            if self.fail_all_puts is not None:
                raise self.fail_all_puts
            if self.put_errors:
                raise self.put_errors.pop(0)
            self._put_count += 1
            return {"nextSequenceToken": f"t{self._put_count}"}

    @property
    def messages(self) -> list[str]:
        return [kwargs["logEvents"][0]["message"] for kwargs in self.calls_to("put_log_events")]


class LoggingLogsClient(FakeLogsClient):
    """Fake client that logs from inside put_log_events, as botocore does."""

    def __init__(self, logger_name: str = "botocore.endpoint", **kwargs):
        super().__init__(**kwargs)
        self.logger = logging.getLogger(logger_name)

    def put_log_events(self, **kwargs):
        self.logger.debug("Making request for OperationModel(name=PutLogEvents)")
        self.logger.warning("Retrying (Retry(total=2)) after connection broken")
        return super().put_log_events(**kwargs)


def run_with_timeout(target, *args, timeout: float = 5.0) -> bool:
    """Run target on a daemon thread and report whether it finished in time."""
    thread = threading.Thread(target=target, args=args, daemon=True)
    thread.start()
    thread.join(timeout)
    return not thread.is_alive()


@pytest.fixture
def fake_client():
    """Fake client with no existing groups or streams."""
    return FakeLogsClient()


@pytest.fixture
def config():
    """Synchronous config for group 'g', stream 's' at INFO."""
    return CoreConfig(group_name="g", stream_name="s", min_level="info")


@pytest.fixture
def boto_logs_client():
    """Real boto3 logs client, meant to be wrapped in a botocore Stubber."""
    return boto3.client(
        "logs",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )
