"""
Tests for the RabbitMQ transport (submissions/utils/queue_utils.py)
"""

import json
from types import SimpleNamespace

import pytest

from submissions.utils import queue_utils


class FakeChannel:
    def __init__(self, message_count):
        self.message_count = message_count
        self.declared = []
        self.published = []

    def queue_declare(self, queue, arguments, durable):
        self.declared.append((queue, arguments, durable))
        return SimpleNamespace(method=SimpleNamespace(message_count=self.message_count))

    def basic_publish(self, exchange, routing_key, body, properties):
        self.published.append((routing_key, json.loads(body), properties.priority))


class FakeConnection:
    def __init__(self, channel):
        self._channel = channel
        self.closed = False

    def channel(self):
        return self._channel

    def close(self):
        self.closed = True


@pytest.fixture
def connection(monkeypatch, settings):
    settings.TASK_QUEUE = "submissions-test"
    settings.QUEUE_MAX_PRIORITY = 3
    conn = FakeConnection(FakeChannel(message_count=7))
    monkeypatch.setattr(queue_utils, "get_connection", lambda: conn)
    return conn


class TestQueueUtils:

    def test_queue_size_reads_message_count(self, connection):
        assert queue_utils.queue_size() == 7
        assert connection._channel.declared == [("submissions-test", {"x-max-priority": 3}, True)]
        assert connection.closed

    def test_publish_task(self, connection):
        queue_utils.publish_task(type="execute_submission", tries=1, data={"token": "abc"}, priority=2)

        assert connection._channel.published == [
            ("submissions-test", {"type": "execute_submission", "tries": 1, "data": {"token": "abc"}}, 2)
        ]
        assert connection.closed

    def test_connection_failure_is_raised(self, monkeypatch):
        def refuse():
            raise ConnectionError("refused")
        monkeypatch.setattr(queue_utils, "get_connection", refuse)

        with pytest.raises(ConnectionError):
            queue_utils.queue_size()
