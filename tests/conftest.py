import pytest

from submissions.models import Submission
from submissions.statuses import Status
from user_customizable_configs.gateway.loader import reload_gateway_config


class FakeQueue:
    """Stands in for the RabbitMQ task queue."""

    def __init__(self):
        self.size = 0
        self.published = []
        self.fail_publish = False

    def queue_size(self):
        return self.size

    def publish_task(self, type, tries, data, priority):
        if self.fail_publish:
            raise ConnectionError("broker unreachable")
        self.published.append({"type": type, "tries": tries, "data": data, "priority": priority})


class FakeSandbox:
    """Stands in for the execution engine; returns canned results."""

    def __init__(self):
        self.calls = []
        self.error = None
        self.results = {
            "status_id": Status.ACCEPTED.value,
            "stdout": b"hello\n",
            "stderr": None,
            "compile_output": None,
            "message": None,
            "exit_code": 0,
            "exit_signal": None,
            "time": 0.01,
            "wall_time": 0.05,
            "memory": 3200,
        }

    def __call__(self, submission):
        self.calls.append(submission.token)
        if self.error is not None:
            raise self.error
        return dict(self.results)


@pytest.fixture(autouse=True)
def gateway_config():
    reload_gateway_config()
    yield
    reload_gateway_config()


@pytest.fixture(autouse=True)
def fake_queue(monkeypatch):
    queue = FakeQueue()
    monkeypatch.setattr("submissions.utils.admission_utils.queue_size", queue.queue_size)
    monkeypatch.setattr("submissions.utils.dispatch_utils.publish_task", queue.publish_task)
    monkeypatch.setattr("submissions.workers.task_processors.publish_task", queue.publish_task)
    return queue


@pytest.fixture(autouse=True)
def fake_sandbox(monkeypatch):
    sandbox = FakeSandbox()
    monkeypatch.setattr("submissions.utils.execution_utils.run_in_sandbox", sandbox)
    return sandbox


@pytest.fixture
def make_submission(db):
    def _make(**overrides):
        attributes = {
            "source_code": b"print('hello')",
            "language_id": 71,
            "number_of_runs": 1,
            "cpu_time_limit": 5.0,
            "cpu_extra_time": 1.0,
            "wall_time_limit": 10.0,
            "memory_limit": 128000,
            "stack_limit": 64000,
            "max_processes_and_or_threads": 60,
            "max_file_size": 1024,
        }
        attributes.update(overrides)
        return Submission.objects.create(**attributes)
    return _make
