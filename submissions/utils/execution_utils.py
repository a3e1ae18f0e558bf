import binascii
import logging
from typing import Any, Dict

import requests
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from submissions.models import Submission
from submissions.statuses import Status, is_terminal
from submissions.utils.encoding_utils import as_bytes, decode_base64, encode_base64, render_submission
from submissions.utils.field_utils import DEFAULT_FIELDS

logger = logging.getLogger(__name__)


class ExecutionEngineError(RuntimeError):
    """Raised when the sandbox cannot execute a submission or answers garbage."""


SANDBOX_REQUEST_FIELDS = (
    "token",
    "language_id",
    "compiler_options",
    "command_line_arguments",
    "number_of_runs",
    "cpu_time_limit",
    "cpu_extra_time",
    "wall_time_limit",
    "memory_limit",
    "stack_limit",
    "max_processes_and_or_threads",
    "enable_per_process_and_thread_time_limit",
    "enable_per_process_and_thread_memory_limit",
    "max_file_size",
    "redirect_stderr_to_stdout",
)

SANDBOX_BYTE_RESULTS = ("stdout", "stderr", "compile_output", "message")


def _build_sandbox_request(submission: Submission) -> Dict[str, Any]:
    payload = {name: getattr(submission, name) for name in SANDBOX_REQUEST_FIELDS}
    payload["source_code"] = encode_base64(as_bytes(submission.source_code))
    payload["stdin"] = encode_base64(as_bytes(submission.stdin))
    payload["expected_output"] = encode_base64(as_bytes(submission.expected_output))
    return payload


def _parse_sandbox_response(data: Dict[str, Any]) -> Dict[str, Any]:
    try:
        status = Status(int(data["status_id"]))
    except (KeyError, TypeError, ValueError) as e:
        raise ExecutionEngineError(f"Sandbox returned an invalid status_id: {data.get('status_id')!r}") from e
    if not is_terminal(status):
        raise ExecutionEngineError(f"Sandbox returned non-terminal status {status.label}")

    results: Dict[str, Any] = {"status_id": status.value}
    try:
        for name in SANDBOX_BYTE_RESULTS:
            results[name] = decode_base64(data.get(name))
    except (binascii.Error, TypeError, ValueError) as e:
        raise ExecutionEngineError(f"Sandbox returned malformed base64 output: {e}") from e

    for name, cast in (("exit_code", int), ("exit_signal", int), ("time", float), ("wall_time", float), ("memory", int)):
        value = data.get(name)
        try:
            results[name] = cast(value) if value is not None else None
        except (TypeError, ValueError) as e:
            raise ExecutionEngineError(f"Sandbox returned invalid {name}: {value!r}") from e
    return results


def run_in_sandbox(submission: Submission) -> Dict[str, Any]:
    """
    Execute the submission in the sandbox and return its parsed results.
    """
    try:
        resp = requests.post(
            settings.SANDBOX_EXECUTE_URL,
            json=_build_sandbox_request(submission),
            timeout=settings.SANDBOX_TIMEOUT,
        )
    except requests.RequestException as e:
        logger.error(f"Network error executing submission {submission.token}: {e}")
        raise ExecutionEngineError(f"Network error: {e}") from e

    if resp.status_code != 200:
        logger.error(f"Sandbox error for submission {submission.token}: status={resp.status_code}, body={resp.text[:500]}")
        raise ExecutionEngineError(f"Sandbox returned {resp.status_code}")

    try:
        data = resp.json()
    except ValueError as e:
        raise ExecutionEngineError(f"Invalid JSON response: {e}") from e
    if not isinstance(data, dict):
        raise ExecutionEngineError(f"Unexpected sandbox response: {str(data)[:200]}")

    return _parse_sandbox_response(data)


def _start_processing(token: str) -> Submission | None:
    with transaction.atomic():
        submission = Submission.objects.select_for_update().get(token=token)
        if is_terminal(submission.status_id):
            logger.info(f"Submission {token} already finished with status {submission.status.label}, skipping")
            return None
        submission.status_id = Status.PROCESSING
        submission.save(update_fields=["status_id"])
    return submission


def _finish(submission: Submission, results: Dict[str, Any]) -> Submission:
    for name, value in results.items():
        setattr(submission, name, value)
    submission.finished_at = timezone.now()
    submission.save(update_fields=[*results.keys(), "finished_at"])
    return submission


def execute_submission(token: str) -> Submission:
    """
    Run one submission through the execution engine: In Queue -> Processing ->
    terminal status. Raises ExecutionEngineError when the engine fails; the
    submission then stays in Processing for the caller to resolve.
    """
    submission = _start_processing(token)
    if submission is None:
        return Submission.objects.get(token=token)

    logger.info(f"Executing submission {token} (language_id={submission.language_id})")
    results = run_in_sandbox(submission)
    _finish(submission, results)
    logger.info(f"Submission {token} finished with status {submission.status.label}")

    if submission.callback_url:
        send_callback(submission)
    return submission


def mark_internal_error(token: str, error_message: str) -> Submission | None:
    """Move a submission that the engine failed on to Internal Error."""
    with transaction.atomic():
        submission = Submission.objects.select_for_update().filter(token=token).first()
        if submission is None:
            logger.error(f"Cannot mark missing submission {token} as failed")
            return None
        if is_terminal(submission.status_id):
            return submission
        _finish(submission, {"status_id": Status.INTERNAL_ERROR.value, "message": error_message.encode("utf-8")})
    logger.error(f"Submission {token} marked as Internal Error: {error_message}")

    if submission.callback_url:
        send_callback(submission)
    return submission


def send_callback(submission: Submission) -> None:
    """PUT the finished submission (base64 encoded) to its callback_url."""
    body = render_submission(submission, DEFAULT_FIELDS, base64_encoded=True).data
    try:
        resp = requests.put(submission.callback_url, json=body, timeout=settings.CALLBACK_TIMEOUT)
        logger.info(f"Callback for submission {submission.token} answered {resp.status_code}")
    except requests.RequestException as e:
        logger.warning(f"Callback for submission {submission.token} to {submission.callback_url} failed: {e}")
