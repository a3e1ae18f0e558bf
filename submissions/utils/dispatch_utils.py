import logging
from typing import Any, Dict, NamedTuple, Tuple

from django.conf import settings

from submissions.errors import FeatureDisabledError
from submissions.models import Submission
from submissions.utils.encoding_utils import SUBMISSION_ENCODING_NOTICE, render_submission
from submissions.utils.execution_utils import ExecutionEngineError, execute_submission, mark_internal_error
from submissions.utils.field_utils import TOKEN_ONLY
from submissions.utils.queue_utils import publish_task

logger = logging.getLogger(__name__)


class DispatchResult(NamedTuple):
    status_code: int
    body: Dict[str, Any]


def ensure_wait_enabled(wait: bool) -> None:
    if wait and not settings.ENABLE_WAIT_RESULT:
        raise FeatureDisabledError("wait not allowed")


def dispatch(submission: Submission, wait: bool, base64_encoded: bool, fields: Tuple[str, ...]) -> DispatchResult:
    """
    Hand an admitted, persisted submission to the execution engine.

    Asynchronous (default): publish an execute_submission task and acknowledge
    with the token only.

    Synchronous (wait=True): execute in-line, holding the request until the
    engine finishes, and answer with the rendered submission. If that
    rendering fails the submission still exists, so the answer stays 201 and
    carries only the token and an encoding notice.
    """
    ensure_wait_enabled(wait)

    if not wait:
        try:
            publish_task(
                type="execute_submission",
                tries=1,
                data={"token": submission.token},
                priority=settings.EXECUTE_SUBMISSION_PRIORITY,
            )
        except Exception as e:
            logger.exception(f"Failed to publish task for submission {submission.token}: {e}")
            mark_internal_error(submission.token, f"Failed to enqueue execution task: {e}")
            return DispatchResult(500, {"token": submission.token, "error": "Failed to enqueue execution task"})
        logger.info(f"Queued submission {submission.token}")
        return DispatchResult(201, render_submission(submission, TOKEN_ONLY, base64_encoded=False).data)

    try:
        submission = execute_submission(submission.token)
    except ExecutionEngineError as e:
        logger.error(f"Execution engine failed for submission {submission.token}: {e}")
        submission = mark_internal_error(submission.token, str(e))
    except Exception as e:
        logger.exception(f"Unexpected error executing submission {submission.token}: {e}")
        submission = mark_internal_error(submission.token, f"Unexpected execution error: {e}")

    result = render_submission(submission, fields, base64_encoded)
    if not result.ok:
        return DispatchResult(201, {"token": submission.token, "error": SUBMISSION_ENCODING_NOTICE})
    return DispatchResult(201, result.data)
