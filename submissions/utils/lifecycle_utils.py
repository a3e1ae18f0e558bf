import logging

from django.conf import settings

from submissions.errors import FeatureDisabledError, LifecycleError
from submissions.models import Submission
from submissions.statuses import is_terminal

logger = logging.getLogger(__name__)


def ensure_delete_enabled() -> None:
    if not settings.ENABLE_SUBMISSION_DELETE:
        raise FeatureDisabledError("delete not allowed")


def ensure_deletable(submission: Submission) -> None:
    """
    Only submissions that reached a terminal status may be deleted, and only
    while ENABLE_SUBMISSION_DELETE is on.
    """
    ensure_delete_enabled()

    if not is_terminal(submission.status_id):
        status = submission.status
        logger.info(f"Refusing to delete submission {submission.token} with status {status.label}")
        raise LifecycleError(
            f"submission cannot be deleted because its status is {status.value} ({status.label})"
        )
