import logging
from typing import Any, Dict

from django.db import transaction

from submissions.models import Submission
from submissions.utils.lifecycle_utils import ensure_deletable

logger = logging.getLogger(__name__)


def create_submission(attributes: Dict[str, Any]) -> Submission:
    """
    Add a Submission to the database. Its status starts as In Queue.
    """
    try:
        submission = Submission.objects.create(**attributes)
        logger.info(f"Submission {submission.token} added to database (language_id={submission.language_id})")
        return submission
    except Exception:
        logger.exception("Failed to add submission to database")
        raise


def load_submission(token: str) -> Submission:
    """
    Load an existing Submission by its token.
    Raises Submission.DoesNotExist if there is none.
    """
    return Submission.objects.get(token=token)


def delete_submission(token: str) -> Submission:
    """
    Delete a finished Submission and return the in-memory copy.

    The row is locked while its status is checked, so a worker cannot move it
    between the check and the delete.
    """
    with transaction.atomic():
        submission = Submission.objects.select_for_update().get(token=token)
        ensure_deletable(submission)
        submission.delete()
    logger.info(f"Submission {token} deleted")
    return submission
