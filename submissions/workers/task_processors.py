import logging

from django.conf import settings

from submissions.models import Submission
from submissions.utils.execution_utils import execute_submission, mark_internal_error
from submissions.utils.queue_utils import publish_task

logger = logging.getLogger(__name__)


def run_execute_submission(arguments):
    token = arguments["data"].get("token")
    if not token:
        raise ValueError("Missing token in data")

    try:
        execute_submission(token)
    except Submission.DoesNotExist:
        # Deleted before a worker got to it; nothing left to run.
        logger.info(f"Submission {token} no longer exists, dropping task")


def set_unsuccessful(arguments, error_message):
    try:
        if arguments["type"] == "execute_submission":
            mark_internal_error(arguments["data"]["token"], error_message)
        else:
            logger.error(f"set_unsuccessful called for unknown task type {arguments['type']}")
    except Exception as e:
        logger.error(
            f"Failed to set submission unsuccessful for {arguments}: {e}"
        )


def process_task(arguments):
    try:
        if arguments["type"] == "execute_submission":
            run_execute_submission(arguments)
        else:
            raise ValueError(f"Unknown task type: {arguments['type']}")
    except Exception as e:
        logger.error(f"Error processing request {arguments}. Error: {e}")

        # If the number of tries is less than the maximum allowed, re-enqueue the task
        if ("tries" in arguments) and (
            arguments["tries"] < settings.MAX_TRIES
        ):
            arguments["tries"] += 1
            logger.info(
                f" [x] Re-enqueuing request {arguments} with tries {arguments['tries']}"
            )
            publish_task(
                type=arguments["type"],
                tries=arguments["tries"],
                data=arguments["data"],
                priority=settings.RETRY_PRIORITY,
            )
        else:
            logger.error(
                f" [x] Request {arguments} has reached the maximum number of tries."
            )
            set_unsuccessful(arguments, str(e))
