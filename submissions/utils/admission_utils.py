import logging

from django.conf import settings

from submissions.errors import CapacityError
from submissions.utils.queue_utils import queue_size

logger = logging.getLogger(__name__)


def admit() -> None:
    """
    Reject new work while the task queue holds MAX_QUEUE_SIZE or more tasks.

    The depth can change between this check and the enqueue, so the limit
    bounds sustained overload rather than exact admission counts.
    """
    try:
        depth = queue_size()
    except Exception as e:
        logger.error(f"Cannot read task queue depth, rejecting submission: {e}")
        raise CapacityError("queue is unavailable") from e

    if depth >= settings.MAX_QUEUE_SIZE:
        logger.warning(f"Queue is full: depth={depth} max={settings.MAX_QUEUE_SIZE}")
        raise CapacityError("queue is full")
