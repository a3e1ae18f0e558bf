import json
import time
import logging
import pika
from django.conf import settings
from django.core.management.base import BaseCommand

from submissions.workers.task_processors import process_task
from submissions.utils.queue_utils import get_connection

logger = logging.getLogger(__name__)


def decode_task(body) -> dict | None:
    """Parse a queued task; None when the message is not a task this worker understands."""
    try:
        task = json.loads(body)
    except (TypeError, ValueError):
        return None
    if not isinstance(task, dict) or "type" not in task or not isinstance(task.get("data"), dict):
        return None
    return task


def callback(ch, method, properties, body):
    task = decode_task(body)
    if task is None:
        # Acked so the broker does not redeliver it.
        logger.error(f" [x] Dropping malformed task `{str(body)[:120]}`")
        ch.basic_ack(delivery_tag=method.delivery_tag)
        return

    token = task["data"].get("token")
    logger.info(f" [x] Received {task['type']} for submission {token} (try {task.get('tries')})")
    started = time.monotonic()

    process_task(task)

    ch.basic_ack(delivery_tag=method.delivery_tag)
    logger.info(f" [x] Done with submission {token} in {time.monotonic() - started:.2f}s")


class Command(BaseCommand):
    help = "Run a RabbitMQ worker that executes queued submissions"

    def add_arguments(self, parser):
        parser.add_argument("--queue", default=settings.TASK_QUEUE)
        parser.add_argument("--max-priority", type=int, default=settings.QUEUE_MAX_PRIORITY)
        parser.add_argument("--prefetch", type=int, default=1)
        parser.add_argument("--reconnect-delay", type=int, default=3)

    def handle(self, *args, **options):
        queue = options["queue"]
        max_priority = options["max_priority"]
        prefetch = options["prefetch"]
        reconnect_delay = options["reconnect_delay"]

        self.stdout.write(self.style.SUCCESS(
            f"Worker starting (queue={queue}, max_priority={max_priority})"
        ))

        connection = None
        while True:
            try:
                connection = get_connection()
                channel = connection.channel()

                channel.queue_declare(
                    queue=queue,
                    durable=True,
                    arguments={"x-max-priority": max_priority},
                )

                # One unacknowledged task per worker: a submission is never run twice at once
                channel.basic_qos(prefetch_count=prefetch)
                channel.basic_consume(queue=queue, on_message_callback=callback)
                logger.info(f"Worker consuming on '{queue}'...")
                channel.start_consuming()

            except (pika.exceptions.AMQPConnectionError, OSError):
                logger.warning(f"RabbitMQ not reachable. Retry in {reconnect_delay}s")
                time.sleep(reconnect_delay)
            except KeyboardInterrupt:
                logger.info("Worker interrupted. Exiting.")
                if connection is not None and connection.is_open:
                    connection.close()
                break
            except Exception:
                logger.exception("Unexpected worker error. Restarting in %ss", reconnect_delay)
                time.sleep(reconnect_delay)
