import json
import os
import logging

import pika
from django.conf import settings

logger = logging.getLogger(__name__)


def get_connection():
    url = os.getenv("RABBITMQ_URL")
    if url:
        return pika.BlockingConnection(pika.URLParameters(url))
    else:
        host = os.getenv("RABBITMQ_HOST", "localhost")
        port = int(os.getenv("RABBITMQ_PORT", 5672))
        user = os.getenv("RABBITMQ_USER", "admin")
        password = os.getenv("RABBITMQ_PASSWORD", "admin")
        credentials = pika.PlainCredentials(user, password)
        return pika.BlockingConnection(pika.ConnectionParameters(host, port, credentials=credentials))


def declare_task_queue(channel):
    return channel.queue_declare(
        queue=settings.TASK_QUEUE,
        arguments={"x-max-priority": settings.QUEUE_MAX_PRIORITY},
        durable=True,
    )


def get_rabbitmq_channel():
    connection = get_connection()
    channel = connection.channel()
    declare_task_queue(channel)
    return connection, channel


def _close_quietly(connection) -> None:
    if connection:
        try:
            connection.close()
        except Exception:
            logger.debug("Ignoring error while closing RabbitMQ connection", exc_info=True)


def publish_task(type: str, tries: int, data: dict, priority: int):
    """
    Publish a task to the queue.
    """
    connection = None
    try:
        connection, channel = get_rabbitmq_channel()
        channel.basic_publish(
            exchange="",
            routing_key=settings.TASK_QUEUE,
            body=json.dumps({
                "type": type,
                "tries": tries,
                "data": data
            }),
            properties=pika.BasicProperties(
                delivery_mode=pika.DeliveryMode.Persistent,
                priority=priority,
            )
        )
        logger.info(f" [x] Published task: {type}, tries: {tries}, data: {data}")
    except Exception as e:
        logger.error(f"Error publishing task: {type}, tries: {tries}, data: {data}. Error: {e}")
        raise
    finally:
        _close_quietly(connection)


def queue_size() -> int:
    """
    Number of tasks waiting in the task queue (not counting unacknowledged ones).
    """
    connection = None
    try:
        connection = get_connection()
        return declare_task_queue(connection.channel()).method.message_count
    except Exception as e:
        logger.error(f"Error querying size of queue {settings.TASK_QUEUE}: {e}")
        raise
    finally:
        _close_quietly(connection)
