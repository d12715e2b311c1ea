import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aio_pika
from aio_pika.abc import AbstractExchange
from aio_pika.exceptions import AMQPError

from news_getter.config.settings import settings
from news_getter.modules.job.schemas import ArticleRecord
from news_getter.modules.publisher.contracts import PublishContract

logger = logging.getLogger(__name__)

CONTENT_TYPE = "text/json"


class BrokerConnectionError(Exception):
    """The broker could not be reached, so the job has nowhere to publish."""


class PublishError(Exception):
    """A single publish failed or did not complete within its timeout."""


class AmqpPublishSink(PublishContract):
    """Publishes article records to one exchange/routing key over one channel."""

    def __init__(self, exchange: AbstractExchange, routing_key: str) -> None:
        self._exchange = exchange
        self._routing_key = routing_key

    @classmethod
    @asynccontextmanager
    async def open(
        cls,
        endpoint: str,
        exchange_name: str | None = None,
        routing_key: str | None = None,
    ) -> AsyncIterator["AmqpPublishSink"]:
        """Connect, open a channel and yield a sink; the connection is closed on exit."""
        try:
            connection = await aio_pika.connect(endpoint)
        except Exception as exc:
            raise BrokerConnectionError(f"AMQP dial error: {exc}") from exc

        try:
            channel = await connection.channel()
            exchange = await channel.get_exchange(
                exchange_name or settings.exchange_name, ensure=False
            )
        except Exception as exc:
            await connection.close()
            raise BrokerConnectionError(f"AMQP channel error: {exc}") from exc

        logger.info("Connected to broker, publishing to %s", exchange.name)
        try:
            yield cls(exchange, routing_key or settings.routing_key)
        finally:
            await connection.close()
            logger.info("Broker connection closed")

    async def publish(self, record: ArticleRecord, timeout: float | None = None) -> None:
        message = aio_pika.Message(body=record.to_payload(), content_type=CONTENT_TYPE)
        timeout = timeout if timeout is not None else settings.publish_timeout
        try:
            await asyncio.wait_for(
                self._exchange.publish(
                    message, routing_key=self._routing_key, mandatory=False
                ),
                timeout=timeout,
            )
        except asyncio.TimeoutError as exc:
            raise PublishError(
                f"Publish of {record.link} timed out after {timeout:.1f}s"
            ) from exc
        except AMQPError as exc:
            raise PublishError(f"Publish of {record.link} failed: {exc}") from exc
