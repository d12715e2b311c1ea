import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import Any

from pydantic import ValidationError

from news_getter.modules.fetcher.contracts import FetchContract
from news_getter.modules.fetcher.service import FetchClient
from news_getter.modules.job.schemas import JobParameters, JobResult, JobStatus
from news_getter.modules.pagination.service import PaginationDriver, pagination_driver
from news_getter.modules.publisher.contracts import PublishContract
from news_getter.modules.publisher.service import AmqpPublishSink, BrokerConnectionError

logger = logging.getLogger(__name__)

FetcherFactory = Callable[[], AbstractAsyncContextManager[FetchContract]]
SinkFactory = Callable[[str], AbstractAsyncContextManager[PublishContract]]


class JobService:
    """Validates a job, opens its fetch client and publish sink, and runs it."""

    def __init__(
        self,
        driver: PaginationDriver = pagination_driver,
        fetcher_factory: FetcherFactory = FetchClient.open,
        sink_factory: SinkFactory = AmqpPublishSink.open,
    ) -> None:
        self._driver = driver
        self._fetcher_factory = fetcher_factory
        self._sink_factory = sink_factory

    @staticmethod
    def parse_parameters(payload: Any) -> JobParameters:
        if isinstance(payload, (str, bytes, bytearray)):
            return JobParameters.model_validate_json(payload)
        return JobParameters.model_validate(payload)

    @staticmethod
    def _describe(exc: ValidationError) -> str:
        fields = sorted({".".join(str(part) for part in err["loc"]) or "body" for err in exc.errors()})
        return "Missing or invalid fields in request body: " + ", ".join(fields)

    async def run(self, payload: Any) -> JobResult:
        try:
            params = self.parse_parameters(payload)
        except ValidationError as exc:
            message = self._describe(exc)
            logger.warning(message)
            return JobResult(status=JobStatus.CLIENT_ERROR, message=message)

        logger.info(
            "Starting job for %s (key=%s, target=%d)",
            params.site, params.correlation_key, params.target_count,
        )
        try:
            async with self._sink_factory(params.queue_endpoint) as sink:
                async with self._fetcher_factory() as fetcher:
                    result = await self._driver.run(params, fetcher, sink)
        except BrokerConnectionError as exc:
            logger.error("Job for %s aborted: %s", params.site, exc)
            return JobResult(status=JobStatus.UPSTREAM_FAILED, message=str(exc))
        except Exception:
            logger.exception("Job for %s failed", params.site)
            return JobResult(status=JobStatus.INTERNAL_ERROR, message="Internal error")

        logger.info("Job for %s finished: %s", params.site, result.status.value)
        return result


job_service = JobService()
