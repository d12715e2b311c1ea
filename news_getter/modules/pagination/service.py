import logging
from collections.abc import Collection
from datetime import datetime
from functools import partial
from itertools import islice
from urllib.parse import urlsplit

from news_getter.config.settings import settings
from news_getter.modules.extraction.schemas import Candidate
from news_getter.modules.extraction.service import ExtractionError, extraction_service
from news_getter.modules.fanout.service import FanOutExecutor, fanout_executor
from news_getter.modules.fetcher.contracts import FetchContract
from news_getter.modules.fetcher.service import ARTICLE_PROFILE, SEARCH_PROFILE, FetchError
from news_getter.modules.job.schemas import (
    ArticleRecord,
    JobParameters,
    JobResult,
    JobStatus,
    format_timestamp,
)
from news_getter.modules.publisher.contracts import PublishContract
from news_getter.modules.publisher.service import PublishError

logger = logging.getLogger(__name__)


class PaginationDriver:
    """Walks search result pages and hands each page's candidates to the executor.

    Pages are strictly sequential: the next search request is only sent once
    the previous batch has settled. The walk ends when ``target_count``
    candidates have been processed, a page comes back empty, the search engine
    answers with a rejection status, or a page cannot be fetched at all.
    """

    def __init__(
        self,
        executor: FanOutExecutor = fanout_executor,
        page_size: int | None = None,
        batch_deadline: float | None = None,
        publish_timeout: float | None = None,
        rejection_statuses: Collection[int] | None = None,
        search_url_template: str | None = None,
    ) -> None:
        self._executor = executor
        self._page_size = page_size or settings.page_size
        self._batch_deadline = batch_deadline if batch_deadline is not None else settings.batch_deadline
        self._publish_timeout = publish_timeout if publish_timeout is not None else settings.publish_timeout
        self._rejection_statuses = frozenset(
            rejection_statuses if rejection_statuses is not None else settings.rejection_statuses
        )
        self._search_url_template = search_url_template or settings.search_url_template
        self._search_profile = SEARCH_PROFILE.model_copy(
            update={"host": urlsplit(self._search_url_template).hostname}
        )

    def build_search_url(self, site: str, offset: int) -> str:
        return self._search_url_template.format(site=site, offset=offset)

    # ── Per-candidate unit ──────────────────────────────────────

    async def _process_candidate(
        self,
        params: JobParameters,
        fetcher: FetchContract,
        sink: PublishContract,
        timestamp: str,
        candidate: Candidate,
    ) -> bool:
        logger.info("Received article link: %s", candidate.link)

        try:
            page = await fetcher.fetch_document(candidate.link, ARTICLE_PROFILE)
        except FetchError as exc:
            logger.warning("Article fetch error: %s", exc)
            return False
        if not page.ok:
            logger.warning("Article %s answered %d, skipping", candidate.link, page.status_code)
            return False

        try:
            page_title = extraction_service.parse_page_title(page.text)
        except ExtractionError as exc:
            logger.warning("No title for %s: %s", candidate.link, exc)
            return False

        record = ArticleRecord.build(params, candidate, page_title, timestamp)
        try:
            await sink.publish(record, timeout=self._publish_timeout)
        except PublishError as exc:
            logger.warning("%s AMQP publish error: %s", record.headline, exc)
            return False

        logger.info("Posted: %s", record.headline)
        return True

    # ── Orchestration ───────────────────────────────────────────

    async def run(
        self,
        params: JobParameters,
        fetcher: FetchContract,
        sink: PublishContract,
        timestamp: str | None = None,
    ) -> JobResult:
        timestamp = timestamp or format_timestamp(datetime.now())
        unit = partial(self._process_candidate, params, fetcher, sink, timestamp)

        offset = 0
        pages = 0
        processed = 0
        published = 0

        def result(status: JobStatus, message: str) -> JobResult:
            return JobResult(
                status=status,
                message=message,
                pages_fetched=pages,
                candidates_processed=processed,
                published=published,
            )

        while processed < params.target_count:
            url = self.build_search_url(params.site, offset)
            logger.info("URL: %s", url)

            try:
                page = await fetcher.fetch_document(url, self._search_profile)
            except FetchError as exc:
                logger.error("Search page fetch failed at offset %d: %s", offset, exc)
                return result(JobStatus.UPSTREAM_FAILED, "Unable to fetch search results")

            logger.info("Status code: %d", page.status_code)
            if page.status_code in self._rejection_statuses:
                logger.warning("Too many requests, stopping at offset %d", offset)
                return result(JobStatus.RATE_LIMITED, "Search engine rejected further requests")
            if not page.ok:
                logger.error("Search page at offset %d answered %d", offset, page.status_code)
                return result(JobStatus.UPSTREAM_FAILED, "Unable to fetch search results")
            pages += 1

            remaining = params.target_count - processed
            try:
                candidates = list(islice(extraction_service.parse_listing(page.text), remaining))
            except Exception:
                logger.exception("Unable to parse search results at offset %d", offset)
                return result(JobStatus.UPSTREAM_FAILED, "Unable to parse search results")

            if not candidates:
                logger.info("No more results for %s after %d pages", params.site, pages)
                break

            logger.info("Scraping %d results for %s", len(candidates), params.site)
            outcome = await self._executor.run_batch(candidates, unit, self._batch_deadline)
            if outcome.timed_out:
                logger.info("Timeout waiting for article links")
            else:
                logger.info("Articles ready")

            processed += outcome.spawned
            published += outcome.published
            offset += self._page_size

        logger.info(
            "Finished %s: %d pages, %d candidates, %d published",
            params.site, pages, processed, published,
        )
        return result(JobStatus.SUCCESS, "Done")


pagination_driver = PaginationDriver()
