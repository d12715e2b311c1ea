from contextlib import asynccontextmanager

import pytest

from news_getter.modules.fanout.service import FanOutExecutor
from news_getter.modules.fetcher.contracts import FetchContract
from news_getter.modules.fetcher.schemas import FetchedDocument, HeaderProfile
from news_getter.modules.job.schemas import ArticleRecord
from news_getter.modules.pagination.service import PaginationDriver
from news_getter.modules.publisher.contracts import PublishContract
from news_getter.modules.publisher.service import PublishError

SEARCH_TEMPLATE = "https://search.test/{site}?start={offset}"


def search_url(site: str, offset: int) -> str:
    return SEARCH_TEMPLATE.format(site=site, offset=offset)


def listing_html(entries: list[tuple[str, str]]) -> str:
    blocks = "".join(
        f'<div class="Gx5Zad fP1Qef xpd EtOod pkphOe">'
        f'<a href="{href}"><div class="BNeawe vvjwJb AP7Wnd">{headline}</div></a>'
        f"</div>"
        for href, headline in entries
    )
    return f"<html><head><title>results</title></head><body>{blocks}</body></html>"


def listing_page(site: str, offset: int, count: int) -> str:
    return listing_html(
        [(f"/url?q=https://{site}/a{offset + i}", f"Headline {offset + i}") for i in range(count)]
    )


def article_html(title: str) -> str:
    return f"<html><head><title>{title}</title></head><body><p>text</p></body></html>"


class FakeFetcher(FetchContract):
    """Serves canned documents by URL.

    A route may map to an exception to raise or to a coroutine function whose
    result is served in its place.
    """

    def __init__(self, routes: dict[str, object] | None = None, default: object = None) -> None:
        self.routes = dict(routes or {})
        self.default = default
        self.calls: list[tuple[str, str]] = []
        self.profiles: list[HeaderProfile] = []

    async def fetch_document(self, url: str, profile: HeaderProfile) -> FetchedDocument:
        self.calls.append((url, profile.name))
        self.profiles.append(profile)
        response = self.routes.get(url, self.default)
        if callable(response):
            response = await response(url)
        if response is None:
            return FetchedDocument(url=url, status_code=404, text="")
        if isinstance(response, Exception):
            raise response
        if isinstance(response, tuple):
            status_code, text = response
            return FetchedDocument(url=url, status_code=status_code, text=text)
        return FetchedDocument(url=url, status_code=200, text=str(response))

    def urls(self, profile_name: str) -> list[str]:
        return [url for url, name in self.calls if name == profile_name]


class FakeSink(PublishContract):
    def __init__(self, failing_links: set[str] | None = None) -> None:
        self.records: list[ArticleRecord] = []
        self.failing_links = failing_links or set()

    async def publish(self, record: ArticleRecord, timeout: float | None = None) -> None:
        if record.link in self.failing_links:
            raise PublishError(f"Publish of {record.link} failed: channel closed")
        self.records.append(record)


class RecordingExecutor(FanOutExecutor):
    def __init__(self, cancel_grace: float | None = None) -> None:
        super().__init__(cancel_grace)
        self.batches: list[list[str]] = []

    async def run_batch(self, candidates, unit, deadline=None):
        candidates = list(candidates)
        self.batches.append([candidate.link for candidate in candidates])
        return await super().run_batch(candidates, unit, deadline)


def context_factory(obj, calls: list):
    @asynccontextmanager
    async def factory(*args):
        calls.append(args)
        yield obj

    return factory


@pytest.fixture
def executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def driver(executor: RecordingExecutor) -> PaginationDriver:
    return PaginationDriver(
        executor=executor,
        page_size=10,
        batch_deadline=2.0,
        publish_timeout=1.0,
        rejection_statuses={429},
        search_url_template=SEARCH_TEMPLATE,
    )
