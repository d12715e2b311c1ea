import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from urllib.parse import urlsplit

import httpx

from news_getter.config.settings import settings
from news_getter.modules.fetcher.contracts import FetchContract
from news_getter.modules.fetcher.schemas import FetchedDocument, HeaderProfile

logger = logging.getLogger(__name__)

SEARCH_HOST = urlsplit(settings.search_url_template).hostname

_BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/131.0.0.0 Safari/537.36"
    ),
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,*/*;q=0.8"
    ),
    "TE": "trailers",
    "Connection": "keep-alive",
    "Accept-Language": "en-GB,en;q=0.5",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
    "Content-Type": "text/html; charset=utf-8",
}

_CONSENT_COOKIES = {"CONSENT": settings.consent_cookie}

SEARCH_PROFILE = HeaderProfile(
    name="search",
    headers=_BROWSER_HEADERS,
    host=SEARCH_HOST,
    cookies=_CONSENT_COOKIES,
)
ARTICLE_PROFILE = HeaderProfile(
    name="article",
    headers=_BROWSER_HEADERS,
    cookies=_CONSENT_COOKIES,
)


class FetchError(Exception):
    """Transport-level failure: the request never produced a response."""

    def __init__(self, url: str, cause: Exception) -> None:
        super().__init__(f"GET {url} failed: {cause!r}")
        self.url = url
        self.cause = cause


class FetchClient(FetchContract):
    """Browser-mimicking GET client sharing one cookie jar for a whole job."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @classmethod
    @asynccontextmanager
    async def open(
        cls,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> AsyncIterator["FetchClient"]:
        async with httpx.AsyncClient(
            timeout=timeout if timeout is not None else settings.request_timeout,
            follow_redirects=True,
            transport=transport,
        ) as client:
            yield cls(client)

    async def fetch_document(self, url: str, profile: HeaderProfile) -> FetchedDocument:
        headers = dict(profile.headers)
        if profile.host:
            headers["Host"] = profile.host

        try:
            domain = httpx.URL(url).host
            for name, value in profile.cookies.items():
                self._client.cookies.set(name, value, domain=domain)
            response = await self._client.get(url, headers=headers)
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            raise FetchError(url, exc) from exc

        logger.debug("GET %s (%s profile) -> %d", url, profile.name, response.status_code)
        return FetchedDocument(
            url=url,
            status_code=response.status_code,
            text=response.text,
        )
