import logging
from collections.abc import Iterator

from bs4 import BeautifulSoup

from news_getter.modules.extraction.schemas import Candidate

logger = logging.getLogger(__name__)

RESULT_SELECTOR = ".Gx5Zad.fP1Qef.xpd.EtOod.pkphOe"
HEADLINE_SELECTOR = "div.BNeawe.vvjwJb.AP7Wnd"
TITLE_SELECTOR = "head > title"
REDIRECT_PREFIX = "/url?q="


class ExtractionError(Exception):
    """Raised when a required field is missing from a parsed document."""


class ExtractionService:
    """Turns search-result and article HTML into plain fields."""

    @staticmethod
    def normalize_link(href: str) -> str:
        if href.startswith(REDIRECT_PREFIX):
            return href[len(REDIRECT_PREFIX):]
        return href

    @staticmethod
    def parse_listing(html: str) -> Iterator[Candidate]:
        """Yield one candidate per result entry, in page order.

        The document is parsed up front; entries are converted lazily so a
        caller that only needs the first few never builds the rest.
        """
        soup = BeautifulSoup(html, "lxml")

        for block in soup.select(RESULT_SELECTOR):
            link_el = block.select_one("a")
            href = link_el.get("href", "") if link_el else ""
            if not href:
                logger.debug("Skipping result entry without a link")
                continue

            headline_el = block.select_one(HEADLINE_SELECTOR)
            headline = headline_el.get_text(strip=True) if headline_el else ""

            yield Candidate(
                link=ExtractionService.normalize_link(str(href)),
                headline=headline,
            )

    @staticmethod
    def parse_page_title(html: str) -> str:
        soup = BeautifulSoup(html, "lxml")
        title_el = soup.select_one(TITLE_SELECTOR)
        title = title_el.get_text(strip=True) if title_el else ""
        if not title:
            raise ExtractionError("Article page has no <title>")
        return title


extraction_service = ExtractionService()
