from abc import ABC, abstractmethod

from news_getter.modules.fetcher.schemas import FetchedDocument, HeaderProfile


class FetchContract(ABC):
    @abstractmethod
    async def fetch_document(self, url: str, profile: HeaderProfile) -> FetchedDocument: ...
