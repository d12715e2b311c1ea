from abc import ABC, abstractmethod

from news_getter.modules.job.schemas import ArticleRecord


class PublishContract(ABC):
    @abstractmethod
    async def publish(self, record: ArticleRecord, timeout: float | None = None) -> None: ...
