from datetime import datetime
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from news_getter.modules.extraction.schemas import Candidate

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class JobParameters(BaseModel):
    """Job input. Accepts the short wire names as well as the descriptive ones."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    site: str = Field(..., min_length=1)
    correlation_key: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("key", "correlationKey", "correlation_key"),
    )
    target_count: int = Field(
        ...,
        gt=0,
        validation_alias=AliasChoices("numtoget", "targetCount", "target_count"),
    )
    queue_endpoint: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("apiendpoint", "queueEndpoint", "queue_endpoint"),
    )


class ArticleRecord(BaseModel):
    """The unit published to the queue; serialized with the short wire names."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    correlation_key: str = Field(..., alias="key")
    source: str
    timestamp: str = Field(..., alias="datetime")
    headline: str
    page_title: str = Field(..., alias="pagetitle")
    link: str

    @classmethod
    def build(
        cls,
        params: JobParameters,
        candidate: Candidate,
        page_title: str,
        timestamp: str,
    ) -> "ArticleRecord":
        return cls(
            correlation_key=params.correlation_key,
            source=params.site,
            timestamp=timestamp,
            headline=candidate.headline,
            page_title=page_title,
            link=candidate.link,
        )

    def to_payload(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode("utf-8")

    @classmethod
    def from_payload(cls, payload: bytes | str) -> "ArticleRecord":
        return cls.model_validate_json(payload)


def format_timestamp(moment: datetime) -> str:
    return moment.strftime(TIMESTAMP_FORMAT)


class JobStatus(str, Enum):
    SUCCESS = "success"
    CLIENT_ERROR = "client_error"
    RATE_LIMITED = "rate_limited"
    UPSTREAM_FAILED = "upstream_failed"
    INTERNAL_ERROR = "internal_error"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]


_HTTP_STATUS = {
    JobStatus.SUCCESS: 200,
    JobStatus.CLIENT_ERROR: 400,
    JobStatus.RATE_LIMITED: 429,
    JobStatus.UPSTREAM_FAILED: 502,
    JobStatus.INTERNAL_ERROR: 500,
}


class JobResult(BaseModel):
    status: JobStatus
    message: str
    pages_fetched: int = 0
    candidates_processed: int = 0
    published: int = 0
