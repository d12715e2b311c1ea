from pydantic import BaseModel, ConfigDict


class Candidate(BaseModel):
    """A link/headline pair taken from one search-result entry."""

    model_config = ConfigDict(frozen=True)

    link: str
    headline: str
