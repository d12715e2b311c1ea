from pydantic import BaseModel, ConfigDict


class HeaderProfile(BaseModel):
    """Headers, optional Host override and cookies sent with one kind of request."""

    model_config = ConfigDict(frozen=True)

    name: str
    headers: dict[str, str]
    host: str | None = None
    cookies: dict[str, str] = {}


class FetchedDocument(BaseModel):
    url: str
    status_code: int
    text: str

    @property
    def ok(self) -> bool:
        return self.status_code < 400
