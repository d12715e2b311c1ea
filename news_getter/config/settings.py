from pydantic_settings import BaseSettings, SettingsConfigDict

SEARCH_URL_TEMPLATE = (
    "https://www.google.com/search?q=site:{site}&tbm=nws&source=lnt&tbs=qdr:d"
    "&sa=X&ved=2ahUKEwipsdTt2u38AhWWbcAKHYTMCwUQpwV6BAgCEBc"
    "&biw=1298&bih=778&dpr=1.82&start={offset}"
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="NEWS_GETTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    search_url_template: str = SEARCH_URL_TEMPLATE
    page_size: int = 10
    batch_deadline: float = 20.0
    cancel_grace: float = 0.5
    publish_timeout: float = 5.0
    request_timeout: float = 30.0
    rejection_statuses: list[int] = [429]
    consent_cookie: str = "YES+cb.20220403-18-p0.en+FX+489"
    exchange_name: str = "consent.direct"
    routing_key: str = "datain"
    log_level: str = "INFO"
    app_host: str = "0.0.0.0"
    app_port: int = 8000


settings = Settings()
