from pydantic_settings import BaseSettings
from pydantic import Field


class Config(BaseSettings):
    # Database used by the demo service
    database_url: str = Field(
        default="sqlite+aiosqlite:///./pagedquery.db", alias="DB_URL"
    )

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Pager defaults (used when the caller leaves an option out)
    pager_per_page: int = Field(default=10, alias="PAGER_PER_PAGE")
    pager_delta: int = Field(default=10, alias="PAGER_DELTA")
    pager_mode: str = Field(default="Jumping", alias="PAGER_MODE")
    pager_url_var: str = Field(default="pageID", alias="PAGER_URL_VAR")
    pager_max_per_page: int = Field(default=100, alias="PAGER_MAX_PER_PAGE")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Instantiate the settings
config = Config()
