import logging
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from archivedotorg import __version__


class Settings(BaseSettings):
    ia_s3_access_key: str | None = Field(None, alias="IA_S3_ACCESS_KEY")
    ia_s3_secret_key: str | None = Field(None, alias="IA_S3_SECRET_KEY")
    # Overrides https://s3.us.archive.org, e.g. for a recording proxy
    ia_s3_url: str | None = Field(None, alias="IA_S3_URL")
    ia_upload_timeout_seconds: float = Field(90.0, alias="IA_UPLOAD_TIMEOUT_SECONDS")
    ia_save_timeout_seconds: float = Field(30.0, alias="IA_SAVE_TIMEOUT_SECONDS")
    ia_user_agent: str = Field(f"archivedotorg-python/{__version__}", alias="IA_USER_AGENT")

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


logger = logging.getLogger(__name__)


@lru_cache
def get_settings() -> Settings:
    try:
        settings = Settings()
    except PermissionError:
        logger.warning("Unable to read .env; continuing with environment variables only")
        settings = Settings(_env_file=None)
    return settings
