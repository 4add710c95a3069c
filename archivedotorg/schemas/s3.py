import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from archivedotorg.core.config import Settings, get_settings

DEFAULT_URL = "https://s3.us.archive.org"

Metadata = Dict[str, List[str]]


class Collection(str, Enum):
    DATA = "opensource_media"
    MOVIES = "opensource_movies"
    TEST = "test_collection"


class S3Credentials(BaseModel):
    """IAS3 access key pair plus an optional base URL override."""

    key: str = ""
    secret: str = ""
    url: str = ""

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "S3Credentials":
        settings = settings or get_settings()
        return cls(
            key=settings.ia_s3_access_key or "",
            secret=settings.ia_s3_secret_key or "",
            url=settings.ia_s3_url or "",
        )

    def base_url(self) -> str:
        return (self.url or DEFAULT_URL).rstrip("/")


class UploadOptions(BaseModel):
    """Everything needed to PUT one file into an archive.org item.

    Empty strings mean "unset". ``upload`` is one of the sources from
    ``archivedotorg.services.upload_sources``.
    """

    upload: Any = None
    file_name: str = ""
    identifier: str = ""
    title: str = ""
    description: str = ""
    subject_tags: List[str] = Field(default_factory=list)
    creator: str = ""
    date: Optional[datetime.date] = None
    metadata: Metadata = Field(default_factory=dict)
    collection: str = ""
    scanner: str = ""

    auto_make_bucket: bool = False
    keep_old_version: bool = False
    skip_derive: bool = False
    skip_unique_check: bool = False

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @field_validator("collection", mode="before")
    @classmethod
    def collection_value(cls, v):
        # Unknown collections are allowed, so the field stays a plain string
        if isinstance(v, Enum):
            return v.value
        return v


class IdentifierResponse(BaseModel):
    identifier: str = ""
    success: bool = False


class UploadResult(BaseModel):
    identifier: str
    url: str
    status_code: int
