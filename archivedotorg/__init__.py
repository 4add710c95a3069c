"""Clients for the Internet Archive IAS3 upload API and the Wayback Machine save API."""

__version__ = "0.1.0"

from archivedotorg.core.exceptions import (  # noqa: E402
    ArchiveError,
    DecodeError,
    IdentifierUnresolvedError,
    RequestBuildError,
    TransportError,
    UploadRejectedError,
)
from archivedotorg.schemas.s3 import (  # noqa: E402
    Collection,
    IdentifierResponse,
    S3Credentials,
    UploadOptions,
    UploadResult,
)
from archivedotorg.schemas.web import SaveOptions, SaveResult  # noqa: E402
from archivedotorg.services.s3_client import ArchiveS3Client  # noqa: E402
from archivedotorg.services.upload_sources import BytesSource, FileSource, StreamSource  # noqa: E402
from archivedotorg.services.web_client import WaybackClient  # noqa: E402

__all__ = [
    "ArchiveError",
    "ArchiveS3Client",
    "BytesSource",
    "Collection",
    "DecodeError",
    "FileSource",
    "IdentifierResponse",
    "IdentifierUnresolvedError",
    "RequestBuildError",
    "S3Credentials",
    "SaveOptions",
    "SaveResult",
    "StreamSource",
    "TransportError",
    "UploadOptions",
    "UploadRejectedError",
    "UploadResult",
    "WaybackClient",
]
