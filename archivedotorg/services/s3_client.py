"""
Client for the Internet Archive IAS3 upload API.

Uploads are a single PUT to ``{base}/{identifier}/{file_name}`` with item
metadata carried in ``x-archive-*`` / ``x-amz-*`` headers. See
https://archive.org/services/docs/api/ias3.html for the header conventions.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

import httpx
from pydantic import ValidationError

from archivedotorg.core.config import get_settings
from archivedotorg.core.exceptions import (
    DecodeError,
    IdentifierUnresolvedError,
    RequestBuildError,
    TransportError,
    UploadRejectedError,
)
from archivedotorg.schemas.s3 import (
    Collection,
    IdentifierResponse,
    S3Credentials,
    UploadOptions,
    UploadResult,
)
from archivedotorg.services.encoding import identifier_from_title, timestamp_identifier, uri_encode
from archivedotorg.services.upload_sources import UploadSource, size_hint

logger = logging.getLogger(__name__)

IDENTIFIER_LOOKUP_URL = "https://archive.org/upload/app/upload_api.php"
DEFAULT_SCANNER = "archivedotorg/s3"


def derive_identifier(opts: UploadOptions) -> str:
    """Pick the candidate identifier for an upload.

    An explicit identifier is returned untouched, even when it is upper case.
    Otherwise the title is mapped to [a-z0-9-], and with no title the current
    UTC timestamp is used.
    """
    # archive.org suggests ^[a-zA-Z0-9][a-zA-Z0-9_.-]{4,100}$ but does not enforce it here
    if opts.identifier:
        return opts.identifier
    if opts.title:
        return identifier_from_title(opts.title)
    return timestamp_identifier()


def upload_url(credentials: S3Credentials, identifier: str, file_name: str) -> str:
    return f"{credentials.base_url()}/{identifier}/{file_name}"


def build_upload_headers(opts: UploadOptions, credentials: S3Credentials) -> Dict[str, str]:
    headers: Dict[str, str] = {}

    for key, values in opts.metadata.items():
        for i, value in enumerate(values):
            headers[f"x-amz-meta{i:02d}-{key}"] = uri_encode(value)
    for i, tag in enumerate(opts.subject_tags):
        headers[f"x-amz-meta{i:02d}-subject"] = uri_encode(tag)

    headers["authorization"] = f"LOW {credentials.key}:{credentials.secret}"
    headers["x-archive-meta01-collection"] = opts.collection or Collection.DATA.value
    if opts.title:
        headers["x-archive-meta-title"] = uri_encode(opts.title)
    if opts.date is not None:
        headers["x-archive-meta01-date"] = uri_encode(opts.date.strftime("%Y-%m-%d"))
    if opts.description:
        headers["x-archive-meta01-description"] = uri_encode(opts.description)
    if opts.creator:
        headers["x-archive-meta01-creator"] = uri_encode(opts.creator)
    headers["x-archive-meta01-scanner"] = uri_encode(opts.scanner or DEFAULT_SCANNER)

    if opts.auto_make_bucket:
        headers["x-amz-auto-make-bucket"] = "1"
    if opts.keep_old_version:
        headers["x-archive-keep-old-version"] = "1"
    if opts.skip_derive:
        headers["x-archive-queue-derive"] = "0"

    hint = size_hint(opts.upload)
    if hint is not None:
        headers["x-archive-size-hint"] = str(hint)

    headers["x-amz-acl"] = "bucket-owner-full-control"
    return headers


def build_upload_request(opts: UploadOptions, credentials: S3Credentials, identifier: str) -> httpx.Request:
    if not identifier:
        raise RequestBuildError("An identifier is required to build the upload request")
    if not opts.file_name:
        raise RequestBuildError("UploadOptions.file_name is required")
    if not isinstance(opts.upload, UploadSource):
        raise RequestBuildError(
            f"UploadOptions.upload must be an upload source, got {type(opts.upload).__name__}"
        )

    url = upload_url(credentials, identifier, opts.file_name)
    headers = build_upload_headers(opts, credentials)
    try:
        return httpx.Request("PUT", url, headers=headers, content=opts.upload.content())
    except httpx.InvalidURL as exc:
        raise RequestBuildError(f"Unable to create the request: {exc}") from exc
    except UnicodeEncodeError as exc:
        # Header values go out as ASCII; text fields are uri()-wrapped but keys, secret and collection are not
        raise RequestBuildError(f"Upload headers must be ASCII: {exc}") from exc


class ArchiveS3Client:
    """Uploads files to archive.org items.

    ``client`` is an optional shared ``httpx.AsyncClient``; it is used as-is
    and never closed here. Without one, each call opens and closes its own.
    """

    def __init__(
        self,
        credentials: Optional[S3Credentials] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout_seconds: Optional[float] = None,
    ):
        self.credentials = credentials if credentials is not None else S3Credentials.from_settings()
        self.client = client
        self.timeout_seconds = timeout_seconds

    @asynccontextmanager
    async def _http_client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self.client is not None:
            yield self.client
            return
        settings = get_settings()
        timeout_seconds = self.timeout_seconds or settings.ia_upload_timeout_seconds
        timeout = httpx.Timeout(timeout_seconds, connect=20.0)
        async with httpx.AsyncClient(timeout=timeout, headers={"User-Agent": settings.ia_user_agent}) as client:
            yield client

    async def find_identifier(self, identifier: str) -> IdentifierResponse:
        """Ask archive.org for an available identifier based on ``identifier``.

        ``success=False`` is returned as-is; deciding what to do with it is up
        to the caller.
        """
        data = {
            "name": "identifierAvailable",
            "identifier": identifier,
            "findUnique": "true",
        }
        headers = {"Content-Type": "application/x-www-form-urlencoded"}
        async with self._http_client() as client:
            try:
                resp = await client.post(IDENTIFIER_LOOKUP_URL, data=data, headers=headers)
            except httpx.HTTPError as exc:
                raise TransportError(f"Unable to perform the request: {exc}") from exc

        try:
            result = IdentifierResponse.model_validate_json(resp.content)
        except ValidationError as exc:
            raise DecodeError(
                f"Unable to decode the identifier response ({resp.status_code}): {resp.text[:500]}"
            ) from exc
        logger.debug("Identifier lookup for %s: %s", identifier, result)
        return result

    async def resolve_identifier(self, opts: UploadOptions) -> str:
        candidate = derive_identifier(opts)
        if opts.skip_unique_check:
            return candidate

        try:
            found = await self.find_identifier(candidate)
        except (TransportError, DecodeError) as exc:
            raise IdentifierUnresolvedError(f"Unable to find a unique identifier: {exc}") from exc
        if not found.success or not found.identifier:
            raise IdentifierUnresolvedError(
                f"Finding a unique identifier for {candidate!r} failed without an error"
            )
        if found.identifier != candidate:
            logger.info("Identifier %s is taken; using %s", candidate, found.identifier)
        return found.identifier

    async def upload(self, opts: UploadOptions) -> UploadResult:
        identifier = await self.resolve_identifier(opts)
        request = build_upload_request(opts, self.credentials, identifier)
        logger.info("Uploading %s to item %s", opts.file_name, identifier)
        logger.debug(
            "PUT %s with headers %s",
            request.url,
            sorted(k for k in request.headers.keys() if k != "authorization"),
        )

        async with self._http_client() as client:
            # send() does not apply the client's default headers such as User-Agent
            for key, value in client.headers.items():
                request.headers.setdefault(key, value)
            try:
                resp = await client.send(request)
            except httpx.HTTPError as exc:
                raise TransportError(f"Unable to upload {opts.file_name} to {identifier}: {exc}") from exc

        if resp.status_code // 100 != 2:
            raise UploadRejectedError(resp.status_code, resp.text)

        logger.info("Uploaded %s to item %s (status=%s)", opts.file_name, identifier, resp.status_code)
        return UploadResult(identifier=identifier, url=str(request.url), status_code=resp.status_code)
