"""
Client for the Wayback Machine "Save Page Now" endpoint.

The response is handed back untouched: a capture can be accepted with a 200,
redirected, or throttled, and what counts as success is the caller's call.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional, Union

import httpx

from archivedotorg.core.config import get_settings
from archivedotorg.core.exceptions import RequestBuildError, TransportError
from archivedotorg.schemas.web import SaveOptions, SaveResult

logger = logging.getLogger(__name__)

SAVE_URL_FORMAT = "https://web.archive.org/save/{}"


def build_save_request(target_url: Union[str, httpx.URL], options: Optional[SaveOptions] = None) -> httpx.Request:
    """Build the POST for a save request.

    The endpoint wants the target both in the path and as the ``url`` form field.
    """
    link = str(target_url)
    if not link:
        raise RequestBuildError("A target URL is required")

    data = (options or SaveOptions()).values()
    data["url"] = link
    headers = {"Content-Type": "application/x-www-form-urlencoded"}
    try:
        return httpx.Request("POST", SAVE_URL_FORMAT.format(link), headers=headers, data=data)
    except httpx.InvalidURL as exc:
        raise RequestBuildError(f"Unable to create the save request for {link}: {exc}") from exc


class WaybackClient:
    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout_seconds: Optional[float] = None):
        self.client = client
        self.timeout_seconds = timeout_seconds

    @asynccontextmanager
    async def _http_client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self.client is not None:
            yield self.client
            return
        settings = get_settings()
        timeout = httpx.Timeout(self.timeout_seconds or settings.ia_save_timeout_seconds, connect=20.0)
        async with httpx.AsyncClient(timeout=timeout, headers={"User-Agent": settings.ia_user_agent}) as client:
            yield client

    async def save(self, target_url: Union[str, httpx.URL], options: Optional[SaveOptions] = None) -> SaveResult:
        request = build_save_request(target_url, options)
        logger.info("Requesting a Wayback capture of %s", target_url)

        async with self._http_client() as client:
            # send() does not apply the client's default headers such as User-Agent
            for key, value in client.headers.items():
                request.headers.setdefault(key, value)
            try:
                resp = await client.send(request)
            except httpx.HTTPError as exc:
                raise TransportError(f"Unable to save {target_url}: {exc}") from exc

        logger.debug("Save of %s answered %s", target_url, resp.status_code)
        headers: Dict[str, List[str]] = {}
        for key, value in resp.headers.multi_items():
            headers.setdefault(key, []).append(value)
        return SaveResult(status_code=resp.status_code, headers=headers)
