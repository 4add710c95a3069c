"""Errors raised by the upload and save clients.

Nothing in this package retries; every error is raised to the caller with the
underlying cause chained where there is one.
"""


class ArchiveError(Exception):
    """Base class for every error raised by archivedotorg."""


class RequestBuildError(ArchiveError):
    """The supplied options cannot form a valid request."""


class TransportError(ArchiveError):
    """The request could not be sent or its response could not be read."""


class DecodeError(ArchiveError):
    """The identifier lookup answered with something other than the expected JSON object."""


class IdentifierUnresolvedError(ArchiveError):
    """No verified identifier is available, so the upload was not attempted."""


class UploadRejectedError(ArchiveError):
    """The upload endpoint answered with a non-2xx status.

    ``body`` holds the raw response text. For throttling the service sends an
    XML ``<Error>`` document with ``<Code>SlowDown</Code>``; it is not parsed.
    """

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"{status_code} Response: {body}")
