"""String encodings the archive.org endpoints expect."""

from datetime import datetime, timezone
from typing import Optional
from urllib.parse import quote

# Go's url.PathEscape alphabet: "/", ";", "," and "?" are escaped, these are not.
_PATH_SEGMENT_SAFE = "$&+:=@"

_IDENTIFIER_CHARS = frozenset("abcdefghijklmnopqrstuvwxyz0123456789")


def path_escape(value: str) -> str:
    return quote(value, safe=_PATH_SEGMENT_SAFE)


def uri_encode(value: str) -> str:
    """Wrap a header value as ``uri(<percent-escaped>)``.

    Query escaping turns spaces into ``+``, which archive.org does not decode
    back to spaces; path escaping produces ``%20`` instead.
    """
    return f"uri({path_escape(value)})"


def identifier_from_title(title: str) -> str:
    """Lower-case the title and replace every character outside [a-z0-9] with "-".

    Runs of hyphens are kept as they are.
    """
    return "".join(c if c in _IDENTIFIER_CHARS else "-" for c in title.lower())


def timestamp_identifier(now: Optional[datetime] = None) -> str:
    """Format a UTC timestamp as ``YYYY-MM-DDTHHMMSS[.fraction]Z``.

    Trailing zeros of the fraction are trimmed and the fraction is dropped
    entirely when it is zero.
    """
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    stamp = now.strftime("%Y-%m-%dT%H%M%S")
    fraction = f"{now.microsecond:06d}".rstrip("0")
    if fraction:
        stamp = f"{stamp}.{fraction}"
    return f"{stamp}Z"
