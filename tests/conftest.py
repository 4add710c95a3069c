import httpx
import pytest

from archivedotorg.core.config import get_settings
from archivedotorg.schemas.s3 import S3Credentials


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    # Keep a developer's .env and IA_* variables out of the tests
    monkeypatch.chdir(tmp_path)
    for name in ("IA_S3_ACCESS_KEY", "IA_S3_SECRET_KEY", "IA_S3_URL", "IA_USER_AGENT"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def credentials():
    return S3Credentials(key="access", secret="secret")


class Recorder:
    """Collects requests seen by a MockTransport and answers from a handler."""

    def __init__(self, handler):
        self.handler = handler
        self.requests = []
        self.bodies = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.bodies.append(await request.aread())
        self.requests.append(request)
        return self.handler(request)


@pytest.fixture
def make_client():
    def factory(handler):
        recorder = Recorder(handler)
        return httpx.AsyncClient(transport=httpx.MockTransport(recorder)), recorder

    return factory
