import datetime
import io

import pytest

from archivedotorg.core.exceptions import RequestBuildError
from archivedotorg.schemas.s3 import Collection, S3Credentials, UploadOptions
from archivedotorg.services.s3_client import build_upload_headers, build_upload_request, upload_url
from archivedotorg.services.upload_sources import BytesSource, FileSource, StreamSource


def make_opts(**kwargs):
    kwargs.setdefault("upload", BytesSource(b"This is a test"))
    kwargs.setdefault("file_name", "test.txt")
    return UploadOptions(**kwargs)


def test_upload_url_defaults_host(credentials):
    assert upload_url(credentials, "item", "test.txt") == "https://s3.us.archive.org/item/test.txt"


def test_upload_url_strips_trailing_slash():
    creds = S3Credentials(key="k", secret="s", url="http://localhost:8080/")
    assert upload_url(creds, "item", "test.txt") == "http://localhost:8080/item/test.txt"


def test_required_headers(credentials):
    headers = build_upload_headers(make_opts(), credentials)
    assert headers["authorization"] == "LOW access:secret"
    assert headers["x-amz-acl"] == "bucket-owner-full-control"
    assert headers["x-archive-meta01-collection"] == "opensource_media"
    assert headers["x-archive-meta01-scanner"] == "uri(archivedotorg%2Fs3)"


def test_optional_headers_omitted(credentials):
    headers = build_upload_headers(make_opts(), credentials)
    for name in (
        "x-archive-meta-title",
        "x-archive-meta01-date",
        "x-archive-meta01-description",
        "x-archive-meta01-creator",
        "x-amz-auto-make-bucket",
        "x-archive-keep-old-version",
        "x-archive-queue-derive",
    ):
        assert name not in headers
    assert not any(name.startswith("x-amz-meta0") for name in headers)


def test_optional_headers_present(credentials):
    opts = make_opts(
        title="this is the title",
        description="This is my description\nit has many\n\nlines.",
        creator="TestUpload",
        date=datetime.date(2021, 10, 31),
        collection=Collection.TEST,
        scanner="my scanner",
        auto_make_bucket=True,
        keep_old_version=True,
        skip_derive=True,
    )
    headers = build_upload_headers(opts, credentials)
    assert headers["x-archive-meta-title"] == "uri(this%20is%20the%20title)"
    assert headers["x-archive-meta01-description"] == "uri(This%20is%20my%20description%0Ait%20has%20many%0A%0Alines.)"
    assert headers["x-archive-meta01-creator"] == "uri(TestUpload)"
    assert headers["x-archive-meta01-date"] == "uri(2021-10-31)"
    assert headers["x-archive-meta01-collection"] == "test_collection"
    assert headers["x-archive-meta01-scanner"] == "uri(my%20scanner)"
    assert headers["x-amz-auto-make-bucket"] == "1"
    assert headers["x-archive-keep-old-version"] == "1"
    assert headers["x-archive-queue-derive"] == "0"


def test_unknown_collection_passes_through(credentials):
    headers = build_upload_headers(make_opts(collection="my_collection"), credentials)
    assert headers["x-archive-meta01-collection"] == "my_collection"


def test_subject_tags_are_indexed(credentials):
    headers = build_upload_headers(make_opts(subject_tags=["subject1", "subject2"]), credentials)
    assert headers["x-amz-meta00-subject"] == "uri(subject1)"
    assert headers["x-amz-meta01-subject"] == "uri(subject2)"


def test_metadata_values_are_indexed_per_key(credentials):
    opts = make_opts(metadata={"key1": ["value1", "value2"], "key2": ["value 3"]})
    headers = build_upload_headers(opts, credentials)
    assert headers["x-amz-meta00-key1"] == "uri(value1)"
    assert headers["x-amz-meta01-key1"] == "uri(value2)"
    assert headers["x-amz-meta00-key2"] == "uri(value%203)"
    assert "x-amz-meta01-key2" not in headers


def test_size_hint_for_bytes(credentials):
    headers = build_upload_headers(make_opts(upload=BytesSource(b"This is a test")), credentials)
    assert headers["x-archive-size-hint"] == "14"


def test_size_hint_for_file(credentials, tmp_path):
    path = tmp_path / "data.bin"
    path.write_bytes(b"x" * 1000)
    with path.open("rb") as f:
        f.seek(100)
        headers = build_upload_headers(make_opts(upload=FileSource(f)), credentials)
    assert headers["x-archive-size-hint"] == "900"


def test_no_size_hint_for_stream(credentials):
    headers = build_upload_headers(make_opts(upload=StreamSource(io.BytesIO(b"abc"))), credentials)
    assert "x-archive-size-hint" not in headers


def test_no_size_hint_for_empty_bytes(credentials):
    headers = build_upload_headers(make_opts(upload=BytesSource(b"")), credentials)
    assert "x-archive-size-hint" not in headers


def test_build_upload_request(credentials):
    request = build_upload_request(make_opts(title="A Title"), credentials, "a-title")
    assert request.method == "PUT"
    assert str(request.url) == "https://s3.us.archive.org/a-title/test.txt"
    assert request.headers["x-archive-meta-title"] == "uri(A%20Title)"
    assert request.read() == b"This is a test"


def test_build_upload_request_requires_file_name(credentials):
    with pytest.raises(RequestBuildError):
        build_upload_request(make_opts(file_name=""), credentials, "item")


def test_build_upload_request_requires_source(credentials):
    with pytest.raises(RequestBuildError):
        build_upload_request(make_opts(upload=b"raw bytes"), credentials, "item")


def test_non_ascii_collection_is_a_build_error(credentials):
    with pytest.raises(RequestBuildError):
        build_upload_request(make_opts(collection="colección"), credentials, "item")


def test_non_ascii_secret_is_a_build_error():
    creds = S3Credentials(key="k", secret="sécret")
    with pytest.raises(RequestBuildError):
        build_upload_request(make_opts(), creds, "item")


def test_non_ascii_text_fields_are_uri_wrapped(credentials):
    request = build_upload_request(make_opts(title="Café", metadata={"note": ["naïve"]}), credentials, "item")
    assert request.headers["x-archive-meta-title"] == "uri(Caf%C3%A9)"
    assert request.headers["x-amz-meta00-note"] == "uri(na%C3%AFve)"
