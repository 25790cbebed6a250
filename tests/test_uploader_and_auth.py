from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from adapters.auth import login
from adapters.credential_store import FileCredentialStore, StaticCredentials, credentials_from_settings
from adapters.uploader import S3Uploader, guess_content_type
from core.domain.errors import RequestFailed, Unauthenticated, UploadFailed

SIGNED = "https://bucket.s3.test/uploads/photo.png?X-Amz-Signature=abc"


def _storage_handler(seen, *, sign_status=200, put_status=200, sign_body=None):
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.method == "POST":
            return httpx.Response(sign_status, json=sign_body if sign_body is not None else {"url": SIGNED})
        return httpx.Response(put_status)

    return handler


def test_two_step_upload(settings, tmp_path):
    photo = tmp_path / "photo.png"
    photo.write_bytes(b"\x89PNG-bytes")
    seen: list[httpx.Request] = []
    uploader = S3Uploader(settings, StaticCredentials("tok"), transport=httpx.MockTransport(_storage_handler(seen)))

    result = asyncio.run(uploader.upload(photo))

    sign, put = seen
    assert str(sign.url) == "http://api.test/dev/file/upload"
    assert sign.headers["Authorization"] == "Bearer tok"
    assert json.loads(sign.content) == {"fileName": "photo.png", "fileType": "image/png"}
    assert put.method == "PUT"
    assert str(put.url) == SIGNED
    assert "Authorization" not in put.headers
    assert put.headers["Content-Type"] == "image/png"
    assert put.content == b"\x89PNG-bytes"
    assert result.file_url == "https://bucket.s3.test/uploads/photo.png"


def test_sign_failure(settings, tmp_path):
    photo = tmp_path / "a.png"
    photo.write_bytes(b"x")
    seen: list[httpx.Request] = []
    handler = _storage_handler(seen, sign_status=500)
    uploader = S3Uploader(settings, StaticCredentials("tok"), transport=httpx.MockTransport(handler))

    with pytest.raises(UploadFailed) as excinfo:
        asyncio.run(uploader.upload(photo))
    assert excinfo.value.step == "sign"
    assert len(seen) == 1


def test_missing_signed_url(settings, tmp_path):
    photo = tmp_path / "a.png"
    photo.write_bytes(b"x")
    handler = _storage_handler([], sign_body={"nope": True})
    uploader = S3Uploader(settings, StaticCredentials("tok"), transport=httpx.MockTransport(handler))

    with pytest.raises(UploadFailed, match="signed URL"):
        asyncio.run(uploader.upload(photo))


def test_put_failure(settings, tmp_path):
    photo = tmp_path / "a.png"
    photo.write_bytes(b"x")
    handler = _storage_handler([], put_status=403)
    uploader = S3Uploader(settings, StaticCredentials("tok"), transport=httpx.MockTransport(handler))

    with pytest.raises(UploadFailed) as excinfo:
        asyncio.run(uploader.upload(photo))
    assert excinfo.value.step == "put"


def test_upload_without_token(settings, tmp_path):
    photo = tmp_path / "a.png"
    photo.write_bytes(b"x")
    seen: list[httpx.Request] = []
    uploader = S3Uploader(settings, StaticCredentials(None), transport=httpx.MockTransport(_storage_handler(seen)))

    with pytest.raises(Unauthenticated):
        asyncio.run(uploader.upload(photo))
    assert seen == []


def test_unreadable_file(settings, tmp_path):
    uploader = S3Uploader(settings, StaticCredentials("tok"), transport=httpx.MockTransport(_storage_handler([])))
    with pytest.raises(UploadFailed) as excinfo:
        asyncio.run(uploader.upload(tmp_path / "missing.png"))
    assert excinfo.value.step == "read"


def test_guess_content_type(tmp_path):
    assert guess_content_type(tmp_path / "clip.mp4") == "video/mp4"
    assert guess_content_type(tmp_path / "blob") == "application/octet-stream"


def test_login_returns_token_without_bearer(settings):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"token": "jwt-123"})

    token = asyncio.run(
        login(settings=settings, email="a@b.c", password="pw", transport=httpx.MockTransport(handler))
    )
    assert token == "jwt-123"
    assert seen[0].url.path == "/dev/auth/login"
    assert "Authorization" not in seen[0].headers
    assert json.loads(seen[0].content) == {"email": "a@b.c", "password": "pw"}


def test_login_without_token_fails(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"user": {}})

    with pytest.raises(RequestFailed, match="No token received"):
        asyncio.run(login(settings=settings, email="a", password="b", transport=httpx.MockTransport(handler)))


def test_login_rejected(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"message": "Invalid credentials"})

    with pytest.raises(RequestFailed) as excinfo:
        asyncio.run(login(settings=settings, email="a", password="b", transport=httpx.MockTransport(handler)))
    assert excinfo.value.status == 401
    assert excinfo.value.message == "Invalid credentials"


def test_file_credential_store_roundtrip(tmp_path):
    store = FileCredentialStore(tmp_path / "cfg" / "token")
    assert store.get_token() is None
    store.save_token(" tok \n")
    assert store.get_token() == "tok"
    assert store.clear() is True
    assert store.clear() is False


def test_static_token_setting_wins(settings):
    store = credentials_from_settings(settings)
    assert isinstance(store, FileCredentialStore)

    pinned = credentials_from_settings(settings.model_copy(update={"token": "env-token"}))
    assert pinned.get_token() == "env-token"
