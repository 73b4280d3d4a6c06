import json
from collections.abc import Generator
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from photodash.config.settings import Settings
from photodash.main import create_app

TABLE_ID = "42"
ROWS_PATH = f"/api/database/rows/table/{TABLE_ID}/"
UPLOAD_PATH = "/api/user-files/upload-file/"

UPLOADED_ATTACHMENT: dict[str, Any] = {
    "id": 991,
    "name": "b1f3c0_dock-photo.png",
    "url": "https://files.baserow.test/user_files/b1f3c0_dock-photo.png",
    "thumbnails": {
        "tiny": {"url": "https://files.baserow.test/thumbnails/tiny/b1f3c0_dock-photo.png", "width": None, "height": 21},
        "small": {"url": "https://files.baserow.test/thumbnails/small/b1f3c0_dock-photo.png", "width": 48, "height": 48},
    },
    "mime_type": "image/png",
    "size": 229940,
    "image_width": 1280,
    "image_height": 585,
    "is_image": True,
    "original_name": "dock-photo.png",
}


class FakeBaserow:
    """Stand-in for the Baserow REST API, recording every request it receives."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.rows: tuple[int, Any] = (200, {"count": 0, "next": None, "previous": None, "results": []})
        self.upload: tuple[int, Any] = (200, UPLOADED_ATTACHMENT)
        self.patch: tuple[int, Any] = (200, {"id": 1})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.method == "GET" and path == ROWS_PATH:
            return self._respond(self.rows)
        if request.method == "POST" and path == UPLOAD_PATH:
            return self._respond(self.upload)
        if request.method == "PATCH" and path.startswith(ROWS_PATH):
            return self._respond(self.patch)
        return httpx.Response(404, json={"error": "ERROR_URL_NOT_FOUND"})

    @staticmethod
    def _respond(spec: tuple[int, Any]) -> httpx.Response:
        status, body = spec
        if isinstance(body, (bytes, str)):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)

    def requests_for(self, method: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method]

    def patch_bodies(self) -> list[dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests_for("PATCH")]


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        api_token="test-token",
        base_url="https://baserow.test/",
        table_id=TABLE_ID,
    )


@pytest.fixture()
def fake_baserow() -> FakeBaserow:
    return FakeBaserow()


@pytest.fixture()
def transport(fake_baserow: FakeBaserow) -> httpx.MockTransport:
    return httpx.MockTransport(fake_baserow)


@pytest.fixture()
def api_client(settings: Settings, transport: httpx.MockTransport) -> Generator[TestClient, None, None]:
    app = create_app(settings, transport=transport)
    with TestClient(app) as client:
        yield client
