from typing import Any, Dict, List
from unittest.mock import MagicMock

import pytest
from starlette.datastructures import Headers, UploadFile
from starlette.requests import Request

from photodash.services.baserow_client import BaserowClient
from photodash.services.exceptions import FileTooLarge, InvalidRecordId, MethodNotAllowed
from photodash.services.upload_proxy import (
    CappedMultiPartParser, UploadProxy, _media_type, parse_record_id
)

BOUNDARY = "dockboundary"
CONTENT_TYPE = f"multipart/form-data; boundary={BOUNDARY}"


def _file_head(filename: str = "dock.png", content_type: str = "image/png") -> bytes:
    return (
        f"--{BOUNDARY}\r\n"
        'Content-Disposition: form-data; name="recordId"\r\n\r\n'
        "7\r\n"
        f"--{BOUNDARY}\r\n"
        f'Content-Disposition: form-data; name="file"; filename="{filename}"\r\n'
        f"Content-Type: {content_type}\r\n\r\n"
    ).encode()


def _tail() -> bytes:
    return f"\r\n--{BOUNDARY}--\r\n".encode()


def _request(chunks: List[bytes], method: str = "POST") -> Request:
    """Request whose body arrives one chunk per receive() call; unread chunks stay in the list."""
    scope: Dict[str, Any] = {
        "type": "http",
        "method": method,
        "path": "/api/upload",
        "query_string": b"",
        "headers": [(b"content-type", CONTENT_TYPE.encode())],
    }

    async def receive() -> Dict[str, Any]:
        body = chunks.pop(0) if chunks else b""
        return {"type": "http.request", "body": body, "more_body": bool(chunks)}

    return Request(scope, receive)


def _client() -> MagicMock:
    return MagicMock(spec=BaserowClient)


class TestParseRecordId:
    @pytest.mark.parametrize("raw,expected", [
        ("1", 1),
        ("42", 42),
        (" 7 ", 7),
        ("12.0", 12),
        ("1e3", 1000),
    ])
    def test_valid(self, raw: str, expected: int) -> None:
        assert parse_record_id(raw) == expected

    # "0" is rejected the same way as a missing value
    @pytest.mark.parametrize("raw", ["0", "", "   ", "-4", "2.5", "abc", "nan", "inf", None])
    def test_invalid(self, raw: object) -> None:
        with pytest.raises(InvalidRecordId, match="Invalid record id."):
            parse_record_id(raw)


class TestMediaType:
    @pytest.mark.parametrize("value,expected", [
        ("image/png", "image/png"),
        ("IMAGE/JPEG", "image/jpeg"),
        ("multipart/form-data; boundary=abc", "multipart/form-data"),
        (None, ""),
    ])
    def test_media_type(self, value: object, expected: str) -> None:
        assert _media_type(value) == expected


@pytest.mark.anyio
class TestCappedParser:
    async def test_small_file_parses(self) -> None:
        chunks = [_file_head(), b"png-bytes", _tail()]
        parser = CappedMultiPartParser(Headers({"content-type": CONTENT_TYPE}), _request(chunks).stream(), 16)
        form = await parser.parse()
        try:
            upload = form["file"]
            assert isinstance(upload, UploadFile)
            await upload.seek(0)
            assert await upload.read() == b"png-bytes"
            assert form["recordId"] == "7"
        finally:
            await form.close()

    async def test_text_fields_are_not_counted(self) -> None:
        body = (
            f"--{BOUNDARY}\r\n"
            'Content-Disposition: form-data; name="note"\r\n\r\n'
            "a note longer than the cap\r\n"
        ).encode() + _file_head() + b"abc" + _tail()
        parser = CappedMultiPartParser(Headers({"content-type": CONTENT_TYPE}), _request([body]).stream(), 4)
        form = await parser.parse()
        try:
            assert form["note"] == "a note longer than the cap"
        finally:
            await form.close()


@pytest.mark.anyio
class TestUploadProxyLimits:
    async def test_oversized_part_stops_reading_the_body(self) -> None:
        chunks = [_file_head() + b"x" * 64] + [b"x" * 1024 for _ in range(4)] + [_tail()]
        client = _client()
        proxy = UploadProxy(client, max_file_size=16)

        with pytest.raises(FileTooLarge, match="dock.png exceeds the upload limit of 16 bytes."):
            await proxy.handle(_request(chunks))

        # The later chunks were never pulled off the wire.
        assert len(chunks) >= 4
        client.upload_file.assert_not_called()
        client.update_row_photo.assert_not_called()

    async def test_oversized_non_image_part_stops_reading(self) -> None:
        chunks = [_file_head("manifest.pdf", "application/pdf") + b"%PDF" * 16] + [b"0" * 1024 for _ in range(4)] + [_tail()]
        client = _client()

        with pytest.raises(FileTooLarge, match="manifest.pdf"):
            await UploadProxy(client, max_file_size=16).handle(_request(chunks))

        assert len(chunks) >= 4
        client.upload_file.assert_not_called()

    async def test_non_post_is_rejected_before_reading(self) -> None:
        chunks = [_file_head(), b"png-bytes", _tail()]
        client = _client()

        with pytest.raises(MethodNotAllowed) as excinfo:
            await UploadProxy(client).handle(_request(chunks, method="PUT"))

        assert excinfo.value.allowed == ("POST",)
        assert len(chunks) == 3
        client.upload_file.assert_not_called()
