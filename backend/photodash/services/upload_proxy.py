"""
Photo upload proxy: multipart request -> Baserow user file -> row patch.
"""
import logging
import time
from typing import Any, List, Optional

from starlette.datastructures import FormData, Headers, UploadFile
from starlette.formparsers import MultiPartException, MultiPartParser
from starlette.requests import Request

from photodash.config.settings import DEFAULT_MAX_UPLOAD_BYTES
from photodash.schemas import UploadResponse
from photodash.services.baserow_client import BaserowClient
from photodash.services.exceptions import (
    FileTooLarge, InvalidRecordId, MalformedRequest, MethodNotAllowed, MissingFile
)

logger = logging.getLogger(__name__)

ACCEPTED_CONTENT_TYPES = ("image/jpeg", "image/png")
FILE_FIELD = "file"
RECORD_ID_FIELD = "recordId"


def _media_type(value: Optional[str]) -> str:
    return (value or "").split(";", 1)[0].strip().lower()


def parse_record_id(raw: Any) -> int:
    """
    Coerce the `recordId` form value to a positive integer.

    Zero is rejected along with blank and missing values: Baserow row ids start at 1.
    """
    if not isinstance(raw, str):
        raise InvalidRecordId("Invalid record id.")
    try:
        number = float(raw.strip())
    except ValueError:
        raise InvalidRecordId("Invalid record id.")
    if not number.is_integer() or number <= 0:
        raise InvalidRecordId("Invalid record id.")
    return int(number)


class PartTooLarge(MultiPartException):
    """Raised mid-parse so Starlette closes the spooled files it already opened."""

    def __init__(self, filename: Optional[str], limit: int):
        super().__init__(f"{filename or 'upload'} exceeds the upload limit of {limit} bytes.")


class CappedMultiPartParser(MultiPartParser):
    """Multipart parser that stops reading as soon as one file part passes the cap."""

    def __init__(self, headers: Headers, stream: Any, max_file_size: int):
        super().__init__(headers, stream)
        self.max_file_size = max_file_size
        self._part_bytes = 0

    def on_part_begin(self) -> None:
        super().on_part_begin()
        self._part_bytes = 0

    def on_part_data(self, data: bytes, start: int, end: int) -> None:
        self._part_bytes += end - start
        upload = self._current_part.file
        if upload is not None and self._part_bytes > self.max_file_size:
            raise PartTooLarge(upload.filename, self.max_file_size)
        super().on_part_data(data, start, end)


class UploadProxy:
    """Forwards one image to Baserow and links it to a row."""

    def __init__(self, client: BaserowClient, max_file_size: int = DEFAULT_MAX_UPLOAD_BYTES):
        self.client = client
        self.max_file_size = max_file_size

    async def handle(self, request: Request) -> UploadResponse:
        if request.method != "POST":
            raise MethodNotAllowed(request.method)

        form = await self._parse_form(request)
        try:
            upload = self._accepted_file(form)
            record_ids = form.getlist(RECORD_ID_FIELD)
            row_id = parse_record_id(record_ids[0] if record_ids else None)
            return await self._forward(upload, row_id)
        finally:
            await form.close()

    async def _parse_form(self, request: Request) -> FormData:
        if _media_type(request.headers.get("content-type")) != "multipart/form-data":
            raise MalformedRequest("Expected a multipart/form-data upload.")
        parser = CappedMultiPartParser(request.headers, request.stream(), self.max_file_size)
        try:
            return await parser.parse()
        except PartTooLarge as e:
            raise FileTooLarge(e.message) from e
        except MultiPartException as e:
            raise MalformedRequest(f"Could not parse upload: {e.message}") from e

    def _accepted_file(self, form: FormData) -> UploadFile:
        """
        Apply the image filter, then pick the first `file` part.

        Parts with any other declared type are dropped without an error, so a
        lone PDF ends up reported as a missing file.
        """
        accepted: List[UploadFile] = []
        for key, value in form.multi_items():
            if not isinstance(value, UploadFile):
                continue
            if _media_type(value.content_type) not in ACCEPTED_CONTENT_TYPES:
                logger.info("Dropping part %s (%s): not a JPEG or PNG", key, value.content_type)
                continue
            if key == FILE_FIELD:
                accepted.append(value)

        if not accepted:
            raise MissingFile("No file uploaded.")
        return accepted[0]

    async def _forward(self, upload: UploadFile, row_id: int) -> UploadResponse:
        start = time.perf_counter()
        filename = upload.filename or "upload"
        await upload.seek(0)
        # Bounded by the part cap; UploadFile.read moves disk reads off the event loop.
        content = await upload.read()
        attachment = await self.client.upload_file(filename, content, upload.content_type)

        try:
            await self.client.update_row_photo(row_id, attachment)
        except Exception:
            # Baserow keeps the user file; nothing references it now.
            logger.warning(
                "Orphaned Baserow upload %s (%s): patching row %s failed",
                attachment.name,
                attachment.url,
                row_id,
            )
            raise

        logger.info(
            "Attached %s (%d bytes) to row %s in %.2fs",
            filename,
            len(content),
            row_id,
            time.perf_counter() - start,
        )
        return UploadResponse(row_id=row_id, photo=attachment)
