"""
Async client for the Baserow REST API.
"""
import logging
import time
from typing import Any, BinaryIO, Dict, List, Optional, Union

import httpx
from pydantic import ValidationError

from photodash.config.mapping_loader import get_field_mapping
from photodash.config.settings import Settings
from photodash.schemas import Attachment
from photodash.services.exceptions import UpstreamError

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    """Prefer Baserow's own `error` field over the generic status text."""
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and isinstance(payload.get("error"), str):
        return payload["error"]
    return f"Request failed with status code {response.status_code}"


class BaserowClient:
    """Thin wrapper around one pooled httpx.AsyncClient, authenticated with a database token."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._client = httpx.AsyncClient(
            base_url=settings.base_url,
            headers={"Authorization": f"Token {settings.api_token}"},
            timeout=settings.timeout_seconds,
            transport=transport,
        )

    @property
    def rows_path(self) -> str:
        return f"/api/database/rows/table/{self.settings.table_id}/"

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            raise UpstreamError(None, str(e) or e.__class__.__name__) from e
        if not response.is_success:
            raise UpstreamError(response.status_code, _error_message(response))
        return response

    async def list_rows(self) -> List[Dict[str, Any]]:
        """Fetch the first page of rows with human readable field names."""
        response = await self._request(
            "GET",
            self.rows_path,
            params={"user_field_names": "true"},
            headers={"Cache-Control": "no-cache"},
        )
        try:
            payload = response.json()
        except ValueError:
            logger.warning("Baserow returned a non-JSON row listing; treating it as empty")
            return []
        if isinstance(payload, dict) and isinstance(payload.get("results"), list):
            if payload.get("next"):
                # TODO: follow `next` once the dashboard needs more than one page of rows
                logger.warning(
                    "Baserow table %s has more rows than one page (count=%s); only the first page is listed",
                    self.settings.table_id,
                    payload.get("count"),
                )
            return payload["results"]
        if isinstance(payload, list):
            return payload
        return []

    async def upload_file(
        self,
        filename: str,
        fileobj: Union[BinaryIO, bytes],
        content_type: Optional[str] = None
    ) -> Attachment:
        """Send a file to the user-files endpoint and return the stored descriptor."""
        start = time.perf_counter()
        response = await self._request(
            "POST",
            "/api/user-files/upload-file/",
            files={"file": (filename, fileobj, content_type or "application/octet-stream")},
        )
        try:
            attachment = Attachment.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise UpstreamError(response.status_code, "Baserow returned an unreadable file descriptor") from e
        logger.info(
            "Uploaded %s to Baserow as %s in %.2fs",
            filename,
            attachment.name,
            time.perf_counter() - start,
        )
        return attachment

    async def update_row_photo(self, row_id: int, attachment: Attachment) -> Dict[str, Any]:
        """Replace the row's photo list with the single given attachment."""
        photo_column = get_field_mapping("photo").column
        response = await self._request(
            "PATCH",
            f"{self.rows_path}{row_id}/",
            params={"user_field_names": "true"},
            json={photo_column: [attachment.to_payload()]},
        )
        logger.info("Set %s on row %s to %s", photo_column, row_id, attachment.name)
        try:
            return response.json()
        except ValueError:
            return {}
