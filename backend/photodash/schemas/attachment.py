"""
Baserow file descriptor schemas.
"""
from pydantic import BaseModel, ConfigDict
from typing import Optional, Dict


class Thumbnail(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    width: Optional[int] = None
    height: Optional[int] = None


class Attachment(BaseModel):
    """File stored by Baserow, as returned by the upload-file endpoint."""
    # Unknown keys (visible_name, is_image, uploaded_at, ...) are kept so the
    # descriptor can be patched back onto a row unchanged.
    model_config = ConfigDict(frozen=True, extra="allow")

    id: Optional[int] = None
    name: str
    url: str
    thumbnails: Optional[Dict[str, Thumbnail]] = None
    mime_type: Optional[str] = None
    size: Optional[int] = None
    image_width: Optional[int] = None
    image_height: Optional[int] = None

    def preview_url(self, size: str = "small") -> str:
        thumbnail = (self.thumbnails or {}).get(size)
        return thumbnail.url if thumbnail else self.url

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)
