"""
Upload endpoint schemas.
"""
from pydantic import BaseModel, ConfigDict, Field

from photodash.schemas.attachment import Attachment


class UploadResponse(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    row_id: int = Field(alias="rowId")
    photo: Attachment


class ErrorResponse(BaseModel):
    error: str
