from .attachment import Attachment, Thumbnail
from .shipment import ShipmentRecord, RecordsResponse
from .upload import UploadResponse, ErrorResponse

__all__ = [
    "Attachment",
    "Thumbnail",
    "ShipmentRecord",
    "RecordsResponse",
    "UploadResponse",
    "ErrorResponse",
]
