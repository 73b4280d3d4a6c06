"""
Shipment record schemas.
"""
from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel
from typing import Optional, List

from photodash.schemas.attachment import Attachment


class ShipmentRecord(BaseModel):
    """One Baserow row, normalized for display."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: int = Field(gt=0)
    customer_name: str = "Unknown"
    inbound_outbound: str = "N/A"
    order_type: str = "N/A"
    carrier_name: str = "N/A"
    invoiced: bool = False
    photo: List[Attachment] = Field(default_factory=list)

    @computed_field(alias="previewUrl")
    @property
    def preview_url(self) -> Optional[str]:
        if not self.photo:
            return None
        return self.photo[0].preview_url()


class RecordsResponse(BaseModel):
    rows: List[ShipmentRecord]
