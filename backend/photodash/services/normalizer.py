"""
Data normalization service - converts raw Baserow rows to ShipmentRecord.

Baserow field types are configured per table and can change shape (plain text
today, single select tomorrow). Every raw cell goes through the functions here
so the rest of the application only ever sees display strings.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from photodash.config.mapping_loader import FieldMapping, get_field_mappings
from photodash.schemas import Attachment, ShipmentRecord

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK = "N/A"

# absent | text | number | boolean | select option {id, value, color} | list of any of these
RawFieldValue = Union[None, str, int, float, bool, Mapping[str, Any], List[Any]]


def _display_value(value: RawFieldValue) -> Optional[str]:
    """Recursively reduce a raw cell to a string, or None when nothing is displayable."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    # bool is a subclass of int, check it first
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, list):
        parts = []
        for item in value:
            text = _display_value(item)
            if text is None or not text.strip():
                continue
            parts.append(text)
        return ", ".join(parts) if parts else None
    if isinstance(value, Mapping):
        option = value.get("value")
        return option if isinstance(option, str) else None
    return None


def normalize_display(value: RawFieldValue, fallback: str = DEFAULT_FALLBACK) -> str:
    """Normalize a raw cell to a non-empty, trimmed display string."""
    text = _display_value(value)
    if text is None:
        return fallback
    text = text.strip()
    return text if text else fallback


def normalize_select(value: RawFieldValue, fallback: str = DEFAULT_FALLBACK) -> str:
    """
    Normalize a single-select cell.

    Stricter than normalize_display: text and numbers are stringified, a select
    option yields its `value`, and anything else (lists included) is the fallback.
    """
    if isinstance(value, Mapping):
        value = value.get("value")
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return fallback
    text = _display_value(value)
    text = (text or "").strip()
    return text if text else fallback


def normalize_flag(value: RawFieldValue) -> bool:
    return bool(value)


def normalize_attachments(value: RawFieldValue) -> List[Attachment]:
    """Parse a file-field cell into attachments, keeping upstream order."""
    if not isinstance(value, list):
        return []
    attachments = []
    for item in value:
        try:
            attachments.append(Attachment.model_validate(item))
        except ValidationError as e:
            logger.warning("Skipping malformed attachment %r: %s", item, e.error_count())
    return attachments


def parse_row_id(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int) and value > 0:
        return value
    return None


def normalize_row(
    row: Mapping[str, Any],
    mappings: Optional[Dict[str, FieldMapping]] = None
) -> Optional[ShipmentRecord]:
    """
    Normalize a single Baserow row to a ShipmentRecord.

    Args:
        row: raw row as returned with user_field_names=true
        mappings: record attribute -> column mapping, defaults to field_mappings.yaml

    Returns:
        ShipmentRecord, or None when the row has no usable id
    """
    mappings = mappings or get_field_mappings()

    row_id = parse_row_id(row.get("id"))
    if row_id is None:
        logger.warning("Skipping Baserow row without a valid id: %r", row.get("id"))
        return None

    def cell(field: str) -> RawFieldValue:
        return row.get(mappings[field].column)

    def text(field: str) -> str:
        return normalize_display(cell(field), mappings[field].fallback or DEFAULT_FALLBACK)

    return ShipmentRecord(
        id=row_id,
        customer_name=text("customer_name"),
        inbound_outbound=normalize_select(
            cell("inbound_outbound"),
            mappings["inbound_outbound"].fallback or DEFAULT_FALLBACK,
        ),
        order_type=text("order_type"),
        carrier_name=text("carrier_name"),
        invoiced=normalize_flag(cell("invoiced")),
        photo=normalize_attachments(cell("photo")),
    )
