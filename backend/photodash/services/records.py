"""
Shipment record listing.
"""
import logging
import time
from typing import List

from photodash.config.mapping_loader import get_field_mappings
from photodash.schemas import ShipmentRecord
from photodash.services.baserow_client import BaserowClient
from photodash.services.normalizer import normalize_row

logger = logging.getLogger(__name__)


async def list_shipment_records(client: BaserowClient) -> List[ShipmentRecord]:
    """
    Fetch the table and normalize every row.

    Raises UpstreamError when Baserow answers with a non-2xx status.
    """
    start = time.perf_counter()
    rows = await client.list_rows()
    mappings = get_field_mappings()

    records = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        record = normalize_row(row, mappings)
        if record is not None:
            records.append(record)

    logger.info(
        "Loaded %d shipment record(s) (%d raw rows) in %.2fs",
        len(records),
        len(rows),
        time.perf_counter() - start,
    )
    return records
