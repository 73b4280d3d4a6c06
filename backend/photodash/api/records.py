"""
Shipment record API endpoints.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from photodash.api.dependencies import get_baserow_client
from photodash.schemas import ErrorResponse, RecordsResponse
from photodash.services.baserow_client import BaserowClient
from photodash.services.records import list_shipment_records

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get(
    "",
    response_model=RecordsResponse,
    responses={500: {"model": ErrorResponse, "description": "Baserow could not be read"}},
)
async def list_records(
    client: BaserowClient = Depends(get_baserow_client)
):
    """List all shipment records from the Baserow table."""
    try:
        rows = await list_shipment_records(client)
    except Exception:
        logger.exception("Failed to fetch Baserow records")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to load records from Baserow."
        )
    return RecordsResponse(rows=rows)
