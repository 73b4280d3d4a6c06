"""
Photo upload API endpoint.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from photodash.api.dependencies import get_upload_proxy
from photodash.schemas import ErrorResponse, UploadResponse
from photodash.services.exceptions import MethodNotAllowed, UpstreamError
from photodash.services.upload_proxy import UploadProxy

router = APIRouter()
logger = logging.getLogger(__name__)


# Every other method is routed here too so the proxy itself answers 405 with `Allow: POST`.
@router.post(
    "",
    response_model=UploadResponse,
    responses={
        405: {"model": ErrorResponse, "description": "Any method other than POST"},
        500: {"model": ErrorResponse, "description": "Invalid upload or Baserow failure"},
    },
)
@router.api_route(
    "",
    methods=["GET", "HEAD", "OPTIONS", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def upload_photo(
    request: Request,
    proxy: UploadProxy = Depends(get_upload_proxy)
):
    """Upload a JPG/PNG (`file`) to Baserow and set it as the photo of row `recordId`."""
    try:
        return await proxy.handle(request)
    except MethodNotAllowed as e:
        raise HTTPException(
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            detail=str(e),
            headers={"Allow": ", ".join(e.allowed)},
        )
    except UpstreamError as e:
        logger.error("Upload failed: Baserow responded %s: %s", e.status, e.message)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message
        )
    except Exception as e:
        logger.exception("Upload failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e) or "Unexpected error"
        )
