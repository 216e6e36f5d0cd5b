"""Klaviyo list endpoints"""
from fastapi import APIRouter, Depends, HTTPException
from typing import Optional
import logging

from klaviyo_admin.models.profiles import ListsResponse
from klaviyo_admin.services.klaviyo import (
    KlaviyoAPIError,
    KlaviyoClient,
    get_klaviyo_client,
    project_lists,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=ListsResponse)
async def get_lists(client: Optional[KlaviyoClient] = Depends(get_klaviyo_client)):
    """List the account's Klaviyo lists as ``{data: [{id, name}]}``"""
    if client is None:
        raise HTTPException(
            status_code=500,
            detail={"message": "KLAVIYO_API_KEY is not configured on the server"}
        )

    try:
        payload = await client.get_lists()
        return ListsResponse(data=project_lists(payload))

    except KlaviyoAPIError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail={"message": "Failed to fetch Klaviyo lists", "details": e.body}
        )
    except Exception as e:
        logger.error(f"Lists fetch error: {e}")
        raise HTTPException(
            status_code=500,
            detail={"message": "Unexpected error fetching lists", "details": str(e)}
        )
