"""Form definition endpoint"""
from fastapi import APIRouter, Depends, HTTPException
from typing import Optional
import logging

from klaviyo_admin.config import Settings, get_settings
from klaviyo_admin.services.klaviyo import KlaviyoAPIError, KlaviyoClient, get_klaviyo_client

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def get_form_definition(
    client: Optional[KlaviyoClient] = Depends(get_klaviyo_client),
    settings: Settings = Depends(get_settings)
):
    """Pass the configured Klaviyo form definition through"""
    if client is None:
        raise HTTPException(status_code=500, detail={"error": "Klaviyo API key is not configured"})

    try:
        return await client.get_form(settings.klaviyo_form_id)

    except KlaviyoAPIError as e:
        logger.error(f"Form definition fetch failed: {e.status_code}")
        raise HTTPException(
            status_code=500,
            detail={"error": e.message("Failed to fetch form definition")}
        )
    except Exception as e:
        logger.error(f"Error fetching form definition: {e}")
        raise HTTPException(status_code=500, detail={"error": str(e) or "An error occurred"})
