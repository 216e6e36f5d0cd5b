"""Klaviyo profile endpoints

Cross-origin headers and the OPTIONS preflight for these paths are handled
by ``AllowListCorsMiddleware``.
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError
from typing import Optional
import logging

from klaviyo_admin.models.profiles import ProfileSubmission
from klaviyo_admin.services.klaviyo import KlaviyoAPIError, KlaviyoClient, get_klaviyo_client
from klaviyo_admin.services.profile_upsert import ProfileUpsertError, upsert_profile

logger = logging.getLogger(__name__)
router = APIRouter()


async def _read_json_body(request: Request) -> dict:
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _validation_message(error: ValidationError) -> str:
    if any(item["loc"] and item["loc"][0] == "email" for item in error.errors()):
        return "Email is required"
    fields = sorted({str(item["loc"][0]) for item in error.errors() if item["loc"]})
    return f"Invalid value for {', '.join(fields)}"


@router.get("")
async def get_profiles(client: Optional[KlaviyoClient] = Depends(get_klaviyo_client)):
    """Pass the Klaviyo profile collection through"""
    if client is None:
        raise HTTPException(status_code=500, detail={"error": "Klaviyo API key is not configured"})

    try:
        return await client.get_profiles()

    except KlaviyoAPIError as e:
        raise HTTPException(status_code=e.status_code, detail={"error": e.message("Failed to fetch profiles")})
    except Exception as e:
        logger.error(f"Error fetching Klaviyo profiles: {e}")
        raise HTTPException(status_code=500, detail={"error": str(e) or "An error occurred"})


@router.post("")
async def create_profile(
    request: Request,
    client: Optional[KlaviyoClient] = Depends(get_klaviyo_client)
):
    """
    Create or find a profile and optionally subscribe it to a list

    Body: ``{email, first_name?, last_name?, subscribe?, list_id?}``
    """
    if client is None:
        raise HTTPException(
            status_code=500,
            detail={"message": "KLAVIYO_API_KEY is not configured on the server"}
        )

    try:
        body = await _read_json_body(request)
        try:
            submission = ProfileSubmission.model_validate(body)
        except ValidationError as e:
            raise HTTPException(status_code=400, detail={"message": _validation_message(e)})

        result = await upsert_profile(client, submission)
        return result.model_dump(exclude_none=True)

    except HTTPException:
        raise
    except ProfileUpsertError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_dict())
    except Exception as e:
        logger.error(f"Error creating profile: {e}")
        raise HTTPException(
            status_code=500,
            detail={"message": "Unexpected error creating profile", "details": str(e)}
        )
