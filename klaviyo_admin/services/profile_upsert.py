"""Create-or-find a profile, optionally subscribe it, and report its status"""
import logging
from typing import Any, Optional

from klaviyo_admin.models.profiles import ProfileSubmission, ProfileUpsertResponse
from klaviyo_admin.services.klaviyo import KlaviyoAPIError, KlaviyoClient, primary_resource

logger = logging.getLogger(__name__)

HTTP_CONFLICT = 409


class ProfileUpsertError(Exception):
    """Upsert failed at a step that is fatal for the request"""

    def __init__(self, status_code: int, message: str, details: Optional[str] = None):
        self.status_code = status_code
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict:
        body = {"message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


def marketing_status(payload: Any) -> Any:
    """Extract ``attributes.subscriptions.email.marketing`` from a profile document"""
    resource = primary_resource(payload)
    if resource is None:
        return None

    node: Any = resource
    for key in ("attributes", "subscriptions", "email", "marketing"):
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node or None


async def _create_or_find(client: KlaviyoClient, submission: ProfileSubmission) -> Any:
    try:
        return await client.create_profile(
            submission.email,
            first_name=submission.first_name,
            last_name=submission.last_name,
        )
    except KlaviyoAPIError as e:
        if e.status_code != HTTP_CONFLICT:
            raise ProfileUpsertError(e.status_code, "Failed to create profile", e.body)

    logger.info("Profile already exists, looking it up by email")
    try:
        return await client.find_profiles_by_email(submission.email)
    except KlaviyoAPIError as e:
        raise ProfileUpsertError(e.status_code, "Failed to upsert profile (search)", e.body)


async def _lookup_marketing_status(client: KlaviyoClient, email: str) -> Any:
    try:
        payload = await client.find_profiles_by_email(email)
    except Exception as e:
        logger.warning(f"Marketing status lookup failed: {e}")
        return None
    return marketing_status(payload)


async def upsert_profile(client: KlaviyoClient, submission: ProfileSubmission) -> ProfileUpsertResponse:
    """
    Upsert a profile and optionally subscribe it to a list

    Steps run one after another: create (falling back to a search on 409),
    subscribe when requested with a list id, then re-read the marketing
    subscription status. Subscription and status failures do not fail the
    request.

    Args:
        client: Configured Klaviyo client
        submission: Validated request body

    Returns:
        ProfileUpsertResponse

    Raises:
        ProfileUpsertError: If the profile could be neither created nor found
    """
    profile_json = await _create_or_find(client, submission)
    resource = primary_resource(profile_json)
    profile_id = resource.get("id") if resource else None

    warning = None
    subscribed = False
    subscribe_result = None
    if submission.subscribe and submission.list_id:
        result = await client.subscribe_to_list(
            submission.list_id,
            submission.email,
            first_name=submission.first_name,
            last_name=submission.last_name,
        )
        subscribe_result = result.body
        if result.ok:
            subscribed = True
        else:
            warning = f"Failed to subscribe to list (status {result.status_code})."
            logger.warning(f"List subscription for {submission.list_id} failed: {result.status_code}")

    status = await _lookup_marketing_status(client, submission.email)

    return ProfileUpsertResponse(
        message="ok",
        profile=profile_json,
        profile_id=None if profile_id is None else str(profile_id),
        subscribed=subscribed,
        warning=warning,
        subscribe_result=subscribe_result,
        email_marketing_status=status,
    )
