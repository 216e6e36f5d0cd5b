"""Klaviyo REST API client"""
import httpx
import json
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from fastapi import Depends

from klaviyo_admin.config import Settings, get_settings
from klaviyo_admin.models.profiles import MailingList

logger = logging.getLogger(__name__)


class KlaviyoAPIError(Exception):
    """Raised when Klaviyo answers with a non-success status"""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Klaviyo API error {status_code}: {body}")

    def message(self, default: str) -> str:
        """Best-effort human message from the error body"""
        try:
            payload = json.loads(self.body)
        except ValueError:
            return default

        if isinstance(payload, dict):
            if isinstance(payload.get("message"), str) and payload["message"]:
                return payload["message"]
            errors = payload.get("errors")
            if isinstance(errors, list) and errors and isinstance(errors[0], dict):
                detail = errors[0].get("detail") or errors[0].get("title")
                if isinstance(detail, str) and detail:
                    return detail
        return default


class SubscribeResult:
    """Outcome of a legacy list-subscription call"""

    def __init__(self, status_code: int, body: Any):
        self.status_code = status_code
        self.body = body

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def primary_resource(payload: Any) -> Optional[Dict[str, Any]]:
    """
    Normalize a JSON:API document to its primary resource

    Create returns ``{"data": {...}}`` and filtered collection reads return
    ``{"data": [...]}``; a bare resource object is accepted as well.

    Args:
        payload: Decoded JSON response

    Returns:
        The resource object, or None when there is none
    """
    if not isinstance(payload, dict):
        return None

    if "data" not in payload:
        return payload if "id" in payload else None

    data = payload["data"]
    if isinstance(data, list):
        data = data[0] if data else None
    return data if isinstance(data, dict) else None


def email_filter(email: str) -> str:
    """Klaviyo filter expression matching a single email address"""
    escaped = email.replace("\\", "\\\\").replace('"', '\\"')
    return f'equals(email,"{escaped}")'


class KlaviyoClient:
    """
    Thin async wrapper over the Klaviyo endpoints used by the console

    Each call opens its own ``httpx.AsyncClient``; nothing is shared between
    requests.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://a.klaviyo.com",
        revision: str = "2024-10-15",
        form_revision: str = "2025-07-15.pre",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.revision = revision
        self.form_revision = form_revision
        self._transport = transport

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, transport=self._transport)

    def _headers(self, revision: Optional[str] = None, accept: str = "application/json") -> Dict[str, str]:
        return {
            "Authorization": f"Klaviyo-API-Key {self.api_key}",
            "Accept": accept,
            "revision": revision or self.revision,
        }

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return
        logger.warning(
            f"Klaviyo {response.request.method} {response.request.url.path} "
            f"failed: {response.status_code}"
        )
        raise KlaviyoAPIError(response.status_code, response.text)

    async def get_lists(self) -> Any:
        """Fetch the list collection"""
        async with self._http() as client:
            response = await client.get("/api/lists", headers=self._headers())
        self._raise_for_status(response)
        return response.json()

    async def get_profiles(self) -> Any:
        """Fetch the profile collection"""
        async with self._http() as client:
            response = await client.get("/api/profiles/", headers=self._headers())
        self._raise_for_status(response)
        return response.json()

    async def create_profile(
        self,
        email: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> Any:
        """
        Create a profile

        Raises:
            KlaviyoAPIError: On any non-success status, including 409 when
                the profile already exists
        """
        attributes: Dict[str, Any] = {"email": email}
        if first_name:
            attributes["first_name"] = first_name
        if last_name:
            attributes["last_name"] = last_name

        async with self._http() as client:
            response = await client.post(
                "/api/profiles/",
                headers={**self._headers(), "Content-Type": "application/json"},
                json={"data": {"type": "profile", "attributes": attributes}},
            )
        self._raise_for_status(response)
        return response.json()

    async def find_profiles_by_email(self, email: str) -> Any:
        """Search profiles with an exact email filter"""
        async with self._http() as client:
            response = await client.get(
                "/api/profiles/",
                headers=self._headers(),
                params={"filter": email_filter(email)},
            )
        self._raise_for_status(response)
        return response.json()

    async def subscribe_to_list(
        self,
        list_id: str,
        email: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> SubscribeResult:
        """
        Subscribe an email to a list through the legacy v2 endpoint

        The key travels in the body, not in a header. A non-success status
        is returned, not raised.
        """
        profile: Dict[str, Any] = {"email": email}
        if first_name:
            profile["first_name"] = first_name
        if last_name:
            profile["last_name"] = last_name

        payload = {
            "api_key": self.api_key,
            "confirm_optin": True,
            "update_existing": True,
            "profiles": [profile],
        }

        async with self._http() as client:
            response = await client.post(
                f"/api/v2/list/{quote(list_id, safe='')}/subscribe",
                headers={"Accept": "application/json", "Content-Type": "application/json"},
                json=payload,
            )

        try:
            body: Any = response.json()
        except ValueError:
            body = response.text

        return SubscribeResult(response.status_code, body)

    async def get_form(self, form_id: str) -> Any:
        """Fetch a form definition (uses the newer revision)"""
        async with self._http() as client:
            response = await client.get(
                f"/api/forms/{quote(form_id, safe='')}",
                headers=self._headers(
                    revision=self.form_revision,
                    accept="application/vnd.api+json",
                ),
            )
        self._raise_for_status(response)
        return response.json()


def build_client(settings: Settings) -> Optional[KlaviyoClient]:
    """Build a client from settings, or None when no API key is configured"""
    if not settings.klaviyo_api_key:
        return None
    return KlaviyoClient(
        api_key=settings.klaviyo_api_key,
        base_url=settings.klaviyo_base_url,
        revision=settings.klaviyo_revision,
        form_revision=settings.klaviyo_form_revision,
    )


def get_klaviyo_client(settings: Settings = Depends(get_settings)) -> Optional[KlaviyoClient]:
    """FastAPI dependency returning the configured client (None if unconfigured)"""
    return build_client(settings)


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def project_lists(payload: Any) -> List[MailingList]:
    """Reduce a list collection document to ``[MailingList(id, name)]``"""
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, list):
        return []

    items = []
    for item in data:
        if not isinstance(item, dict):
            items.append(MailingList())
            continue
        attributes = item.get("attributes")
        name = attributes.get("name") if isinstance(attributes, dict) else None
        items.append(MailingList(id=_optional_str(item.get("id")), name=_optional_str(name)))
    return items
