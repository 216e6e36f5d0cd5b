"""Profile and list Pydantic models"""
from pydantic import BaseModel, Field, StrictStr, field_validator
from typing import Optional, Any, List


class ProfileSubmission(BaseModel):
    """Add-profile request body"""
    email: StrictStr = Field(..., min_length=1)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    subscribe: bool = False
    list_id: Optional[str] = None

    @field_validator("first_name", "last_name", "list_id", mode="before")
    @classmethod
    def _scalar_to_str(cls, value: Any) -> Optional[str]:
        # Missing or empty values are omitted; numbers are sent as text
        if value is None or value == "" or value is False or value == 0:
            return None
        if isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        raise ValueError("must be a string or a number")

    @field_validator("subscribe", mode="before")
    @classmethod
    def _truthy(cls, value: Any) -> bool:
        return bool(value)


class ProfileUpsertResponse(BaseModel):
    """Add-profile response"""
    message: str = "ok"
    profile: Any = None
    profile_id: Optional[str] = None
    subscribed: bool = False
    warning: Optional[str] = None
    subscribe_result: Any = None
    email_marketing_status: Any = None


class MailingList(BaseModel):
    """Klaviyo list as exposed to the page"""
    id: Optional[str] = None
    name: Optional[str] = None


class ListsResponse(BaseModel):
    """Lists endpoint response"""
    data: List[MailingList]


class ProfileRow(BaseModel):
    """One row of the profile table"""
    id: str = ""
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    status: Optional[str] = None

    @property
    def status_label(self) -> str:
        status = (self.status or "").lower()
        if status == "subscribed":
            return "Subscribed"
        if status == "pending":
            return "Pending"
        return "Not Subscribed"
