"""Form-related Pydantic models"""
from enum import Enum
from pydantic import BaseModel, Field
from typing import List, Optional


class FieldKind(str, Enum):
    """Input kinds the add-profile form knows how to render"""
    EMAIL = "email"
    TEXT = "text"
    CHECKBOX = "checkbox"


class DynamicField(BaseModel):
    """A field inferred from a Klaviyo form definition"""
    key: str
    name: str
    label: str
    kind: FieldKind
    required: bool = False


class FormView(BaseModel):
    """What the add-profile page renders from a form definition"""
    title: str = "Add Profile"
    teaser_html: Optional[str] = None
    fields: List[DynamicField] = Field(default_factory=list)
