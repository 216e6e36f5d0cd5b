"""
Infer renderable input fields from a Klaviyo form definition

Form definitions are authored in Klaviyo and their shape changes between
revisions, so every element is first classified into one of the variants
below and only then turned into a DynamicField. Nothing in this module raises
on malformed input; unknown shapes produce no fields.
"""
from dataclasses import dataclass
import logging
from typing import Any, Dict, List, Optional, Union

from klaviyo_admin.models.forms import DynamicField, FieldKind, FormView

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Add Profile"

# Order matters: the first non-empty list wins
ELEMENT_CONTAINER_KEYS = ("fields", "elements", "components", "items", "children")

STEP_INDEX_STRIDE = 100


@dataclass(frozen=True)
class TypedElement:
    """An element that declares a type, kind or component"""
    index: int
    name: str
    label: str
    required: bool
    declared_type: str


@dataclass(frozen=True)
class UntypedElement:
    """An object element with no type signal at all"""
    index: int
    name: str
    label: str
    required: bool


@dataclass(frozen=True)
class OpaqueElement:
    """Anything that is not an object"""
    index: int
    value: Any


FormElement = Union[TypedElement, UntypedElement, OpaqueElement]


def _first_truthy(raw: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value:
            return value
    return None


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    # Non-scalar signals still count as present but never match a keyword
    return "object"


def classify_element(raw: Any, index: int) -> FormElement:
    """Classify one raw step element"""
    if not isinstance(raw, dict):
        return OpaqueElement(index=index, value=raw)

    name_value = _first_truthy(raw, "name", "id", "key")
    name = _as_text(name_value) if name_value else f"field_{index}"

    label_value = _first_truthy(raw, "label", "title", "placeholder")
    label = _as_text(label_value) if label_value else name

    rules = raw.get("rules")
    required = bool(
        raw.get("required")
        or raw.get("is_required")
        or (rules.get("required") if isinstance(rules, dict) else None)
    )

    type_value = _first_truthy(raw, "type", "kind", "component")
    if type_value:
        return TypedElement(
            index=index,
            name=name,
            label=label,
            required=required,
            declared_type=_as_text(type_value).lower(),
        )
    return UntypedElement(index=index, name=name, label=label, required=required)


def kind_from_type(declared_type: str) -> Optional[FieldKind]:
    if "email" in declared_type:
        return FieldKind.EMAIL
    if "checkbox" in declared_type or "consent" in declared_type:
        return FieldKind.CHECKBOX
    if "text" in declared_type or "input" in declared_type:
        return FieldKind.TEXT
    return None


def kind_from_name(name: str) -> Optional[FieldKind]:
    lowered = name.lower()
    if "email" in lowered:
        return FieldKind.EMAIL
    if "first" in lowered or "last" in lowered or "name" in lowered:
        return FieldKind.TEXT
    if "consent" in lowered or "subscribe" in lowered:
        return FieldKind.CHECKBOX
    return None


def infer_field(element: FormElement) -> Optional[DynamicField]:
    """
    Turn a classified element into a DynamicField

    Typed elements are resolved from their declared type, then from their
    name. Untyped elements render as text. Opaque elements are dropped.
    """
    if isinstance(element, OpaqueElement):
        return None

    if isinstance(element, UntypedElement):
        kind: Optional[FieldKind] = FieldKind.TEXT
    elif isinstance(element, TypedElement):
        kind = kind_from_type(element.declared_type) or kind_from_name(element.name)
    else:
        raise TypeError(f"Unknown form element variant: {type(element).__name__}")

    if kind is None:
        return None

    return DynamicField(
        key=f"{element.name}_{element.index}",
        name=element.name,
        label=element.label,
        kind=kind,
        required=element.required,
    )


def extract_elements(step: Any) -> List[Any]:
    """Return the first non-empty element list of a step"""
    if not isinstance(step, dict):
        return []
    for key in ELEMENT_CONTAINER_KEYS:
        candidate = step.get(key)
        if isinstance(candidate, list) and candidate:
            return candidate
    return []


def parse_fields(version: Any) -> List[DynamicField]:
    """Infer the de-duplicated field list of a form version"""
    steps = version.get("steps") if isinstance(version, dict) else None
    if not isinstance(steps, list):
        return []

    fields: List[DynamicField] = []
    seen = set()
    for step_index, step in enumerate(steps):
        for element_index, raw in enumerate(extract_elements(step)):
            element = classify_element(raw, step_index * STEP_INDEX_STRIDE + element_index)
            field = infer_field(element)
            if field is None or field.name in seen:
                continue
            seen.add(field.name)
            fields.append(field)
    return fields


def _attributes(document: Any) -> Dict[str, Any]:
    data = document.get("data") if isinstance(document, dict) else None
    attributes = data.get("attributes") if isinstance(data, dict) else None
    return attributes if isinstance(attributes, dict) else {}


def form_versions(document: Any) -> List[Any]:
    definition = _attributes(document).get("definition")
    versions = definition.get("versions") if isinstance(definition, dict) else None
    return versions if isinstance(versions, list) else []


def _version_name(version: Any) -> str:
    name = version.get("name") if isinstance(version, dict) else None
    return name if isinstance(name, str) else ""


def preferred_version(document: Any) -> Any:
    """The embed version if there is one, else the last version, else None"""
    versions = form_versions(document)
    for version in versions:
        if "embed" in _version_name(version).lower():
            return version
    return versions[-1] if versions else None


def build_form_view(document: Any) -> FormView:
    """Title, teaser and dynamic fields for the add-profile page"""
    version = preferred_version(document)

    base_title = _attributes(document).get("name")
    if isinstance(base_title, str) and base_title:
        title = base_title
    else:
        title = _version_name(version) or DEFAULT_TITLE

    teaser = version.get("teaser") if isinstance(version, dict) else None
    teaser_html = teaser.get("content") if isinstance(teaser, dict) else None

    fields = parse_fields(version) if version is not None else []
    logger.debug(f"Inferred {len(fields)} dynamic fields for form '{title}'")

    return FormView(
        title=title,
        teaser_html=teaser_html if isinstance(teaser_html, str) else None,
        fields=fields,
    )
