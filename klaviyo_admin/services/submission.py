"""Build an add-profile submission from the page's form inputs"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from klaviyo_admin.models.profiles import ProfileSubmission

CUSTOM_LIST_OPTION = "custom"


class SubmissionError(ValueError):
    """Raised when the add-profile form is incomplete"""


@dataclass
class StaticInputs:
    """Values of the fixed fallback form"""
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    subscribe: bool = False


def _find_by(values: Dict[str, Any], predicate: Callable[[str], bool]) -> Any:
    for name, value in values.items():
        if predicate(name.lower()):
            return value
    return None


def project_dynamic_values(values: Dict[str, Any]) -> Dict[str, Any]:
    """
    Map dynamic field values onto submission fields by name

    The first field whose name contains "email" is the email, "first" and
    "last" give the names, and "subscribe" or "consent" the opt-in flag.
    """
    email = _find_by(values, lambda n: "email" in n)
    first_name = _find_by(values, lambda n: "first" in n)
    last_name = _find_by(values, lambda n: "last" in n)
    subscribe = _find_by(values, lambda n: "subscribe" in n or "consent" in n)

    return {
        "email": email if isinstance(email, str) else "",
        "first_name": first_name if isinstance(first_name, str) else None,
        "last_name": last_name if isinstance(last_name, str) else None,
        "subscribe": bool(subscribe),
    }


def chosen_list_id(list_choice: str, custom_list_id: str) -> str:
    """Resolve the list selector, where "custom" means the free-text id"""
    if list_choice == CUSTOM_LIST_OPTION:
        return custom_list_id.strip()
    return list_choice.strip()


def build_submission(
    static: StaticInputs,
    dynamic_values: Optional[Dict[str, Any]],
    list_id: str,
) -> ProfileSubmission:
    """
    Assemble and validate the submission the way the page does before posting

    Pass ``dynamic_values`` (possibly empty) when the form was rendered from
    a form definition and None for the static form. Dynamic values take
    precedence; static inputs fill whatever they leave empty.

    Raises:
        SubmissionError: Missing email, or subscribing without a list id
    """
    email = static.email
    first_name = static.first_name or None
    last_name = static.last_name or None
    subscribe = static.subscribe

    if dynamic_values is not None:
        projected = project_dynamic_values(dynamic_values)
        email = projected["email"] or email
        if projected["first_name"] is not None:
            first_name = projected["first_name"]
        if projected["last_name"] is not None:
            last_name = projected["last_name"]
        subscribe = projected["subscribe"]

    if not email:
        raise SubmissionError("Email is required")

    if subscribe and not list_id:
        raise SubmissionError("Please select or enter a Klaviyo List ID to subscribe.")

    try:
        return ProfileSubmission(
            email=email,
            first_name=first_name,
            last_name=last_name,
            subscribe=subscribe,
            list_id=list_id if subscribe else None,
        )
    except ValidationError as e:
        raise SubmissionError(str(e)) from e
