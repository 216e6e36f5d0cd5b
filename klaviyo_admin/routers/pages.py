"""Browser pages: profile table and add-profile form"""
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pathlib import Path
from typing import Any, Dict, Optional
import logging

from klaviyo_admin.config import Settings, get_settings
from klaviyo_admin.models.forms import FieldKind, FormView
from klaviyo_admin.services.form_schema import build_form_view
from klaviyo_admin.services.klaviyo import (
    KlaviyoAPIError,
    KlaviyoClient,
    get_klaviyo_client,
    project_lists,
)
from klaviyo_admin.services.profile_table import SortKey, SortState, sort_profiles, to_rows
from klaviyo_admin.services.profile_upsert import ProfileUpsertError, upsert_profile
from klaviyo_admin.services.submission import (
    CUSTOM_LIST_OPTION,
    StaticInputs,
    SubmissionError,
    build_submission,
    chosen_list_id,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Pages"])

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

NOT_CONFIGURED = "KLAVIYO_API_KEY is not configured on the server"

COLUMNS = (
    (SortKey.ID, "ID"),
    (SortKey.EMAIL, "Email"),
    (SortKey.FIRST_NAME, "First Name"),
    (SortKey.LAST_NAME, "Last Name"),
    (SortKey.STATUS, "Status"),
)

DYNAMIC_PREFIX = "dyn:"


@router.get("/", response_class=HTMLResponse)
async def profiles_page(
    request: Request,
    sort: Optional[str] = None,
    direction: Optional[str] = Query(None, alias="dir"),
    client: Optional[KlaviyoClient] = Depends(get_klaviyo_client)
):
    """Render the sortable profile table"""
    state = SortState.parse(sort, direction)
    error = None
    rows = []

    if client is None:
        error = NOT_CONFIGURED
    else:
        try:
            rows = sort_profiles(to_rows(await client.get_profiles()), state)
        except KlaviyoAPIError:
            error = "Failed to fetch profiles"
        except Exception as e:
            logger.error(f"Profile page error: {e}")
            error = str(e) or "An error occurred"

    columns = [
        {
            "key": key.value,
            "label": label,
            "arrow": state.arrow(key),
            "next": state.toggle(key),
        }
        for key, label in COLUMNS
    ]

    return templates.TemplateResponse(
        request,
        "index.html",
        {"profiles": rows, "columns": columns, "error": error},
    )


async def _add_page_context(client: Optional[KlaviyoClient], settings: Settings) -> Dict[str, Any]:
    """Lists and form definition are loaded independently; each failure stays in its own slot"""
    lists = []
    lists_error = None
    view = FormView()
    form_load_error = None

    if client is None:
        lists_error = NOT_CONFIGURED
        form_load_error = NOT_CONFIGURED
    else:
        try:
            lists = project_lists(await client.get_lists())
        except KlaviyoAPIError as e:
            lists_error = e.message("Failed to fetch Klaviyo lists")
        except Exception as e:
            logger.error(f"Lists fetch error: {e}")
            lists_error = "Failed to load lists"

        try:
            view = build_form_view(await client.get_form(settings.klaviyo_form_id))
        except KlaviyoAPIError as e:
            form_load_error = e.message("Failed to load form definition")
        except Exception as e:
            logger.error(f"Form definition fetch error: {e}")
            form_load_error = "Failed to load form"

    return {
        "lists": lists,
        "lists_error": lists_error,
        "form": view,
        "form_load_error": form_load_error,
    }


def _render_add(request: Request, context: Dict[str, Any], values: Dict[str, Any], form_error: Optional[str] = None):
    return templates.TemplateResponse(
        request,
        "add_profile.html",
        {
            **context,
            "values": values,
            "form_error": form_error,
            "custom_option": CUSTOM_LIST_OPTION,
            "dynamic_prefix": DYNAMIC_PREFIX,
        },
        status_code=200 if form_error is None else 400,
    )


@router.get("/add", response_class=HTMLResponse)
async def add_profile_page(
    request: Request,
    client: Optional[KlaviyoClient] = Depends(get_klaviyo_client),
    settings: Settings = Depends(get_settings)
):
    """Render the add-profile form, dynamic when the form definition allows it"""
    context = await _add_page_context(client, settings)
    return _render_add(request, context, values={})


def _dynamic_values(form: Any) -> Optional[Dict[str, Any]]:
    """Rebuild dynamic values in rendered field order; None for the static form"""
    if form.get("mode") != "dynamic":
        return None

    values: Dict[str, Any] = {}
    for name, kind in zip(form.getlist("field_name"), form.getlist("field_kind")):
        if kind == FieldKind.CHECKBOX.value:
            values[name] = f"{DYNAMIC_PREFIX}{name}" in form
        else:
            values[name] = form.get(f"{DYNAMIC_PREFIX}{name}", "")
    return values


@router.post("/add", response_class=HTMLResponse)
async def submit_add_profile(
    request: Request,
    client: Optional[KlaviyoClient] = Depends(get_klaviyo_client),
    settings: Settings = Depends(get_settings)
):
    """Validate the form, upsert the profile, and return to the table"""
    form = await request.form()
    values = {key: form.get(key) for key in form.keys()}

    static = StaticInputs(
        email=str(form.get("email", "")),
        first_name=str(form.get("first_name", "")),
        last_name=str(form.get("last_name", "")),
        subscribe="subscribe" in form,
    )
    list_id = chosen_list_id(
        str(form.get("list_choice", "")),
        str(form.get("custom_list_id", "")),
    )

    error = None
    try:
        submission = build_submission(static, _dynamic_values(form), list_id)
        if client is None:
            raise SubmissionError(NOT_CONFIGURED)
        result = await upsert_profile(client, submission)
        if result.warning:
            logger.warning(f"Profile {result.profile_id} added with warning: {result.warning}")
        return RedirectResponse(url="/", status_code=303)

    except SubmissionError as e:
        error = str(e)
    except ProfileUpsertError as e:
        error = e.message
    except Exception as e:
        logger.error(f"Add profile failed: {e}")
        error = "Failed to add profile"

    context = await _add_page_context(client, settings)
    return _render_add(request, context, values=values, form_error=error)
