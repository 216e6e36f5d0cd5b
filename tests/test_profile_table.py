"""Tests for profile table rows and sorting."""

from __future__ import annotations

import pytest

from klaviyo_admin.models.profiles import ProfileRow
from klaviyo_admin.services.profile_table import (
    SortDirection,
    SortKey,
    SortState,
    sort_profiles,
    to_rows,
)


def _rows() -> list[ProfileRow]:
    return [
        ProfileRow(id="3", email="carol@example.com", first_name="carol", last_name="Zed", status="pending"),
        ProfileRow(id="1", email="Alice@example.com", first_name=None, last_name="young", status="subscribed"),
        ProfileRow(id="2", email="bob@example.com", first_name="Bob", last_name="Young", status=None),
        ProfileRow(id="4", email=None, first_name="dave", last_name="adams", status="unsubscribed"),
    ]


def test_toggle_same_key_flips_direction() -> None:
    state = SortState(SortKey.EMAIL, SortDirection.ASC)

    assert state.toggle(SortKey.EMAIL) == SortState(SortKey.EMAIL, SortDirection.DESC)
    assert state.toggle(SortKey.EMAIL).toggle(SortKey.EMAIL) == state


def test_toggle_new_key_starts_ascending() -> None:
    state = SortState(SortKey.EMAIL, SortDirection.DESC)

    assert state.toggle(SortKey.STATUS) == SortState(SortKey.STATUS, SortDirection.ASC)


def test_parse_ignores_unknown_values() -> None:
    assert SortState.parse("bogus", "sideways") == SortState()
    assert SortState.parse("last_name", "desc") == SortState(SortKey.LAST_NAME, SortDirection.DESC)


def test_arrows() -> None:
    state = SortState(SortKey.ID, SortDirection.DESC)

    assert state.arrow(SortKey.ID) == "▼"
    assert state.arrow(SortKey.EMAIL) == "↕"
    assert state.toggle(SortKey.ID).arrow(SortKey.ID) == "▲"


def test_sort_is_case_insensitive_with_missing_as_empty() -> None:
    ordered = sort_profiles(_rows(), SortState(SortKey.EMAIL))

    assert [r.id for r in ordered] == ["4", "1", "2", "3"]


def test_sort_descending() -> None:
    ordered = sort_profiles(_rows(), SortState(SortKey.FIRST_NAME, SortDirection.DESC))

    assert [r.id for r in ordered] == ["4", "3", "2", "1"]


def test_sort_is_stable_under_ties() -> None:
    ascending = sort_profiles(_rows(), SortState(SortKey.LAST_NAME))
    descending = sort_profiles(_rows(), SortState(SortKey.LAST_NAME, SortDirection.DESC))

    # "young" and "Young" tie; input order 1 then 2 is kept both ways
    assert [r.id for r in ascending] == ["4", "1", "2", "3"]
    assert [r.id for r in descending] == ["3", "1", "2", "4"]


@pytest.mark.parametrize("key", list(SortKey))
def test_toggling_twice_restores_order(key) -> None:
    state = SortState(key)
    rows = _rows()

    first = sort_profiles(rows, state)
    again = sort_profiles(rows, state.toggle(key).toggle(key))

    assert first == again
    assert sort_profiles(first, state) == first


def test_sort_does_not_mutate_input() -> None:
    rows = _rows()
    before = list(rows)

    sort_profiles(rows, SortState(SortKey.STATUS, SortDirection.DESC))

    assert rows == before


def test_to_rows_reads_attributes() -> None:
    payload = {
        "data": [
            {"id": "P1", "attributes": {"email": "a@b.com", "first_name": "Ada", "subscription_status": "pending"}},
            {"id": "P2"},
            "junk",
        ]
    }

    rows = to_rows(payload)

    assert [r.id for r in rows] == ["P1", "P2"]
    assert rows[0].status_label == "Pending"
    assert rows[1].email is None
    assert rows[1].status_label == "Not Subscribed"


def test_to_rows_without_data() -> None:
    assert to_rows({"errors": []}) == []
    assert to_rows(None) == []
