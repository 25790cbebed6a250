from __future__ import annotations

import pytest

from core.domain.catalog import (
    ADVERTISEMENTS,
    BLOGS,
    COURSES,
    ENTITY_SCHEMAS,
    JOBS,
    TENDERS,
    USER_ROLE_TABS,
    USERS,
    get_schema,
)
from core.domain.errors import ValidationFailed
from core.domain.schema import FieldKind, FieldSpec, parse_number, to_date_input, to_datetime_input


def test_blog_missing_image_reports_only_image():
    draft = {"title": "A", "image": "", "textSummary": "x"}
    assert BLOGS.errors_for(draft) == {"image": "Image is required"}


def test_validate_raises_with_error_map():
    with pytest.raises(ValidationFailed) as excinfo:
        BLOGS.validate({"title": " ", "image": "", "textSummary": ""})
    assert set(excinfo.value.errors) == {"title", "image", "textSummary"}


def test_number_field_must_parse():
    draft = COURSES.default_draft()
    draft.update({name: "x" for name in draft})
    draft["price"] = "twelve"
    draft["startDate"] = "2025-01-01"
    draft["endDate"] = "2025-02-01"
    assert COURSES.errors_for(draft) == {"price": "Price must be a number"}


def test_other_course_is_optional():
    assert COURSES.field_spec("otherCourse").required is False
    assert all(spec.required for spec in COURSES.fields if spec.name != "otherCourse")


def test_every_job_field_is_required():
    assert len(JOBS.fields) == 14
    errors = JOBS.errors_for(JOBS.default_draft())
    assert set(errors) == set(JOBS.field_names())


def test_custom_required_message():
    errors = ADVERTISEMENTS.errors_for(ADVERTISEMENTS.default_draft())
    assert errors["mediaUrl"] == "Media URL is required"
    assert errors["adTitle"] == "Title is required"


def test_choice_field_rejects_unknown_value():
    spec = FieldSpec("mediaType", "Media type", FieldKind.CHOICE, choices=("IMAGE", "VIDEO"))
    assert spec.check("GIF") == "Media type must be one of: IMAGE, VIDEO"
    assert spec.check("VIDEO") is None


def test_default_draft_uses_declared_defaults():
    assert BLOGS.default_draft() == {
        "title": "",
        "image": "",
        "textSummary": "",
        "redirectLink": "",
        "active": False,
    }
    assert ADVERTISEMENTS.default_draft()["mediaType"] == "IMAGE"


def test_seed_draft_copies_fields_and_drops_identifier():
    entity = {"id": 7, "title": "T", "image": "https://x/y.png", "textSummary": "S", "redirectLink": None, "active": True}
    draft = BLOGS.seed_draft(entity)
    assert "id" not in draft
    assert draft == {"title": "T", "image": "https://x/y.png", "textSummary": "S", "redirectLink": "", "active": True}


def test_seed_draft_normalizes_dates_for_inputs():
    draft = ADVERTISEMENTS.seed_draft({"id": 1, "startDate": "2025-03-04T10:30:00.000Z", "endDate": None})
    assert draft["startDate"] == "2025-03-04T10:30"
    assert draft["endDate"] == ""

    job = JOBS.seed_draft({"startDate": "2025-06-01T00:00:00.000Z", "deadline": "2025-06-30"})
    assert job["startDate"] == "2025-06-01"
    assert job["deadline"] == "2025-06-30"


def test_build_payload_parses_numbers_and_adds_owner_on_create():
    draft = {name: "x" for name in COURSES.field_names()}
    draft["price"] = "49.5"
    payload = COURSES.build_payload(draft, owner_id=3, creating=True)
    assert payload["price"] == 49.5
    assert payload["createdById"] == 3

    payload = COURSES.build_payload(draft, owner_id=3, creating=False)
    assert "createdById" not in payload


def test_tender_dates_are_sent_as_midnight_utc():
    payload = TENDERS.build_payload({"title": "T", "publishedDate": "2025-01-02", "contractEndDate": ""})
    assert payload["publishedDate"] == "2025-01-02T00:00:00.000Z"
    assert payload["contractEndDate"] == ""


def test_datetime_fields_are_sent_as_iso_utc():
    payload = ADVERTISEMENTS.build_payload({"startDate": "2025-03-04T10:30", "active": "yes"})
    assert payload["startDate"] == "2025-03-04T10:30:00.000Z"
    assert payload["active"] is True


def test_boolean_coercion():
    spec = BLOGS.field_spec("active")
    assert spec.coerce("true") is True
    assert spec.coerce("off") is False
    with pytest.raises(ValueError):
        spec.coerce("maybe")


def test_scoped_paths():
    logs = get_schema("activity-logs")
    assert logs.path(12) == "user-activity-logs/12"
    with pytest.raises(ValueError):
        logs.path(None)
    assert BLOGS.item_path(42) == "admin/blogs/42"


def test_unknown_schema_lists_known_keys():
    with pytest.raises(KeyError) as excinfo:
        get_schema("nope")
    assert "blogs" in excinfo.value.args[0]


def test_catalog_keys_are_unique_and_complete():
    assert len(ENTITY_SCHEMAS) == 14
    assert ENTITY_SCHEMAS["documents"].id_field == "documentId"


@pytest.mark.parametrize(
    "raw, expected",
    [("10", 10), ("2.5", 2.5), (" 7 ", 7), ("abc", None), (True, None), ("nan", None)],
)
def test_parse_number(raw, expected):
    assert parse_number(raw) == expected


def test_input_formatters_pass_through_garbage():
    assert to_date_input("not a date") == "not a date"
    assert to_datetime_input("") == ""


def test_datetime_past_the_calendar_edge_is_invalid_not_a_crash():
    edge = "9999-12-31T23:59-05:00"
    spec = ADVERTISEMENTS.field_spec("startDate")
    assert spec.check(edge) == "Start Date must be a date and time (YYYY-MM-DDTHH:MM)"
    assert to_datetime_input(edge) == edge


def test_users_default_to_clients_tab():
    assert USERS.default_filters == {"roleId": str(USER_ROLE_TABS["Clients"])}
    assert sorted(USER_ROLE_TABS.values()) == [3, 4, 5, 6, 7]
