"""Tests for the contact data models."""

from __future__ import annotations

import pytest

from crmcard.models import ROW_FIELDS, ContactField, ContactRecord, OrgInfo, ParseResult


class TestContactField:

    def test_lookup_by_name(self):
        assert ContactField("phone_mobile") is ContactField.PHONE_MOBILE

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError):
            ContactField("fax_number")

    def test_row_fields_exclude_org_name(self):
        assert ContactField.ORG_NAME not in ROW_FIELDS
        assert len(ROW_FIELDS) == len(ContactField) - 1


class TestContactRecord:

    def test_defaults(self):
        c = ContactRecord()
        assert c.first_name == ""
        assert c.last_name == ""
        assert c.email_work is None
        assert c.selected is True
        assert c.id is None

    def test_get_and_set(self):
        c = ContactRecord()
        c.set(ContactField.CITY, "Portland")
        assert c.city == "Portland"
        assert c.get(ContactField.CITY) == "Portland"

    def test_set_name_none_becomes_empty(self):
        c = ContactRecord(first_name="Ann")
        c.set(ContactField.FIRST_NAME, None)
        assert c.first_name == ""

    def test_usable_with_name(self):
        assert ContactRecord(last_name="Doe").is_usable

    def test_usable_with_work_email_only(self):
        assert ContactRecord(email_work="a@x.com").is_usable

    def test_personal_email_alone_not_usable(self):
        assert not ContactRecord(email_personal="a@x.com").is_usable

    def test_display_name(self):
        assert ContactRecord(first_name="Ann").display_name == "Ann"
        assert ContactRecord(first_name="Ann", last_name="Lee").display_name == "Ann Lee"


class TestFromRow:

    def test_basic_row(self):
        c = ContactRecord.from_row({
            "id": "c-1",
            "first_name": "Ann",
            "last_name": "Lee",
            "city": "Boston",
            "is_vip": True,
            "created_by": "user-1",
        })
        assert c.id == "c-1"
        assert c.first_name == "Ann"
        assert c.city == "Boston"
        assert c.title is None

    def test_null_names_become_empty(self):
        c = ContactRecord.from_row({"first_name": None, "last_name": None})
        assert c.first_name == ""
        assert c.last_name == ""

    def test_non_string_values_converted(self):
        c = ContactRecord.from_row({"first_name": "Z", "zip": 2139, "id": 7})
        assert c.zip == "2139"
        assert c.id == "7"

    def test_selected_flag(self):
        assert ContactRecord.from_row({"selected": False}).selected is False


class TestSerialization:

    def test_to_draft_has_every_field(self):
        draft = ContactRecord(first_name="Ann", org_name="Acme").to_draft()
        assert set(draft) == {f.value for f in ContactField} | {"selected"}
        assert draft["org_name"] == "Acme"
        assert draft["selected"] is True

    def test_to_row(self):
        c = ContactRecord(
            first_name="Ann", last_name="", title="", email_work="ann@x.com",
            org_name="Acme", id="c-1",
        )
        row = c.to_row(created_by="user-1", now="2024-01-01T00:00:00+00:00")
        assert row["first_name"] == "Ann"
        assert row["last_name"] == ""
        assert row["title"] is None
        assert row["email_work"] == "ann@x.com"
        assert row["is_donor"] is False
        assert row["is_vip"] is False
        assert row["created_by"] == "user-1"
        assert row["created_at"] == row["updated_at"] == "2024-01-01T00:00:00+00:00"
        assert "org_name" not in row
        assert "selected" not in row
        assert "id" not in row

    def test_to_row_default_timestamp(self):
        row = ContactRecord(first_name="Ann").to_row(created_by="u")
        assert row["created_at"].endswith("+00:00")


class TestOrgInfo:

    def test_coerce_none(self):
        assert OrgInfo.coerce(None) is None

    def test_coerce_instance(self):
        org = OrgInfo(name="Acme")
        assert OrgInfo.coerce(org) is org

    def test_coerce_mapping(self):
        assert OrgInfo.coerce({"name": "Acme", "role": "Board"}) == OrgInfo("Acme", "Board")

    def test_coerce_mapping_empty_values(self):
        assert OrgInfo.coerce({"name": "", "role": None}) == OrgInfo(None, None)

    def test_coerce_rejects_other_types(self):
        with pytest.raises(TypeError):
            OrgInfo.coerce("Acme")


class TestParseResult:

    def test_dropped(self):
        result = ParseResult(blocks_found=5, blocks_incomplete=1, blocks_unusable=2)
        assert result.dropped == 3
