"""Data models shared by the vCard encoder and decoder."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Mapping


class ContactField(Enum):
    """Every contact field the codec reads or writes."""

    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    TITLE = "title"
    EMAIL_WORK = "email_work"
    EMAIL_PERSONAL = "email_personal"
    PHONE_MOBILE = "phone_mobile"
    PHONE_OFFICE = "phone_office"
    PHONE_HOME = "phone_home"
    ADDRESS_LINE1 = "address_line1"
    ADDRESS_LINE2 = "address_line2"
    CITY = "city"
    STATE = "state"
    ZIP = "zip"
    NOTES = "notes"
    ORG_NAME = "org_name"


# Fields written to the contacts table on import (org_name lives elsewhere).
ROW_FIELDS = tuple(f for f in ContactField if f is not ContactField.ORG_NAME)

_NAME_FIELDS = (ContactField.FIRST_NAME, ContactField.LAST_NAME)


@dataclass
class ContactRecord:
    """A contact as exported to, or drafted from, a vCard."""

    first_name: str = ""
    last_name: str = ""
    title: str | None = None
    email_work: str | None = None
    email_personal: str | None = None
    phone_mobile: str | None = None
    phone_office: str | None = None
    phone_home: str | None = None
    address_line1: str | None = None
    address_line2: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    notes: str | None = None
    org_name: str | None = None
    selected: bool = True
    id: str | None = None

    def get(self, fld: ContactField) -> str | None:
        return getattr(self, fld.value)

    def set(self, fld: ContactField, value: str | None) -> None:
        if fld in _NAME_FIELDS:
            value = value or ""
        setattr(self, fld.value, value)

    @property
    def has_name(self) -> bool:
        return bool(self.first_name or self.last_name)

    @property
    def is_usable(self) -> bool:
        """A draft is worth keeping if it has a name or a work email."""
        return self.has_name or bool(self.email_work)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def from_row(cls, row: Mapping) -> ContactRecord:
        """Construct from a row-store row or JSON object.

        Keys that are not contact fields are ignored.
        """
        r = dict(row)
        record = cls()
        for fld in ContactField:
            value = r.get(fld.value)
            record.set(fld, None if value is None else str(value))
        if r.get("id") is not None:
            record.id = str(r["id"])
        if "selected" in r:
            record.selected = bool(r["selected"])
        return record

    def to_draft(self) -> dict:
        """Serialize to a JSON-friendly dict for review before import."""
        draft = {fld.value: self.get(fld) for fld in ContactField}
        draft["selected"] = self.selected
        return draft

    def to_row(self, *, created_by: str, now: str | None = None) -> dict:
        """Serialize to a dict suitable for INSERT into the contacts table."""
        now = now or _now_iso()
        row: dict = {}
        for fld in ROW_FIELDS:
            value = self.get(fld)
            row[fld.value] = value if fld in _NAME_FIELDS else (value or None)
        row.update({
            "is_donor": False,
            "is_vip": False,
            "created_by": created_by,
            "created_at": now,
            "updated_at": now,
        })
        return row


@dataclass
class OrgInfo:
    """Organization context attached to a contact on export."""

    name: str | None = None
    role: str | None = None

    @classmethod
    def coerce(cls, value) -> OrgInfo | None:
        """Accept an OrgInfo, a ``{name, role}`` mapping, or None."""
        if value is None or isinstance(value, OrgInfo):
            return value
        if isinstance(value, Mapping):
            return cls(name=value.get("name") or None, role=value.get("role") or None)
        raise TypeError(f"Cannot use {type(value).__name__} as organization info")


@dataclass
class ParseResult:
    """Outcome of decoding a vCard file: kept drafts plus what was dropped."""

    contacts: list[ContactRecord] = field(default_factory=list)
    blocks_found: int = 0
    blocks_incomplete: int = 0
    blocks_unusable: int = 0

    @property
    def dropped(self) -> int:
        return self.blocks_incomplete + self.blocks_unusable


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
