"""Export contacts as vCard 3.0 text."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Callable, Iterable

import vobject

from . import config
from .models import ContactRecord, OrgInfo
from .vcard_text import escape_note, escape_vcard

log = logging.getLogger(__name__)

CRLF = "\r\n"
VCARD_MIME_TYPE = config.VCARD_MIME_TYPE

OrgResolver = Callable[[str], "OrgInfo | dict | None"]


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def contact_to_vcard(
    contact: ContactRecord,
    org_name: str | None = None,
    org_role: str | None = None,
) -> str:
    """Encode one contact as a single BEGIN:VCARD ... END:VCARD block.

    Lines are joined with CRLF and there is no trailing line break.
    Missing fields are left out; this never raises on incomplete data.
    """
    first = contact.first_name or ""
    last = contact.last_name or ""

    lines = ["BEGIN:VCARD", "VERSION:3.0"]
    lines.append(f"N:{escape_vcard(last)};{escape_vcard(first)};;;")
    lines.append(f"FN:{escape_vcard(f'{first} {last}'.strip())}")

    if contact.title:
        lines.append(f"TITLE:{escape_vcard(contact.title)}")
    if org_name:
        lines.append(f"ORG:{escape_vcard(org_name)}")
    if org_role:
        lines.append(f"ROLE:{escape_vcard(org_role)}")

    # Phone numbers and emails go out unescaped
    if contact.phone_mobile:
        lines.append(f"TEL;TYPE=CELL:{contact.phone_mobile}")
    if contact.phone_office:
        lines.append(f"TEL;TYPE=WORK,VOICE:{contact.phone_office}")
    if contact.phone_home:
        lines.append(f"TEL;TYPE=HOME,VOICE:{contact.phone_home}")
    if contact.email_work:
        lines.append(f"EMAIL;TYPE=WORK:{contact.email_work}")
    if contact.email_personal:
        lines.append(f"EMAIL;TYPE=HOME:{contact.email_personal}")

    if contact.address_line1 or contact.city or contact.state or contact.zip:
        # pobox;extended;street;city;region;code;country
        components = [
            contact.address_line2,
            contact.address_line1,
            contact.city,
            contact.state,
            contact.zip,
        ]
        adr = ";".join(escape_vcard(c or "") for c in components)
        lines.append(f"ADR;TYPE=WORK:;{adr};")

    if contact.notes:
        lines.append(f"NOTE:{escape_note(contact.notes)}")

    lines.append("END:VCARD")
    return CRLF.join(lines)


def contacts_to_vcard_file(
    contacts: Iterable[ContactRecord],
    resolve_org: OrgResolver | None = None,
) -> str:
    """Encode many contacts into one .vcf document.

    *resolve_org* is called with each contact's ``id`` (contacts without an
    id get no organization) and may return an :class:`OrgInfo`, a
    ``{"name", "role"}`` dict, or None.
    """
    cards = []
    for contact in contacts:
        org = None
        if resolve_org and contact.id:
            org = OrgInfo.coerce(resolve_org(contact.id))
        if org:
            cards.append(contact_to_vcard(contact, org.name, org.role))
        else:
            cards.append(contact_to_vcard(contact))
    return CRLF.join(cards)


def _coerce_org(value) -> OrgInfo | None:
    try:
        return OrgInfo.coerce(value)
    except TypeError as exc:
        raise ValueError(str(exc)) from exc


def contacts_from_payload(payload) -> tuple[list[ContactRecord], dict[str, OrgInfo]]:
    """Unpack an export request into contacts and an id -> OrgInfo map.

    Accepts either a list of contact rows or an object of the form
    ``{"contacts": [...], "organizations": {contact_id: {"name", "role"}}}``.
    A row may also carry its own ``organization`` object. Rows without an
    ``id`` are given a positional one so inline organizations still resolve.

    Raises ValueError for anything else.
    """
    if isinstance(payload, list):
        rows, orgs_in = payload, {}
    elif isinstance(payload, dict) and isinstance(payload.get("contacts"), list):
        rows, orgs_in = payload["contacts"], payload.get("organizations")
        if orgs_in is None:
            orgs_in = {}
    else:
        raise ValueError("Expected a list of contacts or an object with a 'contacts' list")
    if not isinstance(orgs_in, dict):
        raise ValueError("'organizations' must be an object keyed by contact id")

    contacts: list[ContactRecord] = []
    orgs: dict[str, OrgInfo] = {}
    for key, value in orgs_in.items():
        org = _coerce_org(value)
        if org:
            orgs[str(key)] = org

    for i, row in enumerate(rows):
        if not isinstance(row, dict):
            raise ValueError(f"Contact #{i + 1} is not an object")
        contact = ContactRecord.from_row(row)
        if row.get("organization"):
            contact.id = contact.id or f"row-{i + 1}"
            orgs[contact.id] = _coerce_org(row["organization"])
        contacts.append(contact)
    return contacts, orgs


# ---------------------------------------------------------------------------
# Saving
# ---------------------------------------------------------------------------

def export_filename(today: date | None = None, *, prefix: str | None = None) -> str:
    """Suggested download name, e.g. ``contacts-2024-03-01.vcf``."""
    today = today or date.today()
    prefix = prefix or config.VCARD_EXPORT_PREFIX
    return f"{prefix}-{today.isoformat()}.vcf"


def write_vcard_file(content: str, path: str | Path) -> Path:
    """Write encoded vCard text to *path* unchanged (CRLF preserved).

    Raises ValueError if *path* does not have a vCard extension.
    """
    p = Path(path)
    if p.suffix.lower() not in config.VCARD_EXTENSIONS:
        raise ValueError(f"Not a .vcf file: {p}")
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding=config.VCARD_ENCODING, newline="") as fh:
        fh.write(content)
    log.info("Wrote %d bytes of vCard data to %s", len(content), p)
    return p


def verify_vcard_text(text: str) -> int:
    """Re-read *text* with vobject and return the number of vCards.

    Checks that exported data is readable by a standards-based parser.
    Raises ValueError if vobject rejects it.
    """
    try:
        components = list(vobject.readComponents(text))
    except Exception as exc:
        raise ValueError(f"vCard data failed validation: {exc}") from exc
    return sum(1 for c in components if c.name.upper() == "VCARD")
