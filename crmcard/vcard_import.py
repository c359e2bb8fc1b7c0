"""Import contacts from vCard (.vcf) files.

Decoding is best-effort: lines that cannot be read are skipped, blocks
without END:VCARD are dropped, and cards with neither a name nor a work
email are discarded. Nothing here raises on malformed vCard content.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, NamedTuple

from . import config
from .models import ContactField, ContactRecord, ParseResult
from .vcard_text import (
    normalize_newlines,
    parse_type_params,
    split_structured,
    unescape_vcard,
    unfold_lines,
)

log = logging.getLogger(__name__)

_BEGIN_RE = re.compile(r"BEGIN:VCARD", re.IGNORECASE)
_END_RE = re.compile(r"END:VCARD", re.IGNORECASE)


# ---------------------------------------------------------------------------
# File discovery
# ---------------------------------------------------------------------------

def find_vcf_files(path: str | Path, *, recursive: bool = False) -> list[Path]:
    """Resolve *path* to a list of vCard files.

    - If *path* is a file, return it (must end in .vcf or .vcard).
    - If *path* is a directory, glob for vCard files (optionally recursive).

    Raises FileNotFoundError if path doesn't exist,
    ValueError if a file has the wrong extension or no vCard files are found.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Path not found: {p}")

    if p.is_file():
        if p.suffix.lower() not in config.VCARD_EXTENSIONS:
            raise ValueError(f"Not a .vcf file: {p}")
        return [p]

    if p.is_dir():
        files = sorted(
            f for f in (p.rglob("*") if recursive else p.glob("*"))
            if f.is_file() and f.suffix.lower() in config.VCARD_EXTENSIONS
        )
        if not files:
            raise ValueError(f"No .vcf files found in {p}")
        return files

    raise ValueError(f"Path is not a file or directory: {p}")


def read_vcf_text(path: Path) -> str:
    """Read a vCard file as text, replacing undecodable bytes.

    OSError propagates so callers can tell a read failure from an empty file.
    """
    return path.read_text(encoding=config.VCARD_ENCODING, errors="replace")


# ---------------------------------------------------------------------------
# Positional slot assignment
# ---------------------------------------------------------------------------

class SlotAssigner:
    """Pick the target field for a repeatable property (TEL, EMAIL).

    Typed rules are tried in order; the first rule whose tags intersect the
    line's TYPE tags decides. Otherwise the running count of lines seen so
    far indexes into *fallback*, sticking on the last slot. The count
    advances for every line, typed or not.
    """

    def __init__(
        self,
        rules: Iterable[tuple[frozenset[str], ContactField]],
        fallback: Iterable[ContactField],
    ) -> None:
        self.rules = tuple(rules)
        self.fallback = tuple(fallback)
        self.count = 0

    def assign(self, types: Iterable[str]) -> ContactField:
        tags = set(types)
        target = None
        for wanted, fld in self.rules:
            if tags & wanted:
                target = fld
                break
        if target is None:
            target = self.fallback[min(self.count, len(self.fallback) - 1)]
        self.count += 1
        return target


def _phone_slots() -> SlotAssigner:
    return SlotAssigner(
        rules=[
            (frozenset({"CELL", "MOBILE"}), ContactField.PHONE_MOBILE),
            (frozenset({"WORK"}), ContactField.PHONE_OFFICE),
            (frozenset({"HOME"}), ContactField.PHONE_HOME),
        ],
        fallback=[
            ContactField.PHONE_MOBILE,
            ContactField.PHONE_OFFICE,
            ContactField.PHONE_HOME,
        ],
    )


def _email_slots() -> SlotAssigner:
    return SlotAssigner(
        rules=[
            (frozenset({"WORK"}), ContactField.EMAIL_WORK),
            (frozenset({"HOME", "PERSONAL"}), ContactField.EMAIL_PERSONAL),
        ],
        fallback=[ContactField.EMAIL_WORK, ContactField.EMAIL_PERSONAL],
    )


# ADR component index -> field (0 = PO box and 6 = country are not kept)
_ADR_SLOTS = {
    1: ContactField.ADDRESS_LINE2,
    2: ContactField.ADDRESS_LINE1,
    3: ContactField.CITY,
    4: ContactField.STATE,
    5: ContactField.ZIP,
}


# ---------------------------------------------------------------------------
# vCard parsing
# ---------------------------------------------------------------------------

class ContentLine(NamedTuple):
    """One ``NAME;PARAMS:VALUE`` line, split but not yet interpreted."""

    name: str
    params: str
    raw_value: str
    types: list[str]


def parse_content_line(line: str) -> ContentLine | None:
    """Split a content line at its first colon; None if there is no colon."""
    colon = line.find(":")
    if colon == -1:
        return None
    prop, _, params = line[:colon].partition(";")
    # Drop a group prefix such as "item1." (Apple exports)
    name = prop.strip().rsplit(".", 1)[-1].upper()
    return ContentLine(
        name=name,
        params=params,
        raw_value=line[colon + 1:].strip(),
        types=parse_type_params(params) if params else [],
    )


def parse_vcard_block(lines: Iterable[str]) -> ContactRecord | None:
    """Build a contact draft from the content lines of one vCard.

    Returns None if the card has no first name, last name or work email.
    """
    contact = ContactRecord()
    phones = _phone_slots()
    emails = _email_slots()

    for line in lines:
        cl = parse_content_line(line)
        if cl is None:
            log.debug("Skipping line without ':': %r", line)
            continue
        value = unescape_vcard(cl.raw_value)
        if not value:
            continue

        if cl.name == "N":
            parts = split_structured(cl.raw_value)
            contact.last_name = parts[0]
            contact.first_name = parts[1] if len(parts) > 1 else ""
        elif cl.name == "FN":
            # Fallback only: N seen earlier wins
            if not contact.has_name:
                first, _, rest = value.partition(" ")
                contact.first_name = first
                contact.last_name = rest
        elif cl.name == "TITLE":
            contact.title = value
        elif cl.name == "ORG":
            contact.org_name = split_structured(cl.raw_value)[0] or None
        elif cl.name == "TEL":
            contact.set(phones.assign(cl.types), value)
        elif cl.name == "EMAIL":
            contact.set(emails.assign(cl.types), value)
        elif cl.name == "ADR":
            parts = split_structured(cl.raw_value)
            for index, fld in _ADR_SLOTS.items():
                component = parts[index] if index < len(parts) else ""
                contact.set(fld, component or None)
        elif cl.name == "NOTE":
            contact.notes = value

    if not contact.is_usable:
        return None
    contact.selected = True
    return contact


def split_vcard_blocks(text: str) -> list[list[str] | None]:
    """Split raw file text into per-card line lists.

    Line endings are normalized and folded lines rejoined first. Text
    before the first BEGIN:VCARD is ignored. A block with no END:VCARD
    comes back as None.
    """
    normalized = unfold_lines(normalize_newlines(text))

    blocks: list[list[str] | None] = []
    for chunk in _BEGIN_RE.split(normalized)[1:]:
        end = _END_RE.search(chunk)
        if end is None:
            blocks.append(None)
            continue
        body = chunk[:end.start()]
        blocks.append([ln.strip() for ln in body.split("\n") if ln.strip()])
    return blocks


def parse_vcard_text_detailed(text: str) -> ParseResult:
    """Decode every vCard in *text*, keeping count of what was dropped."""
    result = ParseResult()
    for lines in split_vcard_blocks(text):
        result.blocks_found += 1
        if lines is None:
            result.blocks_incomplete += 1
            continue
        contact = parse_vcard_block(lines)
        if contact is None:
            result.blocks_unusable += 1
            continue
        result.contacts.append(contact)

    if result.dropped:
        log.debug(
            "Dropped %d of %d vCard blocks (%d incomplete, %d unusable)",
            result.dropped, result.blocks_found,
            result.blocks_incomplete, result.blocks_unusable,
        )
    return result


def parse_vcard_text(text: str) -> list[ContactRecord]:
    """Decode every usable vCard in *text*, in file order."""
    return parse_vcard_text_detailed(text).contacts


# ---------------------------------------------------------------------------
# Import result
# ---------------------------------------------------------------------------

@dataclass
class ImportResult:
    """Summary of reading one or more vCard files into drafts."""

    files_processed: int = 0
    vcards_parsed: int = 0
    blocks_dropped: int = 0
    contacts: list[ContactRecord] = field(default_factory=list)
    invalid_files: list[str] = field(default_factory=list)
    empty_files: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def selected_contacts(self) -> list[ContactRecord]:
        return [c for c in self.contacts if c.selected]

    def to_rows(self, *, created_by: str, now: str | None = None) -> list[dict]:
        """Insert payloads for the selected drafts."""
        return [c.to_row(created_by=created_by, now=now) for c in self.selected_contacts()]


# ---------------------------------------------------------------------------
# Main import
# ---------------------------------------------------------------------------

def import_vcards(path: str | Path, *, recursive: bool = False) -> ImportResult:
    """Read contact drafts from vCard file(s).

    1. Find vCard files at *path*
    2. Read each file; a read failure is recorded and the file skipped
    3. Decode every block, collecting usable drafts in file order
    4. Files that read fine but yield nothing are listed in ``empty_files``

    Nothing is persisted; callers review the drafts and store the
    selected ones via :meth:`ImportResult.to_rows`.
    """
    result = ImportResult()

    for vcf_path in find_vcf_files(path, recursive=recursive):
        result.files_processed += 1
        try:
            text = read_vcf_text(vcf_path)
        except OSError as exc:
            log.warning("Failed to read %s: %s", vcf_path, exc)
            result.invalid_files.append(str(vcf_path))
            result.errors.append(f"Failed to read {vcf_path.name}: {exc}")
            continue

        parsed = parse_vcard_text_detailed(text)
        result.vcards_parsed += parsed.blocks_found
        result.blocks_dropped += parsed.dropped
        if not parsed.contacts:
            result.empty_files.append(str(vcf_path))
        result.contacts.extend(parsed.contacts)

    return result
