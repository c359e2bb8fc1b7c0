"""Low-level vCard text helpers shared by the encoder and decoder.

Escaping follows RFC 6350 section 3.4: backslash, semicolon and comma are
escaped in text values, and newlines are written as a literal ``\\n``.
"""

from __future__ import annotations

import re

# Bare parameter tokens accepted as TYPE values (vCard 2.1 style, e.g. ``TEL;CELL:``).
LEGACY_TYPE_TOKENS = frozenset({
    "CELL", "MOBILE", "WORK", "HOME", "VOICE", "FAX", "PREF", "PERSONAL",
})

_ESCAPE_RE = re.compile(r"\\([\\;,nN])")
_FOLD_RE = re.compile(r"\n[ \t]")


# ---------------------------------------------------------------------------
# Escaping
# ---------------------------------------------------------------------------

def escape_vcard(value: str) -> str:
    """Escape a text value for N, FN, TITLE, ORG, ROLE and ADR components."""
    return (
        value
        .replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
    )


def escape_note(value: str) -> str:
    """Escape a NOTE value; newlines become a literal backslash-n."""
    return escape_vcard(value).replace("\n", "\\n")


def unescape_vcard(value: str) -> str:
    r"""Undo :func:`escape_vcard` / :func:`escape_note`.

    ``\n`` and ``\N`` become a newline; ``\;``, ``\,`` and ``\\`` lose their
    backslash. Done in a single pass so an escaped backslash followed by ``n``
    stays a backslash and an ``n``.
    """
    return _ESCAPE_RE.sub(
        lambda m: "\n" if m.group(1) in "nN" else m.group(1),
        value,
    )


def split_structured(value: str) -> list[str]:
    """Split a structured value (N, ADR, ORG) on unescaped semicolons.

    Each component is unescaped after splitting, so ``Smith\\;Jones;Ann``
    gives ``["Smith;Jones", "Ann"]``.
    """
    parts: list[str] = []
    current: list[str] = []
    escaped = False
    for ch in value:
        if escaped:
            current.append("\\" + ch)
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == ";":
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    if escaped:
        current.append("\\")
    parts.append("".join(current))
    return [unescape_vcard(p) for p in parts]


# ---------------------------------------------------------------------------
# Line handling
# ---------------------------------------------------------------------------

def normalize_newlines(text: str) -> str:
    """Convert CRLF and lone CR line endings to LF."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def unfold_lines(text: str) -> str:
    """Rejoin folded lines: drop every newline followed by a space or tab."""
    return _FOLD_RE.sub("", text)


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------

def parse_type_params(params: str) -> list[str]:
    """Collect uppercased TYPE tags from a property's parameter string.

    Handles ``TYPE=WORK,VOICE``, repeated ``TYPE=`` parameters, quoted
    values (``TYPE="work,voice"``) and bare legacy tokens (``CELL``).
    """
    types: list[str] = []
    for part in params.split(";"):
        token = part.strip().upper()
        if token.startswith("TYPE="):
            for tag in token[5:].strip('"').split(","):
                tag = tag.strip().strip('"')
                if tag:
                    types.append(tag)
        elif token in LEGACY_TYPE_TOKENS:
            types.append(token)
    return types
