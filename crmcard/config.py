"""Configuration loading from environment variables and defaults."""

from __future__ import annotations

import codecs
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJECT_ROOT / ".env")


def _env(key: str, default: str = "") -> str:
    return os.environ.get(key, default)


# vCard export
VCARD_EXPORT_PREFIX = _env("CRM_VCARD_EXPORT_PREFIX", "contacts")
VCARD_MIME_TYPE = "text/vcard"
VCARD_EXTENSIONS = (".vcf", ".vcard")

# Text encoding for reading/writing .vcf files
_encoding_name = _env("CRM_VCARD_ENCODING", "utf-8")
try:
    codecs.lookup(_encoding_name)
    VCARD_ENCODING = _encoding_name
except LookupError:
    logging.getLogger(__name__).warning(
        "Invalid CRM_VCARD_ENCODING %r, falling back to utf-8", _encoding_name,
    )
    VCARD_ENCODING = "utf-8"

# File uploads (web import)
MAX_UPLOAD_SIZE_MB = int(_env("CRM_MAX_UPLOAD_SIZE_MB", "10"))

# Logging
LOG_LEVEL = _env("CRM_LOG_LEVEL", "INFO").upper()
