"""vCard import and export routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, File, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from ... import config
from ...vcard_export import (
    VCARD_MIME_TYPE,
    contacts_from_payload,
    contacts_to_vcard_file,
    export_filename,
)
from ...vcard_import import parse_vcard_text

router = APIRouter()
log = logging.getLogger(__name__)

NO_CONTACTS_MESSAGE = "No contacts found in the uploaded file(s)."
SHARE_FAILED_MESSAGE = (
    "Could not parse the shared contact. Make sure you shared a valid vCard file."
)


def _decode(data: bytes) -> str:
    return data.decode(config.VCARD_ENCODING, errors="replace")


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------

@router.post("/parse", response_class=JSONResponse)
async def parse_uploads(files: list[UploadFile] = File(...)):
    """Decode uploaded .vcf files into drafts for review; nothing is saved."""
    max_bytes = config.MAX_UPLOAD_SIZE_MB * 1024 * 1024
    contacts = []
    errors: list[str] = []

    for upload in files:
        name = upload.filename or "upload.vcf"
        data = await upload.read()
        if len(data) > max_bytes:
            return JSONResponse(
                {"error": f"File too large (max {config.MAX_UPLOAD_SIZE_MB} MB)"},
                status_code=413,
            )
        try:
            contacts.extend(parse_vcard_text(_decode(data)))
        except Exception as exc:
            log.warning("Failed to parse %s: %s", name, exc)
            errors.append(f"Failed to parse {name}")

    message = None
    if not contacts and not errors:
        message = NO_CONTACTS_MESSAGE

    return {
        "contacts": [c.to_draft() for c in contacts],
        "errors": errors,
        "message": message,
    }


@router.post("/share", response_class=JSONResponse)
async def share_target(request: Request):
    """Decode a vCard handed over as the raw request body."""
    text = _decode(await request.body())
    contacts = parse_vcard_text(text)
    if not contacts:
        return JSONResponse({"error": SHARE_FAILED_MESSAGE}, status_code=422)
    return {"contacts": [c.to_draft() for c in contacts]}


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

@router.post("/export")
async def export_vcards(request: Request):
    """Encode posted contacts and return them as a .vcf download."""
    try:
        body = await request.json()
    except Exception:
        return JSONResponse({"error": "Invalid JSON"}, status_code=400)

    try:
        contacts, orgs = contacts_from_payload(body)
    except ValueError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)

    content = contacts_to_vcard_file(contacts, orgs.get)
    filename = export_filename()
    return Response(
        content=content,
        media_type=VCARD_MIME_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
