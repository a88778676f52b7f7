"""Tag catalog CRUD: saved tags and their NDEF records (stored in JSON)."""
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from easytag.api.state import AppState, get_state
from easytag.config import DEFAULT_LANGUAGE
from easytag.core.exceptions import PersistenceFailure
from easytag.core.ndef_codec import MAX_LANGUAGE_LENGTH, hex_string
from easytag.core.tag_catalog import TagCatalog
from easytag.models.record import NdefRecord
from easytag.models.tag import Tag

router = APIRouter()


class RecordBody(BaseModel):
    # "keep" reuses an existing record of the tag unchanged (needs id)
    kind: Literal["text", "link", "media", "empty", "keep"] = "text"
    id: Optional[str] = None
    content: str = ""
    language: Optional[str] = None
    media_type: str = "text/plain"


class TagBody(BaseModel):
    name: str
    records: List[RecordBody] = []


def build_record(body: RecordBody, existing: Optional[List[NdefRecord]] = None) -> NdefRecord:
    """Compose a record through the record writers. Raises HTTPException on bad input."""
    if body.kind == "keep":
        for r in existing or []:
            if r.id == body.id:
                return r
        raise HTTPException(status_code=400, detail=f"Record {body.id} not found on tag")
    record = NdefRecord(id=body.id) if body.id else NdefRecord()
    if body.kind == "text":
        language = body.language or DEFAULT_LANGUAGE
        if len(language.encode("utf-8")) > MAX_LANGUAGE_LENGTH:
            raise HTTPException(status_code=400, detail="Language code too long")
        record.write_text(body.content, language)
    elif body.kind == "link":
        record.write_link(body.content)
    elif body.kind == "media":
        record.write_media(body.content, body.media_type)
    else:
        record.write_empty()
    return record


def record_to_dict(r: NdefRecord) -> dict:
    return {
        "id": r.id,
        "format": int(r.format),
        "display_format": r.display_format,
        "type": r.type,
        "display_type": r.display_type,
        "content": r.display_content,
        "identifier": hex_string(r.identifier),
        "payload": hex_string(r.payload),
    }


def tag_to_dict(t: Tag) -> dict:
    return {
        "id": t.id,
        "name": t.name,
        "serial_number": t.serial_number,
        "is_writable": t.is_writable,
        "memory_size": t.memory_size,
        "used_size": t.used_size,
        "iso_standard": t.iso_standard,
        "tag_family": t.tag_family,
        "manufacturer": t.manufacturer,
        "specification": t.specification,
        "family": t.family,
        "timestamp": t.timestamp.isoformat(),
        "display_time": t.display_time,
        "records": [record_to_dict(r) for r in t.records],
    }


def save_tag(catalog: TagCatalog, tag: Tag) -> dict:
    """Save and serialize; a store failure becomes a warning on the response."""
    out = {"tag": None, "warning": None}
    try:
        catalog.save(tag)
    except PersistenceFailure as e:
        out["warning"] = e.message
    out["tag"] = tag_to_dict(tag)
    return out


def _require_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Tag name must not be empty")
    return name


@router.get("/")
def list_tags(q: Optional[str] = None, state: AppState = Depends(get_state)):
    """List saved tags; q filters by name or serial number."""
    if q:
        needle = q.lower()
        tags = state.catalog.filter(
            lambda t: needle in t.name.lower() or needle in t.serial_number.lower()
        )
    else:
        tags = state.catalog.tags
    return [tag_to_dict(t) for t in tags]


@router.get("/{tag_id}")
def get_tag(tag_id: str, state: AppState = Depends(get_state)):
    tag = state.catalog.get(tag_id)
    if tag is None:
        raise HTTPException(status_code=404, detail="Tag not found")
    return tag_to_dict(tag)


@router.post("/", status_code=201)
def create_tag(body: TagBody, state: AppState = Depends(get_state)):
    """Author a new tag (no UID until it is written and scanned)."""
    tag = Tag(name=_require_name(body.name))
    tag.records = [build_record(r) for r in body.records]
    return save_tag(state.catalog, tag)


@router.put("/{tag_id}")
def update_tag(tag_id: str, body: TagBody, state: AppState = Depends(get_state)):
    """Replace name and records of a saved tag; id, UID and position are kept."""
    existing = state.catalog.get(tag_id)
    if existing is None:
        raise HTTPException(status_code=404, detail="Tag not found")
    name = _require_name(body.name)
    records = [build_record(r, existing.records) for r in body.records]
    existing.name = name
    existing.records = records
    return save_tag(state.catalog, existing)


@router.delete("/{tag_id}", status_code=204)
def delete_tag(tag_id: str, state: AppState = Depends(get_state)):
    try:
        found = state.catalog.delete(tag_id)
    except PersistenceFailure as e:
        # Removed from memory, not from disk
        return JSONResponse(status_code=200, content={"ok": True, "warning": e.message})
    if not found:
        raise HTTPException(status_code=404, detail="Tag not found")
    return Response(status_code=204)


@router.delete("/")
def clear_tags(state: AppState = Depends(get_state)):
    """Remove every saved tag."""
    try:
        state.catalog.clear()
    except PersistenceFailure as e:
        return {"ok": True, "warning": e.message}
    return {"ok": True, "warning": None}
