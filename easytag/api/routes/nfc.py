"""NFC scan, write and simulation endpoints."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from easytag.api.routes.tags import RecordBody, build_record, save_tag, tag_to_dict
from easytag.api.state import AppState, get_state
from easytag.core import exceptions
from easytag.core.nfc_service import SimulatedRadioSession
from easytag.models.scan import ScanResult

router = APIRouter()

logger = logging.getLogger(__name__)

_STATUS_BY_CATEGORY = {
    exceptions.DATA: 422,
    exceptions.DEVICE: 409,
    exceptions.CANCELED: 409,
}


class WriteBody(BaseModel):
    # Either a saved tag's records or an ad-hoc record list
    tag_id: Optional[str] = None
    records: List[RecordBody] = []


class SimulateBody(BaseModel):
    uid: str
    writable: Optional[bool] = True
    capacity: int = 504
    records: List[RecordBody] = []
    iso_standard: str = ""
    tag_family: str = ""


def _radio_error(e: exceptions.RadioError) -> HTTPException:
    if isinstance(e, exceptions.ScanTimeout):
        status = 408
    elif isinstance(e, exceptions.RadioUnavailable):
        status = 503
    else:
        status = _STATUS_BY_CATEGORY.get(e.category, 500)
    return HTTPException(
        status_code=status,
        detail={"error": type(e).__name__, "category": e.category, "message": e.message},
    )


def _simulated_session(state: AppState) -> SimulatedRadioSession:
    session = state.nfc_service.session
    if not isinstance(session, SimulatedRadioSession):
        raise HTTPException(status_code=400, detail="Hardware is not simulated")
    return session


@router.post("/scan")
def scan_tag(save: bool = False, state: AppState = Depends(get_state)):
    """Read one tag. With save=true it is stored, reusing the entry with the same UID."""
    try:
        tag = state.nfc_service.read_tag()
    except exceptions.RadioError as e:
        raise _radio_error(e)
    if not save:
        return {"tag": tag_to_dict(tag), "warning": None}
    known = state.catalog.get_by_uid(tag.uid)
    if known is not None:
        tag.id = known.id
        tag.name = known.name
    else:
        tag.name = f"{tag.family or tag.specification} {tag.serial_number[-8:]}".strip()
    return save_tag(state.catalog, tag)


@router.post("/write")
def write_tag(body: WriteBody, state: AppState = Depends(get_state)):
    """Write records to the presented tag, in order."""
    saved = None
    if body.tag_id:
        saved = state.catalog.get(body.tag_id)
        if saved is None:
            raise HTTPException(status_code=404, detail="Tag not found")
        records = saved.records
    else:
        records = [build_record(r) for r in body.records]
    try:
        written = state.nfc_service.write_tag(records, tag=saved)
    except exceptions.RadioError as e:
        raise _radio_error(e)
    return {"ok": True, "written": written}


@router.post("/simulate")
def simulate_tag(body: SimulateBody, state: AppState = Depends(get_state)):
    """For development: present a tag to the simulated reader."""
    session = _simulated_session(state)
    try:
        uid = bytes.fromhex(body.uid.replace(":", "").replace(" ", ""))
    except ValueError:
        raise HTTPException(status_code=400, detail="uid must be hex")
    session.set_simulated_tag(
        ScanResult(
            uid=uid,
            writable=body.writable,
            capacity=body.capacity,
            records=[build_record(r).to_triple() for r in body.records],
            iso_standard=body.iso_standard,
            tag_family=body.tag_family,
        )
    )
    logger.info("Simulated tag %s", uid.hex())
    return {"ok": True, "uid": uid.hex().upper()}


@router.delete("/simulate")
def remove_simulated_tag(state: AppState = Depends(get_state)):
    _simulated_session(state).set_simulated_tag(None)
    return {"ok": True}
