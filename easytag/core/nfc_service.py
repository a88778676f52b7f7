"""Radio boundary: read a tag into a Tag, write records back to a tag."""
import logging
import threading
import time
from typing import List, Optional, Sequence

from easytag.config import NFC_DEVICE, NFC_TIMEOUT_SEC, SIMULATE_HARDWARE
from easytag.core.exceptions import (
    MalformedPayload,
    NoNdefSupport,
    NoValidRecords,
    RadioError,
    RadioFailure,
    RadioUnavailable,
    ScanTimeout,
    TagNotWritable,
    UserCanceled,
    WriteFailed,
)
from easytag.core.ndef_codec import RawRecord, TypeNameFormat, decode_message, encode_message
from easytag.core.tag_identifier import ISO_14443_4, ISO_14443_A, ISO_18092
from easytag.models.record import NdefRecord
from easytag.models.scan import ScanResult
from easytag.models.tag import Tag, Writability

logger = logging.getLogger(__name__)


class RadioSession:
    """One NFC reader. scan() and write() block until a tag is presented."""

    def scan(self) -> ScanResult:
        raise NotImplementedError

    def write(self, records: Sequence[RawRecord]) -> None:
        raise NotImplementedError

    def close(self) -> None:
        pass


class SimulatedRadioSession(RadioSession):
    """In-memory tag for development without a reader."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._current: Optional[ScanResult] = None
        self._error: Optional[RadioError] = None

    def set_simulated_tag(self, scan: Optional[ScanResult]) -> None:
        """Present a tag (or remove it with None)."""
        with self._lock:
            self._current = scan

    def fail_next(self, error: Optional[RadioError]) -> None:
        """Make the next scan or write raise error."""
        with self._lock:
            self._error = error

    @property
    def current(self) -> Optional[ScanResult]:
        with self._lock:
            return self._current

    def _take_error(self) -> Optional[RadioError]:
        error, self._error = self._error, None
        return error

    def scan(self) -> ScanResult:
        with self._lock:
            error = self._take_error()
            if error is not None:
                raise error
            if self._current is None:
                raise ScanTimeout()
            current = self._current
            return ScanResult(
                uid=current.uid,
                writable=current.writable,
                capacity=current.capacity,
                records=list(current.records),
                iso_standard=current.iso_standard,
                tag_family=current.tag_family,
            )

    def write(self, records: Sequence[RawRecord]) -> None:
        with self._lock:
            error = self._take_error()
            if error is not None:
                raise error
            if self._current is None:
                raise ScanTimeout()
            if self._current.writable is False:
                raise TagNotWritable()
            size = len(encode_message(records))
            if self._current.capacity and size > self._current.capacity:
                raise WriteFailed(
                    f"message is {size} bytes, tag holds {self._current.capacity}",
                    {"size": size, "capacity": self._current.capacity},
                )
            self._current.records = list(records)


def _hardware_classification(tag_type: str, product: str):
    """(iso_standard, tag_family) from nfcpy's tag type and product name."""
    product_lower = (product or "").lower()
    if tag_type == "Type1Tag":
        return ISO_14443_A, "Topaz"
    if tag_type == "Type2Tag":
        if "ntag" in product_lower:
            return ISO_14443_A, "NTAG"
        if "ultralight" in product_lower:
            return ISO_14443_A, "MIFARE Ultralight"
        return ISO_14443_A, ""
    if tag_type == "Type3Tag":
        return ISO_18092, "FeliCa"
    if tag_type == "Type4Tag":
        if "desfire" in product_lower:
            return ISO_14443_4, "MIFARE DESFire"
        return ISO_14443_4, ""
    if tag_type == "Type5Tag":
        return "ISO 15693", ""
    return "", ""


class NfcpyRadioSession(RadioSession):
    """Reader attached through nfcpy (USB, serial or I2C PN53x, RC-S380, ACR122U...)."""

    def __init__(self, device: str = NFC_DEVICE, timeout_sec: float = NFC_TIMEOUT_SEC) -> None:
        self._device = device
        self._timeout_sec = timeout_sec

    def _connect(self):
        import nfc

        try:
            clf = nfc.ContactlessFrontend(self._device)
        except OSError as e:
            raise RadioUnavailable(
                f"No NFC reader on {self._device}", {"error": str(e)}
            ) from e
        deadline = time.monotonic() + self._timeout_sec
        try:
            # on-connect returning False hands the activated tag back to us
            tag = clf.connect(
                rdwr={"on-connect": lambda tag: False},
                terminate=lambda: time.monotonic() > deadline,
            )
        except Exception:
            clf.close()
            raise
        if tag is None:
            clf.close()
            raise ScanTimeout()
        if tag is False:
            clf.close()
            raise UserCanceled()
        return nfc, clf, tag

    def scan(self) -> ScanResult:
        nfc, clf, tag = self._connect()
        try:
            logger.info("Tag detected: %s %s", tag.type, tag.identifier.hex())
            if tag.ndef is None:
                raise NoNdefSupport(details={"uid": tag.identifier.hex()})
            octets = bytes(tag.ndef.octets)
            try:
                records = decode_message(octets) if octets else []
            except MalformedPayload as e:
                raise RadioFailure(f"unreadable NDEF message: {e}") from e
            iso_standard, tag_family = _hardware_classification(tag.type, getattr(tag, "product", ""))
            return ScanResult(
                uid=bytes(tag.identifier),
                writable=bool(tag.ndef.is_writeable),
                capacity=int(tag.ndef.capacity),
                records=records,
                iso_standard=iso_standard,
                tag_family=tag_family,
            )
        except nfc.tag.TagCommandError as e:
            raise RadioFailure(str(e)) from e
        finally:
            clf.close()

    def write(self, records: Sequence[RawRecord]) -> None:
        nfc, clf, tag = self._connect()
        try:
            if tag.ndef is None or not tag.ndef.is_writeable:
                raise TagNotWritable()
            tag.ndef.octets = encode_message(records)
            logger.info("Wrote %d record(s) to %s", len(records), tag.identifier.hex())
        except (nfc.tag.TagCommandError, ValueError) as e:
            raise WriteFailed(str(e)) from e
        finally:
            clf.close()


def build_session(simulate: bool = SIMULATE_HARDWARE) -> RadioSession:
    if simulate:
        return SimulatedRadioSession()
    return NfcpyRadioSession()


class NFCService:
    """Reads tags into Tag models and writes records through a RadioSession.

    Only one radio operation runs at a time. Radio errors propagate unchanged.
    """

    def __init__(self, session: RadioSession) -> None:
        self._session = session
        self._lock = threading.Lock()

    @property
    def session(self) -> RadioSession:
        return self._session

    @property
    def simulated(self) -> bool:
        return isinstance(self._session, SimulatedRadioSession)

    def read_tag(self) -> Tag:
        """Scan one tag. Undecodable records are kept with their raw payload."""
        with self._lock:
            scan = self._session.scan()
        tag = Tag.from_scan(scan)
        logger.info(
            "Read tag %s (%s, %d record(s))", tag.serial_number, tag.specification, len(tag.records)
        )
        return tag

    def write_tag(self, records: List[NdefRecord], tag: Optional[Tag] = None) -> int:
        """Write non-empty records, in order, to the presented tag. Returns how many."""
        if tag is not None and tag.writability is Writability.READ_ONLY:
            raise TagNotWritable()
        triples = [r.to_triple() for r in records if r.format != TypeNameFormat.EMPTY]
        if not triples:
            raise NoValidRecords()
        with self._lock:
            self._session.write(triples)
        return len(triples)

    def close(self) -> None:
        self._session.close()
