"""Catalog entry for one physical NFC tag."""
import enum
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from easytag.core.ndef_codec import encode_message
from easytag.core.tag_identifier import Classification, classify
from easytag.models.record import NdefRecord
from easytag.models.scan import ScanResult

logger = logging.getLogger(__name__)


class Writability(enum.Enum):
    """NDEF write status reported by the tag."""
    UNKNOWN = "unknown"
    WRITABLE = "writable"
    READ_ONLY = "read_only"

    @classmethod
    def from_bool(cls, value: Optional[bool]) -> "Writability":
        if value is None:
            return cls.UNKNOWN
        return cls.WRITABLE if value else cls.READ_ONLY

    def to_bool(self) -> Optional[bool]:
        if self is Writability.UNKNOWN:
            return None
        return self is Writability.WRITABLE


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Tag:
    """Stored fields only; manufacturer/specification/family etc. are derived."""
    id: str = field(default_factory=_new_id)
    name: str = ""
    uid: bytes = b""
    writability: Writability = Writability.UNKNOWN
    memory_size: int = 0
    timestamp: datetime = field(default_factory=_now)
    records: List[NdefRecord] = field(default_factory=list)
    # Hardware-reported classification, e.g. "ISO 15693" / "MIFARE Ultralight"
    iso_standard: str = ""
    tag_family: str = ""

    @classmethod
    def from_scan(cls, scan: ScanResult) -> "Tag":
        """Build a tag from a radio read. Each raw record is kept, decodable or not."""
        records = []
        for tnf, type_, identifier, payload in scan.records:
            try:
                records.append(NdefRecord.from_triple(tnf, type_, identifier, payload))
            except ValueError:
                # TNF 7 is reserved; keep the bytes as an Unknown record
                logger.warning("Record with reserved TNF %s stored as Unknown", tnf)
                records.append(NdefRecord.from_triple(5, type_, identifier, payload))
        return cls(
            uid=bytes(scan.uid),
            writability=Writability.from_bool(scan.writable),
            memory_size=scan.capacity,
            records=records,
            iso_standard=scan.iso_standard,
            tag_family=scan.tag_family,
        )

    @property
    def is_writable(self) -> Optional[bool]:
        return self.writability.to_bool()

    @property
    def classification(self) -> Classification:
        return classify(self.uid)

    @property
    def manufacturer(self) -> str:
        return self.classification.manufacturer

    @property
    def specification(self) -> str:
        if self.iso_standard:
            return self.iso_standard
        return self.classification.specification

    @property
    def family(self) -> str:
        if self.tag_family:
            return self.tag_family
        return self.classification.family

    @property
    def serial_number(self) -> str:
        return self.uid.hex().upper()

    @property
    def used_size(self) -> int:
        """Bytes the records take up once framed as an NDEF message."""
        if not self.records:
            return 0
        return len(encode_message(r.to_triple() for r in self.records))

    @property
    def display_time(self) -> str:
        return self.timestamp.astimezone().strftime("%x %H:%M")
