"""What the radio layer reports for one presented tag."""
from dataclasses import dataclass, field
from typing import List, Optional

from easytag.core.ndef_codec import RawRecord


@dataclass
class ScanResult:
    """Raw read result: UID, NDEF status and raw record triples."""
    uid: bytes
    writable: Optional[bool] = None
    capacity: int = 0
    records: List[RawRecord] = field(default_factory=list)
    # Authoritative classification from protocol-level detection, "" if none
    iso_standard: str = ""
    tag_family: str = ""
