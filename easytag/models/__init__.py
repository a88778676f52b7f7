"""Data models for NDEF records, tags and scan results."""
from easytag.models.record import NdefRecord
from easytag.models.scan import ScanResult
from easytag.models.tag import Tag, Writability

__all__ = [
    "NdefRecord",
    "ScanResult",
    "Tag",
    "Writability",
]
