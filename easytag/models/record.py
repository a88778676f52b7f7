"""NDEF record model: raw TNF/type/identifier/payload plus derived display fields."""
import uuid
from dataclasses import dataclass, field

from easytag.core.ndef_codec import (
    RTD_TEXT,
    RTD_URI,
    TNF_NAMES,
    RawRecord,
    RecordContent,
    TextContent,
    TypeNameFormat,
    UndecodableContent,
    UriContent,
    decode_record,
    encode_text,
    encode_uri,
)


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class NdefRecord:
    """One NDEF record. payload is the source of truth; nothing derived is stored."""
    id: str = field(default_factory=_new_id)
    format: TypeNameFormat = TypeNameFormat.EMPTY
    type: str = ""
    identifier: bytes = b""
    payload: bytes = b""

    @classmethod
    def from_triple(cls, tnf: int, type_: bytes, identifier: bytes, payload: bytes) -> "NdefRecord":
        """Rebuild a record from a raw scanned triple."""
        return cls(
            format=TypeNameFormat(tnf),
            type=bytes(type_).decode("utf-8", errors="replace"),
            identifier=bytes(identifier),
            payload=bytes(payload),
        )

    def to_triple(self) -> RawRecord:
        return (int(self.format), self.type.encode("utf-8"), self.identifier, self.payload)

    # Writers set TNF, type and payload together

    def write_empty(self) -> None:
        self.format = TypeNameFormat.EMPTY
        self.type = ""
        self.payload = b""

    def write_text(self, content: str, language: str = "en") -> None:
        payload = encode_text(content, language)
        self.format = TypeNameFormat.WELL_KNOWN
        self.type = RTD_TEXT
        self.payload = payload

    def write_link(self, link: str) -> None:
        self.format = TypeNameFormat.WELL_KNOWN
        self.type = RTD_URI
        self.payload = encode_uri(link)

    def write_media(self, content: str, media_type: str = "text/plain") -> None:
        self.format = TypeNameFormat.MEDIA
        self.type = media_type
        self.payload = content.encode("utf-8")

    # Derived, computed from payload on every access

    @property
    def content(self) -> RecordContent:
        return decode_record(self.format, self.type, self.payload)

    @property
    def display_type(self) -> str:
        content = self.content
        if isinstance(content, TextContent):
            return "Text"
        if isinstance(content, UriContent):
            return "URL"
        if isinstance(content, UndecodableContent):
            return "Undecodable"
        return "Unknown"

    @property
    def display_content(self) -> str:
        content = self.content
        if isinstance(content, TextContent):
            return content.text
        if isinstance(content, UriContent):
            return content.uri
        return content.hex

    @property
    def display_format(self) -> str:
        return TNF_NAMES.get(self.format, "Undefined")
