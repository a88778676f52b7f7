"""
ndef_codec.py - NDEF Text/URI payload codec and message framing.

Only well-known Text ("T") and URI ("U") records are decoded semantically.
Everything else is surfaced as opaque bytes so it survives a round trip.
"""
import enum
import logging
import struct
from dataclasses import dataclass
from typing import Iterable, List, Tuple, Union

from easytag.core.exceptions import (
    InvalidEncoding,
    LanguageCodeTooLong,
    MalformedPayload,
    UnsupportedFormat,
)
from easytag.core.uri_prefixes import decode_prefix, encode_prefix

logger = logging.getLogger(__name__)

RTD_TEXT = "T"
RTD_URI = "U"

# Status byte of a text payload: bit 7 = UTF-16 flag (ignored), bits 0-5 = language length
_LANGUAGE_LENGTH_MASK = 0x3F
MAX_LANGUAGE_LENGTH = 63

# Record header flags
_FLAG_MB = 0x80
_FLAG_ME = 0x40
_FLAG_CF = 0x20
_FLAG_SR = 0x10
_FLAG_IL = 0x08
_TNF_MASK = 0x07

# Raw record as exchanged with the radio layer: (tnf, type, identifier, payload)
RawRecord = Tuple[int, bytes, bytes, bytes]


class TypeNameFormat(enum.IntEnum):
    """3-bit TNF field of an NDEF record header. 7 is reserved."""
    EMPTY = 0
    WELL_KNOWN = 1
    MEDIA = 2
    ABSOLUTE_URI = 3
    EXTERNAL = 4
    UNKNOWN = 5
    UNCHANGED = 6


TNF_NAMES = {
    TypeNameFormat.EMPTY: "Empty",
    TypeNameFormat.WELL_KNOWN: "NFC Well Known",
    TypeNameFormat.MEDIA: "Media",
    TypeNameFormat.ABSOLUTE_URI: "Absolute URI",
    TypeNameFormat.EXTERNAL: "NFC External",
    TypeNameFormat.UNKNOWN: "Unknown",
    TypeNameFormat.UNCHANGED: "Unchanged",
}


@dataclass(frozen=True)
class TextContent:
    """Decoded well-known Text record."""
    text: str
    language: str


@dataclass(frozen=True)
class UriContent:
    """Decoded well-known URI record."""
    uri: str


@dataclass(frozen=True)
class OpaqueContent:
    """Any record that is not Text or URI; payload is kept as-is."""
    format: int
    type: str
    payload: bytes

    @property
    def hex(self) -> str:
        return hex_string(self.payload)


@dataclass(frozen=True)
class UndecodableContent:
    """A Text or URI record whose payload failed to decode."""
    format: int
    type: str
    payload: bytes
    reason: str

    @property
    def hex(self) -> str:
        return hex_string(self.payload)


RecordContent = Union[TextContent, UriContent, OpaqueContent, UndecodableContent]


def hex_string(data: bytes) -> str:
    """Render bytes as "AA BB CC"."""
    return " ".join(f"{b:02X}" for b in data)


def _utf8(data: bytes, what: str) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidEncoding(f"{what} is not valid UTF-8", {"error": str(e)}) from e


# Text records

def decode_text(payload: bytes) -> Tuple[str, str]:
    """Decode a Text record payload into (text, language).

    The UTF-16 flag in the status byte is not honored; text is always
    decoded as UTF-8.
    """
    if not payload:
        raise MalformedPayload("Text payload is empty")
    language_length = payload[0] & _LANGUAGE_LENGTH_MASK
    if len(payload) < 1 + language_length:
        raise MalformedPayload(
            "Text payload shorter than its language code",
            {"language_length": language_length, "payload_length": len(payload)},
        )
    language = _utf8(payload[1:1 + language_length], "Language code")
    text = _utf8(payload[1 + language_length:], "Text")
    return text, language


def encode_text(text: str, language: str = "en") -> bytes:
    """Encode a Text record payload (UTF-8, no UTF-16 flag)."""
    language_bytes = language.encode("utf-8")
    if len(language_bytes) > MAX_LANGUAGE_LENGTH:
        raise LanguageCodeTooLong(
            f"Language code too long ({len(language_bytes)} bytes, max {MAX_LANGUAGE_LENGTH})",
            {"language": language},
        )
    return bytes([len(language_bytes)]) + language_bytes + text.encode("utf-8")


# URI records

def decode_uri(payload: bytes) -> str:
    """Decode a URI record payload; unknown identifier codes resolve to no prefix."""
    if not payload:
        raise MalformedPayload("URI payload is empty")
    return decode_prefix(payload[0]) + _utf8(payload[1:], "URI")


def encode_uri(uri: str) -> bytes:
    code, remainder = encode_prefix(uri)
    return bytes([code]) + remainder.encode("utf-8")


# Record dispatch

def is_text(format: int, type: str) -> bool:
    return format == TypeNameFormat.WELL_KNOWN and type == RTD_TEXT


def is_uri(format: int, type: str) -> bool:
    return format == TypeNameFormat.WELL_KNOWN and type == RTD_URI


def decode_payload(format: int, type: str, payload: bytes) -> Union[TextContent, UriContent]:
    """Strictly decode a Text or URI payload.

    Raises UnsupportedFormat for any other record, and the codec errors of
    decode_text/decode_uri for bad payloads.
    """
    if is_text(format, type):
        text, language = decode_text(payload)
        return TextContent(text=text, language=language)
    if is_uri(format, type):
        return UriContent(uri=decode_uri(payload))
    raise UnsupportedFormat(
        f"Record type {type!r} cannot be decoded", {"format": int(format), "type": type}
    )


def decode_record(format: int, type: str, payload: bytes) -> RecordContent:
    """Decode one record without raising.

    Non Text/URI records come back as OpaqueContent. A Text/URI record with a
    bad payload comes back as UndecodableContent carrying the raw bytes.
    """
    if not (is_text(format, type) or is_uri(format, type)):
        return OpaqueContent(format=int(format), type=type, payload=bytes(payload))
    try:
        return decode_payload(format, type, payload)
    except (MalformedPayload, InvalidEncoding) as e:
        logger.warning("Undecodable %s record: %s", type, e)
        return UndecodableContent(format=int(format), type=type, payload=bytes(payload), reason=str(e))


# Message framing

def encode_message(records: Iterable[RawRecord]) -> bytes:
    """Frame raw records into an NDEF message (MB on first, ME on last)."""
    records = list(records)
    out = bytearray()
    for i, (tnf, type_, identifier, payload) in enumerate(records):
        if not 0 <= tnf <= TypeNameFormat.UNCHANGED:
            raise ValueError(f"Invalid TNF {tnf}")
        if len(type_) > 255 or len(identifier) > 255:
            raise ValueError("Record type and identifier must be at most 255 bytes")
        header = tnf
        if i == 0:
            header |= _FLAG_MB
        if i == len(records) - 1:
            header |= _FLAG_ME
        short = len(payload) < 256
        if short:
            header |= _FLAG_SR
        if identifier:
            header |= _FLAG_IL
        out.append(header)
        out.append(len(type_))
        if short:
            out.append(len(payload))
        else:
            out += struct.pack(">I", len(payload))
        if identifier:
            out.append(len(identifier))
        out += type_
        out += identifier
        out += payload
    return bytes(out)


def decode_message(data: bytes) -> List[RawRecord]:
    """Parse an NDEF message into raw records.

    Raises MalformedPayload when a length field runs past the end of data or
    a chunked record is found. A record with the reserved TNF 7 is returned
    as is; its header still frames it.
    """
    records: List[RawRecord] = []
    offset = 0
    end = len(data)

    def take(n: int) -> bytes:
        nonlocal offset
        if offset + n > end:
            raise MalformedPayload(
                "NDEF message truncated", {"offset": offset, "needed": n, "length": end}
            )
        chunk = data[offset:offset + n]
        offset += n
        return chunk

    while offset < end:
        header = take(1)[0]
        if header & _FLAG_CF:
            raise MalformedPayload("Chunked NDEF records are not supported", {"offset": offset - 1})
        tnf = header & _TNF_MASK
        type_length = take(1)[0]
        if header & _FLAG_SR:
            payload_length = take(1)[0]
        else:
            payload_length = struct.unpack(">I", take(4))[0]
        id_length = take(1)[0] if header & _FLAG_IL else 0
        type_ = take(type_length)
        identifier = take(id_length)
        payload = take(payload_length)
        records.append((tnf, bytes(type_), bytes(identifier), bytes(payload)))

        # If this was the last record (ME flag set), stop
        if header & _FLAG_ME:
            break

    return records
