"""NdefRecord writers/derived fields and Tag computed properties."""
from datetime import datetime, timezone

from easytag.core.ndef_codec import (
    OpaqueContent,
    TextContent,
    TypeNameFormat,
    UndecodableContent,
    UriContent,
    decode_message,
)
from easytag.models import NdefRecord, ScanResult, Tag, Writability


def test_new_record_defaults():
    a, b = NdefRecord(), NdefRecord()
    assert a.id != b.id
    assert a.format == TypeNameFormat.EMPTY
    assert a.type == ""
    assert a.payload == b""


def test_write_text_sets_tnf_type_and_payload():
    r = NdefRecord()
    r.write_text("Hello", "en")
    assert r.format == TypeNameFormat.WELL_KNOWN
    assert r.type == "T"
    assert r.payload == b"\x02enHello"
    assert r.display_type == "Text"
    assert r.display_content == "Hello"
    assert r.display_format == "NFC Well Known"
    assert r.content == TextContent("Hello", "en")


def test_write_link():
    r = NdefRecord()
    r.write_link("https://www.example.com")
    assert (r.format, r.type, r.payload) == (TypeNameFormat.WELL_KNOWN, "U", b"\x02example.com")
    assert r.display_type == "URL"
    assert r.content == UriContent("https://www.example.com")


def test_write_media_is_opaque():
    r = NdefRecord()
    r.write_media("hi", "text/plain")
    assert r.format == TypeNameFormat.MEDIA
    assert r.type == "text/plain"
    assert r.display_type == "Unknown"
    assert r.display_content == "68 69"
    assert r.display_format == "Media"
    assert isinstance(r.content, OpaqueContent)


def test_write_empty():
    r = NdefRecord()
    r.write_text("x")
    r.write_empty()
    assert (r.format, r.type, r.payload) == (TypeNameFormat.EMPTY, "", b"")


def test_record_id_survives_rewrites():
    r = NdefRecord()
    rid = r.id
    r.write_text("a")
    r.write_link("tel:1")
    assert r.id == rid


def test_display_follows_payload():
    r = NdefRecord()
    r.write_text("old")
    r.payload = b"\x02ennew"
    assert r.display_content == "new"


def test_triple_round_trip():
    r = NdefRecord.from_triple(4, b"android.com:pkg", b"\x01", b"io.example")
    assert r.format == TypeNameFormat.EXTERNAL
    assert r.type == "android.com:pkg"
    assert r.to_triple() == (4, b"android.com:pkg", b"\x01", b"io.example")


def test_undecodable_record():
    r = NdefRecord.from_triple(1, b"T", b"", b"\x30en")
    assert r.display_type == "Undecodable"
    assert r.display_content == "30 65 6E"
    assert isinstance(r.content, UndecodableContent)


def test_writability_tri_state():
    assert Writability.from_bool(None) is Writability.UNKNOWN
    assert Writability.from_bool(True) is Writability.WRITABLE
    assert Writability.from_bool(False) is Writability.READ_ONLY
    assert Writability.READ_ONLY.to_bool() is False
    assert Writability.UNKNOWN.to_bool() is None


def test_tag_classification_falls_back_to_uid():
    tag = Tag(uid=bytes([0x08, 0x04, 1, 2, 3, 4, 5]))
    assert tag.manufacturer == "NXP - MIFARE DESFire"
    assert tag.specification == "ISO 14443-4"
    assert tag.family == "MIFARE DESFire"
    assert tag.serial_number == "08040102030405"


def test_hardware_classification_wins():
    tag = Tag(uid=bytes([0x08, 0x01]), iso_standard="ISO 15693")
    assert tag.specification == "ISO 15693"
    # family not reported, so it still comes from the UID
    assert tag.family == "MIFARE Classic"

    tag.tag_family = "MIFARE Plus"
    assert tag.family == "MIFARE Plus"


def test_authored_tag_has_no_uid():
    tag = Tag(name="draft")
    assert tag.uid == b""
    assert tag.serial_number == ""
    assert tag.specification == "Unknown"
    assert tag.used_size == 0
    assert tag.writability is Writability.UNKNOWN


def test_used_size_is_framed_message_length():
    r = NdefRecord()
    r.write_text("Hi", "en")
    # header + type length + payload length + "T" + 5 payload bytes
    assert Tag(records=[r]).used_size == 9


def test_display_time():
    tag = Tag(timestamp=datetime(2025, 3, 1, 12, 30, tzinfo=timezone.utc))
    assert tag.display_time


def test_from_scan_decodes_each_record_independently():
    scan = ScanResult(
        uid=b"\x04\xa2\xb3\xc4\xd5\xe6\xf7",
        writable=False,
        capacity=137,
        records=[
            (1, b"T", b"", b"\x02enHi"),
            (1, b"U", b"", b""),
            (2, b"image/png", b"", b"\x89PNG"),
            (1, b"U", b"", b"\x04a.io"),
        ],
        iso_standard="ISO 14443-A",
        tag_family="NTAG",
    )
    tag = Tag.from_scan(scan)
    assert [type(r.content) for r in tag.records] == [TextContent, UndecodableContent, OpaqueContent, UriContent]
    assert tag.records[2].payload == b"\x89PNG"
    assert tag.writability is Writability.READ_ONLY
    assert tag.memory_size == 137
    assert tag.family == "NTAG"
    assert tag.manufacturer == "NXP Semiconductors"


def test_from_scan_keeps_reserved_tnf_bytes():
    tag = Tag.from_scan(ScanResult(uid=b"\x04\x01", records=[(7, b"x", b"", b"\x01")]))
    assert tag.records[0].format == TypeNameFormat.UNKNOWN
    assert tag.records[0].payload == b"\x01"


def test_from_scan_of_message_with_reserved_tnf():
    data = b"\x97\x01\x02x\xaa\xbb" + b"\x51\x01\x05T\x02enHi"
    tag = Tag.from_scan(ScanResult(uid=b"\x04\x01", records=decode_message(data)))
    reserved, text = tag.records
    assert reserved.format == TypeNameFormat.UNKNOWN
    assert reserved.payload == b"\xaa\xbb"
    assert text.display_content == "Hi"
