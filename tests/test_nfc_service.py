"""NFCService over the simulated radio session, and the nfcpy session against a fake reader."""
from types import SimpleNamespace

import pytest

from easytag.core.exceptions import (
    MalformedPayload,
    NoValidRecords,
    RadioFailure,
    ScanTimeout,
    TagNotWritable,
    UserCanceled,
    WriteFailed,
)
from easytag.core.nfc_service import (
    NFCService,
    NfcpyRadioSession,
    SimulatedRadioSession,
    _hardware_classification,
    build_session,
)
from easytag.models import NdefRecord, ScanResult, Tag, Writability

UID = b"\x04\xa2\xb3\xc4\xd5\xe6\xf7"


@pytest.fixture
def session():
    return SimulatedRadioSession()


@pytest.fixture
def service(session):
    return NFCService(session)


def _record(kind, content=""):
    r = NdefRecord()
    if kind == "text":
        r.write_text(content)
    elif kind == "link":
        r.write_link(content)
    else:
        r.write_empty()
    return r


def test_scan_without_tag_times_out(service):
    with pytest.raises(ScanTimeout):
        service.read_tag()


def test_read_tag(service, session):
    session.set_simulated_tag(
        ScanResult(
            uid=UID,
            writable=True,
            capacity=504,
            records=[(1, b"U", b"", b"\x02example.com"), (1, b"T", b"", b"\x09")],
            iso_standard="ISO 14443-A",
            tag_family="NTAG",
        )
    )
    tag = service.read_tag()
    assert tag.uid == UID
    assert tag.writability is Writability.WRITABLE
    assert tag.memory_size == 504
    assert tag.family == "NTAG"
    assert tag.records[0].display_content == "https://www.example.com"
    # the broken text record is kept, not dropped
    assert tag.records[1].display_type == "Undecodable"


def test_each_read_gets_a_new_tag_id(service, session):
    session.set_simulated_tag(ScanResult(uid=UID))
    assert service.read_tag().id != service.read_tag().id


def test_write_preserves_order_and_skips_empty(service, session):
    session.set_simulated_tag(ScanResult(uid=UID, writable=True))
    records = [_record("link", "https://a.io"), _record("empty"), _record("text", "second")]
    assert service.write_tag(records) == 2
    tag = service.read_tag()
    assert [r.display_content for r in tag.records] == ["https://a.io", "second"]


def test_write_only_empty_records(service, session):
    session.set_simulated_tag(ScanResult(uid=UID, writable=True))
    with pytest.raises(NoValidRecords) as exc:
        service.write_tag([_record("empty")])
    assert exc.value.category == "data"
    with pytest.raises(NoValidRecords):
        service.write_tag([])


def test_write_read_only_tag(service, session):
    session.set_simulated_tag(ScanResult(uid=UID, writable=False))
    with pytest.raises(TagNotWritable) as exc:
        service.write_tag([_record("text", "x")])
    assert exc.value.category == "device"


def test_write_refuses_known_read_only_tag_without_radio(service, session):
    session.fail_next(RadioFailure("radio should not be used"))
    tag = Tag(uid=UID, writability=Writability.READ_ONLY)
    with pytest.raises(TagNotWritable):
        service.write_tag([_record("text", "x")], tag=tag)


def test_write_over_capacity(service, session):
    session.set_simulated_tag(ScanResult(uid=UID, writable=True, capacity=8))
    with pytest.raises(WriteFailed):
        service.write_tag([_record("text", "this does not fit")])


def test_radio_errors_propagate_untouched(service, session):
    canceled = UserCanceled()
    session.fail_next(canceled)
    with pytest.raises(UserCanceled) as exc:
        service.read_tag()
    assert exc.value is canceled
    assert exc.value.category == "canceled"


def test_error_messages_are_human_readable():
    assert "read-only" in TagNotWritable().message
    assert WriteFailed("boom").message == "Failed to write to tag: boom"
    assert MalformedPayload("short").category == "data"


@pytest.mark.parametrize(
    "tag_type, product, expected",
    [
        ("Type2Tag", "NXP NTAG215", ("ISO 14443-A", "NTAG")),
        ("Type2Tag", "Mifare Ultralight EV1", ("ISO 14443-A", "MIFARE Ultralight")),
        ("Type2Tag", "", ("ISO 14443-A", "")),
        ("Type3Tag", "FeliCa Standard (RC-S965)", ("ISO 18092", "FeliCa")),
        ("Type4Tag", "Mifare DESFire EV1", ("ISO 14443-4", "MIFARE DESFire")),
        ("Type5Tag", "ICODE SLIX", ("ISO 15693", "")),
        ("Type1Tag", "Topaz 512", ("ISO 14443-A", "Topaz")),
        ("Other", None, ("", "")),
    ],
)
def test_hardware_classification(tag_type, product, expected):
    assert _hardware_classification(tag_type, product) == expected


def test_build_session():
    assert isinstance(build_session(simulate=True), SimulatedRadioSession)
    assert isinstance(build_session(simulate=False), NfcpyRadioSession)


class FakeCommandError(Exception):
    pass


class FakeNdef:
    def __init__(self, octets=b"", writeable=True, capacity=137, error=None):
        self._octets = octets
        self.is_writeable = writeable
        self.capacity = capacity
        self.error = error

    @property
    def octets(self):
        return self._octets

    @octets.setter
    def octets(self, value):
        if self.error is not None:
            raise self.error
        self._octets = value


class FakeClf:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


def _nfcpy_session(monkeypatch, ndef):
    fake_nfc = SimpleNamespace(tag=SimpleNamespace(TagCommandError=FakeCommandError))
    clf = FakeClf()
    tag = SimpleNamespace(type="Type2Tag", product="NXP NTAG215", identifier=UID, ndef=ndef)
    session = NfcpyRadioSession()
    monkeypatch.setattr(session, "_connect", lambda: (fake_nfc, clf, tag))
    return session, clf


def test_nfcpy_scan_keeps_records_around_reserved_tnf(monkeypatch):
    octets = b"\x97\x01\x02x\xaa\xbb" + b"\x51\x01\x05T\x02enHi"
    session, clf = _nfcpy_session(monkeypatch, FakeNdef(octets))
    tag = NFCService(session).read_tag()
    assert [r.format for r in tag.records] == [5, 1]
    assert tag.records[1].display_content == "Hi"
    assert tag.family == "NTAG"
    assert tag.memory_size == 137
    assert clf.closed


def test_nfcpy_write_reports_tag_errors(monkeypatch):
    session, clf = _nfcpy_session(monkeypatch, FakeNdef(error=ValueError("too long")))
    with pytest.raises(WriteFailed):
        NFCService(session).write_tag([_record("text", "x")])
    assert clf.closed

    session, _ = _nfcpy_session(monkeypatch, FakeNdef(error=FakeCommandError("nack")))
    with pytest.raises(WriteFailed):
        NFCService(session).write_tag([_record("text", "x")])


def test_nfcpy_write_does_not_hide_programming_errors(monkeypatch):
    session, clf = _nfcpy_session(monkeypatch, FakeNdef(error=AttributeError("bug")))
    with pytest.raises(AttributeError):
        NFCService(session).write_tag([_record("text", "x")])
    assert clf.closed


def test_nfcpy_write_read_only_tag(monkeypatch):
    ndef = FakeNdef(writeable=False)
    session, _ = _nfcpy_session(monkeypatch, ndef)
    with pytest.raises(TagNotWritable):
        NFCService(session).write_tag([_record("text", "x")])
    assert ndef.octets == b""
