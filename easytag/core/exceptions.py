"""
exceptions.py - Error taxonomy for codec, catalog and radio failures.

Every error carries a ``category`` so callers can tell malformed data
("data") from a device or tag limitation ("device"), a user cancellation
("canceled") and a storage problem ("storage").
"""

DATA = "data"
DEVICE = "device"
CANCELED = "canceled"
STORAGE = "storage"


class EasyTagError(Exception):
    """Base exception for all easytag errors."""
    category = DATA

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class CodecError(EasyTagError):
    """Base exception for NDEF payload encoding/decoding errors."""
    pass


class MalformedPayload(CodecError):
    """Payload is too short or its length fields are inconsistent."""
    pass


class InvalidEncoding(CodecError):
    """Payload bytes are not valid UTF-8 where text is expected."""
    pass


class LanguageCodeTooLong(CodecError):
    """A Text record language code does not fit the 6-bit length field."""
    pass


class UnsupportedFormat(CodecError):
    """A record that is neither Text nor URI was asked to be decoded."""
    pass


class PersistenceFailure(EasyTagError):
    """The catalog could not be loaded from or written to its store."""
    category = STORAGE
    recoverable = True


class RadioError(EasyTagError):
    """Base exception for errors raised by the radio session."""
    category = DEVICE


class RadioUnavailable(RadioError):
    """No NFC reader is available."""

    def __init__(self, message="NFC is not available on this device.", details=None):
        super().__init__(message, details)


class NoNdefSupport(RadioError):
    """The presented tag does not support the NDEF format."""

    def __init__(self, message="Tag doesn't support NDEF format.", details=None):
        super().__init__(message, details)


class ScanTimeout(RadioError):
    """No tag was presented before the reader gave up."""

    def __init__(self, message="No tag detected before timeout.", details=None):
        super().__init__(message, details)


class RadioFailure(RadioError):
    """Reading the tag failed for another reason."""

    def __init__(self, detail, details=None):
        super().__init__(f"Failed to read tag: {detail}", details)
        self.detail = detail


class TagNotWritable(RadioError):
    """The tag is read-only."""

    def __init__(self, message="This tag is read-only and cannot be written to.", details=None):
        super().__init__(message, details)


class NoValidRecords(RadioError):
    """There is nothing writable in the record list."""
    category = DATA

    def __init__(self, message="No valid records to write to the tag.", details=None):
        super().__init__(message, details)


class WriteFailed(RadioError):
    """Writing the NDEF message failed."""

    def __init__(self, detail, details=None):
        super().__init__(f"Failed to write to tag: {detail}", details)
        self.detail = detail


class UserCanceled(RadioError):
    """The user canceled the radio session."""
    category = CANCELED

    def __init__(self, message="Operation canceled by user.", details=None):
        super().__init__(message, details)
