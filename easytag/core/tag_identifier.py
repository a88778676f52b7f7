"""Manufacturer / ISO specification / family heuristics from UID bytes."""
from dataclasses import dataclass
from typing import Callable, List, Tuple

UNKNOWN = "Unknown"

ISO_14443_A = "ISO 14443-A"
ISO_14443_3 = "ISO 14443-3"
ISO_14443_4 = "ISO 14443-4"
ISO_18092 = "ISO 18092"


@dataclass(frozen=True)
class Classification:
    manufacturer: str
    specification: str
    family: str


# ISO 14443-A vendors identified by the first UID byte alone
_VENDORS = {
    0x04: "NXP Semiconductors",
    0x05: "Infineon",
    0x07: "Texas Instruments",
    0x28: "ST Microelectronics",
    0x38: "ST Microelectronics",
    0x01: "Motorola",
    0x02: "Motorola",
    0x03: "Motorola",
    0x20: "Sony",
    0x88: "Atmel",
    0xD0: "Renesas",
}

_FUDAN = "Shanghai Fudan Microelectronics"

Rule = Tuple[Callable[[bytes], bool], Callable[[bytes], Classification]]

# Evaluated top to bottom; two-byte matchers must stay ahead of the
# one-byte rules for the same manufacturer byte.
_RULES: List[Rule] = [
    (
        lambda uid: uid[0] == 0x08 and uid[1] == 0x04,
        lambda uid: Classification("NXP - MIFARE DESFire", ISO_14443_4, "MIFARE DESFire"),
    ),
    (
        lambda uid: uid[0] == 0x08,
        lambda uid: Classification("NXP - MIFARE Family", ISO_14443_3, "MIFARE Classic"),
    ),
    (
        lambda uid: uid[0] == 0x1D and uid[1] == 0x3C,
        lambda uid: Classification(_FUDAN, ISO_14443_4, "Fudan FM11RF08"),
    ),
    (
        lambda uid: uid[0] == 0x1D,
        lambda uid: Classification(_FUDAN, ISO_14443_4, ""),
    ),
    (
        lambda uid: uid[0] == 0xFE,
        lambda uid: Classification("Sony FeliCa", ISO_18092, "FeliCa"),
    ),
    (
        lambda uid: uid[0] in _VENDORS,
        lambda uid: Classification(_VENDORS[uid[0]], ISO_14443_A, ""),
    ),
]


def classify(uid: bytes) -> Classification:
    """Guess manufacturer, specification and family from a raw UID.

    Needs at least two bytes; shorter UIDs classify as unknown. Never raises.
    """
    uid = bytes(uid or b"")
    if len(uid) < 2:
        return Classification(UNKNOWN, UNKNOWN, "")
    for matches, result in _RULES:
        if matches(uid):
            return result(uid)
    return Classification(f"Unknown ({uid[0]:02X})", UNKNOWN, "")
