"""Configuration: env, data paths, API, NFC reader settings."""
import os
from pathlib import Path

from dotenv import load_dotenv

# Base paths (project root = parent of easytag package)
BASE_DIR = Path(__file__).resolve().parent.parent

# Load .env from project root so EASYTAG_* overrides are set
load_dotenv(BASE_DIR / ".env")

DATA_DIR = Path(os.getenv("EASYTAG_DATA_DIR", str(BASE_DIR / "data")))
CATALOG_PATH = Path(os.getenv("EASYTAG_CATALOG_PATH", str(DATA_DIR / "nfc-tags.json")))

# API
API_HOST = os.getenv("EASYTAG_API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("EASYTAG_API_PORT", "8000"))

LOG_LEVEL = os.getenv("EASYTAG_LOG_LEVEL", "INFO").upper()

# NFC reader (nfcpy device path, e.g. "usb", "usb:072f:2200", "tty:AMA0:pn532")
NFC_DEVICE = os.getenv("EASYTAG_NFC_DEVICE", "usb")
NFC_TIMEOUT_SEC = float(os.getenv("EASYTAG_NFC_TIMEOUT_SEC", "10"))

# Language tag written into new text records (ISO 639-1, at most 63 bytes)
DEFAULT_LANGUAGE = os.getenv("EASYTAG_DEFAULT_LANGUAGE", "en")

# Hardware simulation (for development without a reader)
SIMULATE_HARDWARE = os.getenv("EASYTAG_SIMULATE_HARDWARE", "0").lower() in ("1", "true", "yes")


def ensure_data_dir() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
