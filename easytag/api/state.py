"""Application state (catalog + NFC service), owned by the FastAPI app and injected into routes."""
from fastapi import Request

from easytag.core.nfc_service import NFCService
from easytag.core.tag_catalog import TagCatalog


class AppState:
    def __init__(self, catalog: TagCatalog, nfc_service: NFCService) -> None:
        self.catalog = catalog
        self.nfc_service = nfc_service


def get_state(request: Request) -> AppState:
    return request.app.state.easytag
