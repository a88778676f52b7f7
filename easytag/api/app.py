"""FastAPI app, CORS, and route registration."""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from easytag.config import CATALOG_PATH, LOG_LEVEL, ensure_data_dir

# Configure logging in the worker process (visible with uvicorn --reload)
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(levelname)s: %(name)s: %(message)s",
)

from easytag.api.state import AppState, get_state
from easytag.core.nfc_service import NFCService, RadioSession, build_session
from easytag.core.tag_catalog import FileBlobStore, TagCatalog

# Import routes after state to avoid circular imports
from easytag.api.routes import nfc, tags

__all__ = ["create_app", "AppState", "get_state"]

logger = logging.getLogger(__name__)


def create_app(
    catalog: Optional[TagCatalog] = None,
    session: Optional[RadioSession] = None,
) -> FastAPI:
    """Build the API around one catalog and one radio session."""
    if catalog is None:
        ensure_data_dir()
        catalog = TagCatalog(FileBlobStore(CATALOG_PATH))
    if session is None:
        session = build_session()
    state = AppState(catalog=catalog, nfc_service=NFCService(session))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        state.catalog.load()
        logger.info(
            "easytag ready (%d tag(s), %s reader)",
            len(state.catalog),
            "simulated" if state.nfc_service.simulated else "nfcpy",
        )

        yield

        state.nfc_service.close()

    app = FastAPI(
        title="easytag API",
        description="Local REST API for reading, writing and cataloging NDEF tags",
        lifespan=lifespan,
    )
    app.state.easytag = state
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(nfc.router, prefix="/api/nfc", tags=["nfc"])
    app.include_router(tags.router, prefix="/api/tags", tags=["tags"])
    return app
