"""Entry: start the API server."""
import logging

import uvicorn

from easytag.config import API_HOST, API_PORT, LOG_LEVEL

if __name__ == "__main__":
    logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO), format="%(levelname)s: %(message)s")
    uvicorn.run(
        "easytag.api.app:create_app",
        factory=True,
        host=API_HOST,
        port=API_PORT,
        reload=True,
    )
