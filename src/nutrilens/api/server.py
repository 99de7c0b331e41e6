"""Local development server for the NutriLens API."""

import logging
import os

import uvicorn

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000


def main() -> None:
    """Serve the ASGI app with uvicorn."""
    host = os.environ.get("HOST", DEFAULT_HOST)
    port = int(os.environ.get("PORT", DEFAULT_PORT))
    logger.info("Starting NutriLens API on http://%s:%s", host, port)
    uvicorn.run("nutrilens.api.asgi:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    main()
