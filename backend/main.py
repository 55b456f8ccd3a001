"""ASGI entry point.

``app`` is what uvicorn imports (``uvicorn backend.main:app``); running this
module directly starts a server configured from the environment.
"""
import os

import uvicorn

from backend.app_factory import create_app
from ecosim.config.server import DEFAULT_API_PORT

app = create_app()


def main() -> None:
    """Run the API server with uvicorn.

    Environment:
        ECOSIM_API_HOST: Bind address (default 0.0.0.0).
        ECOSIM_API_PORT: Port (default 3000).
        PRODUCTION: ``true`` disables auto-reload.
    """
    host = os.getenv("ECOSIM_API_HOST", "0.0.0.0")
    port = int(os.getenv("ECOSIM_API_PORT", str(DEFAULT_API_PORT)))
    is_production = os.getenv("PRODUCTION", "false").lower() == "true"

    uvicorn.run(
        "backend.main:app",
        host=host,
        port=port,
        reload=not is_production,
        log_level="info",
        loop="asyncio" if os.name == "nt" else "auto",
    )


if __name__ == "__main__":
    main()
