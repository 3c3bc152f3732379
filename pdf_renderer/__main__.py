"""
Run the service with uvicorn.

uvicorn handles SIGTERM/SIGINT: it stops accepting connections, lets in-flight
requests finish, runs the lifespan shutdown (closing the browser) and exits 0.
A browser that fails to launch at startup makes uvicorn exit non-zero.
"""

import uvicorn

from .config import settings


def main() -> None:
    uvicorn.run(
        "pdf_renderer.main:app",
        host=settings.host,
        port=settings.port,
        log_level="debug" if settings.debug else "info",
        timeout_graceful_shutdown=max(1, int(settings.shutdown_grace_seconds)),
    )


if __name__ == "__main__":
    main()
