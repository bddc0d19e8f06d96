"""Run the webapp server."""

import argparse
import logging

from ..config import get_settings


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def main(argv: list[str] | None = None):
    """Run the webapp with uvicorn."""
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Run the batch scraper service")
    parser.add_argument("--host", default=settings.host, help="Host to bind to")
    parser.add_argument("--port", type=int, default=settings.port, help="Port to bind to (default: $PORT or 3000)")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    args = parser.parse_args(argv)

    configure_logging(settings.log_level)

    import uvicorn

    uvicorn.run(
        "batch_scraper.webapp.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
        timeout_graceful_shutdown=1,
    )


if __name__ == "__main__":
    main()
