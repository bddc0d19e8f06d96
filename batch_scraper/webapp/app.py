"""FastAPI application factory."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import Settings, get_settings
from ..scrapers.browser import BrowserFactory, browser_factory_for
from .routes import router


def create_app(
    settings: Settings | None = None,
    browser_factory: BrowserFactory | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    `browser_factory` replaces the Playwright launcher, e.g. in tests.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Batch Scraper",
        description="Scrape batches of URLs with a headless browser",
        version=__version__,
    )

    app.state.settings = settings
    app.state.browser_factory = browser_factory or browser_factory_for(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    return app
