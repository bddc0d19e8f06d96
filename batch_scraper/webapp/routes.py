"""FastAPI routes for the scraper service."""

from __future__ import annotations

import json
import logging
from datetime import datetime, UTC

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from .. import __version__
from ..errors import InvalidInput
from ..models import ScrapeOptions
from ..orchestrator import run_batch, validate_urls
from ..scrapers.browser import check_browser
from ..utils import MISSING

logger = logging.getLogger(__name__)

router = APIRouter()


def _now() -> str:
    return datetime.now(UTC).isoformat()


def _bad_request(error: str, received: str | None) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": error, "received": received})


@router.get("/")
async def index():
    return {"status": "Batch scraper running", "timestamp": _now(), "version": __version__}


@router.get("/health")
async def health():
    return {"status": "healthy", "timestamp": _now()}


@router.get("/chrome-status")
async def chrome_status(request: Request):
    """Launch and close a browser to check that the engine is usable."""
    ok, error = await check_browser(request.app.state.browser_factory)
    if ok:
        return {"status": "Chrome working", "timestamp": _now()}
    return {"status": "Chrome failed", "error": error, "timestamp": _now()}


@router.post("/scrape")
async def scrape(request: Request):
    """Scrape a batch of URLs and return per-URL results."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _bad_request("Request body must be valid JSON", "undefined")
    if not isinstance(body, dict):
        return _bad_request("URLs array is required", "undefined")

    try:
        urls = validate_urls(body.get("urls", MISSING))
        options = ScrapeOptions.from_dict(body.get("options"))
        settings = request.app.state.settings
        result = await run_batch(
            urls,
            options,
            browser_factory=request.app.state.browser_factory,
            chunk_delay=settings.chunk_delay,
        )
    except InvalidInput as e:
        logger.warning(f"Rejected scrape request: {e}")
        return _bad_request(str(e), e.received)

    if not result.success:
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": result.error,
                "products": [p.to_dict() for p in result.products],
                "processingTimeMs": result.processing_time_ms,
            },
        )
    return result.to_dict()
