"""
Application entry point for the bilingual course catalog backend.

- Mounts versioned routers using a configurable prefix from core.config Settings.
- Serves robots.txt and sitemap.xml at the site root.
"""
import asyncio
import logging

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response

from api.v1.routes import router as v1_router
from core.config import Settings, get_settings
from core.logging_config import configure_logging
from middleware import RequestContextMiddleware, create_request_context_config
from services.course_catalog import CourseCatalog, get_course_catalog
from services.search_index import get_search_index_cache
from services.seo import build_sitemap, render_robots, render_sitemap_xml

_settings = get_settings()

# Configure structured logging
configure_logging(_settings.log_level)

logger = logging.getLogger("startup")

app = FastAPI(title="Course Catalog - Backend", version="0.1.0")

# Basic CORS (can be restricted via settings in the future)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestContextMiddleware, config=create_request_context_config())


@app.get("/")
async def root():
    return {"message": "Server running"}


@app.get("/robots.txt", response_class=PlainTextResponse)
async def robots(settings: Settings = Depends(get_settings)) -> str:
    return render_robots(settings.site_url)


@app.get("/sitemap.xml")
async def sitemap(
    settings: Settings = Depends(get_settings),
    catalog: CourseCatalog = Depends(get_course_catalog),
) -> Response:
    try:
        categories = await catalog.categories()
    except Exception as e:
        logger.error("sitemap_failed", extra={"error": str(e), "error_type": type(e).__name__})
        raise HTTPException(status_code=500, detail="Failed to build sitemap")
    entries = await asyncio.to_thread(build_sitemap, categories, settings.site_url, None, settings.locales)
    return Response(content=render_sitemap_xml(entries), media_type="application/xml")


# Mount versioned API routers
app.include_router(v1_router, prefix=_settings.api_v1_prefix)


@app.on_event("startup")
async def startup_event():
    """Warm the search index so the first search request does not pay for the docs scan."""
    logger.info("Starting application initialization...")
    try:
        entries = await get_search_index_cache().get()
        logger.info("Search index preloaded", extra={"entries": len(entries)})
    except Exception as e:
        logger.error(f"Search index preload failed: {e}")
        # Don't fail startup; the index is built lazily on the first search
