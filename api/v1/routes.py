"""
Versioned API v1 routes.

Design choices:
- The router does not hardcode a version prefix; main.py mounts it using settings.api_v1_prefix.
- Responses are wrapped in the generic ApiResponse to keep a stable envelope while inner data evolves.
- Catalog and search-index access go through dependencies so tests can point them at a temporary docs tree.
"""
from __future__ import annotations

import logging
from typing import List, Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from core.config import Settings, get_settings
from core.logging_config import get_request_id, set_request_id
from schemas.api import ApiResponse, CourseHtml, ReindexResult, SearchPage
from schemas.course import Category, Course
from services.course_catalog import CourseCatalog, get_course_catalog
from services.search_index import SearchIndexCache, get_search_index_cache, search_page

router = APIRouter(tags=["catalog"])  # mounted under /api/v1 by main.py
logger = logging.getLogger("api")

NOT_FOUND_MESSAGES = {"zh": "课程未找到", "en": "Course not found"}
FETCH_FAILED_MESSAGES = {"zh": "获取课程失败", "en": "Failed to fetch course"}


def _request_id() -> str:
    # Reuse the id assigned by RequestContextMiddleware so logs and the response header agree
    req_id = get_request_id() or str(uuid4())
    set_request_id(req_id)
    return req_id


def validate_locale(locale: str, settings: Settings = Depends(get_settings)) -> str:
    if locale not in settings.locales:
        raise HTTPException(status_code=404, detail=f"Unsupported locale: {locale}")
    return locale


@router.get("/search", response_model=ApiResponse[SearchPage])
async def search(
    q: str = Query("", description="Search query matched against titles, descriptions, language and category"),
    page: int = Query(1, ge=1, description="1-based page number"),
    limit: Optional[int] = Query(None, ge=1, le=100, description="Results per page (defaults to SEARCH_DEFAULT_LIMIT)"),
    locale: Optional[str] = Query(None, description="Visitor locale; 'en' only searches courses with an English version"),
    cache: SearchIndexCache = Depends(get_search_index_cache),
    settings: Settings = Depends(get_settings),
) -> ApiResponse[SearchPage]:
    """Keyword search over the course index with fixed per-field weights."""
    req_id = _request_id()
    limit = limit or settings.search_default_limit
    locale = locale or settings.default_locale

    if not q.strip():
        logger.warning("search_invalid", extra={"request_id": req_id, "error": "empty query"})
        return JSONResponse(status_code=400, content={
            "error": "Query parameter is required",
            "results": [],
            "total": 0,
            "page": 1,
            "totalPages": 0,
        })

    try:
        entries = await cache.get()
        result = search_page(q, entries, page=page, limit=limit, locale=locale)
        logger.info("search_completed", extra={
            "request_id": req_id, "query": q, "locale": locale, "total": result.total, "page": page,
        })
        return ApiResponse[SearchPage](request_id=req_id, status="ok", data=result)
    except Exception as e:
        logger.error("search_failed", extra={
            "request_id": req_id, "query": q, "error": str(e), "error_type": type(e).__name__,
        })
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/search/reindex", response_model=ApiResponse[ReindexResult])
async def reindex(cache: SearchIndexCache = Depends(get_search_index_cache)) -> ApiResponse[ReindexResult]:
    """Drop the cached search index and rebuild it from the docs tree."""
    req_id = _request_id()
    try:
        entries = await cache.rebuild()
        logger.info("search_reindexed", extra={"request_id": req_id, "entries": len(entries)})
        return ApiResponse[ReindexResult](request_id=req_id, status="ok", data=ReindexResult(entries=len(entries)))
    except Exception as e:
        logger.error("search_reindex_failed", extra={
            "request_id": req_id, "error": str(e), "error_type": type(e).__name__,
        })
        raise HTTPException(status_code=500, detail="Failed to rebuild search index")


@router.get("/{locale}/categories", response_model=ApiResponse[List[Category]])
async def get_categories(
    locale: str = Depends(validate_locale),
    catalog: CourseCatalog = Depends(get_course_catalog),
) -> ApiResponse[List[Category]]:
    """Category -> subcategory -> course tree holding only the courses available in the locale."""
    req_id = _request_id()
    try:
        categories = await catalog.categories(locale)
        logger.info("get_categories_completed", extra={
            "request_id": req_id, "locale": locale, "categories": len(categories),
        })
        return ApiResponse[List[Category]](request_id=req_id, status="ok", data=categories)
    except Exception as e:
        logger.error("get_categories_failed", extra={
            "request_id": req_id, "locale": locale, "error": str(e), "error_type": type(e).__name__,
        })
        raise HTTPException(status_code=500, detail="Failed to fetch categories")


@router.get("/{locale}/categories/{slug}", response_model=ApiResponse[Category])
async def get_category(
    slug: str,
    locale: str = Depends(validate_locale),
    catalog: CourseCatalog = Depends(get_course_catalog),
) -> ApiResponse[Category]:
    req_id = _request_id()
    try:
        category = await catalog.category(slug, locale)
    except Exception as e:
        logger.error("get_category_failed", extra={"request_id": req_id, "path": slug, "error": str(e)})
        raise HTTPException(status_code=500, detail="Failed to fetch categories")

    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return ApiResponse[Category](request_id=req_id, status="ok", data=category)


@router.get("/{locale}/courses", response_model=ApiResponse[List[Course]])
async def get_courses(
    locale: str = Depends(validate_locale),
    catalog: CourseCatalog = Depends(get_course_catalog),
) -> ApiResponse[List[Course]]:
    """Flat list of the courses available in the locale."""
    req_id = _request_id()
    try:
        courses = await catalog.courses(locale)
        logger.info("get_courses_completed", extra={"request_id": req_id, "locale": locale, "courses": len(courses)})
        return ApiResponse[List[Course]](request_id=req_id, status="ok", data=courses)
    except Exception as e:
        logger.error("get_courses_failed", extra={
            "request_id": req_id, "locale": locale, "error": str(e), "error_type": type(e).__name__,
        })
        raise HTTPException(status_code=500, detail="Failed to scan courses")


@router.get("/{locale}/course", response_model=ApiResponse[Course])
async def get_course_by_path(
    path: str = Query(..., min_length=1, description="Course path: directory names and file stem, as in search results"),
    locale: str = Depends(validate_locale),
    catalog: CourseCatalog = Depends(get_course_catalog),
) -> ApiResponse[Course]:
    """Course by path; a course missing in the locale comes back in the other language."""
    req_id = _request_id()
    try:
        course = await catalog.course_by_path(path, locale)
    except Exception as e:
        logger.error("get_course_failed", extra={
            "request_id": req_id, "path": path, "error": str(e), "error_type": type(e).__name__,
        })
        raise HTTPException(status_code=500, detail=FETCH_FAILED_MESSAGES.get(locale, FETCH_FAILED_MESSAGES["en"]))

    if course is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGES.get(locale, NOT_FOUND_MESSAGES["en"]))
    return ApiResponse[Course](request_id=req_id, status="ok", data=course)


@router.get("/{locale}/course/{course_id}", response_model=ApiResponse[Course])
async def get_course(
    course_id: str,
    locale: str = Depends(validate_locale),
    catalog: CourseCatalog = Depends(get_course_catalog),
) -> ApiResponse[Course]:
    req_id = _request_id()
    try:
        course = await catalog.course(course_id, locale)
    except Exception as e:
        logger.error("get_course_failed", extra={
            "request_id": req_id, "course_id": course_id, "error": str(e), "error_type": type(e).__name__,
        })
        raise HTTPException(status_code=500, detail=FETCH_FAILED_MESSAGES.get(locale, FETCH_FAILED_MESSAGES["en"]))

    if course is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGES.get(locale, NOT_FOUND_MESSAGES["en"]))
    return ApiResponse[Course](request_id=req_id, status="ok", data=course)


@router.get("/{locale}/course/{course_id}/html", response_model=ApiResponse[CourseHtml])
async def get_course_html(
    course_id: str,
    locale: str = Depends(validate_locale),
    catalog: CourseCatalog = Depends(get_course_catalog),
) -> ApiResponse[CourseHtml]:
    """Course page content rendered to sanitized HTML for the requested locale."""
    req_id = _request_id()
    try:
        page = await catalog.course_html(course_id, locale)
    except Exception as e:
        logger.error("get_course_html_failed", extra={
            "request_id": req_id, "course_id": course_id, "error": str(e), "error_type": type(e).__name__,
        })
        raise HTTPException(status_code=500, detail=FETCH_FAILED_MESSAGES.get(locale, FETCH_FAILED_MESSAGES["en"]))

    if page is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGES.get(locale, NOT_FOUND_MESSAGES["en"]))
    return ApiResponse[CourseHtml](request_id=req_id, status="ok", data=page)
