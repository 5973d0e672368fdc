"""
API contract schemas for versioned endpoints.

- ApiResponse is a generic wrapper model so different endpoints can return consistent envelopes while varying `data` types.
- SearchIndexEntry is the denormalized, locale-merged projection of a course used only for search.
"""
from __future__ import annotations

from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

from .course import CatalogModel, DurationField


class SearchIndexEntry(CatalogModel):
    id: str
    title: str
    title_en: str = ""
    description: str = ""
    description_en: str = ""
    university: str = ""
    path: str
    programming_language: str = ""
    difficulty: str = ""
    category: str = "Unknown"
    subcategory: Optional[str] = None
    has_chinese_version: bool = False
    has_english_version: bool = False
    duration: DurationField = ""
    summary: str = ""
    summary_en: str = ""


class SearchResult(CatalogModel):
    course: SearchIndexEntry
    relevance_score: int


class SearchPage(CatalogModel):
    results: List[SearchResult] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    total_pages: int = 0
    query: str = ""
    locale: str = "en"


class CourseHtml(CatalogModel):
    id: str
    title: str
    locale: str
    html: str
    is_fallback: bool = Field(default=False, description="True when the requested locale had no content and the other one was rendered")


class ReindexResult(CatalogModel):
    entries: int


T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Generic response wrapper to stabilize external API while allowing inner schema evolution.

    Always return this envelope so clients can rely on `request_id` and `status`, irrespective of changes in `data`.
    """
    request_id: str
    status: str
    data: T
