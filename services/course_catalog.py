"""
Course catalog service used by the API layer.

Wraps the synchronous tree builder in asyncio.to_thread so request handlers do not block
the event loop while the docs tree is read. Every call rebuilds from disk.
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Union

from core.config import get_settings
from schemas.api import CourseHtml
from schemas.course import Category, Course
from services.course_builder import (
    COUNTERPART_LOCALE,
    NamingConvention,
    build_course_structure,
    find_category,
    get_course_by_id,
    get_course_by_path,
    iter_courses,
    localize_categories,
)
from services.markdown_renderer import markdown_to_html

logger = logging.getLogger(__name__)


def is_fallback_content(course: Course, locale: str) -> bool:
    """True when a localized course shows the other language's text."""
    if locale == COUNTERPART_LOCALE:
        return not course.content_en
    return not course.has_chinese_version


class CourseCatalog:
    def __init__(self, root: Union[str, Path], convention: Optional[NamingConvention] = None) -> None:
        self.root = Path(root)
        self.convention = convention or NamingConvention()

    def _build(self, locale: Optional[str]) -> List[Category]:
        categories = build_course_structure(self.root, self.convention)
        if locale is None:
            return categories
        return localize_categories(categories, locale, self.root, self.convention)

    async def categories(self, locale: Optional[str] = None) -> List[Category]:
        """Category tree; scoped to the courses available in `locale` when one is given."""
        return await asyncio.to_thread(self._build, locale)

    async def courses(self, locale: Optional[str] = None) -> List[Course]:
        return list(iter_courses(await self.categories(locale)))

    async def category(self, slug: str, locale: Optional[str] = None) -> Optional[Category]:
        return find_category(await self.categories(locale), slug)

    async def course(self, course_id: str, locale: str) -> Optional[Course]:
        return await asyncio.to_thread(get_course_by_id, self.root, course_id, locale, self.convention)

    async def course_by_path(self, course_path: str, locale: str) -> Optional[Course]:
        return await asyncio.to_thread(get_course_by_path, self.root, course_path, self.convention, locale)

    async def course_html(self, course_id: str, locale: str) -> Optional[CourseHtml]:
        """Render a course page for a locale, falling back to the other language's content."""
        course = await self.course(course_id, locale)
        if course is None:
            return None
        html = await asyncio.to_thread(markdown_to_html, course.content)
        return CourseHtml(
            id=course.id,
            title=course.title,
            locale=locale,
            html=html,
            is_fallback=is_fallback_content(course, locale),
        )


_catalog_instance: Optional[CourseCatalog] = None


def get_course_catalog() -> CourseCatalog:
    global _catalog_instance
    if _catalog_instance is None:
        settings = get_settings()
        _catalog_instance = CourseCatalog(settings.docs_root, NamingConvention.from_settings(settings))
    return _catalog_instance
