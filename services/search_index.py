"""
Search index for the course catalog.

Responsibilities:
- Flatten the course files into SearchIndexEntry records, one per course path, merging the
  Chinese and English versions of the same course.
- Score entries against a query with fixed per-field weights (plain substring matching; no
  tokenization, stemming or normalization).
- Hold the built index in an explicit SearchIndexCache that routes receive through a FastAPI
  dependency, so it can be invalidated, rebuilt, or swapped out in tests.

Two source layouts are supported:
- locale trees: <root>/zh/... and <root>/en/... holding same-named files per language;
- a single tree using the base/counterpart suffix convention (see services.course_builder).
Entry ids are the course-tree ids and entry paths are the directory path plus file stem, so a
hit resolves through either course lookup.
"""
from __future__ import annotations

import asyncio
import logging
import math
from functools import partial
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from core.config import get_settings
from schemas.api import SearchIndexEntry, SearchPage, SearchResult
from schemas.course import Category, ParsedMarkdown
from services.category_mapping import get_english_slug
from services.course_builder import (
    BASE_LOCALE,
    COUNTERPART_LOCALE,
    NamingConvention,
    base_file,
    build_course_structure,
    has_locale_trees,
)

logger = logging.getLogger("search")

SEARCH_WEIGHTS: Tuple[Tuple[str, int], ...] = (
    ("title", 10),
    ("title_en", 10),
    ("description", 5),
    ("description_en", 5),
    ("university", 7),
    ("programming_language", 6),
    ("category", 3),
    ("subcategory", 2),
)


def _excerpt(text: str, length: int) -> str:
    return text[:length] + "..."


def course_id(course_path: List[str], convention: NamingConvention) -> str:
    """Same identifier the course tree gives the course: directory slugs plus the file stem."""
    *dirs, stem = course_path
    return convention.id_separator.join([*(get_english_slug(d) for d in dirs), stem])


def _entry_from_locale_file(
    parsed: ParsedMarkdown,
    other: Optional[ParsedMarkdown],
    locale: str,
    course_path: List[str],
    convention: NamingConvention,
) -> SearchIndexEntry:
    own_description = _excerpt(parsed.content, convention.description_max_length)
    other_description = _excerpt(other.content, convention.description_max_length) if other else ""
    other_title = other.title if other else ""

    if locale == BASE_LOCALE:
        title, title_en = parsed.title, other_title or parsed.title
        description, description_en = own_description, other_description
        summary = parsed.summary
        summary_en = (other.summary_en or other.summary) if other else ""
    else:
        title, title_en = other_title or parsed.title, parsed.title
        description, description_en = other_description, own_description
        summary = other.summary if other else ""
        summary_en = parsed.summary_en or parsed.summary

    return SearchIndexEntry(
        id=course_id(course_path, convention),
        title=title,
        title_en=title_en,
        description=description,
        description_en=description_en,
        summary=summary,
        summary_en=summary_en,
        path="/".join(course_path),
        programming_language=parsed.programming_language,
        difficulty=parsed.difficulty,
        duration=parsed.duration,
        category=course_path[0] if len(course_path) > 1 else "Unknown",
        subcategory=course_path[1] if len(course_path) > 2 else None,
        has_chinese_version=locale == BASE_LOCALE or other is not None,
        has_english_version=locale == COUNTERPART_LOCALE or other is not None,
    )


def _scan_locale_tree(root: Path, locale: str, convention: NamingConvention) -> List[SearchIndexEntry]:
    other_locale = COUNTERPART_LOCALE if locale == BASE_LOCALE else BASE_LOCALE
    entries: List[SearchIndexEntry] = []

    def scan(directory: Path, current: List[str]) -> None:
        try:
            items = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError as e:
            logger.error("search_scan_failed", extra={"path": str(directory), "error": str(e)})
            return
        for item in items:
            if item.is_dir():
                if item.name not in convention.reserved_dirs:
                    scan(item, [*current, item.name])
            elif convention.is_course_file(item.name):
                other_path = root.joinpath(other_locale, *current, item.name)
                other = convention.parse(other_path) if other_path.is_file() else None
                course_path = [*current, convention.stem(item.name)]
                entries.append(_entry_from_locale_file(convention.parse(item), other, locale, course_path, convention))

    scan(root / locale, [])
    return entries


def merge_locale_entries(entries: Sequence[SearchIndexEntry]) -> List[SearchIndexEntry]:
    """Collapse entries sharing a path; later entries fill in the language fields they carry."""
    merged: Dict[str, SearchIndexEntry] = {}
    for entry in entries:
        existing = merged.get(entry.path)
        if existing is None:
            merged[entry.path] = entry.model_copy()
            continue

        if entry.has_chinese_version:
            existing.title = entry.title
            existing.description = entry.description
            existing.summary = entry.summary
            existing.programming_language = entry.programming_language
            existing.difficulty = entry.difficulty
            existing.duration = entry.duration
            existing.has_chinese_version = True

        if entry.has_english_version:
            existing.title_en = entry.title_en
            existing.description_en = entry.description_en
            existing.summary_en = entry.summary_en
            existing.has_english_version = True
            if entry.programming_language:
                existing.programming_language = entry.programming_language
            if entry.difficulty:
                existing.difficulty = entry.difficulty
            if entry.duration:
                existing.duration = entry.duration
    return list(merged.values())


def entries_from_categories(
    categories: Sequence[Category], root: Path, convention: NamingConvention
) -> List[SearchIndexEntry]:
    """Project a suffix-convention course tree into search entries."""
    entries: List[SearchIndexEntry] = []
    for category in categories:
        subcategory_of = {course.id: sub.name for sub in category.subcategories for course in sub.courses}
        for course in category.courses:
            # The merged course carries the counterpart title; the index wants both
            base_title = course.title
            if course.has_english_version:
                base_title = convention.parse(base_file(root, course, convention)).title
            subcategory = subcategory_of.get(course.id)
            path_parts = [category.name, subcategory, course.slug] if subcategory else [category.name, course.slug]
            entries.append(SearchIndexEntry(
                id=course.id,
                title=base_title,
                title_en=course.title,
                description=course.description,
                description_en=_excerpt(course.content_en, convention.description_max_length) if course.content_en else "",
                summary=course.summary,
                summary_en=course.summary_en if course.has_english_version else "",
                path="/".join(path_parts),
                programming_language=course.programming_language,
                difficulty=course.difficulty,
                duration=course.duration,
                category=category.name,
                subcategory=subcategory,
                has_chinese_version=course.has_chinese_version,
                has_english_version=course.has_english_version,
            ))
    return entries


def build_search_index(root: Union[str, Path], convention: Optional[NamingConvention] = None) -> List[SearchIndexEntry]:
    convention = convention or NamingConvention()
    root = Path(root)
    if has_locale_trees(root):
        scanned: List[SearchIndexEntry] = []
        for locale in (BASE_LOCALE, COUNTERPART_LOCALE):
            scanned.extend(_scan_locale_tree(root, locale, convention))
        entries = merge_locale_entries(scanned)
    else:
        entries = entries_from_categories(build_course_structure(root, convention), root, convention)
    logger.info("search_index_built", extra={"path": str(root), "entries": len(entries)})
    return entries


def score_entry(query: str, entry: SearchIndexEntry) -> int:
    """Sum of field weights whose value contains the (already lowercased) query."""
    score = 0
    for field_name, weight in SEARCH_WEIGHTS:
        value = getattr(entry, field_name) or ""
        if query in value.lower():
            score += weight
    return score


def search_courses(query: str, courses: Sequence[SearchIndexEntry], limit: int = 20) -> List[SearchResult]:
    normalized = query.lower().strip()
    if not normalized:
        return []

    results = []
    for course in courses:
        score = score_entry(normalized, course)
        if score > 0:
            results.append(SearchResult(course=course, relevance_score=score))

    # sorted() is stable: equal scores keep traversal order
    results = sorted(results, key=lambda r: r.relevance_score, reverse=True)
    return results[:limit]


def search_page(
    query: str, entries: Sequence[SearchIndexEntry], page: int = 1, limit: int = 10, locale: str = "en"
) -> SearchPage:
    """Search and paginate. English visitors only see courses that have an English version."""
    if locale == COUNTERPART_LOCALE:
        entries = [e for e in entries if e.has_english_version]
    results = search_courses(query, entries, limit * 2)
    total = len(results)
    start = (page - 1) * limit
    return SearchPage(
        results=results[start:start + limit],
        total=total,
        page=page,
        total_pages=math.ceil(total / limit),
        query=query,
        locale=locale,
    )


class SearchIndexCache:
    """Lazily built, explicitly invalidated search index."""

    def __init__(self, builder: Callable[[], List[SearchIndexEntry]]) -> None:
        self._builder = builder
        self._entries: Optional[List[SearchIndexEntry]] = None
        self._lock = asyncio.Lock()

    @property
    def is_built(self) -> bool:
        return self._entries is not None

    async def get(self) -> List[SearchIndexEntry]:
        async with self._lock:
            if self._entries is None:
                self._entries = await asyncio.to_thread(self._builder)
            return self._entries

    def invalidate(self) -> None:
        self._entries = None

    async def rebuild(self) -> List[SearchIndexEntry]:
        self.invalidate()
        return await self.get()


_search_cache_instance: Optional[SearchIndexCache] = None


def get_search_index_cache() -> SearchIndexCache:
    global _search_cache_instance
    if _search_cache_instance is None:
        settings = get_settings()
        _search_cache_instance = SearchIndexCache(
            partial(build_search_index, settings.docs_root, NamingConvention.from_settings(settings))
        )
    return _search_cache_instance
