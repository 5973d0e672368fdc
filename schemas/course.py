"""
Course catalog schema definitions.

Design choices:
- Field names are snake_case in Python and serialized with camelCase aliases
  (hasEnglishVersion, summaryEn, originalText) so existing site clients keep working.
- Courses are rebuilt from markdown on every build; nothing here is persisted.
"""
from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CatalogModel(BaseModel):
    """Base model emitting camelCase JSON while accepting either spelling on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class Duration(CatalogModel):
    value: Optional[int] = Field(default=None, description="Hours parsed from the duration text, if any")
    original_text: str = Field(default="", description="Duration text exactly as written in the course file")


DurationField = Union[Duration, str]


class ParsedMarkdown(CatalogModel):
    """Metadata extracted from a single markdown course file."""

    title: str
    content: str = ""
    summary: str = ""
    summary_en: str = ""
    programming_language: str = ""
    difficulty: str = ""
    duration: DurationField = ""


class Course(CatalogModel):
    id: str
    title: str
    description: str = ""
    path: str
    slug: str
    content: str = ""
    content_en: Optional[str] = None
    has_chinese_version: bool = True
    has_english_version: bool = False
    summary: str = ""
    summary_en: str = ""
    programming_language: str = ""
    difficulty: str = ""
    duration: DurationField = ""
    category_slug: Optional[str] = None


class Subcategory(CatalogModel):
    name: str
    slug: str
    courses: List[Course] = Field(default_factory=list)


class Category(CatalogModel):
    name: str
    slug: str
    subcategories: List[Subcategory] = Field(default_factory=list)
    courses: List[Course] = Field(default_factory=list, description="All courses of the category, including subcategory ones")
