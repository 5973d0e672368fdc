"""
Directory-tree course-structure builder.

Layouts consumed:

    <root>/<category>/<course>.md
    <root>/<category>/<course>.en.md            (optional counterpart)
    <root>/<category>/<subcategory>/<course>.md

or, with one tree per language holding same-named files:

    <root>/zh/<category>/[<subcategory>/]<course>.md
    <root>/en/<category>/[<subcategory>/]<course>.md

Every consumer (API routes, search index, export script) goes through build_course_structure
with a NamingConvention, so there is a single walker and a single identifier scheme.
The tree is rebuilt from disk on every call; nothing is cached here.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from core.config import Settings
from schemas.course import Category, Course, DurationField, ParsedMarkdown, Subcategory
from services.category_mapping import get_chinese_name, get_english_slug
from services.markdown_parser import parse_markdown_file

logger = logging.getLogger(__name__)

BASE_LOCALE = "zh"
COUNTERPART_LOCALE = "en"


class CourseTreeError(RuntimeError):
    """Raised when the docs tree cannot be listed; the build is aborted as a whole."""


@dataclass(frozen=True)
class NamingConvention:
    base_extension: str = ".md"
    counterpart_suffix: str = ".en.md"
    reserved_dirs: Tuple[str, ...] = ("images",)
    id_separator: str = "-"
    summary_max_length: int = 150
    description_max_length: int = 200

    @classmethod
    def from_settings(cls, settings: Settings) -> "NamingConvention":
        return cls(
            base_extension=settings.base_extension,
            counterpart_suffix=settings.counterpart_suffix,
            reserved_dirs=(settings.images_dir,),
            id_separator=settings.id_separator,
            summary_max_length=settings.summary_max_length,
            description_max_length=settings.description_max_length,
        )

    def is_course_file(self, name: str) -> bool:
        return name.endswith(self.base_extension) and not name.endswith(self.counterpart_suffix)

    def stem(self, name: str) -> str:
        return name[: -len(self.base_extension)] if name.endswith(self.base_extension) else name

    def counterpart_path(self, base_path: Path) -> Path:
        return base_path.with_name(self.stem(base_path.name) + self.counterpart_suffix)

    def parse(self, path: Path) -> ParsedMarkdown:
        return parse_markdown_file(
            path,
            counterpart_suffix=self.counterpart_suffix,
            base_extension=self.base_extension,
            summary_max_length=self.summary_max_length,
        )


@dataclass
class PairedCourse:
    """Metadata of a base file merged with its counterpart-language file, if any."""

    title: str
    content: str
    content_en: Optional[str] = None
    has_english_version: bool = False
    summary: str = ""
    summary_en: str = ""
    programming_language: str = ""
    difficulty: str = ""
    duration: DurationField = field(default="")




@dataclass(frozen=True)
class CourseFile:
    """A course file located by directory names, relative to its tree root."""

    category: str
    subcategory: Optional[str]
    name: str

    @property
    def relative_path(self) -> str:
        parts = [self.category, self.subcategory, self.name] if self.subcategory else [self.category, self.name]
        return "/".join(parts)


def has_locale_trees(root: Union[str, Path]) -> bool:
    root = Path(root)
    return any((root / locale).is_dir() for locale in (BASE_LOCALE, COUNTERPART_LOCALE))


def course_files(
    root: Path, relative_path: str, convention: NamingConvention, locale_trees: bool
) -> Tuple[Path, Path]:
    """Base-language and counterpart-language file locations of a course; either may be missing."""
    if locale_trees:
        return root / BASE_LOCALE / relative_path, root / COUNTERPART_LOCALE / relative_path
    base = root / relative_path
    return base, convention.counterpart_path(base)


def resolve_pairing(
    base_path: Union[str, Path],
    convention: Optional[NamingConvention] = None,
    counterpart_path: Optional[Path] = None,
) -> PairedCourse:
    """Parse a base course file and merge in its counterpart.

    Content stays per language. Title comes from the counterpart; language, difficulty and
    duration come from the counterpart when non-empty. A counterpart that is empty or could
    not be read leaves the base data untouched.
    """
    convention = convention or NamingConvention()
    base_path = Path(base_path)
    if counterpart_path is None:
        counterpart_path = convention.counterpart_path(base_path)

    base = convention.parse(base_path)
    paired = PairedCourse(
        title=base.title,
        content=base.content,
        summary=base.summary,
        summary_en=base.summary_en,
        programming_language=base.programming_language,
        difficulty=base.difficulty,
        duration=base.duration,
    )

    if not counterpart_path.is_file():
        return paired

    paired.has_english_version = True
    other = convention.parse(counterpart_path)
    if not other.content.strip():
        logger.warning("counterpart_empty_or_unreadable", extra={"path": str(counterpart_path)})
        return paired

    paired.title = other.title
    paired.content_en = other.content
    paired.summary_en = other.summary_en or other.summary
    paired.programming_language = other.programming_language or base.programming_language
    paired.difficulty = other.difficulty or base.difficulty
    paired.duration = other.duration or base.duration
    return paired


def _excerpt(text: str, length: int) -> str:
    return text[:length] + "..."


def build_course(
    course_file: CourseFile,
    root: Path,
    convention: Optional[NamingConvention] = None,
    locale_trees: bool = False,
) -> Course:
    convention = convention or NamingConvention()
    base_path, counterpart_path = course_files(root, course_file.relative_path, convention, locale_trees)
    has_chinese_version = base_path.is_file()
    if has_chinese_version:
        paired = resolve_pairing(base_path, convention, counterpart_path)
    else:
        # English-only course in a locale tree: the English file stands in for both languages
        paired = resolve_pairing(counterpart_path, convention, counterpart_path)

    category_slug = get_english_slug(course_file.category)
    subcategory_slug = get_english_slug(course_file.subcategory) if course_file.subcategory else None
    slug = convention.stem(course_file.name)
    id_parts = [category_slug, subcategory_slug, slug] if subcategory_slug else [category_slug, slug]

    return Course(
        id=convention.id_separator.join(id_parts),
        title=paired.title,
        description=_excerpt(paired.content, convention.description_max_length),
        path=course_file.relative_path,
        slug=slug,
        content=paired.content,
        content_en=paired.content_en,
        has_chinese_version=has_chinese_version,
        has_english_version=paired.has_english_version,
        summary=paired.summary or _excerpt(paired.content, convention.summary_max_length),
        summary_en=paired.summary_en or _excerpt(paired.content, convention.summary_max_length),
        programming_language=paired.programming_language,
        difficulty=paired.difficulty,
        duration=paired.duration,
        category_slug=category_slug,
    )


def _list_dir(path: Path) -> List[Path]:
    try:
        return sorted(path.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise CourseTreeError(f"Cannot list course directory {path}: {e}") from e


def _walk_tree(tree_root: Path, convention: NamingConvention) -> List[CourseFile]:
    files: List[CourseFile] = []
    for category_dir in _list_dir(tree_root):
        if not category_dir.is_dir() or category_dir.name in convention.reserved_dirs:
            continue
        for item in _list_dir(category_dir):
            if item.is_dir():
                for course_file in _list_dir(item):
                    if course_file.is_file() and convention.is_course_file(course_file.name):
                        files.append(CourseFile(category_dir.name, item.name, course_file.name))
            elif convention.is_course_file(item.name):
                files.append(CourseFile(category_dir.name, None, item.name))
    return files


def _walk_locale_trees(root: Path, convention: NamingConvention) -> List[CourseFile]:
    # Union of both trees by relative path; Chinese-tree order first
    files: List[CourseFile] = []
    seen = set()
    for locale in (BASE_LOCALE, COUNTERPART_LOCALE):
        tree_root = root / locale
        if not tree_root.is_dir():
            continue
        for course_file in _walk_tree(tree_root, convention):
            if course_file.relative_path not in seen:
                seen.add(course_file.relative_path)
                files.append(course_file)
    return files


def build_course_structure(root: Union[str, Path], convention: Optional[NamingConvention] = None) -> List[Category]:
    """Walk category/[subcategory/]course files under root and build the category tree.

    With zh/ and en/ locale trees under root, both are walked and same-path files become
    one course; otherwise root itself holds base files and their counterpart-suffix files.
    Categories and subcategories only appear when they hold at least one course.
    """
    convention = convention or NamingConvention()
    root = Path(root)
    locale_trees = has_locale_trees(root)
    files = _walk_locale_trees(root, convention) if locale_trees else _walk_tree(root, convention)

    by_name: Dict[str, Category] = {}
    for course_file in files:
        category = by_name.get(course_file.category)
        if category is None:
            category = Category(name=course_file.category, slug=get_english_slug(course_file.category))
            by_name[course_file.category] = category

        course = build_course(course_file, root, convention, locale_trees)
        if course_file.subcategory:
            subcategory = next((s for s in category.subcategories if s.name == course_file.subcategory), None)
            if subcategory is None:
                subcategory = Subcategory(name=course_file.subcategory, slug=get_english_slug(course_file.subcategory))
                category.subcategories.append(subcategory)
            subcategory.courses.append(course)
        category.courses.append(course)

    categories = sorted(by_name.values(), key=lambda c: c.name)
    for category in categories:
        category.subcategories.sort(key=lambda s: s.name)

    logger.info("course_structure_built", extra={
        "path": str(root),
        "categories": len(categories),
        "courses": sum(len(c.courses) for c in categories),
    })
    return categories


def iter_courses(categories: Iterable[Category]) -> Iterator[Course]:
    for category in categories:
        yield from category.courses


def base_file(root: Union[str, Path], course: Course, convention: Optional[NamingConvention] = None) -> Path:
    """The file a course's own-language title comes from (the English one for English-only courses)."""
    convention = convention or NamingConvention()
    root = Path(root)
    base, counterpart = course_files(root, course.path, convention, has_locale_trees(root))
    return base if course.has_chinese_version else counterpart


def localize_course(course: Course, locale: str, root: Union[str, Path], convention: Optional[NamingConvention] = None) -> Course:
    """Return the course as seen from a locale.

    "en" swaps in the counterpart content when there is one; any other locale restores the
    base file's own title (the merged record carries the counterpart title).
    """
    convention = convention or NamingConvention()
    if locale == COUNTERPART_LOCALE:
        if course.content_en:
            return course.model_copy(update={"content": course.content_en})
        return course
    base = convention.parse(base_file(root, course, convention))
    return course.model_copy(update={"title": base.title})


def is_available_in(course: Course, locale: str) -> bool:
    return course.has_english_version if locale == COUNTERPART_LOCALE else course.has_chinese_version


def localize_categories(
    categories: Sequence[Category], locale: str, root: Union[str, Path], convention: Optional[NamingConvention] = None
) -> List[Category]:
    """Scope a built tree to one locale.

    Only courses that exist in the locale are kept, localized; subcategories and categories
    left without courses are dropped.
    """
    scoped: List[Category] = []
    for category in categories:
        localized = {
            course.id: localize_course(course, locale, root, convention)
            for course in category.courses
            if is_available_in(course, locale)
        }
        if not localized:
            continue
        subcategories = []
        for subcategory in category.subcategories:
            courses = [localized[c.id] for c in subcategory.courses if c.id in localized]
            if courses:
                subcategories.append(subcategory.model_copy(update={"courses": courses}))
        scoped.append(category.model_copy(update={"subcategories": subcategories, "courses": list(localized.values())}))
    return scoped


def find_category(categories: Iterable[Category], slug: str) -> Optional[Category]:
    """Match by English slug, or by directory name (given directly or via the slug table)."""
    name = get_chinese_name(slug)
    return next((c for c in categories if c.slug == slug or c.name == name), None)


def _matches_path(course: Course, course_path: str, convention: NamingConvention) -> bool:
    # Accepts the file path or the extension-less path used by search entries
    course_path = course_path.strip("/")
    return course.path == course_path or convention.stem(course.path) == course_path


def get_all_courses(root: Union[str, Path], convention: Optional[NamingConvention] = None) -> List[Course]:
    return list(iter_courses(build_course_structure(root, convention)))


def get_category_by_slug(
    root: Union[str, Path], slug: str, convention: Optional[NamingConvention] = None
) -> Optional[Category]:
    return find_category(build_course_structure(root, convention), slug)


def get_course_by_path(
    root: Union[str, Path],
    course_path: str,
    convention: Optional[NamingConvention] = None,
    locale: Optional[str] = None,
) -> Optional[Course]:
    convention = convention or NamingConvention()
    course = next((c for c in get_all_courses(root, convention) if _matches_path(c, course_path, convention)), None)
    if course is None or locale is None:
        return course
    return localize_course(course, locale, root, convention)


def get_course_by_id(
    root: Union[str, Path], course_id: str, locale: str = "en", convention: Optional[NamingConvention] = None
) -> Optional[Course]:
    course = next((c for c in get_all_courses(root, convention) if c.id == course_id), None)
    if course is None:
        return None
    return localize_course(course, locale, root, convention)
