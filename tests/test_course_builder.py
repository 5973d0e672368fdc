import pytest

from schemas.course import Duration
from services.course_builder import (
    CourseTreeError,
    NamingConvention,
    build_course_structure,
    get_all_courses,
    get_category_by_slug,
    get_course_by_id,
    get_course_by_path,
    localize_categories,
    resolve_pairing,
)

from conftest import CS61A_EN, CS61A_ZH, CS61B_EN, CS142_EN, DUKE_ZH, write


def test_structure_skips_reserved_dirs_and_root_files(docs_tree):
    categories = build_course_structure(docs_tree)

    assert [c.name for c in categories] == ["数据结构与算法", "编程入门"]
    assert [c.slug for c in categories] == ["data-structures-algorithms", "programming-introduction"]


def test_course_ids_follow_slug_path(docs_tree):
    ids = sorted(c.id for c in get_all_courses(docs_tree))
    assert ids == [
        "data-structures-algorithms-CS61B",
        "programming-introduction-c-Duke-Coursera",
        "programming-introduction-python-CS61A",
    ]


def test_subcategory_courses_are_also_listed_on_category(docs_tree):
    intro = get_category_by_slug(docs_tree, "programming-introduction")

    assert intro is not None
    assert [s.slug for s in intro.subcategories] == ["c", "python"]
    assert [c.slug for c in intro.subcategories[1].courses] == ["CS61A"]
    assert {c.slug for c in intro.courses} == {"CS61A", "Duke-Coursera"}
    assert all(c.category_slug == "programming-introduction" for c in intro.courses)


def test_counterpart_merges_title_and_metadata(docs_tree):
    course = get_course_by_path(docs_tree, "数据结构与算法/CS61B.md")

    assert course is not None
    assert course.title == "CS61B: Data Structures"
    assert course.has_english_version is True
    assert course.content_en == CS61B_EN
    assert course.difficulty == "Advanced"
    assert course.programming_language == "Java"
    assert course.duration == Duration(value=60, original_text="60 hours")
    assert course.summary == "伯克利 CS61 系列的第二门课程，注重数据结构与算法的设计。"
    assert course.summary_en == "The second course of the CS61 series, focusing on data structures and algorithms."
    assert course.description.endswith("...")


def test_course_without_counterpart_uses_content_excerpt(docs_tree):
    course = get_course_by_path(docs_tree, "编程入门/C/Duke-Coursera.md")

    assert course is not None
    assert course.title == "Duke University: Introductory C Programming"
    assert course.has_english_version is False
    assert course.content_en is None
    assert course.summary == DUKE_ZH + "..."
    assert course.summary_en == course.summary
    assert course.difficulty == ""


def test_empty_counterpart_keeps_base_data(tmp_path):
    base = write(tmp_path / "cat" / "CS61A.md", CS61A_ZH)
    write(tmp_path / "cat" / "CS61A.en.md", "")

    paired = resolve_pairing(base)

    assert paired.has_english_version is True
    assert paired.content_en is None
    assert paired.title == "CS61A: 计算机程序的构造和解释"
    assert paired.difficulty == "Beginner"


def test_counterpart_falls_back_to_base_fields(tmp_path):
    base = write(tmp_path / "cat" / "CS61A.md", CS61A_ZH)
    write(tmp_path / "cat" / "CS61A.en.md", "# CS61A in English\n\nNo labeled section here.\n")

    paired = resolve_pairing(base)

    assert paired.title == "CS61A in English"
    assert paired.programming_language == "Python, Scheme, SQL"
    assert paired.duration == Duration(value=50, original_text="50 小时")


def test_custom_naming_convention(tmp_path):
    write(tmp_path / "编程入门" / "CS61A.markdown", CS61A_ZH)
    write(tmp_path / "编程入门" / "CS61A.english.markdown", "# Structure and Interpretation\n")
    write(tmp_path / "编程入门" / "CS61A.md", "# ignored\n")
    convention = NamingConvention(
        base_extension=".markdown", counterpart_suffix=".english.markdown", id_separator="/"
    )

    courses = get_all_courses(tmp_path, convention)

    assert [c.id for c in courses] == ["programming-introduction/CS61A"]
    assert courses[0].title == "Structure and Interpretation"


def test_missing_root_raises(tmp_path):
    with pytest.raises(CourseTreeError):
        build_course_structure(tmp_path / "missing")


def test_get_course_by_id_localizes_title_and_content(docs_tree):
    zh = get_course_by_id(docs_tree, "data-structures-algorithms-CS61B", "zh")
    en = get_course_by_id(docs_tree, "data-structures-algorithms-CS61B", "en")

    assert zh.title == "CS61B: 数据结构与算法"
    assert zh.content.startswith("# CS61B: 数据结构与算法")
    assert en.title == "CS61B: Data Structures"
    assert en.content == CS61B_EN


def test_english_lookup_without_counterpart_keeps_base_content(docs_tree):
    course = get_course_by_id(docs_tree, "programming-introduction-c-Duke-Coursera", "en")
    assert course.content == DUKE_ZH


def test_unknown_lookups_return_none(docs_tree):
    assert get_course_by_id(docs_tree, "nope") is None
    assert get_category_by_slug(docs_tree, "nope") is None
    assert get_course_by_path(docs_tree, "nope.md") is None


def test_locale_trees_are_read_as_one_catalog(locale_tree):
    categories = build_course_structure(locale_tree)
    assert [c.name for c in categories] == ["Web开发", "数据结构与算法", "编程入门"]

    courses = {c.slug: c for c in get_all_courses(locale_tree)}
    cs61a = courses["CS61A"]
    assert cs61a.path == "编程入门/Python/CS61A.md"
    assert cs61a.has_chinese_version and cs61a.has_english_version
    assert cs61a.content == CS61A_ZH
    assert cs61a.content_en == CS61A_EN

    cs142 = courses["CS142"]
    assert cs142.id == "web-development-CS142"
    assert not cs142.has_chinese_version
    assert cs142.has_english_version
    assert cs142.difficulty == "Intermediate"

    assert not courses["CS61B"].has_english_version


def test_english_scope_drops_chinese_only_courses_and_empty_groups(docs_tree):
    categories = localize_categories(build_course_structure(docs_tree), "en", docs_tree)

    assert [c.name for c in categories] == ["数据结构与算法", "编程入门"]
    intro = categories[1]
    assert [s.name for s in intro.subcategories] == ["Python"]
    assert [c.slug for c in intro.courses] == ["CS61A"]
    assert intro.courses[0].content == CS61A_EN


def test_locale_scopes_over_locale_trees(locale_tree):
    structure = build_course_structure(locale_tree)

    en = localize_categories(structure, "en", locale_tree)
    zh = localize_categories(structure, "zh", locale_tree)

    assert [c.name for c in en] == ["Web开发", "编程入门"]
    assert [c.name for c in zh] == ["数据结构与算法", "编程入门"]
    assert zh[1].courses[0].title == "CS61A: 计算机程序的构造和解释"
    assert en[1].courses[0].title == "CS61A: Structure and Interpretation of Computer Programs"


def test_english_only_course_is_found_by_path_in_any_locale(locale_tree):
    course = get_course_by_path(locale_tree, "Web开发/CS142", locale="zh")

    assert course is not None
    assert course.title == "Stanford CS142: Web Applications"
    assert course.content == CS142_EN


def test_category_lookup_accepts_directory_name(docs_tree):
    by_name = get_category_by_slug(docs_tree, "数据结构与算法")
    by_slug = get_category_by_slug(docs_tree, "data-structures-algorithms")

    assert by_name is not None
    assert by_name.name == by_slug.name == "数据结构与算法"
