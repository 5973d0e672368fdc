import pytest

from schemas.course import Duration
from services.markdown_parser import (
    METADATA_RULES,
    clean_markdown,
    difficulty_from_text,
    duration_from_text,
    fallback_title,
    parse_markdown_file,
    parse_markdown_text,
)

from conftest import CS61A_ZH, CS61B_EN


def test_example_course_metadata():
    text = (
        "# CS61B: Data Structures\n"
        "\n"
        "## Descriptions\n"
        "\n"
        "- Offered by: UC Berkeley\n"
        "- Difficulty: 🌟🌟🌟\n"
        "- Class Hour: 60 hours\n"
    )
    parsed = parse_markdown_text(text, "CS61B.en.md")

    assert parsed.title == "CS61B: Data Structures"
    assert parsed.difficulty == "Intermediate"
    assert parsed.duration == Duration(value=60, original_text="60 hours")


def test_chinese_labels_are_extracted():
    parsed = parse_markdown_text(CS61A_ZH, "CS61A.md")

    assert parsed.title == "CS61A: 计算机程序的构造和解释"
    assert parsed.programming_language == "Python, Scheme, SQL"
    assert parsed.difficulty == "Beginner"
    assert parsed.duration == Duration(value=50, original_text="50 小时")
    assert parsed.summary == "伯克利 CS61 系列的第一门课程，也是我的编程入门课。"
    assert parsed.summary_en == ""


def test_english_file_summary_goes_to_summary_en():
    parsed = parse_markdown_text(CS61B_EN, "CS61B.en.md")

    assert parsed.summary == ""
    assert parsed.summary_en == "The second course of the CS61 series, focusing on data structures and algorithms."
    assert parsed.programming_language == "Java"
    assert parsed.difficulty == "Advanced"


@pytest.mark.parametrize("stars, expected", [
    (1, "Beginner"),
    (2, "Beginner"),
    (3, "Intermediate"),
    (4, "Intermediate"),
    (5, "Advanced"),
    (6, "Advanced"),
])
def test_star_difficulty_buckets(stars, expected):
    assert difficulty_from_text("🌟" * stars) == expected


def test_difficulty_without_stars_passes_through():
    text = "# Course\n\n## Course Introduction\n\n- Difficulty: **Hard**\n"
    assert parse_markdown_text(text).difficulty == "Hard"


def test_duration_without_hours_keeps_text():
    assert duration_from_text("about 8 weeks") == Duration(value=None, original_text="about 8 weeks")
    assert duration_from_text("100 Hours").value == 100
    assert duration_from_text("大约 30小时").value == 30


def test_missing_introduction_degrades_to_empty_fields():
    text = "# Just a Title\n\nSome body text without any labeled section.\n"
    parsed = parse_markdown_text(text, "plain.md")

    assert parsed.title == "Just a Title"
    assert parsed.content == text
    assert parsed.summary == ""
    assert parsed.programming_language == ""
    assert parsed.difficulty == ""
    assert parsed.duration == ""


def test_title_falls_back_to_filename_without_language_marker():
    parsed = parse_markdown_text("no heading here\n", "CS61A.en.md")
    assert parsed.title == "CS61A"
    assert fallback_title("MIT6.824.md") == "MIT6.824"


def test_summary_is_truncated_and_cleaned():
    paragraph = "Learn **fast** with `code` and *style* via [docs](docs.md). " * 10
    text = f"# Long\n\n## 课程简介\n\n- 课程难度：🌟\n\n{paragraph}\n"
    parsed = parse_markdown_text(text, "long.md")

    assert len(parsed.summary) == 153
    assert parsed.summary.endswith("...")
    for syntax in ("**", "`", "](", "["):
        assert syntax not in parsed.summary
    assert parsed.summary.startswith("Learn fast with code and style via docs.")


def test_summary_stops_at_separator():
    text = "# T\n\n## 简介\n\nFirst paragraph.\n---\nNot included.\n"
    assert parse_markdown_text(text, "t.md").summary == "First paragraph."


def test_clean_markdown_strips_headings_and_links():
    assert clean_markdown("## See [the site](https://x.y) for `more`") == "See the site for more"


def test_metadata_block_ends_at_first_plain_line():
    text = (
        "# T\n\n## 课程简介\n\n"
        "- 编程语言：C\n"
        "Intro paragraph.\n"
        "- 课程难度：🌟🌟🌟🌟🌟\n"
    )
    parsed = parse_markdown_text(text, "t.md")
    assert parsed.programming_language == "C"
    assert parsed.difficulty == ""


def test_rule_table_covers_every_field():
    assert {rule.field for rule in METADATA_RULES} == {"programming_language", "difficulty", "duration"}


def test_unreadable_file_returns_minimal_record(tmp_path):
    parsed = parse_markdown_file(tmp_path / "missing.md")
    assert parsed.title == "missing"
    assert parsed.content == ""
    assert parsed.summary == ""


def test_parse_file_reads_utf8(tmp_path):
    path = tmp_path / "CS61A.md"
    path.write_text(CS61A_ZH, encoding="utf-8")
    assert parse_markdown_file(path).difficulty == "Beginner"


def test_fallback_title_only_strips_trailing_language_marker():
    assert fallback_title("Intro.entry.md") == "Intro.entry"
    assert fallback_title("Intro.entry.en.md") == "Intro.entry"


def test_oversized_hour_value_does_not_raise(tmp_path):
    path = tmp_path / "huge.en.md"
    path.write_text(
        "# Huge\n\n## Descriptions\n\n- Class Hour: " + "9" * 5000 + " hours\n",
        encoding="utf-8",
    )

    parsed = parse_markdown_file(path)

    assert parsed.title == "Huge"
    assert parsed.duration.value == 999999999


def test_parse_errors_return_minimal_record(tmp_path, monkeypatch):
    path = tmp_path / "broken.md"
    path.write_text(CS61A_ZH, encoding="utf-8")

    def explode(*args, **kwargs):
        raise ValueError("bad metadata")

    monkeypatch.setattr("services.markdown_parser.parse_markdown_text", explode)

    parsed = parse_markdown_file(path)
    assert parsed.title == "broken"
    assert parsed.content == ""
