"""
Markdown metadata extraction for course files.

Course files are loosely structured: an H1 title, then an "introduction" section whose
first lines are labeled bullets ("- Difficulty: 🌟🌟🌟", "- 预计学时：60 小时", ...) followed
by a free-text paragraph. This module scrapes those into a ParsedMarkdown record.

Field extraction is driven by METADATA_RULES, a table of label variants -> converter, so new
labels can be added without touching the scanning loop. Extraction never raises: a missing
introduction section yields empty fields, and an unreadable file yields a minimal record.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from schemas.course import Duration, ParsedMarkdown

logger = logging.getLogger(__name__)

INTRO_MARKERS: Tuple[str, ...] = (
    "课程简介", "Course Introduction", "课程介绍", "Course Overview", "Descriptions", "Description", "简介",
)

ENGLISH_HINTS: Tuple[str, ...] = (
    "descriptions", "course introduction", "course overview", "offered by:",
    "programming language:", "programming languages:",
)

STAR = "🌟"
DEFAULT_SUMMARY_LENGTH = 150

_LABEL_SEPARATOR = re.compile(r"[:：]")
_HOURS = re.compile(r"(\d{1,9})\s*(小时|hour|hours)", re.IGNORECASE)
_LINK = re.compile(r"\[([^\]]+)\]\([^)]+\)")
_BOLD = re.compile(r"\*\*([^*]+)\*\*")
_ITALIC = re.compile(r"\*([^*]+)\*")
_CODE = re.compile(r"`([^`]+)`")
_HEADING = re.compile(r"#+\s*")


def difficulty_from_text(text: str) -> str:
    """Bucket a star rating into Beginner/Intermediate/Advanced; other text passes through."""
    stars = text.count(STAR)
    if stars == 0:
        return text
    if stars <= 2:
        return "Beginner"
    if stars <= 4:
        return "Intermediate"
    return "Advanced"


def duration_from_text(text: str) -> Duration:
    match = _HOURS.search(text)
    return Duration(value=int(match.group(1)) if match else None, original_text=text)


@dataclass(frozen=True)
class MetadataRule:
    field: str
    labels: Tuple[str, ...]
    convert: Callable[[str], Any]

    def matches(self, line: str) -> bool:
        return any(label in line for label in self.labels)


METADATA_RULES: Tuple[MetadataRule, ...] = (
    MetadataRule("programming_language", ("编程语言", "Programming Language", "Programming Languages"), lambda v: v),
    MetadataRule("difficulty", ("课程难度", "Difficulty"), difficulty_from_text),
    MetadataRule("duration", ("预计学时", "Class Hour", "Class Hours", "Estimated Hours"), duration_from_text),
)


def _label_value(line: str) -> Optional[str]:
    # Only the segment between the first and second separator is the value
    parts = _LABEL_SEPARATOR.split(line)
    if len(parts) < 2:
        return None
    return parts[1].strip().replace("**", "")


def clean_markdown(text: str) -> str:
    """Strip link, bold, italic, inline-code and heading syntax."""
    text = _LINK.sub(r"\1", text)
    text = _BOLD.sub(r"\1", text)
    text = _ITALIC.sub(r"\1", text)
    text = _CODE.sub(r"\1", text)
    text = _HEADING.sub("", text)
    return text.strip()


def truncate(text: str, max_length: int) -> str:
    if len(text) > max_length:
        return text[:max_length] + "..."
    return text


def find_intro_index(lines: List[str]) -> int:
    for index, line in enumerate(lines):
        if any(marker in line for marker in INTRO_MARKERS):
            return index
    return -1


def extract_metadata(lines: List[str], intro_index: int) -> Dict[str, Any]:
    """Apply METADATA_RULES to the labeled '-' lines directly after the introduction marker."""
    fields: Dict[str, Any] = {}
    for raw in lines[intro_index + 1:]:
        line = raw.strip()
        if not line:
            continue
        if not line.startswith("-"):
            break
        for rule in METADATA_RULES:
            if not rule.matches(line):
                continue
            value = _label_value(line)
            if value is not None:
                fields[rule.field] = rule.convert(value)
    return fields


def _is_metadata_line(line: str) -> bool:
    return not line or line.startswith("-") or ":" in line or line.startswith("##")


def extract_summary(lines: List[str], intro_index: int, max_length: int = DEFAULT_SUMMARY_LENGTH) -> str:
    start = intro_index + 1
    while start < len(lines) and _is_metadata_line(lines[start].strip()):
        start += 1

    paragraph: List[str] = []
    for raw in lines[start:]:
        line = raw.strip()
        if line.startswith("#") or line == "---":
            break
        if line:
            paragraph.append(line)

    return truncate(clean_markdown(" ".join(paragraph)), max_length)


def extract_title(lines: List[str], fallback: str) -> str:
    for line in lines:
        if line.startswith("# "):
            return line[2:].strip()
    return fallback


def fallback_title(filename: str, counterpart_suffix: str = ".en.md", base_extension: str = ".md") -> str:
    """File stem with the counterpart-language marker removed ("CS61A.en.md" -> "CS61A")."""
    name = Path(filename).name
    if name.endswith(base_extension):
        name = name[: -len(base_extension)]
    marker = counterpart_suffix[: -len(base_extension)] if counterpart_suffix.endswith(base_extension) else ""
    if marker and name.endswith(marker):
        name = name[: -len(marker)]
    return name


def is_english_text(text: str, filename: str = "", counterpart_suffix: str = ".en.md") -> bool:
    if filename and counterpart_suffix in filename:
        return True
    lowered = text.lower()
    return any(hint in lowered for hint in ENGLISH_HINTS)


def parse_markdown_text(
    text: str,
    filename: str = "",
    *,
    counterpart_suffix: str = ".en.md",
    base_extension: str = ".md",
    summary_max_length: int = DEFAULT_SUMMARY_LENGTH,
) -> ParsedMarkdown:
    lines = text.split("\n")
    title = extract_title(lines, fallback_title(filename, counterpart_suffix, base_extension))

    intro_index = find_intro_index(lines)
    if intro_index == -1:
        return ParsedMarkdown(title=title, content=text)

    fields = extract_metadata(lines, intro_index)
    summary = extract_summary(lines, intro_index, summary_max_length)
    summary_en = ""
    if is_english_text(text, filename, counterpart_suffix):
        summary_en, summary = summary, ""

    return ParsedMarkdown(
        title=title,
        content=text,
        summary=summary,
        summary_en=summary_en,
        programming_language=fields.get("programming_language", ""),
        difficulty=fields.get("difficulty", ""),
        duration=fields.get("duration", ""),
    )


def parse_markdown_file(
    path: Union[str, Path],
    *,
    counterpart_suffix: str = ".en.md",
    base_extension: str = ".md",
    summary_max_length: int = DEFAULT_SUMMARY_LENGTH,
) -> ParsedMarkdown:
    """Read and parse a course file. Any read or parse failure returns a minimal record."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
        return parse_markdown_text(
            text,
            path.name,
            counterpart_suffix=counterpart_suffix,
            base_extension=base_extension,
            summary_max_length=summary_max_length,
        )
    except Exception as e:
        logger.error("markdown_parse_failed", extra={
            "path": str(path), "error": str(e), "error_type": type(e).__name__,
        })
        stem = path.name[: -len(base_extension)] if path.name.endswith(base_extension) else path.name
        return ParsedMarkdown(title=stem, content="")
