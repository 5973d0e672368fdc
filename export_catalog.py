"""
Static export script for the course catalog.

Responsibilities:
- Build the category tree from the docs root (DOCS_ROOT or --docs-root).
- Write categories.json and search-index.json into the output directory.
- Render every course page to sanitized HTML, one fragment per course and locale
  (pages/<locale>/<course id>.html).
- Log category/course/entry counts so a content change can be sanity-checked.

Re-runnable: output files are overwritten in place.
"""
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from core.config import get_settings
from core.logging_config import configure_logging
from schemas.course import Category
from services.course_builder import NamingConvention, build_course_structure, iter_courses
from services.markdown_renderer import markdown_to_html
from services.search_index import build_search_index

logger = logging.getLogger("export")


def _write_json(path: Path, payload) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)


def export_pages(categories: List[Category], out_dir: Path) -> Dict[str, int]:
    counts = {"zh": 0, "en": 0}
    for course in iter_courses(categories):
        pages = {"zh": course.content} if course.has_chinese_version else {}
        if course.content_en:
            pages["en"] = course.content_en
        for locale, content in pages.items():
            target = out_dir / "pages" / locale / f"{course.id}.html"
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(markdown_to_html(content), encoding="utf-8")
            counts[locale] += 1
    return counts


def run(docs_root: Optional[str] = None, out_dir: Optional[str] = None) -> Dict[str, int]:
    settings = get_settings()
    root = Path(docs_root or settings.docs_root)
    out = Path(out_dir or settings.export_dir or "dist")
    convention = NamingConvention.from_settings(settings)

    categories = build_course_structure(root, convention)
    _write_json(out / "categories.json", [c.model_dump(by_alias=True) for c in categories])

    entries = build_search_index(root, convention)
    _write_json(out / "search-index.json", [e.model_dump(by_alias=True) for e in entries])

    pages = export_pages(categories, out)
    summary = {
        "categories": len(categories),
        "courses": sum(len(c.courses) for c in categories),
        "entries": len(entries),
        "pages_zh": pages["zh"],
        "pages_en": pages["en"],
    }
    logger.info("export completed", extra={
        "path": str(out),
        "categories": summary["categories"],
        "courses": summary["courses"],
        "entries": summary["entries"],
    })
    return summary


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Export the course catalog as static JSON and HTML files.")
    parser.add_argument("--docs-root", help="Docs directory to scan (defaults to DOCS_ROOT)")
    parser.add_argument("--out", help="Output directory (defaults to EXPORT_DIR or ./dist)")
    args = parser.parse_args(argv)

    configure_logging(get_settings().log_level)
    run(args.docs_root, args.out)


if __name__ == "__main__":
    main()
