"""robots.txt and sitemap.xml generation."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence, Tuple
from urllib.parse import quote
from xml.etree import ElementTree as ET

from schemas.course import Category, Course

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"

# (path, change frequency, priority); English pages are unprefixed, Chinese live under /zh
LANDING_PAGES = (
    ("/", "weekly", 1.0),
    ("/courses", "daily", 0.9),
    ("/universities", "weekly", 0.8),
    ("/tutorial", "monthly", 0.7),
)


@dataclass
class SitemapEntry:
    url: str
    last_modified: str
    change_frequency: str
    priority: float


def _localized(base_url: str, path: str, locale: str) -> str:
    if locale == "zh":
        path = "/zh" if path == "/" else f"/zh{path}"
    return f"{base_url}{path}"


def _course_slug_paths(category: Category) -> List[Tuple[Course, str]]:
    paths: List[Tuple[Course, str]] = []
    nested = set()
    for subcategory in category.subcategories:
        for course in subcategory.courses:
            nested.add(course.id)
            paths.append((course, f"/{category.slug}/{subcategory.slug}/{course.slug}"))
    for course in category.courses:
        if course.id not in nested:
            paths.append((course, f"/{category.slug}/{course.slug}"))
    return paths


def build_sitemap(
    categories: Sequence[Category], base_url: str, today: Optional[date] = None, locales: Sequence[str] = ("en", "zh")
) -> List[SitemapEntry]:
    base_url = base_url.rstrip("/")
    lastmod = (today or date.today()).isoformat()
    entries: List[SitemapEntry] = []

    for path, frequency, priority in LANDING_PAGES:
        for locale in locales:
            # The Chinese home page ranks just under the English one
            rank = priority - 0.1 if path == "/" and locale == "zh" else priority
            entries.append(SitemapEntry(_localized(base_url, path, locale), lastmod, frequency, round(rank, 1)))

    for category in categories:
        for course, slug_path in _course_slug_paths(category):
            course_path = quote(slug_path, safe="")
            for locale in locales:
                if locale == "en" and not course.has_english_version:
                    continue
                if locale == "zh" and not course.has_chinese_version:
                    continue
                url = _localized(base_url, "/course", locale) + f"?path={course_path}"
                entries.append(SitemapEntry(url, lastmod, "monthly", 0.8))
    return entries


def render_sitemap_xml(entries: Sequence[SitemapEntry]) -> str:
    urlset = ET.Element("urlset", xmlns=SITEMAP_NS)
    for entry in entries:
        node = ET.SubElement(urlset, "url")
        ET.SubElement(node, "loc").text = entry.url
        ET.SubElement(node, "lastmod").text = entry.last_modified
        ET.SubElement(node, "changefreq").text = entry.change_frequency
        ET.SubElement(node, "priority").text = f"{entry.priority:.1f}"
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(urlset, encoding="unicode")


def render_robots(base_url: str) -> str:
    return (
        "# Sitemap\n"
        f"Sitemap: {base_url.rstrip('/')}/sitemap.xml\n"
        "\n"
        "User-agent: *\n"
        "Allow: /\n"
        "\n"
        "# Block unnecessary paths\n"
        "Disallow: /api/\n"
        "Disallow: /_next/\n"
        "Disallow: /private/\n"
    )
