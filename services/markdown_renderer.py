"""
Course page rendering: markdown -> HTML -> whitelist-sanitized HTML.

Course markdown is community-contributed and may embed raw HTML, so everything rendered
goes through sanitize_html before it reaches a client.
"""
from __future__ import annotations

import logging

import markdown as mdlib
from bs4 import BeautifulSoup, Comment

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "nl2br", "sane_lists"]

ALLOWED_TAGS = {
    "h1", "h2", "h3", "h4", "h5", "h6",
    "p", "br", "hr",
    "ul", "ol", "li",
    "strong", "em", "b", "i", "u", "del", "ins",
    "blockquote", "pre", "code",
    "a", "img",
    "table", "thead", "tbody", "tr", "th", "td",
    "div", "span", "kbd",
}

ALLOWED_ATTRS = {"href", "src", "alt", "title", "class", "id", "width", "height", "data-language"}

# Removed together with their content instead of being unwrapped
DROPPED_TAGS = {"script", "style", "iframe", "object", "embed", "form", "input", "button", "textarea", "select"}

UNSAFE_URL_SCHEMES = ("javascript:", "vbscript:", "data:")


def _is_unsafe_url(value: str) -> bool:
    compact = "".join(value.split()).lower()
    return compact.startswith(UNSAFE_URL_SCHEMES)


def sanitize_html(html: str) -> str:
    if not html:
        return ""

    soup = BeautifulSoup(html, "html.parser")

    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()

    for tag in soup.find_all(True):
        if tag.decomposed:
            continue
        name = tag.name.lower()
        if name in DROPPED_TAGS:
            tag.decompose()
            continue
        if name not in ALLOWED_TAGS:
            tag.unwrap()
            continue
        for attr in list(tag.attrs):
            if attr.lower() not in ALLOWED_ATTRS:
                del tag.attrs[attr]
            elif attr.lower() in ("href", "src") and _is_unsafe_url(str(tag.attrs[attr])):
                del tag.attrs[attr]

    return str(soup)


def _tag_code_blocks(soup: BeautifulSoup) -> None:
    # fenced_code emits <pre><code class="language-x">; mark every block for client-side highlighting
    for code in soup.select("pre > code"):
        classes = code.get("class") or []
        if "hljs" not in classes:
            code["class"] = ["hljs", *classes]
        language = next((c[len("language-"):] for c in classes if c.startswith("language-")), None)
        if language:
            code["data-language"] = language


def markdown_to_html(text: str) -> str:
    if not text:
        return ""
    raw = mdlib.markdown(text, extensions=MARKDOWN_EXTENSIONS)
    soup = BeautifulSoup(raw, "html.parser")
    _tag_code_blocks(soup)
    return sanitize_html(str(soup))
