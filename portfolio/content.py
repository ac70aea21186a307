"""Markdown content: front-matter, rendering, slugs and dates."""

from __future__ import annotations

import datetime
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import markdown as md
import yaml

log = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = (".md", ".mdx")

_FRONTMATTER_RE = re.compile(r"\A---[ \t]*\r?\n(?:(.*?)\r?\n)?---[ \t]*(?:\r?\n|\Z)", re.DOTALL)


@dataclass
class FrontMatter:
    """Metadata block at the top of a content document."""
    title: Optional[str] = None
    date: str = ""
    summary: str = ""
    tags: list[str] = field(default_factory=list)
    published: bool = True  # only an explicit `published: false` hides a post
    links: dict[str, str] = field(default_factory=dict)
    homepage: bool = False
    url: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "FrontMatter":
        data = dict(data or {})
        title = data.pop("title", None)
        tags = data.pop("tags", None)
        links = data.pop("links", None)
        url = data.pop("url", None)
        return cls(
            title=str(title) if title else None,
            date=normalize_date(data.pop("date", "")),
            summary=str(data.pop("summary", "") or ""),
            tags=[str(t) for t in tags] if isinstance(tags, list) else [],
            published=data.pop("published", True) is not False,
            links={str(k): str(v) for k, v in links.items()} if isinstance(links, dict) else {},
            homepage=bool(data.pop("homepage", False)),
            url=str(url) if url else None,
            extra=data,
        )


def normalize_date(value) -> str:
    # PyYAML turns unquoted 2024-03-03 into a date object
    if isinstance(value, datetime.datetime):
        return value.date().isoformat()
    if isinstance(value, datetime.date):
        return value.isoformat()
    if value is None:
        return ""
    return str(value)


def parse_frontmatter(text: str) -> tuple[dict, str]:
    """Split a leading YAML block from the markdown body.

    Returns (metadata dict, body). Text without a complete block is all body.
    """
    m = _FRONTMATTER_RE.match(text)
    if not m:
        return {}, text
    data = yaml.safe_load(m.group(1) or "") or {}
    if not isinstance(data, dict):
        data = {}
    return data, text[m.end():]


def md_to_html(text: str) -> str:
    return md.markdown(
        text,
        extensions=[
            "fenced_code",
            "tables",
            "toc",
            "attr_list",
            "sane_lists",
            "footnotes",
        ],
        output_format="html5",
    )


def read_markdown(path: Path) -> tuple[FrontMatter, str]:
    """Load a content document as (front-matter, rendered HTML).

    A missing file is "no content": empty metadata and an empty body.
    """
    path = Path(path)
    if not path.exists():
        return FrontMatter(), ""
    raw = path.read_text(encoding="utf-8")
    try:
        data, body = parse_frontmatter(raw)
    except yaml.YAMLError:
        log.error("Invalid front-matter in %s", path)
        raise
    return FrontMatter.from_dict(data), md_to_html(body or "")


def list_markdown(directory: Path) -> list[Path]:
    if not directory.is_dir():
        return []
    return sorted(
        p for p in directory.iterdir()
        if p.is_file() and p.suffix.lower() in MARKDOWN_SUFFIXES
    )


def slugify(s) -> str:
    return re.sub(r"[^a-z0-9]+", "-", str(s).lower()).strip("-")


def day_suffix(day: int) -> str:
    if 11 <= day <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def format_home_date(value: str) -> str:
    """2024-03-03 -> "Mar. 3rd, 2024"; anything unparseable comes back as is."""
    if not value:
        return ""
    value = str(value)
    try:
        dt = datetime.datetime.fromisoformat(value)
    except ValueError:
        # older interpreters reject offsets like "Z"; the calendar date is enough
        try:
            dt = datetime.date.fromisoformat(value[:10])
        except ValueError:
            return value
    return f"{dt.strftime('%b')}. {dt.day}{day_suffix(dt.day)}, {dt.year}"
