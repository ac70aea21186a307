"""Build the blog, the devlog and the homepage project timeline into public/."""

from __future__ import annotations

import argparse
import shutil
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup, escape

from .config import SiteConfig, load_config
from .content import format_home_date, list_markdown, read_markdown, slugify

log = logging.getLogger(__name__)

START_TAG = "<!-- DEVLOG_AUTO_START -->"
END_TAG = "<!-- DEVLOG_AUTO_END -->"


@dataclass
class PostSummary:
    slug: str
    title: str
    date: str
    description: str


@dataclass
class EntrySummary:
    slug: str
    title: str
    date: str


@dataclass
class ProjectCard:
    slug: str
    title: str
    summary: str
    latest: str
    homepage: bool = False
    homepage_date: str = ""
    homepage_url: Optional[str] = None


@lru_cache(maxsize=None)
def _env(tpl_dir: Path) -> Environment:
    return Environment(
        loader=FileSystemLoader(str(tpl_dir)),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render(config: SiteConfig, tpl, **ctx) -> str:
    return _env(config.templates).get_template(tpl).render(**ctx)


def layout(config: SiteConfig, title, body, description="") -> str:
    return render(config, "layout.html",
                  title=title,
                  description=description or "",
                  css_path=config.css_path,
                  body=Markup(body))


def ensure_dir(p: Path):
    p.mkdir(parents=True, exist_ok=True)


def reset_dir(p: Path):
    # generated trees only; public/index.html is never under one
    if p.exists():
        shutil.rmtree(p)
    ensure_dir(p)


def write_page(path: Path, html: str):
    ensure_dir(path.parent)
    path.write_text(html, encoding="utf-8")


def by_date_desc(items, key):
    # plain string comparison, so ISO dates sort correctly and "" goes last
    return sorted(items, key=key, reverse=True)


def build_blog(config: SiteConfig) -> list[PostSummary]:
    src = config.content_dir / "blog"
    out = config.public_dir / "blog"
    reset_dir(out)
    ensure_dir(out / "posts")

    posts = []
    for p in list_markdown(src):
        fm, html = read_markdown(p)
        if not fm.published:
            log.debug("skipping unpublished post %s", p.name)
            continue
        slug = slugify(p.stem)
        title = fm.title or slug
        byline = " · ".join(x for x in (fm.date, ", ".join(fm.tags)) if x)

        body = render(config, "post.html",
                      title=title,
                      byline=byline,
                      content=Markup(html),
                      back_url="/blog/",
                      back_label="All posts")
        write_page(out / "posts" / f"{slug}.html",
                   layout(config, f"{title} — {config.author}", body, fm.summary))
        posts.append(PostSummary(slug=slug, title=title, date=fm.date, description=fm.summary))

    posts = by_date_desc(posts, key=lambda x: x.date)

    body = render(config, "listing.html",
                  heading="Blog",
                  items=[{"url": f"/blog/posts/{p.slug}.html",
                          "title": p.title,
                          "suffix": p.date,
                          "summary": None} for p in posts],
                  empty="No posts yet.",
                  back_url="/",
                  back_label="Back to home")
    write_page(out / "index.html",
               layout(config, config.blog_title, body, config.blog_description))
    log.info("Built %d blog post(s)", len(posts))
    return posts


def build_entries(config: SiteConfig, entries_dir: Path, proj_out: Path,
                  proj_slug: str, proj_title: str) -> list[EntrySummary]:
    entries = []
    for p in list_markdown(entries_dir):
        fm, html = read_markdown(p)
        slug = slugify(p.stem)
        title = fm.title or slug
        body = render(config, "post.html",
                      title=title,
                      byline=fm.date,
                      content=Markup(html),
                      back_url=f"/devlog/{proj_slug}/",
                      back_label=f"Back to {proj_title}")
        write_page(proj_out / f"{slug}.html",
                   layout(config, f"{title} — {proj_title} — {config.author}", body, fm.summary))
        entries.append(EntrySummary(slug=slug, title=title, date=fm.date))
    return by_date_desc(entries, key=lambda x: x.date)


def build_project(config: SiteConfig, proj_src: Path) -> ProjectCard:
    slug = slugify(proj_src.name)
    proj_out = config.public_dir / "devlog" / slug
    ensure_dir(proj_out)

    fm, html = read_markdown(proj_src / "project.md")
    title = fm.title or proj_src.name

    entries = build_entries(config, proj_src / "entries", proj_out, slug, title)

    body = render(config, "project.html",
                  slug=slug,
                  title=title,
                  summary=fm.summary,
                  links=fm.links,
                  content=Markup(html),
                  entries=entries)
    write_page(proj_out / "index.html",
               layout(config, f"{title} — Devlog — {config.author}", body, fm.summary))

    return ProjectCard(
        slug=slug,
        title=title,
        summary=fm.summary,
        latest=entries[0].date if entries else "",
        homepage=fm.homepage,
        homepage_date=fm.date,
        homepage_url=fm.url,
    )


def build_devlog(config: SiteConfig) -> list[ProjectCard]:
    src = config.content_dir / "devlog"
    out = config.public_dir / "devlog"
    reset_dir(out)

    cards = []
    if src.is_dir():
        for d in sorted(p for p in src.iterdir() if p.is_dir()):
            cards.append(build_project(config, d))
    else:
        log.info("No devlog directory at %s", src)

    cards = by_date_desc(cards, key=lambda x: x.latest)

    body = render(config, "listing.html",
                  heading="Devlog",
                  items=[{"url": f"/devlog/{c.slug}/",
                          "title": c.title,
                          "suffix": f"updated {c.latest}" if c.latest else "",
                          "summary": c.summary} for c in cards],
                  empty="No projects yet.",
                  back_url="/",
                  back_label="Back to home")
    write_page(out / "index.html",
               layout(config, f"{config.devlog_title} — {config.author}", body,
                      config.devlog_description))
    log.info("Built %d devlog project(s)", len(cards))
    return cards


def homepage_lines(cards, max_items=8) -> list[str]:
    items = [c for c in cards if c.homepage and c.homepage_date]
    items = by_date_desc(items, key=lambda x: x.homepage_date)[:max_items]
    return [
        f'{escape(format_home_date(c.homepage_date))} - '
        f'<a target="_blank" rel="noopener noreferrer" '
        f'href="{escape(c.homepage_url or f"/devlog/{c.slug}/")}">{escape(c.title)}</a><br>'
        for c in items
    ]


def inject_homepage_projects(config: SiteConfig, cards, max_items=8) -> Optional[int]:
    """Rewrite the marked region of public/index.html with homepage projects.

    Returns the number of injected items, or None when the page or its
    markers are missing and nothing was written.
    """
    home = config.homepage
    if not home.exists():
        log.warning("%s not found; skipping homepage injection.", home)
        return None

    html = home.read_text(encoding="utf-8")
    start = html.find(START_TAG)
    end = html.find(END_TAG)
    if start == -1 or end == -1 or end <= start:
        log.warning("Devlog markers not found in %s; skipping injection.", home.name)
        return None

    lines = homepage_lines(cards, max_items)
    block = "\n".join(lines)
    before = html[:start + len(START_TAG)]
    after = html[end:]
    home.write_text(f"{before}\n{'    ' + block if block else ''}\n{after}", encoding="utf-8")
    log.info("Injected %d homepage project item(s).", len(lines))
    return len(lines)


def build_all(config: SiteConfig):
    posts = build_blog(config)
    cards = build_devlog(config)
    inject_homepage_projects(config, cards, config.homepage_max_items)
    return posts, cards


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Build the blog and devlog into public/.")
    parser.add_argument("--root", default=".", help="Site root containing content/ and public/.")
    parser.add_argument("--max-items", type=int, help="Projects shown on the homepage timeline.")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")

    config = load_config(args.root, {"homepage_max_items": args.max_items})
    posts, cards = build_all(config)
    print(f"Built {len(posts)} posts, {len(cards)} projects → {config.public_dir}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
