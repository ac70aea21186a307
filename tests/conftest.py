"""
Pytest configuration and shared fixtures
"""

from pathlib import Path

import pytest

from portfolio.config import load_config
from portfolio.contact import RelayError

HOMEPAGE = """<!doctype html>
<html>
<body>
<h2>Projects</h2>
<p>
  <!-- DEVLOG_AUTO_START -->
  old injected line<br>
  <!-- DEVLOG_AUTO_END -->
</p>
</body>
</html>
"""


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def site_root(tmp_path):
    """Empty site root with no content and no homepage"""
    return tmp_path


@pytest.fixture
def config(site_root):
    return load_config(site_root)


@pytest.fixture
def content_site(site_root):
    """Site root with two dated posts, an undated one, a draft and two projects"""
    blog = site_root / "content" / "blog"
    write(blog / "first.md", "---\ntitle: First\ndate: 2024-01-01\ntags: [python, web]\n---\nHello *world*.\n")
    write(blog / "second.md", "---\ntitle: Second\ndate: \"2024-03-01\"\nsummary: The second one\n---\n# Heading\n")
    write(blog / "Undated Thoughts.md", "No front-matter here.\n")
    write(blog / "draft.md", "---\ntitle: Draft\ndate: 2024-05-01\npublished: false\n---\nSecret\n")
    write(blog / "notes.txt", "not markdown")

    devlog = site_root / "content" / "devlog"
    write(devlog / "Synth Engine" / "project.md",
          "---\ntitle: Synth Engine\nsummary: A tiny synth\nhomepage: true\ndate: 2024-03-03\n"
          "links:\n  GitHub: https://github.com/example/synth\n  Demo: https://example.com/demo\n---\n"
          "Overview text.\n")
    write(devlog / "Synth Engine" / "entries" / "day-1.md", "---\ntitle: Day 1\ndate: 2024-02-01\n---\nStarted.\n")
    write(devlog / "Synth Engine" / "entries" / "day-2.md", "---\ntitle: Day 2\ndate: 2024-02-10\n---\nFilters.\n")
    write(devlog / "bare-project" / "project.md", "---\nsummary: No entries here\n---\n")

    write(site_root / "public" / "index.html", HOMEPAGE)
    return site_root


def payload(**overrides):
    data = {
        "subject": "Hello",
        "name": "Ada",
        "email": "a@b.co",
        "message": "Nice site!",
    }
    data.update(overrides)
    return data


class FakeRelay:
    """Records messages instead of sending them"""

    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    def send(self, msg):
        if self.fail:
            raise RelayError("connection refused")
        self.sent.append(msg)
