"""Tests for content.py — front-matter, markdown, slugs and dates."""

import pytest
import yaml

from portfolio.content import (
    FrontMatter,
    day_suffix,
    format_home_date,
    list_markdown,
    parse_frontmatter,
    read_markdown,
    slugify,
)


class TestSlugify:

    def test_punctuation_and_case(self):
        assert slugify("My First Post!") == "my-first-post"
        assert slugify("my-first-post") == "my-first-post"

    def test_runs_collapse_to_one_hyphen(self):
        assert slugify("  Hello ,,, World  ") == "hello-world"

    @pytest.mark.parametrize("text", ["Synth Engine", "--a__b--", "Ünïcode Title 2", "", "!!!"])
    def test_idempotent(self, text):
        assert slugify(slugify(text)) == slugify(text)

    def test_non_string_input(self):
        assert slugify(2024) == "2024"


class TestFrontMatter:

    def test_parse_splits_body(self):
        data, body = parse_frontmatter("---\ntitle: Hi\n---\nBody text\n")
        assert data == {"title": "Hi"}
        assert body == "Body text\n"

    def test_no_frontmatter(self):
        data, body = parse_frontmatter("Just text\n---\nmore")
        assert data == {}
        assert body == "Just text\n---\nmore"

    def test_unclosed_block_is_body(self):
        text = "---\ntitle: Hi\nno closing line"
        assert parse_frontmatter(text) == ({}, text)

    def test_empty_block(self):
        assert parse_frontmatter("---\n---\nBody") == ({}, "Body")

    def test_defaults(self):
        fm = FrontMatter.from_dict({})
        assert fm.title is None
        assert fm.date == ""
        assert fm.summary == ""
        assert fm.tags == []
        assert fm.published is True
        assert fm.links == {}
        assert fm.homepage is False
        assert fm.url is None

    def test_yaml_date_is_normalized(self):
        data, _ = parse_frontmatter("---\ndate: 2024-03-03\n---\n")
        assert FrontMatter.from_dict(data).date == "2024-03-03"

    def test_only_explicit_false_unpublishes(self):
        assert FrontMatter.from_dict({"published": False}).published is False
        assert FrontMatter.from_dict({"published": None}).published is True

    def test_unknown_keys_kept_as_extra(self):
        fm = FrontMatter.from_dict({"title": "T", "cover": "img.png"})
        assert fm.extra == {"cover": "img.png"}

    def test_invalid_yaml_raises(self, tmp_path):
        p = tmp_path / "bad.md"
        p.write_text("---\ntitle: [unclosed\n---\nbody\n", encoding="utf-8")
        with pytest.raises(yaml.YAMLError):
            read_markdown(p)


class TestReadMarkdown:

    def test_missing_file_is_empty(self, tmp_path):
        fm, html = read_markdown(tmp_path / "nope.md")
        assert fm == FrontMatter()
        assert html == ""

    def test_renders_extended_markdown(self, tmp_path):
        p = tmp_path / "post.md"
        p.write_text(
            "---\ntitle: Post\n---\n"
            "## Section One\n\n"
            "Some *emphasis* and a [link](https://example.com).\n\n"
            "- one\n- two\n\n"
            "```python\nprint('hi')\n```\n\n"
            "| a | b |\n|---|---|\n| 1 | 2 |\n",
            encoding="utf-8",
        )
        fm, html = read_markdown(p)
        assert fm.title == "Post"
        assert '<h2 id="section-one">' in html
        assert "<em>emphasis</em>" in html
        assert '<a href="https://example.com">link</a>' in html
        assert "<li>one</li>" in html
        assert "<code" in html and "print" in html
        assert "<table>" in html

    def test_list_markdown_filters_and_sorts(self, tmp_path):
        for name in ("b.md", "a.MDX", "c.txt"):
            (tmp_path / name).write_text("x", encoding="utf-8")
        (tmp_path / "dir.md").mkdir()
        assert [p.name for p in list_markdown(tmp_path)] == ["a.MDX", "b.md"]
        assert list_markdown(tmp_path / "missing") == []


class TestDates:

    @pytest.mark.parametrize("day,suffix", [
        (1, "st"), (2, "nd"), (3, "rd"), (4, "th"),
        (11, "th"), (12, "th"), (13, "th"),
        (21, "st"), (22, "nd"), (23, "rd"), (31, "st"),
    ])
    def test_day_suffix(self, day, suffix):
        assert day_suffix(day) == suffix

    def test_format_home_date(self):
        assert format_home_date("2024-03-03") == "Mar. 3rd, 2024"
        assert format_home_date("2023-12-11") == "Dec. 11th, 2023"

    def test_timestamp_with_utc_suffix(self):
        assert format_home_date("2024-03-03T10:00:00Z") == "Mar. 3rd, 2024"

    def test_unparseable_date_is_returned_raw(self):
        assert format_home_date("sometime in spring") == "sometime in spring"
        assert format_home_date("") == ""
