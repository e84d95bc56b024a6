"""Tests for config.load_site_config and the idea list."""

import json

import pytest

from sitesmith.config import (
    DEFAULT_TITLE,
    IDEA_PLACEHOLDER,
    SiteConfig,
    load_ideas,
    load_site_config,
    render_ideas_html,
)


class TestSiteConfig:
    def test_defaults_without_file(self, src):
        assert load_site_config(src) == SiteConfig()

    def test_json_config(self, src, write):
        write("_data/site.json", json.dumps({"title": "T", "baseUrl": "/sub/", "url": "https://x.dev/", "theme": "dark"}))
        config = load_site_config(src)
        assert config.title == "T"
        assert config.base_url == "/sub"
        assert config.url == "https://x.dev"
        assert config.origin == "https://x.dev"
        assert config.as_context()["theme"] == "dark"
        assert config.as_context()["baseUrl"] == "/sub"

    def test_yaml_config(self, src, write):
        write("_data/site.yml", "title: From YAML\ndomain: example.org\n")
        config = load_site_config(src)
        assert config.title == "From YAML"
        assert config.origin == "https://example.org"

    def test_toml_config(self, src, write):
        write("_data/site.toml", 'title = "From TOML"\nbase_url = "/b"\n')
        config = load_site_config(src)
        assert config.title == "From TOML"
        assert config.base_url == "/b"

    def test_json_takes_precedence(self, src, write):
        write("_data/site.json", json.dumps({"title": "JSON"}))
        write("_data/site.yml", "title: YAML\n")
        assert load_site_config(src).title == "JSON"

    def test_invalid_file_warns_and_uses_defaults(self, src, write, capsys):
        write("_data/site.json", "{broken")
        assert load_site_config(src).title == DEFAULT_TITLE
        assert "Invalid JSON" in capsys.readouterr().err

    def test_undecodable_file_warns_and_uses_defaults(self, src, capsys):
        path = src / "_data" / "site.json"
        path.parent.mkdir()
        path.write_bytes(b"\xff\xfe{}")
        assert load_site_config(src) == SiteConfig()
        assert "not valid UTF-8" in capsys.readouterr().err

    def test_yaml_dates_stay_strings(self, src, write):
        write("_data/site.yml", "title: Dated\nlaunched: 2024-13-45\n")
        config = load_site_config(src)
        assert config.title == "Dated"
        assert config.extra["launched"] == "2024-13-45"

    def test_non_mapping_warns(self, src, write, capsys):
        write("_data/site.json", "[1, 2]")
        assert load_site_config(src) == SiteConfig()
        assert "must be a mapping" in capsys.readouterr().err

    def test_extra_fields_are_read_only(self, src, write):
        write("_data/site.json", json.dumps({"author": "A"}))
        config = load_site_config(src)
        assert config.extra["author"] == "A"
        with pytest.raises(TypeError):
            config.extra["author"] = "B"


class TestIdeas:
    def test_missing_file_gives_placeholder(self, src):
        assert load_ideas(src) == [IDEA_PLACEHOLDER]

    def test_empty_list_gives_placeholder(self, src, write):
        write("_data/ideas.json", "[]")
        assert load_ideas(src) == [IDEA_PLACEHOLDER]

    def test_mixed_items(self, src, write):
        write("_data/ideas.json", json.dumps(["  First  ", {"title": "Second", "note": "n"}, 42, ""]))
        assert load_ideas(src) == [{"title": "First", "note": ""}, {"title": "Second", "note": "n"}]

    def test_invalid_file_warns(self, src, write, capsys):
        write("_data/ideas.json", "nope")
        assert load_ideas(src) == [IDEA_PLACEHOLDER]
        assert "Warning" in capsys.readouterr().err

    def test_rendering_escapes_text(self):
        html = render_ideas_html([{"title": "A & B", "note": "<i>"}])
        assert html == '<li><span class="idea-title">A &amp; B</span> <span class="idea-note">&lt;i&gt;</span></li>'
