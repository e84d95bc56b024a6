"""Tests for paths.compute_output_path and paths.compute_url."""

from pathlib import Path, PurePosixPath

from sitesmith.paths import compute_output_path, compute_url

OUT = Path("out")


def _url(output_path: PurePosixPath) -> str:
    return compute_url(OUT, OUT / output_path)


class TestPermalinks:
    def test_trailing_slash_becomes_directory_index(self):
        path = compute_output_path("about.md", ".md", {"permalink": "/about/"}, False, "about")
        assert path == PurePosixPath("about/index.html")
        assert _url(path) == "/about/"

    def test_html_suffix_is_used_literally(self):
        path = compute_output_path("feed.md", ".md", {"permalink": "/feed.html"}, False, "feed")
        assert path == PurePosixPath("feed.html")
        assert _url(path) == "/feed.html"

    def test_bare_name_is_treated_as_directory(self):
        path = compute_output_path("page.md", ".md", {"permalink": "/x"}, False, "page")
        assert path == PurePosixPath("x/index.html")
        assert _url(path) == "/x/"

    def test_root_permalink(self):
        path = compute_output_path("home.md", ".md", {"permalink": "/"}, False, "home")
        assert path == PurePosixPath("index.html")
        assert _url(path) == "/"

    def test_permalink_wins_over_post_location(self):
        path = compute_output_path("posts/a.md", ".md", {"permalink": "/special/"}, True, "a")
        assert path == PurePosixPath("special/index.html")


class TestDefaultPaths:
    def test_page_becomes_clean_directory(self):
        path = compute_output_path("blog/hello.md", ".md", {}, False, "hello")
        assert path == PurePosixPath("blog/hello/index.html")
        assert _url(path) == "/blog/hello/"

    def test_root_index(self):
        path = compute_output_path("index.md", ".md", {}, False, "index")
        assert path == PurePosixPath("index.html")
        assert _url(path) == "/"

    def test_nested_index(self):
        path = compute_output_path("docs/index.html", ".html", {}, False, "index")
        assert path == PurePosixPath("docs/index.html")
        assert _url(path) == "/docs/"

    def test_post_uses_slug(self):
        path = compute_output_path("posts/2026-01-15-my-post.md", ".md", {}, True, "my-post")
        assert path == PurePosixPath("posts/my-post/index.html")
        assert _url(path) == "/posts/my-post/"

    def test_uppercase_extension(self):
        path = compute_output_path("Notes.MD", ".md", {}, False, "Notes")
        assert path == PurePosixPath("Notes/index.html")


class TestComputeUrl:
    def test_non_index_file_keeps_literal_path(self):
        assert compute_url(Path("/site/out"), Path("/site/out/a/b.html")) == "/a/b.html"

    def test_absolute_roots(self):
        assert compute_url(Path("/site/out"), Path("/site/out/a/index.html")) == "/a/"
