"""Tests for utils helpers."""

import datetime as dt
from pathlib import Path

import pytest

from sitesmith.utils import BuildError, clean_output_dir, iso_date, join_url, parse_bool, prefix_url, rfc822_date


class TestFormatting:
    def test_rfc822(self):
        assert rfc822_date(dt.datetime(2024, 1, 1)) == "Mon, 01 Jan 2024 00:00:00 +0000"

    def test_iso(self):
        assert iso_date(dt.datetime(2024, 1, 1, 5, 6, 7)) == "2024-01-01T05:06:07Z"

    def test_join_url(self):
        assert join_url("https://a.dev/", "/x/") == "https://a.dev/x/"
        assert join_url("https://a.dev", "/") == "https://a.dev/"

    def test_prefix_url(self):
        assert prefix_url("", "/x/") == "/x/"
        assert prefix_url("/base", "/x/") == "/base/x/"

    def test_parse_bool(self):
        assert parse_bool("yes")
        assert parse_bool(True)
        assert not parse_bool("false")
        assert not parse_bool(None)


class TestCleanOutputDir:
    def test_removes_output(self, tmp_path):
        out = tmp_path / "out"
        (out / "sub").mkdir(parents=True)
        clean_output_dir(out, tmp_path / "src")
        assert not out.exists()

    def test_missing_output_is_fine(self, tmp_path):
        clean_output_dir(tmp_path / "out", tmp_path / "src")

    def test_refuses_root(self, tmp_path):
        with pytest.raises(BuildError):
            clean_output_dir(Path("/"), tmp_path)
