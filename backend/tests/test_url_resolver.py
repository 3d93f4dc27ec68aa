"""
URL resolver tests

Run:
    cd backend
    pytest tests/test_url_resolver.py -v
"""

import pytest

from image_scraper.url_resolver import resolve_url, validate_http_url

BASE = "https://example.com/gallery/index.html"


class TestResolveUrl:
    """resolve_url: raw markup reference + page URL -> absolute URL"""

    def test_relative_path_is_made_absolute(self):
        assert resolve_url("img/a.jpg", BASE) == "https://example.com/gallery/img/a.jpg"

    def test_root_relative_path(self):
        assert resolve_url("/static/a.png", BASE) == "https://example.com/static/a.png"

    def test_parent_relative_path(self):
        assert resolve_url("../a.png", BASE) == "https://example.com/a.png"

    def test_protocol_relative_inherits_scheme(self):
        assert resolve_url("//cdn.example.net/a.webp", BASE) == "https://cdn.example.net/a.webp"

    def test_absolute_url_kept_with_query(self):
        assert resolve_url("http://other.test/p?id=3&w=200", BASE) == "http://other.test/p?id=3&w=200"

    def test_surrounding_whitespace_trimmed(self):
        assert resolve_url("  a.jpg\n", BASE) == "https://example.com/gallery/a.jpg"

    def test_fragment_dropped(self):
        assert resolve_url("a.jpg#zoom", BASE) == "https://example.com/gallery/a.jpg"

    @pytest.mark.parametrize("raw", [None, "", "   ", "\t\n"])
    def test_empty_input_rejected(self, raw):
        assert resolve_url(raw, BASE) is None

    @pytest.mark.parametrize("raw", [
        "data:image/png;base64,iVBORw0KGgo=",
        "DATA:image/gif;base64,R0lGOD",
        "blob:https://example.com/550e8400-e29b",
    ])
    def test_data_and_blob_rejected(self, raw):
        assert resolve_url(raw, BASE) is None

    @pytest.mark.parametrize("raw", [
        "javascript:void(0)",
        "mailto:someone@example.com",
        "ftp://files.example.com/a.jpg",
        "file:///etc/passwd",
    ])
    def test_non_http_schemes_rejected(self, raw):
        assert resolve_url(raw, BASE) is None

    def test_invalid_port_rejected(self):
        assert resolve_url("http://example.com:99999/a.jpg", BASE) is None


class TestValidateHttpUrl:
    """validate_http_url: user-supplied absolute URLs"""

    def test_accepts_http_and_https(self):
        assert validate_http_url("http://example.com/a") == "http://example.com/a"
        assert validate_http_url("https://example.com/a") == "https://example.com/a"

    def test_empty_path_becomes_root(self):
        assert validate_http_url("https://example.com") == "https://example.com/"

    def test_relative_reference_rejected(self):
        assert validate_http_url("/gallery") is None
        assert validate_http_url("example.com/gallery") is None

    @pytest.mark.parametrize("raw", [None, 42, ["https://example.com"], {"url": "x"}])
    def test_non_string_rejected(self, raw):
        assert validate_http_url(raw) is None

    def test_other_schemes_rejected(self):
        assert validate_http_url("ftp://example.com/a.jpg") is None
        assert validate_http_url("data:image/png;base64,AAAA") is None
