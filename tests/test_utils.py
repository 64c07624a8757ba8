"""
Tests for URL validation, canonical form and link resolution.
"""

import pytest

from trustscan.errors import InvalidURLError
from trustscan.utils import (
    canonical_url,
    report_base_name,
    resolve_link,
    resolve_links,
    validate_start_url,
)

START = "https://example.com/docs"


class TestValidateStartUrl:

    def test_scheme_defaults_to_https(self):
        assert validate_start_url("example.com") == "https://example.com"

    @pytest.mark.parametrize("url", [
        "https://example.com",
        "http://localhost:3000/app",
        "https://example.com/search?q=https://other.org",
    ])
    def test_accepts(self, url):
        assert validate_start_url(url) == url

    @pytest.mark.parametrize("url", [
        "",
        "   ",
        None,
        "ftp://example.com",
        "https://",
        "https://exa mple.com",
        "https://example.comhttps://example.com",
        "example.comhttp://example.com/about",
        "https://nodot",
    ])
    def test_rejects(self, url):
        with pytest.raises(InvalidURLError):
            validate_start_url(url)

    def test_invalid_url_error_is_value_error(self):
        with pytest.raises(ValueError):
            validate_start_url("ftp://example.com")


class TestLinks:

    def test_canonical_strips_one_trailing_slash(self):
        assert canonical_url("https://a.com/") == "https://a.com"
        assert canonical_url("https://a.com/x/") == "https://a.com/x"
        assert canonical_url("https://a.com/x") == "https://a.com/x"

    @pytest.mark.parametrize("href,expected", [
        ("/pricing", "https://example.com/pricing"),
        ("guide", "https://example.com/guide"),
        ("https://example.com/a#section", "https://example.com/a"),
        ("https://other.org/", None),
        ("http://example.com/insecure", None),
        ("mailto:hi@example.com", None),
        ("javascript:void(0)", None),
        ("#top", None),
        ("/brochure.PDF", None),
        ("", None),
    ])
    def test_resolve_link(self, href, expected):
        assert resolve_link(href, START) == expected

    def test_resolve_links_dedupes_canonically(self):
        hrefs = ["/a", "/a/", "https://example.com/a#x", "/b"]
        assert resolve_links(hrefs, START) == ["https://example.com/a", "https://example.com/b"]

    def test_report_base_name(self):
        assert report_base_name("https://www.example.com") == "www_example_com"
        assert report_base_name("https://example.com:8443/docs/api/") == "example_com_8443_docs_api"
