"""Unit tests for favicache.domains."""

from __future__ import annotations

import pytest

from favicache.domains import extract_domain


class TestExtractDomain:
    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://example.com", "example.com"),
            ("https://example.com/path?q=1#frag", "example.com"),
            ("http://sub.example.co.uk/", "sub.example.co.uk"),
            ("https://Example.COM/", "example.com"),
            ("https://example.com:8443/admin", "example.com"),
            ("https://user:pw@example.com/", "example.com"),
            ("http://127.0.0.1:3000/", "127.0.0.1"),
            ("http://[::1]/", "::1"),
            ("  https://padded.example/  ", "padded.example"),
        ],
    )
    def test_http_urls_return_hostname(self, url: str, expected: str) -> None:
        assert extract_domain(url) == expected

    @pytest.mark.parametrize(
        "url",
        [
            "",
            "example.com",
            "/relative/path",
            "//example.com/no-scheme",
            "not a url",
            "ftp://files.example.com/",
            "mailto:someone@example.com",
            "chrome://settings",
            "https://",
            "http:///path-only",
            "http://[::1/",
        ],
    )
    def test_everything_else_returns_none(self, url: str) -> None:
        assert extract_domain(url) is None

    def test_non_string_returns_none(self) -> None:
        assert extract_domain(None) is None  # type: ignore[arg-type]
        assert extract_domain(42) is None  # type: ignore[arg-type]
