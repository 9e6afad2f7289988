"""Tests for license field extraction."""

import pytest

from find_license.errors.exceptions import HTMLParseError
from find_license.lookup import extract
from find_license.lookup.extract import extract_license_fields, strip_source_prefix


class TestExtractLicenseFields:
    def test_all_fields(self, license_page):
        fields = extract_license_fields(license_page)
        assert fields.license_type == "MIT"
        assert fields.source == "LICENSE"
        assert fields.content == "MIT License text..."

    def test_plain_id_fallback(self):
        html = '<div id="lic-0">BSD-3-Clause</div>'
        assert extract_license_fields(html).license_type == "BSD-3-Clause"

    def test_missing_elements_give_empty_strings(self):
        fields = extract_license_fields("<html><body><p>Not found</p></body></html>")
        assert fields.license_type == ""
        assert fields.source == ""
        assert fields.content == ""

    def test_multiple_contents_are_joined(self):
        html = (
            '<pre class="License-contents">first</pre>'
            '<pre class="License-contents">second</pre>'
        )
        assert extract_license_fields(html).content == "firstsecond"

    def test_accepts_bytes(self, license_page):
        fields = extract_license_fields(license_page.encode("utf-8"))
        assert fields.license_type == "MIT"

    def test_parser_failure(self, monkeypatch):
        def broken(*args, **kwargs):
            raise ValueError("unparseable")

        monkeypatch.setattr(extract, "BeautifulSoup", broken)
        with pytest.raises(HTMLParseError) as exc_info:
            extract_license_fields("<html>")
        assert isinstance(exc_info.value.original, ValueError)


class TestStripSourcePrefix:
    def test_strips_literal_prefix(self):
        assert strip_source_prefix("Source: github.com/pkg/errors/LICENSE") == (
            "github.com/pkg/errors/LICENSE"
        )

    def test_strips_leading_whitespace(self):
        assert strip_source_prefix("\n   Source: LICENSE") == "LICENSE"

    def test_keeps_text_without_prefix(self):
        assert strip_source_prefix("LICENSE.md") == "LICENSE.md"

    def test_only_removes_prefix_once(self):
        assert strip_source_prefix("Source: Source: x") == "Source: x"
