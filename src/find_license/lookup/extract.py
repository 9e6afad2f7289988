"""Extract license fields from a pkg.go.dev licenses page."""

from __future__ import annotations

from dataclasses import dataclass

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from find_license.errors.exceptions import HTMLParseError

SOURCE_PREFIX = "Source: "

# pkg.go.dev renders the first license heading with the literal id "#lic-0".
_TYPE_IDS = ("#lic-0", "lic-0")
_SOURCE_SELECTOR = ".License-source"
_CONTENTS_SELECTOR = ".License-contents"


@dataclass(frozen=True, slots=True)
class LicenseFields:
    license_type: str
    source: str
    content: str


def extract_license_fields(markup: str | bytes) -> LicenseFields:
    """Parse ``markup`` and pull out type, source and content.

    Missing elements produce empty strings rather than an error.
    """
    try:
        soup = BeautifulSoup(markup, "html.parser")
    except (ParserRejectedMarkup, ValueError) as exc:
        raise HTMLParseError(f"new doc reader {exc}", original=exc) from exc

    return LicenseFields(
        license_type=_license_type(soup),
        source=strip_source_prefix(_joined_text(soup, _SOURCE_SELECTOR)),
        content=_joined_text(soup, _CONTENTS_SELECTOR),
    )


def strip_source_prefix(text: str) -> str:
    """Drop leading whitespace and the literal ``Source: `` label."""
    return text.lstrip().removeprefix(SOURCE_PREFIX)


def _license_type(soup: BeautifulSoup) -> str:
    for element_id in _TYPE_IDS:
        element = soup.find(id=element_id)
        if element is not None:
            return element.get_text()
    return ""


def _joined_text(soup: BeautifulSoup, selector: str) -> str:
    return "".join(element.get_text() for element in soup.select(selector))
