import httpx
import pytest

from find_license.types import Module

LICENSE_PAGE = """<!DOCTYPE html>
<html>
<body>
  <section class="License">
    <h2><div id="#lic-0">MIT</div></h2>
    <p class="License-source">Source: LICENSE</p>
    <pre class="License-contents">MIT License text...</pre>
  </section>
</body>
</html>
"""


@pytest.fixture
def license_page():
    """Minimal pkg.go.dev licenses page with all three expected elements."""
    return LICENSE_PAGE


@pytest.fixture
def modules():
    return [
        Module(path="github.com/pkg/errors", version="v0.9.1"),
        Module(path="golang.org/x/mod", version="v0.14.0", indirect=True),
        Module(path="golang.org/x/time", version="v0.5.0"),
        Module(path="github.com/PuerkitoBio/goquery", version="v1.8.1"),
    ]


@pytest.fixture
def mock_client():
    """Return a factory building an httpx.AsyncClient over a MockTransport."""

    def factory(handler):
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return factory
