"""Tests for the lookup client."""

import asyncio
import ssl
import threading

import httpx
import pytest

from find_license.errors.exceptions import (
    BadStatusError,
    HTMLParseError,
    LookupCancelledError,
    RequestBuildError,
    TransportError,
)
from find_license.lookup import client as client_module
from find_license.lookup.client import LookupClient, build_tls_context, licenses_url
from find_license.types import LicenseFailure, LicenseFound, Module


class _SlowBody(httpx.AsyncByteStream):
    async def __aiter__(self):
        yield b"<html><body>"
        await asyncio.sleep(1.0)
        yield b"</body></html>"


class TestLicensesUrl:
    def test_with_version(self):
        module = Module(path="github.com/pkg/errors", version="v0.9.1")
        assert licenses_url(module) == (
            "https://pkg.go.dev/github.com/pkg/errors@v0.9.1?tab=licenses"
        )

    def test_without_version(self):
        module = Module(path="github.com/pkg/errors")
        assert licenses_url(module) == "https://pkg.go.dev/github.com/pkg/errors?tab=licenses"

    def test_custom_base(self):
        module = Module(path="example.com/m", version="v1")
        assert licenses_url(module, "http://localhost:8080/") == (
            "http://localhost:8080/example.com/m@v1?tab=licenses"
        )


class TestTlsContext:
    def test_minimum_tls13(self):
        assert build_tls_context().minimum_version == ssl.TLSVersion.TLSv1_3


class TestFetch:
    async def test_success(self, mock_client, license_page):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, text=license_page)

        lookup = LookupClient(client=mock_client(handler))
        module = Module(path="github.com/pkg/errors", version="v0.9.1")
        result = await lookup.fetch(module)

        assert isinstance(result, LicenseFound)
        assert result.license_type == "MIT"
        assert result.source == "LICENSE"
        assert result.content == "MIT License text..."
        assert result.uri == licenses_url(module)
        assert result.module == module
        assert seen[0].method == "GET"
        assert seen[0].extensions["sni_hostname"] == "pkg.go.dev"

    async def test_not_found(self, mock_client):
        lookup = LookupClient(client=mock_client(lambda request: httpx.Response(404)))
        result = await lookup.fetch(Module(path="example.com/missing"))

        assert isinstance(result, LicenseFailure)
        assert isinstance(result.error, BadStatusError)
        assert result.error.status_code == 404
        assert "404" in str(result.error)
        assert not hasattr(result, "content")
        assert "Content" not in result.to_record()

    async def test_server_error_status(self, mock_client):
        lookup = LookupClient(client=mock_client(lambda request: httpx.Response(500)))
        result = await lookup.fetch(Module(path="example.com/broken"))
        assert result.error.status_code == 500

    async def test_ok_with_unknown_markup_is_found(self, mock_client):
        lookup = LookupClient(
            client=mock_client(lambda request: httpx.Response(200, text="<html></html>"))
        )
        result = await lookup.fetch(Module(path="example.com/empty"))

        assert isinstance(result, LicenseFound)
        assert (result.license_type, result.source, result.content) == ("", "", "")

    async def test_transport_error(self, mock_client):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        lookup = LookupClient(client=mock_client(handler))
        result = await lookup.fetch(Module(path="example.com/down"))

        assert isinstance(result.error, TransportError)
        assert isinstance(result.error.original, httpx.ConnectError)
        assert result.error.timed_out is False

    async def test_total_timeout(self, mock_client):
        async def handler(request):
            await asyncio.sleep(1.0)
            return httpx.Response(200, text="late")

        lookup = LookupClient(timeout=0.05, client=mock_client(handler))
        result = await lookup.fetch(Module(path="example.com/slow"))

        assert isinstance(result.error, TransportError)
        assert result.error.timed_out is True

    async def test_total_timeout_covers_body(self, mock_client):
        def handler(request):
            return httpx.Response(200, stream=_SlowBody())

        lookup = LookupClient(timeout=0.1, client=mock_client(handler))
        result = await asyncio.wait_for(lookup.fetch(Module(path="example.com/slow")), 2.0)

        assert isinstance(result, LicenseFailure)
        assert isinstance(result.error, TransportError)
        assert result.error.timed_out is True

    async def test_extraction_runs_off_event_loop_thread(
        self, mock_client, monkeypatch, license_page
    ):
        threads = []
        original = client_module.extract_license_fields

        def recording(markup):
            threads.append(threading.get_ident())
            return original(markup)

        monkeypatch.setattr(client_module, "extract_license_fields", recording)
        lookup = LookupClient(
            client=mock_client(lambda request: httpx.Response(200, text=license_page))
        )
        result = await lookup.fetch(Module(path="example.com/x"))

        assert isinstance(result, LicenseFound)
        assert threads and threads[0] != threading.get_ident()

    async def test_request_build_error(self, mock_client, monkeypatch):
        http_client = mock_client(lambda request: httpx.Response(200))

        def broken(*args, **kwargs):
            raise httpx.InvalidURL("bad url")

        monkeypatch.setattr(http_client, "build_request", broken)
        lookup = LookupClient(client=http_client)
        result = await lookup.fetch(Module(path="example.com/x"))

        assert isinstance(result.error, RequestBuildError)

    async def test_parse_error(self, mock_client, monkeypatch):
        from find_license.lookup import extract

        def broken(*args, **kwargs):
            raise ValueError("unparseable")

        monkeypatch.setattr(extract, "BeautifulSoup", broken)
        lookup = LookupClient(client=mock_client(lambda request: httpx.Response(200, text="x")))
        result = await lookup.fetch(Module(path="example.com/x"))

        assert isinstance(result.error, HTMLParseError)

    async def test_cancelled_before_start(self, mock_client):
        calls = 0

        def handler(request):
            nonlocal calls
            calls += 1
            return httpx.Response(200)

        cancel = asyncio.Event()
        cancel.set()
        lookup = LookupClient(client=mock_client(handler))
        result = await lookup.fetch(Module(path="example.com/x"), cancel)

        assert isinstance(result.error, LookupCancelledError)
        assert calls == 0

    async def test_cancelled_mid_flight(self, mock_client):
        async def handler(request):
            await asyncio.sleep(5.0)
            return httpx.Response(200)

        cancel = asyncio.Event()
        lookup = LookupClient(timeout=10.0, client=mock_client(handler))

        async def fire():
            await asyncio.sleep(0.05)
            cancel.set()

        asyncio.get_running_loop().create_task(fire())
        result = await asyncio.wait_for(lookup.fetch(Module(path="example.com/x"), cancel), 2.0)

        assert isinstance(result.error, LookupCancelledError)

    async def test_finished_request_ignores_later_cancel(self, mock_client, license_page):
        cancel = asyncio.Event()
        lookup = LookupClient(
            client=mock_client(lambda request: httpx.Response(200, text=license_page))
        )
        result = await lookup.fetch(Module(path="example.com/x"), cancel)
        cancel.set()

        assert isinstance(result, LicenseFound)

    async def test_task_cancel_during_abandon_propagates(self, mock_client):
        async def handler(request):
            try:
                await asyncio.sleep(5.0)
            except asyncio.CancelledError:
                await asyncio.sleep(0.3)
                raise
            return httpx.Response(200)

        cancel = asyncio.Event()
        lookup = LookupClient(timeout=10.0, client=mock_client(handler))
        task = asyncio.create_task(lookup.fetch(Module(path="example.com/x"), cancel))

        await asyncio.sleep(0.05)
        cancel.set()
        await asyncio.sleep(0.05)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task


class TestClientLifecycle:
    async def test_close_owned_client(self, monkeypatch, mock_client):
        http_client = mock_client(lambda request: httpx.Response(200))
        monkeypatch.setattr(client_module, "build_http_client", lambda timeout: http_client)

        lookup = LookupClient()
        await lookup.close()
        assert http_client.is_closed

    async def test_injected_client_left_open(self, mock_client):
        http_client = mock_client(lambda request: httpx.Response(200))
        lookup = LookupClient(client=http_client)
        await lookup.close()
        assert not http_client.is_closed
        await http_client.aclose()
