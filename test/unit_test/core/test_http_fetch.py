import httpx
import pytest

from transparent_trust.core import http_fetch
from transparent_trust.core.http_fetch import fetch_url_content, is_public_address, validate_url


@pytest.mark.parametrize(
    "address,public",
    [
        ("93.184.216.34", True),
        ("2606:2800:220:1:248:1893:25c8:1946", True),
        ("10.0.0.1", False),
        ("192.168.1.10", False),
        ("127.0.0.1", False),
        ("169.254.169.254", False),
        ("::1", False),
        ("0.0.0.0", False),
        ("not-an-ip", False),
    ],
)
def test_is_public_address(address, public):
    assert is_public_address(address) is public


class TestValidateUrl:
    async def test_public_ip_is_allowed(self):
        assert await validate_url("https://93.184.216.34/docs") is None

    @pytest.mark.parametrize(
        "url,reason",
        [
            ("ftp://example.com/file", "Unsupported URL scheme"),
            ("file:///etc/passwd", "Unsupported URL scheme"),
            ("https:///nohost", "URL has no host"),
            ("http://localhost:8080/admin", "Host is not allowed"),
            ("http://metadata.google.internal/", "Host is not allowed"),
            ("http://169.254.169.254/latest/meta-data", "non-public address"),
            ("http://10.1.2.3/", "non-public address"),
        ],
    )
    async def test_refused_urls(self, url, reason):
        problem = await validate_url(url)
        assert problem is not None
        assert reason in problem


class TestFetchUrlContent:
    @pytest.fixture(autouse=True)
    def _allow_everything(self, monkeypatch):
        async def _ok(url):
            return None

        monkeypatch.setattr(http_fetch, "validate_url", _ok)

    def _client(self, handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://mock")

    async def test_returns_truncated_text(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["user-agent"] == "TransparentTrust/1.0"
            return httpx.Response(200, text="x" * 50, headers={"content-type": "text/html"})

        async with self._client(handler) as client:
            text = await fetch_url_content("http://mock/page", max_length=10, client=client)

        assert text == "x" * 10

    async def test_http_error_status(self):
        async with self._client(lambda r: httpx.Response(404, text="missing")) as client:
            assert await fetch_url_content("http://mock/missing", client=client) is None

    async def test_non_text_content(self):
        def handler(request):
            return httpx.Response(200, content=b"%PDF", headers={"content-type": "application/pdf"})

        async with self._client(handler) as client:
            assert await fetch_url_content("http://mock/file.pdf", client=client) is None

    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        async with self._client(handler) as client:
            assert await fetch_url_content("http://mock/down", client=client) is None

    async def test_follows_redirects(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/old":
                return httpx.Response(301, headers={"location": "/new"}, text="<html>Moved Permanently</html>")
            return httpx.Response(200, text="Current page", headers={"content-type": "text/html"})

        async with self._client(handler) as client:
            assert await fetch_url_content("http://mock/old", client=client) == "Current page"

    async def test_redirect_target_is_checked(self, monkeypatch):
        checked = []

        async def _refuse_internal(url):
            checked.append(url)
            return "Host resolves to a non-public address" if "internal" in url else None

        monkeypatch.setattr(http_fetch, "validate_url", _refuse_internal)

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(302, headers={"location": "http://internal.mock/admin"})

        async with self._client(handler) as client:
            assert await fetch_url_content("http://mock/start", client=client) is None
        assert checked == ["http://mock/start", "http://internal.mock/admin"]

    async def test_redirect_loop_gives_up(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request.url.path)
            return httpx.Response(302, headers={"location": "/loop"})

        async with self._client(handler) as client:
            assert await fetch_url_content("http://mock/loop", client=client) is None
        assert len(requests) == http_fetch.MAX_REDIRECTS + 1

    async def test_redirect_without_location(self):
        async with self._client(lambda r: httpx.Response(304, text="stub")) as client:
            assert await fetch_url_content("http://mock/cached", client=client) is None


async def test_refused_url_is_not_fetched():
    assert await fetch_url_content("http://127.0.0.1/secret") is None
