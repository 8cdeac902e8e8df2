from __future__ import annotations

from unittest.mock import patch

import httpx
import pytest

from app.models.errors import ProviderUnavailable
from app.tools import content_fetcher
from app.tools.content_fetcher import ContentFetcher, extract_main_text


def test_extract_prefers_semantic_containers_and_strips_scripts():
    html = """
    <html><head><title>T</title><style>body { color: red; }</style></head>
    <body>
      <nav>Main menu Navigation</nav>
      <article>
        <h1>Quantum   computing</h1>
        <script>var tracking = 1;</script>
        <p>Qubits\tuse\n\nsuperposition.</p>
      </article>
      <footer>Copyright</footer>
    </body></html>
    """

    result = extract_main_text(html)

    assert result.method == "container"
    assert result.text == "Quantum computing Qubits use superposition."
    assert "tracking" not in result.text
    assert "Main menu" not in result.text


def test_extract_falls_back_to_body_when_no_container():
    html = "<html><body><div>Plain   body text</div><noscript>enable js</noscript></body></html>"

    result = extract_main_text(html)

    assert result.method == "body"
    assert result.text == "Plain body text"


def test_extract_falls_back_to_body_when_containers_are_empty():
    html = "<html><body><main><script>x()</script></main><p>Visible</p></body></html>"

    result = extract_main_text(html)

    assert result.method == "body"
    assert result.text == "Visible"


def test_extract_does_not_repeat_nested_container_text():
    html = "<body><main><article class='post'>Only once</article></main></body>"

    result = extract_main_text(html)

    assert result.text == "Only once"


def test_extract_caps_length_with_ellipsis():
    html = "<body><article>" + ("word " * 4000) + "</article></body>"

    result = extract_main_text(html, max_chars=8000)

    assert len(result.text) == 8003
    assert result.text.endswith("...")
    assert result.raw_length == len(html)


def test_extract_removes_iframe_svg_and_link_elements():
    html = (
        "<body><main>Keep<iframe>frame text</iframe><svg><text>chart</text></svg>"
        "<link rel='x'>this</main></body>"
    )

    result = extract_main_text(html)

    assert "frame text" not in result.text
    assert "chart" not in result.text
    assert "Keep" in result.text


@pytest.mark.asyncio
async def test_fetch_returns_sanitized_text_and_sends_user_agent():
    seen: dict[str, str] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["ua"] = request.headers.get("user-agent", "")
        return httpx.Response(200, text="<html><body><main>Hello   world</main></body></html>")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        fetcher = ContentFetcher(http_client=client, user_agent="TestAgent/1.0")
        text = await fetcher.fetch("https://example.com/page")

    assert text == "Hello world"
    assert seen["ua"] == "TestAgent/1.0"


@pytest.mark.asyncio
async def test_fetch_surfaces_http_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="missing")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        fetcher = ContentFetcher(http_client=client)
        with pytest.raises(ProviderUnavailable):
            await fetcher.fetch("https://example.com/missing")


@pytest.mark.asyncio
async def test_fetch_surfaces_transport_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        fetcher = ContentFetcher(http_client=client)
        with pytest.raises(ProviderUnavailable):
            await fetcher.fetch("https://example.com/")


@pytest.mark.asyncio
async def test_fetch_surfaces_parse_errors(monkeypatch):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html></html>")

    def broken(*_args, **_kwargs):
        raise RuntimeError("parser exploded")

    monkeypatch.setattr(content_fetcher, "extract_main_text", broken)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        fetcher = ContentFetcher(http_client=client)
        with pytest.raises(ProviderUnavailable):
            await fetcher.fetch("https://example.com/")


@pytest.mark.asyncio
async def test_fetch_rejects_invalid_urls():
    fetcher = ContentFetcher()
    with pytest.raises(ProviderUnavailable):
        await fetcher.fetch("ftp://example.com/file")


@pytest.mark.asyncio
async def test_fetch_logs_extraction_details():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html><body><article>Body text</article></body></html>")

    with patch.object(content_fetcher.log_service, "log_event") as log_event:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            await ContentFetcher(http_client=client).fetch("https://example.com/a")

    kwargs = log_event.call_args.kwargs
    assert kwargs["event_type"] == "page_fetched"
    assert kwargs["url"] == "https://example.com/a"
    assert kwargs["method"] == "container"
    assert kwargs["extracted_length"] == len("Body text")
