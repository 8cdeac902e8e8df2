from __future__ import annotations

import json

import httpx
import pytest

from app.config import Settings
from app.models.errors import ConfigurationMissing, ProviderUnavailable
from app.models.research import SearchSource
from app.tools import github_search, serper_search, wikipedia_search
from app.tools.search_provider import SearchRegistry, build_search_registry


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_serper_web_search_maps_organic_results():
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["api_key"] = request.headers.get("x-api-key")
        captured["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "organic": [
                    {"title": "Result 1", "link": "https://example.com/1", "snippet": "Desc 1"},
                    {"title": "Result 2", "link": "https://example.com/2"},
                ]
            },
        )

    async with _client(handler) as client:
        results = await serper_search.search(
            "fusion energy",
            source=SearchSource.WEB,
            api_key="serper-key",
            max_results=3,
            http_client=client,
        )

    assert captured["url"] == "https://google.serper.dev/search"
    assert captured["api_key"] == "serper-key"
    assert captured["body"] == {"q": "fusion energy", "num": 3}
    assert [r.position for r in results] == [1, 2]
    assert results[0].source is SearchSource.WEB
    assert results[0].snippet == "Desc 1"
    assert results[1].snippet == ""


@pytest.mark.asyncio
async def test_serper_scholar_falls_back_to_publication_and_omits_count():
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={"organic": [{"title": "Paper", "link": "https://doi.org/x", "publication": "Nature, 2021"}]},
        )

    async with _client(handler) as client:
        results = await serper_search.search(
            "fusion",
            source=SearchSource.SCHOLAR,
            api_key="k",
            max_results=8,
            http_client=client,
        )

    assert captured["url"].endswith("/scholar")
    assert captured["body"] == {"q": "fusion"}
    assert results[0].snippet == "Nature, 2021"
    assert results[0].source is SearchSource.SCHOLAR


@pytest.mark.asyncio
async def test_serper_news_reads_news_key_and_description_fallback():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"news": [{"title": "Headline", "link": "https://news.example/a", "description": "Lede"}]},
        )

    async with _client(handler) as client:
        results = await serper_search.search("fusion", source=SearchSource.NEWS, api_key="k", http_client=client)

    assert results[0].snippet == "Lede"
    assert results[0].source is SearchSource.NEWS


@pytest.mark.asyncio
async def test_serper_requires_api_key():
    with pytest.raises(ConfigurationMissing):
        await serper_search.search("q", source=SearchSource.WEB, api_key="")


@pytest.mark.asyncio
async def test_serper_http_error_becomes_provider_unavailable():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, json={"message": "Unauthorized"})

    async with _client(handler) as client:
        with pytest.raises(ProviderUnavailable):
            await serper_search.search("q", source=SearchSource.WEB, api_key="bad", http_client=client)


@pytest.mark.asyncio
async def test_serper_malformed_payload_becomes_provider_unavailable():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"organic": "not-a-list"})

    async with _client(handler) as client:
        with pytest.raises(ProviderUnavailable):
            await serper_search.search("q", source=SearchSource.WEB, api_key="k", http_client=client)


@pytest.mark.asyncio
async def test_wikipedia_builds_article_links_and_strips_markup():
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["params"] = dict(request.url.params)
        return httpx.Response(
            200,
            json={
                "query": {
                    "search": [
                        {
                            "title": "C++ (programming language)",
                            "snippet": '<span class="searchmatch">C++</span> is a language',
                        },
                        {"title": "Bjarne Stroustrup", "snippet": "Danish computer scientist"},
                    ]
                }
            },
        )

    async with _client(handler) as client:
        results = await wikipedia_search.search("c++", http_client=client)

    assert captured["params"]["srsearch"] == "c++"
    assert captured["params"]["list"] == "search"
    assert results[0].link == "https://en.wikipedia.org/wiki/C%2B%2B_(programming_language)"
    assert results[0].snippet == "C++ is a language"
    assert results[1].link == "https://en.wikipedia.org/wiki/Bjarne_Stroustrup"
    assert results[1].position == 2
    assert results[1].source is SearchSource.WIKIPEDIA


@pytest.mark.asyncio
async def test_github_limits_results_and_maps_repository_fields():
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["params"] = dict(request.url.params)
        captured["auth"] = request.headers.get("authorization")
        captured["accept"] = request.headers.get("accept")
        items = [
            {"name": f"repo{i}", "html_url": f"https://github.com/o/repo{i}", "description": None}
            for i in range(8)
        ]
        return httpx.Response(200, json={"items": items})

    async with _client(handler) as client:
        results = await github_search.search("llm", token="gh-token", http_client=client)

    assert captured["params"] == {"q": "llm", "sort": "stars", "order": "desc"}
    assert captured["auth"] == "Bearer gh-token"
    assert captured["accept"] == "application/vnd.github.v3+json"
    assert len(results) == 5
    assert results[0].title == "repo0"
    assert results[0].link == "https://github.com/o/repo0"
    assert results[0].snippet == ""
    assert results[4].position == 5


@pytest.mark.asyncio
async def test_github_sends_no_auth_without_token():
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["auth"] = request.headers.get("authorization")
        return httpx.Response(200, json={"items": []})

    async with _client(handler) as client:
        assert await github_search.search("llm", http_client=client) == []

    assert captured["auth"] is None


def test_build_search_registry_covers_every_source():
    registry = build_search_registry(Settings(serper_api_key="k"))
    assert set(registry.adapters) == set(SearchSource)


def test_registry_rejects_missing_sources():
    with pytest.raises(ValueError, match="github"):
        SearchRegistry(
            adapters={
                source: serper_search.search
                for source in SearchSource
                if source is not SearchSource.GITHUB
            }
        )


@pytest.mark.asyncio
async def test_registry_web_adapter_binds_credentials():
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["api_key"] = request.headers.get("x-api-key")
        captured["url"] = str(request.url)
        return httpx.Response(200, json={"news": []})

    async with _client(handler) as client:
        registry = build_search_registry(
            Settings(serper_api_key="bound-key", serper_base_url="https://serper.test"),
            http_client=client,
        )
        await registry.adapter_for(SearchSource.NEWS)("q", max_results=5)

    assert captured == {"api_key": "bound-key", "url": "https://serper.test/news"}
