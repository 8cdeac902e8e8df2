from __future__ import annotations

from dataclasses import dataclass

import httpx
from bs4 import BeautifulSoup

from app.config import DEFAULT_USER_AGENT
from app.models.errors import ProviderUnavailable
from app.services import logger as log_service
from app.tools.web_utils import clean_content, is_valid_url

STRIPPED_TAGS = ("script", "style", "meta", "link", "noscript", "iframe", "svg")
CONTENT_SELECTORS = "main, article, .content, .article, .post, .entry"
DEFAULT_MAX_CHARS = 8000


@dataclass
class ExtractedContent:
    text: str
    method: str  # container | body
    raw_length: int
    extracted_length: int


def _container_text(soup: BeautifulSoup) -> str:
    containers = soup.select(CONTENT_SELECTORS)
    # Skip containers nested in an already-selected one so text is not repeated.
    selected = set(map(id, containers))
    chunks: list[str] = []
    for node in containers:
        if any(id(parent) in selected for parent in node.parents):
            continue
        chunks.append(node.get_text(" "))
    return " ".join(chunks)


def extract_main_text(raw_html: str, *, max_chars: int = DEFAULT_MAX_CHARS) -> ExtractedContent:
    """Strip non-content elements and return visible text, capped at max_chars."""
    soup = BeautifulSoup(raw_html, "html.parser")
    for element in soup(list(STRIPPED_TAGS)):
        element.decompose()

    text = clean_content(_container_text(soup), max_length=max_chars)
    method = "container"
    if not text:
        body = soup.body or soup
        text = clean_content(body.get_text(" "), max_length=max_chars)
        method = "body"

    return ExtractedContent(
        text=text,
        method=method,
        raw_length=len(raw_html),
        extracted_length=len(text),
    )


class ContentFetcher:
    """Fetches a page and returns its sanitized visible text.

    Failures are raised as ProviderUnavailable; the caller picks the fallback.
    """

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 20.0,
        max_chars: int = DEFAULT_MAX_CHARS,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self._http_client = http_client
        self.timeout = timeout
        self.max_chars = max_chars
        self.user_agent = user_agent

    async def _get_html(self, client: httpx.AsyncClient, url: str) -> str:
        response = await client.get(
            url,
            headers={"User-Agent": self.user_agent},
            follow_redirects=True,
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.text

    async def fetch(self, url: str) -> str:
        if not is_valid_url(url):
            raise ProviderUnavailable("fetch", f"Invalid URL: {url!r}")

        try:
            if self._http_client is None:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    raw_html = await self._get_html(client, url)
            else:
                raw_html = await self._get_html(self._http_client, url)
            extracted = extract_main_text(raw_html, max_chars=self.max_chars)
        except httpx.HTTPError as exc:
            raise ProviderUnavailable("fetch", f"Failed to fetch {url}: {exc}") from exc
        except Exception as exc:
            raise ProviderUnavailable("fetch", f"Failed to parse {url}: {exc}") from exc

        log_service.log_event(
            event_type="page_fetched",
            message="Fetched page content",
            url=url,
            method=extracted.method,
            raw_length=extracted.raw_length,
            extracted_length=extracted.extracted_length,
        )
        return extracted.text
