from __future__ import annotations

import re
from typing import Any
from urllib.parse import urlparse

import httpx

_WHITESPACE_RE = re.compile(r"[\s\x00-\x1f\x7f]+")
_HTML_TAG_RE = re.compile(r"</?[^>]+(>|$)")


def is_valid_url(url: str) -> bool:
    """Basic URL validation."""
    try:
        result = urlparse(url)
        return all([result.scheme in ("http", "https"), result.netloc])
    except Exception:
        return False


def clean_content(text: str, max_length: int = 8000) -> str:
    """Collapse whitespace and control characters, trim to max length."""
    text = _WHITESPACE_RE.sub(" ", text).strip()
    if max_length > 0 and len(text) > max_length:
        text = text[:max_length] + "..."
    return text


def strip_html_tags(text: str) -> str:
    return _HTML_TAG_RE.sub("", text)


async def request_json(
    method: str,
    url: str,
    *,
    http_client: httpx.AsyncClient | None = None,
    timeout: float = 30.0,
    **kwargs: Any,
) -> Any:
    """Issue one request and return the decoded JSON body.

    Raises httpx.HTTPError for transport/status failures and ValueError for
    undecodable bodies.
    """

    async def _do_request(client: httpx.AsyncClient) -> Any:
        response = await client.request(method, url, **kwargs)
        response.raise_for_status()
        return response.json()

    if http_client is None:
        async with httpx.AsyncClient(timeout=timeout) as client:
            return await _do_request(client)
    return await _do_request(http_client)
