from __future__ import annotations


class ResearchError(Exception):
    """Base error for the research pipeline.

    `status_code` is the HTTP-equivalent status class the API layer reports.
    """

    status_code: int = 500


class InvalidRequest(ResearchError):
    """A required field is missing or malformed. Raised before any call is made."""

    status_code = 400


class ProviderUnavailable(ResearchError):
    """A search or content-fetch provider failed.

    The pipeline recovers from this locally (empty results / snippet fallback).
    """

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class GenerationFailed(ResearchError):
    """The LLM call itself failed (auth, quota, network, malformed response)."""


class ConfigurationMissing(ResearchError):
    """A credential or setting needed by the invoked provider is absent."""
