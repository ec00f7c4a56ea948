"""
Summarizing search: Perplexity chat completions (OpenAI-compatible) return an answer
plus a top-level "citations" array in the raw response envelope.
"""

import json
import logging
from typing import Any

from openai import AsyncOpenAI

from fodmap.core.config import PERPLEXITY_MODEL
from fodmap.core.errors import SearchError
from fodmap.schemas.search import SearchResult

logger = logging.getLogger(__name__)

NO_RESPONSE = "No response found."


def parse_search_envelope(body: str | bytes | None) -> SearchResult:
    """
    Build a SearchResult from a raw Perplexity response body.
    Raises SearchError when the body is missing, not JSON, or has no citations array.
    """
    if not body:
        raise SearchError("No raw response found.")
    try:
        envelope = json.loads(body)
    except json.JSONDecodeError as e:
        raise SearchError(f"Search response is not valid JSON: {e}") from e
    if not isinstance(envelope, dict):
        raise SearchError("Search response is not a JSON object.")
    raw_citations = envelope.get("citations")
    if not isinstance(raw_citations, list):
        raise SearchError("Search response has no citations array.")
    citations = [c for c in raw_citations if isinstance(c, str) and c]

    summary = ""
    choices = envelope.get("choices") or []
    if choices and isinstance(choices[0], dict):
        msg: dict[str, Any] = choices[0].get("message") or {}
        summary = (msg.get("content") or "").strip()
    return SearchResult(summary=summary or NO_RESPONSE, citations=citations)


class PerplexitySearchClient:
    """Search gateway returning a cited summary for a query."""

    def __init__(self, client: AsyncOpenAI, model: str = PERPLEXITY_MODEL) -> None:
        self._client = client
        self.model = model

    async def search(self, query: str) -> SearchResult:
        logger.info("[perplexity:search] IN  query=%r", query)
        raw = await self._client.chat.completions.with_raw_response.create(
            model=self.model,
            messages=[{"role": "user", "content": query}],
        )
        body = raw.text if raw is not None else None
        logger.debug("[perplexity:search] raw_body_len=%d", len(body or ""))
        result = parse_search_envelope(body)
        logger.info(
            "[perplexity:search] OUT summary_len=%d citations=%s",
            len(result.summary),
            [str(c) for c in result.citations],
        )
        return result
