"""
Tests for the summarizing search gateway and the search-and-summarize agent.
"""

import json

import pytest

from conftest import fake_openai
from fodmap.core.errors import SearchError
from fodmap.schemas.search import SearchResult
from fodmap.services.perplexity_search import NO_RESPONSE, PerplexitySearchClient, parse_search_envelope
from fodmap.services.search_agent import SearchReasoningAgent


def _envelope(content: str | None = "Chocolate is low FODMAP in small servings.", citations=None) -> str:
    body = {
        "id": "resp-1",
        "model": "sonar",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
    }
    if citations is not None:
        body["citations"] = citations
    return json.dumps(body)


class TestParseSearchEnvelope:
    def test_summary_and_citations(self) -> None:
        result = parse_search_envelope(
            _envelope(citations=["https://monash.example.com/chocolate", None, "https://b.example.com/c"])
        )
        assert result.summary == "Chocolate is low FODMAP in small servings."
        assert [str(c) for c in result.citations] == [
            "https://monash.example.com/chocolate",
            "https://b.example.com/c",
        ]

    def test_missing_body_raises(self) -> None:
        with pytest.raises(SearchError, match="No raw response"):
            parse_search_envelope(None)
        with pytest.raises(SearchError):
            parse_search_envelope("")

    def test_missing_citations_raises(self) -> None:
        with pytest.raises(SearchError, match="citations"):
            parse_search_envelope(_envelope())

    def test_invalid_json_raises(self) -> None:
        with pytest.raises(SearchError, match="not valid JSON"):
            parse_search_envelope("<html>bad gateway</html>")

    def test_empty_content_uses_placeholder(self) -> None:
        result = parse_search_envelope(_envelope(content=None, citations=[]))
        assert result.summary == NO_RESPONSE
        assert result.citations == []


@pytest.mark.asyncio
async def test_client_sends_query_and_parses_raw_body() -> None:
    fake = fake_openai([_envelope(citations=["https://a.example.com/x"])])
    client = PerplexitySearchClient(fake, model="sonar")

    result = await client.search("is chocolate a fodmap")

    call = fake.chat.completions.calls[0]
    assert call["model"] == "sonar"
    assert call["messages"] == [{"role": "user", "content": "is chocolate a fodmap"}]
    assert [str(c) for c in result.citations] == ["https://a.example.com/x"]


def test_search_result_str_lists_citations() -> None:
    result = SearchResult(summary="Short answer.", citations=["https://a.example.com/x", "https://b.example.com/y"])
    assert str(result) == "Short answer.\n\nhttps://a.example.com/x\n\nhttps://b.example.com/y"


class DeterministicSearch:
    def __init__(self) -> None:
        self.calls = 0

    async def search(self, query: str) -> SearchResult:
        self.calls += 1
        return SearchResult(summary=f"about {query}", citations=["https://a.example.com/x"])


class FailingSearch:
    async def search(self, query: str) -> SearchResult:
        raise SearchError("No raw response found.")


class TestSearchReasoningAgent:
    @pytest.mark.asyncio
    async def test_passes_result_through_unchanged(self) -> None:
        gateway = DeterministicSearch()
        agent = SearchReasoningAgent(gateway)

        result = await agent.search_and_summarize("garlic")

        assert result == SearchResult(summary="about garlic", citations=["https://a.example.com/x"])
        assert gateway.calls == 1

    @pytest.mark.asyncio
    async def test_repeated_query_is_idempotent(self) -> None:
        agent = SearchReasoningAgent(DeterministicSearch())
        assert await agent.search_and_summarize("garlic") == await agent.search_and_summarize("garlic")

    @pytest.mark.asyncio
    async def test_gateway_errors_propagate(self) -> None:
        agent = SearchReasoningAgent(FailingSearch())
        with pytest.raises(SearchError):
            await agent.search_and_summarize("garlic")
