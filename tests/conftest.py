"""
Shared stub gateways. No network: search, completion and fetch are in-memory fakes.
"""

from types import SimpleNamespace
from typing import Any

import pytest

from fodmap.schemas.search import SearchResult, WebPage, WebSearchResponse
from fodmap.schemas.sensitivity import classifiable_categories


class StubSearchAgent:
    """Records every query; returns a fixed summary, or raises for queries containing a marker."""

    def __init__(self, fail_on: str | None = None) -> None:
        self.queries: list[str] = []
        self.fail_on = fail_on

    async def search_and_summarize(self, query: str) -> SearchResult:
        self.queries.append(query)
        if self.fail_on and self.fail_on in query:
            raise RuntimeError(f"search failed for {query!r}")
        return SearchResult(summary=f"Summary for: {query}", citations=["https://search.example.com/a"])


class StubStructuredLLM:
    """Answers every structured completion with a fixed payload (or a per-category callable)."""

    def __init__(self, answer: Any) -> None:
        self.answer = answer
        self.prompts: list[str] = []

    async def complete_structured(self, prompt: str, schema: dict[str, Any], name: str = "structured_output") -> dict[str, Any]:
        self.prompts.append(prompt)
        if callable(self.answer):
            return self.answer(prompt)
        return dict(self.answer)


class StubCompleter:
    """Free-text completer echoing which page/prompt it answered."""

    def __init__(self, fail_after: int | None = None) -> None:
        self.prompts: list[str] = []
        self.fail_after = fail_after

    async def complete(self, prompt: str) -> str:
        if self.fail_after is not None and len(self.prompts) >= self.fail_after:
            raise RuntimeError("completion failed")
        self.prompts.append(prompt)
        return f"answer #{len(self.prompts)}"


class StubFetcher:
    def __init__(self) -> None:
        self.urls: list[str] = []

    async def fetch(self, url: str) -> str:
        self.urls.append(url)
        return f"content of {url}"


class StubRankedSearch:
    def __init__(self, response: WebSearchResponse) -> None:
        self.response = response
        self.queries: list[str] = []

    async def search(self, query: str) -> WebSearchResponse:
        self.queries.append(query)
        return self.response


def category_in_prompt(prompt: str):
    """The category a classifier prompt asks about."""
    for c in classifiable_categories():
        if f"classification: {c.value}?" in prompt:
            return c
    raise AssertionError(f"no category in prompt: {prompt!r}")


def make_completion(content: str | None = None, tool_calls: list | None = None) -> SimpleNamespace:
    """Shape of an openai ChatCompletion as far as the code under test reads it."""
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeCompletions:
    """Stands in for AsyncOpenAI().chat.completions; replays queued responses."""

    def __init__(self, responses: list[Any]) -> None:
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []
        self.with_raw_response = SimpleNamespace(create=self._create_raw)

    async def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        return self.responses.pop(0)

    async def _create_raw(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        return SimpleNamespace(text=self.responses.pop(0))


def fake_openai(responses: list[Any]) -> SimpleNamespace:
    return SimpleNamespace(chat=SimpleNamespace(completions=FakeCompletions(responses)))


@pytest.fixture
def five_pages() -> WebSearchResponse:
    return WebSearchResponse(
        original_query="is garlic high fodmap",
        pages=[
            WebPage(url=f"https://site{i}.example.com/page", snippet=f"snippet {i}", name=f"Page {i}")
            for i in range(1, 6)
        ],
    )
