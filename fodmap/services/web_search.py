"""
Web research: ranked web search (Bing), page fetch, and a per-page question answering pipeline.

Pipeline: search → for each of the top N pages (sequentially): fetch text → ask the LLM the
original query against that page → yield (answer, page url). Then synthesize the answers.
Errors are not isolated per page: the first failure ends the sequence for its consumer.
"""

import logging
from collections.abc import AsyncIterator
from typing import Any, Protocol

import httpx

from fodmap.core.config import BING_ENDPOINT, SEARCH_API_TIMEOUT, WEB_RESEARCH_TOP_N
from fodmap.core.errors import SearchError
from fodmap.schemas.search import CitedWebResponse, CitedWebResponses, WebPage, WebSearchResponse

logger = logging.getLogger(__name__)

BING_SEARCH_PATH = "/v7.0/search"


def parse_bing_response(query: str, data: dict[str, Any]) -> WebSearchResponse:
    """Map a Bing v7 search payload to WebSearchResponse. Pages without a url are skipped."""
    context = data.get("queryContext") or {}
    original_query = (context.get("originalQuery") or "").strip() or query
    values = (data.get("webPages") or {}).get("value") or []
    pages = []
    for v in values:
        if not isinstance(v, dict):
            continue
        url = (v.get("url") or "").strip()
        if not url:
            continue
        pages.append(WebPage(url=url, snippet=(v.get("snippet") or "").strip(), name=(v.get("name") or "").strip()))
    return WebSearchResponse(original_query=original_query, pages=pages)


class BingWebSearchClient:
    """Ranked-results search gateway."""

    def __init__(self, http: httpx.AsyncClient, api_key: str, endpoint: str = BING_ENDPOINT) -> None:
        self._http = http
        self._api_key = api_key
        self._url = endpoint.rstrip("/") + BING_SEARCH_PATH

    async def search(self, query: str) -> WebSearchResponse:
        logger.info("[bing:search] IN  query=%r", query)
        response = await self._http.get(
            self._url,
            params={"q": query},
            headers={"Ocp-Apim-Subscription-Key": self._api_key},
            timeout=SEARCH_API_TIMEOUT,
        )
        if response.status_code != 200:
            logger.warning("[bing:search] error %s: %s", response.status_code, response.text[:200])
            raise SearchError(f"Web search returned {response.status_code}.")
        result = parse_bing_response(query, response.json())
        logger.info("[bing:search] OUT pages=%d", len(result.pages))
        return result


class PageFetcher:
    """Plain HTTP GET of a page body as text."""

    def __init__(self, http: httpx.AsyncClient) -> None:
        self._http = http

    async def fetch(self, url: str) -> str:
        response = await self._http.get(url, follow_redirects=True)
        response.raise_for_status()
        logger.info("[fetch] OUT url=%s text_len=%d", url, len(response.text))
        return response.text


class RankedSearch(Protocol):
    async def search(self, query: str) -> WebSearchResponse: ...


class Fetcher(Protocol):
    async def fetch(self, url: str) -> str: ...


class Completer(Protocol):
    async def complete(self, prompt: str) -> str: ...


def _page_prompt(page_content: str, original_query: str) -> str:
    return (
        "Given the following content:\n"
        f"{page_content}\n\n"
        f"What is the answer to the question: {original_query}?\n"
        "Provide your response as a brief summary related to the question."
    )


class WebResearchPipeline:
    def __init__(self, search_client: RankedSearch, fetcher: Fetcher, llm: Completer) -> None:
        self._search_client = search_client
        self._fetcher = fetcher
        self._llm = llm

    async def search(self, query: str) -> WebSearchResponse:
        logger.info("[web_research:search] IN  query=%r", query)
        result = await self._search_client.search(query)
        logger.info("[web_research:search] OUT pages=%d", len(result.pages))
        return result

    async def get_web_responses(
        self,
        search_response: WebSearchResponse,
        top_n: int = WEB_RESEARCH_TOP_N,
    ) -> AsyncIterator[CitedWebResponse]:
        """
        Yield one cited answer per page among the top_n ranked pages, in rank order.
        Each page is fetched and answered only when the consumer asks for the next element.
        """
        original_query = search_response.original_query
        pages = search_response.pages[: max(top_n, 0)]
        logger.info("[web_research:get_web_responses] IN  query=%r pages=%d", original_query, len(pages))
        for page in pages:
            url = str(page.url)
            page_content = await self._fetcher.fetch(url)
            logger.info("[web_research:get_web_responses] requesting answer url=%s", url)
            answer = await self._llm.complete(_page_prompt(page_content, original_query))
            logger.info("[web_research:get_web_responses] OUT url=%s answer_len=%d", url, len(answer))
            yield CitedWebResponse(text=answer, citation=page.url)

    async def summarize_web_responses(self, responses: list[CitedWebResponse]) -> CitedWebResponses:
        logger.info("[web_research:summarize] IN  responses=%d", len(responses))
        aggregate = "\n".join(r.text for r in responses)
        prompt = (
            f"Given the following web responses:\n{aggregate}\n\n"
            "Summarize the responses in a short summary."
        )
        summary = await self._llm.complete(prompt)
        logger.info("[web_research:summarize] OUT summary_len=%d", len(summary))
        return CitedWebResponses(summary=summary, responses=list(responses))

    async def research(self, query: str, top_n: int = WEB_RESEARCH_TOP_N) -> CitedWebResponses:
        """Search, answer the query from each top page, and synthesize the answers."""
        search_response = await self.search(query)
        responses = [r async for r in self.get_web_responses(search_response, top_n)]
        return await self.summarize_web_responses(responses)
