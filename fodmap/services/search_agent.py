"""
Search-and-summarize agent: forwards a query to the summarizing search gateway and logs the round trip.
Errors from the gateway propagate to the caller.
"""

import logging
from typing import Protocol

from fodmap.schemas.search import SearchResult

logger = logging.getLogger(__name__)


class SummarizingSearch(Protocol):
    async def search(self, query: str) -> SearchResult: ...


class SearchReasoningAgent:
    def __init__(self, search_client: SummarizingSearch) -> None:
        self._search_client = search_client

    async def search_and_summarize(self, query: str) -> SearchResult:
        logger.info("[search_agent:search_and_summarize] IN  query=%r", query)
        result = await self._search_client.search(query)
        logger.info(
            "[search_agent:search_and_summarize] OUT query=%r summary_len=%d citations=%d",
            query,
            len(result.summary),
            len(result.citations),
        )
        return result
