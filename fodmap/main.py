# Run from project root: python -m fodmap.main

import asyncio
import logging
import sys

import httpx

from fodmap.agent.chat import run_agent
from fodmap.agent.llm import ChatCompletionClient, create_openai_client
from fodmap.agent.tools import ToolExecutor
from fodmap.core.config import (
    BING_ENDPOINT,
    DEMO_QUESTION,
    LOG_LEVEL,
    OPENAI_LLM_MODEL,
    PAGE_FETCH_TIMEOUT,
    PERPLEXITY_BASE_URL,
    PERPLEXITY_MODEL,
    require_api_keys,
)
from fodmap.core.errors import ConfigurationError
from fodmap.services.classifier import SensitivityClassifier
from fodmap.services.perplexity_search import PerplexitySearchClient
from fodmap.services.search_agent import SearchReasoningAgent
from fodmap.services.web_search import BingWebSearchClient, PageFetcher, WebResearchPipeline

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


async def run(question: str, keys: dict[str, str]) -> dict:
    openai_client = create_openai_client(keys["OPENAI_API_KEY"])
    perplexity_client = create_openai_client(keys["PERPLEXITY_API_KEY"], base_url=PERPLEXITY_BASE_URL)
    async with httpx.AsyncClient(timeout=PAGE_FETCH_TIMEOUT) as http:
        llm = ChatCompletionClient(openai_client, model=OPENAI_LLM_MODEL)
        search_agent = SearchReasoningAgent(PerplexitySearchClient(perplexity_client, model=PERPLEXITY_MODEL))
        classifier = SensitivityClassifier(llm, search_agent)
        web_research = WebResearchPipeline(
            BingWebSearchClient(http, keys["BING_API_KEY"], endpoint=BING_ENDPOINT),
            PageFetcher(http),
            llm,
        )
        executor = ToolExecutor(classifier, search_agent, web_research)
        try:
            return await run_agent(question, llm, executor)
        finally:
            await openai_client.close()
            await perplexity_client.close()


def main() -> int:
    try:
        keys = require_api_keys()
    except ConfigurationError as e:
        logger.error("%s", e.message)
        return 1
    try:
        result = asyncio.run(run(DEMO_QUESTION, keys))
    except Exception:
        logger.exception("[main] request failed question=%r", DEMO_QUESTION)
        return 1
    print(result["answer"])
    return 0


if __name__ == "__main__":
    sys.exit(main())
