"""
Agent tools: definitions and execution for tool-calling (agentic) mode.

Tools: research_food_sensitivity (per-category FODMAP classification), search_and_summarize
(cited web answer for a free-form question), web_research (page-by-page answers + synthesis).
"""

import logging
from typing import Any

from fodmap.core.config import WEB_RESEARCH_TOP_N
from fodmap.services.classifier import SensitivityClassifier
from fodmap.services.search_agent import SearchReasoningAgent
from fodmap.services.web_search import WebResearchPipeline

logger = logging.getLogger(__name__)

# OpenAI function-calling format: list of tool definitions
AGENT_TOOLS = [
    {
        "type": "function",
        "function": {
            "name": "research_food_sensitivity",
            "description": "Research food sensitivities for a given food name. Classifies the food against each FODMAP category (fructans, oligosaccharides, disaccharides, monosaccharides, polyols) plus dairy and gluten, and returns the intolerance levels found with their citations.",
            "parameters": {
                "type": "object",
                "properties": {
                    "food_name": {
                        "type": "string",
                        "description": "The name of the food being researched (e.g. chocolate, garlic)",
                    }
                },
                "required": ["food_name"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "search_and_summarize",
            "description": "Search the web for a question and return a short cited summary. Use for follow-up questions the sensitivity research does not cover.",
            "parameters": {
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Search query or natural language question",
                    }
                },
                "required": ["query"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "web_research",
            "description": "Run a web search, read the top ranked pages, answer the question from each page, and return a synthesis with one citation per page. Slower than search_and_summarize; use when page-level sources are needed.",
            "parameters": {
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Question to research on the web",
                    },
                    "top_n": {
                        "type": "integer",
                        "description": "Number of top ranked pages to read (default 3)",
                    },
                },
                "required": ["query"],
            },
        },
    },
]


def _text_arg(args: dict[str, Any], key: str) -> str:
    """Stripped string argument; "" when missing or not a string."""
    value = args.get(key)
    return value.strip() if isinstance(value, str) else ""


class ToolExecutor:
    """Runs agent tools against the research services. Results are strings for the LLM."""

    def __init__(
        self,
        classifier: SensitivityClassifier,
        search_agent: SearchReasoningAgent,
        web_research: WebResearchPipeline,
    ) -> None:
        self._classifier = classifier
        self._search_agent = search_agent
        self._web_research = web_research

    async def execute_tool(self, name: str, arguments: dict[str, Any]) -> str:
        """
        Execute a tool by name with the given arguments. Returns a string result for the LLM.
        """
        args = arguments or {}
        logger.info("[tools] execute_tool name=%r arguments=%r", name, args)

        if name == "research_food_sensitivity":
            food_name = _text_arg(args, "food_name")
            if not food_name:
                return "Error: food_name is required."
            result = await self._classifier.research_food_sensitivity(food_name)
            return result.model_dump_json(by_alias=True)

        if name == "search_and_summarize":
            query = _text_arg(args, "query")
            if not query:
                return "Error: query is required."
            result = await self._search_agent.search_and_summarize(query)
            return str(result)

        if name == "web_research":
            query = _text_arg(args, "query")
            if not query:
                return "Error: query is required."
            raw_top_n = args.get("top_n")
            try:
                top_n = WEB_RESEARCH_TOP_N if raw_top_n is None else int(raw_top_n)
            except (TypeError, ValueError):
                return "Error: top_n must be an integer."
            if top_n < 1:
                return "Error: top_n must be at least 1."
            result = await self._web_research.research(query, top_n)
            return str(result)

        return f"Unknown tool: {name}"
