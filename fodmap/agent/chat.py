"""
Agentic (tool-calling) chat: the LLM answers a question, calling research tools as it sees fit.
"""

import json
import logging
from typing import Any

from fodmap.agent.llm import ChatCompletionClient
from fodmap.agent.tools import AGENT_TOOLS, ToolExecutor
from fodmap.core.config import AGENT_MAX_TOKENS, MAX_AGENTIC_ROUNDS

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a nutrition research assistant specialised in FODMAP and related food sensitivities. "
    "Use research_food_sensitivity when the user asks whether a food is a FODMAP or which sensitivities "
    "it triggers; use search_and_summarize for other questions that need current sources. "
    "Base your answer on the tool results, mention the intolerance levels found, and list the citations. "
    "Do not invoke additional tools after you have gathered what is needed to answer the question."
)

NO_ANSWER = "I couldn't complete the request within the allowed number of tool-calling rounds."


async def run_agent(
    question: str,
    llm: ChatCompletionClient,
    executor: ToolExecutor,
    max_rounds: int = MAX_AGENTIC_ROUNDS,
) -> dict[str, Any]:
    """
    Run the tool-calling loop for one question.
    Returns {"answer": str, "tools_used": list[str]}.
    """
    if not question or not str(question).strip():
        raise ValueError("question is required")
    q = str(question).strip()
    logger.info("[run_agent] START question=%r", q)

    messages: list[dict[str, Any]] = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": q},
    ]
    tools_used: list[str] = []
    for _ in range(max_rounds):
        content, tool_calls = await llm.chat_with_tools(messages, AGENT_TOOLS, max_tokens=AGENT_MAX_TOKENS)
        if not tool_calls:
            logger.info("[run_agent] END tools_used=%s", tools_used)
            return {"answer": content or "", "tools_used": tools_used}
        messages.append(
            {
                "role": "assistant",
                "content": content or "",
                "tool_calls": [
                    {
                        "id": tc["id"],
                        "type": "function",
                        "function": {"name": tc["name"], "arguments": json.dumps(tc.get("arguments") or {})},
                    }
                    for tc in tool_calls
                ],
            }
        )
        for tc in tool_calls:
            name = tc.get("name", "")
            result = await executor.execute_tool(name, tc.get("arguments") or {})
            tools_used.append(name)
            messages.append({"role": "tool", "tool_call_id": tc.get("id", ""), "content": result})
    logger.warning("[run_agent] no final answer after %d rounds", max_rounds)
    return {"answer": NO_ANSWER, "tools_used": tools_used}
