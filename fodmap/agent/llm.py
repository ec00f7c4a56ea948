"""
Completion gateway: OpenAI chat completions (free text, JSON-schema constrained, tool-calling).
The same AsyncOpenAI client type also talks to OpenAI-compatible providers via base_url.
"""

import json
import logging
from typing import Any

from openai import AsyncOpenAI

from fodmap.core.config import AGENT_MAX_TOKENS, LLM_API_TIMEOUT, OPENAI_LLM_MODEL
from fodmap.core.errors import CompletionError

logger = logging.getLogger(__name__)


def create_openai_client(api_key: str, base_url: str | None = None, timeout: float = LLM_API_TIMEOUT) -> AsyncOpenAI:
    """Build an async OpenAI client; pass base_url for OpenAI-compatible providers."""
    if base_url:
        return AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)
    return AsyncOpenAI(api_key=api_key, timeout=timeout)


def _message_content(response: Any) -> str:
    msg = response.choices[0].message if response.choices else None
    if not msg or not getattr(msg, "content", None):
        return ""
    return (msg.content or "").strip()


def _decode_arguments(raw: Any) -> dict[str, Any]:
    """Tool-call arguments arrive as a JSON string; anything undecodable becomes {}."""
    if isinstance(raw, dict):
        return raw
    try:
        args = json.loads(raw or "{}")
    except (TypeError, json.JSONDecodeError):
        return {}
    return args if isinstance(args, dict) else {}


def _tool_calls(message: Any) -> list[dict[str, Any]]:
    """Flatten the SDK tool-call objects into {id, name, arguments} dicts."""
    calls = []
    for tc in getattr(message, "tool_calls", None) or []:
        fn = getattr(tc, "function", None)
        if fn is None:
            continue
        calls.append(
            {
                "id": getattr(tc, "id", None) or "",
                "name": getattr(fn, "name", None) or "",
                "arguments": _decode_arguments(getattr(fn, "arguments", None)),
            }
        )
    return calls


class ChatCompletionClient:
    """Thin async wrapper over chat.completions for prompt -> text and prompt + schema -> dict."""

    def __init__(self, client: AsyncOpenAI, model: str = OPENAI_LLM_MODEL) -> None:
        self._client = client
        self.model = model

    async def complete(self, prompt: str) -> str:
        """Free-text completion for a single user prompt. Returns the stripped answer ("" if none)."""
        logger.info("[llm:complete] IN  prompt_len=%d", len(prompt))
        logger.debug("[llm:complete] prompt_sample=%r", prompt[:500])
        response = await self._client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
        )
        out = _message_content(response)
        logger.info("[llm:complete] OUT response_len=%d", len(out))
        return out

    async def complete_structured(
        self,
        prompt: str,
        schema: dict[str, Any],
        name: str = "structured_output",
    ) -> dict[str, Any]:
        """
        Completion constrained to a JSON schema. Returns the decoded JSON object.
        Raises CompletionError when the model returns nothing or something that is not a JSON object.
        """
        logger.info("[llm:complete_structured] IN  prompt_len=%d schema=%s", len(prompt), name)
        response = await self._client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            response_format={
                "type": "json_schema",
                "json_schema": {"name": name, "schema": schema},
            },
        )
        out = _message_content(response)
        if not out:
            raise CompletionError(f"Empty structured completion for schema {name!r}")
        try:
            data = json.loads(out)
        except json.JSONDecodeError as e:
            raise CompletionError(f"Structured completion is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise CompletionError(f"Structured completion is not a JSON object: {type(data).__name__}")
        logger.info("[llm:complete_structured] OUT keys=%s", sorted(data))
        return data

    async def chat_with_tools(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
        max_tokens: int = AGENT_MAX_TOKENS,
    ) -> tuple[str | None, list[dict[str, Any]] | None]:
        """
        Chat completion with tools. Returns (content, tool_calls).
        If tool_calls is non-empty the caller executes them and calls again with the tool results;
        content without tool_calls is the final answer.
        """
        response = await self._client.chat.completions.create(
            model=self.model,
            messages=messages,
            tools=tools,
            max_tokens=max_tokens,
        )
        if not response.choices:
            return None, None
        content = _message_content(response) or None
        tool_calls = _tool_calls(response.choices[0].message)
        if tool_calls:
            logger.info("[llm:chat_with_tools] OUT tool_calls=%s", [t["name"] for t in tool_calls])
        if content:
            logger.info("[llm:chat_with_tools] OUT content_len=%d", len(content))
        return content, tool_calls if tool_calls else None
