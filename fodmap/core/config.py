"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. Keeps the rest of the app decoupled from how config is sourced.
"""

import os

from dotenv import load_dotenv

from fodmap.core.errors import ConfigurationError

load_dotenv()

# Bing Web Search (ranked pages)
BING_API_KEY: str = os.getenv("BING_API_KEY", "").strip()
BING_ENDPOINT: str = (
    os.getenv("BING_ENDPOINT", "https://api.bing.microsoft.com").strip()
    or "https://api.bing.microsoft.com"
)

# OpenAI (completions, structured classification, tool-calling chat)
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "").strip()
OPENAI_LLM_MODEL: str = (
    os.getenv("OPENAI_LLM_MODEL", "gpt-4o-mini").strip() or "gpt-4o-mini"
)

# Perplexity (search + summarize with citations). OpenAI-compatible API.
PERPLEXITY_API_KEY: str = os.getenv("PERPLEXITY_API_KEY", "").strip()
PERPLEXITY_BASE_URL: str = (
    os.getenv("PERPLEXITY_BASE_URL", "https://api.perplexity.ai").strip()
    or "https://api.perplexity.ai"
)
PERPLEXITY_MODEL: str = os.getenv("PERPLEXITY_MODEL", "sonar").strip() or "sonar"

_LOG_LEVELS: frozenset[str] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def _log_level(value: str | None) -> str:
    """Normalize a level name; unknown or empty names fall back to INFO."""
    name = (value or "").strip().upper()
    return name if name in _LOG_LEVELS else "INFO"


LOG_LEVEL: str = _log_level(os.getenv("LOG_LEVEL"))

# API timeouts (seconds)
SEARCH_API_TIMEOUT: float = 30.0
LLM_API_TIMEOUT: float = 60.0
PAGE_FETCH_TIMEOUT: float = 15.0

# Web research pipeline: number of ranked pages read per query
WEB_RESEARCH_TOP_N: int = 3

# Tool-calling chat loop
MAX_AGENTIC_ROUNDS: int = 6
AGENT_MAX_TOKENS: int = 1024

DEMO_QUESTION: str = "Is chocolate a FODMAP?"


def require_api_keys() -> dict[str, str]:
    """
    Return the three required API keys by env name.
    Raises ConfigurationError naming every key that is missing; called once at startup.
    """
    keys = {
        "BING_API_KEY": BING_API_KEY,
        "OPENAI_API_KEY": OPENAI_API_KEY,
        "PERPLEXITY_API_KEY": PERPLEXITY_API_KEY,
    }
    missing = [name for name, value in keys.items() if not value]
    if missing:
        raise ConfigurationError(missing)
    return keys
