"""
Codemode LLM Providers

Model backends for the agent loop, behind one interface:

- OpenRouter (default) and OpenAI via OpenAIProvider
- Anthropic via ClaudeProvider

Usage:
    from codemode.providers import create_provider

    provider = create_provider("openrouter", api_key="...")
    response = await provider.complete([{"role": "user", "content": "hi"}])
"""

from codemode.providers.base import LLMProvider, LLMResponse, ProviderConfig, ToolCall
from codemode.providers.claude import DEFAULT_CLAUDE_MODEL, ClaudeProvider
from codemode.providers.openai import DEFAULT_OPENAI_MODEL, OPENROUTER_BASE_URL, OpenAIProvider

__all__ = [
    "ClaudeProvider",
    "LLMProvider",
    "LLMResponse",
    "OPENROUTER_BASE_URL",
    "OPENROUTER_DEFAULT_MODEL",
    "OpenAIProvider",
    "ProviderConfig",
    "ToolCall",
    "create_provider",
]

OPENROUTER_DEFAULT_MODEL = "x-ai/grok-code-fast-1"


def create_provider(
    name: str = "openrouter",
    *,
    api_key: str | None = None,
    model: str | None = None,
    base_url: str | None = None,
) -> LLMProvider:
    """Build a provider by name: "openrouter", "claude" (or "anthropic"), "openai"."""
    match name.lower():
        case "openrouter":
            config = ProviderConfig(
                api_key=api_key,
                model=model or OPENROUTER_DEFAULT_MODEL,
                base_url=base_url or OPENROUTER_BASE_URL,
            )
            return OpenAIProvider(config)
        case "claude" | "anthropic":
            return ClaudeProvider(ProviderConfig(api_key=api_key, model=model or DEFAULT_CLAUDE_MODEL, base_url=base_url))
        case "openai":
            return OpenAIProvider(ProviderConfig(api_key=api_key, model=model or DEFAULT_OPENAI_MODEL, base_url=base_url))
    raise ValueError(f"Unknown provider: {name}. Supported: openrouter, claude, openai")
