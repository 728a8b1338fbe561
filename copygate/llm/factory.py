"""
LLM Provider: factory.
"""

from copygate.llm import LLMProvider


def get_provider(provider_name: str = "gemini") -> LLMProvider:
    """Return the configured LLM provider."""
    if provider_name == "gemini":
        from copygate.llm.gemini import GeminiProvider
        return GeminiProvider()
    else:
        raise ValueError(f"Unknown LLM provider: {provider_name}")
