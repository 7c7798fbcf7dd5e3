"""
Factories — build providers, the gateway and the embedder from Settings.
"""

from __future__ import annotations

from typing import Optional

from epistemica.config import Settings, settings as default_settings
from epistemica.llm import LLMProvider, ProviderId
from epistemica.llm.embeddings import Embedder


def get_provider(provider_name: str, cfg: Optional[Settings] = None) -> LLMProvider:
    """Returns one configured completion provider."""
    cfg = cfg or default_settings
    provider_id = ProviderId(provider_name)
    if provider_id is ProviderId.ANTHROPIC:
        from epistemica.llm.claude import AnthropicProvider
        return AnthropicProvider(
            api_key=cfg.ANTHROPIC_API_KEY,
            model=cfg.ANTHROPIC_MODEL,
            base_url=cfg.ANTHROPIC_BASE_URL or None,
        )
    if provider_id is ProviderId.OPENAI:
        from epistemica.llm.openai_compat import OpenAIProvider
        return OpenAIProvider(api_key=cfg.OPENAI_API_KEY, model=cfg.OPENAI_MODEL)
    if provider_id is ProviderId.DEEPSEEK:
        from epistemica.llm.openai_compat import DeepSeekProvider
        return DeepSeekProvider(
            api_key=cfg.DEEPSEEK_API_KEY,
            model=cfg.DEEPSEEK_MODEL,
            base_url=cfg.DEEPSEEK_BASE_URL,
        )
    from epistemica.llm.gemini import GeminiProvider
    return GeminiProvider(api_key=cfg.GEMINI_API_KEY, model=cfg.GEMINI_MODEL)


def build_gateway(cfg: Optional[Settings] = None):
    """Gateway over every provider, preferring cfg.LLM_PROVIDER."""
    from epistemica.llm.gateway import CompletionGateway

    cfg = cfg or default_settings
    providers = {p: get_provider(p.value, cfg) for p in ProviderId}
    return CompletionGateway(providers, default_provider=cfg.LLM_PROVIDER)


def get_embedder(cfg: Optional[Settings] = None) -> Embedder:
    """Returns the configured embedding backend."""
    cfg = cfg or default_settings
    if cfg.EMBEDDING_PROVIDER == "gemini":
        from epistemica.llm.embeddings import GeminiEmbedder
        return GeminiEmbedder(api_key=cfg.GEMINI_API_KEY, model=cfg.GEMINI_EMBEDDING_MODEL)
    if cfg.EMBEDDING_PROVIDER == "openai":
        from epistemica.llm.embeddings import OpenAIEmbedder
        return OpenAIEmbedder(api_key=cfg.OPENAI_API_KEY, model=cfg.OPENAI_EMBEDDING_MODEL)
    raise ValueError(f"Unknown embedding provider: {cfg.EMBEDDING_PROVIDER}")
