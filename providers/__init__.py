"""AI Quota Status: Provider integrations."""

from providers.base import ProviderConfig, QueryContext, QueryResult, QueryStatus, query_provider
from providers import (
    abacus_api,
    anthropic_api,
    chutes_api,
    copilot_api,
    gemini_api,
    google_api,
    groq_api,
    kimi_api,
    minimax_api,
    nanogpt_api,
    openai_api,
    zhipu_api,
)

# Report order.
PROVIDERS = [
    openai_api.CONFIG,
    zhipu_api.ZHIPU_CONFIG,
    zhipu_api.ZAI_CONFIG,
    google_api.CONFIG,
    copilot_api.CONFIG,
    anthropic_api.CONFIG,
    groq_api.CONFIG,
    gemini_api.CONFIG,
    kimi_api.KIMI_CONFIG,
    kimi_api.KIMI_CODE_CONFIG,
    minimax_api.CONFIG,
    abacus_api.CONFIG,
    nanogpt_api.CONFIG,
    chutes_api.CONFIG,
]

__all__ = [
    "ProviderConfig",
    "QueryContext",
    "QueryResult",
    "QueryStatus",
    "query_provider",
    "PROVIDERS",
]
