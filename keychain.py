"""OS keychain lookup for provider API keys.

Uses the keyring library so API keys can live in the system keychain
instead of the plain-text credential files.
"""

from __future__ import annotations

import logging

import keyring

logger = logging.getLogger(__name__)

SERVICE_NAME = "ai-quota-status"

# Map provider IDs to keychain account names
_ACCOUNT_MAP = {
    "zhipuai-coding-plan": "zhipu-api-key",
    "zai-coding-plan": "zai-api-key",
    "nano-gpt": "nanogpt-api-key",
}


def account_name(provider_id: str) -> str:
    return _ACCOUNT_MAP.get(provider_id, f"{provider_id}-api-key")


def get_api_key(provider_id: str) -> str | None:
    """Retrieve an API key from the keychain.

    Returns None if no key is stored for this provider or the keychain
    backend is unavailable.
    """
    try:
        return keyring.get_password(SERVICE_NAME, account_name(provider_id))
    except Exception as e:
        logger.debug("Keychain lookup for %s failed: %s", provider_id, e)
        return None
