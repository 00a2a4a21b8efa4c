"""Configuration management for AI Quota Status.

Reads settings from ~/.config/ai-quota-status/config.json. The file is
optional; missing keys fall back to DEFAULT_CONFIG.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = os.path.expanduser("~/.config/ai-quota-status")
DEFAULT_CONFIG_PATH = os.path.join(DEFAULT_CONFIG_DIR, "config.json")


def _opencode_config_dir() -> str:
    if sys.platform == "win32":
        base = os.environ.get("APPDATA") or os.path.join(
            os.path.expanduser("~"), "AppData", "Roaming"
        )
    else:
        base = os.path.join(os.path.expanduser("~"), ".config")
    return os.path.join(base, "opencode")


DEFAULT_CONFIG = {
    "language": "auto",
    "requestTimeoutSeconds": 10,
    "maxRetries": 3,
    "authPath": "~/.local/share/opencode/auth.json",
    "providerConfigPath": os.path.join(_opencode_config_dir(), "mystatus.json"),
    "antigravityAccountsPath": os.path.join(
        _opencode_config_dir(), "antigravity-accounts.json"
    ),
    "copilotQuotaTokenPath": os.path.join(
        _opencode_config_dir(), "copilot-quota-token.json"
    ),
    "useKeychain": True,
    "providers": {},
}

_PATH_KEYS = (
    "authPath",
    "providerConfigPath",
    "antigravityAccountsPath",
    "copilotQuotaTokenPath",
)


def get_config_path() -> str:
    """Return the path to the config file."""
    return os.environ.get("AI_QUOTA_STATUS_CONFIG_PATH", DEFAULT_CONFIG_PATH)


def load_config(config_path: str | None = None) -> dict[str, Any]:
    """Load configuration from disk, merging with defaults.

    Handles bad JSON gracefully by falling back to defaults.
    """
    path = config_path or get_config_path()
    config = _deep_copy_dict(DEFAULT_CONFIG)

    if os.path.exists(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                user_config = json.load(f)
            if isinstance(user_config, dict):
                config = _deep_merge(config, user_config)
            else:
                logger.warning("Config file is not a JSON object, using defaults.")
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Failed to load config from %s: %s, using defaults.", path, e)

    return _validate_config(config)


def _validate_config(config: dict[str, Any]) -> dict[str, Any]:
    """Validate and coerce config values to correct types/ranges."""
    if config.get("language") not in ("auto", "en", "zh"):
        config["language"] = "auto"

    try:
        timeout = float(config.get("requestTimeoutSeconds", 10))
    except (TypeError, ValueError):
        timeout = 10.0
    config["requestTimeoutSeconds"] = max(1.0, min(timeout, 120.0))

    try:
        retries = int(config.get("maxRetries", 3))
    except (TypeError, ValueError):
        retries = 3
    config["maxRetries"] = max(0, min(retries, 10))

    for key in _PATH_KEYS:
        value = config.get(key)
        if not isinstance(value, str) or not value.strip():
            config[key] = DEFAULT_CONFIG[key]

    config["useKeychain"] = bool(config.get("useKeychain", True))

    providers = config.get("providers", {})
    if not isinstance(providers, dict):
        config["providers"] = {}
    else:
        for pid, pconf in list(providers.items()):
            if not isinstance(pconf, dict):
                providers[pid] = {"enabled": True}
                continue
            pconf["enabled"] = bool(pconf.get("enabled", True))

    return config


def get_language(config: dict[str, Any]) -> str:
    """Get the report language setting: auto, en or zh."""
    return config.get("language", "auto")


def get_request_timeout(config: dict[str, Any]) -> float:
    """Get the per-attempt request timeout in seconds."""
    return config.get("requestTimeoutSeconds", 10)


def get_max_retries(config: dict[str, Any]) -> int:
    """Get how many times a failed request is retried."""
    return config.get("maxRetries", 3)


def get_path(config: dict[str, Any], key: str) -> str:
    """Get one of the credential file paths, expanded."""
    return os.path.expanduser(config.get(key) or DEFAULT_CONFIG[key])


def use_keychain(config: dict[str, Any]) -> bool:
    return config.get("useKeychain", True)


def is_provider_enabled(config: dict[str, Any], provider_id: str) -> bool:
    """Providers are enabled unless the config turns them off."""
    return config["providers"].get(provider_id, {}).get("enabled", True)


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge override into base."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _deep_copy_dict(d: dict) -> dict:
    """Simple deep copy for nested dicts/lists."""
    return json.loads(json.dumps(d))
