"""Read-only access to locally stored provider credentials.

Four files are consulted, all optional:

- the OpenCode auth file (provider key -> OAuth or API-key record)
- the provider config file for platforms OpenCode does not manage
- the Antigravity accounts file
- the Copilot personal-access-token file

A missing, unreadable or malformed file reads as empty. Nothing here
raises for absent credentials; adapters treat them as "not configured".
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Literal, Optional

import pydantic
from pydantic import BaseModel, ConfigDict

import config as app_config
import keychain

logger = logging.getLogger(__name__)


class AuthRecord(BaseModel):
    """One entry of the auth file: an OAuth token set or an API key."""

    model_config = ConfigDict(extra="allow")

    type: str
    access: Optional[str] = None
    refresh: Optional[str] = None
    expires: Optional[float] = None
    key: Optional[str] = None


class ProviderSettings(BaseModel):
    """One entry of the provider config file."""

    model_config = ConfigDict(extra="allow")

    key: Optional[str] = None
    token: Optional[str] = None
    groupId: Optional[str] = None


class AntigravityAccount(BaseModel):
    email: Optional[str] = None
    refreshToken: str
    projectId: Optional[str] = None
    managedProjectId: Optional[str] = None
    addedAt: float = 0
    lastUsed: float = 0
    rateLimitResetTimes: Optional[dict[str, float]] = None


CopilotTier = Literal["free", "pro", "pro+", "business", "enterprise"]


class CopilotQuotaConfig(BaseModel):
    token: str
    username: str
    tier: CopilotTier


def read_json_file(path: str) -> Any:
    """Return parsed JSON from ``path``, or None if it is missing or invalid."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        logger.debug("Credential file %s not found.", path)
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
        logger.warning("Failed to read %s: %s", path, e)
    return None


def _parse_records(data: Any, model: type[BaseModel], path: str) -> dict[str, Any]:
    records = {}
    if not isinstance(data, dict):
        return records
    for name, raw in data.items():
        try:
            records[name] = model.model_validate(raw)
        except pydantic.ValidationError as e:
            logger.debug("Skipping malformed entry %r in %s: %s", name, path, e)
    return records


def load_auth_file(path: str) -> dict[str, AuthRecord]:
    return _parse_records(read_json_file(path), AuthRecord, path)


def load_provider_config(path: str) -> dict[str, ProviderSettings]:
    return _parse_records(read_json_file(path), ProviderSettings, path)


def load_antigravity_accounts(path: str) -> list[AntigravityAccount]:
    data = read_json_file(path)
    if not isinstance(data, dict) or not isinstance(data.get("accounts"), list):
        return []
    accounts = []
    for raw in data["accounts"]:
        try:
            accounts.append(AntigravityAccount.model_validate(raw))
        except pydantic.ValidationError as e:
            logger.debug("Skipping malformed Antigravity account: %s", e)
    return accounts


def load_copilot_quota_config(path: str) -> CopilotQuotaConfig | None:
    data = read_json_file(path)
    if data is None:
        return None
    try:
        return CopilotQuotaConfig.model_validate(data)
    except pydantic.ValidationError as e:
        logger.warning("Ignoring invalid Copilot token file %s: %s", path, e)
        return None


@dataclass
class CredentialStore:
    """All credentials for one invocation, loaded once and shared read-only."""

    auth: dict[str, AuthRecord] = field(default_factory=dict)
    provider_config: dict[str, ProviderSettings] = field(default_factory=dict)
    antigravity_accounts: list[AntigravityAccount] = field(default_factory=list)
    copilot_quota: CopilotQuotaConfig | None = None
    use_keychain: bool = False

    @classmethod
    def load(cls, cfg: dict[str, Any]) -> "CredentialStore":
        return cls(
            auth=load_auth_file(app_config.get_path(cfg, "authPath")),
            provider_config=load_provider_config(
                app_config.get_path(cfg, "providerConfigPath")
            ),
            antigravity_accounts=load_antigravity_accounts(
                app_config.get_path(cfg, "antigravityAccountsPath")
            ),
            copilot_quota=load_copilot_quota_config(
                app_config.get_path(cfg, "copilotQuotaTokenPath")
            ),
            use_keychain=app_config.use_keychain(cfg),
        )

    def oauth(self, name: str) -> AuthRecord | None:
        """OAuth record for ``name``, or None if absent or of another type."""
        record = self.auth.get(name)
        if record is None or record.type != "oauth":
            return None
        return record

    def api_key(self, name: str) -> str | None:
        """API key from the auth file, falling back to the keychain."""
        record = self.auth.get(name)
        if record is not None and record.type == "api" and record.key:
            return record.key
        if record is not None and record.type != "api":
            return None
        return self._keychain_key(name)

    def provider_settings(self, name: str) -> ProviderSettings | None:
        """Provider config entry, falling back to a keychain key."""
        settings = self.provider_config.get(name)
        if settings is not None:
            return settings
        key = self._keychain_key(name)
        if key:
            return ProviderSettings(key=key, token=key)
        return None

    def _keychain_key(self, name: str) -> str | None:
        if not self.use_keychain:
            return None
        return keychain.get_api_key(name)
