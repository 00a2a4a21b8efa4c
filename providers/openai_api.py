"""OpenAI provider: ChatGPT/Codex rate-limit windows via the wham usage API.

Uses the OAuth access token OpenCode stores for the ``openai`` provider.
The account email and ChatGPT account id are read from the token's JWT
payload; the token itself is never refreshed here.
"""

from __future__ import annotations

import base64
import json
import logging
import time
from typing import Optional

from pydantic import BaseModel

from credentials import AuthRecord, CredentialStore
from errors import AuthenticationError
from formatting import calc_remain_percent, create_progress_bar, format_duration, round_half_up
from i18n import Locale
from providers.base import ProviderConfig, QueryContext

logger = logging.getLogger(__name__)

OPENAI_USAGE_URL = "https://chatgpt.com/backend-api/wham/usage"

_PROFILE_CLAIM = "https://api.openai.com/profile"
_AUTH_CLAIM = "https://api.openai.com/auth"


class RateLimitWindow(BaseModel):
    used_percent: float
    limit_window_seconds: float
    reset_after_seconds: float


class RateLimit(BaseModel):
    limit_reached: bool
    primary_window: RateLimitWindow
    secondary_window: Optional[RateLimitWindow] = None


class OpenAIUsage(BaseModel):
    plan_type: str
    rate_limit: Optional[RateLimit] = None


def parse_jwt(token: str) -> dict | None:
    """Decode a JWT payload without verifying it. None if malformed."""
    parts = token.split(".")
    if len(parts) != 3:
        return None
    payload = parts[1].replace("-", "+").replace("_", "/")
    payload += "=" * (-len(payload) % 4)
    try:
        decoded = json.loads(base64.b64decode(payload).decode("utf-8"))
    except (ValueError, UnicodeDecodeError):
        return None
    return decoded if isinstance(decoded, dict) else None


def get_email_from_jwt(token: str) -> str | None:
    payload = parse_jwt(token) or {}
    profile = payload.get(_PROFILE_CLAIM) or {}
    return profile.get("email") if isinstance(profile, dict) else None


def get_account_id_from_jwt(token: str) -> str | None:
    payload = parse_jwt(token) or {}
    auth = payload.get(_AUTH_CLAIM) or {}
    return auth.get("chatgpt_account_id") if isinstance(auth, dict) else None


def format_window_name(seconds: float, locale: Locale) -> str:
    days = round_half_up(seconds / 86400)
    if days >= 1:
        return locale.t("day_limit", n=days)
    return locale.t("hour_limit", n=round_half_up(seconds / 3600))


def format_window(window: RateLimitWindow, locale: Locale) -> list[str]:
    remain_percent = calc_remain_percent(window.used_percent)
    return [
        format_window_name(window.limit_window_seconds, locale),
        f"{create_progress_bar(remain_percent)} {locale.t('remaining', percent=remain_percent)}",
        locale.t("reset_in", duration=format_duration(window.reset_after_seconds, locale)),
    ]


def format_openai_usage(data: OpenAIUsage, email: str | None, locale: Locale) -> str:
    lines = [f"{locale.t('account')}        {email or locale.t('unknown')} ({data.plan_type})", ""]

    rate_limit = data.rate_limit
    if rate_limit is not None:
        lines.extend(format_window(rate_limit.primary_window, locale))
        if rate_limit.secondary_window is not None:
            lines.append("")
            lines.extend(format_window(rate_limit.secondary_window, locale))
        if rate_limit.limit_reached:
            lines.append("")
            lines.append(locale.t("limit_reached"))

    return "\n".join(lines)


def _resolve(store: CredentialStore) -> AuthRecord | None:
    record = store.oauth("openai")
    if record is None or not record.access:
        return None
    return record


def fetch_openai(record: AuthRecord, ctx: QueryContext) -> str:
    # ``expires`` is a millisecond timestamp.
    if record.expires and record.expires < time.time() * 1000:
        raise AuthenticationError(ctx.locale.t("token_expired"))

    headers = {"Authorization": f"Bearer {record.access}"}
    account_id = get_account_id_from_jwt(record.access)
    if account_id:
        headers["ChatGPT-Account-Id"] = account_id

    usage = ctx.execute(
        ctx.descriptor(OPENAI_USAGE_URL, CONFIG.name, shape=OpenAIUsage, headers=headers)
    )
    return format_openai_usage(usage, get_email_from_jwt(record.access), ctx.locale)


CONFIG = ProviderConfig(
    id="openai",
    name="OpenAI",
    title_key="openai_title",
    credential=_resolve,
    fetch=fetch_openai,
)
