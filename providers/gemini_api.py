"""Google Gemini (AI Studio) provider: quota headers from the models endpoint."""

from __future__ import annotations

import time
from typing import Optional

import requests
from pydantic import BaseModel

from formatting import format_number, mask_string
from i18n import Locale
from providers.base import ProviderConfig, api_key_from_auth, header_int


class GeminiRateLimits(BaseModel):
    limit: Optional[int] = None
    remaining: Optional[int] = None
    # Absolute Unix seconds, not a countdown.
    reset: Optional[int] = None


def parse_rate_limit_headers(response: requests.Response) -> dict | None:
    limit = header_int(response.headers, "x-ratelimit-limit")
    remaining = header_int(response.headers, "x-ratelimit-remaining")
    if limit is None and remaining is None:
        return None
    return {
        "limit": limit,
        "remaining": remaining,
        "reset": header_int(response.headers, "x-ratelimit-reset"),
    }


def format_reset_time(reset_seconds: int, locale: Locale) -> str:
    """Coarsest single unit: minutes under an hour, hours under a day, else days."""
    if reset_seconds < 3600:
        return locale.t("minutes", n=reset_seconds // 60)
    if reset_seconds < 86400:
        return locale.t("hours", n=reset_seconds // 3600)
    return locale.t("days", n=reset_seconds // 86400)


def format_gemini_usage(limits: GeminiRateLimits | None, api_key: str, locale: Locale) -> str:
    lines = [f"{locale.t('account')} {mask_string(api_key)} (Google Gemini)", ""]
    lines.append(locale.t("rate_limit_title"))
    lines.append("")

    if limits is None:
        lines.append(locale.t("no_quota_data"))
        return "\n".join(lines)

    if limits.limit is not None and limits.remaining is not None:
        of_limit = locale.t(
            "of_limit",
            remaining=format_number(limits.remaining),
            limit=format_number(limits.limit),
        )
        lines.append(f"{locale.t('gemini_quota_remaining')}: {of_limit}")
    elif limits.remaining is not None:
        lines.append(f"{locale.t('gemini_quota_remaining')}: {format_number(limits.remaining)}")
    elif limits.limit is not None:
        lines.append(f"{locale.t('gemini_quota_limit')}: {format_number(limits.limit)}")

    if limits.reset:
        reset_seconds = max(0, limits.reset - int(time.time()))
        if reset_seconds > 0:
            lines.append(locale.t("reset_in", duration=format_reset_time(reset_seconds, locale)))

    lines.append("")
    lines.append(locale.t("gemini_rate_limit_note"))
    return "\n".join(lines)


CONFIG = ProviderConfig(
    id="gemini",
    name="Gemini",
    title_key="gemini_title",
    credential=api_key_from_auth("gemini"),
    base_url="https://generativelanguage.googleapis.com",
    endpoint="/v1beta/models",
    auth_header=lambda cred: {"x-goog-api-key": cred.key},
    schema=Optional[GeminiRateLimits],
    decode=parse_rate_limit_headers,
    transform=lambda data, cred, locale: format_gemini_usage(data, cred.key, locale),
)
