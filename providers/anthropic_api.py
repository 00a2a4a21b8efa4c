"""Anthropic provider: API-key rate limits read from the models endpoint headers."""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Optional

import requests
from pydantic import BaseModel

from formatting import format_duration, format_number, mask_string
from i18n import Locale
from providers.base import ProviderConfig, api_key_from_auth, header_int

logger = logging.getLogger(__name__)

ANTHROPIC_API_BASE = "https://api.anthropic.com"
ANTHROPIC_VERSION = "2023-06-01"


class AnthropicRateLimits(BaseModel):
    requests_remaining: int = 0
    tokens_remaining: int = 0
    # Unix seconds.
    tokens_reset: Optional[int] = None


def _parse_reset(value: str | None) -> int | None:
    """Reset header as Unix seconds; accepts an RFC 3339 timestamp or a number."""
    if not value:
        return None
    if value.strip().isdigit():
        return int(value)
    try:
        return int(datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp())
    except ValueError:
        logger.debug("Unparseable anthropic-ratelimit-tokens-reset: %r", value)
        return None


def parse_rate_limit_headers(response: requests.Response) -> dict | None:
    headers = response.headers
    requests_remaining = header_int(headers, "anthropic-ratelimit-requests-remaining")
    tokens_remaining = header_int(headers, "anthropic-ratelimit-tokens-remaining")
    if requests_remaining is None and tokens_remaining is None:
        return None
    return {
        "requests_remaining": requests_remaining or 0,
        "tokens_remaining": tokens_remaining or 0,
        "tokens_reset": _parse_reset(headers.get("anthropic-ratelimit-tokens-reset")),
    }


def format_anthropic_usage(
    limits: AnthropicRateLimits | None, api_key: str, locale: Locale
) -> str:
    lines = [f"{locale.t('account')} {mask_string(api_key)} (Anthropic Claude)", ""]

    if limits is None:
        lines.append(locale.t("no_quota_data"))
        return "\n".join(lines)

    lines.append(locale.t("rate_limit_title"))
    lines.append("")
    lines.append(f"{locale.t('requests_remaining')}: {format_number(limits.requests_remaining)}")
    lines.append(f"{locale.t('tokens_remaining')}: {format_number(limits.tokens_remaining)}")

    if limits.tokens_reset:
        reset_seconds = max(0, limits.tokens_reset - int(time.time()))
        if reset_seconds > 0:
            lines.append(locale.t("reset_in", duration=format_duration(reset_seconds, locale)))

    lines.append("")
    lines.append(locale.t("rate_limit_note"))
    return "\n".join(lines)


CONFIG = ProviderConfig(
    id="anthropic",
    name="Anthropic",
    title_key="anthropic_title",
    credential=api_key_from_auth("anthropic"),
    base_url=ANTHROPIC_API_BASE,
    endpoint="/v1/models",
    auth_header=lambda cred: {
        "x-api-key": cred.key,
        "anthropic-version": ANTHROPIC_VERSION,
        "Content-Type": "application/json",
    },
    schema=Optional[AnthropicRateLimits],
    decode=parse_rate_limit_headers,
    transform=lambda data, cred, locale: format_anthropic_usage(data, cred.key, locale),
    auth_error_key="anthropic_auth_error",
)
