"""Groq provider: request and token rate limits from the models endpoint headers."""

from __future__ import annotations

import re
from typing import Optional

import requests
from pydantic import BaseModel

from formatting import format_duration, format_number, mask_string
from i18n import Locale
from providers.base import ProviderConfig, api_key_from_auth, bearer, header_int


_DURATION = re.compile(r"^(?:(?P<h>\d+)h)?(?:(?P<m>\d+)m)?(?:(?P<s>[\d.]+)s)?$")


def parse_reset_duration(value: str | None) -> int | None:
    """Whole seconds in a Groq reset header such as ``"2m59.56s"`` or ``"7.66s"``."""
    if not value:
        return None
    match = _DURATION.match(value.strip())
    if not match or not any(match.groupdict().values()):
        return None
    hours = int(match.group("h") or 0)
    minutes = int(match.group("m") or 0)
    seconds = float(match.group("s") or 0)
    return int(hours * 3600 + minutes * 60 + seconds)


class GroqRateLimits(BaseModel):
    request_limit: int = 0
    requests_remaining: int = 0
    request_reset_seconds: int = 0
    token_limit: Optional[int] = None
    tokens_remaining: Optional[int] = None
    token_reset_seconds: Optional[int] = None


def parse_rate_limit_headers(response: requests.Response) -> dict | None:
    headers = response.headers
    request_limit = header_int(headers, "x-ratelimit-limit-requests")
    requests_remaining = header_int(headers, "x-ratelimit-remaining-requests")
    token_limit = header_int(headers, "x-ratelimit-limit-tokens")
    tokens_remaining = header_int(headers, "x-ratelimit-remaining-tokens")

    if all(v is None for v in (request_limit, requests_remaining, token_limit, tokens_remaining)):
        return None

    return {
        "request_limit": request_limit or 0,
        "requests_remaining": requests_remaining or 0,
        "request_reset_seconds": parse_reset_duration(headers.get("x-ratelimit-reset-requests")) or 0,
        "token_limit": token_limit,
        "tokens_remaining": tokens_remaining,
        "token_reset_seconds": parse_reset_duration(headers.get("x-ratelimit-reset-tokens")),
    }


def format_groq_usage(limits: GroqRateLimits | None, api_key: str, locale: Locale) -> str:
    lines = [f"{locale.t('account')} {mask_string(api_key)} (Groq)", ""]

    if limits is None:
        lines.append(locale.t("no_quota_data"))
        return "\n".join(lines)

    lines.append(locale.t("rate_limit_title"))
    lines.append("")
    of_limit = locale.t(
        "of_limit",
        remaining=format_number(limits.requests_remaining),
        limit=format_number(limits.request_limit),
    )
    lines.append(f"{locale.t('groq_requests_remaining')}: {of_limit}")
    if limits.request_reset_seconds > 0:
        lines.append(
            locale.t("reset_in", duration=format_duration(limits.request_reset_seconds, locale))
        )

    if limits.token_limit and limits.tokens_remaining is not None:
        lines.append("")
        of_limit = locale.t(
            "of_limit",
            remaining=format_number(limits.tokens_remaining),
            limit=format_number(limits.token_limit),
        )
        lines.append(f"{locale.t('groq_tokens_remaining')}: {of_limit}")
        if limits.token_reset_seconds and limits.token_reset_seconds > 0:
            lines.append(
                locale.t("reset_in", duration=format_duration(limits.token_reset_seconds, locale))
            )

    lines.append("")
    lines.append(locale.t("groq_rate_limit_note"))
    return "\n".join(lines)


CONFIG = ProviderConfig(
    id="groq",
    name="Groq",
    title_key="groq_title",
    credential=api_key_from_auth("groq"),
    base_url="https://api.groq.com",
    endpoint="/openai/v1/models",
    auth_header=bearer,
    schema=Optional[GroqRateLimits],
    decode=parse_rate_limit_headers,
    transform=lambda data, cred, locale: format_groq_usage(data, cred.key, locale),
)
