"""MiniMax provider: request rate limits from the models endpoint headers.

The international endpoint is tried first; any failure there falls back to
the mainland one.
"""

from __future__ import annotations

import time
from typing import Optional

import requests
from pydantic import BaseModel

from formatting import format_duration, format_number, mask_string
from i18n import Locale
from providers.base import ApiKeyCredential, ProviderConfig, api_key_from_config, bearer, header_int

MINIMAX_MODELS_URL_FALLBACK = "https://api.minimax.chat/v1/models"


class MinimaxRateLimits(BaseModel):
    limit: int
    remaining: int
    reset: Optional[int] = None


def parse_rate_limit_headers(response: requests.Response) -> dict | None:
    limit = header_int(response.headers, "x-ratelimit-limit")
    remaining = header_int(response.headers, "x-ratelimit-remaining")
    if limit is None and remaining is None:
        return None
    return {
        "limit": limit or 0,
        "remaining": remaining or 0,
        "reset": header_int(response.headers, "x-ratelimit-reset"),
    }


def format_minimax_usage(
    limits: MinimaxRateLimits | None, api_key: str, has_group: bool, locale: Locale
) -> str:
    label = "(MiniMax - Group)" if has_group else "(MiniMax)"
    lines = [f"{locale.t('account')} {mask_string(api_key)} {label}", ""]

    if limits is None:
        lines.append(locale.t("no_quota_data"))
        return "\n".join(lines)

    lines.append(locale.t("rate_limit_title"))
    lines.append("")
    of_limit = locale.t(
        "of_limit", remaining=format_number(limits.remaining), limit=format_number(limits.limit)
    )
    lines.append(f"{locale.t('minimax_requests_remaining')}: {of_limit}")

    if limits.reset:
        reset_seconds = max(0, limits.reset - int(time.time()))
        if reset_seconds > 0:
            lines.append(locale.t("reset_in", duration=format_duration(reset_seconds, locale)))

    lines.append("")
    lines.append(locale.t("minimax_dashboard_note"))
    return "\n".join(lines)


def _auth(credential: ApiKeyCredential) -> dict:
    headers = {**bearer(credential), "Content-Type": "application/json"}
    if credential.group_id:
        headers["X-Group-Id"] = credential.group_id
    return headers


CONFIG = ProviderConfig(
    id="minimax",
    name="MiniMax",
    title_key="minimax_title",
    credential=api_key_from_config("minimax"),
    base_url="https://api.minimax.io",
    endpoint="/v1/models",
    auth_header=_auth,
    schema=Optional[MinimaxRateLimits],
    decode=parse_rate_limit_headers,
    transform=lambda data, cred, locale: format_minimax_usage(
        data, cred.key, bool(cred.group_id), locale
    ),
    fallback_url=MINIMAX_MODELS_URL_FALLBACK,
    auth_error_key="minimax_auth_error",
)
