"""Chutes AI provider: current-period quota usage.

Usage and quota limits live behind two endpoints which are fetched in
parallel; both must succeed.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from pydantic import BaseModel

from formatting import (
    HIGH_USAGE_THRESHOLD,
    calc_remain_percent,
    create_progress_bar,
    format_duration,
    format_number,
    mask_string,
    safe_max,
)
from i18n import Locale
from providers.base import ApiKeyCredential, ProviderConfig, QueryContext, api_key_from_config, bearer

logger = logging.getLogger(__name__)

CHUTES_QUOTA_USAGE_URL = "https://api.chutes.ai/users/me/quota_usage/me"
CHUTES_QUOTA_LIMITS_URL = "https://api.chutes.ai/users/me/quotas"


class ChutesQuotaUsageItem(BaseModel):
    quotaType: str
    name: str
    used: float
    limit: float
    percentage: float
    # Unix seconds.
    resetAt: Optional[float] = None


class ChutesQuotaUsageResponse(BaseModel):
    currentPeriodUsage: list[ChutesQuotaUsageItem]
    userId: str


class ChutesQuotaLimitItem(BaseModel):
    quotaType: str
    name: str
    limit: float
    unit: Optional[str] = None


class ChutesQuotaLimitsResponse(BaseModel):
    quotas: list[ChutesQuotaLimitItem]
    userId: str


def format_chutes_usage(usage: ChutesQuotaUsageResponse, token: str, locale: Locale) -> str:
    lines = [f"{locale.t('account')} {mask_string(token)} (Chutes AI)", ""]
    items = usage.currentPeriodUsage

    if not items:
        lines.append(locale.t("no_quota_data"))
        return "\n".join(lines)

    for item in items:
        remain_percent = calc_remain_percent(item.percentage)
        lines.append(item.name or item.quotaType)
        lines.append(
            f"{create_progress_bar(remain_percent)} {locale.t('remaining', percent=remain_percent)}"
        )
        lines.append(f"{locale.t('used')}: {format_number(item.used)} / {format_number(item.limit)}")
        if item.resetAt:
            reset_seconds = max(0, int(item.resetAt - time.time()))
            if reset_seconds > 0:
                lines.append(locale.t("reset_in", duration=format_duration(reset_seconds, locale)))
        lines.append("")

    if safe_max(item.percentage for item in items) >= HIGH_USAGE_THRESHOLD:
        lines.append(locale.t("limit_reached"))

    return "\n".join(lines)


def fetch_chutes(credential: ApiKeyCredential, ctx: QueryContext) -> str:
    headers = {**bearer(credential), "Content-Type": "application/json"}
    auth_error = ctx.locale.t("chutes_auth_error")
    usage_request = ctx.descriptor(
        CHUTES_QUOTA_USAGE_URL,
        CONFIG.name,
        shape=ChutesQuotaUsageResponse,
        headers=headers,
        auth_error=auth_error,
    )
    limits_request = ctx.descriptor(
        CHUTES_QUOTA_LIMITS_URL,
        CONFIG.name,
        shape=ChutesQuotaLimitsResponse,
        headers=headers,
        auth_error=auth_error,
    )

    with ThreadPoolExecutor(max_workers=2) as pool:
        usage_future = pool.submit(ctx.execute, usage_request)
        limits_future = pool.submit(ctx.execute, limits_request)
        usage = usage_future.result()
        # The limits are only checked for availability, usage items carry their own limit.
        limits_future.result()

    return format_chutes_usage(usage, credential.key, ctx.locale)


CONFIG = ProviderConfig(
    id="chutes",
    name="Chutes",
    title_key="chutes_title",
    credential=api_key_from_config("chutes", field="token"),
    fetch=fetch_chutes,
)
