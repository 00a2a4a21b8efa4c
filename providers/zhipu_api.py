"""Zhipu AI and Z.ai coding-plan quotas.

Both platforms expose the same ``/api/monitor/usage/quota/limit`` endpoint
and take the raw API key in the Authorization header.
"""

from __future__ import annotations

import time
from typing import Literal, Optional

from pydantic import BaseModel

from errors import HttpError, ValidationError
from formatting import (
    HIGH_USAGE_THRESHOLD,
    calc_remain_percent,
    create_progress_bar,
    format_duration,
    format_tokens,
    mask_string,
    safe_max,
)
from i18n import Locale
from providers.base import ApiKeyCredential, ProviderConfig, api_key_from_auth


class UsageLimitItem(BaseModel):
    type: Literal["TIME_LIMIT", "TOKENS_LIMIT"]
    usage: Optional[float] = None
    currentValue: Optional[float] = None
    percentage: float
    # Millisecond timestamp, only sent for TOKENS_LIMIT.
    nextResetTime: Optional[float] = None


class QuotaLimitData(BaseModel):
    limits: list[UsageLimitItem]


class QuotaLimitResponse(BaseModel):
    code: int
    msg: Optional[str] = None
    # Absent when success is false.
    data: Optional[QuotaLimitData] = None
    success: bool


def _count(value: Optional[float]) -> str:
    if value is None:
        return "0"
    return str(int(value)) if float(value).is_integer() else str(value)


def format_zhipu_usage(
    data: QuotaLimitResponse, api_key: str, account_label: str, locale: Locale
) -> str:
    lines = [f"{locale.t('account')}        {mask_string(api_key)} ({account_label})", ""]
    limits = data.data.limits

    if not limits:
        lines.append(locale.t("no_quota_data"))
        return "\n".join(lines)

    tokens_limit = next((item for item in limits if item.type == "TOKENS_LIMIT"), None)
    if tokens_limit is not None:
        remain_percent = calc_remain_percent(tokens_limit.percentage)
        lines.append(locale.t("zhipu_tokens_limit"))
        lines.append(
            f"{create_progress_bar(remain_percent)} {locale.t('remaining', percent=remain_percent)}"
        )
        lines.append(
            f"{locale.t('used')}: {format_tokens(tokens_limit.currentValue or 0)}"
            f" / {format_tokens(tokens_limit.usage or 0)}"
        )
        if tokens_limit.nextResetTime:
            reset_seconds = max(0, int((tokens_limit.nextResetTime - time.time() * 1000) // 1000))
            lines.append(locale.t("reset_in", duration=format_duration(reset_seconds, locale)))

    time_limit = next((item for item in limits if item.type == "TIME_LIMIT"), None)
    if time_limit is not None:
        if tokens_limit is not None:
            lines.append("")
        remain_percent = calc_remain_percent(time_limit.percentage)
        lines.append(locale.t("zhipu_mcp_limit"))
        lines.append(
            f"{create_progress_bar(remain_percent)} {locale.t('remaining', percent=remain_percent)}"
        )
        lines.append(
            f"{locale.t('used')}: {_count(time_limit.currentValue)} / {_count(time_limit.usage)}"
        )

    if safe_max(item.percentage for item in limits) >= HIGH_USAGE_THRESHOLD:
        lines.append("")
        lines.append(locale.t("limit_reached"))

    return "\n".join(lines)


def _make_transform(provider: str, label_key: str):
    def transform(data: QuotaLimitResponse, credential: ApiKeyCredential, locale: Locale) -> str:
        # The endpoint reports business errors with HTTP 200.
        if not data.success or data.code != 200:
            raise HttpError(
                locale.t("api_error", provider=provider, status=data.code, text=data.msg or "Unknown error"),
                status=data.code,
            )
        if data.data is None:
            raise ValidationError("Response validation failed: data: Field required")
        return format_zhipu_usage(data, credential.key, locale.t(label_key), locale)

    return transform


def _raw_key(credential: ApiKeyCredential) -> dict:
    return {"Authorization": credential.key, "Content-Type": "application/json"}


ZHIPU_CONFIG = ProviderConfig(
    id="zhipuai-coding-plan",
    name="Zhipu",
    title_key="zhipu_title",
    credential=api_key_from_auth("zhipuai-coding-plan"),
    base_url="https://bigmodel.cn",
    endpoint="/api/monitor/usage/quota/limit",
    auth_header=_raw_key,
    schema=QuotaLimitResponse,
    transform=_make_transform("Zhipu", "zhipu_account_name"),
)

ZAI_CONFIG = ProviderConfig(
    id="zai-coding-plan",
    name="Z.ai",
    title_key="zai_title",
    credential=api_key_from_auth("zai-coding-plan"),
    base_url="https://api.z.ai",
    endpoint="/api/monitor/usage/quota/limit",
    auth_header=_raw_key,
    schema=QuotaLimitResponse,
    transform=_make_transform("Z.ai", "zai_account_name"),
)
