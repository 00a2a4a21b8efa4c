"""Kimi (Moonshot) and Kimi Code balance and quota usage."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from errors import HttpError
from formatting import (
    HIGH_USAGE_THRESHOLD,
    calc_remain_percent,
    create_progress_bar,
    format_number,
    mask_string,
)
from i18n import Locale
from providers.base import ApiKeyCredential, ProviderConfig, api_key_from_config, bearer


class KimiBalanceData(BaseModel):
    balance: Optional[float] = None
    currency: Optional[str] = None
    totalQuota: Optional[float] = None
    usedQuota: Optional[float] = None


class KimiBalanceResponse(BaseModel):
    code: int
    data: Optional[KimiBalanceData] = None
    msg: Optional[str] = None


def format_kimi_usage(
    data: KimiBalanceResponse, api_key: str, account_label: str, locale: Locale
) -> str:
    lines = [f"{locale.t('account')}        {mask_string(api_key)} ({account_label})", ""]
    balance = data.data

    if balance is None:
        lines.append(locale.t("no_quota_data"))
        return "\n".join(lines)

    if balance.balance is not None:
        lines.append(
            f"{locale.t('kimi_balance')}: {balance.balance:.2f} {balance.currency or 'CNY'}"
        )

    if balance.totalQuota is not None and balance.usedQuota is not None:
        used_percent = (
            balance.usedQuota / balance.totalQuota * 100 if balance.totalQuota > 0 else 0
        )
        remain_percent = calc_remain_percent(used_percent)
        if len(lines) > 2:
            lines.append("")
        lines.append(locale.t("kimi_quota"))
        lines.append(
            f"{create_progress_bar(remain_percent)} {locale.t('remaining', percent=remain_percent)}"
        )
        lines.append(
            f"{locale.t('used')}: {format_number(balance.usedQuota)}"
            f" / {format_number(balance.totalQuota)}"
        )
        if used_percent >= HIGH_USAGE_THRESHOLD:
            lines.append("")
            lines.append(locale.t("limit_reached"))

    return "\n".join(lines)


def _make_transform(provider: str, account_label: str):
    def transform(data: KimiBalanceResponse, credential: ApiKeyCredential, locale: Locale) -> str:
        if data.code != 200:
            raise HttpError(
                locale.t("api_error", provider=provider, status=data.code, text=data.msg or "Unknown error"),
                status=data.code,
            )
        return format_kimi_usage(data, credential.key, account_label, locale)

    return transform


def _auth(credential: ApiKeyCredential) -> dict:
    return {**bearer(credential), "Content-Type": "application/json"}


KIMI_CONFIG = ProviderConfig(
    id="kimi",
    name="Kimi",
    title_key="kimi_title",
    credential=api_key_from_config("kimi"),
    base_url="https://api.moonshot.cn",
    endpoint="/v1/users/me/balance",
    auth_header=_auth,
    schema=KimiBalanceResponse,
    transform=_make_transform("Kimi", "Moonshot"),
)

KIMI_CODE_CONFIG = ProviderConfig(
    id="kimi-code",
    name="Kimi Code",
    title_key="kimi_code_title",
    credential=api_key_from_config("kimi-code"),
    base_url="https://api.kimi.com",
    endpoint="/coding/v1/users/me/balance",
    auth_header=_auth,
    schema=KimiBalanceResponse,
    transform=_make_transform("Kimi Code", "Kimi Code"),
)
