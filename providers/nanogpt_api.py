"""Nano-GPT provider (experimental, endpoint shape unverified)."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

import http_client
from formatting import format_number, mask_string
from i18n import Locale
from providers.base import ProviderConfig, api_key_from_config, bearer


class NanoGptUsage(BaseModel):
    today: Optional[float] = None
    thisMonth: Optional[float] = None


class NanoGptAccountResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    balance: Optional[float] = None
    currency: Optional[str] = None
    rpdLimit: Optional[float] = None
    usdPerDayLimit: Optional[float] = None
    usage: Optional[NanoGptUsage] = None


def format_nanogpt_usage(data: NanoGptAccountResponse, api_key: str, locale: Locale) -> str:
    lines = [
        f"{locale.t('account')} {mask_string(api_key)} (Nano-GPT)",
        "",
        locale.t("experimental"),
        "",
        locale.t("nanogpt_heading"),
        "",
    ]
    header_len = len(lines)

    if data.balance is not None:
        lines.append(f"{locale.t('nanogpt_balance')}: {data.currency or 'USD'} {data.balance:.2f}")
    if data.rpdLimit is not None:
        lines.append(f"{locale.t('nanogpt_rpd_limit')}: {format_number(data.rpdLimit)}")
    if data.usdPerDayLimit is not None:
        lines.append(f"{locale.t('nanogpt_usd_limit')}: ${data.usdPerDayLimit:.2f}")
    if data.usage is not None and data.usage.today is not None:
        lines.append(f"{locale.t('nanogpt_today_usage')}: {format_number(data.usage.today)}")

    if len(lines) == header_len:
        lines.append(locale.t("no_quota_data"))

    return "\n".join(lines)


CONFIG = ProviderConfig(
    id="nano-gpt",
    name="NanoGPT",
    title_key="nanogpt_title",
    credential=api_key_from_config("nano-gpt"),
    base_url="https://nano-gpt.com/api",
    endpoint="/account",
    auth_header=bearer,
    schema=NanoGptAccountResponse,
    transform=lambda data, cred, locale: format_nanogpt_usage(data, cred.key, locale),
    timeout=http_client.DEFAULT_TIMEOUT,
)
