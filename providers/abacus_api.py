"""Abacus AI provider (experimental, endpoint shape unverified)."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

import http_client
from formatting import format_number, mask_string
from i18n import Locale
from providers.base import ProviderConfig, api_key_from_config, bearer


class AbacusAccount(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    plan: Optional[str] = None


class AbacusUsageResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    usage: Optional[float] = None
    limit: Optional[float] = None
    credits: Optional[float] = None
    creditsRemaining: Optional[float] = None
    creditsUsed: Optional[float] = None
    account: Optional[AbacusAccount] = None


def format_abacus_usage(data: AbacusUsageResponse, api_key: str, locale: Locale) -> str:
    lines = [
        f"{locale.t('account')} {mask_string(api_key)} (Abacus AI)",
        "",
        locale.t("experimental"),
        "",
    ]

    has_credits = any(
        v is not None for v in (data.credits, data.creditsRemaining, data.creditsUsed)
    )
    if data.usage is not None or data.credits is not None or data.creditsRemaining is not None:
        if has_credits:
            lines.append(f"{locale.t('abacus_credits')}:")
            if data.creditsUsed is not None:
                lines.append(f"  {locale.t('used')}: {format_number(data.creditsUsed)}")
            if data.creditsRemaining is not None:
                lines.append(
                    f"  {locale.t('abacus_credits_remaining')}: {format_number(data.creditsRemaining)}"
                )
            if data.credits is not None:
                lines.append(f"  {locale.t('abacus_credits_total')}: {format_number(data.credits)}")

        if data.usage is not None and data.limit is not None:
            remaining = data.limit - data.usage
            lines.append(f"{locale.t('abacus_usage')}:")
            lines.append(f"  {locale.t('used')}: {format_number(data.usage)}")
            lines.append(f"  {locale.t('limit')}: {format_number(data.limit)}")
            if data.limit:
                lines.append(
                    f"  {locale.t('abacus_credits_remaining')}: {format_number(remaining)}"
                    f" ({remaining / data.limit * 100:.1f}%)"
                )
        elif data.usage is not None:
            lines.append(f"{locale.t('abacus_usage')}: {format_number(data.usage)}")
    else:
        lines.append(locale.t("no_quota_data"))
        lines.append("")
        lines.append(locale.t("abacus_endpoint_note"))
        account = data.account
        if account is not None and (account.name or account.email or account.plan):
            lines.append("")
            lines.append("Account Info:")
            if account.name:
                lines.append(f"  Name: {account.name}")
            if account.email:
                lines.append(f"  Email: {account.email}")
            if account.plan:
                lines.append(f"  Plan: {account.plan}")

    lines.append("")
    lines.append(locale.t("abacus_dashboard_note"))
    return "\n".join(lines)


CONFIG = ProviderConfig(
    id="abacus",
    name="Abacus",
    title_key="abacus_title",
    credential=api_key_from_config("abacus"),
    base_url="https://abacus.ai/api/v0",
    endpoint="/getUsage",
    auth_header=bearer,
    schema=AbacusUsageResponse,
    transform=lambda data, cred, locale: format_abacus_usage(data, cred.key, locale),
    timeout=http_client.DEFAULT_TIMEOUT,
)
