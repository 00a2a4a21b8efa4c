"""Google Cloud (Antigravity) provider: per-model quota for every account.

Accounts come from the Antigravity accounts file. Each one has its refresh
token exchanged for an access token, then its project's available models
are fetched. Accounts are queried concurrently and rendered in file order.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel

from credentials import AntigravityAccount, CredentialStore
from errors import AuthenticationError, QuotaError
from formatting import HIGH_USAGE_THRESHOLD, create_progress_bar, round_half_up, safe_max
from i18n import Locale
from providers.base import ProviderConfig, QueryContext

logger = logging.getLogger(__name__)

GOOGLE_QUOTA_API_URL = "https://cloudcode-pa.googleapis.com/v1internal:fetchAvailableModels"
GOOGLE_TOKEN_REFRESH_URL = "https://oauth2.googleapis.com/token"
ANTIGRAVITY_USER_AGENT = "antigravity/1.11.9 windows/amd64"
MODEL_BAR_WIDTH = 20


@dataclass(frozen=True)
class ModelDisplay:
    key: str
    display: str
    alt_key: Optional[str] = None


MODELS_TO_DISPLAY = [
    ModelDisplay("gemini-3-pro-high", "G3 Pro", alt_key="gemini-3-pro-low"),
    ModelDisplay("gemini-3-pro-image", "G3 Image"),
    ModelDisplay("gemini-3-flash", "G3 Flash"),
    ModelDisplay("claude-opus-4-5-thinking", "Claude", alt_key="claude-opus-4-5"),
]


class QuotaInfo(BaseModel):
    remainingFraction: Optional[float] = None
    resetTime: Optional[str] = None


class GoogleQuotaModel(BaseModel):
    quotaInfo: Optional[QuotaInfo] = None


class GoogleQuotaResponse(BaseModel):
    models: dict[str, GoogleQuotaModel]


class TokenResponse(BaseModel):
    access_token: str
    expires_in: Optional[int] = None


@dataclass(frozen=True)
class ModelQuota:
    display_name: str
    remain_percent: int
    reset_display: str


def format_reset_time_short(iso_time: str | None, locale: Locale, now: datetime | None = None) -> str:
    """``"1d 2h"`` or ``"4h 59m"`` until ``iso_time``; ``"-"`` if unknown."""
    if not iso_time:
        return "-"
    try:
        reset_at = datetime.fromisoformat(iso_time.replace("Z", "+00:00"))
    except ValueError:
        return "-"
    if reset_at.tzinfo is None:
        reset_at = reset_at.replace(tzinfo=timezone.utc)

    now = now or datetime.now(timezone.utc)
    diff_seconds = (reset_at - now).total_seconds()
    if diff_seconds <= 0:
        return locale.t("reset")

    diff_minutes = int(diff_seconds // 60)
    days = diff_minutes // 1440
    hours = (diff_minutes % 1440) // 60
    minutes = diff_minutes % 60
    if days > 0:
        return f"{days}d {hours}h"
    return f"{hours}h {minutes}m"


def extract_model_quotas(data: GoogleQuotaResponse, locale: Locale) -> list[ModelQuota]:
    """Pick the displayed models; a model present without quota info shows 0%."""
    quotas = []
    for model in MODELS_TO_DISPLAY:
        info = data.models.get(model.key)
        if info is None and model.alt_key:
            info = data.models.get(model.alt_key)
        if info is None:
            continue
        quota = info.quotaInfo or QuotaInfo()
        quotas.append(
            ModelQuota(
                display_name=model.display,
                remain_percent=round_half_up((quota.remainingFraction or 0) * 100),
                reset_display=format_reset_time_short(quota.resetTime, locale),
            )
        )
    return quotas


def format_account_quota(email: str, models: list[ModelQuota], locale: Locale) -> str:
    lines = [f"### {email}", ""]
    for model in models:
        bar = create_progress_bar(model.remain_percent, MODEL_BAR_WIDTH)
        lines.append(
            f"{model.display_name:<10} {model.reset_display:<10} {bar} {model.remain_percent}%"
        )

    max_usage = safe_max(100 - m.remain_percent for m in models)
    if max_usage >= HIGH_USAGE_THRESHOLD:
        lines.append("")
        lines.append(locale.t("limit_reached"))
    return "\n".join(lines)


def refresh_access_token(
    refresh_token: str, client_id: str | None, client_secret: str | None, ctx: QueryContext
) -> str:
    if not client_id or not client_secret:
        raise AuthenticationError(ctx.locale.t("google_credentials_missing"))
    token = ctx.execute(
        ctx.descriptor(
            GOOGLE_TOKEN_REFRESH_URL,
            CONFIG.name,
            shape=TokenResponse,
            method="POST",
            form={
                "client_id": client_id,
                "client_secret": client_secret,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            },
        )
    )
    return token.access_token


def fetch_account_quota(
    account: AntigravityAccount, client_id: str | None, client_secret: str | None, ctx: QueryContext
) -> list[ModelQuota]:
    access_token = refresh_access_token(account.refreshToken, client_id, client_secret, ctx)

    project_id = account.projectId or account.managedProjectId
    if not project_id:
        raise QuotaError(ctx.locale.t("google_no_project_id"))

    data = ctx.execute(
        ctx.descriptor(
            GOOGLE_QUOTA_API_URL,
            CONFIG.name,
            shape=GoogleQuotaResponse,
            method="POST",
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
                "User-Agent": ANTIGRAVITY_USER_AGENT,
            },
            json_body={"project": project_id},
        )
    )
    return extract_model_quotas(data, ctx.locale)


def _account_section(
    account: AntigravityAccount, client_id: str | None, client_secret: str | None, ctx: QueryContext
) -> str | None:
    try:
        models = fetch_account_quota(account, client_id, client_secret, ctx)
    except QuotaError as e:
        logger.info("Antigravity account %s failed: %s", account.email, e)
        return f"{account.email}: {e}"
    if not models:
        return None
    return format_account_quota(account.email, models, ctx.locale)


def fetch_google(accounts: list[AntigravityAccount], ctx: QueryContext) -> str:
    valid_accounts = [account for account in accounts if account.email]
    if not valid_accounts:
        return ctx.locale.t("no_quota_data")

    client_id = os.environ.get("GOOGLE_CLIENT_ID")
    client_secret = os.environ.get("GOOGLE_CLIENT_SECRET")

    with ThreadPoolExecutor(max_workers=len(valid_accounts)) as pool:
        sections = list(
            pool.map(
                lambda account: _account_section(account, client_id, client_secret, ctx),
                valid_accounts,
            )
        )

    outputs = [section for section in sections if section]
    if not outputs:
        return ctx.locale.t("no_quota_data")
    return "\n\n".join(outputs)


def _resolve(store: CredentialStore) -> list[AntigravityAccount] | None:
    return store.antigravity_accounts or None


CONFIG = ProviderConfig(
    id="google",
    name="Google",
    title_key="google_title",
    credential=_resolve,
    fetch=fetch_google,
)
