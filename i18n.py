"""Message table for report text in English and Chinese.

The language is resolved once by the caller (see ``detect_language``) and
passed around as a :class:`Locale`, so formatting code never reads the
environment itself.
"""

from __future__ import annotations

import locale as _system_locale
import logging
import os
from dataclasses import dataclass
from typing import Mapping

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = ("en", "zh")

TRANSLATIONS: dict[str, dict[str, str]] = {
    "en": {
        # Time units
        "days": "{n}d",
        "hours": "{n}h",
        "minutes": "{n}m",
        # Limits
        "hour_limit": "{n}-hour limit",
        "day_limit": "{n}-day limit",
        "remaining": "{percent}% remaining",
        "reset_in": "Resets in: {duration}",
        "limit_reached": "\u26a0\ufe0f Rate limit reached!",
        "of_limit": "{remaining} of {limit}",
        "reset": "reset",
        # General
        "account": "Account:",
        "unknown": "unknown",
        "used": "Used",
        "limit": "Limit",
        "no_quota_data": "No quota data available",
        "experimental": "\u26a0\ufe0f This provider is experimental. API endpoints not verified.",
        "rate_limit_title": "Rate Limit Status",
        "requests_remaining": "Requests remaining",
        "tokens_remaining": "Tokens remaining",
        "rate_limit_note": "Rate limits shown are for the current window of this API key.",
        # Errors
        "api_error": "{provider} API request failed ({status}): {text}",
        "token_expired": (
            "\u26a0\ufe0f OAuth token expired. Please use an OpenAI model in "
            "OpenCode to refresh authorization."
        ),
        "no_accounts": (
            "No configured accounts found.\n\nSupported account types:\n"
            "- OpenAI (Plus/Team/Pro subscribers)\n"
            "- Zhipu AI (Coding Plan)\n"
            "- Z.ai (Coding Plan)\n"
            "- GitHub Copilot\n"
            "- Anthropic / Groq / Google Gemini (API key)\n"
            "- Google Cloud (Antigravity)\n"
            "- Kimi / Kimi Code / MiniMax / Chutes / Abacus / Nano-GPT"
        ),
        "query_failed": "\u274c Failed to query accounts:\n",
        # Titles
        "openai_title": "## OpenAI Account Quota",
        "zhipu_title": "## Zhipu AI Account Quota",
        "zai_title": "## Z.ai Account Quota",
        "google_title": "## Google Cloud Account Quota",
        "copilot_title": "## GitHub Copilot Account Quota",
        "anthropic_title": "## Anthropic Account Quota",
        "groq_title": "## Groq Account Quota",
        "gemini_title": "## Google Gemini Account Quota",
        "kimi_title": "## Kimi (Moonshot) Account Quota",
        "kimi_code_title": "## Kimi Code Account Quota",
        "minimax_title": "## MiniMax Account Quota",
        "abacus_title": "## Abacus AI Account Quota",
        "nanogpt_title": "## Nano-GPT Account Quota",
        "chutes_title": "## Chutes AI Account Quota",
        # Zhipu / Z.ai
        "zhipu_tokens_limit": "5-hour token limit",
        "zhipu_mcp_limit": "MCP monthly quota",
        "zhipu_account_name": "Coding Plan",
        "zai_account_name": "Z.ai",
        # Google
        "google_no_project_id": "\u26a0\ufe0f Missing project_id, cannot query quota.",
        "google_credentials_missing": (
            "Google OAuth credentials not configured. Please set "
            "GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET environment variables."
        ),
        # Anthropic
        "anthropic_auth_error": "Invalid Anthropic API key. Please check your key.",
        # Groq
        "groq_requests_remaining": "Requests remaining",
        "groq_tokens_remaining": "Tokens remaining",
        "groq_rate_limit_note": "Groq limits are per model; values come from the models endpoint.",
        # Gemini
        "gemini_quota_remaining": "Quota remaining",
        "gemini_quota_limit": "Quota limit",
        "gemini_rate_limit_note": "Detailed Gemini quotas are available in Google AI Studio.",
        # Kimi
        "kimi_balance": "Balance",
        "kimi_quota": "Quota usage",
        # MiniMax
        "minimax_auth_error": "Invalid MiniMax API key. Please check your key.",
        "minimax_requests_remaining": "Requests remaining",
        "minimax_dashboard_note": "See the MiniMax console for detailed usage.",
        # Abacus
        "abacus_credits": "Credits",
        "abacus_credits_remaining": "Remaining",
        "abacus_credits_total": "Total",
        "abacus_usage": "Usage",
        "abacus_endpoint_note": "The usage endpoint returned no recognizable fields.",
        "abacus_dashboard_note": "See the Abacus AI dashboard for detailed usage.",
        # Nano-GPT
        "nanogpt_heading": "Account Status",
        "nanogpt_balance": "Balance",
        "nanogpt_rpd_limit": "Daily request limit",
        "nanogpt_usd_limit": "Daily USD limit",
        "nanogpt_today_usage": "Today's usage",
        # Chutes
        "chutes_auth_error": "Invalid Chutes token. Please check your token.",
        # Copilot
        "premium_requests": "Premium",
        "chat_quota": "Chat",
        "completions_quota": "Completions",
        "unlimited": "Unlimited",
        "overage": "Overage",
        "overage_requests": "requests",
        "quota_resets": "Quota resets",
        "resets_soon": "soon",
        "model_breakdown": "Model breakdown:",
        "billing_period": "Period",
        "copilot_quota_unavailable": (
            "\u26a0\ufe0f GitHub Copilot quota is unavailable with the current "
            "OAuth token."
        ),
        "copilot_quota_workaround": (
            "Create a fine-grained personal access token with \"Plan\" read "
            "permission and save it to ~/.config/opencode/copilot-quota-token.json "
            "as {\"token\": \"...\", \"username\": \"...\", \"tier\": \"pro\"}."
        ),
    },
    "zh": {
        "days": "{n}\u5929",
        "hours": "{n}\u5c0f\u65f6",
        "minutes": "{n}\u5206\u949f",
        "hour_limit": "{n}\u5c0f\u65f6\u9650\u989d",
        "day_limit": "{n}\u5929\u9650\u989d",
        "remaining": "\u5269\u4f59 {percent}%",
        "reset_in": "\u91cd\u7f6e: {duration}\u540e",
        "limit_reached": "\u26a0\ufe0f \u5df2\u8fbe\u5230\u9650\u989d\u4e0a\u9650!",
        "of_limit": "{remaining} / {limit}",
        "reset": "\u5df2\u91cd\u7f6e",
        "account": "Account:",
        "unknown": "\u672a\u77e5",
        "used": "\u5df2\u7528",
        "limit": "\u9650\u989d",
        "no_quota_data": "\u6682\u65e0\u914d\u989d\u6570\u636e",
        "experimental": "\u26a0\ufe0f \u8be5\u5e73\u53f0\u4e3a\u5b9e\u9a8c\u6027\u652f\u6301\uff0cAPI \u7aef\u70b9\u672a\u7ecf\u9a8c\u8bc1\u3002",
        "rate_limit_title": "\u901f\u7387\u9650\u5236\u72b6\u6001",
        "requests_remaining": "\u5269\u4f59\u8bf7\u6c42\u6570",
        "tokens_remaining": "\u5269\u4f59 Token \u6570",
        "rate_limit_note": "\u663e\u793a\u7684\u662f\u8be5 API Key \u5f53\u524d\u7a97\u53e3\u7684\u901f\u7387\u9650\u5236\u3002",
        "api_error": "{provider} API \u8bf7\u6c42\u5931\u8d25 ({status}): {text}",
        "token_expired": (
            "\u26a0\ufe0f OAuth \u6388\u6743\u5df2\u8fc7\u671f\uff0c\u8bf7\u5728 OpenCode "
            "\u4e2d\u4f7f\u7528\u4e00\u6b21 OpenAI \u6a21\u578b\u4ee5\u5237\u65b0\u6388\u6743\u3002"
        ),
        "no_accounts": (
            "\u672a\u627e\u5230\u4efb\u4f55\u5df2\u914d\u7f6e\u7684\u8d26\u53f7\u3002\n\n"
            "\u652f\u6301\u7684\u8d26\u53f7\u7c7b\u578b:\n"
            "- OpenAI (Plus/Team/Pro \u8ba2\u9605\u7528\u6237)\n"
            "- \u667a\u8c31 AI (Coding Plan)\n"
            "- Z.ai (Coding Plan)\n"
            "- GitHub Copilot\n"
            "- Anthropic / Groq / Google Gemini (API Key)\n"
            "- Google Cloud (Antigravity)\n"
            "- Kimi / Kimi Code / MiniMax / Chutes / Abacus / Nano-GPT"
        ),
        "query_failed": "\u274c \u67e5\u8be2\u5931\u8d25\u7684\u8d26\u53f7:\n",
        "openai_title": "## OpenAI \u8d26\u53f7\u989d\u5ea6",
        "zhipu_title": "## \u667a\u8c31 AI \u8d26\u53f7\u989d\u5ea6",
        "zai_title": "## Z.ai \u8d26\u53f7\u989d\u5ea6",
        "google_title": "## Google Cloud \u8d26\u53f7\u989d\u5ea6",
        "copilot_title": "## GitHub Copilot \u8d26\u53f7\u989d\u5ea6",
        "anthropic_title": "## Anthropic \u8d26\u53f7\u989d\u5ea6",
        "groq_title": "## Groq \u8d26\u53f7\u989d\u5ea6",
        "gemini_title": "## Google Gemini \u8d26\u53f7\u989d\u5ea6",
        "kimi_title": "## Kimi (Moonshot) \u8d26\u53f7\u989d\u5ea6",
        "kimi_code_title": "## Kimi Code \u8d26\u53f7\u989d\u5ea6",
        "minimax_title": "## MiniMax \u8d26\u53f7\u989d\u5ea6",
        "abacus_title": "## Abacus AI \u8d26\u53f7\u989d\u5ea6",
        "nanogpt_title": "## Nano-GPT \u8d26\u53f7\u989d\u5ea6",
        "chutes_title": "## Chutes AI \u8d26\u53f7\u989d\u5ea6",
        "zhipu_tokens_limit": "5 \u5c0f\u65f6 Token \u9650\u989d",
        "zhipu_mcp_limit": "MCP \u6708\u5ea6\u914d\u989d",
        "zhipu_account_name": "Coding Plan",
        "zai_account_name": "Z.ai",
        "google_no_project_id": "\u26a0\ufe0f \u7f3a\u5c11 project_id\uff0c\u65e0\u6cd5\u67e5\u8be2\u989d\u5ea6\u3002",
        "google_credentials_missing": (
            "\u672a\u914d\u7f6e Google OAuth \u51ed\u636e\uff0c\u8bf7\u8bbe\u7f6e "
            "GOOGLE_CLIENT_ID \u548c GOOGLE_CLIENT_SECRET \u73af\u5883\u53d8\u91cf\u3002"
        ),
        "anthropic_auth_error": "Anthropic API Key \u65e0\u6548\uff0c\u8bf7\u68c0\u67e5\u3002",
        "groq_requests_remaining": "\u5269\u4f59\u8bf7\u6c42\u6570",
        "groq_tokens_remaining": "\u5269\u4f59 Token \u6570",
        "groq_rate_limit_note": "Groq \u7684\u9650\u5236\u6309\u6a21\u578b\u8ba1\u7b97\uff0c\u6570\u636e\u6765\u81ea models \u63a5\u53e3\u3002",
        "gemini_quota_remaining": "\u5269\u4f59\u914d\u989d",
        "gemini_quota_limit": "\u914d\u989d\u4e0a\u9650",
        "gemini_rate_limit_note": "\u8be6\u7ec6\u7684 Gemini \u914d\u989d\u8bf7\u5728 Google AI Studio \u4e2d\u67e5\u770b\u3002",
        "kimi_balance": "\u4f59\u989d",
        "kimi_quota": "\u914d\u989d\u4f7f\u7528",
        "minimax_auth_error": "MiniMax API Key \u65e0\u6548\uff0c\u8bf7\u68c0\u67e5\u3002",
        "minimax_requests_remaining": "\u5269\u4f59\u8bf7\u6c42\u6570",
        "minimax_dashboard_note": "\u8be6\u7ec6\u7528\u91cf\u8bf7\u5728 MiniMax \u63a7\u5236\u53f0\u67e5\u770b\u3002",
        "abacus_credits": "\u79ef\u5206",
        "abacus_credits_remaining": "\u5269\u4f59",
        "abacus_credits_total": "\u603b\u8ba1",
        "abacus_usage": "\u7528\u91cf",
        "abacus_endpoint_note": "\u7528\u91cf\u63a5\u53e3\u672a\u8fd4\u56de\u53ef\u8bc6\u522b\u7684\u5b57\u6bb5\u3002",
        "abacus_dashboard_note": "\u8be6\u7ec6\u7528\u91cf\u8bf7\u5728 Abacus AI \u63a7\u5236\u53f0\u67e5\u770b\u3002",
        "nanogpt_heading": "\u8d26\u6237\u72b6\u6001",
        "nanogpt_balance": "\u4f59\u989d",
        "nanogpt_rpd_limit": "\u6bcf\u65e5\u8bf7\u6c42\u9650\u5236",
        "nanogpt_usd_limit": "\u6bcf\u65e5 USD \u9650\u5236",
        "nanogpt_today_usage": "\u4eca\u65e5\u7528\u91cf",
        "chutes_auth_error": "Chutes Token \u65e0\u6548\uff0c\u8bf7\u68c0\u67e5\u3002",
        "premium_requests": "\u9ad8\u7ea7\u8bf7\u6c42",
        "chat_quota": "\u804a\u5929",
        "completions_quota": "\u8865\u5168",
        "unlimited": "\u65e0\u9650\u5236",
        "overage": "\u8d85\u989d",
        "overage_requests": "\u6b21\u8bf7\u6c42",
        "quota_resets": "\u989d\u5ea6\u91cd\u7f6e",
        "resets_soon": "\u5373\u5c06\u91cd\u7f6e",
        "model_breakdown": "\u6a21\u578b\u660e\u7ec6:",
        "billing_period": "\u5468\u671f",
        "copilot_quota_unavailable": (
            "\u26a0\ufe0f \u5f53\u524d OAuth Token \u65e0\u6cd5\u67e5\u8be2 GitHub Copilot \u989d\u5ea6\u3002"
        ),
        "copilot_quota_workaround": (
            "\u8bf7\u521b\u5efa\u5177\u6709 \"Plan\" \u8bfb\u53d6\u6743\u9650\u7684 fine-grained PAT\uff0c"
            "\u5e76\u4fdd\u5b58\u5230 ~/.config/opencode/copilot-quota-token.json\uff0c"
            "\u683c\u5f0f\u4e3a {\"token\": \"...\", \"username\": \"...\", \"tier\": \"pro\"}\u3002"
        ),
    },
}


@dataclass(frozen=True)
class Locale:
    """A resolved display language."""

    lang: str = "en"

    def t(self, key: str, **kwargs) -> str:
        """Look up ``key`` and fill in its fields.

        Falls back to English when the key is missing for this language.
        """
        table = TRANSLATIONS.get(self.lang, TRANSLATIONS["en"])
        template = table.get(key)
        if template is None:
            template = TRANSLATIONS["en"][key]
        if kwargs:
            return template.format(**kwargs)
        return template

    @property
    def unit_separator(self) -> str:
        """Joiner between duration units: ``1d 2h`` vs ``1天2小时``."""
        return " " if self.lang == "en" else ""


def detect_language(environ: Mapping[str, str] | None = None) -> str:
    """Guess the user's language: system locale first, then LANG/LC_ALL/LANGUAGE."""
    env = os.environ if environ is None else environ
    if environ is None:
        try:
            system_lang = _system_locale.getlocale()[0] or ""
        except ValueError:
            system_lang = ""
        if system_lang.lower().startswith("zh"):
            return "zh"
    lang = env.get("LANG") or env.get("LC_ALL") or env.get("LANGUAGE") or ""
    if lang.lower().startswith("zh"):
        return "zh"
    return "en"


def resolve_locale(setting: str = "auto", environ: Mapping[str, str] | None = None) -> Locale:
    """Build the Locale for a config ``language`` value (``auto``, ``en`` or ``zh``)."""
    if setting in SUPPORTED_LANGUAGES:
        return Locale(setting)
    lang = detect_language(environ)
    logger.debug("Detected report language: %s", lang)
    return Locale(lang)
