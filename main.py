"""AI Quota Status: command-line entry point.

Prints one report of the remaining quota for every AI platform that has
credentials configured on this machine.
"""

from __future__ import annotations

import logging
import os
import sys

import config as app_config
from credentials import CredentialStore
from i18n import resolve_locale
from providers.base import QueryContext
from report import build_report

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Log to stderr so stdout carries only the report."""
    level_name = os.environ.get("QUOTA_STATUS_LOG_LEVEL", "WARNING").upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def run() -> str:
    """Load settings and credentials, then build the report."""
    cfg = app_config.load_config()
    ctx = QueryContext(
        locale=resolve_locale(app_config.get_language(cfg)),
        timeout=app_config.get_request_timeout(cfg),
        retries=app_config.get_max_retries(cfg),
    )
    store = CredentialStore.load(cfg)
    return build_report(store, ctx, cfg=cfg)


def main():
    """Entry point."""
    configure_logging()
    print(run())


if __name__ == "__main__":
    main()
