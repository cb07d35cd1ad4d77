from __future__ import annotations

import logging

from joblog.config import Settings, get_settings


_LOG_CONFIGURED = False


def log_format(settings: Settings) -> str:
    # app_name is literal text inside a %-style format string.
    app_name = settings.app_name.replace("%", "%%")
    return f"%(asctime)s %(levelname)s {app_name} [%(name)s] %(message)s"


def configure_logging() -> None:
    global _LOG_CONFIGURED
    if _LOG_CONFIGURED:
        return

    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=log_format(settings),
    )
    logging.getLogger("joblog").debug("Logging configured for %s (%s)", settings.app_name, settings.app_env)
    _LOG_CONFIGURED = True
