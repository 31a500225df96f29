"""Startup-time helpers for safe config logging."""

import os

from paygate.common.errors import redact
from paygate.common.logging import logger


SECRET_MARKERS = ("KEY", "SECRET", "PASSWORD", "TOKEN")


def _safe_env(name: str) -> str:
    """Return env value, hiding secret-like variables and secret-shaped values."""

    value = os.getenv(name)
    if value is None:
        return "<unset>"
    if any(marker in name.upper() for marker in SECRET_MARKERS):
        return "<redacted>"
    return redact(value)


def startup_config(service_name: str, keys: list[str]) -> dict[str, str]:
    config = {"service": service_name}
    for key in keys:
        config[key] = _safe_env(key)
    return config


def log_startup_config(service_name: str, keys: list[str]) -> None:
    """Log selected startup config keys for quick troubleshooting."""

    logger.info("startup_config=%s", startup_config(service_name, keys))
