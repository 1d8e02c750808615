"""Client-construction helpers for safe config logging."""

from heidelpay.common.config import HeidelpaySettings
from heidelpay.common.logging import logger

SECRET_MARKERS = ("KEY", "SECRET", "PASSWORD", "TOKEN")


def redact_key(private_key: str) -> str:
    """Keep the key's `s-priv-` style prefix, hide the rest."""

    prefix, sep, _ = private_key.rpartition("-")
    if sep:
        return f"{prefix}-<redacted>"
    return "<redacted>"


def _safe_value(name: str, value) -> str:
    """Return a printable value with redaction for secret-like names."""

    if value is None:
        return "<unset>"
    if any(secret in name.upper() for secret in SECRET_MARKERS):
        return "<redacted>"
    return str(value)


def log_startup_config(config: HeidelpaySettings, private_key: str, env: str | None) -> dict:
    """Log the effective client config once, with the private key redacted."""

    values = {"private_key": redact_key(private_key), "env": env or "production"}
    for name, value in config.model_dump().items():
        values[name] = _safe_value(name, value)
    logger.info("client_config=%s", values)
    return values
