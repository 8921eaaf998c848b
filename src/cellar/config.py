"""Store settings read from the ``[custom]`` table of domain.toml."""

from protean.utils.globals import current_domain

_DEFAULTS = {
    "CURRENCY": "usd",
    "CART_REMINDER_DELAY_MINUTES": 60,
    "PUSH_BATCH_SIZE": 500,
    "LOW_STOCK_THRESHOLD": 10,
    "DOMESTIC_COUNTRY": "United States",
}


def setting(name: str):
    """Return a store setting, falling back to the built-in default."""
    custom = current_domain.config.get("custom") or {}
    return custom.get(name, _DEFAULTS[name])
