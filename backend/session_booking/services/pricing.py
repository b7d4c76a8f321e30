# backend/session_booking/services/pricing.py
"""
Session price lookup.

Price and currency come from the provider's availability settings.
A provider who never set a price is charged the configured default.
"""

from dataclasses import dataclass

from ..config import settings as app_settings
from ..models import AvailabilitySettings


@dataclass(frozen=True)
class SessionPrice:
    amount: float
    currency: str
    source: str  # "provider" | "default"


def resolve_session_price(provider_settings: AvailabilitySettings) -> SessionPrice:
    currency = provider_settings.currency or app_settings.default_currency
    if provider_settings.session_price is not None:
        return SessionPrice(
            amount=float(provider_settings.session_price),
            currency=currency,
            source="provider",
        )
    return SessionPrice(
        amount=float(app_settings.default_session_price),
        currency=currency,
        source="default",
    )
