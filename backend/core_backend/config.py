"""
Centralized access to payment and ordering policy.

Services read policy values (currencies, exchange rate, provider minimum)
through the ``app_settings`` singleton instead of reaching into
``django.conf.settings`` at each call site. Loading is deferred to first
attribute access so management commands can import this module freely.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
import logging

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.core.signals import setting_changed
from django.dispatch import receiver

logger = logging.getLogger(__name__)

POLICY_SETTINGS = {
    "DISPLAY_CURRENCY",
    "SETTLEMENT_CURRENCY",
    "SETTLEMENT_EXCHANGE_RATE",
    "PAYMENT_MIN_CHARGE_MINOR",
    "PAYMENT_PROVIDER",
    "FRONTEND_BASE_URL",
    "DEFAULT_TABLE_NUMBER",
    "PENDING_ORDER_SWEEP_MINUTES",
}


@dataclass(frozen=True)
class PaymentPolicy:
    """Immutable view of the currency policy applied to one calculation."""

    display_currency: str
    settlement_currency: str
    exchange_rate: Decimal
    min_charge_minor: int

    @property
    def converts(self) -> bool:
        return (
            self.display_currency != self.settlement_currency
            or self.exchange_rate != Decimal("1")
        )


class AppSettings:
    """
    A LAZY singleton holding the ordering/payment configuration.
    Values are loaded from Django settings on first access and cached until
    ``reload()`` is called (tests do this through ``override_settings``).
    """

    _instance: Optional["AppSettings"] = None
    _initialized: bool = False

    def __new__(cls) -> "AppSettings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def _setup(self):
        if not self._initialized:
            self.load_settings()
            self._initialized = True

    def __getattr__(self, name: str) -> Any:
        if not self._initialized:
            self._setup()
        try:
            return self.__dict__[name]
        except KeyError:
            raise AttributeError(f"'AppSettings' object has no attribute '{name}'")

    def load_settings(self) -> None:
        try:
            rate = Decimal(str(settings.SETTLEMENT_EXCHANGE_RATE))
        except (InvalidOperation, TypeError) as e:
            raise ImproperlyConfigured(f"SETTLEMENT_EXCHANGE_RATE is not a decimal: {e}")
        if rate <= 0:
            raise ImproperlyConfigured("SETTLEMENT_EXCHANGE_RATE must be positive")

        self.display_currency: str = settings.DISPLAY_CURRENCY.upper()
        self.settlement_currency: str = settings.SETTLEMENT_CURRENCY.upper()
        self.exchange_rate: Decimal = rate
        self.min_charge_minor: int = int(settings.PAYMENT_MIN_CHARGE_MINOR)
        self.payment_provider: str = settings.PAYMENT_PROVIDER.upper()
        self.frontend_base_url: str = settings.FRONTEND_BASE_URL.rstrip("/")
        self.default_table_number: str = str(settings.DEFAULT_TABLE_NUMBER)
        self.pending_sweep_minutes: int = int(settings.PENDING_ORDER_SWEEP_MINUTES)

        logger.debug(
            f"Loaded payment policy: {self.display_currency} -> "
            f"{self.settlement_currency} @ {self.exchange_rate}, "
            f"min charge {self.min_charge_minor}"
        )

    def payment_policy(self) -> PaymentPolicy:
        return PaymentPolicy(
            display_currency=self.display_currency,
            settlement_currency=self.settlement_currency,
            exchange_rate=self.exchange_rate,
            min_charge_minor=self.min_charge_minor,
        )

    def reload(self) -> None:
        self.__dict__.clear()
        self._initialized = False


app_settings = AppSettings()


@receiver(setting_changed)
def _reset_app_settings(sender, setting, **kwargs):
    if setting in POLICY_SETTINGS:
        app_settings.reload()
