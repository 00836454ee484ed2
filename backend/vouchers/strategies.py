from abc import ABC, abstractmethod

from .models import Voucher


class VoucherStrategy(ABC):
    """
    Computes the raw discount for a voucher against a discountable base.
    All amounts are integers in minor units. Caps and clamping are applied
    by the engine, not here.
    """

    @abstractmethod
    def compute(self, base_cents: int, voucher: Voucher) -> int:
        pass


class PercentageStrategy(VoucherStrategy):
    """floor(base * value / 100); rounds toward the customer paying more."""

    def compute(self, base_cents: int, voucher: Voucher) -> int:
        if base_cents <= 0:
            return 0
        return (base_cents * voucher.discount_value) // 100


class FixedAmountStrategy(VoucherStrategy):
    """The voucher value, never more than the base it applies to."""

    def compute(self, base_cents: int, voucher: Voucher) -> int:
        if base_cents <= 0:
            return 0
        return min(voucher.discount_value, base_cents)
