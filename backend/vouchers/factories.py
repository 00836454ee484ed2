from .models import Voucher
from .strategies import VoucherStrategy, PercentageStrategy, FixedAmountStrategy


class VoucherStrategyFactory:
    """
    Factory for selecting the discount strategy of a voucher.
    """

    _strategies = {
        Voucher.DiscountType.PERCENTAGE: PercentageStrategy,
        Voucher.DiscountType.FIXED_AMOUNT: FixedAmountStrategy,
    }

    @staticmethod
    def get_strategy(voucher: Voucher) -> VoucherStrategy:
        strategy_class = VoucherStrategyFactory._strategies.get(voucher.discount_type)

        if strategy_class:
            return strategy_class()

        raise NotImplementedError(
            f"No strategy implemented for discount type '{voucher.discount_type}'"
        )
