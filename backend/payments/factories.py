from core_backend.config import app_settings
from .strategies import HostedCheckoutStrategy, StripeCheckoutStrategy


class PaymentGatewayFactory:
    """
    A factory for the hosted checkout provider configured in PAYMENT_PROVIDER.
    """

    _gateways = {
        "STRIPE": StripeCheckoutStrategy,
    }

    @staticmethod
    def get_gateway(provider: str = None) -> HostedCheckoutStrategy:
        provider = (provider or app_settings.payment_provider).upper()
        gateway_class = PaymentGatewayFactory._gateways.get(provider)

        if gateway_class:
            return gateway_class()

        raise ValueError(f"Unknown payment provider: {provider}")
