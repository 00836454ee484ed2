from django.apps import AppConfig
import logging

logger = logging.getLogger(__name__)


class CoreBackendConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core_backend"

    def ready(self):
        """
        Load the policy singleton once at startup so a malformed exchange
        rate fails the boot instead of the first checkout.
        """
        from .config import app_settings

        policy = app_settings.payment_policy()
        if policy.converts:
            logger.info(
                f"Charging in {policy.settlement_currency} at "
                f"1 {policy.display_currency} = {policy.exchange_rate} "
                f"{policy.settlement_currency}"
            )
