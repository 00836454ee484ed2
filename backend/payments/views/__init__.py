"""
Payment views package.

- webhooks.py: provider webhook handlers
- polling.py: client confirmation polling
"""

from .polling import CheckPaymentView
from .webhooks import StripeWebhookView

__all__ = [
    "CheckPaymentView",
    "StripeWebhookView",
]
