"""
Webhook views for payment providers.

The payload is only used to learn which session changed. Whether it was
actually paid is always re-read from the provider by the reconciler.
"""

import logging

import stripe
from django.http import HttpResponse
from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt
from rest_framework.permissions import AllowAny
from rest_framework.views import APIView

from core_backend.errors import PaymentServiceError
from ..services import PaymentReconciliationService

logger = logging.getLogger(__name__)


@method_decorator(csrf_exempt, name="dispatch")
class StripeWebhookView(APIView):
    """
    Stripe webhook view for checkout session events.

    Responds 400 to unverifiable payloads, 200 to everything handled or
    deliberately ignored, and 503 when the provider could not be reached to
    confirm the session so Stripe retries the delivery.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request, *args, **kwargs):
        payload = request.body
        sig_header = request.META.get("HTTP_STRIPE_SIGNATURE", "")
        service = PaymentReconciliationService()

        try:
            event = service.gateway.construct_event(payload, sig_header)
        except ValueError as e:
            logger.error(f"Stripe webhook: Invalid payload - {e}")
            return HttpResponse(status=400)
        except stripe.SignatureVerificationError as e:
            logger.error(f"Stripe webhook: Invalid signature - {e}")
            return HttpResponse(status=400)

        result = service.handle_event(event)
        if not result.ok:
            logger.warning(f"Stripe webhook {event['type']} not reconciled: {result.error.code}")
            if isinstance(result.error, PaymentServiceError):
                return HttpResponse(status=503)
        return HttpResponse(status=200)
