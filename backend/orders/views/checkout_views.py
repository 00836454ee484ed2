from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.exception_handler import error_response
from orders.serializers import CheckoutRequestSerializer
from orders.services.checkout_service import CheckoutService


def outcome_response(result, success_status=status.HTTP_200_OK):
    if not result.ok:
        return error_response(result.error)
    data = result.value.as_dict()
    data["degraded"] = result.degraded
    if result.warnings:
        data["warnings"] = result.warnings
    return Response(data, status=success_status)


@method_decorator(ratelimit(key="core_backend.utils.get_client_ip", rate="10/m", method="POST", block=True), name="post")
class CheckoutView(APIView):
    """
    Create an order from the cart and open a hosted payment page.

    A provider failure after the order was stored answers 502 with the
    ``order_id``; the client retries through ``resume-payment``.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request, *args, **kwargs):
        serializer = CheckoutRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = CheckoutService().checkout(**serializer.validated_data)
        return outcome_response(result, success_status=status.HTTP_201_CREATED)


@method_decorator(ratelimit(key="core_backend.utils.get_client_ip", rate="10/m", method="POST", block=True), name="post")
class ResumePaymentView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request, order_id, *args, **kwargs):
        result = CheckoutService().resume_payment(order_id)
        return outcome_response(result)
