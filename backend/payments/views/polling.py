from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.exception_handler import error_response
from ..serializers import CheckPaymentSerializer
from ..services import PaymentReconciliationService


class CheckPaymentView(APIView):
    """
    Called by the customer's confirmation page after the provider redirects
    back. Reconciles against the provider when the order is still pending.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request, *args, **kwargs):
        serializer = CheckPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = PaymentReconciliationService().check_payment(**serializer.validated_data)
        if not result.ok:
            return error_response(result.error)

        data = result.value.as_dict()
        if result.warnings:
            data["warnings"] = result.warnings
        return Response(data, status=status.HTTP_200_OK)
