from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.base import BaseViewSet
from core_backend.exception_handler import error_response
from users.permissions import IsAdminRole
from .filters import VoucherFilter
from .models import Voucher
from .serializers import CartVoucherSerializer, VoucherSerializer, VoucherValidateSerializer
from .services import VoucherService


class ValidateVoucherView(APIView):
    """
    Check a voucher code against a subtotal.
    Responds with the discount on success or the specific ineligibility
    reason on failure.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request, *args, **kwargs):
        serializer = VoucherValidateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = VoucherService.validate_code(**serializer.validated_data)
        if not result.ok:
            return error_response(result.error)
        return Response(result.value.as_dict(), status=status.HTTP_200_OK)


@method_decorator(ratelimit(key="core_backend.utils.get_client_ip", rate="30/m", method="POST", block=True), name="post")
class ApplyCartVoucherView(APIView):
    """Preview a voucher against the current cart, priced from the catalog."""

    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request, *args, **kwargs):
        serializer = CartVoucherSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = VoucherService.preview_for_cart(
            serializer.validated_data["code"], serializer.validated_data["items"]
        )
        if not result.ok:
            return error_response(result.error)
        return Response(result.value, status=status.HTTP_200_OK)


class AdminVoucherViewSet(BaseViewSet):
    """
    Voucher administration. DELETE soft-deactivates; vouchers referenced by
    historical orders are never removed.
    """

    permission_classes = [IsAdminRole]
    serializer_class = VoucherSerializer
    filterset_class = VoucherFilter
    search_fields = ["code", "description"]
    ordering_fields = ["created_at", "valid_until", "used_count"]
    ordering = ["-created_at"]
    queryset = Voucher.objects.prefetch_related(
        "applicable_products", "applicable_categories"
    ).all()

    def perform_destroy(self, instance):
        VoucherService.deactivate(instance, user=self.request.user)
