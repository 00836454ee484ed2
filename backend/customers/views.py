from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
from rest_framework import generics, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from users.permissions import IsStaffOrAdmin
from .models import CustomerLead
from .serializers import CustomerLeadSerializer, StartSessionSerializer
from .services import CustomerLeadService


@method_decorator(ratelimit(key="core_backend.utils.get_client_ip", rate="10/m", method="POST", block=True), name="post")
class StartSessionView(APIView):
    """Capture the diner's details once per ordering session."""

    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request, *args, **kwargs):
        serializer = StartSessionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        lead = CustomerLeadService.start_session(**serializer.validated_data)
        return Response(
            CustomerLeadSerializer(lead).data, status=status.HTTP_201_CREATED
        )


class AdminCustomerListView(generics.ListAPIView):
    permission_classes = [IsStaffOrAdmin]
    serializer_class = CustomerLeadSerializer
    queryset = CustomerLead.objects.all()
    filterset_fields = ["table_number"]

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())[:100]
        return Response(self.get_serializer(queryset, many=True).data)
