from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from .serializers import StaffLoginSerializer, StaffTokenRefreshSerializer, UserSerializer


@method_decorator(
    ratelimit(key="core_backend.utils.get_client_ip", rate="5/m", method="POST", block=True), name="post"
)
class StaffLoginView(TokenObtainPairView):
    serializer_class = StaffLoginSerializer
    permission_classes = [permissions.AllowAny]


class StaffTokenRefreshView(TokenRefreshView):
    serializer_class = StaffTokenRefreshSerializer
    permission_classes = [permissions.AllowAny]


class CurrentUserView(APIView):
    def get(self, request):
        return Response(UserSerializer(request.user).data)
