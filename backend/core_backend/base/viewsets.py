from rest_framework import viewsets, filters
from django_filters.rest_framework import DjangoFilterBackend
from ..pagination import StandardPagination


class BaseViewSet(viewsets.ModelViewSet):
    """
    Standard configuration for dashboard ModelViewSets.

    - pagination, filtering, search and ordering backends
    - DELETE archives the instance when the model supports it, so rows
      referenced by historical orders survive
    """

    pagination_class = StandardPagination
    filter_backends = [
        DjangoFilterBackend,
        filters.SearchFilter,
        filters.OrderingFilter,
    ]
    ordering = ["-id"]

    def perform_destroy(self, instance):
        if hasattr(instance, "archive"):
            instance.archive(archived_by=self.request.user)
        else:
            instance.delete()


class ReadOnlyBaseViewSet(viewsets.ReadOnlyModelViewSet):
    pagination_class = StandardPagination
    filter_backends = [
        DjangoFilterBackend,
        filters.SearchFilter,
        filters.OrderingFilter,
    ]
    ordering = ["-id"]
