"""
Core backend base components shared by the app views and serializers.
"""

from .viewsets import BaseViewSet, ReadOnlyBaseViewSet
from .serializers import StrictSerializer, StrictSerializerMixin, TimestampedSerializer
from .filters import BaseFilterSet, ArchivingFilterSet

__all__ = [
    # ViewSets
    'BaseViewSet',
    'ReadOnlyBaseViewSet',

    # Serializers
    'StrictSerializer',
    'StrictSerializerMixin',
    'TimestampedSerializer',

    # Filters
    'BaseFilterSet',
    'ArchivingFilterSet',
]
