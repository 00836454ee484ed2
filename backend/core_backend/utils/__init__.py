"""
Utility functions for core_backend.
"""
from django.conf import settings


def get_client_ip(group, request):
    """
    Rate-limit key: the diner's IP address.

    Tablets at the tables usually sit behind the restaurant's router or a
    load balancer. When ``TRUSTED_PROXY_HEADER`` is set (e.g.
    ``HTTP_X_FORWARDED_FOR``) the LAST address in that header is used, since
    the proxy appends the address it actually saw and earlier entries can be
    forged by the client. Otherwise REMOTE_ADDR.

    Args:
        group: the rate limit group (required by django-ratelimit, unused)
        request: the Django request
    """
    header = getattr(settings, "TRUSTED_PROXY_HEADER", None)
    if header:
        forwarded = request.META.get(header)
        if forwarded:
            return forwarded.split(",")[-1].strip()
    return request.META.get("REMOTE_ADDR")
