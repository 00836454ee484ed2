from django.urls import re_path
from . import consumers

websocket_urlpatterns = [
    re_path(r"ws/relay/(?P<channel>[A-Za-z0-9_.-]+)/$", consumers.RelayConsumer.as_asgi()),
]
