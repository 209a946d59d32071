# tracking/routing.py
from django.urls import re_path
from . import consumers

websocket_urlpatterns = [
    re_path(r"ws/race/$", consumers.RaceConsoleConsumer.as_asgi()),
]
