# tracking/urls.py
from django.urls import path
from . import views

urlpatterns = [
    path("location/", views.post_location, name="post_location"),
]
