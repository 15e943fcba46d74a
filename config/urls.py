"""
BOS Root URL Configuration
Thin adapter routes only: the hotel stay JSON API lives under /v1/hotel/.
"""

from django.urls import include, path


urlpatterns = [
    path("v1/hotel/", include("adapters.django_api.urls")),
]
