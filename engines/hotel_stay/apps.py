"""
BOS Hotel Stay Engine - App Configuration
=========================================
Booking and room lifecycle: availability, check-in/out, ledger, transfers.
"""

from django.apps import AppConfig


class HotelStayConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "engines.hotel_stay"
    label = "hotel_stay"
    verbose_name = "BOS Hotel Stay"
