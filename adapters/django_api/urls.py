"""
BOS Django adapter URL routing.
"""

from django.urls import path

from adapters.django_api import views


urlpatterns = [
    path("availability", views.availability_view),
    path("rooms/available", views.available_rooms_view),
    path("rooms/status/bulk", views.room_status_bulk_view),
    path("rooms/<int:room_id>/status", views.room_status_view),
    path("bookings", views.bookings_create_view),
    path("bookings/<int:booking_id>", views.booking_detail_view),
    path("bookings/<int:booking_id>/confirm", views.booking_confirm_view),
    path("bookings/<int:booking_id>/check-in", views.booking_check_in_view),
    path("bookings/<int:booking_id>/checkout", views.booking_checkout_view),
    path("bookings/<int:booking_id>/cancel", views.booking_cancel_view),
    path("bookings/<int:booking_id>/transfers", views.booking_transfer_view),
    path(
        "bookings/<int:booking_id>/transfer-targets",
        views.booking_transfer_targets_view,
    ),
    path("bookings/<int:booking_id>/payments", views.booking_payments_view),
    path("assignments/<int:assignment_id>/tariff", views.assignment_tariff_view),
    path("housekeeping/tasks/<int:task_id>/complete", views.housekeeping_complete_view),
    path("transfers/statistics", views.transfer_statistics_view),
]
