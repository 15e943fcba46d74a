"""
Hotel stay: room transfers against the database.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from core.config.rules import StayPolicy, TransferRules
from engines.hotel_stay.commands import CheckoutRequest
from engines.hotel_stay.errors import ConflictError, InvalidStateError, ValidationError
from engines.hotel_stay.models import HousekeepingTask, Room, RoomAssignment, TransferRecord
from engines.hotel_stay.notifications import Audience
from engines.hotel_stay.services import HotelStayService

pytestmark = pytest.mark.django_db(transaction=True)


IST = timezone(timedelta(hours=5, minutes=30))


def _reload(obj):
    obj.refresh_from_db()
    return obj


@pytest.fixture
def in_house(service, make_room, book):
    """Guest checked into 101 for 10→12 January; 102 is free."""
    source, target = make_room("101"), make_room("102")
    booking = book([source])
    service.check_in(booking.pk)
    return booking, source, target


class TestSuccessfulTransfer:
    def test_checked_in_guest_moves(self, service, notifier, in_house):
        booking, source, target = in_house

        record = service.transfer_room(
            booking.pk, source.pk, target.pk, "Plumbing issue", staff_id="frontdesk-1"
        )

        assert record.from_room_id == source.pk
        assert record.to_room_id == target.pk
        assert RoomAssignment.objects.get(booking=booking).room_id == target.pk
        assert _reload(source).status == "available"
        assert _reload(target).status == "occupied"
        task = HousekeepingTask.objects.get(room=source)
        assert task.task_type == "Room Cleaning"
        assert task.booking_id == booking.pk
        assert notifier.audiences() == [
            Audience.GUEST, Audience.HOUSEKEEPING, Audience.MANAGEMENT,
        ]

    def test_reserved_guest_moves_reservation(self, service, make_room, book):
        source, target = make_room("101"), make_room("102")
        booking = book([source])

        service.transfer_room(booking.pk, source.pk, target.pk, "Room upgrade")

        assert _reload(target).status == "reserved"
        assert _reload(source).status == "available"
        assert not HousekeepingTask.objects.exists()

    def test_source_held_by_later_guest_stays_reserved(self, service, book, in_house):
        booking, source, target = in_house
        later = book([source], date(2025, 1, 12), date(2025, 1, 14), phone="+919800000002")

        service.transfer_room(booking.pk, source.pk, target.pk, "Noise complaint")

        assert _reload(source).status == "reserved"
        assert _reload(target).status == "occupied"
        assert RoomAssignment.objects.get(booking=later).room_id == source.pk
        assert HousekeepingTask.objects.filter(room=source, task_type="Room Cleaning").exists()

    def test_notification_flags(self, service, notifier, in_house):
        booking, source, target = in_house
        service.transfer_room(
            booking.pk, source.pk, target.pk, "Guest request",
            notify_guest=False, notify_housekeeping=False,
        )
        assert notifier.audiences() == [Audience.MANAGEMENT]

    def test_future_booking_on_target_after_stay_is_fine(self, service, book, in_house):
        booking, source, target = in_house
        book([target], date(2025, 1, 12), date(2025, 1, 14), phone="+919800000002")
        # target is reserved for the later guest; make it available again for the move
        target.status = "available"
        target.save()

        service.transfer_room(booking.pk, source.pk, target.pk, "Noise complaint")
        assert _reload(target).status == "occupied"

    def test_history_and_statistics(self, service, in_house, make_room):
        booking, source, target = in_house
        third = make_room("103")
        service.transfer_room(booking.pk, source.pk, target.pk, "Plumbing issue")
        service.transfer_room(booking.pk, target.pk, third.pk, "Noise complaint")

        history = service.transfer_history(booking.pk)
        assert [(r.from_room.number, r.to_room.number) for r in history] == [
            ("101", "102"), ("102", "103"),
        ]
        stats = service.transfer_statistics(date(2025, 1, 10), date(2025, 1, 10))
        assert stats["total_transfers"] == 2
        assert stats["by_reason"] == {"Noise complaint": 1, "Plumbing issue": 1}
        assert service.transfer_statistics(date(2025, 1, 11), date(2025, 1, 12))[
            "total_transfers"
        ] == 0


class TestRejectedTransfer:
    def _assert_untouched(self, booking, source, target):
        assert RoomAssignment.objects.get(booking=booking).room_id == source.pk
        assert _reload(source).status == "occupied"
        assert not TransferRecord.objects.exists()
        assert not HousekeepingTask.objects.filter(room=source).exists()

    def test_same_room(self, service, in_house):
        booking, source, target = in_house
        with pytest.raises(ValidationError, match="must be different"):
            service.transfer_room(booking.pk, source.pk, source.pk, "Guest request")

    def test_reason_required(self, service, in_house):
        booking, source, target = in_house
        with pytest.raises(ValidationError, match="reason is required"):
            service.transfer_room(booking.pk, source.pk, target.pk, "")

    def test_target_not_available(self, service, in_house):
        booking, source, target = in_house
        service.update_room_status(target.pk, "maintenance", "Leak")

        with pytest.raises(ConflictError, match=r"Room 102 is not available \(Status: maintenance\)"):
            service.transfer_room(booking.pk, source.pk, target.pk, "Guest request")

        self._assert_untouched(booking, source, target)
        assert _reload(target).status == "maintenance"

    def test_target_booked_by_other_guest(self, service, book, in_house):
        booking, source, target = in_house
        book([target], date(2025, 1, 11), date(2025, 1, 13), phone="+919800000002")
        target.status = "available"
        target.save()

        with pytest.raises(ConflictError, match="Room 102 is already booked"):
            service.transfer_room(booking.pk, source.pk, target.pk, "Guest request")

        self._assert_untouched(booking, source, target)

    def test_source_not_on_booking(self, service, in_house, make_room):
        booking, source, target = in_house
        stranger = make_room("103")
        with pytest.raises(ConflictError, match="not assigned to booking"):
            service.transfer_room(booking.pk, stranger.pk, target.pk, "Guest request")

    def test_checked_out_booking(self, service, clock, in_house):
        booking, source, target = in_house
        clock.set(datetime(2025, 1, 12, 10, 0, tzinfo=IST))
        service.checkout(CheckoutRequest(booking_id=booking.pk))

        with pytest.raises(
            InvalidStateError, match="Cannot transfer room for booking with status: checked_out"
        ):
            service.transfer_room(booking.pk, source.pk, target.pk, "Guest request")

    def test_transfer_limit(self, context, clock, registry, in_house, make_room):
        booking, source, target = in_house
        strict = HotelStayService(
            context=context,
            policy=StayPolicy(transfer_rules=TransferRules(max_transfers_per_booking=1)),
            clock=clock,
            subscriber_registry=registry,
        )
        strict.transfer_room(booking.pk, source.pk, target.pk, "Guest request")
        third = make_room("103")

        with pytest.raises(ConflictError, match="maximum 1"):
            strict.transfer_room(booking.pk, target.pk, third.pk, "Guest request")

        assert TransferRecord.objects.count() == 1

    def test_room_type_rule(self, context, clock, in_house, make_room, suite_type):
        booking, source, target = in_house
        strict = HotelStayService(
            context=context,
            policy=StayPolicy(transfer_rules=TransferRules(allow_different_room_type=False)),
            clock=clock,
        )
        suite = make_room("301", kind=suite_type)
        with pytest.raises(ConflictError, match="disabled"):
            strict.transfer_room(booking.pk, source.pk, suite.pk, "Room upgrade")


class TestTransferTargets:
    def test_lists_only_free_rooms(self, service, book, in_house, make_room):
        booking, source, target = in_house
        busy = make_room("103")
        book([busy], date(2025, 1, 11), date(2025, 1, 12), phone="+919800000002")
        Room.objects.filter(pk=busy.pk).update(status="available")
        make_room("104", status="maintenance")
        free = make_room("105")

        rooms = service.available_rooms_for_transfer(booking.pk, exclude_room_id=source.pk)

        assert [r.number for r in rooms] == [target.number, free.number]
