"""
Hotel stay: room status, housekeeping and availability against the database.
"""

from datetime import date
from decimal import Decimal

import pytest

from engines.hotel_stay.errors import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    StateTransitionError,
    ValidationError,
)
from engines.hotel_stay.models import HousekeepingTask, Room, StaffLog

pytestmark = pytest.mark.django_db(transaction=True)


def _reload(obj):
    obj.refresh_from_db()
    return obj


class TestRoomStatus:
    def test_maintenance_raises_task(self, service, make_room):
        room = make_room("101")
        service.update_room_status(room.pk, "maintenance", "AC leaking", staff_id="hk-1")

        room = _reload(room)
        assert room.status == "maintenance"
        assert room.status_reason == "AC leaking"
        assert room.updated_by == "hk-1"
        task = HousekeepingTask.objects.get(room=room)
        assert task.task_type == "Maintenance"
        assert task.priority == "medium"
        assert task.estimated_minutes == 120
        assert StaffLog.objects.filter(action="room.status_changed", staff_id="hk-1").exists()

    def test_invalid_transition(self, service, make_room):
        room = make_room("101", status="cleaning")
        with pytest.raises(StateTransitionError, match="from cleaning to occupied"):
            service.update_room_status(room.pk, "occupied")
        assert _reload(room).status == "cleaning"

    def test_same_status_refused(self, service, make_room):
        room = make_room("101")
        with pytest.raises(StateTransitionError, match="already available"):
            service.update_room_status(room.pk, "available")

    def test_unknown_room(self, service):
        with pytest.raises(NotFoundError):
            service.update_room_status(999, "blocked")

    def test_occupied_with_guest_is_guarded(self, service, make_room, book):
        room = make_room("101")
        booking = book([room])
        service.check_in(booking.pk)

        with pytest.raises(ConflictError, match="checked-in guest"):
            service.update_room_status(room.pk, "maintenance")
        with pytest.raises(ConflictError, match="checked-in guest"):
            service.update_room_status(room.pk, "available")
        assert _reload(room).status == "occupied"

    def test_occupied_without_guest(self, service, make_room):
        room = make_room("101", status="occupied")
        service.update_room_status(room.pk, "unclean")
        service.update_room_status(room.pk, "cleaning")
        assert _reload(room).status == "cleaning"


class TestBulkStatus:
    def test_partial_failure(self, service, make_room):
        free = make_room("101")
        occupied = make_room("102", status="occupied")

        result = service.bulk_update_room_status(
            [free.pk, occupied.pk, 999], "cleaning", "Deep clean"
        )

        assert not result.all_ok
        assert [r.item_id for r in result.succeeded] == [free.pk]
        codes = {r.item_id: r.error_code for r in result.failed}
        assert codes == {occupied.pk: "INVALID_TRANSITION", 999: "NOT_FOUND"}
        assert _reload(free).status == "cleaning"
        assert _reload(occupied).status == "occupied"

        failure = result.as_partial_failure()
        assert failure.http_status == 207
        assert len(failure.details["results"]) == 3

    def test_all_ok(self, service, make_room):
        rooms = [make_room("101"), make_room("102")]
        result = service.bulk_update_room_status([r.pk for r in rooms], "blocked", "Event")
        assert result.all_ok
        assert result.as_partial_failure() is None


class TestHousekeeping:
    def test_complete_task_releases_room(self, service, make_room):
        room = make_room("101")
        service.update_room_status(room.pk, "cleaning")
        task = HousekeepingTask.objects.get(room=room)

        done = service.complete_housekeeping_task(task.pk, staff_id="hk-2")

        assert done.status == "completed"
        assert done.completed_by == "hk-2"
        assert _reload(room).status == "available"
        assert service.pending_housekeeping_tasks() == []

    def test_complete_into_maintenance(self, service, make_room):
        room = make_room("101")
        service.update_room_status(room.pk, "cleaning")
        task = HousekeepingTask.objects.get(room=room)
        service.complete_housekeeping_task(task.pk, final_status="maintenance")
        assert _reload(room).status == "maintenance"

    def test_completed_twice(self, service, make_room):
        room = make_room("101")
        service.update_room_status(room.pk, "cleaning")
        task = HousekeepingTask.objects.get(room=room)
        service.complete_housekeeping_task(task.pk)
        with pytest.raises(InvalidStateError, match="already completed"):
            service.complete_housekeeping_task(task.pk)

    def test_bad_final_status(self, service):
        with pytest.raises(ValidationError):
            service.complete_housekeeping_task(1, final_status="occupied")

    def test_missing_task(self, service):
        with pytest.raises(NotFoundError):
            service.complete_housekeeping_task(999)


class TestAvailability:
    def test_check_availability(self, service, make_room, book):
        room = make_room("101")
        booking = book([room], date(2025, 1, 10), date(2025, 1, 12))

        busy = service.check_availability(room.pk, date(2025, 1, 11), date(2025, 1, 13))
        assert not busy.available
        assert "already booked" in busy.message

        assert service.check_availability(room.pk, date(2025, 1, 12), date(2025, 1, 13)).available
        assert service.check_availability(
            room.pk, date(2025, 1, 11), date(2025, 1, 13), exclude_booking_id=booking.pk
        ).available

    def test_reversed_range(self, service, make_room):
        room = make_room("101")
        with pytest.raises(ValidationError):
            service.check_availability(room.pk, date(2025, 1, 12), date(2025, 1, 10))

    def test_available_rooms(self, service, make_room, book, suite_type):
        booked, free = make_room("101"), make_room("102")
        make_room("103", status="blocked")
        suite = make_room("301", kind=suite_type)
        book([booked])

        rooms = service.available_rooms(date(2025, 1, 10), date(2025, 1, 12))
        assert [r.number for r in rooms] == ["102", "301"]

        # the block only takes 103 out of sale for tonight
        later = service.available_rooms(date(2025, 1, 20), date(2025, 1, 22))
        assert [r.number for r in later] == ["101", "102", "103", "301"]

        suites = service.available_rooms(
            date(2025, 1, 10), date(2025, 1, 12), room_type_id=suite_type.pk
        )
        assert [r.pk for r in suites] == [suite.pk]
        assert free.pk not in [r.pk for r in suites]


class TestChangeRoomType:
    def test_refused_with_upcoming_reservation(self, service, make_room, book, suite_type):
        room = make_room("101")
        book([room])
        with pytest.raises(ConflictError, match="active reservation"):
            service.change_room_type(room.pk, suite_type.pk)

    def test_changes_and_syncs_price(self, service, make_room, suite_type):
        room = make_room("101")
        service.change_room_type(room.pk, suite_type.pk, sync_price=True)
        room = Room.objects.get(pk=room.pk)
        assert room.room_type_id == suite_type.pk
        assert room.price == Decimal("6000.00")
