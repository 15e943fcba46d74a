"""
Shared fixtures for the hotel stay engine tests.

Property clock is pinned to 2025-01-10 08:00 IST; the property runs on
Asia/Kolkata with 12% GST and the default grace policy.
"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from core.config.rules import StayPolicy, TaxRateSet
from core.context.tenant_context import TenantContext
from core.events.registry import SubscriberRegistry
from core.time.clock import FixedClock
from engines.hotel_stay.commands import (
    AdvancePayment,
    CreateBookingRequest,
    GuestInfo,
    RoomRequest,
)
from engines.hotel_stay.models import Room, RoomType
from engines.hotel_stay.notifications import NotificationSubscriber, StaffRecipients
from engines.hotel_stay.services import HotelStayService


PROPERTY_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")
TZ = "Asia/Kolkata"
START = datetime(2025, 1, 10, 2, 30, tzinfo=timezone.utc)  # 08:00 IST


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def send(self, notification):
        self.sent.append(notification)

    def audiences(self):
        return [n.audience for n in self.sent]


@pytest.fixture
def clock():
    return FixedClock(START)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def context():
    return TenantContext(property_id=PROPERTY_ID, timezone=TZ, system_actor_id="system")


@pytest.fixture
def policy():
    return StayPolicy(tax_rates=TaxRateSet.from_mapping({"GST": 12}))


@pytest.fixture
def registry(notifier, policy):
    registry = SubscriberRegistry()
    NotificationSubscriber(
        notifier,
        policy.transfer_rules,
        StaffRecipients(housekeeping="hk@hotel.test", management="gm@hotel.test"),
    ).register(registry)
    return registry


@pytest.fixture
def service(context, policy, clock, registry):
    return HotelStayService(
        context=context, policy=policy, clock=clock, subscriber_registry=registry
    )


@pytest.fixture
def room_type(db):
    return RoomType.objects.create(
        property_id=PROPERTY_ID, name="Deluxe", code="DLX", base_price=Decimal("2500.00")
    )


@pytest.fixture
def suite_type(db):
    return RoomType.objects.create(
        property_id=PROPERTY_ID, name="Suite", code="STE", base_price=Decimal("6000.00")
    )


@pytest.fixture
def make_room(room_type):
    def _make(number, status="available", kind=None):
        return Room.objects.create(
            property_id=PROPERTY_ID,
            number=number,
            room_type=kind or room_type,
            floor=int(number[0]),
            price=(kind or room_type).base_price,
            status=status,
        )

    return _make


@pytest.fixture
def book(service):
    """Book rooms at 2500/night for the given dates."""

    def _book(
        rooms,
        check_in=date(2025, 1, 10),
        check_out=date(2025, 1, 12),
        *,
        advance=None,
        phone="+919800000001",
        **extra,
    ):
        request = CreateBookingRequest(
            guest=GuestInfo(name="Asha Rao", phone=phone, email="asha@example.test"),
            rooms=tuple(
                RoomRequest(room_id=room.pk, room_rate=Decimal("2500.00")) for room in rooms
            ),
            check_in_date=check_in,
            check_out_date=check_out,
            advances=(AdvancePayment(amount=advance),) if advance else (),
            **extra,
        )
        return service.create_booking(request, staff_id="frontdesk-1")

    return _book
