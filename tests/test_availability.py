from datetime import date, timedelta

import pytest

from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.models.demo_details import DemoDetails
from backend.app.models.lead import Lead
from backend.app.services.availability import (
    DEMO_TIME_SLOTS,
    find_conflicting_demo,
    get_available_slots,
    list_demo_bookings,
)

DEMO_DAY = date(2030, 3, 14)


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def add_demo(db, day: date, time_slot: str, status: str = "pending", inquiry_type: str = "demo") -> Lead:
    lead = Lead(
        first_name="Dana",
        last_name="Shah",
        email="dana@example.com",
        phone="5551234567",
        business_name="Dana Dental",
        business_type="clinic",
        inquiry_type=inquiry_type,
        status=status,
        priority="high",
        demo_details=DemoDetails(
            preferred_date=day,
            preferred_time=time_slot,
            demo_type="ai-support-bot",
        ),
    )
    db.add(lead)
    db.commit()
    db.refresh(lead)
    return lead


def test_fixed_slot_universe():
    assert DEMO_TIME_SLOTS == ("09:00", "10:00", "11:00", "14:00", "15:00", "16:00", "17:00")


def test_empty_day_returns_all_slots_in_order(db):
    assert get_available_slots(db, DEMO_DAY) == list(DEMO_TIME_SLOTS)


def test_booked_slots_removed_preserving_order(db):
    add_demo(db, DEMO_DAY, "14:00")
    add_demo(db, DEMO_DAY, "09:00")
    assert get_available_slots(db, DEMO_DAY) == ["10:00", "11:00", "15:00", "16:00", "17:00"]


def test_inactive_leads_do_not_hold_slots(db):
    add_demo(db, DEMO_DAY, "09:00", status="converted")
    add_demo(db, DEMO_DAY, "10:00", status="closed")
    add_demo(db, DEMO_DAY, "11:00", status="archived")
    add_demo(db, DEMO_DAY, "14:00", status="qualified")
    assert get_available_slots(db, DEMO_DAY) == ["09:00", "10:00", "11:00", "15:00", "16:00", "17:00"]


def test_other_days_are_ignored(db):
    add_demo(db, DEMO_DAY + timedelta(days=1), "09:00")
    add_demo(db, DEMO_DAY - timedelta(days=1), "10:00")
    assert get_available_slots(db, DEMO_DAY) == list(DEMO_TIME_SLOTS)


def test_find_conflicting_demo_excludes_given_lead(db):
    lead = add_demo(db, DEMO_DAY, "15:00", status="contacted")
    assert find_conflicting_demo(db, DEMO_DAY, "15:00").id == lead.id
    assert find_conflicting_demo(db, DEMO_DAY, "15:00", exclude_lead_id=lead.id) is None
    assert find_conflicting_demo(db, DEMO_DAY, "16:00") is None


def test_list_demo_bookings_orders_by_date_then_time(db):
    later = add_demo(db, DEMO_DAY + timedelta(days=2), "09:00")
    afternoon = add_demo(db, DEMO_DAY, "16:00")
    morning = add_demo(db, DEMO_DAY, "10:00", status="converted")

    everything = list_demo_bookings(db)
    assert [lead.id for lead in everything] == [morning.id, afternoon.id, later.id]

    windowed = list_demo_bookings(db, start_date=DEMO_DAY, end_date=DEMO_DAY, status="pending")
    assert [lead.id for lead in windowed] == [afternoon.id]
