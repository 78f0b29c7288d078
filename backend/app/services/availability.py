"""Demo slot availability for a calendar day."""

from datetime import date
from typing import List, Optional, get_args

from sqlalchemy.orm import Session

from backend.app.models.demo_details import DemoDetails
from backend.app.models.lead import Lead
from backend.app.schemas.lead import DemoTimeSlot

DEMO_TIME_SLOTS: tuple[str, ...] = get_args(DemoTimeSlot)
ACTIVE_STATUSES = ("pending", "contacted", "qualified")
BUSINESS_HOURS = {"start": "09:00", "end": "17:00"}


def _active_demos_query(db: Session, day: date):
    return (
        db.query(Lead)
        .join(DemoDetails, DemoDetails.lead_id == Lead.id)
        .filter(
            Lead.inquiry_type == "demo",
            Lead.status.in_(ACTIVE_STATUSES),
            DemoDetails.preferred_date == day,
        )
    )


def get_available_slots(db: Session, day: date) -> List[str]:
    """Return the fixed slots not held by an active demo lead on ``day``, in slot order."""
    booked = {
        preferred_time
        for (preferred_time,) in _active_demos_query(db, day).with_entities(DemoDetails.preferred_time)
    }
    return [slot for slot in DEMO_TIME_SLOTS if slot not in booked]


def find_conflicting_demo(
    db: Session, day: date, time_slot: str, exclude_lead_id: Optional[str] = None
) -> Optional[Lead]:
    query = _active_demos_query(db, day).filter(DemoDetails.preferred_time == time_slot)
    if exclude_lead_id is not None:
        query = query.filter(Lead.id != exclude_lead_id)
    return query.first()


def list_demo_bookings(
    db: Session,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    status: Optional[str] = None,
) -> List[Lead]:
    query = db.query(Lead).join(DemoDetails, DemoDetails.lead_id == Lead.id).filter(Lead.inquiry_type == "demo")
    if start_date and end_date:
        query = query.filter(DemoDetails.preferred_date >= start_date, DemoDetails.preferred_date <= end_date)
    if status:
        query = query.filter(Lead.status == status)
    return query.order_by(DemoDetails.preferred_date.asc(), DemoDetails.preferred_time.asc()).all()
