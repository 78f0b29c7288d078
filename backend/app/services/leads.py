"""Lead lifecycle: contact capture, demo booking, updates, rescheduling and archiving.

Status changes are not restricted: any status may follow any other. Demo slot
uniqueness among active leads is checked with a read before the insert; the two
statements are not atomic, so two concurrent bookings for the same slot can
both succeed.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from backend.app.core.errors import InvalidSlotError, NotFoundError, SlotConflictError, ValidationError
from backend.app.core.settings import get_settings
from backend.app.core.time import utc_now, utc_today
from backend.app.db.search import LIKE_ESCAPE, contains_pattern
from backend.app.models.demo_details import DemoDetails
from backend.app.models.lead import Lead
from backend.app.models.lead_note import LeadNote
from backend.app.schemas.lead import ContactCreate, DemoBookingCreate, LeadUpdate, RescheduleRequest
from backend.app.services.activity_log import ActivityLog
from backend.app.services.availability import find_conflicting_demo, get_available_slots
from backend.app.services.notifications import NotificationDispatcher, contact_notification, demo_confirmation

logger = logging.getLogger(__name__)

UTM_KEYS = ("utm_source", "utm_medium", "utm_campaign", "utm_term", "utm_content")
DEFAULT_DEMO_MESSAGE = "Demo booking request"
RESCHEDULED_NOTE_STATUS = "rescheduled"

SORTABLE_FIELDS = {
    "createdAt": Lead.created_at,
    "updatedAt": Lead.updated_at,
    "status": Lead.status,
    "priority": Lead.priority,
    "firstName": Lead.first_name,
    "lastName": Lead.last_name,
    "email": Lead.email,
    "businessName": Lead.business_name,
    "businessType": Lead.business_type,
    "inquiryType": Lead.inquiry_type,
}


@dataclass
class RequestContext:
    """Provenance captured once from the inbound request."""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    utm_data: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_values(cls, ip_address, user_agent, query_params) -> "RequestContext":
        utm = {key: query_params[key] for key in UTM_KEYS if query_params.get(key)}
        return cls(ip_address=ip_address, user_agent=user_agent, utm_data=utm)


@dataclass
class RescheduleResult:
    id: str
    old_date: date
    old_time: str
    new_date: date
    new_time: str


def get_lead(db: Session, lead_id: str) -> Lead:
    lead = db.query(Lead).filter(Lead.id == lead_id).first()
    if not lead:
        raise NotFoundError("Lead not found")
    return lead


def create_contact_lead(
    db: Session,
    lead_in: ContactCreate,
    *,
    context: RequestContext,
    dispatcher: NotificationDispatcher,
    activity: ActivityLog,
) -> Lead:
    lead = Lead(
        first_name=lead_in.first_name,
        last_name=lead_in.last_name,
        email=lead_in.email,
        phone=lead_in.phone,
        business_name=lead_in.business_name,
        business_type=lead_in.business_type,
        inquiry_type=lead_in.inquiry_type,
        message=lead_in.message,
        status="pending",
        priority="medium",
        tags=[],
        source="website",
        utm_data=context.utm_data or None,
        ip_address=context.ip_address,
        user_agent=context.user_agent,
    )
    db.add(lead)
    db.commit()
    db.refresh(lead)
    logger.info("Contact lead %s created (%s)", lead.id, lead.inquiry_type)

    dispatcher.dispatch(contact_notification(lead))
    activity.append(
        "contact_submitted",
        {"leadId": lead.id, "businessType": lead.business_type, "inquiryType": lead.inquiry_type},
    )
    return lead


def book_demo(
    db: Session,
    booking_in: DemoBookingCreate,
    *,
    context: RequestContext,
    dispatcher: NotificationDispatcher,
    activity: ActivityLog,
    today: Optional[date] = None,
) -> Lead:
    today = today or utc_today()
    demo_date = booking_in.preferred_date
    demo_time = booking_in.preferred_time
    if demo_date <= today:
        raise InvalidSlotError("Demo date must be in the future")

    # Check-then-insert without a lock: concurrent bookings may both pass.
    if find_conflicting_demo(db, demo_date, demo_time) is not None:
        raise SlotConflictError(get_available_slots(db, demo_date))

    lead = Lead(
        first_name=booking_in.first_name,
        last_name=booking_in.last_name,
        email=booking_in.email,
        phone=booking_in.phone,
        business_name=booking_in.business_name,
        business_type=booking_in.business_type,
        inquiry_type="demo",
        message=booking_in.current_challenges or DEFAULT_DEMO_MESSAGE,
        status="pending",
        priority="high",
        tags=[],
        source="website",
        utm_data=context.utm_data or None,
        ip_address=context.ip_address,
        user_agent=context.user_agent,
        demo_details=DemoDetails(
            preferred_date=demo_date,
            preferred_time=demo_time,
            demo_type=booking_in.demo_type,
            team_size=booking_in.team_size,
            current_challenges=booking_in.current_challenges,
            timezone=booking_in.timezone or get_settings().default_demo_timezone,
        ),
    )
    db.add(lead)
    db.commit()
    db.refresh(lead)
    logger.info("Demo %s booked for %s %s", lead.id, demo_date.isoformat(), demo_time)

    dispatcher.dispatch(demo_confirmation(lead))
    activity.append(
        "demo_booked",
        {
            "leadId": lead.id,
            "demoType": booking_in.demo_type,
            "demoDate": demo_date.isoformat(),
            "businessType": booking_in.business_type,
        },
    )
    return lead


def update_lead(db: Session, lead_id: str, lead_in: LeadUpdate, *, activity: ActivityLog) -> Lead:
    lead = get_lead(db, lead_id)
    update_fields = {
        "status": lead_in.status,
        "priority": lead_in.priority,
        "assigned_to": lead_in.assigned_to,
        "tags": lead_in.tags,
    }
    for field_name, value in update_fields.items():
        if value is not None:  # Only update provided fields
            setattr(lead, field_name, value)
    if lead_in.notes:
        lead.notes.append(LeadNote(status=lead.status, note=lead_in.notes, created_at=utc_now()))
    lead.updated_at = utc_now()
    db.commit()
    db.refresh(lead)

    activity.append("contact_updated", {"leadId": lead.id, "status": lead.status, "priority": lead.priority})
    return lead


def reschedule_demo(
    db: Session,
    lead_id: str,
    request: RescheduleRequest,
    *,
    dispatcher: NotificationDispatcher,
    activity: ActivityLog,
) -> RescheduleResult:
    lead = db.query(Lead).filter(Lead.id == lead_id).first()
    if not lead or lead.inquiry_type != "demo" or lead.demo_details is None:
        raise NotFoundError("Demo not found")

    new_date, new_time = request.new_date, request.new_time
    if find_conflicting_demo(db, new_date, new_time, exclude_lead_id=lead.id) is not None:
        raise SlotConflictError(get_available_slots(db, new_date), "This time slot is already booked")

    details = lead.demo_details
    old_date, old_time = details.preferred_date, details.preferred_time
    details.preferred_date = new_date
    details.preferred_time = new_time
    lead.status = "contacted"
    lead.notes.append(
        LeadNote(
            status=RESCHEDULED_NOTE_STATUS,
            note=(
                f"Demo rescheduled from {old_date:%a %b %d %Y} {old_time} to {new_date:%a %b %d %Y} {new_time}. "
                f"Reason: {request.reason or 'Not specified'}"
            ),
            created_at=utc_now(),
        )
    )
    lead.updated_at = utc_now()
    db.commit()
    db.refresh(lead)
    logger.info("Demo %s rescheduled to %s %s", lead.id, new_date.isoformat(), new_time)

    dispatcher.dispatch(demo_confirmation(lead, is_reschedule=True))
    activity.append(
        "demo_rescheduled",
        {
            "leadId": lead.id,
            "oldDate": old_date.isoformat(),
            "newDate": new_date.isoformat(),
            "reason": request.reason,
        },
    )
    return RescheduleResult(id=lead.id, old_date=old_date, old_time=old_time, new_date=new_date, new_time=new_time)


def archive_lead(db: Session, lead_id: str, *, activity: ActivityLog) -> Lead:
    """Soft delete. Archiving an archived lead is a no-op that still succeeds."""
    lead = get_lead(db, lead_id)
    lead.status = "archived"
    lead.updated_at = utc_now()
    db.commit()
    db.refresh(lead)
    logger.info("Lead %s archived", lead.id)
    activity.append("contact_archived", {"leadId": lead.id})
    return lead


def list_leads(
    db: Session,
    *,
    page: int = 1,
    limit: int = 20,
    status: Optional[str] = None,
    business_type: Optional[str] = None,
    inquiry_type: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: str = "createdAt",
    sort_order: str = "desc",
) -> Tuple[List[Lead], Dict[str, int]]:
    query = db.query(Lead)
    if status:
        query = query.filter(Lead.status == status)
    if business_type:
        query = query.filter(Lead.business_type == business_type)
    if inquiry_type:
        query = query.filter(Lead.inquiry_type == inquiry_type)
    if search and search.strip():
        pattern = contains_pattern(search.strip())
        query = query.filter(
            Lead.first_name.ilike(pattern, escape=LIKE_ESCAPE)
            | Lead.last_name.ilike(pattern, escape=LIKE_ESCAPE)
            | Lead.business_name.ilike(pattern, escape=LIKE_ESCAPE)
            | Lead.email.ilike(pattern, escape=LIKE_ESCAPE)
        )

    errors = []
    if sort_by not in SORTABLE_FIELDS:
        errors.append({"field": "sortBy", "reason": f"Unsupported sort field '{sort_by}'"})
    sort_order_normalized = (sort_order or "desc").lower()
    if sort_order_normalized not in {"asc", "desc"}:
        errors.append({"field": "sortOrder", "reason": "Must be 'asc' or 'desc'"})
    if errors:
        raise ValidationError(errors)

    sort_column = SORTABLE_FIELDS[sort_by]
    if sort_order_normalized == "asc":
        order_by_clause = [sort_column.asc(), Lead.id.asc()]
    else:
        order_by_clause = [sort_column.desc(), Lead.id.desc()]

    total = query.count()
    leads = (
        query.options(selectinload(Lead.demo_details), selectinload(Lead.notes))
        .order_by(*order_by_clause)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    pagination = {
        "current_page": page,
        "total_pages": math.ceil(total / limit) if limit else 0,
        "total_items": total,
        "items_per_page": limit,
    }
    return leads, pagination


def _count_by(db: Session, column) -> Dict[str, int]:
    rows = db.query(column, func.count(Lead.id)).group_by(column).order_by(func.count(Lead.id).desc()).all()
    return {value: count for value, count in rows}


def get_lead_statistics(db: Session) -> Dict[str, Any]:
    recent = db.query(Lead).order_by(Lead.created_at.desc(), Lead.id.desc()).limit(5).all()
    return {
        "total": db.query(func.count(Lead.id)).scalar() or 0,
        "by_status": _count_by(db, Lead.status),
        "by_business_type": _count_by(db, Lead.business_type),
        "by_inquiry_type": _count_by(db, Lead.inquiry_type),
        "by_priority": _count_by(db, Lead.priority),
        "recent_leads": recent,
    }


def get_all_leads(db: Session) -> List[Lead]:
    return db.query(Lead).order_by(Lead.created_at.asc(), Lead.id.asc()).all()
