"""Lead management endpoints: contact form, demo booking and admin operations."""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from backend.app.core.errors import NotFoundError
from backend.app.core.settings import get_settings
from backend.app.db.session import get_db
from backend.app.dependencies.services import (
    ActivityLog,
    get_activity_log,
    get_notification_dispatcher,
    get_request_context,
)
from backend.app.schemas.common import ApiResponse, Pagination
from backend.app.schemas.lead import (
    AvailabilityRead,
    BusinessHours,
    BusinessType,
    ContactCreate,
    ContactSubmitted,
    DemoBooked,
    DemoBookingCreate,
    DemoRescheduled,
    DemoSlotRead,
    InquiryType,
    LeadPage,
    LeadRead,
    LeadStats,
    LeadStatus,
    LeadSummary,
    LeadUpdate,
    RescheduleRequest,
)
from backend.app.services import leads as lead_service
from backend.app.services.availability import BUSINESS_HOURS, get_available_slots, list_demo_bookings
from backend.app.services.lead_export import build_leads_csv
from backend.app.services.leads import RequestContext
from backend.app.services.notifications import NotificationDispatcher

router = APIRouter(prefix="/leads", tags=["leads"])

DEMO_NEXT_STEPS = [
    "Check your email for confirmation details",
    "Add the demo to your calendar",
    "Prepare any specific questions you have",
    "We'll send a reminder 1 hour before the demo",
]


@router.post("", response_model=ApiResponse[ContactSubmitted], status_code=status.HTTP_201_CREATED)
async def submit_contact(
    lead_in: ContactCreate,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
    activity: ActivityLog = Depends(get_activity_log),
):
    lead = lead_service.create_contact_lead(db, lead_in, context=context, dispatcher=dispatcher, activity=activity)
    return {
        "message": "Thank you for your inquiry! We'll get back to you within 24 hours.",
        "data": ContactSubmitted(id=lead.id, status=lead.status),
    }


@router.post("/demo", response_model=ApiResponse[DemoBooked], status_code=status.HTTP_201_CREATED)
async def book_demo(
    booking_in: DemoBookingCreate,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_request_context),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
    activity: ActivityLog = Depends(get_activity_log),
):
    lead = lead_service.book_demo(db, booking_in, context=context, dispatcher=dispatcher, activity=activity)
    return {
        "message": "Demo booked successfully! We'll send you a confirmation email shortly.",
        "data": DemoBooked(
            id=lead.id,
            demo_date=lead.demo_details.preferred_date,
            demo_time=lead.demo_details.preferred_time,
            demo_type=lead.demo_details.demo_type,
            confirmation_email=lead.email,
            next_steps=DEMO_NEXT_STEPS,
        ),
    }


@router.get("", response_model=ApiResponse[LeadPage])
async def list_leads(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    status: Optional[LeadStatus] = None,
    business_type: Optional[BusinessType] = Query(default=None, alias="businessType"),
    inquiry_type: Optional[InquiryType] = Query(default=None, alias="inquiryType"),
    search: Optional[str] = Query(default=None, max_length=100),
    sort_by: str = Query(default="createdAt", alias="sortBy"),
    sort_order: str = Query(default="desc", alias="sortOrder"),
    db: Session = Depends(get_db),
):
    leads, pagination = lead_service.list_leads(
        db,
        page=page,
        limit=limit,
        status=status,
        business_type=business_type,
        inquiry_type=inquiry_type,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return {
        "data": LeadPage(
            leads=[LeadRead.model_validate(lead) for lead in leads],
            pagination=Pagination(**pagination),
        )
    }


@router.get("/availability", response_model=ApiResponse[AvailabilityRead])
async def get_availability(
    day: date = Query(alias="date"),
    db: Session = Depends(get_db),
):
    timezone_label = get_settings().default_demo_timezone
    return {
        "data": AvailabilityRead(
            date=day,
            available_slots=get_available_slots(db, day),
            business_hours=BusinessHours(**BUSINESS_HOURS, timezone=timezone_label),
            note=f"All times are in {timezone_label}",
        )
    }


@router.get("/demo/slots", response_model=ApiResponse[List[DemoSlotRead]])
async def list_demo_slots(
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
    status: Optional[LeadStatus] = None,
    db: Session = Depends(get_db),
):
    demos = list_demo_bookings(db, start_date=start_date, end_date=end_date, status=status)
    return {"data": [DemoSlotRead.model_validate(demo) for demo in demos]}


@router.get("/export")
async def export_leads(db: Session = Depends(get_db)):
    leads = lead_service.get_all_leads(db)
    if not leads:
        raise NotFoundError("No leads found")
    return Response(
        content=build_leads_csv(leads),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=leads.csv"},
    )


@router.get("/stats", response_model=ApiResponse[LeadStats])
async def get_lead_stats(db: Session = Depends(get_db)):
    stats = lead_service.get_lead_statistics(db)
    stats["recent_leads"] = [LeadSummary.model_validate(lead) for lead in stats["recent_leads"]]
    return {"data": LeadStats(**stats)}


@router.get("/{lead_id}", response_model=ApiResponse[LeadRead])
async def get_lead(lead_id: str, db: Session = Depends(get_db)):
    lead = lead_service.get_lead(db, lead_id)
    return {"data": LeadRead.model_validate(lead)}


@router.put("/{lead_id}", response_model=ApiResponse[LeadRead])
async def update_lead(
    lead_id: str,
    lead_in: LeadUpdate,
    db: Session = Depends(get_db),
    activity: ActivityLog = Depends(get_activity_log),
):
    lead = lead_service.update_lead(db, lead_id, lead_in, activity=activity)
    return {"message": "Lead updated successfully", "data": LeadRead.model_validate(lead)}


@router.put("/{lead_id}/reschedule", response_model=ApiResponse[DemoRescheduled])
async def reschedule_demo(
    lead_id: str,
    request: RescheduleRequest,
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
    activity: ActivityLog = Depends(get_activity_log),
):
    result = lead_service.reschedule_demo(db, lead_id, request, dispatcher=dispatcher, activity=activity)
    return {
        "message": "Demo rescheduled successfully",
        "data": DemoRescheduled(
            id=result.id,
            new_date=result.new_date,
            new_time=result.new_time,
            old_date=result.old_date,
            old_time=result.old_time,
        ),
    }


@router.delete("/{lead_id}", response_model=ApiResponse)
async def archive_lead(
    lead_id: str,
    db: Session = Depends(get_db),
    activity: ActivityLog = Depends(get_activity_log),
):
    lead_service.archive_lead(db, lead_id, activity=activity)
    return {"message": "Lead archived successfully"}
