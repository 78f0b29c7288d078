"""Lead schemas for contact capture, demo booking and admin reads."""

from datetime import date, datetime
from typing import Dict, List, Literal, Optional

from pydantic import ConfigDict, EmailStr, Field, field_validator

from backend.app.schemas.common import CamelModel, Pagination, RequestModel


BusinessType = Literal["retail", "clinic", "restaurant", "gym", "ecommerce", "service", "other"]
InquiryType = Literal["demo", "pricing", "custom", "support", "other"]
LeadStatus = Literal["pending", "contacted", "qualified", "converted", "closed", "archived"]
LeadPriority = Literal["low", "medium", "high", "urgent"]
DemoType = Literal["ai-support-bot", "ai-automation", "ai-analytics", "custom"]
DemoTimeSlot = Literal["09:00", "10:00", "11:00", "14:00", "15:00", "16:00", "17:00"]


class LeadContactFields(RequestModel):
    first_name: str = Field(min_length=2, max_length=50)
    last_name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    business_name: str = Field(min_length=2, max_length=100)
    business_type: BusinessType

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("first_name", "last_name", "business_name")
    @classmethod
    def reject_line_breaks(cls, value: str) -> str:
        # Names end up in email subject headers
        if "\r" in value or "\n" in value:
            raise ValueError("must not contain line breaks")
        return value


class ContactCreate(LeadContactFields):
    """Contact form submission."""

    phone: Optional[str] = Field(default=None, max_length=20)
    inquiry_type: InquiryType
    message: Optional[str] = Field(default=None, max_length=1000)


class DemoBookingCreate(LeadContactFields):
    """Demo booking request; phone is mandatory here."""

    phone: str = Field(min_length=10, max_length=20)
    preferred_date: date
    preferred_time: DemoTimeSlot
    demo_type: DemoType
    team_size: Optional[int] = Field(default=None, ge=1, le=1000)
    current_challenges: Optional[str] = Field(default=None, max_length=500)
    timezone: Optional[str] = Field(default=None, max_length=64)


class LeadUpdate(RequestModel):
    """Schema for lead updates with partial fields."""

    status: Optional[LeadStatus] = None
    priority: Optional[LeadPriority] = None
    assigned_to: Optional[str] = Field(default=None, max_length=100)
    tags: Optional[List[str]] = None
    notes: Optional[str] = Field(default=None, max_length=1000)


class RescheduleRequest(RequestModel):
    new_date: date
    new_time: DemoTimeSlot
    reason: Optional[str] = Field(default=None, max_length=500)


class DemoDetailsRead(CamelModel):
    preferred_date: date
    preferred_time: str
    demo_type: str
    team_size: Optional[int] = None
    current_challenges: Optional[str] = None
    timezone: str

    model_config = ConfigDict(from_attributes=True)


class LeadNoteRead(CamelModel):
    status: str
    note: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LeadRead(CamelModel):
    id: str
    first_name: str
    last_name: str
    full_name: str
    email: str
    phone: Optional[str] = None
    business_name: str
    business_type: str
    business_info: str
    inquiry_type: str
    message: Optional[str] = None
    status: str
    priority: str
    assigned_to: Optional[str] = None
    tags: List[str] = []
    source: str
    utm_data: Optional[Dict[str, Optional[str]]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    demo_details: Optional[DemoDetailsRead] = None
    notes: List[LeadNoteRead] = []
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LeadSummary(CamelModel):
    id: str
    first_name: str
    last_name: str
    business_name: str
    status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DemoSlotRead(CamelModel):
    id: str
    first_name: str
    last_name: str
    business_name: str
    status: str
    demo_details: DemoDetailsRead
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ContactSubmitted(CamelModel):
    id: str
    status: str
    estimated_response_time: str = "24 hours"


class DemoBooked(CamelModel):
    id: str
    demo_date: date
    demo_time: str
    demo_type: str
    confirmation_email: str
    next_steps: List[str]


class DemoRescheduled(CamelModel):
    id: str
    new_date: date
    new_time: str
    old_date: date
    old_time: str


class LeadPage(CamelModel):
    leads: List[LeadRead]
    pagination: Pagination


class LeadStats(CamelModel):
    total: int
    by_status: Dict[str, int]
    by_business_type: Dict[str, int]
    by_inquiry_type: Dict[str, int]
    by_priority: Dict[str, int]
    recent_leads: List[LeadSummary]


class BusinessHours(CamelModel):
    start: str
    end: str
    timezone: str


class AvailabilityRead(CamelModel):
    date: date
    available_slots: List[str]
    business_hours: BusinessHours
    note: str
