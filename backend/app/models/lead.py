"""Lead model: a contact, inquiry or demo booking captured from the website."""

from uuid import uuid4

from sqlalchemy import JSON, Column, DateTime, String, Text
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base
from backend.app.core.time import utc_now


def _new_lead_id() -> str:
    return str(uuid4())


class Lead(Base):
    __tablename__ = "leads"

    id = Column(String(36), primary_key=True, default=_new_lead_id)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(20), nullable=True)
    business_name = Column(String(100), nullable=False, index=True)
    business_type = Column(String(20), nullable=False, default="other")
    inquiry_type = Column(String(20), nullable=False, default="demo")
    message = Column(Text, nullable=True)

    status = Column(String(20), nullable=False, default="pending", index=True)
    priority = Column(String(10), nullable=False, default="medium")
    assigned_to = Column(String(100), nullable=True)
    tags = Column(JSON, nullable=False, default=list)

    source = Column(String(20), nullable=False, default="website")
    utm_data = Column(JSON, nullable=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(512), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    demo_details = relationship(
        "DemoDetails", back_populates="lead", uselist=False, cascade="all, delete-orphan"
    )
    notes = relationship(
        "LeadNote", back_populates="lead", cascade="all, delete-orphan", order_by="LeadNote.id"
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def business_info(self) -> str:
        return f"{self.business_name} ({self.business_type})"
