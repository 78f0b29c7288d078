"""Demo booking sub-record, present only for leads with inquiry_type == "demo"."""

from sqlalchemy import Column, Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base


class DemoDetails(Base):
    __tablename__ = "demo_details"

    id = Column(Integer, primary_key=True, index=True)
    lead_id = Column(String(36), ForeignKey("leads.id"), nullable=False, unique=True)
    preferred_date = Column(Date, nullable=False, index=True)
    preferred_time = Column(String(5), nullable=False)
    demo_type = Column(String(30), nullable=False)
    team_size = Column(Integer, nullable=True)
    current_challenges = Column(Text, nullable=True)
    timezone = Column(String(64), nullable=False, default="Asia/Kolkata")

    lead = relationship("Lead", back_populates="demo_details")
