"""AI support bot configuration consumed by the chat proxy."""

from uuid import uuid4

from sqlalchemy import JSON, Column, DateTime, String

from backend.app.db.base_class import Base
from backend.app.core.time import utc_now


def _new_bot_id() -> str:
    return str(uuid4())


class AIBot(Base):
    __tablename__ = "ai_bots"

    id = Column(String(36), primary_key=True, default=_new_bot_id)
    business_id = Column(String(64), nullable=False, default="demo-business", index=True)
    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default="draft", index=True)
    type = Column(String(30), nullable=False, default="customer-support", index=True)
    channels = Column(JSON, nullable=False, default=list)

    # Nested documents; shapes are enforced by backend.app.schemas.ai_bot
    configuration = Column(JSON, nullable=False, default=dict)
    training_data = Column(JSON, nullable=False, default=dict)
    ai_model = Column(JSON, nullable=False, default=dict)
    performance = Column(JSON, nullable=False, default=dict)
    analytics = Column(JSON, nullable=False, default=dict)
    settings = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    @property
    def is_active(self) -> bool:
        return self.status == "active"
