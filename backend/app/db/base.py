from backend.app.db.base_class import Base

# Import models to register metadata for Base.metadata.create_all in tests
from backend.app.models.lead import Lead  # noqa: F401
from backend.app.models.demo_details import DemoDetails  # noqa: F401
from backend.app.models.lead_note import LeadNote  # noqa: F401
from backend.app.models.ai_bot import AIBot  # noqa: F401
