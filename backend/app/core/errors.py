"""Domain errors raised by the service layer and rendered by the API."""

from typing import Any, Dict, List, Optional


class ServiceError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def details(self) -> Optional[List[Dict[str, Any]]]:
        return None

    def data(self) -> Optional[Dict[str, Any]]:
        return None


class ValidationError(ServiceError):
    """One or more field-level violations."""

    status_code = 400
    default_message = "Validation failed"

    def __init__(self, errors: List[Dict[str, str]], message: Optional[str] = None):
        super().__init__(message)
        self.errors = errors

    def details(self):
        return self.errors


class InvalidSlotError(ServiceError):
    status_code = 400
    default_message = "Demo date must be in the future"


class NotFoundError(ServiceError):
    status_code = 404
    default_message = "Resource not found"


class SlotConflictError(ServiceError):
    """The requested demo slot already has an active booking."""

    status_code = 409
    default_message = "This time slot is already booked. Please select another time."

    def __init__(self, available_slots: List[str], message: Optional[str] = None):
        super().__init__(message)
        self.available_slots = list(available_slots)

    def data(self):
        return {"availableSlots": self.available_slots}


class BotInactiveError(ServiceError):
    status_code = 400
    default_message = "AI Bot is not active"


class PersistenceError(ServiceError):
    status_code = 500
    default_message = "Internal server error"


class UpstreamNotificationError(Exception):
    """Email delivery failed. Logged by the dispatcher, never surfaced to clients."""
