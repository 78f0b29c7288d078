"""UTC clock helpers shared by models, services and the activity log."""

from datetime import UTC, date, datetime


def utc_now() -> datetime:
    """Timezone-aware UTC now; used for column defaults and onupdate hooks."""
    return datetime.now(UTC)


def utc_today() -> date:
    # Demo dates are compared against the UTC calendar day
    return utc_now().date()
