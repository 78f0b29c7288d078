"""CSV export of lead records.

Values are sanitised against spreadsheet formula injection: leading ``=``,
``+``, ``-``, ``@``, tab and carriage-return characters are stripped.
"""

import csv
import logging
from io import StringIO
from typing import Iterable

from backend.app.models.lead import Lead

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    ("firstName", "first_name"),
    ("lastName", "last_name"),
    ("email", "email"),
    ("phone", "phone"),
    ("businessName", "business_name"),
    ("businessType", "business_type"),
    ("inquiryType", "inquiry_type"),
    ("message", "message"),
    ("status", "status"),
    ("createdAt", "created_at"),
]
DANGEROUS_PREFIXES = {"=", "+", "-", "@", "\t", "\r"}


def sanitize_csv_field(value, field_name: str = "unknown") -> str:
    if value is None or value == "":
        return ""
    if hasattr(value, "isoformat"):
        return value.isoformat()

    text = str(value).strip()
    stripped = []
    while text and text[0] in DANGEROUS_PREFIXES:
        stripped.append(text[0])
        text = text[1:]
    if stripped:
        logger.warning("CSV injection character(s) %r stripped from field '%s'", "".join(stripped), field_name)
    return text


def build_leads_csv(leads: Iterable[Lead]) -> str:
    buffer = StringIO()
    writer = csv.DictWriter(buffer, fieldnames=[header for header, _ in EXPORT_COLUMNS], lineterminator="\n")
    writer.writeheader()
    for lead in leads:
        writer.writerow(
            {header: sanitize_csv_field(getattr(lead, attr), attr) for header, attr in EXPORT_COLUMNS}
        )
    return buffer.getvalue()
