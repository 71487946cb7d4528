# src/checklist_pipeline/checklist_ingest/normalization.py

import logging
import math
import re
from datetime import date, datetime
from typing import Any, Optional

ISO_DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}')

FALSY_STRINGS = {'false', 'no', '0'}

def to_str(value: Any) -> Optional[str]:
    """
    Normalize a free-text value to a trimmed string.

    Args:
        value: Raw value from an API payload or a database row

    Returns:
        Trimmed string, or None if input is None/empty/whitespace
    """
    if value is None:
        return None
    value = str(value).strip()
    return value or None

def to_num(value: Any) -> Optional[int]:
    """
    Normalize an id-like value to an integer.

    BigQuery and the Blackbaud APIs hand ids back as int, float or string
    depending on the endpoint. Anything that does not parse becomes None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None

    text = str(value).strip()
    if not text:
        return None
    match = re.match(r'^[+-]?\d+', text)
    if not match:
        logging.getLogger('checklist.normalization').debug(f"Unparseable number: {value!r}")
        return None
    return int(match.group(0))

def to_person_id(value: Any) -> Optional[int]:
    """Person ids are non-negative integers; everything else is not attributable."""
    person_id = to_num(value)
    if person_id is None or person_id < 0:
        return None
    return person_id

def to_date(value: Any) -> Optional[str]:
    """
    Normalize a date-like value to an ISO date string (YYYY-MM-DD).

    Args:
        value: date, datetime, ISO date/timestamp string, or anything else

    Returns:
        ISO date string, or None when the value is missing or malformed
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        return None

    text = value.strip()
    if text.lower() in ('true', 'false'):
        return None
    day = text.split('T')[0].split(' ')[0]
    if not ISO_DATE_PATTERN.match(day):
        return None
    return day[:10]

def is_truthy(value: Any) -> bool:
    """
    Boolean-like flag coercion used for inactive and test_no_show.

    None and empty strings are false, as are "false", "no" and "0"
    (case-insensitive, trimmed). Any other non-empty value is true.
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0

    text = str(value).strip().lower()
    if not text:
        return False
    return text not in FALSY_STRINGS

def normalize_label(value: Any) -> str:
    """Trim a checklist/decision label; None becomes an empty string."""
    if value is None:
        return ''
    return str(value).strip()

def is_set(value: Any) -> bool:
    """A value is set when it is neither None nor an empty string."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True
