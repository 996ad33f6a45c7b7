"""Input helpers shared by the services.

- sanitize(): strip all HTML from free text with bleach
- parse_date(): ISO date strings -> date (None passes through)
- check_choice(): membership check with a readable error
- page_bounds(): clamp limit/offset from query params
"""

from datetime import date, datetime

import bleach
from flask import current_app


def sanitize(text):
    """Strip all HTML tags from user input."""
    if text is None:
        return text
    return bleach.clean(str(text), tags=[], strip=True).strip()


def parse_date(value, field="date"):
    """Accept date/datetime objects or 'YYYY-MM-DD' strings.

    Raises:
        ValueError: If the string is not an ISO date.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValueError(f"Invalid {field} '{value}'. Use YYYY-MM-DD.")


def check_choice(value, choices, field):
    if value not in choices:
        raise ValueError(
            f"Invalid {field} '{value}'. Must be one of: {', '.join(choices)}"
        )
    return value


def page_bounds(limit=None, offset=None):
    """Return (limit, offset) clamped to the configured page sizes."""
    default = current_app.config.get("DEFAULT_PAGE_SIZE", 50)
    maximum = current_app.config.get("MAX_PAGE_SIZE", 200)
    try:
        limit = int(limit) if limit not in (None, "") else default
        offset = int(offset) if offset not in (None, "") else 0
    except (TypeError, ValueError):
        raise ValueError("limit and offset must be integers.")
    return max(1, min(limit, maximum)), max(0, offset)
