"""Centralised trade-date handling.

Trade dates are free-form strings as typed by the user or read from a
spreadsheet. Everything that compares dates goes through :func:`parse_trade_date`;
the stored string itself is never rewritten.
"""

from datetime import date, datetime

# Tried in order after ISO 8601.
_FALLBACK_FORMATS = (
    "%m/%d/%Y",
    "%d.%m.%Y",
    "%b %d %Y",
    "%d %b %Y",
    "%B %d %Y",
    "%d %B %Y",
    "%a %b %d %Y",
)


def parse_trade_date(value: object) -> date | None:
    """Parse a trade date, returning ``None`` when it cannot be understood.

    Accepted inputs:
      * ``date`` / ``datetime`` objects (spreadsheet cells)
      * ISO 8601 strings, with or without a time component
      * ``YYYY/MM/DD`` (normalised to dashes)
      * ``MM/DD/YYYY``, ``DD.MM.YYYY`` and month-name forms such as
        ``"Jan 15 2025"`` or ``"Wed Jan 15 2025"``
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    s = str(value or "").strip()
    if not s:
        return None

    # Normalise YYYY/MM/DD -> YYYY-MM-DD
    if len(s) >= 10 and s[4] == "/" and s[7] == "/":
        s = f"{s[:4]}-{s[5:7]}-{s[8:]}"

    iso = s.replace("Z", "+00:00").replace(" ", "T", 1)
    try:
        return datetime.fromisoformat(iso).date()
    except ValueError:
        pass

    cleaned = " ".join(s.replace(",", " ").split())
    for fmt in _FALLBACK_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue
    return None


def format_trade_date(value: object) -> str:
    """Render a date-like cell as the string stored on a trade.

    ``date``/``datetime`` become ``YYYY-MM-DD``; anything else is stripped text.
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if value is None:
        return ""
    return str(value).strip()


def today() -> date:
    """Local calendar date."""
    return date.today()
