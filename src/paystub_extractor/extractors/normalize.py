"""Money, date and text normalization helpers.

These functions never raise on malformed input: unparseable money becomes
zero and unparseable dates are handed back as the trimmed original string.
"""

import re
from datetime import datetime
from decimal import Decimal, InvalidOperation

CENT = Decimal("0.01")

# Rightmost-amount scanning relies on this matching thousands groups first
MONEY_PATTERN = re.compile(
    r"\$?\s*(\d{1,3}(?:,\d{3})+(?:\.\d{1,2})?|\d+(?:\.\d{1,2})?)"
)

DATE_FORMATS = (
    "%m/%d/%Y",
    "%m-%d-%Y",
    "%Y-%m-%d",
    "%b %d, %Y",
    "%b %d %Y",
    "%B %d, %Y",
    "%B %d %Y",
    "%m/%d/%y",
    "%m-%d-%y",
)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_HORIZONTAL_SPACE = re.compile(r"[ \t\f\v]+")


def parse_money(value: str | None) -> Decimal:
    """Parse a monetary string into a two-place Decimal.

    Strips currency symbols, thousands separators and whitespace. Anything
    that does not parse yields zero.

    Args:
        value: Raw money text such as "$1,234.56"

    Returns:
        Decimal: Parsed amount quantized to cents
    """
    if not value:
        return Decimal("0.00")

    cleaned = value.replace("$", "").replace(",", "").strip()
    if not cleaned:
        return Decimal("0.00")

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return Decimal("0.00")

    if not amount.is_finite():
        return Decimal("0.00")
    return amount.quantize(CENT)


def money_to_cents(value: str | None) -> int:
    """Parse a monetary string into integer cents."""
    return int(parse_money(value) * 100)


def normalize_date(value: str | None) -> str:
    """Normalize a date string to ISO YYYY-MM-DD.

    Args:
        value: Raw date text

    Returns:
        str: ISO date, or the trimmed input when no known format matches
    """
    if not value:
        return ""

    candidate = value.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(candidate, fmt).strftime("%Y-%m-%d")
        except ValueError:
            continue
    return candidate


def is_iso_date(value: str | None) -> bool:
    """Check whether a value is a strict, valid ISO calendar date."""
    if not value or not _ISO_DATE.match(value):
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def parse_iso_date(value: str | None) -> datetime | None:
    if not is_iso_date(value):
        return None
    return datetime.strptime(value, "%Y-%m-%d")  # type: ignore[arg-type]


def normalize_text(text: str) -> str:
    """Clean raw document text while keeping line structure.

    Line endings become LF, runs of horizontal whitespace collapse to one
    space, non-printable characters are dropped and each line is trimmed.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n").replace("\xa0", " ")
    lines = []
    for line in text.split("\n"):
        line = "".join(ch for ch in line if ch.isprintable() or ch == "\t")
        lines.append(_HORIZONTAL_SPACE.sub(" ", line).strip())
    return "\n".join(lines)


def find_amounts(line: str) -> list[Decimal]:
    """Return every money value on a line in reading order."""
    return [parse_money(m.group(1)) for m in MONEY_PATTERN.finditer(line)]


def rightmost_amount(line: str) -> Decimal:
    """Return the last money value on a line, or zero."""
    amounts = find_amounts(line)
    return amounts[-1] if amounts else Decimal("0.00")
