"""Pay frequency inference from explicit text or the pay-period length."""

from .normalize import parse_iso_date
from .schemas import PayFrequency

# Most specific first so "bi-weekly" never reads as "weekly"
EXPLICIT_FREQUENCIES: tuple[tuple[tuple[str, ...], PayFrequency], ...] = (
    (("bi-weekly", "biweekly", "bi weekly"), PayFrequency.BIWEEKLY),
    (("semi-monthly", "semimonthly", "semi monthly"), PayFrequency.SEMI_MONTHLY),
    (("weekly",), PayFrequency.WEEKLY),
    (("monthly",), PayFrequency.MONTHLY),
)


def infer_pay_frequency(
    start: str | None, end: str | None, text: str = ""
) -> PayFrequency:
    """Infer how often the employee is paid.

    Explicit mentions in the text win. Otherwise the inclusive day count of
    the pay period decides: 6-8 weekly, 13-16 biweekly (semi-monthly when the
    period starts on the 1st or 16th), 28-31 monthly.

    Args:
        start: Period start as an ISO date
        end: Period end as an ISO date
        text: Document text

    Returns:
        PayFrequency: The inferred frequency, UNKNOWN when undecidable
    """
    text_lower = text.lower()
    for phrases, frequency in EXPLICIT_FREQUENCIES:
        if any(phrase in text_lower for phrase in phrases):
            return frequency

    start_date = parse_iso_date(start)
    end_date = parse_iso_date(end)
    if start_date is None or end_date is None:
        return PayFrequency.UNKNOWN

    days = (end_date - start_date).days + 1
    if 6 <= days <= 8:
        return PayFrequency.WEEKLY
    if 13 <= days <= 16:
        if start_date.day in (1, 16):
            return PayFrequency.SEMI_MONTHLY
        return PayFrequency.BIWEEKLY
    if 28 <= days <= 31:
        return PayFrequency.MONTHLY
    return PayFrequency.UNKNOWN
