"""Confidence scoring and post-extraction validation."""

import logging

from ..exceptions import ValidationError
from .normalize import is_iso_date, normalize_date
from .schemas import ExtractionResult, PayFrequency

logger = logging.getLogger(__name__)

# Weights sum to 100
FIELD_WEIGHTS = {
    "gross_pay": 20,
    "net_pay": 20,
    "pay_period": 15,
    "employer": 10,
    "employee": 10,
    "earnings": 10,
    "deductions_or_taxes": 10,
    "pay_frequency": 5,
}


def calculate_confidence(result: ExtractionResult) -> float:
    """Score how completely a result was populated, in [0, 1]."""
    present = {
        "gross_pay": result.gross_pay > 0,
        "net_pay": result.net_pay > 0,
        "pay_period": bool(result.pay_period_start and result.pay_period_end),
        "employer": bool(result.employer.name),
        "employee": bool(result.employee.name),
        "earnings": bool(result.earnings),
        "deductions_or_taxes": bool(result.deductions or result.taxes),
        "pay_frequency": result.pay_frequency != PayFrequency.UNKNOWN,
    }
    score = sum(FIELD_WEIGHTS[name] for name, found in present.items() if found)
    return score / sum(FIELD_WEIGHTS.values())


def validate_result(result: ExtractionResult) -> ExtractionResult:
    """Apply corrections and reject results without pay amounts.

    Swaps gross and net when net exceeds gross and re-normalizes period
    dates that are not ISO.

    Raises:
        ValidationError: If gross and net pay are both zero
    """
    if result.gross_pay == 0 and result.net_pay == 0:
        raise ValidationError("unable to extract pay amounts", result=result)

    if result.gross_pay > 0 and result.net_pay > result.gross_pay:
        logger.warning(
            f"⚠️  Net pay {result.net_pay} exceeds gross pay {result.gross_pay}, "
            "swapping"
        )
        result.gross_pay, result.net_pay = result.net_pay, result.gross_pay

    for field_name in ("pay_period_start", "pay_period_end"):
        value = getattr(result, field_name)
        if value and not is_iso_date(value):
            setattr(result, field_name, normalize_date(value))

    return result
