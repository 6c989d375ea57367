"""Pydantic schemas for extracted paystub data.

An ExtractionResult is created fresh for every document and filled in place by
each pipeline stage. Money is held as two-place Decimal values and serialized
as JSON numbers; dates are ISO strings once normalized.
"""

from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .normalize import parse_money

ZERO = Decimal("0.00")


class PayFrequency(str, Enum):
    """How often the employee is paid."""

    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    SEMI_MONTHLY = "semi-monthly"
    MONTHLY = "monthly"
    UNKNOWN = "unknown"


def _to_money(v: Any) -> Any:
    if v is None or isinstance(v, Decimal):
        return v
    if isinstance(v, str):
        return parse_money(v)
    if isinstance(v, (int, float)):
        return Decimal(str(v)).quantize(Decimal("0.01"))
    return v


class EmployerInfo(BaseModel):
    """Employer details."""

    name: str = Field("", description="Employer name")
    address: str | None = Field(None, description="Employer street address")
    ein: str | None = Field(None, description="Employer Identification Number")

    model_config = ConfigDict(validate_assignment=True)


class EmployeeInfo(BaseModel):
    """Employee details."""

    name: str = Field("", description="Employee name")
    employee_id: str | None = Field(None, description="Employer-assigned ID")
    ssn_last4: str | None = Field(None, description="Last four digits of the SSN")

    model_config = ConfigDict(validate_assignment=True)


class EarningItem(BaseModel):
    """A single earnings line."""

    description: str
    hours: Decimal | None = None
    rate: Decimal | None = None
    amount: Decimal

    @field_validator("hours", "rate", "amount", mode="before")
    @classmethod
    def validate_decimal(cls, v: Any) -> Any:
        """Convert numeric fields to Decimal."""
        if isinstance(v, float):
            return Decimal(str(v))
        return v

    @field_serializer("hours", "rate", "amount")
    def serialize_decimal(self, v: Decimal | None) -> float | None:
        return float(v) if v is not None else None


class DeductionItem(BaseModel):
    """A single deduction line."""

    description: str
    amount: Decimal
    pre_tax: bool = False

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v: Any) -> Any:
        """Convert amount to two-place Decimal."""
        return _to_money(v)

    @field_serializer("amount")
    def serialize_amount(self, v: Decimal) -> float:
        return float(v)


class TaxItem(BaseModel):
    """A single tax withholding line."""

    description: str
    amount: Decimal

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v: Any) -> Any:
        """Convert amount to two-place Decimal."""
        return _to_money(v)

    @field_serializer("amount")
    def serialize_amount(self, v: Decimal) -> float:
        return float(v)


class ExtractionResult(BaseModel):
    """Structured paystub record.

    Invariant after validation: when gross and net pay are both nonzero,
    net_pay <= gross_pay.
    """

    gross_pay: Decimal = Field(ZERO, description="Current-period gross pay")
    net_pay: Decimal = Field(ZERO, description="Current-period net pay")
    pay_period_start: str | None = Field(None, description="Period start (ISO)")
    pay_period_end: str | None = Field(None, description="Period end (ISO)")
    pay_date: str | None = Field(None, description="Check/deposit date (ISO)")
    pay_frequency: PayFrequency = Field(PayFrequency.UNKNOWN)
    employer: EmployerInfo = Field(default_factory=EmployerInfo)
    employee: EmployeeInfo = Field(default_factory=EmployeeInfo)
    earnings: list[EarningItem] = Field(default_factory=list)
    deductions: list[DeductionItem] = Field(default_factory=list)
    taxes: list[TaxItem] = Field(default_factory=list)
    ytd: dict[str, Decimal] = Field(default_factory=dict)
    confidence_score: float = Field(0.0, ge=0.0, le=1.0)

    # Diagnostics, never serialized
    raw_text: str = Field("", exclude=True, repr=False)
    provider: str = Field("Generic", exclude=True)
    ocr_used: bool = Field(False, exclude=True)

    model_config = ConfigDict(validate_assignment=True)

    @field_validator("gross_pay", "net_pay", mode="before")
    @classmethod
    def validate_money(cls, v: Any) -> Any:
        """Convert monetary fields to two-place Decimal."""
        if v is None:
            return ZERO
        return _to_money(v)

    @field_validator("ytd", mode="before")
    @classmethod
    def validate_ytd(cls, v: Any) -> Any:
        """Convert YTD amounts to two-place Decimal."""
        if isinstance(v, dict):
            return {str(k): _to_money(amount) for k, amount in v.items()}
        return v

    @field_serializer("gross_pay", "net_pay")
    def serialize_money(self, v: Decimal) -> float:
        return float(v)

    @field_serializer("ytd")
    def serialize_ytd(self, v: dict[str, Decimal]) -> dict[str, float]:
        return {k: float(amount) for k, amount in v.items()}

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize to the JSON field set handed to transport collaborators.

        Optional members that are absent are omitted, as is an empty YTD map.
        Pay period dates are always present, empty when unknown.

        Returns:
            dict: JSON-compatible representation
        """
        data = self.model_dump(mode="json", exclude_none=True)
        data.setdefault("pay_period_start", "")
        data.setdefault("pay_period_end", "")
        if not data.get("ytd"):
            data.pop("ytd", None)
        return data


class BatchEntry(BaseModel):
    """Outcome for one document in a batch extraction."""

    filename: str
    success: bool
    data: ExtractionResult | None = None
    error: str | None = None

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize as {filename, success, data|error}."""
        entry: dict[str, Any] = {"filename": self.filename, "success": self.success}
        if self.success and self.data is not None:
            entry["data"] = self.data.to_json_dict()
        else:
            entry["error"] = self.error
        return entry
