"""Provider-specific regular expression tables.

The pattern library is an immutable value built once and handed to the
extractor. Tests can assemble smaller libraries with PatternLibraryBuilder.
"""

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache

GENERIC_PROVIDER = "Generic"

_AMOUNT = r"\$?([\d,]+\.?\d{0,2})"
_DATE = r"(\d{1,2}[/-]\d{1,2}[/-]\d{2,4})"


class FieldType(str, Enum):
    """Semantic category a pattern captures."""

    GROSS_PAY = "gross_pay"
    NET_PAY = "net_pay"
    TAX = "tax"
    BENEFIT = "benefit"
    RETIREMENT = "retirement"
    DATE_RANGE = "date_range"
    PAY_DATE = "pay_date"
    YTD_GROSS = "ytd_gross"
    YTD_NET = "ytd_net"
    EMPLOYEE_ID = "employee_id"


@dataclass(frozen=True)
class Pattern:
    """A named, weighted regular expression for one field type."""

    name: str
    regex: re.Pattern[str]
    field_type: FieldType
    confidence: float

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(
                f"Pattern {self.name} confidence must be in [0, 1], "
                f"got {self.confidence}"
            )


@dataclass(frozen=True)
class Provider:
    """A payroll vendor and its ordered patterns."""

    name: str
    patterns: tuple[Pattern, ...] = field(default_factory=tuple)


class PatternLibrary(Mapping[str, Provider]):
    """Read-only mapping of provider name to Provider."""

    def __init__(self, providers: Mapping[str, Provider]):
        self._providers = dict(providers)

    def __getitem__(self, name: str) -> Provider:
        return self._providers[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._providers)

    def __len__(self) -> int:
        return len(self._providers)

    def resolve(self, name: str) -> Provider:
        """Look up a provider, falling back to the generic patterns.

        Raises:
            KeyError: If neither the provider nor a generic entry exists
        """
        provider = self._providers.get(name)
        if provider is None:
            provider = self._providers[GENERIC_PROVIDER]
        return provider

    def __repr__(self) -> str:
        return f"PatternLibrary({list(self._providers)})"


class PatternLibraryBuilder:
    """Collects provider patterns and produces an immutable PatternLibrary."""

    def __init__(self) -> None:
        self._providers: dict[str, list[Pattern]] = {}

    def add(
        self,
        provider: str,
        name: str,
        regex: str,
        field_type: FieldType | str,
        confidence: float,
    ) -> "PatternLibraryBuilder":
        """Register a case-insensitive pattern for a provider.

        Args:
            provider: Provider name, e.g. "ADP"
            name: Pattern name, unique within the provider
            regex: Regular expression source; capture groups hold values
            field_type: Field category the pattern captures
            confidence: Weight in [0, 1]

        Returns:
            PatternLibraryBuilder: self, for chaining
        """
        pattern = Pattern(
            name=name,
            regex=re.compile(regex, re.IGNORECASE),
            field_type=FieldType(field_type),
            confidence=confidence,
        )
        self._providers.setdefault(provider, []).append(pattern)
        return self

    def build(self) -> PatternLibrary:
        if GENERIC_PROVIDER not in self._providers:
            self._providers[GENERIC_PROVIDER] = []
        return PatternLibrary(
            {
                name: Provider(name=name, patterns=tuple(patterns))
                for name, patterns in self._providers.items()
            }
        )


# (provider, name, regex, field type, confidence)
_DEFAULT_PATTERNS: tuple[tuple[str, str, str, FieldType, float], ...] = (
    ("ADP", "gross_pay", rf"gross\s*earnings[:\s]*{_AMOUNT}", FieldType.GROSS_PAY, 0.95),
    ("ADP", "net_pay", rf"net\s*pay[:\s]*{_AMOUNT}", FieldType.NET_PAY, 0.95),
    (
        "ADP",
        "federal_tax",
        rf"federal\s*income\s*tax[:\s]*{_AMOUNT}",
        FieldType.TAX,
        0.9,
    ),
    (
        "ADP",
        "pay_period",
        rf"pay\s*period[:\s]*{_DATE}\s*-\s*{_DATE}",
        FieldType.DATE_RANGE,
        0.9,
    ),
    ("Paychex", "gross_pay", rf"total\s*gross[:\s]*{_AMOUNT}", FieldType.GROSS_PAY, 0.95),
    ("Paychex", "net_pay", rf"net\s*amount[:\s]*{_AMOUNT}", FieldType.NET_PAY, 0.95),
    (
        "Paychex",
        "employee_id",
        r"employee\s*#[:\s]*([A-Za-z0-9]+)",
        FieldType.EMPLOYEE_ID,
        0.85,
    ),
    ("Workday", "gross_pay", rf"gross\s*pay[:\s]*{_AMOUNT}", FieldType.GROSS_PAY, 0.95),
    ("Workday", "net_pay", rf"net\s*pay[:\s]*{_AMOUNT}", FieldType.NET_PAY, 0.95),
    ("Workday", "pay_date", rf"payment\s*date[:\s]*{_DATE}", FieldType.PAY_DATE, 0.9),
    ("Gusto", "gross_pay", rf"gross\s*wages[:\s]*{_AMOUNT}", FieldType.GROSS_PAY, 0.95),
    ("Gusto", "net_pay", rf"take[\s-]*home[:\s]*{_AMOUNT}", FieldType.NET_PAY, 0.95),
    (
        GENERIC_PROVIDER,
        "gross_pay_1",
        rf"gross\s*(?:pay|earnings?|wages?|salary)[:\s]*{_AMOUNT}",
        FieldType.GROSS_PAY,
        0.8,
    ),
    (
        GENERIC_PROVIDER,
        "gross_pay_2",
        rf"total\s*(?:gross|earnings?)[:\s]*{_AMOUNT}",
        FieldType.GROSS_PAY,
        0.8,
    ),
    (
        GENERIC_PROVIDER,
        "net_pay_1",
        rf"net\s*(?:pay|amount|wages?)[:\s]*{_AMOUNT}",
        FieldType.NET_PAY,
        0.8,
    ),
    (
        GENERIC_PROVIDER,
        "net_pay_2",
        rf"take[\s-]*home\s*(?:pay|amount)?[:\s]*{_AMOUNT}",
        FieldType.NET_PAY,
        0.8,
    ),
    (
        GENERIC_PROVIDER,
        "federal_tax",
        rf"federal\s*(?:income\s*)?(?:tax|withholding)[:\s]*{_AMOUNT}",
        FieldType.TAX,
        0.75,
    ),
    (
        GENERIC_PROVIDER,
        "state_tax",
        rf"state\s*(?:income\s*)?(?:tax|withholding)[:\s]*{_AMOUNT}",
        FieldType.TAX,
        0.75,
    ),
    (
        GENERIC_PROVIDER,
        "fica",
        rf"(?:fica|social\s*security)[:\s]*{_AMOUNT}",
        FieldType.TAX,
        0.75,
    ),
    (GENERIC_PROVIDER, "medicare", rf"medicare[:\s]*{_AMOUNT}", FieldType.TAX, 0.75),
    (
        GENERIC_PROVIDER,
        "health_insurance",
        rf"(?:health|medical)\s*(?:insurance|ins\.?)?[:\s]*{_AMOUNT}",
        FieldType.BENEFIT,
        0.7,
    ),
    (
        GENERIC_PROVIDER,
        "dental",
        rf"dental\s*(?:insurance|ins\.?)?[:\s]*{_AMOUNT}",
        FieldType.BENEFIT,
        0.7,
    ),
    (
        GENERIC_PROVIDER,
        "vision",
        rf"vision\s*(?:insurance|ins\.?)?[:\s]*{_AMOUNT}",
        FieldType.BENEFIT,
        0.7,
    ),
    (GENERIC_PROVIDER, "401k", rf"401\s*k[:\s]*{_AMOUNT}", FieldType.RETIREMENT, 0.75),
    (
        GENERIC_PROVIDER,
        "pay_period",
        rf"(?:pay\s*)?period[:\s]*{_DATE}\s*(?:-|–|to|through)\s*{_DATE}",
        FieldType.DATE_RANGE,
        0.8,
    ),
    (
        GENERIC_PROVIDER,
        "pay_date",
        rf"(?:pay|payment)\s*date[:\s]*{_DATE}",
        FieldType.PAY_DATE,
        0.8,
    ),
    (GENERIC_PROVIDER, "ytd_gross", rf"ytd\s*gross[:\s]*{_AMOUNT}", FieldType.YTD_GROSS, 0.85),
    (GENERIC_PROVIDER, "ytd_net", rf"ytd\s*net[:\s]*{_AMOUNT}", FieldType.YTD_NET, 0.85),
)


@lru_cache(maxsize=1)
def default_pattern_library() -> PatternLibrary:
    """Build the standard provider pattern library (memoized)."""
    builder = PatternLibraryBuilder()
    for provider, name, regex, field_type, confidence in _DEFAULT_PATTERNS:
        builder.add(provider, name, regex, field_type, confidence)
    return builder.build()
