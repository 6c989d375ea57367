"""Structured field extraction from normalized paystub text.

Single values (amounts, dates, parties) are taken from the best pattern
match first and fall back to keyword scanning. Line items are collected by
section-aware scanning, where header lines switch the current section and the
rightmost money value on a line is its amount.
"""

import logging
import re
from decimal import Decimal

from .matcher import MatchResult, best_match, matches_of_type
from .normalize import MONEY_PATTERN, normalize_date, parse_money, rightmost_amount
from .patterns import FieldType
from .schemas import (
    DeductionItem,
    EarningItem,
    EmployeeInfo,
    EmployerInfo,
    ExtractionResult,
    TaxItem,
)

logger = logging.getLogger(__name__)

GROSS_KEYWORDS = ("gross pay", "gross wages", "total earnings", "gross")
NET_KEYWORDS = ("net pay", "net wages", "take home", "net amount", "net")
PERIOD_START_KEYWORDS = ("period beginning", "period start", "from")
PERIOD_END_KEYWORDS = ("period ending", "period end", "through", "to")
PAY_DATE_KEYWORDS = ("pay date", "payment date", "check date")

EARNING_KEYWORDS = (
    "regular",
    "overtime",
    "bonus",
    "commission",
    "tips",
    "holiday",
    "vacation",
    "sick",
    "pto",
)
DEDUCTION_KEYWORDS = (
    "401k",
    "403b",
    "insurance",
    "health",
    "dental",
    "vision",
    "life",
    "disability",
    "fsa",
    "hsa",
    "union",
    "garnishment",
)
PRE_TAX_KEYWORDS = (
    "401k",
    "403b",
    "health",
    "dental",
    "vision",
    "fsa",
    "hsa",
    "pre-tax",
    "pretax",
)
# Count as taxes only when the line also says "tax" or "withholding"
QUALIFIED_TAX_KEYWORDS = ("federal", "fed", "state", "local", "city")
PAYROLL_TAX_KEYWORDS = (
    "fica",
    "social security",
    "medicare",
    "oasdi",
    "sdi",
    "sui",
    "futa",
    "suta",
)
YTD_CATEGORIES = (
    "gross",
    "net",
    "federal",
    "state",
    "fica",
    "medicare",
    "401k",
    "deductions",
)
NON_EMPLOYER_TITLES = ("paystub", "pay stub", "earnings statement")

_MONEY_TOKEN = r"(\$\s*[\d,]+(?:\.\d+)?|[\d,]+\.\d{2})"
_DATE_TOKEN = (
    r"(\d{1,2}/\d{1,2}/\d{2,4}|\d{1,2}-\d{1,2}-\d{2,4}|\d{4}-\d{2}-\d{2}"
    r"|[a-z]{3,9}\.?\s+\d{1,2},?\s+\d{4})"
)
_RANGE_SEPARATOR = r"\s*(?:-|–|to|through)\s*"

_YTD_PRESENT = re.compile(r"ytd|year[\s-]to[\s-]date")
_WAGE_BASE = re.compile(r"\bwages\b")
_COLUMN_HEADER = re.compile(r"current.*(?:ytd|year[\s-]to[\s-]date)")
_EIN = re.compile(r"\b\d{2}-\d{7}\b")
_STREET = re.compile(
    r"^\d+\s+[A-Za-z0-9\s\.]+\b(?:Street|St|Avenue|Ave|Road|Rd|Drive|Dr|Court|Ct"
    r"|Lane|Ln|Way|Boulevard|Blvd|Suite|Ste)\b",
    re.IGNORECASE,
)
_CITY_STATE_ZIP = re.compile(r"^[A-Za-z\s\.]+,\s*[A-Z]{2}\s+\d{5}(?:-\d{4})?$")
_EMPLOYEE_ID_TOKEN = re.compile(r"\b[A-Z0-9]{4,}\b")
_MASKED_SSN = re.compile(r"(?:\*{3,}-?(?:\*{2}-?)?|[Xx]{3}-[Xx]{2}-)(\d{4})\b")

_HOURS_PATTERNS = (
    re.compile(r"(\d+(?:\.\d+)?)\s*h(?:ou)?rs?\b", re.IGNORECASE),
    re.compile(r"\bhours?[:\s]+(\d+(?:\.\d+)?)", re.IGNORECASE),
    re.compile(r"(\d+(?:\.\d+)?)\s*@"),
)
_RATE_PATTERNS = (
    re.compile(r"@\s*\$?\s*(\d+(?:\.\d+)?)"),
    re.compile(r"\$?(\d+(?:\.\d+)?)\s*/\s*h(?:ou)?r\b", re.IGNORECASE),
    re.compile(r"\brate[:\s]+\$?(\d+(?:\.\d+)?)", re.IGNORECASE),
)


def _contains_word(text_lower: str, keyword: str) -> bool:
    return re.search(rf"\b{re.escape(keyword)}\b", text_lower) is not None


def _first_keyword(text_lower: str, keywords: tuple[str, ...]) -> str | None:
    for keyword in keywords:
        if _contains_word(text_lower, keyword):
            return keyword
    return None


def _label(line: str, fallback: str) -> str:
    """Text before the first colon, dollar sign or digit that follows a word."""
    match = re.match(r"^([A-Za-z][^:$\d]*?)\s*(?::|\$|\d|$)", line)
    if match and match.group(1).strip():
        return match.group(1).strip()
    return fallback


def _value_after_colon(line: str) -> str:
    _, sep, value = line.partition(":")
    return value.strip() if sep else ""


def _first_capture(result: MatchResult | None) -> tuple[str, ...]:
    if result is None:
        return ()
    return result.first


class FieldExtractor:
    """Fills an ExtractionResult from normalized text and pattern matches."""

    def extract(
        self,
        text: str,
        matches: dict[str, MatchResult],
        result: ExtractionResult,
    ) -> None:
        """Populate amounts, dates, parties, line items and YTD values.

        Misses leave the zero/empty defaults in place.

        Args:
            text: Normalized document text (line breaks preserved)
            matches: Pattern engine output for the detected provider
            result: Result to fill in place
        """
        lines = [line for line in text.split("\n") if line]

        result.gross_pay = self.extract_amount(
            text, matches, FieldType.GROSS_PAY, GROSS_KEYWORDS
        )
        result.net_pay = self.extract_amount(
            text, matches, FieldType.NET_PAY, NET_KEYWORDS
        )

        start, end = self.extract_pay_period(text, matches)
        result.pay_period_start = start or None
        result.pay_period_end = end or None
        result.pay_date = self.extract_pay_date(text, matches) or None

        result.employer = self.extract_employer(lines)
        result.employee = self.extract_employee(lines, matches)

        result.earnings = self.extract_earnings(lines)
        result.deductions = self.extract_deductions(lines) or self._pattern_deductions(
            matches
        )
        result.taxes = self.extract_taxes(lines) or self._pattern_taxes(matches)
        result.ytd = self.extract_ytd(text, lines, matches)

        logger.debug(
            f"Extracted {len(result.earnings)} earnings, "
            f"{len(result.deductions)} deductions, {len(result.taxes)} taxes"
        )

    # Single values

    def extract_amount(
        self,
        text: str,
        matches: dict[str, MatchResult],
        field_type: FieldType,
        keywords: tuple[str, ...],
    ) -> Decimal:
        """Find a monetary value by pattern match, then by keyword."""
        captures = _first_capture(best_match(matches, field_type))
        if captures:
            amount = parse_money(captures[0])
            if amount > 0:
                return amount
        return self._scan_amount(text.lower(), keywords)

    @staticmethod
    def _scan_amount(text_lower: str, keywords: tuple[str, ...]) -> Decimal:
        for keyword in keywords:
            kw = re.escape(keyword)
            before = re.search(rf"\b{kw}\b[:\s]*{_MONEY_TOKEN}", text_lower)
            if before:
                return parse_money(before.group(1))
            after = re.search(rf"{_MONEY_TOKEN}\s*\b{kw}\b", text_lower)
            if after:
                return parse_money(after.group(1))
        return Decimal("0.00")

    def extract_pay_period(
        self, text: str, matches: dict[str, MatchResult]
    ) -> tuple[str, str]:
        """Return the normalized (start, end) of the pay period."""
        captures = _first_capture(best_match(matches, FieldType.DATE_RANGE))
        if len(captures) >= 2:
            return normalize_date(captures[0]), normalize_date(captures[1])

        text_lower = text.lower()
        range_match = re.search(
            rf"pay\s*period[:\s]*{_DATE_TOKEN}{_RANGE_SEPARATOR}{_DATE_TOKEN}",
            text_lower,
        )
        if range_match:
            return (
                normalize_date(range_match.group(1)),
                normalize_date(range_match.group(2)),
            )

        start = self._scan_date(text_lower, PERIOD_START_KEYWORDS)
        end = self._scan_date(text_lower, PERIOD_END_KEYWORDS)
        return start, end

    def extract_pay_date(self, text: str, matches: dict[str, MatchResult]) -> str:
        captures = _first_capture(best_match(matches, FieldType.PAY_DATE))
        if captures:
            return normalize_date(captures[0])
        return self._scan_date(text.lower(), PAY_DATE_KEYWORDS)

    @staticmethod
    def _scan_date(text_lower: str, keywords: tuple[str, ...]) -> str:
        for keyword in keywords:
            found = re.search(
                rf"\b{re.escape(keyword)}\b[:\s]*{_DATE_TOKEN}", text_lower
            )
            if found:
                return normalize_date(found.group(1))
        return ""

    # Parties

    def extract_employer(self, lines: list[str]) -> EmployerInfo:
        """Find employer name, EIN and street address.

        A line labelled "employer" or "company" names the employer (value
        after the colon, else the next line). Otherwise the first capitalized
        line among the first five that is not a document title is used.
        """
        name = ""
        name_index: int | None = None
        ein: str | None = None

        for i, line in enumerate(lines):
            line_lower = line.lower()
            label = line_lower.split(":", 1)[0]

            if ein is None:
                ein_match = _EIN.search(line)
                if ein_match:
                    ein = ein_match.group(0)

            if not name and ("employer" in label or "company" in label):
                if any(word in label for word in ("ein", " id", "address")):
                    continue
                value = _value_after_colon(line)
                if value:
                    name, name_index = value, i
                elif i + 1 < len(lines):
                    name, name_index = lines[i + 1], i + 1

        if not name:
            for i, line in enumerate(lines[:5]):
                line_lower = line.lower()
                if any(title in line_lower for title in NON_EMPLOYER_TITLES):
                    continue
                if ":" in line or line.isdigit() or not line[0].isupper():
                    continue
                name, name_index = line, i
                break

        return EmployerInfo(
            name=name, address=self._find_address(lines, name_index), ein=ein
        )

    @staticmethod
    def _find_address(lines: list[str], name_index: int | None) -> str | None:
        if name_index is None:
            return None
        window = lines[name_index + 1 : name_index + 4]
        for offset, line in enumerate(window):
            if _STREET.match(line):
                parts = [line]
                following = window[offset + 1] if offset + 1 < len(window) else ""
                if following and _CITY_STATE_ZIP.match(following):
                    parts.append(following)
                return ", ".join(parts)
        return None

    def extract_employee(
        self, lines: list[str], matches: dict[str, MatchResult]
    ) -> EmployeeInfo:
        """Find employee name, employee ID and SSN last four."""
        info = EmployeeInfo()

        captures = _first_capture(best_match(matches, FieldType.EMPLOYEE_ID))
        if captures and captures[0]:
            info.employee_id = captures[0]

        for line in lines:
            line_lower = line.lower()

            if not info.name and (
                "employee name" in line_lower or "employee:" in line_lower
            ):
                info.name = _value_after_colon(line)

            if info.employee_id is None and (
                "employee id" in line_lower or "emp id" in line_lower
            ):
                rest = re.split(r"(?i)emp(?:loyee)?\s*id", line, maxsplit=1)[-1]
                id_match = _EMPLOYEE_ID_TOKEN.search(rest)
                if id_match:
                    info.employee_id = id_match.group(0)

            if info.ssn_last4 is None and (
                "ssn" in line_lower or "social" in line_lower
            ):
                ssn_match = _MASKED_SSN.search(line)
                if ssn_match:
                    info.ssn_last4 = ssn_match.group(1)

        return info

    # Line items

    def extract_earnings(self, lines: list[str]) -> list[EarningItem]:
        """Collect earning lines from the earnings section.

        Documents without an earnings header are scanned in full.
        """
        has_header = any(
            "earnings" in line.lower() or "wages" in line.lower() for line in lines
        )
        earnings: list[EarningItem] = []
        in_section = False

        for line in lines:
            line_lower = line.lower()
            if "earnings" in line_lower or "wages" in line_lower:
                in_section = True
                continue
            if in_section and ("deductions" in line_lower or "taxes" in line_lower):
                in_section = False
                continue
            if has_header and not in_section:
                continue
            if _is_ytd_only(line_lower):
                continue

            keyword = _first_keyword(line_lower, EARNING_KEYWORDS)
            if keyword is None:
                continue
            amount = rightmost_amount(line)
            if amount <= 0:
                continue
            earnings.append(
                EarningItem(
                    description=_label(line, keyword),
                    hours=_search_decimal(_HOURS_PATTERNS, line),
                    rate=_search_decimal(_RATE_PATTERNS, line),
                    amount=amount,
                )
            )
        return earnings

    def extract_deductions(self, lines: list[str]) -> list[DeductionItem]:
        """Collect deduction lines from the deductions section.

        Documents without a deductions header are scanned in full.
        """
        has_header = any("deduction" in line.lower() for line in lines)
        deductions: list[DeductionItem] = []
        in_section = False

        for line in lines:
            line_lower = line.lower()
            if "deduction" in line_lower:
                in_section = True
                continue
            if in_section and "net pay" in line_lower:
                in_section = False
                continue
            if has_header and not in_section:
                continue
            if _is_ytd_only(line_lower):
                continue

            keyword = _first_keyword(line_lower, DEDUCTION_KEYWORDS)
            if keyword is None:
                continue
            amount = rightmost_amount(line)
            if amount <= 0:
                continue
            deductions.append(
                DeductionItem(
                    description=_label(line, keyword),
                    amount=amount,
                    pre_tax=any(k in line_lower for k in PRE_TAX_KEYWORDS),
                )
            )
        return deductions

    def extract_taxes(self, lines: list[str]) -> list[TaxItem]:
        """Collect payroll-tax lines anywhere in the document.

        Wage-base lines such as "Medicare Taxable Wages" are not taxes.
        """
        taxes: list[TaxItem] = []

        for line in lines:
            line_lower = line.lower()
            if _WAGE_BASE.search(line_lower) or _is_ytd_only(line_lower):
                continue

            keyword = _first_keyword(line_lower, PAYROLL_TAX_KEYWORDS)
            if keyword is None and (
                "tax" in line_lower or "withholding" in line_lower
            ):
                keyword = _first_keyword(line_lower, QUALIFIED_TAX_KEYWORDS)
            if keyword is None:
                continue
            amount = rightmost_amount(line)
            if amount <= 0:
                continue
            taxes.append(
                TaxItem(description=_label(line, f"{keyword} tax"), amount=amount)
            )
        return taxes

    @staticmethod
    def _pattern_taxes(matches: dict[str, MatchResult]) -> list[TaxItem]:
        taxes = []
        for result in matches_of_type(matches, FieldType.TAX):
            for captures in result.matches:
                amount = parse_money(captures[0]) if captures else Decimal("0")
                if amount > 0:
                    taxes.append(
                        TaxItem(
                            description=result.pattern.name.replace("_", " "),
                            amount=amount,
                        )
                    )
        return taxes

    @staticmethod
    def _pattern_deductions(matches: dict[str, MatchResult]) -> list[DeductionItem]:
        deductions = []
        for result in matches_of_type(
            matches, FieldType.BENEFIT, FieldType.RETIREMENT
        ):
            description = result.pattern.name.replace("_", " ")
            for captures in result.matches:
                amount = parse_money(captures[0]) if captures else Decimal("0")
                if amount > 0:
                    deductions.append(
                        DeductionItem(
                            description=description,
                            amount=amount,
                            pre_tax=any(k in description for k in PRE_TAX_KEYWORDS),
                        )
                    )
        return deductions

    # Year to date

    def extract_ytd(
        self, text: str, lines: list[str], matches: dict[str, MatchResult]
    ) -> dict[str, Decimal]:
        """Collect year-to-date totals by category.

        Tries "<category> ... ytd <amount>" first, then a Current/YTD column
        layout, then the ytd_gross/ytd_net patterns.
        """
        text_lower = text.lower()
        if not _YTD_PRESENT.search(text_lower):
            return {}

        ytd: dict[str, Decimal] = {}
        for category in YTD_CATEGORIES:
            found = re.search(
                rf"\b{re.escape(category)}\b[ \w]*?\bytd[: ]*\$?\s*([\d,]+\.?\d{{0,2}})",
                text_lower,
            )
            if found:
                amount = parse_money(found.group(1))
                if amount > 0:
                    ytd[category] = amount

        in_columns = False
        for line in lines:
            line_lower = line.lower()
            if _COLUMN_HEADER.search(line_lower):
                in_columns = True
                continue
            if not in_columns:
                continue
            category = _first_keyword(line_lower, YTD_CATEGORIES)
            if category is None or category in ytd:
                continue
            amounts = [
                parse_money(m.group(1)) for m in MONEY_PATTERN.finditer(line)
            ]
            if len(amounts) >= 2 and amounts[-1] > 0:
                ytd[category] = amounts[-1]

        for field_type, category in (
            (FieldType.YTD_GROSS, "gross"),
            (FieldType.YTD_NET, "net"),
        ):
            if category in ytd:
                continue
            captures = _first_capture(best_match(matches, field_type))
            if captures:
                amount = parse_money(captures[0])
                if amount > 0:
                    ytd[category] = amount

        return ytd


def _is_ytd_only(line_lower: str) -> bool:
    """True for lines whose label marks them as year-to-date figures."""
    head = MONEY_PATTERN.split(line_lower, maxsplit=1)[0]
    return bool(_YTD_PRESENT.search(head))


def _search_decimal(patterns: tuple[re.Pattern[str], ...], line: str) -> Decimal | None:
    for pattern in patterns:
        found = pattern.search(line)
        if found:
            return Decimal(found.group(1))
    return None
