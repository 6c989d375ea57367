"""Tests for structured field extraction."""

from decimal import Decimal

import pytest

from paystub_extractor.extractors.fields import FieldExtractor
from paystub_extractor.extractors.matcher import PatternMatcher
from paystub_extractor.extractors.normalize import normalize_text
from paystub_extractor.extractors.patterns import FieldType, default_pattern_library


@pytest.fixture
def fields() -> FieldExtractor:
    return FieldExtractor()


@pytest.fixture
def sample_lines(sample_text: str) -> list[str]:
    return [line for line in normalize_text(sample_text).split("\n") if line]


class TestSingleValues:
    """Amounts and dates."""

    @pytest.mark.unit
    def test_keyword_before_value(self, fields: FieldExtractor) -> None:
        amount = fields.extract_amount(
            "Take Home 1,234.50", {}, FieldType.NET_PAY, ("net pay", "take home")
        )
        assert amount == Decimal("1234.50")

    @pytest.mark.unit
    def test_value_before_keyword(self, fields: FieldExtractor) -> None:
        amount = fields.extract_amount(
            "$812.40 net pay", {}, FieldType.NET_PAY, ("net pay",)
        )
        assert amount == Decimal("812.40")

    @pytest.mark.unit
    def test_missing_amount_is_zero(self, fields: FieldExtractor) -> None:
        amount = fields.extract_amount("nothing", {}, FieldType.GROSS_PAY, ("gross",))
        assert amount == Decimal("0.00")

    @pytest.mark.unit
    def test_period_from_begin_end_keywords(self, fields: FieldExtractor) -> None:
        text = "Period Beginning: 03/01/2024\nPeriod Ending: 03/15/2024"
        assert fields.extract_pay_period(text, {}) == ("2024-03-01", "2024-03-15")

    @pytest.mark.unit
    def test_period_with_month_names(self, fields: FieldExtractor) -> None:
        text = "Pay Period: Jan 1, 2024 - Jan 15, 2024"
        assert fields.extract_pay_period(text, {}) == ("2024-01-01", "2024-01-15")

    @pytest.mark.unit
    def test_check_date(self, fields: FieldExtractor) -> None:
        assert fields.extract_pay_date("Check Date: 2024-04-05", {}) == "2024-04-05"


class TestParties:
    """Employer and employee details."""

    @pytest.mark.unit
    def test_employer_from_first_lines(
        self, fields: FieldExtractor, sample_lines: list[str]
    ) -> None:
        employer = fields.extract_employer(sample_lines)
        assert employer.name == "ACME CORPORATION"
        assert employer.ein == "12-3456789"
        assert employer.address == "123 Main Street, Springfield, IL 62701"

    @pytest.mark.unit
    def test_employer_label(self, fields: FieldExtractor) -> None:
        employer = fields.extract_employer(["Employer: Globex LLC", "EIN 98-7654321"])
        assert employer.name == "Globex LLC"
        assert employer.ein == "98-7654321"

    @pytest.mark.unit
    def test_employer_label_on_previous_line(self, fields: FieldExtractor) -> None:
        employer = fields.extract_employer(["Company", "Initech"])
        assert employer.name == "Initech"

    @pytest.mark.unit
    def test_document_titles_are_not_employers(self, fields: FieldExtractor) -> None:
        employer = fields.extract_employer(["Earnings Statement", "Paystub", "Hooli"])
        assert employer.name == "Hooli"

    @pytest.mark.unit
    def test_employee(self, fields: FieldExtractor, sample_lines: list[str]) -> None:
        employee = fields.extract_employee(sample_lines, {})
        assert employee.name == "John Doe"
        assert employee.employee_id == "EMP12345"
        assert employee.ssn_last4 == "6789"

    @pytest.mark.unit
    def test_masked_ssn_with_asterisks(self, fields: FieldExtractor) -> None:
        employee = fields.extract_employee(["SSN: ***-**-4321"], {})
        assert employee.ssn_last4 == "4321"

    @pytest.mark.unit
    def test_employee_id_from_pattern(self, fields: FieldExtractor) -> None:
        text = "Paychex Flex\nEmployee #: A1234"
        matches = PatternMatcher(default_pattern_library()).match(text, "Paychex")
        employee = fields.extract_employee(text.split("\n"), matches)
        assert employee.employee_id == "A1234"


class TestLineItems:
    """Section-aware earnings, deductions and taxes."""

    @pytest.mark.unit
    def test_earnings(self, fields: FieldExtractor, sample_lines: list[str]) -> None:
        earnings = fields.extract_earnings(sample_lines)
        assert [e.description for e in earnings] == ["Regular Hours", "Overtime"]
        regular, overtime = earnings
        assert regular.hours == Decimal("80.00")
        assert regular.rate == Decimal("25.00")
        assert regular.amount == Decimal("2000.00")
        assert overtime.hours == Decimal("10.00")
        assert overtime.rate == Decimal("37.50")
        assert overtime.amount == Decimal("375.00")

    @pytest.mark.unit
    def test_earnings_hours_and_hourly_rate(self, fields: FieldExtractor) -> None:
        earnings = fields.extract_earnings(["Regular 80 hrs $25.00/hr 2,000.00"])
        assert len(earnings) == 1
        assert earnings[0].hours == Decimal("80")
        assert earnings[0].rate == Decimal("25.00")
        assert earnings[0].amount == Decimal("2000.00")

    @pytest.mark.unit
    def test_zero_amount_items_dropped(self, fields: FieldExtractor) -> None:
        assert fields.extract_earnings(["Earnings", "Bonus 0.00", "Holiday"]) == []

    @pytest.mark.unit
    def test_deductions(self, fields: FieldExtractor, sample_lines: list[str]) -> None:
        deductions = fields.extract_deductions(sample_lines)
        assert [(d.description, d.amount, d.pre_tax) for d in deductions] == [
            ("Health Insurance (Pre-Tax)", Decimal("125.00"), True),
            ("401k", Decimal("150.00"), True),
        ]

    @pytest.mark.unit
    def test_post_tax_deduction(self, fields: FieldExtractor) -> None:
        deductions = fields.extract_deductions(["Deductions", "Union Dues 25.00"])
        assert deductions[0].description == "Union Dues"
        assert deductions[0].pre_tax is False

    @pytest.mark.unit
    def test_taxes(self, fields: FieldExtractor, sample_lines: list[str]) -> None:
        taxes = fields.extract_taxes(sample_lines)
        assert [(t.description, t.amount) for t in taxes] == [
            ("Federal Income Tax", Decimal("285.00")),
            ("State Income Tax", Decimal("95.00")),
            ("Social Security", Decimal("147.25")),
            ("Medicare", Decimal("34.44")),
        ]

    @pytest.mark.unit
    def test_tax_keywords_match_whole_words(self, fields: FieldExtractor) -> None:
        taxes = fields.extract_taxes(["100 Main St Suite 200", "FICA 50.00"])
        assert [(t.description, t.amount) for t in taxes] == [
            ("FICA", Decimal("50.00"))
        ]

    @pytest.mark.unit
    def test_state_requires_tax_word(self, fields: FieldExtractor) -> None:
        assert fields.extract_taxes(["State 50.00"]) == []

    @pytest.mark.unit
    def test_wage_base_lines_are_not_taxes(self, fields: FieldExtractor) -> None:
        taxes = fields.extract_taxes(
            [
                "Taxes",
                "Federal Income Tax 200.00",
                "Medicare Taxable Wages 2,000.00",
                "Medicare Tax 29.00",
                "Social Security Tax 124.00",
            ]
        )
        assert [(t.description, t.amount) for t in taxes] == [
            ("Federal Income Tax", Decimal("200.00")),
            ("Medicare Tax", Decimal("29.00")),
            ("Social Security Tax", Decimal("124.00")),
        ]

    @pytest.mark.unit
    def test_taxes_listed_under_earnings(self, fields: FieldExtractor) -> None:
        taxes = fields.extract_taxes(
            ["Earnings", "Regular 2,000.00", "Federal Withholding 150.00"]
        )
        assert [(t.description, t.amount) for t in taxes] == [
            ("Federal Withholding", Decimal("150.00"))
        ]


class TestYearToDate:
    """YTD totals."""

    @pytest.mark.unit
    def test_no_ytd_marker(self, fields: FieldExtractor) -> None:
        text = "Gross Pay 100.00"
        assert fields.extract_ytd(text, [text], {}) == {}

    @pytest.mark.unit
    def test_category_ytd_amount(self, fields: FieldExtractor, sample_text: str) -> None:
        text = normalize_text(sample_text)
        ytd = fields.extract_ytd(text, text.split("\n"), {})
        assert ytd == {"gross": Decimal("4750.00")}

    @pytest.mark.unit
    def test_current_ytd_columns(self, fields: FieldExtractor) -> None:
        text = "Summary Current YTD\nGross 2,000.00 24,000.00\nNet 1,500.00 18,000.00"
        ytd = fields.extract_ytd(text, text.split("\n"), {})
        assert ytd == {"gross": Decimal("24000.00"), "net": Decimal("18000.00")}

    @pytest.mark.unit
    def test_ytd_patterns(self, fields: FieldExtractor) -> None:
        text = "YTD Gross: $10,000.00\nYTD Net: $7,500.00"
        matches = PatternMatcher(default_pattern_library()).match(text, "Generic")
        ytd = fields.extract_ytd(text, text.split("\n"), matches)
        assert ytd == {"gross": Decimal("10000.00"), "net": Decimal("7500.00")}

    @pytest.mark.unit
    def test_ytd_category_must_be_whole_word(self, fields: FieldExtractor) -> None:
        text = "statement ytd 5,000.00\nnetwork ytd 300.00"
        assert fields.extract_ytd(text, text.split("\n"), {}) == {}

    @pytest.mark.unit
    def test_ytd_category_with_label_words(self, fields: FieldExtractor) -> None:
        text = "state tax ytd 1,200.00"
        assert fields.extract_ytd(text, [text], {}) == {"state": Decimal("1200.00")}
