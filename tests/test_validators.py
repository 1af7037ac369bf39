"""
Unit tests for the validators and the result-level review.
"""

from decimal import Decimal

import pytest

from src.extraction.extraction_result import LineItem, Totals
from src.postprocessor.processor import PostProcessor
from src.postprocessor.validators import (
    CrossValidator,
    DateValidator,
    TotalsValidator,
    Validated,
    ValidationWarning,
)

D = Decimal


class TestCrossValidator:
    """Tests for line item cross-validation"""

    @pytest.fixture
    def validator(self):
        return CrossValidator()

    def test_consistent_line(self, validator):
        outcome = validator.validate(D(10), D("150.00"), D(20), D("300.00"), D("1800.00"))
        assert outcome == Validated()

    def test_tolerance_is_inclusive(self, validator):
        assert validator.validate(D(10), D("150.00"), D(20), None, D("1801.00")) == Validated()

    def test_just_outside_tolerance(self, validator):
        outcome = validator.validate(D(10), D("150.00"), D(20), None, D("1801.01"))
        assert isinstance(outcome, ValidationWarning)

    def test_warning_carries_both_values(self, validator):
        outcome = validator.validate(D(10), D("150.00"), D(20), D("300.00"), D("1900.00"))
        assert outcome.message.startswith("Inconsistent line: ")
        assert "1800.00 (expected)" in outcome.message
        assert "1900.00 (extracted)" in outcome.message

    def test_tax_amount_mismatch(self, validator):
        outcome = validator.validate(D(10), D("150.00"), D(20), D("250.00"), D("1800.00"))
        assert outcome == ValidationWarning(
            "Inconsistent line: tax 300.00 (expected) ≠ 250.00 (extracted)"
        )

    def test_line_total_mismatch(self, validator):
        outcome = validator.validate(
            D(25), D("12.00"), D(20), D("60.00"), D("360.00"), line_total=D("320.00")
        )
        assert "total before tax 300.00 (expected) ≠ 320.00 (extracted)" in outcome.message

    def test_rounding_half_up(self, validator):
        # 3 x 3.33 x 1.055 = 10.539... -> 10.54
        outcome = validator.validate(D(3), D("3.33"), D("5.5"), None, D("10.54"))
        assert outcome == Validated()

    def test_custom_tolerance(self):
        strict = CrossValidator(tolerance=D("0.00"))
        assert isinstance(
            strict.validate(D(1), D("100.00"), D(20), None, D("120.01")), ValidationWarning
        )

    @pytest.mark.parametrize("quantity,price,rate", [
        ("1", "0.01", "0"),
        ("2", "19.99", "5.5"),
        ("3", "45.00", "20"),
        ("12.5", "8.40", "10"),
        ("100", "1234.56", "20"),
    ])
    def test_computed_totals_always_validate(self, validator, quantity, price, rate):
        base = D(quantity) * D(price)
        tax = (base * D(rate) / 100).quantize(D("0.01"))
        total = (base * (1 + D(rate) / 100)).quantize(D("0.01"))
        outcome = validator.validate(D(quantity), D(price), D(rate), tax, total)
        assert outcome == Validated()

    def test_to_dict(self):
        assert Validated().to_dict() == {"status": "validated", "message": None}
        assert ValidationWarning("x").to_dict() == {"status": "warning", "message": "x"}


class TestDateValidator:
    """Tests for DateValidator"""

    @pytest.fixture
    def validator(self):
        return DateValidator()

    def test_due_after_invoice(self, validator):
        assert validator.is_due_after_invoice("05/03/2024", "04/04/2024")[0]

    def test_same_day(self, validator):
        assert validator.is_due_after_invoice("05/03/2024", "05/03/2024")[0]

    def test_due_before_invoice(self, validator):
        assert validator.is_due_after_invoice("15/03/2024", "01/03/2024") == (
            False, "Due date is before invoice date"
        )

    def test_day_first_reading(self, validator):
        # 03/05 is 3 May, after 04/04
        assert validator.is_due_after_invoice("04/04/2024", "03/05/2024")[0]

    def test_unparsable_date_not_flagged(self, validator):
        assert validator.is_due_after_invoice("pending", "01/03/2024") == (
            True, "Could not validate date relationship"
        )


class TestTotalsValidator:
    """Tests for TotalsValidator"""

    def test_consistent(self):
        assert TotalsValidator().validate(D("1500.00"), D("300.00"), D("1800.00"))[0]

    def test_inconsistent(self):
        valid, message = TotalsValidator().validate(D("1500.00"), D("300.00"), D("1850.00"))
        assert not valid
        assert message == "Totals inconsistent: 1500.00 + 300.00 = 1800.00 ≠ 1850.00 (TTC)"

    def test_incomplete_not_checked(self):
        assert TotalsValidator().validate(D("1500.00"), None, D("1850.00"))[0]


class TestPostProcessor:
    """Tests for the result-level review"""

    @pytest.fixture
    def processor(self):
        return PostProcessor()

    def test_clean_review(self, processor):
        totals = Totals(ht=D("1500.00"), tva=D("300.00"), ttc=D("1800.00"))
        assert processor.review(95.0, [], "05/03/2024", "04/04/2024", totals) == []

    def test_low_confidence(self, processor):
        assert processor.review(55.0) == [
            "Low OCR confidence (55.0%) - results should be checked manually"
        ]

    def test_threshold_not_flagged(self, processor):
        assert processor.review(70.0) == []

    def test_line_warnings_numbered(self, processor):
        items = [
            LineItem(description="Audit", validation=Validated()),
            LineItem(description="Frais", validation=ValidationWarning("Partially extracted line")),
        ]
        assert processor.review(100.0, items) == ["Line 2 (Frais): Partially extracted line"]

    def test_due_date_before_invoicing_date(self, processor):
        warnings = processor.review(100.0, [], "15/03/2024", "01/03/2024")
        assert warnings == ["Due date is before invoice date (01/03/2024 < 15/03/2024)"]

    def test_inconsistent_totals(self, processor):
        totals = Totals(ht=D("1500.00"), tva=D("300.00"), ttc=D("1850.00"))
        warnings = processor.review(100.0, totals=totals)
        assert len(warnings) == 1
        assert warnings[0].startswith("Totals inconsistent")
