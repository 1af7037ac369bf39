"""
Unit tests for line item parsing and continuation merging.
"""

from decimal import Decimal

import pytest

from src.extraction.extraction_result import LineItem
from src.extraction.line_items import LineItemParser, MultilineMerger
from src.postprocessor.validators import Validated, ValidationWarning


@pytest.fixture(scope="module")
def parser():
    return LineItemParser()


class TestRowParsing:
    """Tests for LineItemParser.parse_row"""

    def test_three_amounts_with_unit_price(self, parser):
        item = parser.parse_row("Consulting  10  150,00 €  20%  300,00 €  1800,00 €")
        assert item.description == "Consulting"
        assert item.quantity == Decimal("10")
        assert item.unit_price == Decimal("150.00")
        assert item.tax_rate == Decimal("20")
        assert item.total_before_tax is None
        assert item.tax_amount == Decimal("300.00")
        assert item.total_with_tax == Decimal("1800.00")
        assert item.validation == Validated()

    def test_four_amounts(self, parser):
        item = parser.parse_row("Peinture murs  25  m2  12,00  20%  300,00  60,00  360,00")
        assert item.description == "Peinture murs"
        assert item.quantity == Decimal("25")
        assert item.unit == "m2"
        assert item.unit_price == Decimal("12.00")
        assert item.total_before_tax == Decimal("300.00")
        assert item.tax_amount == Decimal("60.00")
        assert item.total_with_tax == Decimal("360.00")
        assert item.is_validated

    def test_quantity_one_keeps_line_total(self, parser):
        item = parser.parse_row("Audit  1  500,00  20%  100,00  600,00")
        assert item.unit_price is None
        assert item.total_before_tax == Decimal("500.00")
        assert item.is_validated

    def test_line_total_recognised_from_tax(self, parser):
        item = parser.parse_row("Licence  2  1000,00  20%  200,00  1200,00")
        assert item.unit_price is None
        assert item.total_before_tax == Decimal("1000.00")
        assert item.is_validated

    def test_unit_glued_to_quantity(self, parser):
        item = parser.parse_row("Main d'oeuvre  3h  45,00  20%  27,00  162,00")
        assert item.description == "Main d'oeuvre"
        assert item.quantity == Decimal("3")
        assert item.unit == "hour"
        assert item.unit_price == Decimal("45.00")
        assert item.is_validated

    def test_unit_column_inside_description(self, parser):
        item = parser.parse_row("Sable  kg  50  2,00  20%  20,00  120,00")
        assert item.description == "Sable"
        assert item.unit == "kg"
        assert item.quantity == Decimal("50")

    def test_inconsistent_row_warns(self, parser):
        item = parser.parse_row("Consulting  10  150,00  20%  300,00  1900,00")
        assert isinstance(item.validation, ValidationWarning)
        assert "1800.00" in item.warning
        assert "1900.00" in item.warning

    def test_partial_row_not_validated(self, parser):
        item = parser.parse_row("Frais de port  15,00")
        assert item.total_with_tax == Decimal("15.00")
        assert item.validation == ValidationWarning(
            "Partially extracted line (missing quantity, price, tax rate), not validated"
        )

    def test_out_of_range_rate(self, parser):
        warnings = []
        item = parser.parse_row("Remise  1  10,00  150%  15,00  25,00", warnings)
        assert item.tax_rate is None
        assert any("rate outside 0-100" in warning for warning in warnings)

    def test_more_than_four_amounts_warns(self, parser):
        warnings = []
        item = parser.parse_row("Travaux  2  10,00  20,00  30,00  40,00  50,00", warnings)
        assert warnings == [
            "Line 'Travaux': 5 amount columns found, only the rightmost 4 are used"
        ]
        assert item.unit_price == Decimal("20.00")
        assert item.total_with_tax == Decimal("50.00")

    @pytest.mark.parametrize("row", [
        "Description  Qty  Unit price  VAT  Tax  Total",
        "Désignation  Qté  PU  TVA  Montant",
        "",
        "ab",
        "12  150,00  20%  30,00  180,00",
    ])
    def test_skipped_rows(self, parser, row):
        assert parser.parse_row(row) is None


class TestParseTable:
    """Tests for LineItemParser.parse_table"""

    def test_rows_in_order(self, parser):
        block = (
            "Consulting  10  150,00  20%  300,00  1800,00\n"
            "\n"
            "Audit  1  500,00  20%  100,00  600,00"
        )
        items = parser.parse_table(block)
        assert [item.description for item in items] == ["Consulting", "Audit"]

    def test_missing_table(self, parser):
        assert parser.parse_table(None) == []
        assert parser.parse_table("") == []


class TestMultilineMerger:
    """Tests for MultilineMerger"""

    def test_continuation_merged(self, parser):
        items = parser.parse_table(
            "Consulting  10  150,00  20%  300,00  1800,00\nmission de cadrage"
        )
        merged = MultilineMerger().merge(items)
        assert len(merged) == 1
        assert merged[0].description == "Consulting mission de cadrage"
        assert merged[0].is_validated

    def test_first_row_continuation_kept(self):
        continuation = LineItem(
            description="suite", validation=ValidationWarning("Partially extracted line")
        )
        full = LineItem(
            description="Audit", quantity=Decimal(1), unit_price=Decimal("500.00"),
            tax_rate=Decimal(20), total_with_tax=Decimal("600.00"), validation=Validated()
        )
        merged = MultilineMerger().merge([continuation, full])
        assert merged == [continuation, full]

    def test_no_continuation_after_first_position(self):
        partial = ValidationWarning("Partially extracted line")
        items = [
            LineItem(description="A", quantity=Decimal(1), validation=partial),
            LineItem(description="b", validation=partial),
            LineItem(description="c", validation=partial),
            LineItem(description="D", total_with_tax=Decimal("5.00"), validation=partial),
        ]
        merged = MultilineMerger().merge(items)
        assert [item.description for item in merged] == ["A b c", "D"]
        assert not any(MultilineMerger.is_continuation(item) for item in merged[1:])


class TestLineItem:
    """Tests for the LineItem record"""

    def test_unchecked_item_is_not_validated(self):
        item = LineItem(
            description="Consulting", quantity=Decimal(10), unit_price=Decimal("150.00"),
            tax_rate=Decimal(20), total_with_tax=Decimal("5.00")
        )
        assert not item.is_validated
        assert item.warning == "Not validated"

    def test_to_dict_keeps_two_decimal_places(self):
        item = LineItem(
            description="Consulting", quantity=Decimal("2.5"), unit_price=Decimal("150"),
            tax_rate=Decimal("5.5"), total_with_tax=Decimal("395.63"), validation=Validated()
        )
        document = item.to_dict()
        assert document["quantity"] == "2.5"
        assert document["unit_price"] == "150.00"
        assert document["tax_rate"] == "5.5"
        assert document["total_with_tax"] == "395.63"
        assert document["tax_amount"] is None
        assert document["validation"] == {"status": "validated", "message": None}
