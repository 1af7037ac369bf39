"""
Unit tests for headline totals extraction.
"""

from decimal import Decimal

import pytest

from src.extraction.extraction_result import Totals
from src.extraction.outcome import Absent, Found
from src.extraction.totals import TotalsExtractor


@pytest.fixture(scope="module")
def extractor():
    return TotalsExtractor()


class TestTotalsExtractor:
    """Tests for TotalsExtractor"""

    def test_clean_invoice(self, extractor, clean_invoice_text):
        assert extractor.extract(clean_invoice_text) == Totals(
            ht=Decimal("1500.00"), tva=Decimal("300.00"), ttc=Decimal("1800.00")
        )

    def test_ttc_synonyms(self, extractor):
        assert extractor.extract("Net à payer : 450,00 €").ttc == Decimal("450.00")
        assert extractor.extract("Amount due: 450.00").ttc == Decimal("450.00")

    def test_rate_in_parentheses(self, extractor):
        assert extractor.extract("TVA (20%) : 60,00 €").tva == Decimal("60.00")

    def test_subtotal_label(self, extractor):
        assert extractor.extract("Sous-total : 1 234,56").ht == Decimal("1234.56")

    def test_currency_before_amount(self, extractor):
        assert extractor.extract("Total TTC : € 1 800,00").ttc == Decimal("1800.00")

    def test_first_match_wins(self, extractor):
        text = "Total TTC : 100,00 €\nTotal TTC : 200,00 €"
        assert extractor.total(text, "ttc") == Found("total_ttc", Decimal("100.00"))

    def test_amount_on_next_line_not_read(self, extractor):
        assert extractor.total("Total TTC\n1 800,00 €", "ttc") == Absent("total_ttc")

    def test_rate_inside_table_row_not_read_as_total(self, extractor):
        text = (
            "Description  Qty  Unit price  VAT  Tax  Total\n"
            "Consulting  10  150,00  TVA 20%  300,00  1800,00\n"
            "Audit  1  500,00  TVA 5,5%  27,50  527,50\n"
            "Total HT : 2 000,00\n"
            "Total TVA : 327,50\n"
            "Total TTC : 2 327,50"
        )
        assert extractor.extract(text) == Totals(
            ht=Decimal("2000.00"), tva=Decimal("327.50"), ttc=Decimal("2327.50")
        )

    def test_label_mid_line_ignored(self, extractor):
        assert extractor.total("Remise incluse, TVA 20% : 300,00", "tva") == Absent("total_tva")

    def test_indented_label(self, extractor):
        assert extractor.extract("   Total TTC : 1 800,00 €").ttc == Decimal("1800.00")

    def test_each_total_optional(self, extractor):
        totals = extractor.extract("Total HT : 100,00")
        assert totals.ht == Decimal("100.00")
        assert totals.tva is None
        assert totals.ttc is None

    def test_to_dict(self):
        totals = Totals(ht=Decimal("1500.00"), tva=None, ttc=Decimal("1800.00"))
        assert totals.to_dict() == {"ht": "1500.00", "tva": None, "ttc": "1800.00"}
