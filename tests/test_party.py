"""
Unit tests for the party extractor.
"""

import pytest

from src.extraction.extraction_result import Address
from src.extraction.outcome import Absent, Found, Malformed
from src.extraction.party import PartyExtractor


VENDOR_BLOCK = """Acme Corp
12 Rue de Paris
75001 Paris
contact@acme.fr
01 23 45 67 89
SIRET : 123 456 789 00012"""


@pytest.fixture(scope="module")
def extractor():
    return PartyExtractor()


class TestPartyExtraction:
    """Tests for PartyExtractor.extract"""

    def test_full_block(self, extractor):
        address = extractor.extract(VENDOR_BLOCK)
        assert address == Address(
            name="Acme Corp",
            street="12 Rue de Paris",
            postal_code="75001",
            city="Paris",
            email="contact@acme.fr",
            phone="0123456789",
            tax_id="12345678900012",
        )

    def test_missing_block(self, extractor):
        assert extractor.extract(None) is None
        assert extractor.extract("") is None
        assert extractor.extract("  \n \n") is None

    def test_fields_independently_optional(self, extractor):
        address = extractor.extract("Globex SARL")
        assert address.name == "Globex SARL"
        assert address.street is None
        assert address.postal_code is None
        assert address.tax_id is None

    def test_malformed_tax_id_warns(self, extractor):
        warnings = []
        address = extractor.extract("Acme\nSIRET: 123 456", warnings)
        assert address.tax_id is None
        assert warnings == ["tax_id: could not read '123 456' (expected 13-15 digits, got 6)"]

    def test_list_number_stripped_from_name(self, extractor):
        assert extractor.extract("1. Acme\n75001 Paris").name == "Acme"

    def test_international_phone(self, extractor):
        assert extractor.extract("Acme\n+33 1 23 45 67 89").phone == "+33123456789"

    def test_compound_city(self, extractor):
        address = extractor.extract("Acme\n3 place du Marché\n13001 Aix-en-Provence")
        assert address.postal_code == "13001"
        assert address.city == "Aix-en-Provence"


class TestPartyRules:
    """Tests for the individual rules"""

    def test_street_rule(self, extractor):
        outcome = extractor.street_line(["Acme", "Zone Nord", "8 avenue des Lilas"])
        assert outcome == Found("street", "8 avenue des Lilas")

    def test_street_fallback_second_line(self, extractor):
        outcome = extractor.street_line(["Acme", "Zone industrielle", "75001 Paris"])
        assert outcome == Found("street_fallback", "Zone industrielle")

    def test_street_absent_single_line(self, extractor):
        assert extractor.street_line(["Acme"]) == Absent("street")

    def test_postal_code_not_read_from_tax_id(self, extractor):
        assert extractor.postal_city(["SIRET 12345 Paris"]) == Absent("postal_city")

    def test_tax_id_length_checked(self, extractor):
        outcome = extractor.tax_registration(["SIREN n° 123 456 789 0001 2345 6"])
        assert isinstance(outcome, Malformed)

    def test_name_skips_email_line(self, extractor):
        assert extractor.name(["contact@acme.fr", "Acme"]) == Found("name", "Acme")
