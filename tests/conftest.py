"""
Pytest configuration and shared fixtures.

This file registers the ``ocr`` marker (tests that need the Tesseract
binary, skipped unless --run-ocr is given) and provides sample invoice
texts shared by the test modules.
"""

import pytest

from src.extraction import InvoiceExtractor


CLEAN_INVOICE = """FACTURE
Vendor
Acme Corp
12 Rue de Paris
75001 Paris
contact@acme.fr
01 23 45 67 89
SIRET : 123 456 789 00012
Client
Globex SARL
8 avenue des Lilas
69002 Lyon
Invoice No: INV-2024-001
Invoice date: 05/03/2024
Due date: 04/04/2024
Payment terms: 30 days net
Order reference: PO-7781
Description  Qty  Unit price  VAT  Tax  Total
Consulting  10  150,00 €  20%  300,00 €  1800,00 €
Total HT : 1 500,00 €
TVA 20% : 300,00 €
Total TTC : 1 800,00 €
Additional information
Payment by bank transfer.

Thank you for your business"""


def pytest_addoption(parser):
    """Add custom command-line options"""
    parser.addoption(
        "--run-ocr",
        action="store_true",
        default=False,
        help="Run tests that call the Tesseract OCR binary"
    )


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers",
        "ocr: mark test as requiring the Tesseract OCR binary"
    )


def pytest_collection_modifyitems(config, items):
    """Skip OCR tests unless --run-ocr is specified"""
    if config.getoption("--run-ocr"):
        return

    skip_ocr = pytest.mark.skip(reason="need --run-ocr option to run")
    for item in items:
        if "ocr" in item.keywords:
            item.add_marker(skip_ocr)


@pytest.fixture
def clean_invoice_text():
    """Normalized text of a complete, consistent invoice"""
    return CLEAN_INVOICE


@pytest.fixture
def invoice_without_client():
    """The clean invoice with its client block removed"""
    return CLEAN_INVOICE.replace(
        "Client\nGlobex SARL\n8 avenue des Lilas\n69002 Lyon\n", ""
    )


@pytest.fixture(scope="session")
def extractor():
    """One extractor shared by all tests (stages are stateless)"""
    return InvoiceExtractor()
