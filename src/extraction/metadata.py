"""
Metadata Extractor Module.

This module extracts the invoice-level labelled fields from the full
normalized text (these labels may appear anywhere on the page):
    - invoice number
    - invoicing date and due date
    - payment terms
    - order reference

Dates are kept as written in the document. When a date label is missing,
a positional fallback is used: the first date-shaped token in the
document is taken as the invoicing date and the second as the due date.
The fallback is a best-effort heuristic (a referenced prior invoice date
can be misassigned), so every inferred value is reported as a warning.

Author: ML Engineering Team
"""

import re
from typing import List, Optional

from src.utils.logger import get_logger
from .extraction_result import InvoiceMetadata
from .labels import compile_labels, get_labels
from .outcome import Absent, Found, Outcome, resolve

# Initialize module logger
logger = get_logger(__name__)

DATE_TOKEN = r'(?<![\d/.-])(\d{1,2}[/.-]\d{1,2}[/.-]\d{2,4}|\d{4}-\d{2}-\d{2})(?!\d|[/.-]\d)'
IDENTIFIER = (
    r'(?=[\w/-]*\d)'
    r'(?!\d{1,2}[/.-]\d{1,2}[/.-]\d{2,4}(?![\w/-]))'
    r'([A-Z0-9][\w/-]{2,20})(?![\w/-])'
)
SEPARATOR = r'[ \t]*[:#]?[ \t]*'
DATE_SEPARATOR = r'[ \t]*:?[ \t]*\n?[ \t]*'


class MetadataExtractor:
    """
    Extracts invoice number, dates, payment terms and order reference.

    Example:
        >>> extractor = MetadataExtractor()
        >>> metadata = extractor.extract("Invoice No: INV-001\\nDue date: 30/04/2024")
        >>> metadata.invoice_number, metadata.due_date
        ('INV-001', '30/04/2024')
    """

    def __init__(self) -> None:
        """Compile the labelled patterns."""
        flags = re.IGNORECASE
        self.invoice_number_pattern = re.compile(
            compile_labels(get_labels('invoice_number')) + SEPARATOR + IDENTIFIER, flags
        )
        self.invoicing_date_pattern = re.compile(
            compile_labels(get_labels('invoicing_date')) + DATE_SEPARATOR + DATE_TOKEN, flags
        )
        self.due_date_pattern = re.compile(
            compile_labels(get_labels('due_date')) + DATE_SEPARATOR + DATE_TOKEN, flags
        )
        self.payment_terms_pattern = re.compile(
            compile_labels(get_labels('payment_terms')) + r'[ \t]*:?[ \t]*([^\n]*\S)', flags
        )
        self.order_reference_pattern = re.compile(
            compile_labels(get_labels('order_reference')) + SEPARATOR + IDENTIFIER, flags
        )
        self.date_token = re.compile(DATE_TOKEN)

    def extract(self, text: str, warnings: Optional[List[str]] = None) -> InvoiceMetadata:
        """
        Extract all metadata fields.

        Args:
            text: Full normalized invoice text.
            warnings: Optional list collecting warnings (date fallbacks).

        Returns:
            InvoiceMetadata with each field independently optional.
        """
        if warnings is None:
            warnings = []

        metadata = InvoiceMetadata(
            invoice_number=resolve(self.invoice_number(text), warnings),
            invoicing_date=self._with_fallback(
                self.invoicing_date(text), text, 0, 'invoicing date', warnings
            ),
            due_date=self._with_fallback(
                self.due_date(text), text, 1, 'due date', warnings
            ),
            payment_terms=resolve(self.payment_terms(text), warnings),
            order_reference=resolve(self.order_reference(text), warnings),
        )
        logger.debug(f"Metadata extracted: {metadata}")
        return metadata

    # -------------------------------------------------------------------------
    # Rules
    # -------------------------------------------------------------------------

    @staticmethod
    def _first_group(pattern: re.Pattern, text: str, rule: str) -> Outcome:
        match = pattern.search(text)
        if match:
            return Found(rule, match.group(1).strip())
        return Absent(rule)

    def invoice_number(self, text: str) -> Outcome:
        return self._first_group(self.invoice_number_pattern, text, 'invoice_number')

    def invoicing_date(self, text: str) -> Outcome:
        return self._first_group(self.invoicing_date_pattern, text, 'invoicing_date')

    def due_date(self, text: str) -> Outcome:
        return self._first_group(self.due_date_pattern, text, 'due_date')

    def payment_terms(self, text: str) -> Outcome:
        return self._first_group(self.payment_terms_pattern, text, 'payment_terms')

    def order_reference(self, text: str) -> Outcome:
        return self._first_group(self.order_reference_pattern, text, 'order_reference')

    def date_tokens(self, text: str) -> List[str]:
        """All date-shaped tokens, in appearance order."""
        return [match.group(1) for match in self.date_token.finditer(text)]

    def _with_fallback(
        self,
        outcome: Outcome,
        text: str,
        position: int,
        field_name: str,
        warnings: List[str]
    ) -> Optional[str]:
        """Resolve a labelled date, else take the n-th date token."""
        value = resolve(outcome, warnings)
        if value is not None:
            return value

        tokens = self.date_tokens(text)
        if len(tokens) > position:
            inferred = tokens[position]
            warnings.append(
                f"No labelled {field_name}: inferred {inferred} from date "
                f"#{position + 1} in the document (low confidence)"
            )
            return inferred
        return None
