"""
Extraction Result Data Classes.

This module defines the immutable records produced by the extraction
pipeline. A fresh InvoiceResult is built per document; nothing in it
changes after construction.

Classes:
    RawDocument: OCR text plus the engine's confidence
    Address: Vendor or client contact block
    LineItem: One row of the itemized table
    Totals: Headline HT / TVA / TTC amounts
    InvoiceMetadata: Invoice number, dates, terms, order reference
    ResultMeta: Confidence, normalized text and warnings
    InvoiceResult: The pipeline's sole output value

Author: ML Engineering Team
"""

import json
from dataclasses import dataclass, field, asdict
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from src.postprocessor.validators import Validated, ValidationWarning, ValidationOutcome


@dataclass(frozen=True)
class RawDocument:
    """
    Immutable pipeline input as returned by the OCR collaborator.

    Attributes:
        text: Recognized text, line breaks and whitespace runs preserved
        confidence: Engine's self-reported accuracy estimate (0-100)
    """
    text: str
    confidence: float = 100.0


@dataclass(frozen=True)
class Address:
    """
    Contact block of one party. Every field is independently optional.

    Example:
        >>> Address(name="Acme Corp", postal_code="75001", city="Paris")
    """
    name: Optional[str] = None
    street: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    tax_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return asdict(self)


CENT = Decimal('0.01')
NOT_VALIDATED = "Not validated"


def _money(value: Optional[Decimal]) -> Optional[str]:
    """Money as a two-place decimal string ("1800.00"), keeping None."""
    return str(value.quantize(CENT)) if value is not None else None


def _number(value: Optional[Decimal]) -> Optional[str]:
    """Quantities and rates as written after parsing ("10", "5.5")."""
    return str(value) if value is not None else None


@dataclass(frozen=True)
class LineItem:
    """
    One row of the invoice's itemized table.

    Attributes:
        description: Item description (never empty)
        quantity: Quantity, if readable
        unit: Canonical unit name (hour, m2, kg, unit, piece, ...)
        unit_price: Unit price before tax
        tax_rate: Tax rate in percent
        total_before_tax: Line total before tax
        tax_amount: Line tax amount
        total_with_tax: Line total including tax
        validation: Validated or ValidationWarning; "Not validated" until
            the row has been cross-validated
    """
    description: str
    quantity: Optional[Decimal] = None
    unit: Optional[str] = None
    unit_price: Optional[Decimal] = None
    tax_rate: Optional[Decimal] = None
    total_before_tax: Optional[Decimal] = None
    tax_amount: Optional[Decimal] = None
    total_with_tax: Optional[Decimal] = None
    validation: ValidationOutcome = field(default_factory=lambda: ValidationWarning(NOT_VALIDATED))

    @property
    def is_validated(self) -> bool:
        return isinstance(self.validation, Validated)

    @property
    def warning(self) -> Optional[str]:
        if isinstance(self.validation, ValidationWarning):
            return self.validation.message
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'description': self.description,
            'quantity': _number(self.quantity),
            'unit': self.unit,
            'unit_price': _money(self.unit_price),
            'tax_rate': _number(self.tax_rate),
            'total_before_tax': _money(self.total_before_tax),
            'tax_amount': _money(self.tax_amount),
            'total_with_tax': _money(self.total_with_tax),
            'validation': self.validation.to_dict(),
        }


@dataclass(frozen=True)
class Totals:
    """Headline totals: before tax (HT), tax (TVA), including tax (TTC)."""
    ht: Optional[Decimal] = None
    tva: Optional[Decimal] = None
    ttc: Optional[Decimal] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {'ht': _money(self.ht), 'tva': _money(self.tva), 'ttc': _money(self.ttc)}


@dataclass(frozen=True)
class InvoiceMetadata:
    """Invoice-level labelled fields, kept as written in the document."""
    invoice_number: Optional[str] = None
    invoicing_date: Optional[str] = None
    due_date: Optional[str] = None
    payment_terms: Optional[str] = None
    order_reference: Optional[str] = None


@dataclass(frozen=True)
class ResultMeta:
    """Pipeline metadata attached to every result."""
    confidence: float
    normalized_text: str
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class InvoiceResult:
    """
    Structured record recovered from one invoice's OCR text.

    Absent fields are None (never omitted) so consumers can tell "not
    found" from "not attempted". The record is advisory: callers inspect
    ``meta.warnings`` to decide whether human review is needed.

    Example:
        >>> result = InvoiceExtractor().extract(text, confidence=91.5)
        >>> result.vendor.name
        'Acme Corp'
        >>> result.totals.ttc
        Decimal('1800.00')
        >>> print(result.to_json())
    """
    vendor: Optional[Address] = None
    client: Optional[Address] = None
    invoice_number: Optional[str] = None
    invoicing_date: Optional[str] = None
    due_date: Optional[str] = None
    payment_terms: Optional[str] = None
    order_reference: Optional[str] = None
    notes: Optional[str] = None
    line_items: Tuple[LineItem, ...] = ()
    totals: Totals = field(default_factory=Totals)
    meta: ResultMeta = field(default_factory=lambda: ResultMeta(confidence=0.0, normalized_text=''))

    @property
    def warnings(self) -> Tuple[str, ...]:
        return self.meta.warnings

    @property
    def fields(self) -> Dict[str, Any]:
        """
        Get the scalar header fields as a dictionary.

        Returns:
            Dictionary of field names to values.
        """
        return {
            'invoice_number': self.invoice_number,
            'invoicing_date': self.invoicing_date,
            'due_date': self.due_date,
            'payment_terms': self.payment_terms,
            'order_reference': self.order_reference,
            'notes': self.notes,
        }

    @property
    def missing_fields(self) -> list:
        """Get the header fields that were not extracted."""
        missing = [name for name, value in self.fields.items() if value is None]
        if self.vendor is None:
            missing.append('vendor')
        if self.client is None:
            missing.append('client')
        return missing

    @property
    def needs_review(self) -> bool:
        """True when any warning was raised during extraction."""
        return bool(self.meta.warnings)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to a plain key-value document.

        Money amounts become two-place decimal strings so no precision is
        lost in JSON; absent values stay None.

        Returns:
            Dictionary representation of the result.
        """
        return {
            'vendor': self.vendor.to_dict() if self.vendor else None,
            'client': self.client.to_dict() if self.client else None,
            **self.fields,
            'line_items': [item.to_dict() for item in self.line_items],
            'totals': self.totals.to_dict(),
            'meta': {
                'confidence': self.meta.confidence,
                'normalized_text': self.meta.normalized_text,
                'warnings': list(self.meta.warnings),
            },
        }

    def to_json(self, indent: int = 2) -> str:
        """
        Convert to JSON string.

        Args:
            indent: JSON indentation level.

        Returns:
            JSON string representation.
        """
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def __repr__(self) -> str:
        vendor = self.vendor.name if self.vendor else None
        return (
            f"InvoiceResult("
            f"invoice={self.invoice_number}, "
            f"vendor={vendor}, "
            f"items={len(self.line_items)}, "
            f"ttc={self.totals.ttc}, "
            f"warnings={len(self.meta.warnings)})"
        )
