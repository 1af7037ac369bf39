"""
Data Validators Module.

This module provides validation functions for:
    - Line item arithmetic (quantity x price x tax against the totals),
      reported as a Validated or ValidationWarning outcome
    - Date relationships (due date not before invoicing date)
    - Headline totals consistency (HT + TVA = TTC)

Author: ML Engineering Team
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional, Tuple, Union

from config import get_config
from src.utils.logger import get_logger
from .normalizers import DateNormalizer

# Initialize module logger
logger = get_logger(__name__)

CENT = Decimal('0.01')
HUNDRED = Decimal(100)


@dataclass(frozen=True)
class Validated:
    """The line item passed arithmetic cross-validation."""

    def to_dict(self) -> Dict[str, Any]:
        return {'status': 'validated', 'message': None}


@dataclass(frozen=True)
class ValidationWarning:
    """The line item failed, or could not undergo, cross-validation."""
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {'status': 'warning', 'message': self.message}


ValidationOutcome = Union[Validated, ValidationWarning]


def _cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _tolerance() -> Decimal:
    return Decimal(str(get_config("validation.amount_tolerance", "1.00")))


class CrossValidator:
    """
    Checks the arithmetic consistency of one line item.

    With ``base = quantity x unit_price``, the item is Validated when
    ``round(base x (1 + rate/100), 2)`` is within the tolerance of the
    extracted total with tax and, when a tax amount was extracted,
    ``round(base x rate/100, 2)`` is within the tolerance of it. The
    tolerance is inclusive.

    Attributes:
        tolerance: Maximum accepted absolute difference

    Example:
        >>> validator = CrossValidator()
        >>> validator.validate(Decimal(10), Decimal("150.00"), Decimal(20),
        ...                    Decimal("300.00"), Decimal("1800.00"))
        Validated()
    """

    def __init__(self, tolerance: Optional[Decimal] = None) -> None:
        self.tolerance = tolerance if tolerance is not None else _tolerance()
        logger.debug(f"CrossValidator initialized (tolerance={self.tolerance})")

    def validate(
        self,
        quantity: Decimal,
        unit_price: Decimal,
        tax_rate: Decimal,
        tax_amount: Optional[Decimal],
        total_with_tax: Decimal,
        line_total: Optional[Decimal] = None
    ) -> ValidationOutcome:
        """
        Validate one line item.

        Args:
            quantity: Extracted quantity.
            unit_price: Extracted unit price before tax.
            tax_rate: Tax rate in percent.
            tax_amount: Extracted tax amount, if any.
            total_with_tax: Extracted total including tax.
            line_total: Extracted total before tax, if any.

        Returns:
            Validated, or ValidationWarning carrying computed and
            extracted values.
        """
        base = Decimal(quantity) * Decimal(unit_price)
        rate = Decimal(tax_rate) / HUNDRED
        expected_tax = _cents(base * rate)
        expected_total = _cents(base * (1 + rate))

        problems = []
        if abs(expected_total - total_with_tax) > self.tolerance:
            problems.append(
                f"{quantity} × {unit_price} × (1 + {tax_rate}%) = {expected_total} "
                f"(expected) ≠ {total_with_tax} (extracted)"
            )
        if tax_amount is not None and abs(expected_tax - tax_amount) > self.tolerance:
            problems.append(
                f"tax {expected_tax} (expected) ≠ {tax_amount} (extracted)"
            )
        if line_total is not None and abs(_cents(base) - line_total) > self.tolerance:
            problems.append(
                f"total before tax {_cents(base)} (expected) ≠ {line_total} (extracted)"
            )

        if problems:
            return ValidationWarning("Inconsistent line: " + "; ".join(problems))
        return Validated()


class DateValidator:
    """
    Validates date relationships.

    Dates are kept as written in the document, so they are parsed
    day-first with DateNormalizer before being compared.

    Example:
        >>> validator = DateValidator()
        >>> validator.is_due_after_invoice("15/03/2024", "01/03/2024")
        (False, 'Due date is before invoice date')
    """

    def __init__(self) -> None:
        """Initialize the date validator."""
        self.normalizer = DateNormalizer()
        logger.debug("DateValidator initialized")

    def is_due_after_invoice(
        self,
        invoice_date: str,
        due_date: str
    ) -> Tuple[bool, str]:
        """
        Check if due date is after or equal to invoice date.

        Args:
            invoice_date: Invoice date string.
            due_date: Payment due date string.

        Returns:
            Tuple of (is_valid, message).
        """
        inv_parsed = self.normalizer.parse(invoice_date)
        due_parsed = self.normalizer.parse(due_date)

        if inv_parsed is None or due_parsed is None:
            return True, "Could not validate date relationship"

        if due_parsed < inv_parsed:
            return False, "Due date is before invoice date"

        return True, "Valid date relationship"


class TotalsValidator:
    """Checks that the headline totals add up (HT + TVA = TTC)."""

    def __init__(self, tolerance: Optional[Decimal] = None) -> None:
        self.tolerance = tolerance if tolerance is not None else _tolerance()

    def validate(
        self,
        ht: Optional[Decimal],
        tva: Optional[Decimal],
        ttc: Optional[Decimal]
    ) -> Tuple[bool, str]:
        """
        Returns:
            Tuple of (is_valid, message). Missing totals are not checked.
        """
        if ht is None or tva is None or ttc is None:
            return True, "Totals incomplete, not checked"

        if abs(ht + tva - ttc) > self.tolerance:
            return False, (
                f"Totals inconsistent: {ht} + {tva} = {_cents(ht + tva)} ≠ {ttc} (TTC)"
            )
        return True, "Totals consistent"
