"""
Line Item Parser Module.

This module turns the rows of an invoice's itemized table into LineItem
records and folds description-continuation rows into the row above.

Row layout assumed: description first, then (in any order) quantity,
unit and tax rate, with the monetary columns at the right edge. Amounts
are assigned right to left because the number of populated amount
columns varies between documents while their relative order does not:

    ... unit price | total before tax | tax amount | total with tax

At most four amount columns are supported; on wider rows the rightmost
four are used and a warning is raised.

Author: ML Engineering Team
"""

import re
from dataclasses import replace
from decimal import Decimal
from typing import List, Optional, Tuple

from src.postprocessor.normalizers import AmountParser
from src.postprocessor.validators import CrossValidator, ValidationOutcome, ValidationWarning
from src.utils.logger import get_logger
from .extraction_result import LineItem
from .labels import compile_labels, get_labels, get_units
from .outcome import Absent, Found, Malformed, Outcome, resolve

# Initialize module logger
logger = get_logger(__name__)

CURRENCY = AmountParser.CURRENCY_PATTERN
AMOUNT = re.compile(r'(?<![\d.,])\d+(?: \d{3})*[.,]\d{2}(?![\d.,])(?![ \t]*%)')
RATE = re.compile(r'(?<![\d.,])(\d{1,3}(?:[.,]\d+)?)[ \t]*%')
NUMBER = re.compile(r'(?<![\w.,])\d+(?:[.,]\d+)?(?![\d.,])')
COLUMN_GAP = re.compile(r'[ \t]{2,}')
DESCRIPTION_BOUNDARY = re.compile(r'[ \t]{2,}(?=\d)')
LETTER = re.compile(r'[^\W\d_]')

MAX_AMOUNT_COLUMNS = 4
MIN_ROW_LENGTH = 4

Span = Tuple[int, int]


def _unit_regex(token: str) -> str:
    """Unit token pattern; a unit may be glued to the preceding digits."""
    body = r'\s*'.join(re.escape(part) for part in token.split())
    return r'(?<![^\W\d_])' + body + r'(?!\w)'


def _overlaps(span: Span, others: List[Span]) -> bool:
    return any(span[0] < end and start < span[1] for start, end in others)


class LineItemParser:
    """
    Parses the line item table block row by row.

    Rows are independent: each one yields at most one LineItem, in table
    order. Header rows, blank rows and rows without a description are
    skipped.

    Attributes:
        amount_parser: AmountParser instance
        validator: CrossValidator instance

    Example:
        >>> parser = LineItemParser()
        >>> items = parser.parse_table("Consulting  10  150,00€  20%  300,00 €  1800,00 €")
        >>> items[0].quantity, items[0].unit_price, items[0].is_validated
        (Decimal('10'), Decimal('150.00'), True)
    """

    def __init__(self) -> None:
        """Compile the header and unit patterns."""
        self.amount_parser = AmountParser()
        self.validator = CrossValidator()
        self.header = re.compile(
            r'^[ \t]*' + compile_labels(get_labels('table_header')), re.IGNORECASE
        )
        self.units = sorted(
            (
                (re.compile(_unit_regex(token), re.IGNORECASE), canonical, len(token))
                for canonical, tokens in get_units().items()
                for token in tokens if token.strip()
            ),
            key=lambda entry: entry[2],
            reverse=True
        )

    def parse_table(self, table_block: Optional[str], warnings: Optional[List[str]] = None) -> List[LineItem]:
        """
        Parse every row of the table block.

        Args:
            table_block: Table block text (header line already removed).
            warnings: Optional list collecting row-level warnings.

        Returns:
            LineItems in row order (may be empty).
        """
        if not table_block:
            return []

        items = []
        for row in table_block.splitlines():
            item = self.parse_row(row, warnings)
            if item is not None:
                items.append(item)

        logger.debug(f"Parsed {len(items)} line item row(s)")
        return items

    def is_header(self, row: str) -> bool:
        """A header row starts with a column heading and holds no amount."""
        return bool(self.header.search(row)) and not AMOUNT.search(CURRENCY.sub('', row))

    def parse_row(self, row: str, warnings: Optional[List[str]] = None) -> Optional[LineItem]:
        """
        Parse one table row.

        Returns:
            LineItem, or None for header, blank and description-less rows.
        """
        if warnings is None:
            warnings = []

        row = row.strip()
        if len(row) < MIN_ROW_LENGTH or self.is_header(row):
            return None

        text = CURRENCY.sub('', row)
        amount_spans = [match.span() for match in AMOUNT.finditer(text)]

        boundary = len(text)
        gap = DESCRIPTION_BOUNDARY.search(text)
        if gap is not None:
            boundary = gap.start()
        if amount_spans:
            boundary = min(boundary, amount_spans[0][0])

        description, unit = self._split_description(text[:boundary])
        if description is None:
            logger.debug(f"Row discarded (no description): {row!r}")
            return None

        # AMOUNT matches only well-formed numbers
        amounts = [self.amount_parser.parse(text[start:end]) for start, end in amount_spans]
        if len(amounts) > MAX_AMOUNT_COLUMNS:
            warnings.append(
                f"Line '{description}': {len(amounts)} amount columns found, "
                f"only the rightmost {MAX_AMOUNT_COLUMNS} are used"
            )
            amounts = amounts[-MAX_AMOUNT_COLUMNS:]

        rate_outcome, rate_span = self.tax_rate(text, boundary)
        tax_rate = resolve(rate_outcome, warnings)
        if unit is None:
            unit = resolve(self.unit(text, boundary), warnings)
        quantity = resolve(
            self.quantity(text, boundary, amount_spans + ([rate_span] if rate_span else [])),
            warnings
        )

        unit_price, line_total, tax_amount, total_with_tax = self._assign_amounts(
            amounts, quantity, tax_rate
        )

        item = LineItem(
            description=description,
            quantity=quantity,
            unit=unit,
            unit_price=unit_price,
            tax_rate=tax_rate,
            total_before_tax=line_total,
            tax_amount=tax_amount,
            total_with_tax=total_with_tax,
        )
        return replace(item, validation=self._validate(item))

    # -------------------------------------------------------------------------
    # Rules
    # -------------------------------------------------------------------------

    def _split_description(self, head: str) -> Tuple[Optional[str], Optional[str]]:
        """
        Description text, plus a unit written as its own column inside it.

        Returns:
            (description, unit); description is None when it has no letter.
        """
        columns = [column for column in COLUMN_GAP.split(head.strip()) if column]
        unit = None
        while len(columns) > 1:
            canonical = self._unit_column(columns[-1])
            if canonical is None:
                break
            unit = unit or canonical
            columns.pop()

        description = ' '.join(' '.join(columns).split())
        if len(description) < 2 or not LETTER.search(description):
            return None, None
        return description, unit

    def _unit_column(self, column: str) -> Optional[str]:
        for pattern, canonical, _ in self.units:
            if pattern.fullmatch(column.strip()):
                return canonical
        return None

    def tax_rate(self, text: str, start: int) -> Tuple[Outcome, Optional[Span]]:
        """Percentage after the description, 0 to 100."""
        match = RATE.search(text, start)
        if match is None:
            return Absent('tax_rate'), None

        rate = self.amount_parser.parse_number(match.group(1))
        if not Decimal(0) <= rate <= Decimal(100):
            return Malformed('tax_rate', match.group(0), 'rate outside 0-100'), match.span()
        return Found('tax_rate', rate), match.span()

    def unit(self, text: str, start: int) -> Outcome:
        """Earliest unit token after the description, as a canonical name."""
        best = None
        for pattern, canonical, length in self.units:
            match = pattern.search(text, start)
            if match and (best is None or match.start() < best[0]):
                best = (match.start(), canonical)
        if best is None:
            return Absent('unit')
        return Found('unit', best[1])

    def quantity(self, text: str, start: int, excluded: List[Span]) -> Outcome:
        """First standalone number after the description that is not an amount or rate."""
        for match in NUMBER.finditer(text, start):
            if _overlaps(match.span(), excluded):
                continue
            return Found('quantity', self.amount_parser.parse_number(match.group(0)))
        return Absent('quantity')

    def _assign_amounts(
        self,
        amounts: List[Decimal],
        quantity: Optional[Decimal],
        tax_rate: Optional[Decimal]
    ) -> Tuple[Optional[Decimal], ...]:
        """
        Assign amounts right to left.

        Returns:
            (unit_price, total_before_tax, tax_amount, total_with_tax)
        """
        slots: List[Optional[Decimal]] = [None] * MAX_AMOUNT_COLUMNS
        for offset, amount in enumerate(reversed(amounts)):
            slots[MAX_AMOUNT_COLUMNS - 1 - offset] = amount
        unit_price, line_total, tax_amount, total_with_tax = slots

        if len(amounts) == 3 and self._is_unit_price(line_total, quantity, tax_rate, tax_amount, total_with_tax):
            unit_price, line_total = line_total, None

        return unit_price, line_total, tax_amount, total_with_tax

    def _is_unit_price(
        self,
        amount: Decimal,
        quantity: Optional[Decimal],
        tax_rate: Optional[Decimal],
        tax_amount: Decimal,
        total_with_tax: Decimal
    ) -> bool:
        """
        Decide whether the leftmost of three amounts is a unit price.

        It is kept as the line total unless the tax (from the rate, or
        from total minus tax) matches quantity x amount but not amount.
        """
        if quantity is None or quantity == 1:
            return False

        tolerance = self.validator.tolerance
        if tax_rate is not None:
            rate = tax_rate / Decimal(100)
            as_total = abs(amount * rate - tax_amount) <= tolerance
            as_price = abs(quantity * amount * rate - tax_amount) <= tolerance
        else:
            base = total_with_tax - tax_amount
            as_total = abs(amount - base) <= tolerance
            as_price = abs(quantity * amount - base) <= tolerance
        return as_price and not as_total

    def _validate(self, item: LineItem) -> ValidationOutcome:
        """Cross-validate a complete row, else flag it as partially extracted."""
        price = item.unit_price if item.unit_price is not None else item.total_before_tax
        if (
            item.quantity is not None and price is not None
            and item.tax_rate is not None and item.total_with_tax is not None
        ):
            if item.unit_price is not None:
                return self.validator.validate(
                    item.quantity, item.unit_price, item.tax_rate,
                    item.tax_amount, item.total_with_tax,
                    line_total=item.total_before_tax
                )
            # only the line total is known: it is the pre-tax base
            return self.validator.validate(
                Decimal(1), item.total_before_tax, item.tax_rate,
                item.tax_amount, item.total_with_tax
            )

        missing = [
            name for name, value in (
                ('quantity', item.quantity),
                ('price', price),
                ('tax rate', item.tax_rate),
                ('total with tax', item.total_with_tax),
            ) if value is None
        ]
        return ValidationWarning(
            f"Partially extracted line (missing {', '.join(missing)}), not validated"
        )


class MultilineMerger:
    """
    Folds description-continuation rows into the preceding line item.

    A row with no quantity, no unit price and no total with tax is a
    continuation. The first row has nothing to attach to and is kept as
    is, warning included.

    Example:
        >>> merger = MultilineMerger()
        >>> [item.description for item in merger.merge(items)]
        ['Consulting mission de cadrage']
    """

    @staticmethod
    def is_continuation(item: LineItem) -> bool:
        return item.quantity is None and item.unit_price is None and item.total_with_tax is None

    def merge(self, items: List[LineItem]) -> List[LineItem]:
        """
        Merge continuation rows.

        Args:
            items: Parsed line items in table order.

        Returns:
            New list; no continuation item appears after the first position.
        """
        merged: List[LineItem] = []
        for item in items:
            if merged and self.is_continuation(item):
                previous = merged[-1]
                merged[-1] = replace(
                    previous, description=f"{previous.description} {item.description}"
                )
                continue
            merged.append(item)

        if len(merged) != len(items):
            logger.debug(f"Merged {len(items) - len(merged)} continuation row(s)")
        return merged
