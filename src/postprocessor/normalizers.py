"""
Data Normalizers Module.

This module provides normalization functions for:
    - OCR noise (recurring character confusions, whitespace structure)
    - Amount strings (locale-aware numeric conversion)
    - Date strings (day-first parsing for ordering checks)

Author: ML Engineering Team
"""

import re
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, Optional, Pattern, Tuple

from dateutil import parser as date_parser

from config import get_config
from src.utils.exceptions import MalformedAmountError
from src.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


class NoiseNormalizer:
    """
    Rewrites recurring OCR character confusions in invoice text.

    Rules run in the order listed in RULES; later rules rely on earlier
    ones (line endings are unified before whitespace runs are measured,
    table pipes are turned into column gaps before single pipes become
    letters). The full pass repeats until the text stops changing, so
    normalize() is idempotent.

    Whitespace structure is significant downstream: a run of exactly two
    spaces marks a column boundary, so longer runs are collapsed to two
    spaces and never to one.

    Example:
        >>> normalizer = NoiseNormalizer()
        >>> normalizer.normalize("Total TTC :   1 800 , 5C €\\r\\n")
        'Total TTC :  1 800,50 €'
    """

    RULES: List[Tuple[str, str, str, int]] = [
        # (name, pattern, replacement, flags)
        ('line_endings', r'\r\n?|\f', '\n', 0),
        ('hard_spaces', r'[\u00a0\u2007\u202f]', ' ', 0),
        ('tabs', r'[ ]*\t[ \t]*', '  ', 0),
        ('pipe_columns', r'[ ]*(?<!\S)\|(?!\S)[ ]*', '  ', 0),
        ('pipe_letter', r'\|', 'I', 0),
        ('exclamation', r'!', 'i', 0),
        ('zero_after_digit', r'(?<=\d)[CO]\b', '0', 0),
        ('zero_before_digit', r'\b[CO](?=\d)', '0', 0),
        ('zero_isolated', r'\b[CO]\b(?=[ ]?\d)', '0', 0),
        ('one_isolated', r'\b[lI]\b(?=[ ]?\d)', '1', 0),
        ('nine_isolated', r'\bq\b(?=[ ]?\d)', '9', 0),
        ('five_isolated', r'\bë\b', '5', 0),
        ('decimal_comma', r'(?<=\d)[ ]*,[ ]*(?=\d{2}\b)', ',', 0),
        ('line_edges', r'^[ ]+|[ ]+$', '', re.MULTILINE),
        ('column_runs', r'[ ]{3,}', '  ', 0),
        ('blank_runs', r'\n{3,}', '\n\n', 0),
    ]

    def __init__(self) -> None:
        """Compile the substitution rules."""
        self._rules: List[Tuple[str, Pattern, str]] = [
            (name, re.compile(pattern, flags), replacement)
            for name, pattern, replacement, flags in self.RULES
        ]

    def normalize(self, text: str) -> str:
        """
        Apply every rule until the text is stable.

        Args:
            text: Raw OCR text.

        Returns:
            Normalized text (trimmed, LF line endings).
        """
        if not text:
            return ''

        passes = 0
        current = text
        while True:
            passes += 1
            updated = self._apply_rules(current)
            if updated == current:
                break
            current = updated

        logger.debug(f"Noise normalization stable after {passes} pass(es)")
        return current

    def _apply_rules(self, text: str) -> str:
        """Run one ordered pass of all rules."""
        for _name, pattern, replacement in self._rules:
            text = pattern.sub(replacement, text)
        return text.strip()


class AmountParser:
    """
    Converts locale-formatted numeric strings to Decimal.

    Accepts space (or non-breaking space) thousands separators, a decimal
    comma or point, and a trailing or leading currency symbol. When both
    ``.`` and ``,`` occur, the rightmost one is the decimal mark and the
    other is a thousands separator.

    Example:
        >>> parser = AmountParser()
        >>> parser.parse("1 350,00 €")
        Decimal('1350.00')
        >>> parser.parse("1.234,5")
        Decimal('1234.50')
        >>> parser.parse("abc")
        Traceback (most recent call last):
        ...
        src.utils.exceptions.MalformedAmountError: Malformed amount: 'abc' ...
    """

    CURRENCY_PATTERN = re.compile(r'€|\bEUR\b|\$|\bUSD\b|£|\bGBP\b', re.IGNORECASE)
    NUMBER_PATTERN = re.compile(r'^[+-]?\d+(?:\.\d+)?$')

    def __init__(self, places: int = 2) -> None:
        self.quantum = Decimal(1).scaleb(-places)

    def parse(self, raw: str) -> Decimal:
        """
        Parse a monetary amount, quantized to the configured places.

        Args:
            raw: Amount text, e.g. "1 234,56".

        Returns:
            Decimal value with two fractional digits.

        Raises:
            MalformedAmountError: If the text is not a number.
        """
        return self.parse_number(raw).quantize(self.quantum, rounding=ROUND_HALF_UP)

    def parse_number(self, raw: str) -> Decimal:
        """
        Parse a number without quantizing it (quantities, rates).

        Raises:
            MalformedAmountError: If the text is not a number.
        """
        if raw is None:
            raise MalformedAmountError('', 'empty value')

        cleaned = self.CURRENCY_PATTERN.sub('', str(raw))
        cleaned = re.sub(r'\s+', '', cleaned)
        if not cleaned:
            raise MalformedAmountError(str(raw), 'empty value')

        if ',' in cleaned and '.' in cleaned:
            decimal_mark = cleaned[max(cleaned.rfind(','), cleaned.rfind('.'))]
            thousands_mark = '.' if decimal_mark == ',' else ','
            cleaned = cleaned.replace(thousands_mark, '')
        cleaned = cleaned.replace(',', '.')

        if not self.NUMBER_PATTERN.match(cleaned):
            raise MalformedAmountError(str(raw), 'not a number')

        try:
            return Decimal(cleaned)
        except InvalidOperation as e:
            raise MalformedAmountError(str(raw), str(e))

    def try_parse(self, raw: str) -> Optional[Decimal]:
        """Parse an amount, returning None instead of raising."""
        try:
            return self.parse(raw)
        except MalformedAmountError as e:
            logger.debug(str(e))
            return None


class DateNormalizer:
    """
    Normalizes date strings to a standard format.

    Invoices handled here are mostly French, so numeric dates are read
    day-first ("05/03/2024" is 5 March). Used for ordering checks only:
    extracted dates are reported as written in the document.

    Attributes:
        output_format: Target date format string
        input_formats: List of recognized input format strings
        dayfirst: Day-first hint passed to dateutil

    Example:
        >>> normalizer = DateNormalizer()
        >>> normalizer.normalize("05/03/2024")
        "2024-03-05"
        >>> normalizer.normalize("2024-03-05")
        "2024-03-05"
    """

    def __init__(self) -> None:
        """Initialize the date normalizer with configuration."""
        self.output_format = get_config(
            "postprocessing.date.output_format",
            "%Y-%m-%d"
        )
        self.input_formats = get_config(
            "postprocessing.date.input_formats",
            [
                "%d/%m/%Y",
                "%d/%m/%y",
                "%d-%m-%Y",
                "%d.%m.%Y",
                "%d.%m.%y",
                "%Y-%m-%d",
            ]
        )
        self.dayfirst = get_config("postprocessing.date.dayfirst", True)

        logger.debug(f"DateNormalizer initialized (output: {self.output_format})")

    def parse(self, date_str: str) -> Optional[datetime]:
        """
        Parse a date string.

        Args:
            date_str: Input date string.

        Returns:
            Parsed datetime, or None if parsing fails.
        """
        if not date_str:
            return None

        date_str = ' '.join(date_str.split())

        for fmt in self.input_formats:
            try:
                return datetime.strptime(date_str, fmt)
            except ValueError:
                continue

        try:
            return date_parser.parse(date_str, dayfirst=self.dayfirst)
        except (ValueError, OverflowError):
            logger.debug(f"Could not parse date: {date_str}")
            return None

    def normalize(self, date_str: str) -> Optional[str]:
        """
        Normalize a date string to the configured output format.

        Returns:
            Normalized date string, or None if parsing fails.
        """
        parsed = self.parse(date_str)
        if parsed is None:
            return None
        return parsed.strftime(self.output_format)
