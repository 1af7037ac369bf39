"""
Totals Extractor Module.

This module extracts the three headline amounts of an invoice:
    - HT  (total before tax)
    - TVA (tax amount)
    - TTC (total including tax, with synonyms like "Net à payer")

Author: ML Engineering Team
"""

import re
from typing import List, Optional

from src.postprocessor.normalizers import AmountParser
from src.utils.logger import get_logger
from .extraction_result import Totals
from .labels import CURRENCY_SYMBOLS, compile_labels, get_labels
from .outcome import Absent, Found, Malformed, Outcome, resolve

# Initialize module logger
logger = get_logger(__name__)

# digits, optional single-space thousands groups, decimal mark, two digits
AMOUNT = r'\d+(?: \d{3})*[.,]\d{2}(?!\d)'
SEPARATOR = r'[ \t]*[:|]?[ \t]*'
RATE = r'(?:\(?\d{1,2}(?:[.,]\d+)?[ \t]*%\)?' + SEPARATOR + ')?'
CURRENCY = '(?:' + '|'.join(re.escape(symbol) for symbol in CURRENCY_SYMBOLS) + r')?[ \t]*'
# totals labels open their line; table rows may carry "TVA 20%" mid-line
LINE_START = r'^[ \t]*'


class TotalsExtractor:
    """
    Extracts the HT, TVA and TTC totals.

    Pattern: label at the start of a line, optional ``:``, optional rate
    ("20 %", "(20%)"), optional currency, amount. Label and amount must be
    on the same line; on several matches the first one wins.

    Example:
        >>> extractor = TotalsExtractor()
        >>> extractor.extract("Total HT : 1 500,00 €\\nTVA 20% : 300,00 €\\nTotal TTC : 1 800,00 €")
        Totals(ht=Decimal('1500.00'), tva=Decimal('300.00'), ttc=Decimal('1800.00'))
    """

    def __init__(self) -> None:
        """Compile one pattern per total."""
        self.amount_parser = AmountParser()
        self.patterns = {
            name: re.compile(
                LINE_START + compile_labels(get_labels(f'total_{name}'))
                + SEPARATOR + RATE + CURRENCY + '(' + AMOUNT + ')',
                re.IGNORECASE | re.MULTILINE
            )
            for name in ('ht', 'tva', 'ttc')
        }

    def extract(self, text: str, warnings: Optional[List[str]] = None) -> Totals:
        """
        Extract the headline totals.

        Args:
            text: Full normalized invoice text.
            warnings: Optional list collecting warnings.

        Returns:
            Totals with each amount independently optional.
        """
        totals = Totals(
            ht=resolve(self.total(text, 'ht'), warnings),
            tva=resolve(self.total(text, 'tva'), warnings),
            ttc=resolve(self.total(text, 'ttc'), warnings),
        )
        logger.debug(f"Totals extracted: {totals}")
        return totals

    def total(self, text: str, name: str) -> Outcome:
        """Apply the rule for one total ("ht", "tva" or "ttc")."""
        rule = f'total_{name}'
        match = self.patterns[name].search(text)
        if match is None:
            return Absent(rule)

        amount = self.amount_parser.try_parse(match.group(1))
        if amount is None:
            return Malformed(rule, match.group(1), 'not a number')
        return Found(rule, amount)
