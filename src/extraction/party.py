"""
Party Extractor Module.

This module parses a vendor or client block into an Address:
    - postal code and city ("75001 Paris")
    - email address
    - phone number (French national format, digits only in output)
    - tax registration id (SIRET / SIREN, 13-15 digits)
    - display name and street line

Author: ML Engineering Team
"""

import re
from typing import List, Optional

from src.utils.logger import get_logger
from .extraction_result import Address
from .labels import compile_labels, get_labels
from .outcome import Absent, Found, Malformed, Outcome, resolve

# Initialize module logger
logger = get_logger(__name__)


class PartyExtractor:
    """
    Extracts a structured Address from one segmented block.

    Every field is found by a named rule returning a tagged outcome; a
    Malformed outcome (e.g. a SIRET with the wrong digit count) leaves the
    field empty and adds a warning.

    Example:
        >>> extractor = PartyExtractor()
        >>> address = extractor.extract("Acme Corp\\n12 Rue de Paris\\n75001 Paris")
        >>> address.city
        'Paris'
    """

    POSTAL_CITY = re.compile(r"(?<!\d)(\d{5})(?!\d)[ \t]+([A-ZÀ-Ü][A-Za-zÀ-ÿ' -]*[A-Za-zÀ-ÿ])")
    EMAIL = re.compile(r'[\w.+-]+@[\w.-]+\.[a-z]{2,}', re.IGNORECASE)
    PHONE = re.compile(r'(?<!\d)((?:\+33[ .-]?|0)[1-9](?:[ .-]?\d{2}){4})(?!\d)')
    LIST_NUMBER = re.compile(r'^\d+\.\s*')
    TAX_ID_DIGITS = (13, 15)

    def __init__(self) -> None:
        """Compile the label-driven patterns."""
        self.tax_label = re.compile(compile_labels(get_labels('tax_id')), re.IGNORECASE)
        self.tax_id = re.compile(
            compile_labels(get_labels('tax_id')) + r'[ \t]*(?:n°|no|number)?[ \t]*[:#]?[ \t]*(\d[\d ]*\d)',
            re.IGNORECASE
        )
        self.street = re.compile(
            r'^\d+[a-z]?\b[,\s]+.*?\b' + compile_labels(get_labels('street_type')),
            re.IGNORECASE
        )

    def extract(self, block: Optional[str], warnings: Optional[List[str]] = None) -> Optional[Address]:
        """
        Parse one block into an Address.

        Args:
            block: Segmented block text, or None when the section is absent.
            warnings: Optional list collecting warnings.

        Returns:
            Address, or None when the block is missing or empty.
        """
        if not block:
            return None

        lines = [line.strip() for line in block.splitlines() if line.strip()]
        if not lines:
            return None

        postal = self.postal_city(lines)
        postal_code, city = resolve(postal, warnings) or (None, None)

        address = Address(
            name=resolve(self.name(lines), warnings),
            street=resolve(self.street_line(lines), warnings),
            postal_code=postal_code,
            city=city,
            email=resolve(self.email(lines), warnings),
            phone=resolve(self.phone(lines), warnings),
            tax_id=resolve(self.tax_registration(lines), warnings),
        )
        logger.debug(f"Party extracted: {address}")
        return address

    # -------------------------------------------------------------------------
    # Rules
    # -------------------------------------------------------------------------

    def postal_city(self, lines: List[str]) -> Outcome:
        """5-digit postal code followed by a capitalised locality."""
        for line in lines:
            if self.tax_label.search(line):
                continue
            match = self.POSTAL_CITY.search(line)
            if match:
                return Found('postal_city', (match.group(1), match.group(2).strip()))
        return Absent('postal_city')

    def email(self, lines: List[str]) -> Outcome:
        for line in lines:
            match = self.EMAIL.search(line)
            if match:
                return Found('email', match.group(0))
        return Absent('email')

    def phone(self, lines: List[str]) -> Outcome:
        """National format phone number, separators removed."""
        for line in lines:
            if self.tax_label.search(line):
                continue
            match = self.PHONE.search(line)
            if match:
                return Found('phone', re.sub(r'[ .-]', '', match.group(1)))
        return Absent('phone')

    def tax_registration(self, lines: List[str]) -> Outcome:
        """Labelled SIRET/SIREN-like id of 13 to 15 digits."""
        for line in lines:
            match = self.tax_id.search(line)
            if match:
                raw = match.group(1)
                digits = raw.replace(' ', '')
                low, high = self.TAX_ID_DIGITS
                if low <= len(digits) <= high:
                    return Found('tax_id', digits)
                return Malformed('tax_id', raw, f"expected {low}-{high} digits, got {len(digits)}")
        return Absent('tax_id')

    def name(self, lines: List[str]) -> Outcome:
        """First line that is not a postal code, email or tax id line."""
        for line in lines:
            if self.POSTAL_CITY.search(line) or '@' in line or self.tax_label.search(line):
                continue
            name = self.LIST_NUMBER.sub('', line).strip()
            if name:
                return Found('name', name)
        return Absent('name')

    def street_line(self, lines: List[str]) -> Outcome:
        """Number + street-type line, else the second raw line."""
        for line in lines:
            if self.street.search(line):
                return Found('street', line)
        if len(lines) > 1:
            return Found('street_fallback', lines[1])
        return Absent('street')
