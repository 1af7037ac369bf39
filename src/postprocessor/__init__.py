"""
Post-Processing Module for Invoice Extraction System.

This module provides functionality for:
    - OCR noise normalization
    - Amount parsing and date normalization
    - Line item cross-validation
    - Result-level review (confidence, dates, totals)

Author: ML Engineering Team
"""

from .processor import PostProcessor
from .validators import (
    CrossValidator,
    DateValidator,
    TotalsValidator,
    Validated,
    ValidationWarning,
)
from .normalizers import NoiseNormalizer, AmountParser, DateNormalizer

__all__ = [
    'PostProcessor',
    'CrossValidator',
    'DateValidator',
    'TotalsValidator',
    'Validated',
    'ValidationWarning',
    'NoiseNormalizer',
    'AmountParser',
    'DateNormalizer'
]
