"""
Extraction Module for Invoice Extraction System.

This module provides the rule-based field extraction pipeline:
    - Block segmentation on anchor labels
    - Party (vendor / client) address extraction
    - Invoice metadata and headline totals
    - Line item parsing and continuation merging

Author: ML Engineering Team
"""

from .extraction_result import (
    Address,
    InvoiceMetadata,
    InvoiceResult,
    LineItem,
    RawDocument,
    ResultMeta,
    Totals,
)
from .outcome import Absent, Found, Malformed, resolve
from .segmenter import BlockSegmenter
from .party import PartyExtractor
from .metadata import MetadataExtractor
from .totals import TotalsExtractor
from .line_items import LineItemParser, MultilineMerger
from .extractor import InvoiceExtractor

__all__ = [
    'InvoiceExtractor',
    'BlockSegmenter',
    'PartyExtractor',
    'MetadataExtractor',
    'TotalsExtractor',
    'LineItemParser',
    'MultilineMerger',
    'Address',
    'InvoiceMetadata',
    'InvoiceResult',
    'LineItem',
    'RawDocument',
    'ResultMeta',
    'Totals',
    'Absent',
    'Found',
    'Malformed',
    'resolve'
]
