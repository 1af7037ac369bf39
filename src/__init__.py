"""
Invoice Field Extraction System - Source Package.

This package contains all core modules of the rule-based invoice field
extraction system. Each module has a single responsibility.

Modules:
    - input_handler: Text dump and image input, image pre-processing
    - ocr_engine: Text recognition (Tesseract)
    - extraction: Segmentation, parties, metadata, totals, line items
    - postprocessor: Noise normalization, amounts, validation, review
    - utils: Logging, exceptions, helpers

Architecture:
    Input -> Pre-processing -> OCR -> Extraction -> Review -> InvoiceResult
"""

__version__ = "1.0.0"
__author__ = "ML Engineering Team"

__all__ = [
    'input_handler',
    'ocr_engine',
    'extraction',
    'postprocessor',
    'utils'
]
