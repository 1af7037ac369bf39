"""
OCR Engine Module for Invoice Extraction System.

This module provides OCR functionality including:
    - Text recognition from pre-processed invoice images
    - Document-level confidence from word confidences

Supported backends:
    - Tesseract (pytesseract)

Author: ML Engineering Team
"""

from .engine import OCREngine
from .tesseract_backend import TesseractBackend

__all__ = ['OCREngine', 'TesseractBackend']
