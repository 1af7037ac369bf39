"""
Input Handler Module for Invoice Extraction System.

This module provides functionality for:
    - Detecting file types (OCR text dump vs image)
    - Loading and validating input files
    - Normalizing images for OCR processing

Supported formats:
    - Text: TXT (raw OCR output)
    - Images: JPG, JPEG, PNG, TIFF, BMP

Author: ML Engineering Team
"""

from .handler import InputHandler
from .image_processor import ImageProcessor

__all__ = ['InputHandler', 'ImageProcessor']
