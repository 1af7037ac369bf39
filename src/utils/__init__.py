"""
Utility Module for Invoice Extraction System.

This module provides common utilities used across all other modules:
    - Logging configuration and per-document log context
    - Exception hierarchy
    - File operations
"""

from .logger import document_context, setup_logger, setup_logger_from_config, get_logger
from .helpers import ensure_directory, get_file_extension, safe_filename

__all__ = [
    'document_context',
    'setup_logger',
    'setup_logger_from_config',
    'get_logger',
    'ensure_directory',
    'get_file_extension',
    'safe_filename'
]
