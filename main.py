#!/usr/bin/env python3
"""
Invoice Field Extraction System - Main Entry Point.

This is the main entry point for the invoice extraction system.
It provides both a command-line interface and programmatic access
to the extraction pipeline.

Usage:
    Command Line:
        python main.py --input scan.txt --confidence 87.5
        python main.py --input invoice.png --output result.json
        python main.py --input ./invoices/ --output ./results/

    Python:
        from main import run_extraction
        results = run_extraction("scan.txt", confidence=87.5)

Author: ML Engineering Team
Version: 1.0.0
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

# Import project modules
from config import ConfigurationManager, get_config
from src.utils.exceptions import InvoiceExtractionError
from src.utils.helpers import ensure_directory, safe_filename
from src.utils.logger import document_context, get_logger, setup_logger_from_config


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Invoice Field Extraction System",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Process an OCR text dump:
        python main.py --input scan.txt --confidence 87.5

    Process an invoice image (requires Tesseract):
        python main.py --input invoice.png --output result.json

    Process directory:
        python main.py --input ./invoices/ --output ./results/
        """
    )

    # Input/Output arguments
    parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="Input file (.txt OCR dump or image) or directory"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output .json file, or directory (default: paths.output_dir)"
    )

    # Processing options
    parser.add_argument(
        "--confidence",
        type=float,
        default=None,
        help="OCR confidence (0-100) for .txt inputs"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="YAML file merged over config/settings.yaml "
             "(default: $INVOICE_EXTRACTOR_CONFIG)"
    )

    # Logging options
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log errors"
    )

    return parser.parse_args(argv)


def initialize_system(args: argparse.Namespace) -> ConfigurationManager:
    """
    Initialize the extraction system with configuration and logging.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Initialized configuration manager.
    """
    if args.config:
        ConfigurationManager.reset()
    config = ConfigurationManager(args.config)

    level = None
    if args.debug:
        level = "DEBUG"
    elif args.quiet:
        level = "ERROR"
    logger = setup_logger_from_config(level)

    logger.info("=" * 60)
    logger.info("INVOICE FIELD EXTRACTION SYSTEM")
    logger.info("=" * 60)
    logger.info(f"Version: {config.get('project.version', '1.0.0')}")
    logger.info(f"Input: {args.input}")
    logger.info(f"Output: {args.output or config.get('paths.output_dir', 'output')}")

    return config


def resolve_output_path(input_file: Path, output: Optional[str], single: bool) -> Path:
    """
    Where to write the JSON result of one input file.

    A single input with an output ending in .json is written there;
    otherwise the output is a directory holding one <stem>.json per input.
    """
    if output is None:
        output = get_config("paths.output_dir", "output")

    output_path = Path(output)
    if single and output_path.suffix.lower() == '.json':
        ensure_directory(output_path.parent)
        return output_path

    ensure_directory(output_path)
    return output_path / f"{safe_filename(input_file.stem)}.json"


def write_result(document_dict: Dict[str, Any], target: Path) -> None:
    """Write one extraction result as UTF-8 JSON (accents kept as-is)."""
    with open(target, 'w', encoding='utf-8') as f:
        json.dump(
            document_dict, f,
            indent=get_config("output.json_indent", 2),
            ensure_ascii=False
        )


def process_file(file_path: Path, input_handler, extractor, confidence: Optional[float]) -> Dict[str, Any]:
    """
    Load one input file and extract its fields.

    Result warnings are logged; they never stop the run.

    Raises:
        InvoiceExtractionError: If the file cannot be loaded or is empty.
    """
    logger = get_logger(__name__)

    document = input_handler.load(file_path, confidence)
    result = extractor.extract_document(document)

    for warning in result.warnings:
        logger.warning(warning)
    logger.info(
        f"Invoice #{result.invoice_number or 'N/A'}, "
        f"{len(result.line_items)} line item(s), TTC: {result.totals.ttc}"
    )

    document_dict = result.to_dict()
    document_dict['source_file'] = str(file_path)
    return document_dict


def run_extraction(
    input_path: str,
    output_path: Optional[str] = None,
    confidence: Optional[float] = None,
    write_output: bool = True
) -> List[Dict[str, Any]]:
    """
    Run the invoice extraction pipeline over a file or a directory.

    In directory mode a file that fails is logged and skipped; a single
    input file that fails raises.

    Args:
        input_path: Path to input file or directory.
        output_path: Output .json file or directory.
        confidence: OCR confidence used for .txt inputs.
        write_output: Whether to write JSON files.

    Returns:
        One result dict per processed file.

    Raises:
        InvoiceExtractionError: If a single input file cannot be processed.

    Example:
        >>> results = run_extraction("scans/", "outputs/")
        >>> [r['invoice_number'] for r in results]
        ['INV-2024-001', 'FA-0042']
    """
    logger = get_logger(__name__)

    from src.input_handler import InputHandler
    from src.extraction import InvoiceExtractor

    input_handler = InputHandler()
    extractor = InvoiceExtractor()

    input_p = Path(input_path)
    single = not input_p.is_dir()
    files_to_process = [input_p] if single else input_handler.collect_files(input_p)

    logger.info(f"Processing {len(files_to_process)} file(s)...")

    results = []
    failures = []
    for file_path in files_to_process:
        with document_context(file_path.name):
            try:
                document_dict = process_file(file_path, input_handler, extractor, confidence)
            except InvoiceExtractionError as e:
                if single:
                    raise
                logger.error(f"Skipped: {e}")
                failures.append(file_path.name)
                continue

            results.append(document_dict)
            if write_output:
                target = resolve_output_path(file_path, output_path, single)
                write_result(document_dict, target)
                logger.info(f"Written: {target}")

    if failures:
        logger.warning(f"{len(failures)} file(s) could not be processed: {', '.join(failures)}")

    return results


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function - entry point for command-line execution.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    try:
        args = parse_arguments(argv)
        initialize_system(args)
        logger = get_logger(__name__)

        results = run_extraction(
            input_path=args.input,
            output_path=args.output,
            confidence=args.confidence
        )

        if not results:
            logger.error("No files processed")
            return 1

        logger.info("=" * 60)
        logger.info(f"Extraction complete. Processed {len(results)} file(s).")
        logger.info("=" * 60)

        return 0

    except InvoiceExtractionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
