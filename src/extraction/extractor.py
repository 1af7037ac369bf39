"""
Invoice Extractor Module.

This module provides the main InvoiceExtractor class that composes the
rule-based extraction stages into one pipeline:

    NoiseNormalizer -> BlockSegmenter -> PartyExtractor (vendor, client)
                    -> MetadataExtractor
                    -> TotalsExtractor
                    -> LineItemParser -> MultilineMerger (CrossValidator)
                    -> PostProcessor review

Approach:
    Deterministic heuristics over the linear OCR text and its whitespace
    structure. No layout model and no bounding boxes. The output is
    advisory: every doubt becomes a warning on the result.

Author: ML Engineering Team
"""

import time
from typing import Any, Callable, List, Optional

from src.postprocessor.normalizers import NoiseNormalizer
from src.postprocessor.processor import PostProcessor
from src.utils.exceptions import EmptyDocumentError, InvalidConfidenceError
from src.utils.logger import get_logger
from .extraction_result import (
    InvoiceMetadata,
    InvoiceResult,
    RawDocument,
    ResultMeta,
    Totals,
)
from .line_items import LineItemParser, MultilineMerger
from .metadata import MetadataExtractor
from .outcome import resolve
from .party import PartyExtractor
from .segmenter import BlockSegmenter
from .totals import TotalsExtractor

# Initialize module logger
logger = get_logger(__name__)


class InvoiceExtractor:
    """
    Rule-based invoice field extractor.

    Stage objects only hold configuration read at construction, so one
    extractor can serve any number of documents, concurrently included.

    Every stage runs behind a guard: an unexpected error inside one stage
    is logged, recorded as a warning and replaced by that stage's empty
    value, so a non-empty document always yields an InvoiceResult.

    Example:
        >>> extractor = InvoiceExtractor()
        >>> result = extractor.extract(ocr_text, confidence=91.5)
        >>> print(result.invoice_number)
        >>> print(result.warnings)
    """

    def __init__(self) -> None:
        """Initialize all pipeline stages."""
        self.normalizer = NoiseNormalizer()
        self.segmenter = BlockSegmenter()
        self.party_extractor = PartyExtractor()
        self.metadata_extractor = MetadataExtractor()
        self.totals_extractor = TotalsExtractor()
        self.line_item_parser = LineItemParser()
        self.merger = MultilineMerger()
        self.postprocessor = PostProcessor()

        logger.debug("InvoiceExtractor initialized")

    def extract_document(self, document: RawDocument) -> InvoiceResult:
        """Extract fields from a RawDocument returned by the OCR collaborator."""
        return self.extract(document.text, document.confidence)

    def extract(self, text: Optional[str], confidence: float = 100.0) -> InvoiceResult:
        """
        Extract all invoice fields from OCR text.

        Args:
            text: Raw OCR text, line breaks and whitespace runs preserved.
            confidence: OCR engine's accuracy estimate (0-100).

        Returns:
            InvoiceResult with explicit None for every field not found.

        Raises:
            EmptyDocumentError: If the text is None, empty or blank.
            InvalidConfidenceError: If confidence is not a number in [0, 100].
        """
        if text is None or not str(text).strip():
            raise EmptyDocumentError()
        confidence = self._check_confidence(confidence)

        start_time = time.time()
        warnings: List[str] = []

        normalized = self._run_stage(
            'normalization', lambda: self.normalizer.normalize(text), str(text).strip(), warnings
        )

        vendor = self._run_stage(
            'vendor',
            lambda: self.party_extractor.extract(
                resolve(self.segmenter.vendor_block(normalized), warnings), warnings
            ),
            None, warnings
        )
        client = self._run_stage(
            'client',
            lambda: self.party_extractor.extract(
                resolve(self.segmenter.client_block(normalized), warnings), warnings
            ),
            None, warnings
        )
        notes = self._run_stage(
            'notes', lambda: self.segmenter.notes(normalized), None, warnings
        )
        metadata = self._run_stage(
            'metadata',
            lambda: self.metadata_extractor.extract(normalized, warnings),
            InvoiceMetadata(), warnings
        )
        totals = self._run_stage(
            'totals',
            lambda: self.totals_extractor.extract(normalized, warnings),
            Totals(), warnings
        )
        line_items = self._run_stage(
            'line items',
            lambda: self.merger.merge(
                self.line_item_parser.parse_table(
                    resolve(self.segmenter.table_block(normalized), warnings), warnings
                )
            ),
            [], warnings
        )

        review = self._run_stage(
            'review',
            lambda: self.postprocessor.review(
                confidence=confidence,
                line_items=line_items,
                invoicing_date=metadata.invoicing_date,
                due_date=metadata.due_date,
                totals=totals,
            ),
            [], warnings
        )
        warnings.extend(review)

        result = InvoiceResult(
            vendor=vendor,
            client=client,
            invoice_number=metadata.invoice_number,
            invoicing_date=metadata.invoicing_date,
            due_date=metadata.due_date,
            payment_terms=metadata.payment_terms,
            order_reference=metadata.order_reference,
            notes=notes,
            line_items=tuple(line_items),
            totals=totals,
            meta=ResultMeta(
                confidence=confidence,
                normalized_text=normalized,
                warnings=tuple(warnings),
            ),
        )

        logger.info(
            f"Extraction complete: {len(result.line_items)} line item(s), "
            f"{len(result.missing_fields)} missing field(s), "
            f"{len(warnings)} warning(s), "
            f"time: {time.time() - start_time:.3f}s"
        )
        return result

    @staticmethod
    def _check_confidence(confidence: Any) -> float:
        """Validate the OCR confidence."""
        if isinstance(confidence, bool):
            raise InvalidConfidenceError(confidence)
        try:
            value = float(confidence)
        except (TypeError, ValueError):
            raise InvalidConfidenceError(confidence)
        if not 0 <= value <= 100:
            raise InvalidConfidenceError(confidence)
        return value

    @staticmethod
    def _run_stage(name: str, stage: Callable[[], Any], empty: Any, warnings: List[str]) -> Any:
        """
        Run one stage, replacing an unexpected failure by its empty value.

        Args:
            name: Stage name used in logs and warnings.
            stage: Zero-argument callable running the stage.
            empty: Value used when the stage fails.
            warnings: Warning list of the current document.
        """
        try:
            return stage()
        except Exception as e:
            logger.error(f"Stage '{name}' failed: {e}")
            warnings.append(f"Stage '{name}' failed: {e}")
            return empty
