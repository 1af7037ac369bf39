"""
Main Post-Processor Module.

This module provides the PostProcessor class that reviews the assembled
stage outputs of one invoice and turns every low-confidence signal into a
warning string.

Operations:
    - Flag low OCR confidence
    - Surface per-line validation warnings
    - Check the due date against the invoicing date
    - Check the headline totals against each other
    - Log a review summary

Author: ML Engineering Team
"""

from typing import Any, List, Optional, Sequence

from config import get_config
from src.utils.logger import get_logger
from .validators import DateValidator, TotalsValidator, ValidationWarning

# Initialize module logger
logger = get_logger(__name__)


class PostProcessor:
    """
    Result-level reviewer for invoice extraction output.

    The reviewer never changes extracted values; it only reports. Its
    warnings are appended after the warnings raised by the individual
    stages.

    Attributes:
        confidence_threshold: OCR confidence below which a warning is raised
        date_validator: DateValidator instance
        totals_validator: TotalsValidator instance

    Example:
        >>> processor = PostProcessor()
        >>> processor.review(confidence=55.0, line_items=[], totals=totals)
        ['Low OCR confidence (55.0%) - results should be checked manually']
    """

    def __init__(self) -> None:
        """Initialize the post-processor with all sub-components."""
        self.confidence_threshold = float(
            get_config("validation.confidence_threshold", 70)
        )
        self.date_validator = DateValidator()
        self.totals_validator = TotalsValidator()

        logger.debug(
            f"PostProcessor initialized (confidence threshold={self.confidence_threshold})"
        )

    def review(
        self,
        confidence: float,
        line_items: Sequence[Any] = (),
        invoicing_date: Optional[str] = None,
        due_date: Optional[str] = None,
        totals: Any = None
    ) -> List[str]:
        """
        Review the stage outputs of one invoice.

        Args:
            confidence: OCR confidence (0-100).
            line_items: Merged and validated line items.
            invoicing_date: Invoicing date as written, if found.
            due_date: Due date as written, if found.
            totals: Headline totals (object with ht, tva, ttc), if any.

        Returns:
            Ordered list of warning strings.
        """
        warnings: List[str] = []

        if confidence < self.confidence_threshold:
            warnings.append(
                f"Low OCR confidence ({confidence}%) - results should be checked manually"
            )

        for index, item in enumerate(line_items, start=1):
            if isinstance(item.validation, ValidationWarning):
                warnings.append(
                    f"Line {index} ({item.description}): {item.validation.message}"
                )

        if invoicing_date and due_date:
            valid, message = self.date_validator.is_due_after_invoice(invoicing_date, due_date)
            if not valid:
                warnings.append(f"{message} ({due_date} < {invoicing_date})")

        if totals is not None:
            valid, message = self.totals_validator.validate(totals.ht, totals.tva, totals.ttc)
            if not valid:
                warnings.append(message)

        self._log_review_summary(confidence, line_items, warnings)
        return warnings

    def _log_review_summary(
        self,
        confidence: float,
        line_items: Sequence[Any],
        warnings: List[str]
    ) -> None:
        """Log a summary of the review."""
        validated = sum(
            1 for item in line_items if not isinstance(item.validation, ValidationWarning)
        )
        logger.debug(
            f"Review: confidence={confidence}, "
            f"lines validated={validated}/{len(line_items)}, "
            f"warnings={len(warnings)}"
        )
