"""
Block Segmenter Module.

This module splits normalized invoice text into named sections using
anchor labels:
    - vendor block: from a vendor label up to a client label
    - client block: from a client label up to a date/number/reference label
    - table block: from the table header up to the HT-total label
    - notes block: from an "additional information" label up to a blank
      line or a trailing label

Label sets come from src/extraction/labels.py and can be replaced in
settings.yaml.

Author: ML Engineering Team
"""

import re
from typing import Iterable, Optional, Union

from src.utils.logger import get_logger
from .labels import compile_labels, get_labels
from .outcome import Absent, Found, Outcome

# Initialize module logger
logger = get_logger(__name__)

BLANK_LINE = re.compile(r'\n[ \t]*\n')

Labels = Union[str, Iterable[str]]


def _as_list(labels: Labels) -> list:
    if isinstance(labels, str):
        return [labels]
    return list(labels)


class BlockSegmenter:
    """
    Carves named blocks out of normalized invoice text.

    Example:
        >>> segmenter = BlockSegmenter()
        >>> segmenter.segment("Vendor\\nAcme\\nClient\\nBob", "Vendor", ["Client"])
        Found(rule='block', value='Acme')
        >>> segmenter.vendor_block("no labels here")
        Absent(rule='vendor')
    """

    def __init__(self) -> None:
        """Load the label sets used by the named blocks."""
        self.vendor_labels = get_labels('vendor')
        self.client_labels = get_labels('client')
        self.client_stop_labels = get_labels('client_stop')
        self.table_labels = get_labels('table')
        self.table_stop_labels = get_labels('table_stop')
        self.notes_labels = get_labels('notes')
        self.notes_stop_labels = get_labels('notes_stop')

    def segment(
        self,
        text: str,
        section_labels: Labels,
        stop_labels: Labels = (),
        stop_at_blank_line: bool = False,
        skip_label_line: bool = False,
        rule: str = 'block'
    ) -> Outcome:
        """
        Capture the text between a section label and the first stop label.

        The section label is the first case-insensitive, word-bounded
        occurrence of any label in ``section_labels``; an optional ``:``
        after it is skipped. Stop labels only count at the start of a
        line. Never raises.

        Args:
            text: Normalized invoice text.
            section_labels: Label (or labels) opening the block.
            stop_labels: Labels closing the block.
            stop_at_blank_line: Also close the block at the first blank line.
            skip_label_line: Start capturing on the line after the label.
            rule: Name reported in the outcome.

        Returns:
            Found(block text), or Absent when the label is missing or the
            block is empty.
        """
        if not text:
            return Absent(rule)

        section = _as_list(section_labels)
        if not section:
            return Absent(rule)

        start_pattern = re.compile(compile_labels(section) + r'[ \t]*:?', re.IGNORECASE)
        match = start_pattern.search(text)
        if match is None:
            logger.debug(f"Block '{rule}': no section label found")
            return Absent(rule)

        start = match.end()
        if skip_label_line:
            newline = text.find('\n', start)
            start = len(text) if newline == -1 else newline + 1

        end = len(text)
        stops = _as_list(stop_labels)
        if stops:
            stop_pattern = re.compile(
                r'^[ \t]*' + compile_labels(stops),
                re.IGNORECASE | re.MULTILINE
            )
            stop = stop_pattern.search(text, start)
            if stop is not None:
                end = stop.start()

        if stop_at_blank_line:
            blank = BLANK_LINE.search(text, start)
            if blank is not None:
                end = min(end, blank.start())

        block = text[start:end].strip()
        if not block:
            logger.debug(f"Block '{rule}': label found but block is empty")
            return Absent(rule)

        logger.debug(f"Block '{rule}': {len(block.splitlines())} line(s)")
        return Found(rule, block)

    def vendor_block(self, text: str) -> Outcome:
        """Vendor block, closed by a client label."""
        return self.segment(
            text,
            self.vendor_labels,
            self.client_labels + self.client_stop_labels + self.table_labels,
            rule='vendor'
        )

    def client_block(self, text: str) -> Outcome:
        """Client block, closed by a date, number or reference label."""
        return self.segment(
            text,
            self.client_labels,
            self.client_stop_labels + self.table_labels,
            rule='client'
        )

    def table_block(self, text: str) -> Outcome:
        """Line item table without its header line, closed by the HT total."""
        return self.segment(
            text,
            self.table_labels,
            self.table_stop_labels,
            skip_label_line=True,
            rule='table'
        )

    def notes_block(self, text: str) -> Outcome:
        """Free-text notes, closed by a blank line or a trailing label."""
        return self.segment(
            text,
            self.notes_labels,
            self.notes_stop_labels,
            stop_at_blank_line=True,
            rule='notes'
        )

    def notes(self, text: str) -> Optional[str]:
        """Notes block with its lines joined into one paragraph."""
        outcome = self.notes_block(text)
        if isinstance(outcome, Found):
            return ' '.join(line.strip() for line in outcome.value.splitlines())
        return None
