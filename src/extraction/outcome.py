"""
Rule Outcomes.

Every named extraction rule returns one of three tagged outcomes instead
of a bare nullable string, so a caller always sees whether the field was
found, simply not present, or present but unreadable.

Classes:
    Found: The rule matched and produced a value
    Absent: The rule found nothing to match
    Malformed: The rule matched text it could not turn into a value

Author: ML Engineering Team
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Union


@dataclass(frozen=True)
class Found:
    """A rule matched and produced ``value``."""
    rule: str
    value: Any


@dataclass(frozen=True)
class Absent:
    """A rule found nothing to match."""
    rule: str


@dataclass(frozen=True)
class Malformed:
    """
    A rule matched ``raw`` but could not interpret it.

    Attributes:
        rule: Name of the rule that matched
        raw: The matched text
        reason: Why the text was rejected
    """
    rule: str
    raw: str
    reason: str

    @property
    def message(self) -> str:
        return f"{self.rule}: could not read {self.raw!r} ({self.reason})"


Outcome = Union[Found, Absent, Malformed]


def resolve(outcome: Outcome, warnings: Optional[List[str]] = None) -> Any:
    """
    Turn an outcome into an optional value.

    Found yields its value, Absent yields None, Malformed yields None and
    records its message in ``warnings`` when a list is given.

    Args:
        outcome: Outcome returned by a rule.
        warnings: Optional list collecting warnings.

    Returns:
        The found value, or None.
    """
    if isinstance(outcome, Found):
        return outcome.value
    if isinstance(outcome, Malformed):
        if warnings is not None:
            warnings.append(outcome.message)
        return None
    if isinstance(outcome, Absent):
        return None
    raise TypeError(f"Not a rule outcome: {outcome!r}")
