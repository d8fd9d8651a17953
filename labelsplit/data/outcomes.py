"""Outcome coercion and output type inference.

Outcomes arrive either as labels (strings) or as targets (numbers). Strings
that look like numbers, such as values read from a CSV file, are converted to
``int`` or ``float`` once at ingestion so that ``"3"`` and ``3`` describe the
same outcome everywhere downstream.
"""

from __future__ import annotations

import enum
import numbers
import re
from typing import Any, Iterable, Sequence, Union

from labelsplit.data.errors import InvalidOutcomeType

Outcome = Union[str, int, float]

_NUMERIC_STRING = re.compile(
    r"""
    ^\s*
    [+-]?
    (?:\d+(?:\.\d*)?|\.\d+)
    (?:[eE][+-]?\d+)?
    \s*$
    """,
    re.VERBOSE,
)
_INTEGER_STRING = re.compile(r"^\s*[+-]?\d+\s*$")


class OutputType(enum.Enum):
    """Kind of supervision carried by a set of outcomes."""

    CATEGORICAL = "categorical"
    CONTINUOUS = "continuous"


def is_numeric_string(value: str) -> bool:
    """Return True if ``value`` spells a finite decimal number."""
    return _NUMERIC_STRING.match(value) is not None


def coerce_outcome(value: Any) -> Outcome:
    """Coerce a single raw outcome.

    Args:
        value: A string or real number.

    Returns:
        ``int`` or ``float`` for numbers and numeric strings, the unchanged
        string otherwise.

    Raises:
        InvalidOutcomeType: If ``value`` is not a string or a real number.
            Booleans are rejected even though they subclass ``int``.
    """
    if isinstance(value, str):
        if not is_numeric_string(value):
            return value
        if _INTEGER_STRING.match(value):
            return int(value)
        return float(value)

    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidOutcomeType(
            f"Outcome must be a string or numeric type, {type(value).__name__} found."
        )

    return value


def coerce_outcomes(values: Iterable[Any]) -> list[Outcome]:
    """Coerce every outcome, failing on the first invalid one."""
    return [coerce_outcome(value) for value in values]


def infer_output_type(outcomes: Sequence[Outcome]) -> OutputType | None:
    """Classify outcomes by their first element.

    Only the first outcome is inspected; mixed collections are not rejected.

    Returns:
        The output type, or None when ``outcomes`` is empty.
    """
    if len(outcomes) == 0:
        return None
    if isinstance(outcomes[0], str):
        return OutputType.CATEGORICAL
    return OutputType.CONTINUOUS
