"""Per-coordinate affine transform and fixed-precision formatting.

Numbers are formatted with Python's ``%.*f``, which rounds the exact binary
value half-to-even. The result is identical on every platform CPython runs on.
"""

import math
import re

from model_vault.exceptions import MalformedRecord
from model_vault.transformation.vectors import TransformSpec

DEFAULT_PRECISION = 6
MAX_PRECISION = 17

# Longest leading numeric literal, the way a lenient float parser reads it.
# ASCII digits only; float() would also accept other Unicode digits.
_NUMERIC_PREFIX = re.compile(
    r"[+-]?(?:Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)"
)


def parse_coordinate(token: str) -> float:
    """Parse the numeric prefix of ``token``; NaN when there is none."""
    match = _NUMERIC_PREFIX.match(token)
    if match is None:
        return math.nan
    return float(match.group(0).replace("Infinity", "inf"))


def is_strict_number(token: str) -> bool:
    """True when the whole token is a finite numeric literal."""
    match = _NUMERIC_PREFIX.fullmatch(token)
    return match is not None and "Infinity" not in token


def check_precision(precision: int) -> int:
    if not 0 <= precision <= MAX_PRECISION:
        raise ValueError(
            f"precision must be between 0 and {MAX_PRECISION}, got {precision}"
        )
    return precision


def format_coordinate(value: float, precision: int = DEFAULT_PRECISION) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        value = 0.0
    return f"{value:.{precision}f}"


class TransformEngine:
    """Applies a TransformSpec to the numeric fields of a coordinate record.

    Only the first three fields are transformed; any further fields are
    returned untouched after the transformed prefix.
    """

    def __init__(
        self,
        spec: TransformSpec,
        precision: int = DEFAULT_PRECISION,
        strict: bool = False,
    ):
        """Initialize engine.

        Args:
            spec: Scale and translate vectors
            precision: Decimal places in formatted output
            strict: If True, raise MalformedRecord on non-numeric fields
                instead of emitting NaN
        """
        check_precision(precision)
        self.spec = spec
        self.precision = precision
        self.strict = strict

    def transform_value(self, value: float, index: int) -> float:
        return value * self.spec.scale[index] + self.spec.translate[index]

    def apply(self, fields: list[str], line_number: int | None = None) -> list[str]:
        """Transform up to three coordinate fields.

        Args:
            fields: Whitespace-separated tokens following the record tag
            line_number: 1-based source line, used in strict-mode errors

        Returns:
            Formatted fields, same length as ``fields``

        Raises:
            MalformedRecord: strict mode and a coordinate field is not numeric
        """
        out: list[str] = []
        for index, token in enumerate(fields[:3]):
            number = parse_coordinate(token)
            if self.strict and not (
                is_strict_number(token) and math.isfinite(number)
            ):
                raise MalformedRecord(
                    f"Line {line_number}: coordinate {index} is not a number: {token!r}",
                    line_number=line_number,
                )
            value = self.transform_value(number, index)
            out.append(format_coordinate(value, self.precision))

        out.extend(fields[3:])
        return out
