"""Transform parameter value objects and validation.

Provides:
- Vector3: immutable (x, y, z) triple of finite floats
- TransformSpec: scale + translate pair applied to every coordinate
- validate_vector: checks a decoded JSON value is a usable triple
- parse_vector_param: decodes a query parameter into a Vector3
"""

import json
import math
from dataclasses import dataclass
from typing import Any

from model_vault.exceptions import InvalidVectorElement, InvalidVectorShape


@dataclass(frozen=True)
class Vector3:
    """Ordered triple of finite real numbers."""

    x: float
    y: float
    z: float

    def __getitem__(self, index: int) -> float:
        return (self.x, self.y, self.z)[index]

    def __iter__(self):
        return iter((self.x, self.y, self.z))

    def __len__(self) -> int:
        return 3

    def to_list(self) -> list[float]:
        return [self.x, self.y, self.z]


IDENTITY_SCALE = Vector3(1.0, 1.0, 1.0)
ZERO_TRANSLATE = Vector3(0.0, 0.0, 0.0)


@dataclass(frozen=True)
class TransformSpec:
    """Affine map applied per coordinate: value * scale[i] + translate[i]."""

    scale: Vector3 = IDENTITY_SCALE
    translate: Vector3 = ZERO_TRANSLATE

    @classmethod
    def identity(cls) -> "TransformSpec":
        return cls(IDENTITY_SCALE, ZERO_TRANSLATE)


def _coerce_element(value: Any, name: str, index: int) -> float:
    # bool is an int subclass but never a coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidVectorElement(
            f"{name}[{index}] must be a number, got {type(value).__name__}",
            parameter=name,
        )
    try:
        number = float(value)
    except OverflowError:
        raise InvalidVectorElement(
            f"{name}[{index}] is too large to represent", parameter=name
        ) from None
    if not math.isfinite(number):
        raise InvalidVectorElement(
            f"{name}[{index}] must be finite, got {value!r}", parameter=name
        )
    return number


def validate_vector(value: Any, name: str = "vector") -> Vector3:
    """Validate a decoded JSON value as a Vector3.

    Args:
        value: Decoded value (expected: list of three numbers)
        name: Parameter name used in error messages

    Returns:
        Vector3 built from the three elements

    Raises:
        InvalidVectorShape: value is not a sequence of exactly 3 elements
        InvalidVectorElement: an element is non-numeric or non-finite
    """
    if not isinstance(value, (list, tuple)):
        raise InvalidVectorShape(
            f"{name} must be an array of three numbers, got {type(value).__name__}",
            parameter=name,
        )
    if len(value) != 3:
        raise InvalidVectorShape(
            f"{name} must be an array of three numbers, got {len(value)} elements",
            parameter=name,
        )

    x, y, z = (_coerce_element(v, name, i) for i, v in enumerate(value))
    return Vector3(x, y, z)


def parse_vector_param(
    raw: str | None, name: str, default: Vector3
) -> Vector3:
    """Decode a JSON-encoded query parameter such as ``[2,2,2]``.

    Absent or empty parameters fall back to ``default``.
    """
    if raw is None or raw.strip() == "":
        return default

    try:
        decoded = json.loads(raw)
    except ValueError as e:
        raise InvalidVectorShape(
            f"{name} is not valid JSON: {e}", parameter=name
        ) from e

    return validate_vector(decoded, name)
