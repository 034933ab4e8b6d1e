"""Line classification for OBJ-style model files.

A line is either a coordinate record (tag followed by numeric fields) or a
passthrough record emitted verbatim. Two classifiers are available:

- PrefixLineClassifier: any line starting with ``v`` is a coordinate record
  and is re-emitted with the ``v`` tag, whatever its original tag was.
- TaggedLineClassifier: keyed by the full first token, so ``vn``/``vt`` keep
  their own tag and unknown ``v...`` tokens pass through.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

# Field separators: \t-\r, space, Unicode space separators and BOM. The ASCII
# separators \x1c-\x1f and NEL stay inside fields, unlike with str.split().
_WHITESPACE = re.compile(
    r"[\t\n\v\f\r \u00a0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000\ufeff]+"
)


def split_fields(line: str) -> list[str]:
    """Split on whitespace runs, dropping empty leading and trailing tokens."""
    return [token for token in _WHITESPACE.split(line) if token]


class RecordKind(str, Enum):
    COORDINATE = "coordinate"
    PASSTHROUGH = "passthrough"


@dataclass(frozen=True)
class SourceLine:
    """One classified source line."""

    kind: RecordKind
    text: str
    tag: str = ""
    fields: list[str] = field(default_factory=list)

    @property
    def is_coordinate(self) -> bool:
        return self.kind is RecordKind.COORDINATE


class ILineClassifier(Protocol):
    """Decides how a single line is handled."""

    def classify(self, line: str) -> SourceLine:
        ...


def _passthrough(line: str) -> SourceLine:
    return SourceLine(RecordKind.PASSTHROUGH, line)


class PrefixLineClassifier:
    """Coordinate record iff the line starts with the character ``v``."""

    prefix = "v"
    emitted_tag = "v"

    def classify(self, line: str) -> SourceLine:
        if not line.startswith(self.prefix):
            return _passthrough(line)
        # first token is the tag; it is dropped and re-emitted as "v"
        fields = split_fields(line)[1:]
        return SourceLine(RecordKind.COORDINATE, line, self.emitted_tag, fields)


class TaggedLineClassifier:
    """Coordinate record iff the first token is one of ``tags``."""

    DEFAULT_TAGS = ("v", "vn", "vt", "vp")

    def __init__(self, tags: tuple[str, ...] | list[str] = DEFAULT_TAGS):
        self.tags = frozenset(tags)

    def classify(self, line: str) -> SourceLine:
        # tag must be at column 0, same as the prefix classifier
        if not line or _WHITESPACE.match(line):
            return _passthrough(line)
        tokens = split_fields(line)
        if not tokens or tokens[0] not in self.tags:
            return _passthrough(line)
        return SourceLine(RecordKind.COORDINATE, line, tokens[0], tokens[1:])


CLASSIFIERS = {
    "prefix": PrefixLineClassifier,
    "tagged": TaggedLineClassifier,
}


def build_classifier(name: str = "prefix") -> ILineClassifier:
    try:
        return CLASSIFIERS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown classifier {name!r}; expected one of {sorted(CLASSIFIERS)}"
        ) from None
