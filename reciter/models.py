"""Result types for batch alignment, metrics and recitation matching."""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, field
from typing import Any, Union


# ---------------------------------------------------------------------------
# Batch alignment
# ---------------------------------------------------------------------------


class Operation(str, enum.Enum):
    MATCH = "match"
    SUBSTITUTION = "substitution"
    DELETION = "deletion"
    INSERTION = "insertion"


@dataclass(frozen=True)
class Match:
    """Reference and hypothesis tokens are equal after normalisation."""

    reference: str
    hypothesis: str
    reference_index: int
    hypothesis_index: int

    operation = Operation.MATCH

    def to_dict(self) -> dict[str, Any]:
        return {"operation": self.operation.value, **asdict(self)}


@dataclass(frozen=True)
class Substitution:
    """Both tokens present but different."""

    reference: str
    hypothesis: str
    reference_index: int
    hypothesis_index: int

    operation = Operation.SUBSTITUTION

    def to_dict(self) -> dict[str, Any]:
        return {"operation": self.operation.value, **asdict(self)}


@dataclass(frozen=True)
class Deletion:
    """Reference token that was never produced."""

    reference: str
    reference_index: int

    operation = Operation.DELETION

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation.value,
            "reference": self.reference,
            "hypothesis": None,
            "reference_index": self.reference_index,
            "hypothesis_index": None,
        }


@dataclass(frozen=True)
class Insertion:
    """Extra hypothesis token with no reference counterpart."""

    hypothesis: str
    hypothesis_index: int

    operation = Operation.INSERTION

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation.value,
            "reference": None,
            "hypothesis": self.hypothesis,
            "reference_index": None,
            "hypothesis_index": self.hypothesis_index,
        }


AlignedToken = Union[Match, Substitution, Deletion, Insertion]


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WERMetrics:
    matches: int
    substitutions: int
    deletions: int
    insertions: int
    total_reference_words: int
    total_hypothesis_words: int
    wer: float
    accuracy: float  # percent, 0-100

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class AlignmentStats:
    operation_counts: dict[str, int]
    average_reference_token_length: float
    longest_match_run: int
    total_errors: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ComparisonResult:
    """Everything an after-the-fact comparison produces in one bundle."""

    reference: str
    hypothesis: str
    alignment: list[AlignedToken]
    metrics: WERMetrics
    cer: float
    stats: AlignmentStats

    def to_dict(self) -> dict[str, Any]:
        return {
            "reference": self.reference,
            "hypothesis": self.hypothesis,
            "alignment": [token.to_dict() for token in self.alignment],
            "metrics": self.metrics.to_dict(),
            "cer": self.cer,
            "stats": self.stats.to_dict(),
        }


# ---------------------------------------------------------------------------
# Streaming recitation matching
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SpanMatch:
    transcript_index: int
    original_start: int
    original_span: int  # 1, 2 or 3
    revealed_text: str  # verbatim reference tokens joined by a single space
    similarity: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class MatchResult:
    matches: list[SpanMatch] = field(default_factory=list)
    revealed_token_mask: list[bool] = field(default_factory=list)
    unrevealed_original: list[str] = field(default_factory=list)
    unmatched_transcript_indices: list[int] = field(default_factory=list)
    final_original_pointer: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
