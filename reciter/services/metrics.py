"""WER / CER and summary statistics derived from a batch alignment."""

from __future__ import annotations

from typing import Any, Sequence

from reciter.models import (
    AlignedToken,
    AlignmentStats,
    ComparisonResult,
    Deletion,
    Insertion,
    Operation,
    Substitution,
    WERMetrics,
)
from reciter.services.alignment import AlignmentEngine, TokenNormalizer
from reciter.services.normalizer import Tokenizer


def _count_operations(alignment: Sequence[AlignedToken]) -> dict[str, int]:
    counts = {op.value: 0 for op in Operation}
    for token in alignment:
        counts[token.operation.value] += 1
    return counts


def compute_wer(alignment: Sequence[AlignedToken]) -> WERMetrics:
    """
    WER = (S + D + I) / N, accuracy = M / N * 100, with N = M + S + D.

    Insertions raise WER without touching N, so wer + accuracy / 100 is
    not 1 whenever anything was inserted.
    """
    counts = _count_operations(alignment)
    matches = counts[Operation.MATCH.value]
    substitutions = counts[Operation.SUBSTITUTION.value]
    deletions = counts[Operation.DELETION.value]
    insertions = counts[Operation.INSERTION.value]

    total_ref = matches + substitutions + deletions
    total_hyp = matches + substitutions + insertions

    wer = (substitutions + deletions + insertions) / total_ref if total_ref > 0 else 0.0
    accuracy = matches / total_ref * 100 if total_ref > 0 else 0.0

    return WERMetrics(
        matches=matches,
        substitutions=substitutions,
        deletions=deletions,
        insertions=insertions,
        total_reference_words=total_ref,
        total_hypothesis_words=total_hyp,
        wer=wer,
        accuracy=accuracy,
    )


def compute_cer(alignment: Sequence[AlignedToken]) -> float:
    """Character error rate approximated from the word alignment."""
    total_chars = 0
    error_chars = 0
    for token in alignment:
        if not isinstance(token, Insertion):
            total_chars += len(token.reference)

        if isinstance(token, Substitution):
            error_chars += max(len(token.reference), len(token.hypothesis))
        elif isinstance(token, Deletion):
            error_chars += len(token.reference)
        elif isinstance(token, Insertion):
            error_chars += len(token.hypothesis)

    return error_chars / total_chars if total_chars > 0 else 0.0


def compute_stats(alignment: Sequence[AlignedToken]) -> AlignmentStats:
    counts = _count_operations(alignment)

    run = 0
    longest_run = 0
    ref_chars = 0
    ref_count = 0
    for token in alignment:
        if token.operation is Operation.MATCH:
            run += 1
            longest_run = max(longest_run, run)
        else:
            run = 0

        if not isinstance(token, Insertion):
            ref_chars += len(token.reference)
            ref_count += 1

    total_errors = (
        counts[Operation.SUBSTITUTION.value]
        + counts[Operation.DELETION.value]
        + counts[Operation.INSERTION.value]
    )
    return AlignmentStats(
        operation_counts=counts,
        average_reference_token_length=ref_chars / ref_count if ref_count else 0.0,
        longest_match_run=longest_run,
        total_errors=total_errors,
    )


def summarize(alignment: Sequence[AlignedToken]) -> dict[str, Any]:
    """Per-operation counts plus the share of aligned tokens that matched."""
    counts = _count_operations(alignment)
    total = len(alignment)
    match_pct = counts[Operation.MATCH.value] / total * 100 if total else 0.0
    return {
        **counts,
        "match_pct": round(match_pct, 1),
        "total_tokens": total,
    }


def compare(
    reference_text: str,
    hypothesis_text: str,
    case_sensitive: bool = False,
    tokenizer: Tokenizer | str | None = None,
    normalizer: TokenNormalizer | None = None,
) -> ComparisonResult:
    """Align two texts and compute every metric in one call."""
    engine = AlignmentEngine(
        case_sensitive=case_sensitive, tokenizer=tokenizer, normalizer=normalizer
    )
    alignment = engine.align(reference_text, hypothesis_text)
    return ComparisonResult(
        reference=reference_text,
        hypothesis=hypothesis_text,
        alignment=alignment,
        metrics=compute_wer(alignment),
        cer=compute_cer(alignment),
        stats=compute_stats(alignment),
    )
