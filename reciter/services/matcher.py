"""Streaming recitation matcher for progressive reveal.

Every call re-matches the whole transcript spoken so far against the
reference text. A single pointer walks the reference and never moves
backwards, so a word said again later (or a repeated word earlier in the
text) can never hide or re-order what has already been revealed.

ASR engines often glue two or three short words into one token
("worldagain"), so each transcript token is scored against the next 1, 2
and 3 reference tokens and the best-scoring span wins. On equal scores
the shorter span is kept.
"""

from __future__ import annotations

import logging
from typing import Sequence

from reciter.models import MatchResult, SpanMatch
from reciter.services.normalizer import Fold, fold_arabic, normalize, tokenize
from reciter.services.similarity import similarity

logger = logging.getLogger(__name__)

MAX_SPAN = 3


def split_transcript(text: str) -> list[str]:
    """Split raw ASR text into the tokens the matcher expects."""
    return text.split()


def match_recitation(
    reference_text: str,
    transcript_tokens: Sequence[str],
    similarity_threshold: float = 0.70,
    use_locale_normalization: bool = True,
    locale_fold: Fold | None = fold_arabic,
) -> MatchResult:
    """
    Reveal reference tokens in order as the transcript produces them.

    Returns a :class:`MatchResult`; ``revealed_text`` of every match is the
    verbatim reference slice, while scoring uses normalised forms.
    """
    original_tokens = tokenize(reference_text)
    fold = locale_fold if use_locale_normalization else None
    norm_tokens = [normalize(token, fold) for token in original_tokens]

    revealed = [False] * len(original_tokens)
    matches: list[SpanMatch] = []
    unmatched: list[int] = []
    j = 0

    for i, raw in enumerate(transcript_tokens):
        if j >= len(original_tokens):
            unmatched.append(i)
            continue

        spoken = normalize(raw, fold)

        best_span = 0
        best_sim = -1.0
        for span in range(1, MAX_SPAN + 1):
            if j + span > len(original_tokens):
                break
            sim = similarity(spoken, " ".join(norm_tokens[j:j + span]))
            if sim > best_sim:
                best_span, best_sim = span, sim

        logger.debug(
            "Token %d %r (%r) vs reference %d %r: best span %d, sim %.4f / %.2f",
            i,
            raw,
            spoken,
            j,
            original_tokens[j],
            best_span,
            best_sim,
            similarity_threshold,
        )

        if best_span > 0 and best_sim >= similarity_threshold:
            for k in range(j, j + best_span):
                revealed[k] = True
            matches.append(SpanMatch(
                transcript_index=i,
                original_start=j,
                original_span=best_span,
                revealed_text=" ".join(original_tokens[j:j + best_span]),
                similarity=round(best_sim, 4),
            ))
            j += best_span
        else:
            unmatched.append(i)

    logger.debug(
        "Recitation: %d transcript tokens -> %d matches, %d unmatched, pointer %d/%d",
        len(transcript_tokens),
        len(matches),
        len(unmatched),
        j,
        len(original_tokens),
    )

    return MatchResult(
        matches=matches,
        revealed_token_mask=revealed,
        unrevealed_original=[
            token for token, shown in zip(original_tokens, revealed) if not shown
        ],
        unmatched_transcript_indices=unmatched,
        final_original_pointer=j,
    )
