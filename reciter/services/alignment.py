"""Token-level edit-distance alignment between a reference and a hypothesis.

Used for after-the-fact comparison (WER/CER, diff rendering). The live,
progressive reveal uses :mod:`reciter.services.matcher` instead.
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from reciter.models import (
    AlignedToken,
    Deletion,
    Insertion,
    Match,
    Operation,
    Substitution,
)
from reciter.services.normalizer import Tokenizer, get_tokenizer, whitespace_tokenize

logger = logging.getLogger(__name__)

TokenNormalizer = Callable[[str], str]


def _edit_operations(
    ref: Sequence[str], hyp: Sequence[str]
) -> list[list[Operation | None]]:
    """Wagner-Fischer table of the winning operation for every cell.

    Ties go to the diagonal first, then to deletion, then to insertion.
    """
    n, m = len(ref), len(hyp)
    cost = [[0] * (m + 1) for _ in range(n + 1)]
    back: list[list[Operation | None]] = [[None] * (m + 1) for _ in range(n + 1)]

    for i in range(1, n + 1):
        cost[i][0] = i
        back[i][0] = Operation.DELETION
    for j in range(1, m + 1):
        cost[0][j] = j
        back[0][j] = Operation.INSERTION

    for i in range(1, n + 1):
        for j in range(1, m + 1):
            same = ref[i - 1] == hyp[j - 1]
            diagonal = cost[i - 1][j - 1] + (0 if same else 1)
            up = cost[i - 1][j] + 1
            left = cost[i][j - 1] + 1

            if diagonal <= up and diagonal <= left:
                cost[i][j] = diagonal
                back[i][j] = Operation.MATCH if same else Operation.SUBSTITUTION
            elif up <= left:
                cost[i][j] = up
                back[i][j] = Operation.DELETION
            else:
                cost[i][j] = left
                back[i][j] = Operation.INSERTION

    return back


def _backtrack(
    back: list[list[Operation | None]], ref: Sequence[str], hyp: Sequence[str]
) -> list[AlignedToken]:
    aligned: list[AlignedToken] = []
    i, j = len(ref), len(hyp)
    while i > 0 or j > 0:
        op = back[i][j]
        if op is Operation.MATCH:
            aligned.append(Match(ref[i - 1], hyp[j - 1], i - 1, j - 1))
            i -= 1
            j -= 1
        elif op is Operation.SUBSTITUTION:
            aligned.append(Substitution(ref[i - 1], hyp[j - 1], i - 1, j - 1))
            i -= 1
            j -= 1
        elif op is Operation.DELETION:
            aligned.append(Deletion(ref[i - 1], i - 1))
            i -= 1
        else:
            aligned.append(Insertion(hyp[j - 1], j - 1))
            j -= 1
    aligned.reverse()
    return aligned


class AlignmentEngine:
    """Align two texts token by token with a configurable tokenizer.

    *tokenizer* is either a callable or the name of a registered tokenizer
    ("whitespace", "word"). *normalizer* is applied to every token before
    comparison; by default it lower-cases unless *case_sensitive*.
    """

    def __init__(
        self,
        case_sensitive: bool = False,
        tokenizer: Tokenizer | str | None = None,
        normalizer: TokenNormalizer | None = None,
    ) -> None:
        if tokenizer is None:
            tokenizer = whitespace_tokenize
        elif isinstance(tokenizer, str):
            tokenizer = get_tokenizer(tokenizer)
        self.case_sensitive = case_sensitive
        self.tokenizer: Tokenizer = tokenizer
        self.normalizer: TokenNormalizer = normalizer or self._default_normalizer

    def _default_normalizer(self, token: str) -> str:
        return token if self.case_sensitive else token.lower()

    def process_text(self, text: str) -> list[str]:
        return [self.normalizer(token) for token in self.tokenizer(text)]

    def align(self, reference_text: str, hypothesis_text: str) -> list[AlignedToken]:
        ref_tokens = self.process_text(reference_text)
        hyp_tokens = self.process_text(hypothesis_text)

        if not ref_tokens and not hyp_tokens:
            return []

        back = _edit_operations(ref_tokens, hyp_tokens)
        aligned = _backtrack(back, ref_tokens, hyp_tokens)
        logger.debug(
            "Aligned %d reference / %d hypothesis tokens, %d edits",
            len(ref_tokens),
            len(hyp_tokens),
            edit_distance(aligned),
        )
        return aligned

    def original_token(self, processed_token: str, original_text: str) -> str:
        """Map a normalised token back to its first verbatim occurrence."""
        for token in self.tokenizer(original_text):
            if self.normalizer(token) == processed_token:
                return token
        return processed_token


def align(
    reference_text: str,
    hypothesis_text: str,
    case_sensitive: bool = False,
    tokenizer: Tokenizer | str | None = None,
    normalizer: TokenNormalizer | None = None,
) -> list[AlignedToken]:
    engine = AlignmentEngine(
        case_sensitive=case_sensitive, tokenizer=tokenizer, normalizer=normalizer
    )
    return engine.align(reference_text, hypothesis_text)


def edit_distance(alignment: Sequence[AlignedToken]) -> int:
    """Number of non-match operations, i.e. the token-level edit distance."""
    return sum(1 for token in alignment if token.operation is not Operation.MATCH)
