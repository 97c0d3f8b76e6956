"""Caller-side progress for a live recitation.

The matcher is stateless; a session owns everything that has to survive
between transcript updates: the cumulative transcript, the revealed mask
(only ever OR-ed forward), skip bookkeeping and the anchor from which
matching resumes after a skipped word.
"""

from __future__ import annotations

import logging
from typing import Any

from reciter.config import settings
from reciter.models import MatchResult, SpanMatch
from reciter.services.matcher import match_recitation, split_transcript
from reciter.services.normalizer import get_locale_fold, tokenize

logger = logging.getLogger(__name__)


class RecitationSession:
    def __init__(
        self,
        reference_text: str,
        similarity_threshold: float | None = None,
        use_locale_normalization: bool | None = None,
        locale: str | None = None,
        max_attempts_before_skip: int | None = None,
    ) -> None:
        self.reference_text = reference_text
        self.similarity_threshold = (
            settings.similarity_threshold
            if similarity_threshold is None
            else similarity_threshold
        )
        self.use_locale_normalization = (
            settings.use_locale_normalization
            if use_locale_normalization is None
            else use_locale_normalization
        )
        self.locale_fold = get_locale_fold(settings.locale if locale is None else locale)
        self.max_attempts_before_skip = (
            settings.max_attempts_before_skip
            if max_attempts_before_skip is None
            else max_attempts_before_skip
        )
        self.tokens = tokenize(reference_text)
        self.reset()

    def reset(self) -> None:
        self.revealed = [False] * len(self.tokens)
        self.correct = [False] * len(self.tokens)
        self.transcript_tokens: list[str] = []
        # Longest transcript seen; interim ASR results may shrink and regrow.
        self._last_transcript_length = 0
        self.failed_attempts = 0
        self.can_skip = False
        self.last_result: MatchResult | None = None
        # Matching restarts here after a skip: reference index, transcript index.
        self._ref_anchor = 0
        self._transcript_anchor = 0

    # ---- Views ----

    @property
    def revealed_count(self) -> int:
        return sum(self.revealed)

    @property
    def total_count(self) -> int:
        return len(self.tokens)

    @property
    def is_complete(self) -> bool:
        return all(self.revealed)

    @property
    def next_expected_word(self) -> str | None:
        for token, shown in zip(self.tokens, self.revealed):
            if not shown:
                return token
        return None

    @property
    def unmatched_words(self) -> list[str]:
        if self.last_result is None:
            return []
        return [
            self.transcript_tokens[i]
            for i in self.last_result.unmatched_transcript_indices
        ]

    @property
    def accuracy(self) -> float:
        """Share of revealed words that were actually spoken (not skipped)."""
        revealed = self.revealed_count
        if revealed == 0:
            return 0.0
        return sum(self.correct) / revealed * 100

    # ---- Updates ----

    def _run_matcher(self) -> MatchResult:
        segment = self.transcript_tokens[self._transcript_anchor:]
        if self._ref_anchor == 0:
            reference = self.reference_text
        else:
            # Word tokens joined by spaces tokenize back to the same tokens.
            reference = " ".join(self.tokens[self._ref_anchor:])
        result = match_recitation(
            reference,
            segment,
            similarity_threshold=self.similarity_threshold,
            use_locale_normalization=self.use_locale_normalization,
            locale_fold=self.locale_fold,
        )
        return self._rebase(result)

    def _rebase(self, result: MatchResult) -> MatchResult:
        """Shift a result computed after an anchor into whole-text positions."""
        ref_off, tr_off = self._ref_anchor, self._transcript_anchor
        if ref_off == 0 and tr_off == 0:
            return result
        mask = [False] * ref_off + result.revealed_token_mask
        return MatchResult(
            matches=[
                SpanMatch(
                    transcript_index=m.transcript_index + tr_off,
                    original_start=m.original_start + ref_off,
                    original_span=m.original_span,
                    revealed_text=m.revealed_text,
                    similarity=m.similarity,
                )
                for m in result.matches
            ],
            revealed_token_mask=mask,
            unrevealed_original=[
                token for token, shown in zip(self.tokens, mask) if not shown
            ],
            unmatched_transcript_indices=[
                i + tr_off for i in result.unmatched_transcript_indices
            ],
            final_original_pointer=result.final_original_pointer + ref_off,
        )

    def update(self, transcript_text: str) -> MatchResult:
        """Feed the full transcript spoken so far and merge what it reveals."""
        tokens = split_transcript(transcript_text)
        grew = len(tokens) > self._last_transcript_length
        before = self.revealed_count

        self.transcript_tokens = tokens
        result = self._run_matcher()
        for idx, shown in enumerate(result.revealed_token_mask):
            if shown and not self.revealed[idx]:
                self.revealed[idx] = True
                self.correct[idx] = True
        self.last_result = result

        after = self.revealed_count
        if grew:
            self._last_transcript_length = len(tokens)
            if after > before:
                self.failed_attempts = 0
                self.can_skip = False
            elif not self.is_complete:
                self.failed_attempts += 1
                if self.failed_attempts >= self.max_attempts_before_skip:
                    self.can_skip = True

        if after > before and self.is_complete:
            logger.info("Recitation complete: %d/%d words", after, self.total_count)
        return result

    def skip_word(self) -> int | None:
        """Reveal the next word as skipped once the speaker is stuck."""
        if not self.can_skip:
            return None
        try:
            idx = self.revealed.index(False)
        except ValueError:
            return None

        self.revealed[idx] = True
        self.correct[idx] = False
        self._ref_anchor = idx + 1
        self._transcript_anchor = len(self.transcript_tokens)
        self.failed_attempts = 0
        self.can_skip = False
        logger.info("Skipped word %d %r", idx, self.tokens[idx])
        return idx

    def progress(self) -> dict[str, Any]:
        return {
            "tokens": self.tokens,
            "revealed": self.revealed,
            "correct": self.correct,
            "revealed_count": self.revealed_count,
            "total_count": self.total_count,
            "accuracy": round(self.accuracy, 1),
            "next_expected_word": self.next_expected_word,
            "unmatched_words": self.unmatched_words,
            "failed_attempts": self.failed_attempts,
            "can_skip": self.can_skip,
            "is_complete": self.is_complete,
        }
