"""Text normalisation and tokenisation shared by both matchers.

Matching always happens on normalised forms, but every tokenizer here
returns verbatim slices of its input so results can show the original
text exactly as it was written.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from typing import Callable

logger = logging.getLogger(__name__)

Fold = Callable[[str], str]
Tokenizer = Callable[[str], list[str]]

# Combining Diacritical Marks, Arabic tashkil (tanwin, fatha, damma, kasra,
# shadda, sukun, maddah, hamza above/below ...), superscript alef, tatweel.
_DIACRITICS = re.compile(r"[\u0300-\u036f\u064b-\u065f\u0670\u0640]")
_WHITESPACE = re.compile(r"\s+")

_ARABIC_FOLDS = str.maketrans({
    "آ": "ا",  # alef with madda above
    "أ": "ا",  # alef with hamza above
    "إ": "ا",  # alef with hamza below
    "ٱ": "ا",  # alef wasla
    "ة": "ه",  # ta marbuta -> ha
    "ى": "ي",  # alef maksura -> ya
    "ؤ": "و",  # hamza on waw
    "ئ": "ي",  # hamza on ya
})


def _is_punct_or_symbol(ch: str) -> bool:
    return unicodedata.category(ch)[0] in ("P", "S")


def normalize(text: str, fold: Fold | None = None) -> str:
    """Normalise *text* for similarity comparison.

    NFKD, strip diacritics, lower-case, turn punctuation and symbols into
    spaces, collapse whitespace. *fold* runs last for locale-specific
    letter folding.
    """
    text = unicodedata.normalize("NFKD", text)
    text = _DIACRITICS.sub("", text)
    text = text.lower()

    chars: list[str] = []
    in_punct = False
    for ch in text:
        if _is_punct_or_symbol(ch):
            if not in_punct:
                chars.append(" ")
            in_punct = True
        else:
            chars.append(ch)
            in_punct = False
    text = _WHITESPACE.sub(" ", "".join(chars)).strip()

    if fold is not None:
        text = fold(text)
    return text


def fold_arabic(text: str) -> str:
    """Fold Arabic orthographic letter variants onto their base letter."""
    return text.translate(_ARABIC_FOLDS)


def normalize_arabic(text: str) -> str:
    return normalize(text, fold=fold_arabic)


LOCALE_FOLDS: dict[str, Fold] = {
    "ar": fold_arabic,
}


def get_locale_fold(locale: str | None) -> Fold | None:
    """Return the letter-folding hook registered for *locale*, if any."""
    if not locale:
        return None
    fold = LOCALE_FOLDS.get(locale.lower())
    if fold is None:
        logger.warning("No letter folding registered for locale %r", locale)
    return fold


# ---------------------------------------------------------------------------
# Tokenizers
# ---------------------------------------------------------------------------


def _char_class(ch: str) -> str | None:
    cat = unicodedata.category(ch)
    if cat[0] in ("L", "M"):
        return "word"
    if cat == "Nd":
        return "digit"
    return None


def tokenize_spans(text: str) -> list[tuple[int, int]]:
    """(start, end) offsets of every letter/mark run and digit run in *text*."""
    spans: list[tuple[int, int]] = []
    start = 0
    current: str | None = None
    for pos, ch in enumerate(text):
        cls = _char_class(ch)
        if cls != current:
            if current is not None:
                spans.append((start, pos))
            start = pos
            current = cls
    if current is not None:
        spans.append((start, len(text)))
    return spans


def tokenize(text: str) -> list[str]:
    """Split *text* into word-like tokens, dropping everything in between.

    Example: "Hello, world 42!" -> ["Hello", "world", "42"]
    """
    return [text[start:end] for start, end in tokenize_spans(text)]


def whitespace_tokenize(text: str) -> list[str]:
    return [token for token in _WHITESPACE.split(text.strip()) if token]


TOKENIZERS: dict[str, Tokenizer] = {
    "whitespace": whitespace_tokenize,
    "word": tokenize,
}


def get_tokenizer(name: str) -> Tokenizer:
    try:
        return TOKENIZERS[name]
    except KeyError:
        raise ValueError(
            f"Unknown tokenizer {name!r}; expected one of {sorted(TOKENIZERS)}"
        ) from None
