"""Language capabilities used by the normalizer and classifier.

The engine never tokenizes, tags or scores text itself.  It calls the five
callables of a :class:`Toolkit`.  :func:`default_toolkit` wires them to NLTK,
pyspellchecker and AFINN; tests hand in small fakes instead.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple

from lexicon import Lexicon

logger = logging.getLogger(__name__)

Tokenizer = Callable[[str], List[str]]
Corrector = Callable[[str, int], List[str]]
Tagger = Callable[[Sequence[str]], List[Tuple[str, str]]]
Scorer = Callable[[Sequence[str]], float]
SynonymLookup = Callable[[str, str], List[str]]

_WORD = re.compile(r"\w")


@dataclass
class Toolkit:
    """Black-box NLP capabilities."""

    tokenize: Tokenizer
    correct: Corrector
    tag: Tagger
    score: Scorer
    synonyms: SynonymLookup


def make_tokenizer() -> Tokenizer:
    from nltk.tokenize import TreebankWordTokenizer

    treebank = TreebankWordTokenizer()

    def tokenize(text: str) -> List[str]:
        # Treebank splits contractions ("don't" -> "do", "n't"); drop bare punctuation.
        return [t for t in treebank.tokenize(text) if _WORD.search(t)]

    return tokenize


def make_corrector(lexicon: Lexicon) -> Corrector:
    from nltk.metrics import edit_distance
    from spellchecker import SpellChecker

    checkers = {}

    def _checker(max_distance: int) -> SpellChecker:
        if max_distance not in checkers:
            checker = SpellChecker(language=None, distance=max_distance)
            checker.word_frequency.load_words(list(lexicon))
            checkers[max_distance] = checker
        return checkers[max_distance]

    def correct(word: str, max_distance: int) -> List[str]:
        candidates = _checker(max_distance).candidates(word.lower()) or set()
        ranked = [c for c in candidates if c in lexicon]
        ranked.sort(key=lambda c: (edit_distance(word.lower(), c), c))
        return ranked

    return correct


def make_tagger() -> Tagger:
    import nltk

    def tag(tokens: Sequence[str]) -> List[Tuple[str, str]]:
        return list(nltk.pos_tag(list(tokens)))

    return tag


def make_scorer() -> Scorer:
    from afinn import Afinn

    afinn = Afinn(language="en")

    def score(tokens: Sequence[str]) -> float:
        """Mean AFINN polarity per token, so the result stays within [-5, 5]."""
        if not tokens:
            return 0.0
        return sum(afinn.score(t) for t in tokens) / len(tokens)

    return score


def make_synonym_lookup() -> SynonymLookup:
    from nltk.corpus import wordnet as wn

    def synonyms(word: str, pos: str) -> List[str]:
        """Lemma names across *word*'s synsets; *pos* is WordNet's "n" or "v"."""
        target = word.lower()
        found: List[str] = []
        for synset in wn.synsets(target, pos=pos):
            for name in synset.lemma_names():
                lemma = name.replace("_", " ")
                if lemma.lower() != target and lemma not in found:
                    found.append(lemma)
        return found

    return synonyms


def default_toolkit(lexicon: Lexicon) -> Toolkit:
    """Build the production toolkit around *lexicon*."""
    logger.debug(f"Building default toolkit over {lexicon!r}")
    return Toolkit(
        tokenize=make_tokenizer(),
        correct=make_corrector(lexicon),
        tag=make_tagger(),
        score=make_scorer(),
        synonyms=make_synonym_lookup(),
    )
