"""Turn an utterance into the bag of words the lookup tree is queried with.

The pipeline runs in a fixed order: tokenize, spellcheck-augment,
synonym-expand, lowercase.  Nothing is removed along the way; corrections and
synonyms are appended so the query covers everything the utterance might be
about.  A stage that fails hands its input through unchanged.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from errors import DegradedProcessingWarning
from lexicon import Lexicon
from toolkit import Toolkit

logger = logging.getLogger(__name__)

# Tokens this short are never spellchecked.
SPELLCHECK_MIN_LENGTH = 3
MAX_EDIT_DISTANCE = 2
SYNONYMS_PER_SENSE = 3
SENSES = ("n", "v")

# Penn Treebank noun and verb tags.
ACCEPTED_TAGS = frozenset(
    {"NN", "NNS", "NNP", "NNPS", "VB", "VBD", "VBN", "VBP", "VBZ"}
)


def _degraded(stage: str, reason: object) -> None:
    logger.warning("%s", DegradedProcessingWarning(stage, reason))


def tokenize(text: str, toolkit: Toolkit) -> List[str]:
    if not text or not text.strip():
        return []
    try:
        return list(toolkit.tokenize(text))
    except Exception as exc:
        _degraded("tokenize", exc)
        return text.split()


def spellcheck(tokens: Sequence[str], lexicon: Lexicon, toolkit: Toolkit) -> List[str]:
    """Append the best correction for each long, unknown token.

    Original tokens are kept; at most one correction is added per token.
    """
    corrections: List[str] = []
    for token in tokens:
        if len(token) <= SPELLCHECK_MIN_LENGTH or token in lexicon:
            continue
        try:
            candidates = toolkit.correct(token, MAX_EDIT_DISTANCE)
        except Exception as exc:
            _degraded("spellcheck", exc)
            continue
        if candidates:
            logger.debug(f"Spellcheck {token!r} -> {candidates[0]!r}")
            corrections.append(candidates[0])
    return list(tokens) + corrections


def relevant_words(tokens: Sequence[str], toolkit: Toolkit) -> List[str]:
    """Return the tokens tagged as nouns or verbs."""
    if not tokens:
        return []
    try:
        tagged = toolkit.tag(tokens)
    except Exception as exc:
        _degraded("tagging", exc)
        return []
    if not tagged:
        _degraded("tagging", "tagger returned nothing")
        return []
    return [token for token, tag in tagged if tag in ACCEPTED_TAGS]


def synonyms(tokens: Sequence[str], toolkit: Toolkit) -> List[str]:
    """Up to three noun-sense then three verb-sense synonyms per noun or verb."""
    found: List[str] = []
    for word in relevant_words(tokens, toolkit):
        for sense in SENSES:
            try:
                found.extend(toolkit.synonyms(word, sense)[:SYNONYMS_PER_SENSE])
            except LookupError as exc:
                # Missing corpus: every further lookup would fail the same way.
                _degraded("synonym", exc)
                return found
            except Exception as exc:
                _degraded("synonym", exc)
    return found


def normalize(text: str, lexicon: Lexicon, toolkit: Toolkit) -> List[str]:
    """Return the lowercase query tokens for *text*; duplicates are kept."""
    tokens = tokenize(text, toolkit)
    checked = spellcheck(tokens, lexicon, toolkit)
    expanded = checked + synonyms(checked, toolkit)
    result = [t.lower() for t in expanded]
    logger.debug(f"Normalized {text!r} -> {result}")
    return result
