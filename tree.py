from __future__ import annotations

"""Reply selection over the lookup tree.

The selector classifies the utterance (question or statement, non-negative
or negative), walks to the matching sentiment branch, gathers the replies of
every topic the query tokens name, and falls back to the generic bucket when
none match.  One reply is then picked at random, avoiding a repeat of the
previous reply whenever another candidate exists.
"""

import logging
import random
from dataclasses import dataclass
from typing import List, Optional

import classify
import normalize
from errors import ConfigurationError
from lexicon import Lexicon
from lookup import FALLBACK, ROOT, LookupTree
from toolkit import Toolkit

logger = logging.getLogger(__name__)

# Shared fallback random source; pass ``rng`` for reproducible picks.
_rng = random.Random()


@dataclass
class Query:
    """Facts derived from one utterance."""

    category: str
    sentiment: str
    tokens: List[str]


def analyze(message: str, lexicon: Lexicon, toolkit: Toolkit) -> Query:
    tokens = normalize.normalize(message, lexicon, toolkit)
    category = "q" if classify.is_question(message) else "s"
    sentiment = "p" if classify.sentiment_non_negative(tokens, toolkit) else "n"
    return Query(category=category, sentiment=sentiment, tokens=tokens)


def _descend(tree: LookupTree, node: int, label: str, level: str) -> int:
    found = tree.child(node, label)
    if found is None:
        raise ConfigurationError(f"lookup tree has no {level} branch {label!r}")
    return found


def candidates(tree: LookupTree, query: Query) -> List[str]:
    """Deduplicated replies for *query*, falling back to the generic bucket."""
    node = _descend(tree, ROOT, query.category, "category")
    node = _descend(tree, node, query.sentiment, "sentiment")

    replies: List[str] = []
    for token in query.tokens:
        topic = tree.child(node, token)
        if topic is not None:
            replies.extend(tree.leaves(topic))

    if not replies:
        logger.debug("No topic matched - using fallback bucket")
        topic = _descend(tree, node, FALLBACK, "fallback topic")
        replies.extend(tree.leaves(topic))

    return list(dict.fromkeys(replies))


def choose(
    replies: List[str],
    last_reply: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """Pick one reply, skipping *last_reply* when there is an alternative."""
    pool = list(dict.fromkeys(replies))
    if len(pool) > 1 and last_reply and last_reply in pool:
        pool.remove(last_reply)
    if not pool:
        raise ConfigurationError("no candidate replies left to choose from")
    # Sorted so a seeded rng always lands on the same reply.
    return (rng or _rng).choice(sorted(pool))


def select(
    tree: LookupTree,
    message: str,
    last_reply: Optional[str] = None,
    *,
    lexicon: Lexicon,
    toolkit: Toolkit,
    rng: Optional[random.Random] = None,
) -> str:
    """Return one canned reply to *message*.

    Args:
        tree: Frozen lookup tree.
        message: Raw user text; may be empty.
        last_reply: Previous reply sent to this user, avoided when possible.
        lexicon: Known words for spellchecking.
        toolkit: NLP capabilities.
        rng: Random source; defaults to a module-level instance.

    Raises:
        ConfigurationError: the tree lacks a branch the query needs.
    """
    message = message or ""
    logger.debug("=== SELECT START ===")
    logger.debug(f"Input text: '{message}'")

    query = analyze(message, lexicon, toolkit)
    logger.debug(
        f"Category: {query.category}, Sentiment: {query.sentiment}, Tokens: {query.tokens}"
    )

    replies = candidates(tree, query)
    logger.debug(f"Candidates: {replies}")

    reply = choose(replies, last_reply, rng)
    logger.debug(f"Chosen reply: '{reply}'")
    logger.debug("=== SELECT END ===")
    return reply
