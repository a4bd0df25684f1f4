"""Question and sentiment detection."""

from __future__ import annotations

import logging
from typing import Sequence

from errors import DegradedProcessingWarning
from toolkit import Toolkit

logger = logging.getLogger(__name__)


def is_question(message: str) -> bool:
    """Detect a question by its trailing question mark."""
    return (message or "").strip().endswith("?")


def sentiment_score(tokens: Sequence[str], toolkit: Toolkit) -> float:
    try:
        return float(toolkit.score(list(tokens)))
    except Exception as exc:
        logger.warning("%s", DegradedProcessingWarning("sentiment", exc))
        return 0.0


def sentiment_non_negative(tokens: Sequence[str], toolkit: Toolkit) -> bool:
    """True when the normalized tokens score zero or above."""
    return sentiment_score(tokens, toolkit) >= 0
