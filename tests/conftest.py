from pathlib import Path
import re
import sys

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from lexicon import Lexicon  # noqa: E402
from toolkit import Toolkit  # noqa: E402


def make_toolkit(corrections=None, tags=None, scores=None, synonyms=None):
    """Deterministic stand-in for the NLTK-backed toolkit."""
    corrections = corrections or {}
    tags = tags or {}
    scores = scores or {}
    synonyms = synonyms or {}

    def tokenize(text):
        return re.findall(r"[\w']+", text)

    def correct(word, max_distance):
        return list(corrections.get(word.lower(), []))

    def tag(tokens):
        return [(t, tags.get(t.lower(), "NN")) for t in tokens]

    def score(tokens):
        if not tokens:
            return 0.0
        return sum(scores.get(t, 0) for t in tokens) / len(tokens)

    def lookup(word, pos):
        return list(synonyms.get((word.lower(), pos), []))

    return Toolkit(
        tokenize=tokenize, correct=correct, tag=tag, score=score, synonyms=lookup
    )


@pytest.fixture
def toolkit():
    return make_toolkit(scores={"hate": -3, "stupid": -2, "happy": 3})


@pytest.fixture
def lexicon():
    return Lexicon(["how", "is", "the", "weather", "donald", "happy", "hate"])


@pytest.fixture
def example_rows():
    return [
        ["s", "p", "", "I am fine"],
        ["s", "p", "weather", "It is sunny"],
    ]
