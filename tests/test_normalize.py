"""Tests for the input normalization pipeline."""

from pathlib import Path
import logging
import sys

sys.path.append(str(Path(__file__).resolve().parent.parent))

import normalize  # noqa: E402
from conftest import make_toolkit  # noqa: E402
from lexicon import Lexicon  # noqa: E402


def test_empty_input_yields_no_tokens(lexicon, toolkit):
    assert normalize.normalize("", lexicon, toolkit) == []
    assert normalize.normalize("   ", lexicon, toolkit) == []


def test_tokens_are_lowercased(lexicon, toolkit):
    assert normalize.normalize("How is the Weather", lexicon, toolkit) == [
        "how",
        "is",
        "the",
        "weather",
    ]


def test_spellcheck_appends_best_correction():
    toolkit = make_toolkit(corrections={"donld": ["donald", "donna"]})
    result = normalize.spellcheck(["donld"], Lexicon(["donald"]), toolkit)
    assert result == ["donld", "donald"]


def test_spellcheck_skips_short_and_known_tokens():
    calls = []
    toolkit = make_toolkit()
    toolkit.correct = lambda word, distance: calls.append(word) or ["x"]
    result = normalize.spellcheck(["cat", "dogz", "Weather"], Lexicon(["weather"]), toolkit)
    assert calls == ["dogz"]
    assert result == ["cat", "dogz", "Weather", "x"]


def test_spellcheck_uses_edit_distance_two():
    seen = []
    toolkit = make_toolkit()
    toolkit.correct = lambda word, distance: seen.append(distance) or []
    normalize.spellcheck(["donld"], Lexicon(), toolkit)
    assert seen == [2]


def test_spellcheck_keeps_uncorrectable_tokens():
    result = normalize.spellcheck(["asdkjas"], Lexicon(), make_toolkit())
    assert result == ["asdkjas"]


def test_synonyms_only_for_nouns_and_verbs():
    toolkit = make_toolkit(
        tags={"the": "DT", "goat": "NN", "runs": "VBZ", "quickly": "RB"},
        synonyms={
            ("goat", "n"): ["caprine"],
            ("runs", "v"): ["operates"],
            ("quickly", "n"): ["never"],
            ("the", "n"): ["never"],
        },
    )
    found = normalize.synonyms(["the", "goat", "runs", "quickly"], toolkit)
    assert found == ["caprine", "operates"]


def test_synonyms_capped_per_sense_nouns_first():
    toolkit = make_toolkit(
        synonyms={
            ("play", "n"): ["drama", "show", "fun", "gambol"],
            ("play", "v"): ["act", "perform", "toy", "run"],
        }
    )
    assert normalize.synonyms(["play"], toolkit) == [
        "drama",
        "show",
        "fun",
        "act",
        "perform",
        "toy",
    ]


def test_full_pipeline_order():
    toolkit = make_toolkit(
        corrections={"donld": ["donald"]},
        tags={"my": "PRP$"},
        synonyms={("donald", "n"): ["Duck"], ("goat", "n"): ["Billy"]},
    )
    result = normalize.normalize("my donld Goat", Lexicon(["goat", "my"]), toolkit)
    assert result == ["my", "donld", "goat", "donald", "billy", "duck"]


def test_tagger_failure_degrades_to_pass_through(caplog):
    toolkit = make_toolkit(synonyms={("goat", "n"): ["caprine"]})

    def broken(tokens):
        raise RuntimeError("no model")

    toolkit.tag = broken
    with caplog.at_level(logging.WARNING, logger="normalize"):
        result = normalize.normalize("goat", Lexicon(["goat"]), toolkit)
    assert result == ["goat"]
    assert "tagging stage degraded" in caplog.text


def test_empty_tagger_output_degrades(caplog):
    toolkit = make_toolkit()
    toolkit.tag = lambda tokens: []
    with caplog.at_level(logging.WARNING, logger="normalize"):
        assert normalize.synonyms(["goat"], toolkit) == []
    assert "tagging stage degraded" in caplog.text


def test_tokenizer_failure_falls_back_to_whitespace(caplog):
    toolkit = make_toolkit()

    def broken(text):
        raise ValueError("bad text")

    toolkit.tokenize = broken
    with caplog.at_level(logging.WARNING, logger="normalize"):
        assert normalize.tokenize("Hello there", toolkit) == ["Hello", "there"]
    assert "tokenize stage degraded" in caplog.text


def test_spellcheck_failure_skips_word(caplog):
    toolkit = make_toolkit()

    def broken(word, distance):
        raise RuntimeError("boom")

    toolkit.correct = broken
    with caplog.at_level(logging.WARNING, logger="normalize"):
        assert normalize.spellcheck(["donld"], Lexicon(), toolkit) == ["donld"]
    assert "spellcheck stage degraded" in caplog.text


def test_missing_corpus_stops_synonym_lookup(caplog):
    calls = []
    toolkit = make_toolkit()

    def missing(word, pos):
        calls.append((word, pos))
        raise LookupError("wordnet not found")

    toolkit.synonyms = missing
    with caplog.at_level(logging.WARNING, logger="normalize"):
        assert normalize.synonyms(["goat", "tree"], toolkit) == []
    assert calls == [("goat", "n")]
    assert "synonym stage degraded" in caplog.text
