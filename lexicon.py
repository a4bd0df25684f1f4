from __future__ import annotations

"""Known-word list used by the spellchecker.

The lexicon is loaded once at startup from a newline-delimited word list and
never changes afterwards.  It answers one question only: is this word known?
"""

import logging
from pathlib import Path
from typing import FrozenSet, Iterable, Iterator, Optional, Union

from errors import ResourceLoadError

logger = logging.getLogger(__name__)

DEFAULT_PATH = Path(__file__).parent / "data" / "dictionary.dic"


class Lexicon:
    """Immutable, case-insensitive set of known words."""

    __slots__ = ("_words",)

    def __init__(self, words: Iterable[str] = ()):
        self._words: FrozenSet[str] = frozenset(
            w.strip().lower() for w in words if w and w.strip()
        )

    def __contains__(self, word: object) -> bool:
        if not isinstance(word, str):
            return False
        return word.lower() in self._words

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._words))

    def __len__(self) -> int:
        return len(self._words)

    def __repr__(self) -> str:
        return f"Lexicon({len(self._words)} words)"


def load_lexicon(path: Optional[Union[str, Path]] = None) -> Lexicon:
    """Read a word list with one word per line and no header.

    Args:
        path: Word list location. Defaults to ``data/dictionary.dic``.

    Returns:
        The loaded :class:`Lexicon`.

    Raises:
        ResourceLoadError: the file is missing or not valid UTF-8 text.
    """
    path = Path(path) if path is not None else DEFAULT_PATH
    try:
        with open(path, "r", encoding="utf-8") as f:
            lexicon = Lexicon(line for line in f)
    except (OSError, UnicodeDecodeError) as exc:
        raise ResourceLoadError(f"cannot read lexicon {path}: {exc}") from exc

    if not len(lexicon):
        logger.warning(f"Lexicon {path} is empty; every long token will be spellchecked")
    logger.debug(f"Loaded {len(lexicon)} lexicon words from {path}")
    return lexicon
