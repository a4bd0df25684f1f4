"""Response service: the engine behind one request/response boundary.

The service loads the lexicon and the lookup tree once, then answers any
number of requests.  Loading can run on a background worker thread; requests
arriving meanwhile wait on the ready event and never see a half-built tree.
The service also remembers the last reply it sent, process-wide, for callers
that do not track it themselves.
"""

from __future__ import annotations

import logging
import os
import random
import threading
from pathlib import Path
from typing import Callable, Optional

import lexicon as lexicon_mod
import lookup
import tree
from errors import (
    ConfigurationError,
    NotReadyError,
    ReplyTreeError,
    ResourceLoadError,
)
from lexicon import Lexicon
from lookup import LookupTree
from toolkit import Toolkit, default_toolkit

logger = logging.getLogger(__name__)

TREE_PATH = Path(os.environ.get("REPLY_TREE_CSV", lookup.DEFAULT_PATH))
LEXICON_PATH = Path(os.environ.get("REPLY_TREE_LEXICON", lexicon_mod.DEFAULT_PATH))
READY_TIMEOUT = float(os.environ.get("REPLY_TREE_READY_TIMEOUT", "30"))
SEED = os.environ.get("REPLY_TREE_SEED")

# Returned instead of an empty reply when the tree is missing a branch.
CONFIGURATION_ERROR_REPLY = "Sorry, I am not configured to answer that."


class ResponseService:
    """Owns the loaded resources and the process-wide last reply."""

    def __init__(
        self,
        tree_path: Optional[Path] = None,
        lexicon_path: Optional[Path] = None,
        toolkit_factory: Callable[[Lexicon], Toolkit] = default_toolkit,
        rng: Optional[random.Random] = None,
        ready_timeout: Optional[float] = None,
    ):
        self.tree_path = Path(tree_path) if tree_path is not None else TREE_PATH
        self.lexicon_path = (
            Path(lexicon_path) if lexicon_path is not None else LEXICON_PATH
        )
        self.toolkit_factory = toolkit_factory
        if rng is None:
            rng = random.Random(int(SEED)) if SEED else random.Random()
        self.rng = rng
        self.ready_timeout = READY_TIMEOUT if ready_timeout is None else ready_timeout

        self.tree: Optional[LookupTree] = None
        self.lexicon: Optional[Lexicon] = None
        self.toolkit: Optional[Toolkit] = None

        self._ready = threading.Event()
        self._error: Optional[ReplyTreeError] = None
        self._lock = threading.Lock()
        self._last_reply = ""
        self._worker: Optional[threading.Thread] = None

    @property
    def ready(self) -> bool:
        return self._ready.is_set() and self._error is None

    @property
    def last_reply(self) -> str:
        return self._last_reply

    def _load(self) -> None:
        try:
            lexicon = lexicon_mod.load_lexicon(self.lexicon_path)
            lookup_tree = lookup.load_tree(self.tree_path)
            toolkit = self.toolkit_factory(lexicon)
        except ReplyTreeError as exc:
            logger.error(f"startup failed: {exc}")
            self._error = exc
        except Exception as exc:
            logger.exception("toolkit construction failed")
            self._error = ResourceLoadError(f"cannot build toolkit: {exc}")
        else:
            self.lexicon = lexicon
            self.tree = lookup_tree
            self.toolkit = toolkit
            logger.info(f"Reply tree ready ({len(lookup_tree)} nodes, {len(lexicon)} words)")
        finally:
            self._ready.set()

    def start(self, background: bool = False) -> "ResponseService":
        """Load resources, optionally on a daemon worker thread.

        In the foreground a load failure is raised here; in the background it
        is raised to the first caller of :meth:`wait_ready`.
        """
        if background:
            self._worker = threading.Thread(
                target=self._load, daemon=True, name="reply-tree-loader"
            )
            self._worker.start()
            return self
        self._load()
        return self.wait_ready()

    def wait_ready(self, timeout: Optional[float] = None) -> "ResponseService":
        timeout = self.ready_timeout if timeout is None else timeout
        if not self._ready.wait(timeout):
            raise NotReadyError("reply tree is still loading")
        if self._error is not None:
            raise self._error
        return self

    def answer(self, text: Optional[str], last_reply: Optional[str] = None) -> str:
        """Return one reply to *text*.

        Args:
            text: Raw user input; ``None`` counts as empty.
            last_reply: Previous reply for this conversation.  ``None`` uses
                the process-wide value.
        """
        self.wait_ready()
        if last_reply is None:
            last_reply = self._last_reply
        try:
            reply = tree.select(
                self.tree,
                text or "",
                last_reply,
                lexicon=self.lexicon,
                toolkit=self.toolkit,
                rng=self.rng,
            )
        except ConfigurationError:
            logger.exception("lookup tree misconfigured")
            return CONFIGURATION_ERROR_REPLY
        with self._lock:
            self._last_reply = reply
        return reply


_default: Optional[ResponseService] = None
_default_lock = threading.Lock()


def get_service() -> ResponseService:
    """Return the process-wide service, starting it on first use."""
    global _default
    with _default_lock:
        if _default is None:
            _default = ResponseService().start()
        return _default


def answer(text: Optional[str], last_reply: Optional[str] = None) -> str:
    return get_service().answer(text, last_reply)


def main(argv=None) -> None:
    import sys

    logging.basicConfig(level=logging.INFO)
    args = list(sys.argv[1:] if argv is None else argv)
    service = get_service()
    if args and args[0] == "--tree":
        print(service.tree.render())
        return
    user_input = " ".join(args) if args else input("> ")
    print(service.answer(user_input))


if __name__ == "__main__":  # pragma: no cover - manual exercise
    main()
