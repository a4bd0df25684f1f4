"""Lookup tree for canned replies.

The tree has a fixed shape::

    root
    └── category      "q" (question) or "s" (statement)
        └── sentiment "p" (non-negative) or "n" (negative)
            └── topic a lowercase word, or "" for the fallback bucket
                └── leaf  a reply string (lowercased only when one word)

Nodes live in an arena: every node is an integer id, and children are lists
of ids.  A ``(parent, label)`` index keeps child lookup constant time.  The
tree is built once from CSV rows and frozen before it answers anything.
"""

from __future__ import annotations

import csv
import logging
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from errors import ConfigurationError, ResourceLoadError

logger = logging.getLogger(__name__)

DEFAULT_PATH = Path(__file__).parent / "data" / "treeinput.csv"

ROOT = 0
CATEGORIES = ("q", "s")
SENTIMENTS = ("p", "n")
FALLBACK = ""


class NodeKind(Enum):
    ROOT = "root"
    CATEGORY = "category"
    SENTIMENT = "sentiment"
    TOPIC = "topic"
    LEAF = "leaf"


class LookupTree:
    """Arena-backed n-ary tree of labelled nodes."""

    def __init__(self):
        self._labels: List[str] = ["root"]
        self._kinds: List[NodeKind] = [NodeKind.ROOT]
        self._children: List[List[int]] = [[]]
        self._index: Dict[Tuple[int, str], int] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __len__(self) -> int:
        return len(self._labels)

    def insert(self, parent: int, label: str, kind: NodeKind) -> int:
        """Return the child of *parent* named *label*, creating it if needed."""
        if self._frozen:
            raise ConfigurationError("lookup tree is read-only after construction")
        existing = self._index.get((parent, label))
        if existing is not None:
            return existing
        node = len(self._labels)
        self._labels.append(label)
        self._kinds.append(kind)
        self._children.append([])
        self._children[parent].append(node)
        self._index[(parent, label)] = node
        return node

    def freeze(self) -> "LookupTree":
        self._frozen = True
        return self

    def child(self, node: int, label: str) -> Optional[int]:
        return self._index.get((node, label))

    def children(self, node: int) -> List[int]:
        return list(self._children[node])

    def label(self, node: int) -> str:
        return self._labels[node]

    def kind(self, node: int) -> NodeKind:
        return self._kinds[node]

    def leaves(self, node: int) -> List[str]:
        """Labels of the direct children of *node*, in insertion order."""
        return [self._labels[c] for c in self._children[node]]

    def structure(self, node: int = ROOT) -> Dict[str, dict]:
        """Nested ``label -> subtree`` mapping that ignores sibling order."""
        return {
            self._labels[c]: self.structure(c) for c in self._children[node]
        }

    def to_dict(self) -> Dict[str, list]:
        return {
            "labels": list(self._labels),
            "kinds": [k.value for k in self._kinds],
            "children": [list(c) for c in self._children],
        }

    def render(self) -> str:
        """Depth-first listing, one dot of indent per level below the root."""
        lines: List[str] = []
        stack = [(ROOT, 0)]
        while stack:
            node, depth = stack.pop()
            lines.append("." * depth + self._labels[node])
            for c in reversed(self._children[node]):
                stack.append((c, depth + 1))
        return "\n".join(lines)


def _normalize_cell(cell: str) -> str:
    """Trim a cell and lowercase it when it holds exactly one word."""
    text = (cell or "").strip()
    if len(text.split()) == 1:
        text = text.lower()
    return text


def _parse_row(row: Sequence[str], number: int) -> Tuple[str, str, str, List[str]]:
    cells = [c if c is not None else "" for c in row]
    # Only reply columns may trail off blank; a blank topic is the fallback.
    while len(cells) > 3 and not cells[-1].strip():
        cells.pop()
    if len(cells) < 3:
        raise ConfigurationError(
            f"row {number}: expected at least category, sentiment and topic"
        )

    category = _normalize_cell(cells[0])
    sentiment = _normalize_cell(cells[1])
    topic = _normalize_cell(cells[2])
    replies = [_normalize_cell(c) for c in cells[3:] if c.strip()]

    if category not in CATEGORIES:
        raise ConfigurationError(f"row {number}: unknown category {cells[0]!r}")
    if sentiment not in SENTIMENTS:
        raise ConfigurationError(f"row {number}: unknown sentiment {cells[1]!r}")
    if len(topic.split()) > 1:
        raise ConfigurationError(f"row {number}: topic {cells[2]!r} is not a single word")
    return category, sentiment, topic, replies


def build_tree(rows: Iterable[Sequence[str]]) -> LookupTree:
    """Build and freeze a lookup tree from tabular rows.

    Each row is ``[category, sentiment, topic, reply, ...]``; the reply columns
    may be absent, leaving a topic with no replies.  Rows whose first cell is
    blank are skipped; every other row must follow the schema.

    Raises:
        ConfigurationError: a row is malformed, or a category/sentiment pair
            has no fallback bucket.
    """
    tree = LookupTree()
    for number, row in enumerate(rows, start=1):
        if not row or not (row[0] or "").strip():
            continue
        category, sentiment, topic, replies = _parse_row(row, number)
        node = tree.insert(ROOT, category, NodeKind.CATEGORY)
        node = tree.insert(node, sentiment, NodeKind.SENTIMENT)
        node = tree.insert(node, topic, NodeKind.TOPIC)
        for reply in replies:
            tree.insert(node, reply, NodeKind.LEAF)

    for category_node in tree.children(ROOT):
        for sentiment_node in tree.children(category_node):
            fallback = tree.child(sentiment_node, FALLBACK)
            if fallback is None or not tree.children(fallback):
                raise ConfigurationError(
                    f"no fallback replies under {tree.label(category_node)!r}/"
                    f"{tree.label(sentiment_node)!r}"
                )

    logger.debug(f"Built lookup tree with {len(tree)} nodes")
    return tree.freeze()


def load_tree(path: Optional[Union[str, Path]] = None) -> LookupTree:
    """Read a CSV file and build the lookup tree from its rows.

    Raises:
        ResourceLoadError: the file cannot be read or parsed as CSV.
        ConfigurationError: the rows violate the tree schema.
    """
    path = Path(path) if path is not None else DEFAULT_PATH
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            rows = list(csv.reader(f))
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise ResourceLoadError(f"cannot read lookup tree {path}: {exc}") from exc

    logger.info(f"Loaded {len(rows)} rows from {path}")
    return build_tree(rows)
