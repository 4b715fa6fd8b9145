import logging
from collections import Counter
from dataclasses import dataclass
from typing import Tuple

from nltk.tree import Tree

from rerank_corpus.config import EQUIVALENT_LABELS, PUNCTUATION_TAGS, ROOT_LABELS
from rerank_corpus.evaluation.trees import is_preterminal

logger = logging.getLogger(__name__)

Edge = Tuple[str, int, int]  # (label, left, right)


@dataclass
class PrecRec:
    """
    Счетчики PARSEVAL: скобки в золоте, в кандидате и общие.
    Складываются через +=, что дает метрики уровня корпуса.
    """
    ngold: int = 0
    ntest: int = 0
    ncommon: int = 0

    def precision(self) -> float:
        return self.ncommon / self.ntest if self.ntest > 0 else 0.0

    def recall(self) -> float:
        return self.ncommon / self.ngold if self.ngold > 0 else 0.0

    def f_score(self) -> float:
        return f_score(self.ncommon, self.ntest, self.ngold)

    def __iadd__(self, other: "PrecRec") -> "PrecRec":
        self.ngold += other.ngold
        self.ntest += other.ntest
        self.ncommon += other.ncommon
        return self


def f_score(ncommon: int, ntest: int, ngold: int) -> float:
    """F1 = 2*common / (test + gold); 0, если обе стороны пусты."""
    total = ntest + ngold
    return 2.0 * ncommon / total if total > 0 else 0.0


def normalize_label(label: str) -> str:
    """
    NP-SBJ-1 -> NP, NP=2 -> NP. Метки вида -NONE-, -LRB- не трогаем.
    """
    if not label.startswith("-"):
        label = label.split("-")[0].split("=")[0]
    return EQUIVALENT_LABELS.get(label, label)


class EdgeSet:
    """Мультимножество помеченных составляющих (label, left, right) одного дерева."""

    def __init__(self, tree: Tree):
        self.edges: Counter = Counter()
        self._collect(tree, 0, is_root=True)

    def _collect(self, node, position: int, is_root: bool = False) -> int:
        if isinstance(node, str):
            return position + 1

        if is_preterminal(node):
            # Пунктуация и пустые элементы не занимают позиций
            if node.label() in PUNCTUATION_TAGS:
                return position
            return position + 1

        start = position
        for child in node:
            position = self._collect(child, position)

        if position > start and not (is_root and node.label() in ROOT_LABELS):
            self.edges[(normalize_label(node.label()), start, position)] += 1
        return position

    @property
    def nedges(self) -> int:
        return sum(self.edges.values())

    def common(self, other: "EdgeSet") -> int:
        return sum((self.edges & other.edges).values())


class BracketScorer:
    """
    Сравнение кандидата с золотом по скобкам.
    Золотое множество скобок считается один раз на предложение.
    """

    def gold_edge_set(self, gold: Tree) -> EdgeSet:
        return EdgeSet(gold)

    def score(self, gold_edges: EdgeSet, candidate: Tree) -> PrecRec:
        test_edges = EdgeSet(candidate)
        return PrecRec(
            ngold=gold_edges.nedges,
            ntest=test_edges.nedges,
            ncommon=gold_edges.common(test_edges)
        )
