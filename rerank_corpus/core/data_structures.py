import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional

import numpy as np
from nltk.tree import Tree

from rerank_corpus.core.errors import CorpusReadError
from rerank_corpus.evaluation.brackets import BracketScorer, PrecRec, f_score
from rerank_corpus.evaluation.trees import copy_tree, parse_tree
from rerank_corpus.ingestion.reader import TokenReader

logger = logging.getLogger(__name__)

default_scorer = BracketScorer()


@dataclass
class ParseRecord:
    """
    Один разбор из n-best списка. Владеет своим деревом:
    любое копирование записи копирует дерево глубоко.
    Поля оценки (nedges, ncorrect, f_score) заполняет SentenceRecord.
    """
    logprob: float = 0.0
    tree: Optional[Tree] = None
    nedges: int = 0  # скобок в разборе
    ncorrect: int = 0  # из них совпало с золотом
    f_score: float = 0.0

    def read(self, reader: TokenReader, downcase: bool = False, ignore_tree: bool = False) -> bool:
        try:
            self.read_or_raise(reader, downcase, ignore_tree)
        except CorpusReadError as e:
            logger.error(f"Reading parse failed: {e}")
            return False
        return True

    def read_or_raise(self, reader: TokenReader, downcase: bool = False, ignore_tree: bool = False) -> None:
        # Старое дерево освобождаем до чтения: при ошибке не останется чужих данных
        self.tree = None
        self.nedges = self.ncorrect = 0
        self.f_score = 0.0

        self.logprob = reader.read_float("parse log probability")
        if ignore_tree:
            reader.skip_line()
        else:
            self.tree = parse_tree(reader.read_line("parse tree"), downcase)

    def copy(self) -> "ParseRecord":
        return replace(self, tree=copy_tree(self.tree))

    def __copy__(self):
        return self.copy()

    def __deepcopy__(self, memo):
        return self.copy()


@dataclass
class SentenceRecord:
    """
    Предложение: золотое дерево + n-best разборы.
    max_fscore - максимум f_score по разборам (0, если разборов нет).
    """
    gold: Optional[Tree] = None
    gold_nedges: int = 0
    max_fscore: float = 0.0
    parses: List[ParseRecord] = field(default_factory=list)

    def nparses(self) -> int:
        return len(self.parses)

    def f_score(self, i: int) -> float:
        return self.parses[i].f_score

    def precrec(self, i: int, scorer: Optional[BracketScorer] = None) -> PrecRec:
        """Заново сравнивает разбор i с золотом."""
        if self.gold is None:
            raise ValueError("Sentence has no gold tree (read with ignore_tree?)")
        if not 0 <= i < self.nparses():
            raise IndexError(f"Parse index {i} out of range 0..{self.nparses() - 1}")

        scorer = scorer or default_scorer
        return scorer.score(scorer.gold_edge_set(self.gold), self.parses[i].tree)

    def read(self, reader: TokenReader, downcase: bool = False, ignore_tree: bool = False,
             scorer: Optional[BracketScorer] = None) -> bool:
        try:
            self.read_or_raise(reader, downcase, ignore_tree, scorer)
        except CorpusReadError as e:
            logger.error(f"Reading sentence failed: {e}")
            return False
        return True

    def read_or_raise(self, reader: TokenReader, downcase: bool = False, ignore_tree: bool = False,
                      scorer: Optional[BracketScorer] = None) -> None:
        scorer = scorer or default_scorer
        # Поля записи меняются только после успешного чтения всего предложения
        self.gold = None
        self.gold_nedges = 0
        self.max_fscore = 0.0
        self.parses = []

        nparses = reader.read_uint("number of parses")
        gold = None
        gold_edges = None
        gold_nedges = 0
        if ignore_tree:
            reader.skip_line()
        else:
            gold = parse_tree(reader.read_line("gold tree"), downcase)
            gold_edges = scorer.gold_edge_set(gold)
            gold_nedges = gold_edges.nedges

        parses = []
        max_fscore = 0.0
        for i in range(nparses):
            parse = ParseRecord()
            try:
                parse.read_or_raise(reader, downcase, ignore_tree)
            except CorpusReadError as e:
                logger.error(f"Reading parse tree {i} failed: {e}")
                raise

            if gold_edges is not None:
                pr = scorer.score(gold_edges, parse.tree)
                parse.nedges = pr.ntest
                parse.ncorrect = pr.ncommon
                # f-score хранится с точностью float32, как в эталонных выходах
                parse.f_score = float(np.float32(f_score(pr.ncommon, pr.ntest, gold_nedges)))
                max_fscore = max(max_fscore, parse.f_score)

            parses.append(parse)

        self.gold = gold
        self.gold_nedges = gold_nedges
        self.max_fscore = max_fscore
        self.parses = parses

    def copy(self) -> "SentenceRecord":
        return replace(
            self,
            gold=copy_tree(self.gold),
            parses=[parse.copy() for parse in self.parses]
        )

    def __copy__(self):
        return self.copy()

    def __deepcopy__(self, memo):
        return self.copy()
