import logging
from typing import TYPE_CHECKING, Any, Dict

from rerank_corpus.core.interfaces import SentenceVisitor
from rerank_corpus.evaluation.brackets import PrecRec

if TYPE_CHECKING:
    from rerank_corpus.core.data_structures import SentenceRecord

logger = logging.getLogger(__name__)


class CorpusStatistics(SentenceVisitor):
    """
    Агрегаты по корпусу за один потоковый проход.
    Используются только счетчики, уже посчитанные при чтении
    (nedges/ncorrect/gold_nedges) - деревья повторно не разбираются.
    """

    def __init__(self):
        self.nsentences = 0
        self.nparses = 0
        self.sum_max_fscore = 0.0
        # Оракул: лучший по f-score разбор каждого предложения
        self.oracle = PrecRec()
        # Разбор с максимальным logprob (ответ самого парсера)
        self.one_best = PrecRec()

    def on_sentence(self, sentence: "SentenceRecord") -> None:
        self.nsentences += 1
        self.nparses += sentence.nparses()
        self.sum_max_fscore += sentence.max_fscore

        oracle = PrecRec(ngold=sentence.gold_nedges)
        one_best = PrecRec(ngold=sentence.gold_nedges)
        if sentence.parses:
            best = max(sentence.parses, key=lambda p: p.f_score)
            top = max(sentence.parses, key=lambda p: p.logprob)
            oracle.ntest, oracle.ncommon = best.nedges, best.ncorrect
            one_best.ntest, one_best.ncommon = top.nedges, top.ncorrect

        self.oracle += oracle
        self.one_best += one_best

    @property
    def mean_parses(self) -> float:
        return self.nparses / self.nsentences if self.nsentences else 0.0

    @property
    def mean_max_fscore(self) -> float:
        return self.sum_max_fscore / self.nsentences if self.nsentences else 0.0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "sentences": self.nsentences,
            "parses": self.nparses,
            "mean_parses": self.mean_parses,
            "mean_max_fscore": self.mean_max_fscore,
            "oracle_fscore": self.oracle.f_score(),
            "one_best_fscore": self.one_best.f_score(),
            "one_best_precision": self.one_best.precision(),
            "one_best_recall": self.one_best.recall(),
        }
