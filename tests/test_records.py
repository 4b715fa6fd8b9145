import copy
import io
import unittest
from types import SimpleNamespace

import numpy as np

from rerank_corpus.core.data_structures import ParseRecord, SentenceRecord
from rerank_corpus.evaluation.brackets import PrecRec
from rerank_corpus.ingestion.reader import TokenReader

GOLD = "(S1 (S (NP (DT The) (NN dog)) (VP (VBZ barks)) (. .)))"
CANDIDATE = "(S1 (S (NP (DT The)) (VP (NN dog) (VBZ barks)) (. .)))"


class StubScorer:
    """Возвращает заранее заданные счетчики вместо настоящего сравнения скобок."""

    def __init__(self, gold_nedges, results):
        self.gold_nedges = gold_nedges
        self.results = iter(results)

    def gold_edge_set(self, gold):
        return SimpleNamespace(nedges=self.gold_nedges)

    def score(self, gold_edges, candidate):
        ntest, ncommon = next(self.results)
        return PrecRec(ngold=gold_edges.nedges, ntest=ntest, ncommon=ncommon)


def reader_for(text: str) -> TokenReader:
    return TokenReader(io.StringIO(text))


class TestParseRecord(unittest.TestCase):
    def test_read(self):
        parse = ParseRecord()
        ok = parse.read(reader_for(f"-42.75 {CANDIDATE}\n"))

        self.assertTrue(ok)
        self.assertEqual(parse.logprob, -42.75)
        self.assertEqual(parse.tree.label(), "S1")
        # Оценку проставляет предложение, не сам разбор
        self.assertEqual((parse.nedges, parse.ncorrect, parse.f_score), (0, 0, 0.0))

    def test_read_ignore_tree(self):
        reader = reader_for(f"-1.0 {CANDIDATE}\n-2.0 {CANDIDATE}\n")
        parse = ParseRecord()

        self.assertTrue(parse.read(reader, ignore_tree=True))
        self.assertIsNone(parse.tree)
        self.assertTrue(parse.read(reader, ignore_tree=True))
        self.assertEqual(parse.logprob, -2.0)

    def test_read_failures(self):
        self.assertFalse(ParseRecord().read(reader_for("oops (S1 (NN a))\n")))
        self.assertFalse(ParseRecord().read(reader_for("-1.0 (S1 (NN a)\n")))
        self.assertFalse(ParseRecord().read(reader_for("-1.0\n")))

    def test_copy_is_deep(self):
        parse = ParseRecord()
        parse.read(reader_for(f"-1.0 {CANDIDATE}\n"))

        clone = copy.copy(parse)
        parse.tree[0].set_label("X")

        self.assertIsNot(clone.tree, parse.tree)
        self.assertEqual(clone.tree[0].label(), "S")


class TestSentenceRecord(unittest.TestCase):
    def test_read_and_score(self):
        text = f"2 {GOLD}\n-10.5 {GOLD}\n-11.25 {CANDIDATE}\n"
        sentence = SentenceRecord()

        self.assertTrue(sentence.read(reader_for(text)))
        self.assertEqual(sentence.nparses(), 2)
        self.assertEqual(sentence.gold_nedges, 3)
        self.assertEqual(sentence.f_score(0), 1.0)
        self.assertAlmostEqual(sentence.f_score(1), 1 / 3, places=4)
        self.assertEqual(sentence.max_fscore, 1.0)
        self.assertEqual((sentence.parses[1].nedges, sentence.parses[1].ncorrect), (3, 1))

        pr = sentence.precrec(1)
        self.assertEqual((pr.ngold, pr.ntest, pr.ncommon), (3, 3, 1))

    def test_f_score_from_counts(self):
        scorer = StubScorer(gold_nedges=10, results=[(8, 6)])
        sentence = SentenceRecord()

        sentence.read(reader_for(f"1 {GOLD}\n-1.0 {CANDIDATE}\n"), scorer=scorer)

        self.assertAlmostEqual(sentence.f_score(0), 0.6667, places=4)
        self.assertEqual(sentence.parses[0].nedges, 8)
        self.assertEqual(sentence.parses[0].ncorrect, 6)

    def test_f_score_stored_as_float32(self):
        scorer = StubScorer(gold_nedges=10, results=[(8, 6)])
        sentence = SentenceRecord()

        sentence.read(reader_for(f"1 {GOLD}\n-1.0 {CANDIDATE}\n"), scorer=scorer)

        # 12/18 сужается до float32: совпадает с эталоном побитно, с float64 - до 1e-7
        self.assertEqual(sentence.f_score(0), float(np.float32(12 / 18)))
        self.assertEqual(sentence.max_fscore, float(np.float32(12 / 18)))
        self.assertAlmostEqual(sentence.f_score(0), 12 / 18, delta=1e-7)

    def test_max_fscore_any_order(self):
        # f = 2*c / (t + 10): (10, 2) -> 0.2, (10, 9) -> 0.9, (10, 5) -> 0.5
        counts = {0.2: (10, 2), 0.9: (10, 9), 0.5: (10, 5)}
        text = f"3 {GOLD}\n" + f"-1.0 {CANDIDATE}\n" * 3

        for order in [(0.2, 0.9, 0.5), (0.9, 0.5, 0.2), (0.5, 0.2, 0.9)]:
            scorer = StubScorer(gold_nedges=10, results=[counts[f] for f in order])
            sentence = SentenceRecord()
            sentence.read(reader_for(text), scorer=scorer)
            self.assertAlmostEqual(sentence.max_fscore, 0.9, places=6)

    def test_zero_parses(self):
        sentence = SentenceRecord()

        self.assertTrue(sentence.read(reader_for(f"0 {GOLD}\n")))
        self.assertEqual(sentence.nparses(), 0)
        self.assertEqual(sentence.max_fscore, 0.0)
        self.assertEqual(sentence.gold_nedges, 3)

    def test_gold_on_next_line(self):
        sentence = SentenceRecord()
        self.assertTrue(sentence.read(reader_for(f"1\n{GOLD}\n-3.0 {GOLD}\n")))
        self.assertEqual(sentence.max_fscore, 1.0)

    def test_failed_candidate_aborts_sentence(self):
        text = f"3 {GOLD}\n-1.0 {GOLD}\n-2.0 {CANDIDATE}\n"
        sentence = SentenceRecord()

        with self.assertLogs("rerank_corpus.core.data_structures", level="ERROR") as logs:
            ok = sentence.read(reader_for(text))

        self.assertFalse(ok)
        self.assertTrue(any("parse tree 2" in line for line in logs.output))
        # Частично прочитанного предложения не остается
        self.assertEqual(sentence.nparses(), 0)
        self.assertIsNone(sentence.gold)

    def test_ignore_tree(self):
        sentence = SentenceRecord()

        self.assertTrue(sentence.read(reader_for(f"1 {GOLD}\n-7.5 {CANDIDATE}\n"), ignore_tree=True))
        self.assertIsNone(sentence.gold)
        self.assertEqual(sentence.parses[0].logprob, -7.5)
        self.assertEqual(sentence.max_fscore, 0.0)
        with self.assertRaises(ValueError):
            sentence.precrec(0)

    def test_copy_isolation(self):
        sentence = SentenceRecord()
        sentence.read(reader_for(f"1 {GOLD}\n-1.0 {CANDIDATE}\n"))

        clone = sentence.copy()
        deep = copy.deepcopy(sentence)
        del sentence

        self.assertEqual(clone.gold.label(), "S1")
        self.assertEqual(clone.gold.leaves(), ["The", "dog", "barks", "."])
        self.assertIsNot(clone.gold, deep.gold)
        self.assertIsNot(clone.parses[0].tree, deep.parses[0].tree)
        self.assertEqual(clone, deep)


if __name__ == '__main__':
    unittest.main()
