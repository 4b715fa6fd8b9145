import logging
import os
from typing import Callable, List, Optional, TextIO, Tuple, Union

from tqdm import tqdm

from rerank_corpus.config import DEFAULT_ENCODING, MAX_LINE_LENGTH
from rerank_corpus.core.data_structures import SentenceRecord
from rerank_corpus.core.errors import CorpusReadError
from rerank_corpus.core.interfaces import SentenceVisitor
from rerank_corpus.ingestion.decompress import open_decompressed
from rerank_corpus.ingestion.reader import TokenReader

logger = logging.getLogger(__name__)

Source = Union[str, os.PathLike, TextIO]
Visitor = Union[SentenceVisitor, Callable[[SentenceRecord], None]]


def is_filename(source) -> bool:
    return isinstance(source, (str, os.PathLike))


def _read_header(reader: TokenReader) -> Optional[int]:
    try:
        return reader.read_uint("number of sentences")
    except CorpusReadError as e:
        logger.error(f"Failed to read number of sentences at start of file: {e}")
        return None


class Corpus:
    """
    Корпус n-best разборов: упорядоченный список SentenceRecord.

    Формат (ASCII, читается строго сверху вниз):
        <число предложений>
        для каждого предложения:
            <число разборов> <золотое дерево>
            для каждого разбора:
                <logprob> <дерево до конца строки>

    При ошибке корпус хранит уже прочитанный префикс (без отката).
    """

    def __init__(self, sentences: Optional[List[SentenceRecord]] = None):
        self.sentences: List[SentenceRecord] = sentences if sentences is not None else []

    def nsentences(self) -> int:
        return len(self.sentences)

    def __len__(self) -> int:
        return len(self.sentences)

    def __iter__(self):
        return iter(self.sentences)

    def __getitem__(self, i: int) -> SentenceRecord:
        return self.sentences[i]

    def read(self, stream: TextIO, downcase: bool = False, ignore_tree: bool = False,
             max_line_length: Optional[int] = MAX_LINE_LENGTH, scorer=None) -> bool:
        """
        Читает корпус из открытого потока. Поток остается за вызывающим.
        Возвращает True, если прочитаны все заявленные предложения.
        """
        self.sentences = []
        reader = TokenReader(stream, max_line_length)

        nsentences = _read_header(reader)
        if nsentences is None:
            return False

        for i in range(nsentences):
            sentence = SentenceRecord()
            try:
                sentence.read_or_raise(reader, downcase, ignore_tree, scorer)
            except CorpusReadError as e:
                logger.error(f"Reading sentence {i} failed: {e}")
                return False
            self.sentences.append(sentence)

        logger.info(f"Read {nsentences} sentences, {sum(s.nparses() for s in self.sentences)} parses")
        return True

    def read_file(self, filename: Union[str, os.PathLike], downcase: bool = False, ignore_tree: bool = False,
                  max_line_length: Optional[int] = MAX_LINE_LENGTH, encoding: str = DEFAULT_ENCODING,
                  launcher=None) -> bool:
        """Читает корпус из файла (.bz2/.gz распаковываются внешним процессом)."""
        logger.info(f"Reading corpus from {filename}")
        with open_decompressed(filename, encoding=encoding, launcher=launcher) as stream:
            return self.read(stream, downcase, ignore_tree, max_line_length)

    def max_fscores(self) -> List[float]:
        return [sentence.max_fscore for sentence in self.sentences]


def for_each_sentence(source: Source, visitor: Visitor, downcase: bool = False, ignore_tree: bool = False,
                      max_line_length: Optional[int] = MAX_LINE_LENGTH, encoding: str = DEFAULT_ENCODING,
                      show_progress: bool = False, launcher=None, scorer=None) -> Tuple[int, bool]:
    """
    Потоковый обход: каждое прочитанное предложение отдается визитору и не хранится.
    Память не растет с размером корпуса.

    source - открытый поток (закрывает вызывающий) или имя файла
    (открывается и всегда закрывается здесь).
    Возвращает (число обработанных предложений, флаг успеха).
    При ошибке число равно длине прочитанного префикса, флаг - False.
    """
    if is_filename(source):
        with open_decompressed(source, encoding=encoding, launcher=launcher) as stream:
            return for_each_sentence(
                stream, visitor, downcase, ignore_tree,
                max_line_length=max_line_length, show_progress=show_progress, scorer=scorer
            )

    on_sentence = visitor.on_sentence if hasattr(visitor, "on_sentence") else visitor
    reader = TokenReader(source, max_line_length)

    nsentences = _read_header(reader)
    if nsentences is None:
        return 0, False

    processed = 0
    with tqdm(total=nsentences, desc="sentences", unit="sent", disable=not show_progress) as bar:
        for i in range(nsentences):
            sentence = SentenceRecord()
            try:
                sentence.read_or_raise(reader, downcase, ignore_tree, scorer)
            except CorpusReadError as e:
                logger.error(f"Reading sentence {i} failed: {e}")
                return processed, False

            on_sentence(sentence)
            processed += 1
            bar.update(1)

    return processed, True
