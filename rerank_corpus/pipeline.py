import logging
import os
from typing import Optional, TextIO, Tuple, Union

from rich.console import Console

from rerank_corpus.config import ReaderConfig
from rerank_corpus.evaluation.statistics import CorpusStatistics
from rerank_corpus.ingestion.loader import Corpus, for_each_sentence, is_filename
from rerank_corpus.reporting import render_statistics

logger = logging.getLogger(__name__)


class RerankerDataPipeline:
    """
    Главный класс-оркестратор.
    Связывает конфигурацию чтения, загрузчик корпуса и подсчет статистики.
    """

    def __init__(self, config: Optional[ReaderConfig] = None, launcher=None):
        self.config = config or ReaderConfig()
        # launcher подменяется в тестах вместо subprocess.Popen
        self.launcher = launcher
        logger.info(f"Initializing pipeline with downcase={self.config.downcase}, "
                    f"ignore_trees={self.config.ignore_trees}")

    def load(self, source: Union[str, os.PathLike, TextIO]) -> Tuple[Corpus, bool]:
        """
        Полная загрузка корпуса в память.
        Возвращает корпус (при ошибке - прочитанный префикс) и флаг успеха.
        """
        corpus = Corpus()
        cfg = self.config
        if is_filename(source):
            ok = corpus.read_file(
                source, cfg.downcase, cfg.ignore_trees,
                max_line_length=cfg.max_line_length, encoding=cfg.encoding, launcher=self.launcher
            )
        else:
            ok = corpus.read(source, cfg.downcase, cfg.ignore_trees, max_line_length=cfg.max_line_length)

        if not ok:
            logger.warning(f"Corpus read incomplete: kept {corpus.nsentences()} sentences")
        return corpus, ok

    def summarize(self, source: Union[str, os.PathLike, TextIO]) -> Tuple[CorpusStatistics, bool]:
        """
        Статистика за один потоковый проход, без хранения предложений.
        При ошибке статистика покрывает только прочитанный префикс, флаг - False.
        """
        cfg = self.config
        stats = CorpusStatistics()
        processed, ok = for_each_sentence(
            source, stats, cfg.downcase, cfg.ignore_trees,
            max_line_length=cfg.max_line_length,
            encoding=cfg.encoding,
            show_progress=cfg.show_progress,
            launcher=self.launcher
        )
        if ok:
            logger.info(f"Processed {processed} sentences")
        else:
            logger.warning(f"Corpus read incomplete: statistics cover {processed} sentences")
        return stats, ok

    def report(self, stats: CorpusStatistics, console: Optional[Console] = None):
        return render_statistics(stats, console)
