from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rerank_corpus.core.data_structures import SentenceRecord


class SentenceVisitor(ABC):
    @abstractmethod
    def on_sentence(self, sentence: "SentenceRecord") -> None:
        """
        Вызывается для каждого только что прочитанного SentenceRecord.
        Визитор может сохранить запись: загрузчик не переиспользует объекты.
        """
        pass
