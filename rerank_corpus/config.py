import logging
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, model_validator

logger = logging.getLogger(__name__)

# Максимальная длина строки с деревом (в символах).
# Длиннее - TruncationError, а не молчаливое обрезание.
MAX_LINE_LENGTH = 1_000_000

DEFAULT_ENCODING = "utf-8"

# Внешние декомпрессоры по суффиксу файла (сравнение без учета регистра).
# Всё, что не попало в словарь, читается как есть через DEFAULT_DECOMPRESSOR.
DECOMPRESSORS = {
    ".bz2": ["bzip2", "-dc"],
    ".gz": ["gzip", "-dc"],
}
DEFAULT_DECOMPRESSOR = ["cat"]

# Метки корневого узла, который не считается составляющей при оценке
ROOT_LABELS = {"", "ROOT", "S1", "TOP"}

# Препретерминалы, удаляемые из цепочки перед подсчетом скобок (как в EVALB)
PUNCTUATION_TAGS = {",", ":", ".", "``", "''", "-NONE-"}

# Метки, которые считаются одинаковыми (PRT == ADVP)
EQUIVALENT_LABELS = {
    "PRT": "ADVP",
}


class ReaderConfig(BaseModel):
    """
    Параметры чтения корпуса n-best разборов.
    """
    downcase: bool = False  # приводить терминалы к нижнему регистру
    ignore_trees: bool = False  # не разбирать деревья, только заголовки
    max_line_length: Optional[int] = MAX_LINE_LENGTH
    encoding: str = DEFAULT_ENCODING
    show_progress: bool = False

    @model_validator(mode='after')
    def check_line_length(self):
        if self.max_line_length is not None and self.max_line_length <= 0:
            raise ValueError(f"max_line_length must be positive, got {self.max_line_length}")
        return self


def load_config(path: Union[str, Path]) -> ReaderConfig:
    """
    Загружает ReaderConfig из YAML.
    Берется секция `reader:`, если она есть, иначе весь документ.
    """
    with open(path, 'r', encoding=DEFAULT_ENCODING) as f:
        raw = yaml.safe_load(f) or {}

    section = raw.get("reader", raw) if isinstance(raw, dict) else {}
    logger.debug(f"Loaded reader config from {path}: {section}")
    return ReaderConfig(**section)
