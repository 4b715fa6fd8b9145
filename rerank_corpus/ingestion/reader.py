import logging
import re
from typing import Optional, TextIO

from rerank_corpus.config import MAX_LINE_LENGTH
from rerank_corpus.core.errors import FormatError, PrematureEOFError, TruncationError

logger = logging.getLogger(__name__)

_UINT_RE = re.compile(r"\+?\d+", re.ASCII)
# Формат %lf из C: десятичная запись с экспонентой, inf/nan
_FLOAT_RE = re.compile(
    r"[+-]?((\d+\.?\d*|\.\d+)([eE][+-]?\d+)?|inf(inity)?|nan)",
    re.ASCII | re.IGNORECASE
)


class TokenReader:
    """
    Последовательное чтение токенов и строк из текстового потока.

    Поток читается построчно, без произвольного доступа: каждый вызов
    потребляет ровно те символы, которые ему нужны. Строки не обрезаются:
    если строка длиннее max_line_length, бросается TruncationError.
    """

    def __init__(self, stream: TextIO, max_line_length: Optional[int] = MAX_LINE_LENGTH):
        self.stream = stream
        self.max_line_length = max_line_length
        self.line_number = 0
        self._line = ""
        self._pos = 0

    def _next_line(self) -> bool:
        limit = -1 if self.max_line_length is None else self.max_line_length + 1
        line = self.stream.readline(limit)
        if not line:
            return False

        if self.max_line_length is not None and len(line.rstrip("\r\n")) > self.max_line_length:
            raise TruncationError(self.max_line_length)

        self.line_number += 1
        self._line = line
        self._pos = 0
        return True

    def _skip_whitespace(self) -> bool:
        """Пропускает пробелы и переводы строк. False - конец потока."""
        while True:
            line = self._line
            while self._pos < len(line) and line[self._pos].isspace():
                self._pos += 1
            if self._pos < len(line):
                return True
            if not self._next_line():
                return False

    def _read_token(self, what: str) -> str:
        if not self._skip_whitespace():
            raise PrematureEOFError(f"End of stream while reading {what} (line {self.line_number})")

        line = self._line
        start = self._pos
        while self._pos < len(line) and not line[self._pos].isspace():
            self._pos += 1
        return line[start:self._pos]

    def read_uint(self, what: str = "count") -> int:
        token = self._read_token(what)
        if not _UINT_RE.fullmatch(token):
            raise FormatError(f"Expected unsigned integer for {what}, got {token!r} (line {self.line_number})")
        return int(token)

    def read_float(self, what: str = "score") -> float:
        token = self._read_token(what)
        if not _FLOAT_RE.fullmatch(token):
            raise FormatError(f"Expected float for {what}, got {token!r} (line {self.line_number})")
        return float(token)

    def read_line(self, what: str = "line") -> str:
        """
        Возвращает остаток строки после пропуска пробелов (без перевода строки).
        Как fscanf(" ") + fgets: пробелы пропускаются и через границы строк.
        """
        if not self._skip_whitespace():
            raise PrematureEOFError(f"End of stream while reading {what} (line {self.line_number})")

        rest = self._line[self._pos:]
        self._line = ""
        self._pos = 0
        return rest.rstrip("\r\n")

    def skip_line(self) -> None:
        """Пропускает пробелы и отбрасывает остаток строки. Конец потока - не ошибка."""
        if self._skip_whitespace():
            self._line = ""
            self._pos = 0
