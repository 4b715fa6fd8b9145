class CorpusReadError(Exception):
    """Базовая ошибка чтения записи корпуса. Прерывает текущую запись."""


class FormatError(CorpusReadError):
    """Не удалось прочитать обязательный числовой токен (счетчик или logprob)."""


class TreeParseError(CorpusReadError):
    """Скобочная запись дерева не разбирается."""


class TruncationError(CorpusReadError):
    """Строка длиннее настроенного максимума."""

    def __init__(self, limit: int):
        super().__init__(f"Line exceeds maximum length of {limit} characters")
        self.limit = limit


class PrematureEOFError(CorpusReadError, EOFError):
    """Поток закончился там, где ожидался токен или строка."""


class DecompressorError(OSError):
    """
    Внешний декомпрессор не запустился.
    Фатальная ошибка: не перехватывается ни одним read().
    """
