import logging
import os
import subprocess
from pathlib import Path
from typing import Callable, List, Optional, TextIO, Union

from rerank_corpus.config import DECOMPRESSORS, DEFAULT_DECOMPRESSOR, DEFAULT_ENCODING
from rerank_corpus.core.errors import DecompressorError

logger = logging.getLogger(__name__)


def decompressor_command(filename: Union[str, os.PathLike]) -> List[str]:
    """
    Выбирает команду распаковки по суффиксу файла (без учета регистра):
    .bz2 -> bzip2, .gz -> gzip, остальное -> cat (как есть).
    """
    # Суффикс - всё от последней точки имени, включая дотфайлы вида ".bz2"
    name = os.path.basename(os.fspath(filename))
    dot = name.rfind(".")
    suffix = name[dot:].lower() if dot >= 0 else ""
    return DECOMPRESSORS.get(suffix, DEFAULT_DECOMPRESSOR) + [os.fspath(filename)]


class DecompressionSource:
    """
    Распакованный текстовый поток из внешнего процесса.

    Процесс запускается в конструкторе и гарантированно закрывается
    (stdout закрыт, процесс дождались) в close(), которую вызывает __exit__.
    """

    def __init__(
            self,
            filename: Union[str, Path],
            encoding: str = DEFAULT_ENCODING,
            launcher: Optional[Callable[..., subprocess.Popen]] = None
    ):
        self.filename = str(filename)
        self.command = decompressor_command(filename)
        launcher = launcher or subprocess.Popen

        logger.debug(f"Opening {self.filename} via: {' '.join(self.command)}")
        try:
            self.process = launcher(
                self.command,
                stdout=subprocess.PIPE,
                text=True,
                encoding=encoding
            )
        except OSError as e:
            logger.error(f"Could not launch decompressor for {self.filename}: {e}")
            raise DecompressorError(f"Could not launch '{self.command[0]}' for {self.filename}") from e

        self.stream: TextIO = self.process.stdout
        self._closed = False

    def close(self) -> Optional[int]:
        if self._closed:
            return self.process.returncode
        self._closed = True

        try:
            self.stream.close()
        finally:
            returncode = self.process.wait()

        # Ненулевой код после раннего закрытия (SIGPIPE) - обычное дело
        if returncode != 0:
            logger.warning(f"Decompressor '{self.command[0]}' for {self.filename} exited with status {returncode}")
        return returncode

    def __enter__(self) -> TextIO:
        return self.stream

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def open_decompressed(filename: Union[str, Path], encoding: str = DEFAULT_ENCODING,
                      launcher=None) -> DecompressionSource:
    """Открывает файл корпуса; использовать как `with open_decompressed(path) as stream:`."""
    return DecompressionSource(filename, encoding=encoding, launcher=launcher)
