from .config import ReaderConfig, load_config
from .core.data_structures import ParseRecord, SentenceRecord
from .core.errors import (
    CorpusReadError,
    DecompressorError,
    FormatError,
    PrematureEOFError,
    TreeParseError,
    TruncationError,
)
from .core.interfaces import SentenceVisitor
from .evaluation.brackets import BracketScorer, EdgeSet, PrecRec
from .evaluation.statistics import CorpusStatistics
from .evaluation.trees import parse_tree
from .ingestion.decompress import open_decompressed
from .ingestion.loader import Corpus, for_each_sentence
from .ingestion.reader import TokenReader
from .pipeline import RerankerDataPipeline
