import json
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.table import Table

from rerank_corpus.evaluation.statistics import CorpusStatistics

# F-score-метрики показываем еще и в процентах
PERCENT_METRICS = {"mean_max_fscore", "oracle_fscore", "one_best_fscore", "one_best_precision", "one_best_recall"}


def build_table(stats: CorpusStatistics, title: str = "n-best corpus") -> Table:
    table = Table(title=title)
    table.add_column("Метрика", style="cyan")
    table.add_column("Значение", style="green")

    for key, value in stats.as_dict().items():
        if isinstance(value, float):
            if key in PERCENT_METRICS:
                table.add_row(key, f"{value:.4f} ({value * 100:.2f}%)")
            else:
                table.add_row(key, f"{value:.4f}")
        else:
            table.add_row(key, str(value))
    return table


def render_statistics(stats: CorpusStatistics, console: Optional[Console] = None,
                      title: str = "n-best corpus") -> Table:
    """Показать статистику корпуса в таблице."""
    console = console or Console()
    table = build_table(stats, title)
    console.print(table)
    return table


def save_statistics(stats: CorpusStatistics, output_path: Union[str, Path], corpus_name: str):
    """Сохранить статистику в JSON."""
    results = {
        "corpus": corpus_name,
        "metrics": stats.as_dict()
    }

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(results, f, indent=2, ensure_ascii=False)
