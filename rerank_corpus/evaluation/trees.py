import logging

from nltk.tree import Tree

from rerank_corpus.core.errors import TreeParseError

logger = logging.getLogger(__name__)


def parse_tree(line: str, downcase: bool = False) -> Tree:
    """
    Разбирает одно дерево в скобочной записи, например "(S1 (S (NP (DT The)) ...))".
    При downcase терминалы приводятся к нижнему регистру (метки не трогаем).
    """
    text = line.strip()
    if not text:
        raise TreeParseError("Empty tree line")

    try:
        tree = Tree.fromstring(text)
    except ValueError as e:
        raise TreeParseError(f"Malformed bracketing: {e}") from e

    # Строка без скобок превращается в лист, а не в дерево
    if not isinstance(tree, Tree):
        raise TreeParseError(f"Not a bracketed tree: {text[:80]!r}")

    if downcase:
        lowercase_leaves(tree)
    return tree


def lowercase_leaves(tree: Tree) -> Tree:
    for position in tree.treepositions('leaves'):
        tree[position] = tree[position].lower()
    return tree


def copy_tree(tree: Tree) -> Tree:
    return tree.copy(deep=True) if tree is not None else None


def is_preterminal(node) -> bool:
    return isinstance(node, Tree) and len(node) == 1 and isinstance(node[0], str)
