"""Tree-Sitter Parsing Layer."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from .errors import SourceParseError
from .syntax import SourceLocation

logger = logging.getLogger(__name__)


class ParserFactory(ABC):
    """Abstract factory for obtaining a language parser."""

    @abstractmethod
    def get_parser(self, language: str): ...


class TreeSitterParserFactory(ParserFactory):
    """Concrete factory that delegates to tree-sitter-language-pack."""

    def get_parser(self, language: str):
        import tree_sitter_language_pack as tslp

        return tslp.get_parser(language)


def _first_error(node):
    """Depth-first search for the first ERROR or MISSING node."""
    if node.type == "ERROR" or node.is_missing:
        return node
    if not node.has_error:
        return None
    for child in node.children:
        found = _first_error(child)
        if found is not None:
            return found
    return node


class Parser:
    """Thin wrapper around a parser factory.

    Rejects sources that tree-sitter could only recover from with ERROR or
    MISSING nodes.
    """

    def __init__(self, parser_factory: ParserFactory):
        self._factory = parser_factory

    def parse(self, source: str, language: str):
        parser = self._factory.get_parser(language)
        tree = parser.parse(source.encode("utf-8"))
        bad = _first_error(tree.root_node)
        if bad is not None:
            row, col = bad.start_point
            location = SourceLocation(
                start_line=row + 1,
                start_col=col,
                end_line=bad.end_point[0] + 1,
                end_col=bad.end_point[1],
            )
            what = f"missing {bad.type}" if bad.is_missing else "syntax error"
            logger.warning("Parse failed: %s at %s", what, location)
            raise SourceParseError(f"{what} at line {row + 1}, column {col}", location)
        return tree
