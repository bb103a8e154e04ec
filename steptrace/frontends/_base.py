"""BaseFrontend: language-agnostic tree-sitter AST → syntax node conversion."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable

from ..syntax import (
    NO_SOURCE_LOCATION,
    BlockStatement,
    Comment,
    CommentKind,
    Node,
    Program,
    SourceLocation,
    UnsupportedNode,
)

logger = logging.getLogger(__name__)


class Frontend(ABC):
    @abstractmethod
    def convert(self, tree, source: bytes) -> Program: ...


class BaseFrontend(Frontend):
    """Base class for deterministic tree-sitter frontends.

    Subclasses populate ``_STMT_DISPATCH`` and ``_EXPR_DISPATCH`` tables.
    Constructs with no handler become ``UnsupportedNode`` so that they are
    only rejected if execution actually reaches them.
    """

    # ── overridable constants ────────────────────────────────────

    COMMENT_TYPES: frozenset[str] = frozenset({"comment"})
    NOISE_TYPES: frozenset[str] = frozenset({"empty_statement", "\n"})

    LINE_COMMENT_PREFIX: str = "//"
    BLOCK_COMMENT_OPEN: str = "/*"
    BLOCK_COMMENT_CLOSE: str = "*/"

    # ── init ─────────────────────────────────────────────────────

    def __init__(self):
        self._source: bytes = b""
        self._STMT_DISPATCH: dict[str, Callable[..., Node]] = {}
        self._EXPR_DISPATCH: dict[str, Callable[..., Node]] = {}

    # ── helpers ──────────────────────────────────────────────────

    def _node_text(self, node) -> str:
        return self._source[node.start_byte : node.end_byte].decode("utf-8")

    def _source_loc(self, node) -> SourceLocation:
        if node is None:
            return NO_SOURCE_LOCATION
        s, e = node.start_point, node.end_point
        return SourceLocation(
            start_line=s[0] + 1,
            start_col=s[1],
            end_line=e[0] + 1,
            end_col=e[1],
        )

    def _named_children(self, node) -> list:
        """Named children with comments filtered out."""
        return [
            c for c in node.children if c.is_named and c.type not in self.COMMENT_TYPES
        ]

    def _unsupported(self, node) -> UnsupportedNode:
        logger.debug("No handler for %s at line %d", node.type, node.start_point[0] + 1)
        return UnsupportedNode(
            type=node.type, loc=self._source_loc(node), text=self._node_text(node)
        )

    # ── entry point ──────────────────────────────────────────────

    def convert(self, tree, source: bytes) -> Program:
        self._source = source
        root = tree.root_node
        return Program(
            body=self._convert_statements(root),
            comments=self._collect_comments(root),
            loc=self._source_loc(root),
        )

    # ── dispatchers ──────────────────────────────────────────────

    def _convert_statements(self, node) -> list[Node]:
        """Convert every statement child of a program or block."""
        return [
            self._convert_stmt(child)
            for child in node.children
            if child.is_named
            and child.type not in self.COMMENT_TYPES
            and child.type not in self.NOISE_TYPES
        ]

    def _convert_block(self, node) -> BlockStatement:
        return BlockStatement(
            body=self._convert_statements(node), loc=self._source_loc(node)
        )

    def _convert_stmt(self, node) -> Node:
        handler = self._STMT_DISPATCH.get(node.type)
        if handler:
            return handler(node)
        return self._unsupported(node)

    def _convert_expr(self, node) -> Node:
        handler = self._EXPR_DISPATCH.get(node.type)
        if handler:
            return handler(node)
        return self._unsupported(node)

    # ── comments ─────────────────────────────────────────────────

    def _collect_comments(self, root) -> list[Comment]:
        comments: list[Comment] = []
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type in self.COMMENT_TYPES:
                comments.append(self._convert_comment(node))
                continue
            stack.extend(reversed(node.children))
        return comments

    def _convert_comment(self, node) -> Comment:
        text = self._node_text(node)
        if text.startswith(self.BLOCK_COMMENT_OPEN):
            value = text[len(self.BLOCK_COMMENT_OPEN) :]
            if value.endswith(self.BLOCK_COMMENT_CLOSE):
                value = value[: -len(self.BLOCK_COMMENT_CLOSE)]
            kind = CommentKind.BLOCK
        else:
            value = text[len(self.LINE_COMMENT_PREFIX) :]
            kind = CommentKind.LINE
        return Comment(kind=kind, value=value, loc=self._source_loc(node))
