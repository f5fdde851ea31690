#!/usr/bin/env python3
"""
Statement-line discovery for Lua sources.

The grammar is a black box exposing three things: parse text into a tree,
walk every node of a tree, and report a node's 1-based source line. Only
the resulting set of lines matters, so walk order is irrelevant.
"""

from typing import Callable, Iterable, Optional, Set

from luaparser import ast, astnodes
from luaparser.ast import SyntaxException

from coverage_errors import SourceParseError


class LuaGrammar:
    """Grammar collaborator backed by luaparser."""

    def parse(self, text: str):
        try:
            return ast.parse(text)
        except (SyntaxException, RecursionError) as e:
            raise SourceParseError(f"parse failed: {e}") from e

    def walk(self, tree):
        return ast.walk(tree)

    def line_of(self, node) -> Optional[int]:
        # Chunk, Block and Comment nodes do not host a statement.
        if not isinstance(node, (astnodes.Statement, astnodes.Expression)):
            return None
        return getattr(node, "line", None)


def collect_lines(nodes: Iterable, line_of: Callable) -> Set[int]:
    lines = set()
    for node in nodes:
        if node is None:
            continue
        line = line_of(node)
        if line is not None:
            lines.add(line)
    return lines


def statement_lines(text: str, grammar=None) -> Set[int]:
    """Return the set of lines the grammar considers executable."""
    grammar = grammar or LuaGrammar()
    tree = grammar.parse(text)
    return collect_lines(grammar.walk(tree), grammar.line_of)
