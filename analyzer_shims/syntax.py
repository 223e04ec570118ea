"""
analyzer_shims/syntax.py
════════════════════════

Minimal immutable syntax tree contract shared between the host and the lint
rules.  The host parses source files; rules only read nodes, report
diagnostics against node locations, and (for fix providers) return a
rewritten tree.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterator, Optional, Tuple

__all__ = [
    "SourceLocation",
    "SyntaxKind",
    "SyntaxNode",
    "Document",
]


@dataclass(frozen=True)
class SourceLocation:
    """A specific point in source code (1-based line and column)."""
    file: str = ""
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        if self.column:
            return f"{self.file}:{self.line}:{self.column}"
        return f"{self.file}:{self.line}"


class SyntaxKind(Enum):
    """Node kinds the host dispatcher knows about."""
    COMPILATION_UNIT = "CompilationUnit"
    NAMESPACE_DECLARATION = "NamespaceDeclaration"
    CLASS_DECLARATION = "ClassDeclaration"
    METHOD_DECLARATION = "MethodDeclaration"
    PROPERTY_DECLARATION = "PropertyDeclaration"
    EVENT_DECLARATION = "EventDeclaration"
    ACCESSOR_LIST = "AccessorList"
    GET_ACCESSOR_DECLARATION = "GetAccessorDeclaration"
    SET_ACCESSOR_DECLARATION = "SetAccessorDeclaration"
    ADD_ACCESSOR_DECLARATION = "AddAccessorDeclaration"
    REMOVE_ACCESSOR_DECLARATION = "RemoveAccessorDeclaration"
    BLOCK = "Block"


@dataclass(frozen=True)
class SyntaxNode:
    """
    One node of a host syntax tree.

    ``is_missing`` marks nodes the host parser synthesized during error
    recovery (e.g. an accessor list whose braces were never written).
    """
    kind: SyntaxKind
    children: Tuple["SyntaxNode", ...] = ()
    location: SourceLocation = field(default_factory=SourceLocation)
    name: str = ""
    is_missing: bool = False

    def walk(self) -> Iterator["SyntaxNode"]:
        """Pre-order traversal, self first."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def child_of_kind(self, kind: SyntaxKind) -> Optional["SyntaxNode"]:
        for child in self.children:
            if child.kind is kind:
                return child
        return None

    def with_children(self, children: Tuple["SyntaxNode", ...]) -> "SyntaxNode":
        return replace(self, children=tuple(children))

    def replace_node(self, old: "SyntaxNode", new: "SyntaxNode") -> "SyntaxNode":
        """Return a copy of this tree with the first node identical to *old* swapped for *new*."""
        if self is old:
            return new
        for index, child in enumerate(self.children):
            rewritten = child.replace_node(old, new)
            if rewritten is not child:
                children = self.children[:index] + (rewritten,) + self.children[index + 1:]
                return self.with_children(children)
        return self

    def find_node(self, location: SourceLocation, kind: Optional[SyntaxKind] = None) -> Optional["SyntaxNode"]:
        for node in self.walk():
            if node.location == location and (kind is None or node.kind is kind):
                return node
        return None


@dataclass(frozen=True)
class Document:
    """A source file handed to analyzers: its path and parsed root."""
    file_path: str
    root: SyntaxNode

    def with_root(self, root: SyntaxNode) -> "Document":
        return replace(self, root=root)
