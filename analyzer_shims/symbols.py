"""
analyzer_shims/symbols.py
═════════════════════════

Exported-symbol model of a compiled assembly, as handed over by the compiler
host.

The model is a closed tagged variant: every symbol carries a
:class:`SymbolKind` tag and :class:`SymbolVisitor` dispatches on that tag with
one explicit ``visit_<kind>`` method per node kind.

  AssemblySymbol
    └── NamespaceSymbol (global, name == "")
          ├── NamespaceSymbol ...
          └── NamedTypeSymbol
                └── NamedTypeSymbol (nested, reachable via type_members)

All symbols are frozen dataclasses; a tree is built once per compilation
snapshot and never mutated.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    ClassVar,
    Dict,
    Generic,
    Iterable,
    Iterator,
    List,
    Optional,
    Tuple,
    TypeVar,
    Union,
)

__all__ = [
    "GLOBAL_PREFIX",
    "SymbolKind",
    "NamedTypeSymbol",
    "NamespaceSymbol",
    "AssemblySymbol",
    "Compilation",
    "Symbol",
    "SymbolVisitor",
    "build_namespace_tree",
    "build_assembly",
]

GLOBAL_PREFIX = "global::"

R = TypeVar("R")


class SymbolKind(Enum):
    ASSEMBLY = "assembly"
    NAMESPACE = "namespace"
    NAMED_TYPE = "named_type"


@dataclass(frozen=True)
class NamedTypeSymbol:
    """
    A named type declared in a namespace.

    Attributes
    ----------
    name                 : Simple name, e.g. ``"SA1001UnitTests"``
    containing_namespace : Dotted namespace, ``""`` for the global namespace
    type_members         : Nested types, in declaration order
    containing_type      : Dotted path of enclosing types for nested types
    """
    name: str
    containing_namespace: str = ""
    type_members: Tuple["NamedTypeSymbol", ...] = ()
    containing_type: str = ""

    kind: ClassVar[SymbolKind] = SymbolKind.NAMED_TYPE

    def to_display_string(self, fully_qualified: bool = True) -> str:
        """Render the qualified name; ``global::`` is prepended when *fully_qualified*."""
        text = ".".join(
            part for part in (self.containing_namespace, self.containing_type, self.name)
            if part
        )
        if fully_qualified:
            return GLOBAL_PREFIX + text
        return text

    def get_type_members(self) -> Tuple["NamedTypeSymbol", ...]:
        return self.type_members

    def __str__(self) -> str:
        return self.to_display_string(fully_qualified=False)


@dataclass(frozen=True)
class NamespaceSymbol:
    """A namespace and its direct members (namespaces and top-level types)."""
    name: str = ""
    members: Tuple[Union["NamespaceSymbol", NamedTypeSymbol], ...] = ()
    containing_namespace: str = ""

    kind: ClassVar[SymbolKind] = SymbolKind.NAMESPACE

    @property
    def is_global_namespace(self) -> bool:
        return not self.name

    @property
    def qualified_name(self) -> str:
        if self.containing_namespace:
            return f"{self.containing_namespace}.{self.name}"
        return self.name

    def get_members(self) -> Tuple[Union["NamespaceSymbol", NamedTypeSymbol], ...]:
        return self.members

    def get_namespace_members(self) -> Iterator["NamespaceSymbol"]:
        for member in self.members:
            if member.kind is SymbolKind.NAMESPACE:
                yield member  # type: ignore[misc]

    def get_type_members(self) -> Iterator[NamedTypeSymbol]:
        for member in self.members:
            if member.kind is SymbolKind.NAMED_TYPE:
                yield member  # type: ignore[misc]


@dataclass(frozen=True)
class AssemblySymbol:
    """A referenced (or the current) assembly and its exported namespace tree."""
    name: str
    global_namespace: NamespaceSymbol = field(default_factory=NamespaceSymbol)

    kind: ClassVar[SymbolKind] = SymbolKind.ASSEMBLY


Symbol = Union[AssemblySymbol, NamespaceSymbol, NamedTypeSymbol]


@dataclass(frozen=True)
class Compilation:
    """
    One compilation snapshot as seen by a generator.

    ``assembly_name`` may be ``None`` when the host has not assigned one yet.
    """
    assembly_name: Optional[str]
    references: Tuple[AssemblySymbol, ...] = ()

    def referenced_assembly_named(self, name: str) -> Optional[AssemblySymbol]:
        """Return the first referenced assembly whose name equals *name*."""
        for assembly in self.references:
            if assembly.name == name:
                return assembly
        return None

    def fingerprint(self) -> str:
        """Stable sha256 digest of the assembly name and every referenced symbol tree."""
        digest = hashlib.sha256()
        digest.update(f"compilation:{self.assembly_name or ''}\n".encode("utf-8"))
        for assembly in self.references:
            for line in _fingerprint_lines(assembly):
                digest.update(line.encode("utf-8"))
                digest.update(b"\n")
        return digest.hexdigest()


def _fingerprint_lines(assembly: AssemblySymbol) -> Iterator[str]:
    yield f"assembly:{assembly.name}"
    stack: List[Tuple[int, Symbol]] = [(1, assembly.global_namespace)]
    while stack:
        depth, symbol = stack.pop()
        if symbol.kind is SymbolKind.NAMESPACE:
            yield f"{depth}:namespace:{symbol.name}"
            children = symbol.members  # type: ignore[union-attr]
        else:
            yield f"{depth}:type:{symbol.name}"
            children = symbol.type_members  # type: ignore[union-attr]
        for child in reversed(children):
            stack.append((depth + 1, child))


# ═════════════════════════════════════════════════════════════════════════
#  VISITOR
# ═════════════════════════════════════════════════════════════════════════

_DISPATCH: Dict[SymbolKind, str] = {
    SymbolKind.ASSEMBLY: "visit_assembly",
    SymbolKind.NAMESPACE: "visit_namespace",
    SymbolKind.NAMED_TYPE: "visit_named_type",
}


class SymbolVisitor(Generic[R]):
    """
    Base class for symbol tree walkers.

    ``visit`` dispatches on the symbol's ``kind`` tag.  The per-kind methods
    default to ``default_visit``, which returns ``None``.  Subclasses decide
    whether to recurse; nothing is descended into implicitly.
    """

    def visit(self, symbol: Optional[Symbol]) -> Optional[R]:
        if symbol is None:
            return None
        method = getattr(self, _DISPATCH[symbol.kind])
        return method(symbol)

    def default_visit(self, symbol: Symbol) -> Optional[R]:
        return None

    def visit_assembly(self, symbol: AssemblySymbol) -> Optional[R]:
        return self.default_visit(symbol)

    def visit_namespace(self, symbol: NamespaceSymbol) -> Optional[R]:
        return self.default_visit(symbol)

    def visit_named_type(self, symbol: NamedTypeSymbol) -> Optional[R]:
        return self.default_visit(symbol)


# ═════════════════════════════════════════════════════════════════════════
#  BUILDERS
# ═════════════════════════════════════════════════════════════════════════

def _split_qualified(name: str) -> Tuple[str, str]:
    if name.startswith(GLOBAL_PREFIX):
        name = name[len(GLOBAL_PREFIX):]
    namespace, _, simple = name.rpartition(".")
    return namespace, simple


def build_namespace_tree(qualified_type_names: Iterable[str]) -> NamespaceSymbol:
    """
    Build a global namespace holding a top-level type for every dotted name.

    >>> ns = build_namespace_tree(["A.B.FooUnitTests", "Bar"])
    >>> [t.to_display_string() for t in ns.get_type_members()]
    ['global::Bar']
    """
    # namespace path -> (child namespace names, type names), insertion ordered
    children: Dict[str, Dict[str, None]] = {"": {}}
    types: Dict[str, Dict[str, None]] = {"": {}}

    for qualified in qualified_type_names:
        namespace, simple = _split_qualified(qualified)
        if not simple:
            raise ValueError(f"not a type name: {qualified!r}")
        path = ""
        for part in namespace.split(".") if namespace else ():
            child = f"{path}.{part}" if path else part
            children[path].setdefault(part, None)
            children.setdefault(child, {})
            types.setdefault(child, {})
            path = child
        types[path].setdefault(simple, None)

    def freeze(path: str, name: str, parent: str) -> NamespaceSymbol:
        members: List[Union[NamespaceSymbol, NamedTypeSymbol]] = []
        for part in children[path]:
            child = f"{path}.{part}" if path else part
            members.append(freeze(child, part, path))
        for simple in types[path]:
            members.append(NamedTypeSymbol(name=simple, containing_namespace=path))
        return NamespaceSymbol(name=name, members=tuple(members), containing_namespace=parent)

    return freeze("", "", "")


def build_assembly(name: str, qualified_type_names: Iterable[str]) -> AssemblySymbol:
    """Convenience wrapper: an assembly exporting the given top-level types."""
    return AssemblySymbol(name=name, global_namespace=build_namespace_tree(qualified_type_names))
