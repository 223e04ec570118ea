"""analyzer_shims/symbol_dump.py – S-expression symbol dumps → symbol model.

Hosts that run generators out of process hand over referenced assemblies
as an s-expression dump.  This module converts the output of
``sexpdata.loads`` into the frozen symbol tree of
:mod:`analyzer_shims.symbols`, and renders a tree back.

Surface syntax
--------------
::

    (compilation "<assembly-name>"
      (assembly "<name>"
        (namespace "<name>"
          (namespace "<name>" ...)
          (type "<name>"
            (type "<nested-name>")))
        (type "<type-in-global-namespace>")))

Every list is dispatched on its head symbol to a ``_load_<tag>`` helper.
Shapes are validated strictly; anything unexpected raises
:class:`SymbolDumpError`.
"""

from __future__ import annotations

from typing import Any, List, Optional, Tuple, Union

import sexpdata
from sexpdata import Symbol

from analyzer_shims.symbols import (
    AssemblySymbol,
    Compilation,
    NamedTypeSymbol,
    NamespaceSymbol,
    SymbolKind,
)

__all__ = [
    "SymbolDumpError",
    "load_assembly",
    "load_compilation",
    "dump_assembly",
    "dump_compilation",
]

Sexp = Any  # Union[list, Symbol, str, int, float]


class SymbolDumpError(ValueError):
    """Raised when a dump cannot be mapped to a symbol tree."""

    def __init__(self, message: str, form: Sexp = None) -> None:
        if form is not None:
            message = f"{message}: {form!r}"
        super().__init__(message)


# ═══════════════════════════════════════════════════════════════════════
#  Helpers
# ═══════════════════════════════════════════════════════════════════════

def _sym_name(s: Sexp) -> str:
    if isinstance(s, Symbol):
        value = getattr(s, "value", None)
        return value() if callable(value) else str(s)
    raise SymbolDumpError(f"Expected symbol, got {type(s).__name__}", s)


def _head(s: Sexp) -> str:
    if not isinstance(s, list) or not s:
        raise SymbolDumpError("Expected a non-empty list form", s)
    return _sym_name(s[0])


def _expect_name(form: list, tag: str) -> str:
    if len(form) < 2 or isinstance(form[1], (list, Symbol)) or not isinstance(form[1], str):
        raise SymbolDumpError(f"({tag} ...) requires a string name", form)
    return form[1]


def _parse(text: str) -> Sexp:
    try:
        return sexpdata.loads(text)
    except Exception as exc:
        raise SymbolDumpError(f"Malformed s-expression ({exc})") from exc


# ═══════════════════════════════════════════════════════════════════════
#  Loading
# ═══════════════════════════════════════════════════════════════════════

def _load_type(form: list, namespace: str, outer: str) -> NamedTypeSymbol:
    name = _expect_name(form, "type")
    nested_outer = f"{outer}.{name}" if outer else name
    nested = []
    for child in form[2:]:
        if _head(child) != "type":
            raise SymbolDumpError("Only (type ...) forms may be nested in a type", child)
        nested.append(_load_type(child, namespace, nested_outer))
    return NamedTypeSymbol(
        name=name,
        containing_namespace=namespace,
        type_members=tuple(nested),
        containing_type=outer,
    )


def _load_members(
    forms: List[Sexp],
    qualified: str,
) -> Tuple[Union[NamespaceSymbol, NamedTypeSymbol], ...]:
    members: List[Union[NamespaceSymbol, NamedTypeSymbol]] = []
    for child in forms:
        tag = _head(child)
        if tag == "namespace":
            members.append(_load_namespace(child, qualified))
        elif tag == "type":
            members.append(_load_type(child, qualified, ""))
        else:
            raise SymbolDumpError(f"Unexpected ({tag} ...) inside a namespace", child)
    return tuple(members)


def _load_namespace(form: list, parent: str) -> NamespaceSymbol:
    name = _expect_name(form, "namespace")
    if not name or "." in name:
        raise SymbolDumpError("Namespace names are single non-empty segments", form)
    qualified = f"{parent}.{name}" if parent else name
    return NamespaceSymbol(
        name=name,
        members=_load_members(form[2:], qualified),
        containing_namespace=parent,
    )


def _load_assembly_form(form: Sexp) -> AssemblySymbol:
    if _head(form) != "assembly":
        raise SymbolDumpError("Expected (assembly ...)", form)
    name = _expect_name(form, "assembly")
    return AssemblySymbol(
        name=name,
        global_namespace=NamespaceSymbol(name="", members=_load_members(form[2:], "")),
    )


def load_assembly(text: str) -> AssemblySymbol:
    """Parse one ``(assembly ...)`` form."""
    return _load_assembly_form(_parse(text))


def load_compilation(text: str) -> Compilation:
    """Parse a ``(compilation ...)`` form; the name may be omitted."""
    form = _parse(text)
    if _head(form) != "compilation":
        raise SymbolDumpError("Expected (compilation ...)", form)

    rest = form[1:]
    assembly_name: Optional[str] = None
    if rest and isinstance(rest[0], str) and not isinstance(rest[0], Symbol):
        assembly_name = rest[0]
        rest = rest[1:]
    return Compilation(
        assembly_name=assembly_name,
        references=tuple(_load_assembly_form(child) for child in rest),
    )


# ═══════════════════════════════════════════════════════════════════════
#  Dumping
# ═══════════════════════════════════════════════════════════════════════

def _type_form(symbol: NamedTypeSymbol) -> list:
    return [Symbol("type"), symbol.name] + [_type_form(t) for t in symbol.type_members]


def _member_forms(namespace: NamespaceSymbol) -> list:
    forms = []
    for member in namespace.get_members():
        if member.kind is SymbolKind.NAMESPACE:
            forms.append([Symbol("namespace"), member.name] + _member_forms(member))  # type: ignore[arg-type]
        else:
            forms.append(_type_form(member))  # type: ignore[arg-type]
    return forms


def _assembly_form(assembly: AssemblySymbol) -> list:
    return [Symbol("assembly"), assembly.name] + _member_forms(assembly.global_namespace)


def dump_assembly(assembly: AssemblySymbol) -> str:
    return sexpdata.dumps(_assembly_form(assembly))


def dump_compilation(compilation: Compilation) -> str:
    form: list = [Symbol("compilation")]
    if compilation.assembly_name is not None:
        form.append(compilation.assembly_name)
    form.extend(_assembly_form(a) for a in compilation.references)
    return sexpdata.dumps(form)
