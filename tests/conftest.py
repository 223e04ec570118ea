# tests/conftest.py
"""
Shared fixtures and builders for the analyzer_shims / testmirror test suite.
"""

import pytest

from analyzer_shims.cancellation import CancellationToken
from analyzer_shims.symbols import Compilation, build_assembly
from analyzer_shims.syntax import Document, SourceLocation, SyntaxKind, SyntaxNode
from testmirror.config import GeneratorConfig


# ─── Assembly names ──────────────────────────────────────────────────────

ROOT = "StyleCop.Analyzers.Test"
CSHARP7 = "StyleCop.Analyzers.Test.CSharp7"
CSHARP8 = "StyleCop.Analyzers.Test.CSharp8"
CSHARP9 = "StyleCop.Analyzers.Test.CSharp9"

SMALL_CONFIG = GeneratorConfig(product="Product")
SMALL_ROOT = "Product.Test"


# ─── Previous-tier exports ───────────────────────────────────────────────

BASELINE_TYPES = [
    "StyleCop.Analyzers.Test.SpacingRules.SA1000UnitTests",
    "StyleCop.Analyzers.Test.SpacingRules.SA1001UnitTests",
    "StyleCop.Analyzers.Test.OrderingRules.SA1213UnitTests",
    "StyleCop.Analyzers.Test.Helpers.DiagnosticVerifier",
]

CSHARP7_TYPES = [
    "StyleCop.Analyzers.Test.CSharp7.OrderingRules.SA1213CSharp7UnitTests",
    "StyleCop.Analyzers.Test.CSharp7.SpacingRules.SA1000CSharp7UnitTests",
    "StyleCop.Analyzers.Test.CSharp7.Lightup.TupleHelpers",
]


def compilation(name, *references):
    """Compilation named *name* referencing ``(assembly_name, [types])`` pairs."""
    return Compilation(
        assembly_name=name,
        references=tuple(build_assembly(asm, types) for asm, types in references),
    )


def baseline_compilation():
    return compilation(CSHARP7, (ROOT, BASELINE_TYPES))


def csharp8_compilation():
    return compilation(CSHARP8, (CSHARP7, CSHARP7_TYPES), (ROOT, BASELINE_TYPES))


# ─── Syntax builders ─────────────────────────────────────────────────────

def accessor(kind, line, column=9):
    return SyntaxNode(kind=kind, location=SourceLocation("Foo.cs", line, column))


def event_declaration(*accessors, line=5, missing_list=False):
    accessor_list = SyntaxNode(
        kind=SyntaxKind.ACCESSOR_LIST,
        children=tuple(accessors),
        location=SourceLocation("Foo.cs", line + 1, 5),
        is_missing=missing_list,
    )
    return SyntaxNode(
        kind=SyntaxKind.EVENT_DECLARATION,
        children=(accessor_list,),
        location=SourceLocation("Foo.cs", line, 5),
        name="NameChanged",
    )


def document_with(*members, file_path="Foo.cs"):
    cls = SyntaxNode(
        kind=SyntaxKind.CLASS_DECLARATION,
        children=tuple(members),
        location=SourceLocation(file_path, 3, 1),
        name="Foo",
    )
    root = SyntaxNode(kind=SyntaxKind.COMPILATION_UNIT, children=(cls,))
    return Document(file_path=file_path, root=root)


def remove_then_add(line=5):
    return event_declaration(
        accessor(SyntaxKind.REMOVE_ACCESSOR_DECLARATION, line + 2),
        accessor(SyntaxKind.ADD_ACCESSOR_DECLARATION, line + 3),
        line=line,
    )


def add_then_remove(line=5):
    return event_declaration(
        accessor(SyntaxKind.ADD_ACCESSOR_DECLARATION, line + 2),
        accessor(SyntaxKind.REMOVE_ACCESSOR_DECLARATION, line + 3),
        line=line,
    )


# ─── Fixtures ────────────────────────────────────────────────────────────

@pytest.fixture
def token():
    return CancellationToken()


@pytest.fixture
def canceled_token():
    t = CancellationToken()
    t.cancel()
    return t
