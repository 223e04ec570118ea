# tests/test_ordering_rules.py
"""
Tests for SA1213 (event accessors must follow order) and its code fix.
"""

import pytest

from analyzer_shims.checkers import (
    AnalyzerDriver,
    AnalyzerRegistry,
    Diagnostic,
    DiagnosticSeverity,
    apply_code_fix,
)
from analyzer_shims.ordering_rules import (
    SA1213CodeFixProvider,
    SA1213EventAccessorsMustFollowOrder,
)
from analyzer_shims.syntax import SourceLocation, SyntaxKind
from tests.conftest import (
    accessor,
    add_then_remove,
    document_with,
    event_declaration,
    remove_then_add,
)


ENABLED = {"SA1213": "warning"}


def _analyze(document, options=ENABLED):
    registry = AnalyzerRegistry()
    registry.register(SA1213EventAccessorsMustFollowOrder)
    return AnalyzerDriver(registry, options=options).run(document).diagnostics


def _accessor_kinds(document):
    return [
        node.kind for node in document.root.walk()
        if node.kind in (SyntaxKind.ADD_ACCESSOR_DECLARATION, SyntaxKind.REMOVE_ACCESSOR_DECLARATION)
    ]


class TestDescriptor:

    def test_metadata(self):
        desc = SA1213EventAccessorsMustFollowOrder.DESCRIPTOR
        assert desc.id == "SA1213"
        assert desc.title == "Event accessors must follow order"
        assert desc.category == "StyleCop.CSharp.OrderingRules"
        assert desc.default_severity is DiagnosticSeverity.WARNING
        assert desc.help_link.endswith("SA1213.html")

    def test_disabled_by_default(self):
        assert _analyze(document_with(remove_then_add()), options={}) == []


class TestAnalyzer:

    def test_remove_then_add_reported_at_remove(self):
        (diag,) = _analyze(document_with(remove_then_add(line=5)))
        assert diag.id == "SA1213"
        assert diag.location == SourceLocation("Foo.cs", 7, 9)
        assert diag.message == "Event accessors must follow order."

    def test_add_then_remove_is_fine(self):
        assert _analyze(document_with(add_then_remove())) == []

    @pytest.mark.parametrize("accessors", [
        (SyntaxKind.REMOVE_ACCESSOR_DECLARATION,),
        (SyntaxKind.REMOVE_ACCESSOR_DECLARATION, SyntaxKind.ADD_ACCESSOR_DECLARATION,
         SyntaxKind.ADD_ACCESSOR_DECLARATION),
        (SyntaxKind.REMOVE_ACCESSOR_DECLARATION, SyntaxKind.REMOVE_ACCESSOR_DECLARATION),
        (),
    ], ids=["single", "three", "two_removes", "empty"])
    def test_non_pair_lists_ignored(self, accessors):
        event = event_declaration(*(accessor(k, 7 + i) for i, k in enumerate(accessors)))
        assert _analyze(document_with(event)) == []

    def test_missing_accessor_list_ignored(self):
        event = event_declaration(
            accessor(SyntaxKind.REMOVE_ACCESSOR_DECLARATION, 7),
            accessor(SyntaxKind.ADD_ACCESSOR_DECLARATION, 8),
            missing_list=True,
        )
        assert _analyze(document_with(event)) == []

    def test_each_event_checked(self):
        diags = _analyze(document_with(remove_then_add(line=5), add_then_remove(line=12), remove_then_add(line=20)))
        assert [d.location.line for d in diags] == [7, 22]


class TestCodeFix:

    def test_swaps_accessors(self):
        document = document_with(remove_then_add())
        (diag,) = _analyze(document)
        fixed = apply_code_fix(SA1213CodeFixProvider(), document, diag)
        assert _accessor_kinds(fixed) == [
            SyntaxKind.ADD_ACCESSOR_DECLARATION,
            SyntaxKind.REMOVE_ACCESSOR_DECLARATION,
        ]
        assert _analyze(fixed) == []

    def test_original_document_untouched(self):
        document = document_with(remove_then_add())
        (diag,) = _analyze(document)
        apply_code_fix(SA1213CodeFixProvider(), document, diag)
        assert _accessor_kinds(document)[0] is SyntaxKind.REMOVE_ACCESSOR_DECLARATION

    def test_fixes_only_the_reported_event(self):
        document = document_with(remove_then_add(line=5), remove_then_add(line=20))
        first, second = _analyze(document)
        fixed = apply_code_fix(SA1213CodeFixProvider(), document, second)
        remaining = _analyze(fixed)
        assert [d.location for d in remaining] == [first.location]

    def test_swap_reuses_accessor_nodes(self):
        event = remove_then_add()
        accessor_list = event.children[0]
        remove, add = accessor_list.children
        document = document_with(event)
        (diag,) = _analyze(document)
        fixed = SA1213CodeFixProvider().get_fixed_document(document, diag)
        fixed_list = fixed.root.find_node(accessor_list.location, SyntaxKind.ACCESSOR_LIST)
        assert fixed_list.children[0] is add
        assert fixed_list.children[1] is remove

    def test_already_ordered_event_returns_none(self):
        document = document_with(add_then_remove(line=5))
        diag = Diagnostic.create(
            SA1213EventAccessorsMustFollowOrder.DESCRIPTOR, SourceLocation("Foo.cs", 8, 9),
        )
        assert SA1213CodeFixProvider().get_fixed_document(document, diag) is None

    def test_stale_location_returns_none(self):
        document = document_with(add_then_remove())
        diag = Diagnostic.create(
            SA1213EventAccessorsMustFollowOrder.DESCRIPTOR, SourceLocation("Foo.cs", 99, 1),
        )
        assert SA1213CodeFixProvider().get_fixed_document(document, diag) is None
        assert apply_code_fix(SA1213CodeFixProvider(), document, diag) is document
