"""
analyzer_shims/ordering_rules.py
════════════════════════════════

Ordering rules.

SA1213 — Event accessors must follow order
──────────────────────────────────────────
A violation occurs when an ``add`` accessor is placed after a ``remove``
accessor within an event.  To comply, the ``add`` accessor appears first::

    public event EventHandler NameChanged
    {
        remove { this.nameChanged -= value; }   // SA1213 reported here
        add { this.nameChanged += value; }
    }
"""

from __future__ import annotations

import logging
from typing import ClassVar, FrozenSet, Optional

from analyzer_shims.checkers import (
    AnalysisContext,
    CodeFixProvider,
    Diagnostic,
    DiagnosticAnalyzer,
    DiagnosticDescriptor,
    DiagnosticSeverity,
    SyntaxNodeAnalysisContext,
)
from analyzer_shims.syntax import Document, SyntaxKind, SyntaxNode

logger = logging.getLogger(__name__)

__all__ = [
    "SA1213EventAccessorsMustFollowOrder",
    "SA1213CodeFixProvider",
]


def _misordered_accessor_list(event_declaration: SyntaxNode) -> Optional[SyntaxNode]:
    """Return the event's accessor list when it holds remove-then-add."""
    accessor_list = event_declaration.child_of_kind(SyntaxKind.ACCESSOR_LIST)
    if accessor_list is None or accessor_list.is_missing:
        return None

    accessors = accessor_list.children
    if len(accessors) != 2:
        return None

    first, second = accessors
    if (first.kind is SyntaxKind.REMOVE_ACCESSOR_DECLARATION
            and second.kind is SyntaxKind.ADD_ACCESSOR_DECLARATION):
        return accessor_list
    return None


class SA1213EventAccessorsMustFollowOrder(DiagnosticAnalyzer):
    """An add accessor appears after a remove accessor within an event."""

    DIAGNOSTIC_ID: ClassVar[str] = "SA1213"

    DESCRIPTOR: ClassVar[DiagnosticDescriptor] = DiagnosticDescriptor(
        id=DIAGNOSTIC_ID,
        title="Event accessors must follow order",
        message_format="Event accessors must follow order.",
        category="StyleCop.CSharp.OrderingRules",
        default_severity=DiagnosticSeverity.WARNING,
        is_enabled_by_default=False,
        description="An add accessor appears after a remove accessor within an event.",
        help_link="http://www.stylecop.com/docs/SA1213.html",
    )

    supported_diagnostics = (DESCRIPTOR,)

    def initialize(self, context: AnalysisContext) -> None:
        context.register_syntax_node_action(self._handle_event_declaration, SyntaxKind.EVENT_DECLARATION)

    def _handle_event_declaration(self, context: SyntaxNodeAnalysisContext) -> None:
        accessor_list = _misordered_accessor_list(context.node)
        if accessor_list is None:
            return
        remove_accessor = accessor_list.children[0]
        context.report_diagnostic(Diagnostic.create(self.DESCRIPTOR, remove_accessor.location))


class SA1213CodeFixProvider(CodeFixProvider):
    """Moves the add accessor in front of the remove accessor."""

    fixable_diagnostic_ids: ClassVar[FrozenSet[str]] = frozenset(
        {SA1213EventAccessorsMustFollowOrder.DIAGNOSTIC_ID}
    )

    def get_fixed_document(self, document: Document, diagnostic: Diagnostic) -> Optional[Document]:
        remove_accessor = document.root.find_node(
            diagnostic.location, SyntaxKind.REMOVE_ACCESSOR_DECLARATION
        )
        if remove_accessor is None:
            logger.debug("SA1213 fix: no remove accessor at %s", diagnostic.location)
            return None

        for node in document.root.walk():
            if node.kind is not SyntaxKind.EVENT_DECLARATION:
                continue
            accessor_list = _misordered_accessor_list(node)
            if accessor_list is None or accessor_list.children[0] is not remove_accessor:
                continue
            remove, add = accessor_list.children
            fixed_list = accessor_list.with_children((add, remove))
            return document.with_root(document.root.replace_node(accessor_list, fixed_list))
        return None
