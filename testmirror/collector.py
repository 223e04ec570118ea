"""
testmirror/collector.py
=======================

Walks the previous tier's exported symbol tree and collects the
fully-qualified names of the test classes to mirror.

Naming test per tier:

* baseline successor — the simple name ends with ``UnitTests``
* any other tier     — the simple name contains the previous tier token

Only top-level types of each namespace are considered; nested types are
never descended into, and types declared directly in the global namespace
are skipped.
"""

from __future__ import annotations

import logging
from typing import FrozenSet, Optional

from analyzer_shims.cancellation import CancellationToken, throw_if_canceled
from analyzer_shims.symbols import (
    AssemblySymbol,
    Compilation,
    NamedTypeSymbol,
    NamespaceSymbol,
    SymbolKind,
    SymbolVisitor,
)
from testmirror.config import DEFAULT_CONFIG, GeneratorConfig
from testmirror.version_chain import VersionChain

__all__ = [
    "TestClassCollector",
    "collect_candidates",
]

logger = logging.getLogger(__name__)

_EMPTY: FrozenSet[str] = frozenset()


class TestClassCollector(SymbolVisitor[FrozenSet[str]]):
    """Collects candidate test class names from one assembly."""

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        previous_token: str,
        test_class_suffix: str = DEFAULT_CONFIG.test_class_suffix,
        cancellation: Optional[CancellationToken] = None,
    ) -> None:
        self.previous_token = previous_token
        self.test_class_suffix = test_class_suffix
        self.cancellation = cancellation

    def collect(self, assembly: AssemblySymbol) -> FrozenSet[str]:
        return self.visit(assembly) or _EMPTY

    def default_visit(self, symbol) -> FrozenSet[str]:
        return _EMPTY

    def visit_assembly(self, symbol: AssemblySymbol) -> FrozenSet[str]:
        return self.visit(symbol.global_namespace) or _EMPTY

    def visit_namespace(self, symbol: NamespaceSymbol) -> FrozenSet[str]:
        throw_if_canceled(self.cancellation)
        result = set()
        for member in symbol.get_members():
            # generated classes are always namespaced
            if symbol.is_global_namespace and member.kind is SymbolKind.NAMED_TYPE:
                logger.debug("Skipping %s: declared in the global namespace", member.name)
                continue
            result.update(self.visit(member) or _EMPTY)
        return frozenset(result)

    def visit_named_type(self, symbol: NamedTypeSymbol) -> FrozenSet[str]:
        if self.is_candidate(symbol.name):
            return frozenset((symbol.to_display_string(),))
        return _EMPTY

    def is_candidate(self, simple_name: str) -> bool:
        if self.previous_token == "":
            return simple_name.endswith(self.test_class_suffix)
        return self.previous_token in simple_name


def collect_candidates(
    compilation: Compilation,
    chain: VersionChain,
    config: GeneratorConfig = DEFAULT_CONFIG,
    cancellation: Optional[CancellationToken] = None,
) -> FrozenSet[str]:
    """
    Return the candidate names exported by the previous tier's assembly.

    The result is unordered; callers sort it before emitting anything.
    """
    throw_if_canceled(cancellation)
    previous = compilation.referenced_assembly_named(chain.previous_assembly_name)
    if previous is None:
        logger.debug(
            "%s does not reference %s; nothing to mirror",
            chain.current_assembly_name, chain.previous_assembly_name,
        )
        return _EMPTY

    collector = TestClassCollector(
        chain.previous_token,
        test_class_suffix=config.test_class_suffix,
        cancellation=cancellation,
    )
    candidates = collector.collect(previous)
    logger.debug("Collected %d candidate(s) from %s", len(candidates), previous.name)
    return candidates
