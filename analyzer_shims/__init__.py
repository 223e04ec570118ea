"""
analyzer_shims — Host Substrate for Analyzers and Source Generators
===================================================================

This package provides the host-facing infrastructure shared by the lint
rules and by the ``testmirror`` source generator.

Core modules
------------
symbols
    Exported-symbol model of compiled assemblies (assembly → namespaces →
    named types) with a tag-dispatching ``SymbolVisitor``.
syntax
    Immutable syntax-node contract, ``SourceLocation`` and ``Document``.
cancellation
    Cooperative ``CancellationToken`` and ``OperationCanceledError``.
checkers
    Diagnostic model, analyzer / code-fix contracts, registry and driver.
ordering_rules
    SA1213 (event accessors must follow order) and its code fix.

Addon modules
-------------
symbol_dump
    S-expression reader / writer for host symbol dumps (needs ``sexpdata``).

Quick start
-----------
>>> from analyzer_shims import build_assembly, Compilation
>>> asm = build_assembly("Product.Test", ["Product.Test.Spacing.BarUnitTests"])
>>> Compilation("Product.Test.CSharp7", (asm,)).referenced_assembly_named("Product.Test") is asm
True
"""

from __future__ import annotations

import importlib
import logging
import sys
import warnings
from typing import Dict, List

__version__ = "0.3.0"
__all__: List[str] = []          # populated incrementally below

_log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Internal registry: (module_name, list_of_names_to_import)
#
#   CORE  : always imported; failure is fatal
#   ADDON : imported eagerly but failure only warns (package still usable)
# ---------------------------------------------------------------------------

_CORE_MODULES: Dict[str, List[str]] = {
    "cancellation": [
        "CancellationToken",
        "OperationCanceledError",
    ],
    "symbols": [
        "SymbolKind",
        "AssemblySymbol",
        "NamespaceSymbol",
        "NamedTypeSymbol",
        "Compilation",
        "SymbolVisitor",
        "build_assembly",
        "build_namespace_tree",
    ],
    "syntax": [
        "SourceLocation",
        "SyntaxKind",
        "SyntaxNode",
        "Document",
    ],
    "checkers": [
        "Diagnostic",
        "DiagnosticDescriptor",
        "DiagnosticSeverity",
        "DiagnosticAnalyzer",
        "CodeFixProvider",
        "AnalysisContext",
        "AnalyzerRegistry",
        "AnalyzerDriver",
        "SuppressionManager",
    ],
    "ordering_rules": [
        "SA1213EventAccessorsMustFollowOrder",
        "SA1213CodeFixProvider",
    ],
}

_ADDON_MODULES: Dict[str, List[str]] = {
    "symbol_dump": [
        "load_assembly",
        "load_compilation",
        "dump_assembly",
        "SymbolDumpError",
    ],
}


def _import_names(
    module_rel_name: str,
    names: List[str],
    *,
    fatal: bool = True,
) -> None:
    """Import *names* from a submodule and bind them in the package namespace.

    Parameters
    ----------
    module_rel_name:
        Module name relative to this package (e.g. ``"symbols"``).
    names:
        Public symbols to re-export.
    fatal:
        If ``True``, an ``ImportError`` propagates.  If ``False``, a warning
        is issued and the names are skipped (addon tier).
    """
    fq_name = f"{__name__}.{module_rel_name}"
    try:
        mod = importlib.import_module(fq_name)
    except ImportError as exc:
        if fatal:
            raise ImportError(
                f"analyzer_shims: required submodule '{module_rel_name}' "
                f"failed to import: {exc}"
            ) from exc
        warnings.warn(
            f"analyzer_shims: optional submodule '{module_rel_name}' "
            f"could not be imported ({exc}); related symbols will be unavailable.",
            ImportWarning,
            stacklevel=2,
        )
        _log.debug("Skipped optional module %s: %s", module_rel_name, exc)
        return

    current_module = sys.modules[__name__]
    for name in names:
        obj = getattr(mod, name, None)
        if obj is None:
            msg = f"analyzer_shims.{module_rel_name} does not export '{name}'"
            if fatal:
                raise AttributeError(msg)
            _log.warning(msg)
            continue
        setattr(current_module, name, obj)
        __all__.append(name)

    setattr(current_module, module_rel_name, mod)
    if module_rel_name not in __all__:
        __all__.append(module_rel_name)


for _mod, _names in _CORE_MODULES.items():
    _import_names(_mod, _names, fatal=True)

for _mod, _names in _ADDON_MODULES.items():
    _import_names(_mod, _names, fatal=False)

del _mod, _names


def list_submodules() -> List[str]:
    """Return the names of all submodules in the package (core + addon)."""
    return sorted(set(_CORE_MODULES) | set(_ADDON_MODULES))


__all__ += ["list_submodules", "__version__"]
