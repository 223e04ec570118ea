"""
analyzer_shims/checkers.py
══════════════════════════

Lint-rule framework: the contract every analyzer satisfies to be
discoverable by the host, and a small driver that plays the host's role of
dispatching syntax nodes to registered actions.

Architecture
────────────

  ┌─────────────────────────────────────────────────────────┐
  │                    AnalyzerDriver                       │
  │  ┌──────────────┐  ┌──────────────┐  ┌──────────────┐  │
  │  │   SA1213     │  │   SAxxxx     │  │   SAyyyy     │  │
  │  │  analyzer    │  │  analyzer    │  │  analyzer    │  │
  │  └──────┬───────┘  └──────┬───────┘  └──────┬───────┘  │
  │         │   register_syntax_node_action(kind)│          │
  │  ┌──────▼─────────────────▼──────────────────▼───────┐  │
  │  │        Syntax walk, per-kind dispatch              │  │
  │  └──────────────────────────┬────────────────────────┘  │
  │  ┌──────────────────────────▼────────────────────────┐  │
  │  │   Severity options  +  SuppressionManager         │  │
  │  └──────────────────────────┬────────────────────────┘  │
  │  ┌──────────────────────────▼────────────────────────┐  │
  │  │        Diagnostic formatter (JSON / gcc)          │  │
  │  └──────────────────────────────────────────────────┘  │
  └─────────────────────────────────────────────────────────┘

Each analyzer follows a two-phase lifecycle:

  1. **initialize(ctx)** — register interest in one or more syntax kinds
  2. **action(node_ctx)** — inspect the matched node, report diagnostics

A paired :class:`CodeFixProvider` receives a reported diagnostic and the
document, and returns a rewritten document.
"""

from __future__ import annotations

import json
import logging
import time
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from fnmatch import fnmatch
from typing import (
    Any,
    Callable,
    ClassVar,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Set,
    Tuple,
    Type,
)

from analyzer_shims.cancellation import CancellationToken, OperationCanceledError
from analyzer_shims.syntax import Document, SourceLocation, SyntaxKind, SyntaxNode

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════════
#  PART 1: DIAGNOSTIC MODEL
# ═════════════════════════════════════════════════════════════════════════

class DiagnosticSeverity(Enum):
    """Host severity levels, least to most severe."""
    HIDDEN = "hidden"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class DiagnosticDescriptor:
    """
    Static description of one rule.

    Attributes
    ----------
    id                    : Stable rule identifier (e.g. ``"SA1213"``)
    title                 : Short title
    message_format        : ``str.format`` template for the message
    category              : Rule category
    default_severity      : Severity when no option overrides it
    is_enabled_by_default : Whether the host runs the rule without opt-in
    description           : Longer description
    help_link             : Documentation URL
    """
    id: str
    title: str
    message_format: str
    category: str
    default_severity: DiagnosticSeverity = DiagnosticSeverity.WARNING
    is_enabled_by_default: bool = True
    description: str = ""
    help_link: str = ""


@dataclass(frozen=True)
class Diagnostic:
    """A single reported finding."""
    descriptor: DiagnosticDescriptor
    location: SourceLocation
    message_args: Tuple[Any, ...] = ()
    severity: Optional[DiagnosticSeverity] = None
    analyzer_name: str = ""

    @classmethod
    def create(
        cls,
        descriptor: DiagnosticDescriptor,
        location: SourceLocation,
        *message_args: Any,
    ) -> "Diagnostic":
        return cls(descriptor=descriptor, location=location, message_args=tuple(message_args))

    @property
    def id(self) -> str:
        return self.descriptor.id

    @property
    def message(self) -> str:
        if self.message_args:
            return self.descriptor.message_format.format(*self.message_args)
        return self.descriptor.message_format

    @property
    def effective_severity(self) -> DiagnosticSeverity:
        return self.severity or self.descriptor.default_severity

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "message": self.message,
            "severity": self.effective_severity.value,
            "category": self.descriptor.category,
            "file": self.location.file,
            "line": self.location.line,
            "column": self.location.column,
            "analyzer": self.analyzer_name,
        }

    def to_json_str(self) -> str:
        return json.dumps(self.to_json())

    def to_gcc_format(self) -> str:
        """GCC-style diagnostic string: file:line:col: severity: message [id]."""
        sev = self.effective_severity.value
        return f"{self.location}: {sev}: {self.message} [{self.id}]"


ANALYZER_EXCEPTION_DESCRIPTOR = DiagnosticDescriptor(
    id="AD0001",
    title="Analyzer failed",
    message_format="Analyzer '{0}' threw an exception of type '{1}' with message '{2}'.",
    category="Compiler",
    default_severity=DiagnosticSeverity.WARNING,
)


# ═════════════════════════════════════════════════════════════════════════
#  PART 2: SUPPRESSION MANAGER
# ═════════════════════════════════════════════════════════════════════════

class SuppressionManager:
    """
    Diagnostic suppressions from two sources: global ids and file patterns.

    >>> sm = SuppressionManager()
    >>> sm.add_global_suppression("SA1213")
    >>> sm.add_file_suppression("SA1101", "Generated/*.cs")
    """

    def __init__(self) -> None:
        # file pattern -> suppressed ids ("*" for all)
        self._file_level: Dict[str, Set[str]] = defaultdict(set)
        self._global: Set[str] = set()

    def add_file_suppression(self, diagnostic_id: str, file_pattern: str) -> None:
        self._file_level[file_pattern].add(diagnostic_id)

    def add_global_suppression(self, diagnostic_id: str) -> None:
        self._global.add(diagnostic_id)

    def is_suppressed(self, diag: Diagnostic) -> bool:
        if diag.id in self._global or "*" in self._global:
            return True

        path = diag.location.file
        for pattern, ids in self._file_level.items():
            if diag.id in ids or "*" in ids:
                if pattern == path or path.endswith(pattern) or fnmatch(path, pattern):
                    return True
        return False

    def filter_diagnostics(self, diagnostics: Iterable[Diagnostic]) -> List[Diagnostic]:
        return [d for d in diagnostics if not self.is_suppressed(d)]


# ═════════════════════════════════════════════════════════════════════════
#  PART 3: ANALYZER CONTRACT
# ═════════════════════════════════════════════════════════════════════════

SyntaxNodeAction = Callable[["SyntaxNodeAnalysisContext"], None]


@dataclass
class SyntaxNodeAnalysisContext:
    """What a syntax-node action receives: the matched node and a reporting callback."""
    node: SyntaxNode
    document: Document
    report_diagnostic: Callable[[Diagnostic], None]
    cancellation: CancellationToken = field(default_factory=CancellationToken.none)


class AnalysisContext:
    """Registration surface handed to :meth:`DiagnosticAnalyzer.initialize`."""

    def __init__(self) -> None:
        self._actions: Dict[SyntaxKind, List[SyntaxNodeAction]] = defaultdict(list)

    def register_syntax_node_action(self, action: SyntaxNodeAction, *kinds: SyntaxKind) -> None:
        if not kinds:
            raise ValueError("register_syntax_node_action requires at least one SyntaxKind")
        for kind in kinds:
            self._actions[kind].append(action)

    def actions_for(self, kind: SyntaxKind) -> List[SyntaxNodeAction]:
        return list(self._actions.get(kind, ()))

    @property
    def registered_kinds(self) -> FrozenSet[SyntaxKind]:
        return frozenset(self._actions)


class DiagnosticAnalyzer(ABC):
    """
    Base class for all lint rules.

    Subclass contract
    ─────────────────
      - Set ``supported_diagnostics`` to the descriptors the rule can report
      - Implement ``initialize()`` and register syntax-node actions there
    """

    supported_diagnostics: ClassVar[Tuple[DiagnosticDescriptor, ...]] = ()

    @classmethod
    def analyzer_name(cls) -> str:
        return cls.__name__

    @classmethod
    def diagnostic_ids(cls) -> FrozenSet[str]:
        return frozenset(d.id for d in cls.supported_diagnostics)

    @abstractmethod
    def initialize(self, context: AnalysisContext) -> None:
        ...

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {sorted(self.diagnostic_ids())}>"


class CodeFixProvider(ABC):
    """Rewrites a document to resolve a diagnostic reported by a paired analyzer."""

    fixable_diagnostic_ids: ClassVar[FrozenSet[str]] = frozenset()

    def can_fix(self, diagnostic: Diagnostic) -> bool:
        return diagnostic.id in self.fixable_diagnostic_ids

    @abstractmethod
    def get_fixed_document(self, document: Document, diagnostic: Diagnostic) -> Optional[Document]:
        """Return the rewritten document, or ``None`` when no fix applies."""
        ...


def apply_code_fix(
    provider: CodeFixProvider,
    document: Document,
    diagnostic: Diagnostic,
) -> Document:
    """Apply *provider* to *diagnostic*; the document is returned unchanged when no fix applies."""
    if not provider.can_fix(diagnostic):
        return document
    return provider.get_fixed_document(document, diagnostic) or document


# ═════════════════════════════════════════════════════════════════════════
#  PART 4: ANALYZER REGISTRY
# ═════════════════════════════════════════════════════════════════════════

class AnalyzerRegistry:
    """
    Registry of available analyzers with discovery and filtering.

    >>> registry = AnalyzerRegistry()
    >>> registry.register(SA1213EventAccessorsMustFollowOrder)
    >>> registry.filter_by_diagnostic_id("SA1213")
    [<class '...SA1213EventAccessorsMustFollowOrder'>]
    """

    def __init__(self) -> None:
        self._analyzers: Dict[str, Type[DiagnosticAnalyzer]] = {}
        self._disabled: Set[str] = set()

    def register(self, analyzer_cls: Type[DiagnosticAnalyzer]) -> Type[DiagnosticAnalyzer]:
        """Register an analyzer class; usable as a class decorator."""
        if not analyzer_cls.supported_diagnostics:
            raise ValueError(f"{analyzer_cls.__name__} declares no supported diagnostics")
        self._analyzers[analyzer_cls.analyzer_name()] = analyzer_cls
        return analyzer_cls

    def unregister(self, name: str) -> None:
        self._analyzers.pop(name, None)

    def disable(self, name: str) -> None:
        self._disabled.add(name)

    def enable(self, name: str) -> None:
        self._disabled.discard(name)

    def get_all(self) -> List[Type[DiagnosticAnalyzer]]:
        return list(self._analyzers.values())

    def get_enabled(self) -> List[Type[DiagnosticAnalyzer]]:
        return [
            cls for name, cls in self._analyzers.items()
            if name not in self._disabled
        ]

    def get_by_name(self, name: str) -> Optional[Type[DiagnosticAnalyzer]]:
        return self._analyzers.get(name)

    def filter_by_diagnostic_id(self, diagnostic_id: str) -> List[Type[DiagnosticAnalyzer]]:
        return [
            cls for cls in self._analyzers.values()
            if diagnostic_id in cls.diagnostic_ids()
        ]

    @property
    def names(self) -> List[str]:
        return sorted(self._analyzers)


# ═════════════════════════════════════════════════════════════════════════
#  PART 5: DRIVER
# ═════════════════════════════════════════════════════════════════════════

_SEVERITY_OPTIONS: Dict[str, Optional[DiagnosticSeverity]] = {
    "none": None,
    "suppress": None,
    "hidden": DiagnosticSeverity.HIDDEN,
    "silent": DiagnosticSeverity.HIDDEN,
    "info": DiagnosticSeverity.INFO,
    "suggestion": DiagnosticSeverity.INFO,
    "warning": DiagnosticSeverity.WARNING,
    "warn": DiagnosticSeverity.WARNING,
    "error": DiagnosticSeverity.ERROR,
}


def effective_severity(
    descriptor: DiagnosticDescriptor,
    options: Mapping[str, str],
) -> Optional[DiagnosticSeverity]:
    """
    Resolve the severity the host reports *descriptor* with.

    ``options`` maps a diagnostic id to ``none``/``hidden``/``info``/
    ``warning``/``error`` or ``default``.  ``None`` means the rule is off.
    """
    value = options.get(descriptor.id, "default").strip().lower()
    if value == "default":
        if not descriptor.is_enabled_by_default:
            return None
        return descriptor.default_severity
    if value not in _SEVERITY_OPTIONS:
        raise ValueError(f"unknown severity option {value!r} for {descriptor.id}")
    return _SEVERITY_OPTIONS[value]


@dataclass
class AnalyzerRunResults:
    """Aggregate results of running a suite of analyzers over documents."""
    diagnostics: List[Diagnostic] = field(default_factory=list)
    diagnostics_by_analyzer: Dict[str, List[Diagnostic]] = field(
        default_factory=lambda: defaultdict(list)
    )
    stats: Dict[str, float] = field(default_factory=dict)
    analyzer_names: List[str] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.by_severity(DiagnosticSeverity.ERROR))

    @property
    def warning_count(self) -> int:
        return len(self.by_severity(DiagnosticSeverity.WARNING))

    @property
    def total_count(self) -> int:
        return len(self.diagnostics)

    def by_severity(self, severity: DiagnosticSeverity) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.effective_severity == severity]

    def by_id(self, diagnostic_id: str) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.id == diagnostic_id]

    def by_file(self, file: str) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.location.file == file]

    def to_json_lines(self) -> str:
        return "\n".join(d.to_json_str() for d in self.diagnostics)

    def to_gcc_format(self) -> str:
        return "\n".join(d.to_gcc_format() for d in self.diagnostics)

    def summary(self) -> str:
        lines = [
            f"Analysis complete: {self.total_count} diagnostics "
            f"({self.error_count} errors, {self.warning_count} warnings)",
        ]
        for name in self.analyzer_names:
            count = len(self.diagnostics_by_analyzer.get(name, []))
            elapsed = self.stats.get(f"{name}_elapsed_ms", 0.0)
            lines.append(f"  {name}: {count} findings ({elapsed:.1f}ms)")
        return "\n".join(lines)


class AnalyzerDriver:
    """
    Runs registered analyzers against documents.

    >>> driver = AnalyzerDriver(registry, options={"SA1213": "warning"})
    >>> results = driver.run(document)
    >>> print(results.summary())

    Parameters for constructor
    ─────────────────────────
    registry     : AnalyzerRegistry — source of analyzer classes
    suppressions : SuppressionManager — global / file-level suppressions
    options      : dict — per-diagnostic severity options
    """

    def __init__(
        self,
        registry: AnalyzerRegistry,
        suppressions: Optional[SuppressionManager] = None,
        options: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.registry = registry
        self.suppressions = suppressions or SuppressionManager()
        self.options: Mapping[str, str] = dict(options or {})

    def _select(self, analyzers: Optional[Sequence[str]]) -> List[Type[DiagnosticAnalyzer]]:
        if analyzers is None:
            return self.registry.get_enabled()
        selected = []
        for name in analyzers:
            cls = self.registry.get_by_name(name)
            if cls is None:
                logger.warning("Unknown analyzer requested: %s", name)
                continue
            selected.append(cls)
        return selected

    def run(
        self,
        document: Document,
        analyzers: Optional[Sequence[str]] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> AnalyzerRunResults:
        """Run the selected analyzers (all enabled ones by default) over one document."""
        results = AnalyzerRunResults()
        token = cancellation or CancellationToken.none()

        for cls in self._select(analyzers):
            token.throw_if_cancellation_requested()
            name = cls.analyzer_name()
            severities = {
                d.id: effective_severity(d, self.options)
                for d in cls.supported_diagnostics
            }
            if all(sev is None for sev in severities.values()):
                logger.debug("Skipping %s: all diagnostics are off", name)
                continue

            results.analyzer_names.append(name)
            t0 = time.monotonic()
            diags = self._run_one(cls, document, severities, token)
            elapsed_ms = (time.monotonic() - t0) * 1000.0

            diags = self.suppressions.filter_diagnostics(diags)
            results.diagnostics.extend(diags)
            results.diagnostics_by_analyzer[name] = diags
            results.stats[f"{name}_elapsed_ms"] = elapsed_ms

        return results

    def run_all(
        self,
        documents: Iterable[Document],
        analyzers: Optional[Sequence[str]] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> AnalyzerRunResults:
        """Run across several documents and merge the results."""
        combined = AnalyzerRunResults()
        for document in documents:
            partial = self.run(document, analyzers=analyzers, cancellation=cancellation)
            combined.diagnostics.extend(partial.diagnostics)
            for name, diags in partial.diagnostics_by_analyzer.items():
                combined.diagnostics_by_analyzer[name].extend(diags)
            for key, val in partial.stats.items():
                combined.stats[key] = combined.stats.get(key, 0.0) + val
            for name in partial.analyzer_names:
                if name not in combined.analyzer_names:
                    combined.analyzer_names.append(name)
        return combined

    def _run_one(
        self,
        cls: Type[DiagnosticAnalyzer],
        document: Document,
        severities: Mapping[str, Optional[DiagnosticSeverity]],
        token: CancellationToken,
    ) -> List[Diagnostic]:
        name = cls.analyzer_name()
        reported: List[Diagnostic] = []

        def report(diagnostic: Diagnostic) -> None:
            if diagnostic.id not in severities:
                raise ValueError(
                    f"Reported diagnostic with ID '{diagnostic.id}' is not supported by the analyzer."
                )
            severity = severities[diagnostic.id]
            if severity is None:
                return
            reported.append(Diagnostic(
                descriptor=diagnostic.descriptor,
                location=diagnostic.location,
                message_args=diagnostic.message_args,
                severity=severity,
                analyzer_name=name,
            ))

        try:
            analyzer = cls()
            context = AnalysisContext()
            analyzer.initialize(context)
            for node in document.root.walk():
                token.throw_if_cancellation_requested()
                for action in context.actions_for(node.kind):
                    action(SyntaxNodeAnalysisContext(
                        node=node,
                        document=document,
                        report_diagnostic=report,
                        cancellation=token,
                    ))
        except OperationCanceledError:
            raise
        except Exception as exc:
            # Reported as AD0001 instead of aborting the run
            logger.warning("Analyzer %s failed on %s: %s", name, document.file_path, exc)
            return [Diagnostic(
                descriptor=ANALYZER_EXCEPTION_DESCRIPTOR,
                location=SourceLocation(file=document.file_path),
                message_args=(name, type(exc).__name__, str(exc)),
                analyzer_name=name,
            )]
        return reported


__all__ = [
    # Diagnostic model
    "Diagnostic",
    "DiagnosticDescriptor",
    "DiagnosticSeverity",
    "SourceLocation",
    "ANALYZER_EXCEPTION_DESCRIPTOR",
    # Suppression
    "SuppressionManager",
    # Analyzer contract
    "AnalysisContext",
    "SyntaxNodeAnalysisContext",
    "SyntaxNodeAction",
    "DiagnosticAnalyzer",
    "CodeFixProvider",
    "apply_code_fix",
    # Registry / driver
    "AnalyzerRegistry",
    "AnalyzerDriver",
    "AnalyzerRunResults",
    "effective_severity",
]
