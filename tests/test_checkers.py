# tests/test_checkers.py
"""
Tests for the analyzer framework: diagnostics, suppressions, registry,
severity options and the driver.
"""

import json

import pytest
from unittest.mock import MagicMock

from analyzer_shims.cancellation import OperationCanceledError
from analyzer_shims.checkers import (
    ANALYZER_EXCEPTION_DESCRIPTOR,
    AnalysisContext,
    AnalyzerDriver,
    AnalyzerRegistry,
    CodeFixProvider,
    Diagnostic,
    DiagnosticAnalyzer,
    DiagnosticDescriptor,
    DiagnosticSeverity,
    SuppressionManager,
    apply_code_fix,
    effective_severity,
)
from analyzer_shims.syntax import SourceLocation, SyntaxKind
from tests.conftest import document_with, remove_then_add


CLASS_DESCRIPTOR = DiagnosticDescriptor(
    id="TS0001",
    title="Class found",
    message_format="Class '{0}' found.",
    category="Test",
)

OTHER_DESCRIPTOR = DiagnosticDescriptor(
    id="TS0002",
    title="Unused",
    message_format="Unused.",
    category="Test",
    default_severity=DiagnosticSeverity.ERROR,
)


class ClassReporter(DiagnosticAnalyzer):
    supported_diagnostics = (CLASS_DESCRIPTOR, OTHER_DESCRIPTOR)

    def initialize(self, context):
        context.register_syntax_node_action(self._on_class, SyntaxKind.CLASS_DECLARATION)

    def _on_class(self, context):
        context.report_diagnostic(
            Diagnostic.create(CLASS_DESCRIPTOR, context.node.location, context.node.name)
        )


class Crashing(DiagnosticAnalyzer):
    supported_diagnostics = (OTHER_DESCRIPTOR,)

    def initialize(self, context):
        context.register_syntax_node_action(self._boom, SyntaxKind.CLASS_DECLARATION)

    def _boom(self, context):
        raise RuntimeError("boom")


class ReportsForeignId(DiagnosticAnalyzer):
    supported_diagnostics = (OTHER_DESCRIPTOR,)

    def initialize(self, context):
        context.register_syntax_node_action(self._on_class, SyntaxKind.CLASS_DECLARATION)

    def _on_class(self, context):
        context.report_diagnostic(Diagnostic.create(CLASS_DESCRIPTOR, context.node.location, "x"))


def _registry(*classes):
    registry = AnalyzerRegistry()
    for cls in classes:
        registry.register(cls)
    return registry


class TestDiagnostic:

    def test_message_formatting(self):
        diag = Diagnostic.create(CLASS_DESCRIPTOR, SourceLocation("a.cs", 3, 1), "Foo")
        assert diag.message == "Class 'Foo' found."
        assert diag.id == "TS0001"

    def test_effective_severity_defaults_to_descriptor(self):
        diag = Diagnostic.create(OTHER_DESCRIPTOR, SourceLocation())
        assert diag.effective_severity is DiagnosticSeverity.ERROR

    def test_gcc_format(self):
        diag = Diagnostic.create(CLASS_DESCRIPTOR, SourceLocation("a.cs", 3, 7), "Foo")
        assert diag.to_gcc_format() == "a.cs:3:7: warning: Class 'Foo' found. [TS0001]"

    def test_json(self):
        diag = Diagnostic.create(CLASS_DESCRIPTOR, SourceLocation("a.cs", 3, 7), "Foo")
        data = json.loads(diag.to_json_str())
        assert data["id"] == "TS0001"
        assert data["severity"] == "warning"
        assert data["line"] == 3


class TestSuppressionManager:

    def test_global(self):
        sm = SuppressionManager()
        sm.add_global_suppression("TS0001")
        assert sm.is_suppressed(Diagnostic.create(CLASS_DESCRIPTOR, SourceLocation("a.cs", 1)))

    @pytest.mark.parametrize("pattern,path,expected", [
        ("Generated/*.cs", "Generated/Foo.cs", True),
        ("Foo.cs", "src/Foo.cs", True),
        ("Generated/*.cs", "src/Foo.cs", False),
    ], ids=["glob", "suffix", "no_match"])
    def test_file_patterns(self, pattern, path, expected):
        sm = SuppressionManager()
        sm.add_file_suppression("TS0001", pattern)
        diag = Diagnostic.create(CLASS_DESCRIPTOR, SourceLocation(path, 1))
        assert sm.is_suppressed(diag) is expected


class TestAnalysisContext:

    def test_requires_kind(self):
        with pytest.raises(ValueError):
            AnalysisContext().register_syntax_node_action(MagicMock())

    def test_multiple_kinds(self):
        ctx = AnalysisContext()
        action = MagicMock()
        ctx.register_syntax_node_action(action, SyntaxKind.CLASS_DECLARATION, SyntaxKind.BLOCK)
        assert ctx.registered_kinds == frozenset({SyntaxKind.CLASS_DECLARATION, SyntaxKind.BLOCK})
        assert ctx.actions_for(SyntaxKind.BLOCK) == [action]
        assert ctx.actions_for(SyntaxKind.EVENT_DECLARATION) == []


class TestRegistry:

    def test_register_and_lookup(self):
        registry = _registry(ClassReporter, Crashing)
        assert registry.names == ["ClassReporter", "Crashing"]
        assert registry.get_by_name("Crashing") is Crashing
        assert registry.filter_by_diagnostic_id("TS0001") == [ClassReporter]

    def test_register_as_decorator(self):
        registry = AnalyzerRegistry()

        @registry.register
        class Decorated(ClassReporter):
            pass

        assert registry.get_by_name("Decorated") is Decorated

    def test_rejects_analyzer_without_descriptors(self):
        class Empty(DiagnosticAnalyzer):
            def initialize(self, context):
                pass

        with pytest.raises(ValueError):
            AnalyzerRegistry().register(Empty)

    def test_disable_enable(self):
        registry = _registry(ClassReporter, Crashing)
        registry.disable("Crashing")
        assert registry.get_enabled() == [ClassReporter]
        registry.enable("Crashing")
        assert len(registry.get_enabled()) == 2

    def test_unregister(self):
        registry = _registry(ClassReporter)
        registry.unregister("ClassReporter")
        assert registry.get_all() == []


class TestEffectiveSeverity:

    def test_default(self):
        assert effective_severity(CLASS_DESCRIPTOR, {}) is DiagnosticSeverity.WARNING

    def test_disabled_by_default(self):
        desc = DiagnosticDescriptor("X1", "t", "m", "c", is_enabled_by_default=False)
        assert effective_severity(desc, {}) is None
        assert effective_severity(desc, {"X1": "warning"}) is DiagnosticSeverity.WARNING

    @pytest.mark.parametrize("value,expected", [
        ("none", None),
        ("suppress", None),
        ("silent", DiagnosticSeverity.HIDDEN),
        ("suggestion", DiagnosticSeverity.INFO),
        (" Error ", DiagnosticSeverity.ERROR),
    ], ids=["none", "suppress", "silent", "suggestion", "error_padded"])
    def test_options(self, value, expected):
        assert effective_severity(CLASS_DESCRIPTOR, {"TS0001": value}) is expected

    def test_unknown_value(self):
        with pytest.raises(ValueError):
            effective_severity(CLASS_DESCRIPTOR, {"TS0001": "loud"})


class TestDriver:

    def test_reports_with_resolved_severity(self):
        driver = AnalyzerDriver(_registry(ClassReporter), options={"TS0001": "error"})
        results = driver.run(document_with())
        (diag,) = results.diagnostics
        assert diag.message == "Class 'Foo' found."
        assert diag.effective_severity is DiagnosticSeverity.ERROR
        assert diag.analyzer_name == "ClassReporter"
        assert results.error_count == 1

    def test_diagnostic_turned_off(self):
        driver = AnalyzerDriver(_registry(ClassReporter), options={"TS0001": "none"})
        assert driver.run(document_with()).diagnostics == []

    def test_skips_analyzer_with_everything_off(self):
        driver = AnalyzerDriver(
            _registry(ClassReporter),
            options={"TS0001": "none", "TS0002": "none"},
        )
        results = driver.run(document_with())
        assert results.analyzer_names == []

    def test_crash_becomes_ad0001(self):
        driver = AnalyzerDriver(_registry(Crashing))
        (diag,) = driver.run(document_with()).diagnostics
        assert diag.descriptor is ANALYZER_EXCEPTION_DESCRIPTOR
        assert diag.message == "Analyzer 'Crashing' threw an exception of type 'RuntimeError' with message 'boom'."

    def test_unsupported_id_becomes_ad0001(self):
        driver = AnalyzerDriver(_registry(ReportsForeignId))
        (diag,) = driver.run(document_with()).diagnostics
        assert diag.id == "AD0001"
        assert "ValueError" in diag.message

    def test_suppressions_applied(self):
        sm = SuppressionManager()
        sm.add_global_suppression("TS0001")
        driver = AnalyzerDriver(_registry(ClassReporter), suppressions=sm)
        assert driver.run(document_with()).total_count == 0

    def test_select_by_name(self):
        driver = AnalyzerDriver(_registry(ClassReporter, Crashing))
        results = driver.run(document_with(), analyzers=["ClassReporter", "Missing"])
        assert results.analyzer_names == ["ClassReporter"]

    def test_canceled(self, canceled_token):
        driver = AnalyzerDriver(_registry(ClassReporter))
        with pytest.raises(OperationCanceledError):
            driver.run(document_with(), cancellation=canceled_token)

    def test_run_all_merges(self):
        driver = AnalyzerDriver(_registry(ClassReporter))
        results = driver.run_all([
            document_with(file_path="A.cs"),
            document_with(remove_then_add(), file_path="B.cs"),
        ])
        assert results.total_count == 2
        assert len(results.by_file("B.cs")) == 1
        assert len(results.diagnostics_by_analyzer["ClassReporter"]) == 2
        assert "ClassReporter: 2 findings" in results.summary()


class TestPackageExports:

    def test_submodules_listed(self):
        import analyzer_shims

        assert analyzer_shims.list_submodules() == [
            "cancellation", "checkers", "ordering_rules", "symbol_dump", "symbols", "syntax",
        ]

    def test_names_reexported(self):
        import analyzer_shims

        assert analyzer_shims.AnalyzerDriver is AnalyzerDriver
        assert analyzer_shims.load_compilation is analyzer_shims.symbol_dump.load_compilation
        assert "SA1213CodeFixProvider" in analyzer_shims.__all__


class TestCodeFixContract:

    def test_apply_code_fix_skips_foreign_ids(self):
        class NoFix(CodeFixProvider):
            fixable_diagnostic_ids = frozenset({"TS0002"})

            def get_fixed_document(self, document, diagnostic):
                raise AssertionError("not called")

        doc = document_with()
        diag = Diagnostic.create(CLASS_DESCRIPTOR, SourceLocation())
        assert apply_code_fix(NoFix(), doc, diag) is doc

    def test_apply_code_fix_keeps_document_when_no_fix(self):
        class Declines(CodeFixProvider):
            fixable_diagnostic_ids = frozenset({"TS0001"})

            def get_fixed_document(self, document, diagnostic):
                return None

        doc = document_with()
        diag = Diagnostic.create(CLASS_DESCRIPTOR, SourceLocation())
        assert apply_code_fix(Declines(), doc, diag) is doc
