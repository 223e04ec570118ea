"""
testmirror/codegen.py
=====================

Renders a :class:`GeneratedClassSpec` into a compilable source unit.

The emitted unit declares the target namespace, imports the base namespace
and declares an empty ``partial`` class deriving from the previous-tier
class, so every inherited test re-runs under the current tier::

    // <auto-generated/>

    #nullable enable

    namespace Product.Test.CSharp8.Ordering;

    using Product.Test.CSharp7.Ordering;

    public partial class FooCSharp8UnitTests
        : FooCSharp7UnitTests
    {
    }

Output is a pure function of the spec: identical specs give byte-identical
text, which keeps the host's incremental cache stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from io import StringIO
from typing import Any, Optional

from testmirror.config import DEFAULT_CONFIG, GeneratorConfig
from testmirror.rewriter import GeneratedClassSpec

__all__ = [
    "CodeEmitter",
    "GeneratedSource",
    "emit_source",
    "render_source",
]

AUTO_GENERATED_HEADER = "// <auto-generated/>"


class CodeEmitter:
    """Low-level line emission with indentation management."""

    def __init__(self, indent_str: str = "    ") -> None:
        self._buffer = StringIO()
        self._indent_str = indent_str
        self._indent_level = 0

    def emit(self, code: str) -> None:
        """Emit a line at the current indentation; blank lines carry no indentation."""
        if code.strip():
            self._buffer.write(self._indent_str * self._indent_level)
            self._buffer.write(code)
        self._buffer.write("\n")

    def emit_blank(self, count: int = 1) -> None:
        for _ in range(count):
            self._buffer.write("\n")

    def indent(self) -> None:
        self._indent_level += 1

    def dedent(self) -> None:
        self._indent_level = max(0, self._indent_level - 1)

    def block(self, header: Optional[str] = None) -> "CodeEmitter._BlockContext":
        """Context manager for a brace-delimited block."""
        return self._BlockContext(self, header)

    class _BlockContext:

        def __init__(self, emitter: "CodeEmitter", header: Optional[str]) -> None:
            self._emitter = emitter
            self._header = header

        def __enter__(self) -> "CodeEmitter":
            if self._header is not None:
                self._emitter.emit(self._header)
            self._emitter.emit("{")
            self._emitter.indent()
            return self._emitter

        def __exit__(self, *args: Any) -> None:
            self._emitter.dedent()
            self._emitter.emit("}")

    def get_code(self) -> str:
        return self._buffer.getvalue()


@dataclass(frozen=True)
class GeneratedSource:
    """One emitted source unit and the key the host stores it under."""
    hint_name: str
    source_text: str
    spec: GeneratedClassSpec


def render_source(spec: GeneratedClassSpec) -> str:
    """Render the source text for *spec*."""
    out = CodeEmitter()
    out.emit(AUTO_GENERATED_HEADER)
    out.emit_blank()
    out.emit("#nullable enable")
    out.emit_blank()
    out.emit(f"namespace {spec.namespace};")
    out.emit_blank()
    out.emit(f"using {spec.base_namespace};")
    out.emit_blank()
    out.emit(f"public partial class {spec.type_name}")
    out.indent()
    out.emit(f": {spec.base_type_name}")
    out.dedent()
    with out.block():
        pass
    return out.get_code()


def emit_source(spec: GeneratedClassSpec, config: GeneratorConfig = DEFAULT_CONFIG) -> GeneratedSource:
    """Render *spec* and key it by its type name."""
    return GeneratedSource(
        hint_name=spec.type_name + config.hint_extension,
        source_text=render_source(spec),
        spec=spec,
    )
