"""testmirror — Versioned test-class mirror generator.

For every test assembly of the form ``<Product>.Test.CSharpN``, this
package generates one empty ``partial`` class per test class of the tier
below, deriving from it, so that the whole inherited test suite re-runs
under the newer language version.

Submodules
----------
errors
    ``MirrorError`` hierarchy with structured ``MIRROR-NNNN`` error codes.

config
    ``GeneratorConfig`` (frozen, hashable), host option parsing via
    ``GeneratorConfig.from_mapping`` and ``configure_logging``.

version_chain
    ``VersionChainResolver``: current assembly name → ``VersionChain``
    (tier, previous assembly, previous / current tier tokens).

collector
    ``TestClassCollector``: symbol visitor that gathers candidate test
    class names from the previous tier's assembly.

rewriter
    ``rewrite_name``: previous-tier class name → ``GeneratedClassSpec``.

codegen
    ``CodeEmitter`` and ``emit_source``: ``GeneratedClassSpec`` → source text and hint name.

pipeline
    ``MirrorPipeline`` composing the stages, ``SourceOutput``,
    ``GenerationCache`` and the one-shot ``generate_sources``.

Usage
-----
Programmatic::

    from analyzer_shims import build_assembly, Compilation
    from testmirror import MirrorPipeline, SourceOutput

    previous = build_assembly(
        "StyleCop.Analyzers.Test.CSharp7",
        ["StyleCop.Analyzers.Test.CSharp7.OrderingRules.SA1213CSharp7UnitTests"],
    )
    compilation = Compilation("StyleCop.Analyzers.Test.CSharp8", (previous,))
    output = MirrorPipeline().execute(compilation, SourceOutput())
    # output.hint_names == ["SA1213CSharp8UnitTests.cs"]

"""

from __future__ import annotations

from testmirror.codegen import GeneratedSource, emit_source, render_source
from testmirror.collector import TestClassCollector, collect_candidates
from testmirror.config import DEFAULT_CONFIG, GeneratorConfig, configure_logging
from testmirror.errors import (
    ConfigError,
    DuplicateHintNameError,
    InternalError,
    MirrorError,
)
from testmirror.pipeline import (
    GenerationCache,
    MirrorPipeline,
    SourceOutput,
    generate_sources,
)
from testmirror.rewriter import GeneratedClassSpec, rewrite_name
from testmirror.version_chain import (
    VersionChain,
    VersionChainResolver,
    resolve_version_chain,
)

__version__: str = "0.3.0"
__all__: list[str] = [
    "__version__",
    "DEFAULT_CONFIG",
    "ConfigError",
    "DuplicateHintNameError",
    "GeneratedClassSpec",
    "GeneratedSource",
    "GenerationCache",
    "GeneratorConfig",
    "InternalError",
    "MirrorError",
    "MirrorPipeline",
    "SourceOutput",
    "TestClassCollector",
    "VersionChain",
    "VersionChainResolver",
    "collect_candidates",
    "configure_logging",
    "emit_source",
    "generate_sources",
    "render_source",
    "resolve_version_chain",
    "rewrite_name",
]
