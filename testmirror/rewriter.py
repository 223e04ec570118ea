"""
testmirror/rewriter.py
======================

Maps a previous-tier fully-qualified test class name to the name of the
class that mirrors it in the current tier.

Baseline successor (previous token empty)::

    global::Product.Test.Spacing.BarUnitTests
      → Product.Test.CSharp7.Spacing.BarCSharp7UnitTests

Any other tier::

    global::Product.Test.CSharp7.Ordering.FooCSharp7UnitTests
      → Product.Test.CSharp8.Ordering.FooCSharp8UnitTests

Generated names are not checked for collisions with hand-written classes;
the host compiler reports those when it compiles the emitted source.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from testmirror.config import DEFAULT_CONFIG, GeneratorConfig
from testmirror.errors import InternalError, MirrorErrorCodes
from testmirror.version_chain import VersionChain

__all__ = [
    "GeneratedClassSpec",
    "rewrite_name",
    "split_qualified_name",
]


@dataclass(frozen=True)
class GeneratedClassSpec:
    """The class to emit and the class it derives from."""
    namespace: str
    type_name: str
    base_namespace: str
    base_type_name: str


def split_qualified_name(qualified: str, global_prefix: str = DEFAULT_CONFIG.global_prefix) -> Tuple[str, str]:
    """Split at the last ``.`` and drop a leading ``global::`` from the namespace part."""
    last_dot = qualified.rfind(".")
    if last_dot < 0:
        raise InternalError(
            f"candidate '{qualified}' has no namespace",
            code=MirrorErrorCodes.MALFORMED_CANDIDATE,
        )
    namespace, simple = qualified[:last_dot], qualified[last_dot + 1:]
    if namespace.startswith(global_prefix):
        namespace = namespace[len(global_prefix):]
    return namespace, simple


def rewrite_name(
    candidate: str,
    chain: VersionChain,
    config: GeneratorConfig = DEFAULT_CONFIG,
) -> GeneratedClassSpec:
    """Compute the current-tier class for one previous-tier candidate."""
    if chain.is_baseline_successor:
        expected = candidate.replace(chain.previous_assembly_name, chain.current_assembly_name, 1)
        expected = expected.replace(
            config.test_class_suffix,
            chain.current_token + config.test_class_suffix,
            1,
        )
    else:
        expected = candidate.replace(chain.previous_token, chain.current_token)

    base_namespace, base_type_name = split_qualified_name(candidate, config.global_prefix)
    namespace, type_name = split_qualified_name(expected, config.global_prefix)
    return GeneratedClassSpec(
        namespace=namespace,
        type_name=type_name,
        base_namespace=base_namespace,
        base_type_name=base_type_name,
    )
