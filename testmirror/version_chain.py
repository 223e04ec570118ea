"""
testmirror/version_chain.py
===========================

Derives the current language-version tier, and the identity of the tier
below it, from the current compilation's assembly name.

    Product.Test.CSharp9   →  previous: Product.Test.CSharp8 / token "CSharp8"
    Product.Test.CSharp7   →  previous: Product.Test         / token ""   (baseline)
    Product.Test.CSharp6   →  None (below the baseline tier)
    MyOtherProduct.Tests   →  None (not part of the chain)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Pattern

from analyzer_shims.cancellation import CancellationToken, throw_if_canceled
from testmirror.config import DEFAULT_CONFIG, GeneratorConfig

__all__ = [
    "VersionChain",
    "VersionChainResolver",
    "resolve_version_chain",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VersionChain:
    """
    One link of the version chain, seen from the current tier.

    ``previous_token`` is empty exactly when the current tier is the
    baseline tier, whose previous assembly is the unsuffixed root test
    assembly.
    """
    tier: int
    previous_token: str
    previous_assembly_name: str
    current_token: str
    current_assembly_name: str

    @property
    def is_baseline_successor(self) -> bool:
        return self.previous_token == ""


@lru_cache(maxsize=32)
def _assembly_pattern(root_test_assembly: str, language_prefix: str) -> Pattern[str]:
    return re.compile(
        re.escape(root_test_assembly) + r"\." + re.escape(language_prefix) + r"([0-9]+)"
    )


class VersionChainResolver:
    """Maps an assembly name to its :class:`VersionChain`, or ``None``."""

    def __init__(self, config: GeneratorConfig = DEFAULT_CONFIG) -> None:
        self.config = config
        self._pattern = _assembly_pattern(config.root_test_assembly, config.language_prefix)

    def resolve(
        self,
        assembly_name: Optional[str],
        cancellation: Optional[CancellationToken] = None,
    ) -> Optional[VersionChain]:
        throw_if_canceled(cancellation)
        current = assembly_name or ""

        match = self._pattern.fullmatch(current)
        if match is None:
            logger.debug("%r is not a versioned test assembly", current)
            return None

        cfg = self.config
        tier = int(match.group(1))
        if tier < cfg.baseline_tier:
            logger.debug("%r is below baseline tier %d", current, cfg.baseline_tier)
            return None

        if tier == cfg.baseline_tier:
            previous_token = ""
            previous_assembly_name = cfg.root_test_assembly
        else:
            previous_token = f"{cfg.language_prefix}{tier - 1}"
            previous_assembly_name = f"{cfg.root_test_assembly}.{previous_token}"

        chain = VersionChain(
            tier=tier,
            previous_token=previous_token,
            previous_assembly_name=previous_assembly_name,
            current_token=f"{cfg.language_prefix}{tier}",
            current_assembly_name=current,
        )
        logger.debug("Resolved %s -> previous %s", current, previous_assembly_name)
        return chain


def resolve_version_chain(
    assembly_name: Optional[str],
    config: GeneratorConfig = DEFAULT_CONFIG,
    cancellation: Optional[CancellationToken] = None,
) -> Optional[VersionChain]:
    """Functional shorthand for ``VersionChainResolver(config).resolve(...)``."""
    return VersionChainResolver(config).resolve(assembly_name, cancellation)
