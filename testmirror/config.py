"""
testmirror/config.py
====================

Generator configuration and logging setup.

``GeneratorConfig`` is a frozen, hashable dataclass so it can be part of a
memoization key.  Hosts pass their build options through
:meth:`GeneratorConfig.from_mapping`; keys carry a ``testmirror_`` prefix,
optionally behind the ``build_property.`` namespace::

    build_property.testmirror_product = StyleCop.Analyzers
    build_property.testmirror_baseline_tier = 7
"""

from __future__ import annotations

import logging
import re
import sys
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, List, Mapping

from testmirror.errors import ConfigError, MirrorErrorCodes

__all__ = [
    "GeneratorConfig",
    "DEFAULT_CONFIG",
    "configure_logging",
]

logger = logging.getLogger(__name__)

_OPTION_PREFIX = "testmirror_"
_BUILD_PROPERTY_PREFIX = "build_property."
_IDENTIFIER_PATH = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")


@dataclass(frozen=True)
class GeneratorConfig:
    """Tuning knobs for the test mirror generator."""
    product: str = "StyleCop.Analyzers"
    test_assembly_segment: str = "Test"
    language_prefix: str = "CSharp"
    baseline_tier: int = 7
    test_class_suffix: str = "UnitTests"
    global_prefix: str = "global::"
    hint_extension: str = ".cs"
    max_workers: int = 1
    cache_size: int = 64

    @property
    def root_test_assembly(self) -> str:
        """Name of the unsuffixed baseline test assembly, e.g. ``Product.Test``."""
        return f"{self.product}.{self.test_assembly_segment}"

    def validate(self) -> List[str]:
        """Return a list of validation warnings (empty if valid)."""
        warnings: List[str] = []
        if not _IDENTIFIER_PATH.match(self.product):
            warnings.append(f"product must be a dotted identifier, got {self.product!r}")
        if not _IDENTIFIER_PATH.match(self.test_assembly_segment):
            warnings.append("test_assembly_segment must be a dotted identifier")
        if not re.match(r"^[A-Za-z_][A-Za-z_]*$", self.language_prefix):
            warnings.append("language_prefix must be letters or underscores only")
        if self.baseline_tier <= 0:
            warnings.append("baseline_tier must be positive")
        if not self.test_class_suffix:
            warnings.append("test_class_suffix must not be empty")
        if self.max_workers <= 0:
            warnings.append("max_workers must be positive")
        if self.cache_size < 0:
            warnings.append("cache_size must be non-negative")
        return warnings

    def ensure_valid(self) -> "GeneratorConfig":
        """Log every validation warning and raise ``ConfigError`` if there is one."""
        problems = self.validate()
        for w in problems:
            logger.warning("GeneratorConfig: %s", w)
        if problems:
            raise ConfigError(problems[0])
        return self

    @classmethod
    def from_mapping(
        cls,
        options: Mapping[str, Any],
        base: "GeneratorConfig | None" = None,
    ) -> "GeneratorConfig":
        """
        Build a config from host options, starting from *base*
        (``DEFAULT_CONFIG`` when omitted).  Unrelated keys are ignored.
        """
        known = {f.name: f for f in fields(cls)}
        overrides: Dict[str, Any] = {}
        for raw_key, raw_value in options.items():
            key = raw_key
            if key.startswith(_BUILD_PROPERTY_PREFIX):
                key = key[len(_BUILD_PROPERTY_PREFIX):]
            if not key.startswith(_OPTION_PREFIX):
                continue
            name = key[len(_OPTION_PREFIX):]
            if name not in known:
                raise ConfigError(
                    f"unknown option '{raw_key}'",
                    option=raw_key,
                    code=MirrorErrorCodes.INVALID_CONFIG_OPTION,
                )
            if known[name].type in ("int", int):
                try:
                    overrides[name] = int(str(raw_value).strip())
                except ValueError as exc:
                    raise ConfigError(
                        f"option '{raw_key}' expects an integer, got {raw_value!r}",
                        option=raw_key,
                    ) from exc
            else:
                overrides[name] = str(raw_value).strip()

        config = replace(base or DEFAULT_CONFIG, **overrides)
        for w in config.validate():
            logger.warning("GeneratorConfig: %s", w)
        return config


DEFAULT_CONFIG = GeneratorConfig()


def configure_logging(verbosity: int = 0) -> logging.Logger:
    """Set up the ``testmirror`` logger.

    Verbosity levels:
        0 → WARNING
        1 → INFO
        2+ → DEBUG
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("testmirror")
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
    return root
