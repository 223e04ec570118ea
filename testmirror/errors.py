# testmirror/errors.py
"""
Error types for the test mirror generator.

Error Hierarchy:
────────────────
  MirrorError (base)
  ├── ConfigError             - Invalid generator configuration
  ├── DuplicateHintNameError  - Two generated sources share an output key
  └── InternalError           - Broken invariant between stages (never expected)

"Nothing to generate" is not an error: a compilation outside the version
chain, or a previous tier that is not referenced, yields an empty result.
Only ``InternalError`` is fatal for a snapshot.

Error Codes:
────────────
Each error carries a code of the form MIRROR-NNNN:
  - 0001-0999: Configuration errors
  - 4000-4999: Output errors
  - 9000-9999: Internal errors
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

__all__ = [
    "ErrorPhase",
    "ErrorCode",
    "MirrorErrorCodes",
    "MirrorError",
    "ConfigError",
    "DuplicateHintNameError",
    "InternalError",
]


class ErrorPhase(Enum):
    """Generator phase in which an error is raised."""
    CONFIG = "config"
    RESOLVE = "resolve"
    COLLECT = "collect"
    REWRITE = "rewrite"
    EMIT = "emit"
    OUTPUT = "output"


class ErrorCode:
    """A structured ``PREFIX-NNNN`` error code."""

    __slots__ = ("prefix", "number", "phase")

    def __init__(self, prefix: str, number: int, phase: ErrorPhase) -> None:
        self.prefix = prefix
        self.number = number
        self.phase = phase

    @property
    def code(self) -> str:
        return f"{self.prefix}-{self.number:04d}"

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"ErrorCode({self.code!r}, {self.phase.name})"

    def __hash__(self) -> int:
        return hash((self.prefix, self.number))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ErrorCode):
            return self.prefix == other.prefix and self.number == other.number
        if isinstance(other, str):
            return self.code == other
        return False


class MirrorErrorCodes:
    """Predefined error codes."""

    INVALID_CONFIG_VALUE = ErrorCode("MIRROR", 1, ErrorPhase.CONFIG)
    INVALID_CONFIG_OPTION = ErrorCode("MIRROR", 2, ErrorPhase.CONFIG)

    DUPLICATE_HINT_NAME = ErrorCode("MIRROR", 4001, ErrorPhase.OUTPUT)

    UNREACHABLE = ErrorCode("MIRROR", 9001, ErrorPhase.EMIT)
    MALFORMED_CANDIDATE = ErrorCode("MIRROR", 9002, ErrorPhase.REWRITE)


class MirrorError(Exception):
    """Base exception for all generator errors."""

    default_code: ErrorCode = MirrorErrorCodes.UNREACHABLE

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        hint: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.hint = hint

    def to_gcc_format(self) -> str:
        text = f"testmirror: error: {self.message} [{self.code}]"
        if self.hint:
            text += f"\nhint: {self.hint}"
        return text

    def __str__(self) -> str:
        return self.to_gcc_format()


class ConfigError(MirrorError):
    """An invalid generator configuration value or option."""

    default_code = MirrorErrorCodes.INVALID_CONFIG_VALUE

    def __init__(self, message: str, option: str = "", **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.option = option


class DuplicateHintNameError(MirrorError):
    """Two generated sources were added under the same output key."""

    default_code = MirrorErrorCodes.DUPLICATE_HINT_NAME

    def __init__(self, hint_name: str) -> None:
        super().__init__(
            f"a source with hint name '{hint_name}' was already added",
            hint="generated type names must be unique within one compilation",
        )
        self.hint_name = hint_name


class InternalError(MirrorError):
    """A broken invariant between generator stages; indicates a bug."""

    default_code = MirrorErrorCodes.UNREACHABLE
