"""Structured error objects for the absint engine.

Domain contradictions never show up here: they are the BOTTOM element of
the sign lattice. The errors below are contract violations of the engine
itself (bad variable index, runaway fixpoint, broken config) and findings
of the transfer-function verifier.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorKind(Enum):
    INDEX_ERROR = "index_error"
    FIXPOINT_DIVERGENCE = "fixpoint_divergence"
    EXECUTION_LIMIT = "execution_limit"
    SOUNDNESS = "soundness"
    CONFIG_ERROR = "config_error"
    INTERNAL_ERROR = "internal_error"


@dataclass
class AnalysisError:
    kind: ErrorKind
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "kind": self.kind.value,
            "message": self.message,
        }
        if self.details:
            d["details"] = self.details
        return d

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def __str__(self) -> str:
        return f"[{self.kind.value}]: {self.message}"


def index_error(index: int, capacity: int, store: str = "memory") -> AnalysisError:
    return AnalysisError(
        kind=ErrorKind.INDEX_ERROR,
        message=f"Variable index {index} outside {store} of {capacity} slots",
        details={"index": index, "capacity": capacity, "store": store},
    )


def divergence_error(iterations: int, label: int) -> AnalysisError:
    return AnalysisError(
        kind=ErrorKind.FIXPOINT_DIVERGENCE,
        message=f"Loop at label {label} did not stabilize after {iterations} iterations",
        details={"iterations": iterations, "label": label},
    )


def execution_limit_error(fuel: int, label: int) -> AnalysisError:
    return AnalysisError(
        kind=ErrorKind.EXECUTION_LIMIT,
        message=f"Concrete execution ran out of fuel ({fuel} loop iterations) at label {label}",
        details={"fuel": fuel, "label": label},
    )


def soundness_error(
    operation: str,
    operands: list[str],
    result: str,
    witness: dict[str, int],
) -> AnalysisError:
    return AnalysisError(
        kind=ErrorKind.SOUNDNESS,
        message=f"{operation}({', '.join(operands)}) = {result} misses a concrete value",
        details={
            "operation": operation,
            "operands": operands,
            "result": result,
            "witness": witness,
        },
    )


def config_error(message: str, path: str | None = None) -> AnalysisError:
    details: dict[str, Any] = {}
    if path:
        details["path"] = path
    return AnalysisError(
        kind=ErrorKind.CONFIG_ERROR,
        message=message,
        details=details,
    )


def internal_error(message: str, node: Any = None) -> AnalysisError:
    details: dict[str, Any] = {}
    if node is not None:
        details["node"] = type(node).__name__
    return AnalysisError(
        kind=ErrorKind.INTERNAL_ERROR,
        message=message,
        details=details,
    )


class EngineError(Exception):
    """Exception wrapping one or more AnalysisErrors."""

    def __init__(self, errors: list[AnalysisError] | AnalysisError):
        if isinstance(errors, AnalysisError):
            errors = [errors]
        self.errors = errors
        super().__init__(self._format())

    def _format(self) -> str:
        return "\n".join(str(e) for e in self.errors)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps([e.to_dict() for e in self.errors], indent=indent)


class MemoryIndexError(EngineError):
    """A variable index fell outside the allocated slots."""


class FixpointDivergenceError(EngineError):
    """The loop fixpoint did not stabilize within the iteration cap."""


class ExecutionLimitError(EngineError):
    """The concrete oracle used up its loop fuel."""


class ConfigError(EngineError):
    """A configuration file could not be read or holds invalid values."""
