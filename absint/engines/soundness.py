"""absint Transfer-Function Verification via Z3.

Checks every entry of the sign lattice's transfer tables against the
concrete operation it approximates. For a binary operator the query is

  exists x, y.  x in gamma(a)  /\\  y in gamma(b)  /\\  x op y not in gamma(a op# b)

and analogously for condition refinement, join and abstraction. A SAT
answer is a soundness violation and the model is its concrete witness.
The lattice is finite, so the enumeration is exhaustive.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import z3

from absint.ast_nodes import BinOp, Rel
from absint.errors import AnalysisError, soundness_error
from absint.lattice import (
    BOTTOM, NEG, POS, TOP, SignValue, abstract_of, apply_binop, apply_condition, join,
)

logger = logging.getLogger(__name__)

ALL_SIGNS = (BOTTOM, TOP, POS, NEG)

# Representative literal per class: apply_condition only looks at the
# literal's sign, so checking one representative against a symbolic
# literal of the same class covers the class.
_LITERAL_CLASSES: Dict[str, int] = {"negative": -1, "non-negative": 0}


@dataclass(frozen=True)
class SoundnessViolation:
    operation: str
    operands: Tuple[str, ...]
    result: str
    witness: Dict[str, int] = field(default_factory=dict, compare=False, hash=False)

    def to_error(self) -> AnalysisError:
        return soundness_error(self.operation, list(self.operands), self.result, dict(self.witness))

    def __str__(self) -> str:
        shown = ", ".join(f"{k}={v}" for k, v in sorted(self.witness.items()))
        return f"{self.operation}({', '.join(self.operands)}) = {self.result}  [witness: {shown}]"


def _member(value: SignValue, x: z3.ArithRef) -> z3.BoolRef:
    """z3 encoding of x in gamma(value)."""
    if value == BOTTOM:
        return z3.BoolVal(False)
    if value == TOP:
        return z3.BoolVal(True)
    if value == POS:
        return x >= 0
    return x < 0


def _concrete_binop(op: BinOp, x: z3.ArithRef, y: z3.ArithRef) -> z3.ArithRef:
    if op is BinOp.ADD:
        return x + y
    if op is BinOp.SUB:
        return x - y
    return x * y


def _concrete_rel(rel: Rel, x: z3.ArithRef, c: z3.ArithRef) -> z3.BoolRef:
    if rel is Rel.LE:
        return x <= c
    return x > c


def _literal_class(name: str, c: z3.ArithRef) -> z3.BoolRef:
    return c < 0 if name == "negative" else c >= 0


def _find_witness(constraints: List[z3.BoolRef], names: Dict[str, z3.ArithRef]) -> Dict[str, int] | None:
    solver = z3.Solver()
    solver.add(*constraints)
    if solver.check() != z3.sat:
        return None
    model = solver.model()
    return {n: model.eval(v, model_completion=True).as_long() for n, v in names.items()}


class TransferFunctionVerifier:
    """Enumerates the lattice tables and asks Z3 for escaping witnesses."""

    def __init__(self):
        self.x = z3.Int("x")
        self.y = z3.Int("y")
        self.c = z3.Int("c")
        self.violations: List[SoundnessViolation] = []

    def _report(self, operation: str, operands: Tuple[str, ...], result: SignValue,
                witness: Dict[str, int] | None) -> None:
        if witness is None:
            return
        violation = SoundnessViolation(operation, operands, str(result), witness)
        logger.debug("unsound entry: %s", violation)
        self.violations.append(violation)

    def check_abstraction(self) -> None:
        for cls, rep in _LITERAL_CLASSES.items():
            result = abstract_of(rep)
            witness = _find_witness(
                [_literal_class(cls, self.x), z3.Not(_member(result, self.x))],
                {"x": self.x},
            )
            self._report("abstract_of", (cls,), result, witness)

    def check_join(self) -> None:
        for a in ALL_SIGNS:
            for b in ALL_SIGNS:
                result = join(a, b)
                witness = _find_witness(
                    [z3.Or(_member(a, self.x), _member(b, self.x)),
                     z3.Not(_member(result, self.x))],
                    {"x": self.x},
                )
                self._report("join", (str(a), str(b)), result, witness)

    def check_binops(self) -> None:
        for op in BinOp:
            for a in ALL_SIGNS:
                for b in ALL_SIGNS:
                    result = apply_binop(op, a, b)
                    witness = _find_witness(
                        [_member(a, self.x), _member(b, self.y),
                         z3.Not(_member(result, _concrete_binop(op, self.x, self.y)))],
                        {"x": self.x, "y": self.y},
                    )
                    self._report(op.name, (str(a), str(b)), result, witness)

    def check_conditions(self) -> None:
        for rel in Rel:
            for cls, rep in _LITERAL_CLASSES.items():
                for v in ALL_SIGNS:
                    result = apply_condition(rel, rep, v)
                    witness = _find_witness(
                        [_member(v, self.x), _literal_class(cls, self.c),
                         _concrete_rel(rel, self.x, self.c),
                         z3.Not(_member(result, self.x))],
                        {"x": self.x, "c": self.c},
                    )
                    self._report(f"cond[{rel.value}]", (cls, str(v)), result, witness)

    def run(self) -> List[SoundnessViolation]:
        self.violations = []
        self.check_abstraction()
        self.check_join()
        self.check_binops()
        self.check_conditions()
        logger.info("transfer-function check found %d violation(s)", len(self.violations))
        return self.violations


def verify_transfer_functions() -> List[SoundnessViolation]:
    """Check the whole sign lattice; empty list means every entry is sound."""
    return TransferFunctionVerifier().run()
