"""absint Sign Lattice.

The four-element, non-relational sign domain:

           TOP
          /   \\
        NEG   POS
          \\   /
          BOTTOM

Galois connection to P(Z):
  gamma(BOTTOM) = {}
  gamma(NEG)    = {n in Z | n < 0}
  gamma(POS)    = {n in Z | n >= 0}
  gamma(TOP)    = Z

There is no separate ZERO element: zero is classified POS. This is a
convention of the domain, not a law. It makes POS * NEG = NEG imprecise
at zero (0 * -1 = 0), which the SMT verifier in
absint.engines.soundness reports.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Dict, Tuple

from absint.ast_nodes import BinOp, Rel


class SignValue(Enum):
    BOTTOM = auto()
    TOP = auto()
    POS = auto()
    NEG = auto()

    def __str__(self) -> str:
        return self.name.capitalize()


BOTTOM = SignValue.BOTTOM
TOP = SignValue.TOP
POS = SignValue.POS
NEG = SignValue.NEG


def abstract_of(n: int) -> SignValue:
    """alpha({n}): NEG for negative literals, POS otherwise (zero included)."""
    if n < 0:
        return NEG
    return POS


def includes(a: SignValue, b: SignValue) -> bool:
    """Partial order a <= b: a is at most as approximate as b."""
    return a == BOTTOM or b == TOP or a == b


def join(a: SignValue, b: SignValue) -> SignValue:
    """Least upper bound."""
    if a == BOTTOM:
        return b
    if b == BOTTOM:
        return a
    if a == b:
        return a
    return TOP


def concretizes(value: SignValue, n: int) -> bool:
    """n in gamma(value)."""
    if value == BOTTOM:
        return False
    return includes(abstract_of(n), value)


# ---------------------------------------------------------------------------
# Abstract transfer functions
# ---------------------------------------------------------------------------

# Entries for POS/NEG operands only; BOTTOM and TOP are handled up front.
_BINOP_TABLE: Dict[Tuple[BinOp, SignValue, SignValue], SignValue] = {
    (BinOp.ADD, POS, POS): POS,
    (BinOp.ADD, NEG, NEG): NEG,
    (BinOp.ADD, POS, NEG): TOP,
    (BinOp.ADD, NEG, POS): TOP,
    (BinOp.SUB, NEG, POS): NEG,
    (BinOp.SUB, POS, NEG): POS,
    (BinOp.SUB, POS, POS): TOP,
    (BinOp.SUB, NEG, NEG): TOP,
    (BinOp.MUL, POS, POS): POS,
    (BinOp.MUL, NEG, NEG): POS,
    (BinOp.MUL, POS, NEG): NEG,
    (BinOp.MUL, NEG, POS): NEG,
}


def apply_binop(op: BinOp, a: SignValue, b: SignValue) -> SignValue:
    """Abstract counterpart of `a op b`, strict in BOTTOM."""
    if a == BOTTOM or b == BOTTOM:
        return BOTTOM
    if a == TOP or b == TOP:
        return TOP
    return _BINOP_TABLE[(op, a, b)]


def apply_condition(rel: Rel, literal: int, value: SignValue) -> SignValue:
    """Refine `value` for the branch on which `x rel literal` holds.

    Only two tests are decisive for this domain:
      x <= c with c < 0   forces x negative
      x >  c with c >= 0  forces x positive
    A contradiction with the current sign yields BOTTOM.
    """
    if value == BOTTOM:
        return BOTTOM
    if rel is Rel.LE and literal < 0:
        return BOTTOM if value == POS else NEG
    if rel is Rel.GT and literal >= 0:
        return BOTTOM if value == NEG else POS
    return value
