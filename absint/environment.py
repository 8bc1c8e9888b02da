"""absint Abstract Environment.

Abstract program state: a total map from every variable slot to a sign.
This is the product domain Var -> SignValue, ordered pointwise. Values are
immutable; write/join/bottomize return new environments.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, Optional, Tuple

from absint.ast_nodes import Var
from absint.errors import EngineError, MemoryIndexError, index_error, internal_error
from absint.lattice import BOTTOM, TOP, SignValue, includes, join


DEFAULT_SIZE = 100


class AbstractEnvironment:
    """Var -> SignValue, every slot defined.

    A fresh environment maps every slot to TOP: nothing is known about a
    variable before it is written.
    """

    __slots__ = ("_slots",)

    def __init__(self, size: int = DEFAULT_SIZE, _slots: Optional[Tuple[SignValue, ...]] = None):
        if _slots is None:
            _slots = (TOP,) * size
        self._slots = _slots

    @classmethod
    def _of(cls, slots: Tuple[SignValue, ...]) -> AbstractEnvironment:
        return cls(len(slots), slots)

    @property
    def size(self) -> int:
        return len(self._slots)

    def _check(self, var: Var) -> int:
        i = var.index
        if not 0 <= i < len(self._slots):
            raise MemoryIndexError(index_error(i, len(self._slots), "abstract environment"))
        return i

    def read(self, var: Var) -> SignValue:
        return self._slots[self._check(var)]

    def write(self, var: Var, value: SignValue) -> AbstractEnvironment:
        i = self._check(var)
        slots = list(self._slots)
        slots[i] = value
        return self._of(tuple(slots))

    def join(self, other: AbstractEnvironment) -> AbstractEnvironment:
        if other.size != self.size:
            raise EngineError(internal_error(
                f"Cannot join environments of {self.size} and {other.size} slots"))
        return self._of(tuple(join(a, b) for a, b in zip(self._slots, other._slots)))

    def is_bottom(self) -> bool:
        """One contradictory slot makes the whole state unreachable."""
        return any(v == BOTTOM for v in self._slots)

    def bottomize(self) -> AbstractEnvironment:
        return self._of((BOTTOM,) * len(self._slots))

    def is_less_or_equal(self, other: AbstractEnvironment) -> bool:
        """Pointwise order: every slot of self is included in other's."""
        if other.size != self.size:
            raise EngineError(internal_error(
                f"Cannot compare environments of {self.size} and {other.size} slots"))
        return all(includes(a, b) for a, b in zip(self._slots, other._slots))

    def __iter__(self) -> Iterator[SignValue]:
        return iter(self._slots)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AbstractEnvironment):
            return NotImplemented
        return self._slots == other._slots

    def __hash__(self) -> int:
        return hash(self._slots)

    def as_dict(self, variables: Iterable[Var]) -> Dict[str, str]:
        return {str(v): str(self.read(v)) for v in variables}

    def format(self, variables: Iterable[Var]) -> str:
        if self.is_bottom():
            return "bot"
        parts = [f"{name}: {value}" for name, value in self.as_dict(variables).items()]
        return "{" + ", ".join(parts) + "}"

    def __repr__(self) -> str:
        changed = {i: str(v) for i, v in enumerate(self._slots) if v != TOP}
        return f"AbstractEnvironment(size={self.size}, non_top={changed})"
