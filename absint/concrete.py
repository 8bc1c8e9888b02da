"""absint Concrete Semantics.

Denotational (big-step) semantics of the toy language over a fixed-size
memory of integers. It serves as the oracle against which abstract
results are checked:

  [[skip]] m            = m
  [[c1; c2]] m          = [[c2]] ([[c1]] m)
  [[x := e]] m          = m[x <- [[e]] m]
  [[input(x)]] m        = m[x <- read()]
  [[if b then c1 else c2]] m = [[c1]] m  if [[b]] m  else [[c2]] m
  [[while b do c]] m    = least fixpoint, executed iteratively
"""

from __future__ import annotations

from typing import Callable, Optional, Tuple

from absint.ast_nodes import (
    Assign, BinaryOp, Command, Cond, Const, Expr, If, Input, Seq, Skip, Var, While,
)
from absint.errors import (
    EngineError, ExecutionLimitError, MemoryIndexError,
    execution_limit_error, index_error, internal_error,
)


DEFAULT_SIZE = 100

InputSource = Callable[[], int]


def zero_input() -> int:
    """Default input source: every input(x) reads 0."""
    return 0


class Memory:
    """Var -> int, every slot defined (initially 0)."""

    __slots__ = ("_cells",)

    def __init__(self, size: int = DEFAULT_SIZE, _cells: Optional[Tuple[int, ...]] = None):
        if _cells is None:
            _cells = (0,) * size
        self._cells = _cells

    @property
    def size(self) -> int:
        return len(self._cells)

    def _check(self, var: Var) -> int:
        i = var.index
        if not 0 <= i < len(self._cells):
            raise MemoryIndexError(index_error(i, len(self._cells)))
        return i

    def read(self, var: Var) -> int:
        return self._cells[self._check(var)]

    def write(self, var: Var, value: int) -> Memory:
        i = self._check(var)
        cells = list(self._cells)
        cells[i] = value
        return Memory(len(cells), tuple(cells))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Memory):
            return NotImplemented
        return self._cells == other._cells

    def __hash__(self) -> int:
        return hash(self._cells)

    def __repr__(self) -> str:
        nonzero = {i: v for i, v in enumerate(self._cells) if v != 0}
        return f"Memory(size={self.size}, nonzero={nonzero})"

    # -- expressions and conditions ------------------------------------------

    def sem_expr(self, expr: Expr) -> int:
        if isinstance(expr, Const):
            return expr.value
        if isinstance(expr, Var):
            return self.read(expr)
        if isinstance(expr, BinaryOp):
            return expr.op.apply(self.sem_expr(expr.left), self.sem_expr(expr.right))
        raise EngineError(internal_error("Unknown expression node", expr))

    def sem_cond(self, cond: Cond) -> bool:
        return cond.rel.holds(self.read(cond.left), cond.right.value)

    # -- commands -------------------------------------------------------------

    def sem_com(
        self,
        cmd: Command,
        read_input: InputSource = zero_input,
        fuel: Optional[int] = None,
    ) -> Memory:
        """Run `cmd` and return the final memory.

        `fuel` bounds the total number of loop iterations; running out
        raises ExecutionLimitError. None means unbounded.
        """
        runner = _Runner(read_input, fuel)
        return runner.run(cmd, self)


class _Runner:
    """Carries the input source and remaining loop fuel through one run."""

    def __init__(self, read_input: InputSource, fuel: Optional[int]):
        self.read_input = read_input
        self.fuel = fuel
        self.remaining = fuel

    def _burn(self, cmd: While) -> None:
        if self.remaining is None:
            return
        if self.remaining <= 0:
            raise ExecutionLimitError(execution_limit_error(self.fuel, cmd.label.index))
        self.remaining -= 1

    def run(self, cmd: Command, mem: Memory) -> Memory:
        if isinstance(cmd, Skip):
            return mem
        if isinstance(cmd, Seq):
            return self.run(cmd.second, self.run(cmd.first, mem))
        if isinstance(cmd, Assign):
            return mem.write(cmd.var, mem.sem_expr(cmd.expr))
        if isinstance(cmd, Input):
            return mem.write(cmd.var, self.read_input())
        if isinstance(cmd, If):
            if mem.sem_cond(cmd.cond):
                return self.run(cmd.then, mem)
            if cmd.els is None:
                return mem
            return self.run(cmd.els, mem)
        if isinstance(cmd, While):
            while mem.sem_cond(cmd.cond):
                self._burn(cmd)
                mem = self.run(cmd.body, mem)
            return mem
        raise EngineError(internal_error("Unknown command node", cmd))


def execute(
    cmd: Command,
    memory: Optional[Memory] = None,
    read_input: InputSource = zero_input,
    fuel: Optional[int] = None,
) -> Memory:
    """Run a program from `memory` (a fresh zeroed memory by default)."""
    if memory is None:
        memory = Memory()
    return memory.sem_com(cmd, read_input=read_input, fuel=fuel)
