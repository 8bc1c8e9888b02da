"""absint Example Programs.

A small catalogue of toy programs, each run through both semantics by the
`absint run` command. The first four are the reference scenarios:

  straight-line       x := 3; x := 4                          -> 4,   Pos
  arithmetic          x := 5; x := x + 3                      -> 8,   Pos
  contradictory-else  x := 5; if x <= -1 then x := x + 3
                      else x := x - 20; x := x + 3            -> -12, Top
  missing-else        x := 5; if x > 0 then x := x + 3;
                      x := x + 3                              -> 11,  Pos
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from absint.ast_nodes import Command, ProgramBuilder, Var, add, gt, le, mul, sub
from absint.concrete import Memory
from absint.config import AnalysisConfig
from absint.engines.abstract_interp import analyze
from absint.environment import AbstractEnvironment
from absint.lattice import SignValue, includes, abstract_of

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExampleProgram:
    name: str
    description: str
    program: Command
    target: Var
    inputs: Tuple[int, ...] = ()


@dataclass(frozen=True)
class ExampleResult:
    name: str
    target: str
    concrete: int
    abstract: SignValue

    @property
    def sound(self) -> bool:
        """The concrete value's sign is included in the abstract reading."""
        return includes(abstract_of(self.concrete), self.abstract)

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "variable": self.target,
            "concrete": self.concrete,
            "abstract": str(self.abstract),
            "sound": self.sound,
        }


_REGISTRY: Dict[str, Callable[[], ExampleProgram]] = {}


def example(name: str) -> Callable[[Callable[[], ExampleProgram]], Callable[[], ExampleProgram]]:
    def register(fn: Callable[[], ExampleProgram]) -> Callable[[], ExampleProgram]:
        _REGISTRY[name] = fn
        return fn
    return register


def list_examples() -> List[str]:
    return list(_REGISTRY)


def get_example(name: str) -> ExampleProgram:
    try:
        return _REGISTRY[name]()
    except KeyError:
        raise KeyError(f"Unknown example '{name}'. Available: {', '.join(_REGISTRY)}") from None


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------

@example("straight-line")
def straight_line() -> ExampleProgram:
    b = ProgramBuilder()
    x = b.var("x")
    prog = b.seq(b.assign_const(x, 3), b.assign_const(x, 4))
    return ExampleProgram("straight-line", "Overwrite a fresh variable", prog, x)


@example("arithmetic")
def arithmetic() -> ExampleProgram:
    b = ProgramBuilder()
    x = b.var("x")
    prog = b.seq(b.assign_const(x, 5), b.assign(x, add(x, 3)))
    return ExampleProgram("arithmetic", "Positive plus positive stays positive", prog, x)


@example("contradictory-else")
def contradictory_else() -> ExampleProgram:
    b = ProgramBuilder()
    x = b.var("x")
    prog = b.seq(
        b.assign_const(x, 5),
        b.if_(le(x, -1), b.assign(x, add(x, 3)), b.assign(x, sub(x, 20))),
        b.assign(x, add(x, 3)),
    )
    return ExampleProgram("contradictory-else", "Then-branch is unreachable, else goes negative", prog, x)


@example("missing-else")
def missing_else() -> ExampleProgram:
    b = ProgramBuilder()
    x = b.var("x")
    prog = b.seq(
        b.assign_const(x, 5),
        b.if_(gt(x, 0), b.assign(x, add(x, 3))),
        b.assign(x, add(x, 3)),
    )
    return ExampleProgram("missing-else", "Conditional without else branch", prog, x)


@example("countdown-loop")
def countdown_loop() -> ExampleProgram:
    b = ProgramBuilder()
    x = b.var("x")
    prog = b.seq(
        b.assign_const(x, 10),
        b.while_(gt(x, 0), b.assign(x, sub(x, 1))),
    )
    return ExampleProgram("countdown-loop", "Decrement to zero", prog, x)


@example("factorial")
def factorial() -> ExampleProgram:
    b = ProgramBuilder()
    n = b.var("n")
    r = b.var("r")
    prog = b.seq(
        b.assign_const(n, 5),
        b.assign_const(r, 1),
        b.while_(gt(n, 0), b.seq(b.assign(r, mul(r, n)), b.assign(n, sub(n, 1)))),
    )
    return ExampleProgram("factorial", "Product of 1..5", prog, r)


@example("input-guard")
def input_guard() -> ExampleProgram:
    b = ProgramBuilder()
    x = b.var("x")
    y = b.var("y")
    prog = b.seq(
        b.input(x),
        b.if_(gt(x, 0), b.assign(y, mul(x, 2)), b.assign_const(y, 1)),
    )
    return ExampleProgram("input-guard", "Unknown input guarded by a sign test", prog, y, inputs=(-7,))


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------

def run_example(ex: ExampleProgram, config: Optional[AnalysisConfig] = None) -> ExampleResult:
    """Run one example through the concrete oracle and the abstract engine."""
    config = config or AnalysisConfig()
    feed = itertools.chain(ex.inputs, itertools.repeat(0))

    logger.info("running example %s", ex.name)
    memory = Memory(config.memory_size).sem_com(
        ex.program, read_input=lambda: next(feed), fuel=config.concrete_fuel)
    env = analyze(ex.program, AbstractEnvironment(config.memory_size), config)

    result = ExampleResult(ex.name, str(ex.target), memory.read(ex.target), env.read(ex.target))
    if not result.sound:
        logger.warning("example %s: abstract %s misses concrete %d",
                       ex.name, result.abstract, result.concrete)
    return result
