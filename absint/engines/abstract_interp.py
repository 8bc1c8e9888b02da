"""absint Abstract Interpretation Engine.

Implements the sign-domain abstract semantics of the toy language, after
Cousot & Cousot (1977) "Abstract Interpretation: A Unified Lattice Model
for Static Analysis of Programs by Construction or Approximation of
Fixpoints", POPL '77.

Each command denotes an abstract transformer F# : Env -> Env with
  alpha(F(gamma(env))) <= F#(env)    (soundness)

Loops are summarized by ascending Kleene iteration:
  X_0     = env
  X_{n+1} = X_n join F#(refine(cond, X_n))
  until F#(refine(cond, X_n)) <= X_n
The sign lattice has finite height, so the chain stabilizes without
widening; the iteration cap only guards against a broken transformer.
The loop exit state is the invariant refined by the negated condition.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from absint.ast_nodes import (
    Assign, BinaryOp, Command, Cond, Const, Expr, If, Input, Seq, Skip, Var, While,
)
from absint.config import AnalysisConfig
from absint.environment import AbstractEnvironment
from absint.errors import EngineError, FixpointDivergenceError, divergence_error, internal_error
from absint.lattice import BOTTOM, TOP, SignValue, abstract_of, apply_binop, apply_condition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TraceStep:
    """Abstract state observed after a command (or a loop iteration)."""
    label: int
    kind: str
    env: AbstractEnvironment
    iteration: Optional[int] = None


class AbstractInterpreter:
    """Abstract interpreter over the sign domain.

    With `trace` enabled, every executed command appends a TraceStep
    tagged with its label, and each fixpoint iteration appends a
    "while-iteration" step holding the candidate invariant.
    """

    def __init__(self, config: Optional[AnalysisConfig] = None, trace: Optional[bool] = None):
        self.config = config or AnalysisConfig()
        self.trace = self.config.trace if trace is None else trace
        self.steps: List[TraceStep] = []

    def _record(self, cmd: Command, kind: str, env: AbstractEnvironment,
                iteration: Optional[int] = None) -> None:
        if self.trace:
            self.steps.append(TraceStep(cmd.label.index, kind, env, iteration))

    # -- expressions and conditions -------------------------------------------

    def eval_expr(self, expr: Expr, env: AbstractEnvironment) -> SignValue:
        if isinstance(expr, Const):
            return abstract_of(expr.value)
        if isinstance(expr, Var):
            return env.read(expr)
        if isinstance(expr, BinaryOp):
            return apply_binop(expr.op, self.eval_expr(expr.left, env),
                               self.eval_expr(expr.right, env))
        raise EngineError(internal_error("Unknown expression node", expr))

    def eval_cond(self, cond: Cond, env: AbstractEnvironment) -> AbstractEnvironment:
        """Restrict env to the states where `cond` may hold."""
        refined = apply_condition(cond.rel, cond.right.value, env.read(cond.left))
        if refined == BOTTOM:
            logger.debug("condition %s unsatisfiable, branch unreachable", cond)
            return env.bottomize()
        return env.write(cond.left, refined)

    # -- commands -------------------------------------------------------------

    def run_command(self, cmd: Command, env: AbstractEnvironment) -> AbstractEnvironment:
        if env.is_bottom():
            return env
        result = self._transfer(cmd, env)
        self._record(cmd, type(cmd).__name__.lower(), result)
        return result

    def _transfer(self, cmd: Command, env: AbstractEnvironment) -> AbstractEnvironment:
        if isinstance(cmd, Skip):
            return env

        if isinstance(cmd, Seq):
            return self.run_command(cmd.second, self.run_command(cmd.first, env))

        if isinstance(cmd, Assign):
            return env.write(cmd.var, self.eval_expr(cmd.expr, env))

        if isinstance(cmd, Input):
            return env.write(cmd.var, TOP)

        if isinstance(cmd, If):
            then_result = self.run_command(cmd.then, self.eval_cond(cmd.cond, env))
            else_entry = self.eval_cond(cmd.cond.negate(), env)
            if cmd.els is None:
                else_result = else_entry
            else:
                else_result = self.run_command(cmd.els, else_entry)
            return then_result.join(else_result)

        if isinstance(cmd, While):
            invariant = self.compute_fixed_point(cmd, env)
            return self.eval_cond(cmd.cond.negate(), invariant)

        raise EngineError(internal_error("Unknown command node", cmd))

    def loop_step(self, loop: While, env: AbstractEnvironment) -> AbstractEnvironment:
        """One pass through the loop body under the loop condition."""
        return self.run_command(loop.body, self.eval_cond(loop.cond, env))

    def compute_fixed_point(self, loop: While, env: AbstractEnvironment) -> AbstractEnvironment:
        """Least invariant above `env` for `loop`, by Kleene iteration."""
        current = env
        for iteration in range(1, self.config.max_iterations + 1):
            nxt = self.loop_step(loop, current)
            if nxt.is_less_or_equal(current):
                logger.debug("loop %s stable after %d iteration(s)", loop.label, iteration)
                return current
            current = current.join(nxt)
            self._record(loop, "while-iteration", current, iteration)
        raise FixpointDivergenceError(divergence_error(self.config.max_iterations, loop.label.index))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def analyze(
    cmd: Command,
    env: Optional[AbstractEnvironment] = None,
    config: Optional[AnalysisConfig] = None,
) -> AbstractEnvironment:
    """Run the abstract semantics of `cmd` from `env` (all TOP by default)."""
    config = config or AnalysisConfig()
    if env is None:
        env = AbstractEnvironment(config.memory_size)
    return AbstractInterpreter(config, trace=False).run_command(cmd, env)


def analyze_with_trace(
    cmd: Command,
    env: Optional[AbstractEnvironment] = None,
    config: Optional[AnalysisConfig] = None,
) -> Tuple[AbstractEnvironment, List[TraceStep]]:
    """Like analyze, also returning the per-label trace."""
    config = config or AnalysisConfig()
    if env is None:
        env = AbstractEnvironment(config.memory_size)
    interpreter = AbstractInterpreter(config, trace=True)
    result = interpreter.run_command(cmd, env)
    return result, interpreter.steps
