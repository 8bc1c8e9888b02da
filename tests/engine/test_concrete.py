"""absint Concrete Semantics Tests — CON-001 through CON-004."""

import pytest

from absint.ast_nodes import (
    Assign, Const, If, Input, ProgramBuilder, Seq, Skip, Var, While, add, gt, le, mul, sub,
)
from absint.concrete import Memory, execute
from absint.errors import ErrorKind, ExecutionLimitError, MemoryIndexError


class TestMemory:
    """CON-001: fixed-size memory, default 0."""

    def test_defaults(self):
        mem = Memory()
        assert mem.size == 100
        assert mem.read(Var(0)) == 0
        assert mem.read(Var(99)) == 0

    def test_write_is_functional(self):
        mem = Memory()
        updated = mem.write(Var(7), -3)
        assert updated.read(Var(7)) == -3
        assert mem.read(Var(7)) == 0

    @pytest.mark.parametrize("index", [-1, 100])
    def test_out_of_range(self, index):
        with pytest.raises(MemoryIndexError) as exc:
            Memory().read(Var(index))
        assert exc.value.errors[0].kind == ErrorKind.INDEX_ERROR


class TestEvaluation:
    """CON-002: expressions and conditions."""

    def test_expressions(self):
        x = Var(0)
        mem = Memory().write(x, 6)
        assert mem.sem_expr(Const(-2)) == -2
        assert mem.sem_expr(add(x, 3)) == 9
        assert mem.sem_expr(sub(x, 10)) == -4
        assert mem.sem_expr(mul(x, sub(0, x))) == -36

    def test_conditions(self):
        x = Var(0)
        mem = Memory().write(x, -1)
        assert mem.sem_cond(le(x, -1))
        assert not mem.sem_cond(gt(x, -1))


class TestCommands:
    """CON-003: denotational semantics of commands."""

    def test_sequence_order(self):
        x = Var(0)
        prog = Seq(first=Assign(var=x, expr=Const(2)), second=Assign(var=x, expr=mul(x, 5)))
        assert execute(prog).read(x) == 10

    def test_if_without_else_leaves_memory(self):
        x = Var(0)
        mem = Memory().write(x, -5)
        prog = If(cond=gt(x, 0), then=Assign(var=x, expr=Const(100)))
        assert mem.sem_com(prog) == mem

    def test_if_else(self):
        x = Var(0)
        prog = If(cond=le(x, 0), then=Assign(var=x, expr=Const(1)), els=Assign(var=x, expr=Const(2)))
        assert execute(prog).read(x) == 1

    def test_while(self):
        b = ProgramBuilder()
        n, r = b.var("n"), b.var("r")
        prog = b.seq(
            b.assign_const(n, 5),
            b.assign_const(r, 1),
            b.while_(gt(n, 0), b.seq(b.assign(r, mul(r, n)), b.assign(n, sub(n, 1)))),
        )
        mem = execute(prog)
        assert mem.read(r) == 120
        assert mem.read(n) == 0

    def test_input_defaults_to_zero(self):
        x = Var(0)
        mem = Memory().write(x, 9)
        assert mem.sem_com(Input(var=x)).read(x) == 0

    def test_input_source(self):
        x, y = Var(0), Var(1)
        values = iter([4, -8])
        prog = Seq(first=Input(var=x), second=Input(var=y))
        mem = execute(prog, read_input=lambda: next(values))
        assert (mem.read(x), mem.read(y)) == (4, -8)

    def test_skip(self):
        mem = Memory().write(Var(1), 1)
        assert mem.sem_com(Skip()) == mem


class TestFuel:
    """CON-004: bounded execution of loops."""

    def test_non_terminating_loop_runs_out_of_fuel(self):
        x = Var(0)
        prog = While(cond=le(x, 0), body=Skip())
        with pytest.raises(ExecutionLimitError) as exc:
            execute(prog, fuel=50)
        assert exc.value.errors[0].details["fuel"] == 50

    def test_fuel_counts_iterations(self):
        x = Var(0)
        prog = Seq(first=Assign(var=x, expr=Const(3)),
                   second=While(cond=gt(x, 0), body=Assign(var=x, expr=sub(x, 1))))
        assert execute(prog, fuel=3).read(x) == 0
        with pytest.raises(ExecutionLimitError):
            execute(prog, fuel=2)
