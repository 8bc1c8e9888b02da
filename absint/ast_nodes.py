"""absint AST Node definitions.

The toy language has no surface syntax: programs are trees built with the
helpers at the bottom of this module (usually through a ProgramBuilder).

  Expr    ::= Const | Var | BinaryOp(op, Expr, Expr)
  Cond    ::= Var (<= | >) Const
  Command ::= Skip | Seq | Assign | Input | If | While

Every command node carries a control-flow Label.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Union


# ---------------------------------------------------------------------------
# Operators and relations
# ---------------------------------------------------------------------------

class BinOp(Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"

    def apply(self, left: int, right: int) -> int:
        if self is BinOp.ADD:
            return left + right
        if self is BinOp.SUB:
            return left - right
        return left * right


class Rel(Enum):
    LE = "<="
    GT = ">"

    def negate(self) -> Rel:
        return Rel.GT if self is Rel.LE else Rel.LE

    def holds(self, left: int, right: int) -> bool:
        if self is Rel.LE:
            return left <= right
        return left > right


# ---------------------------------------------------------------------------
# Labels
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Label:
    """Control-flow label of a command node (0 = unlabeled)."""
    index: int = 0

    def __str__(self) -> str:
        return f"L{self.index}"


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Expr:
    pass


@dataclass(frozen=True)
class Const(Expr):
    value: int = 0

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Var(Expr):
    """A storage slot. Identity is the index; the name is only for display."""
    index: int = 0
    name: str = field(default="", compare=False)

    def __str__(self) -> str:
        return self.name or f"v{self.index}"


@dataclass(frozen=True)
class BinaryOp(Expr):
    op: BinOp = BinOp.ADD
    left: Expr = field(default_factory=Const)
    right: Expr = field(default_factory=Const)

    def __str__(self) -> str:
        def operand(e: Expr) -> str:
            return f"({e})" if isinstance(e, BinaryOp) else str(e)
        return f"{operand(self.left)} {self.op.value} {operand(self.right)}"


@dataclass(frozen=True)
class Cond:
    rel: Rel = Rel.LE
    left: Var = field(default_factory=Var)
    right: Const = field(default_factory=Const)

    def negate(self) -> Cond:
        return Cond(rel=self.rel.negate(), left=self.left, right=self.right)

    def __str__(self) -> str:
        return f"{self.left} {self.rel.value} {self.right}"


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Command:
    label: Label = field(default_factory=Label, compare=False)


@dataclass(frozen=True)
class Skip(Command):
    pass


@dataclass(frozen=True)
class Seq(Command):
    first: Command = field(default_factory=Skip)
    second: Command = field(default_factory=Skip)


@dataclass(frozen=True)
class Assign(Command):
    var: Var = field(default_factory=Var)
    expr: Expr = field(default_factory=Const)


@dataclass(frozen=True)
class Input(Command):
    var: Var = field(default_factory=Var)


@dataclass(frozen=True)
class If(Command):
    cond: Cond = field(default_factory=Cond)
    then: Command = field(default_factory=Skip)
    els: Optional[Command] = None


@dataclass(frozen=True)
class While(Command):
    cond: Cond = field(default_factory=Cond)
    body: Command = field(default_factory=Skip)


def format_command(cmd: Command, indent: int = 0) -> str:
    """Render a command tree as indented pseudo-code."""
    pad = "  " * indent
    if isinstance(cmd, Skip):
        return f"{pad}skip"
    if isinstance(cmd, Seq):
        return f"{format_command(cmd.first, indent)};\n{format_command(cmd.second, indent)}"
    if isinstance(cmd, Assign):
        return f"{pad}{cmd.var} := {cmd.expr}"
    if isinstance(cmd, Input):
        return f"{pad}input({cmd.var})"
    if isinstance(cmd, If):
        text = f"{pad}if {cmd.cond} then\n{format_command(cmd.then, indent + 1)}"
        if cmd.els is not None:
            text += f"\n{pad}else\n{format_command(cmd.els, indent + 1)}"
        return text + f"\n{pad}end"
    if isinstance(cmd, While):
        return f"{pad}while {cmd.cond} do\n{format_command(cmd.body, indent + 1)}\n{pad}done"
    return f"{pad}<{type(cmd).__name__}>"


def iter_commands(cmd: Command) -> Iterator[Command]:
    """Pre-order walk over every command node."""
    yield cmd
    if isinstance(cmd, Seq):
        yield from iter_commands(cmd.first)
        yield from iter_commands(cmd.second)
    elif isinstance(cmd, If):
        yield from iter_commands(cmd.then)
        if cmd.els is not None:
            yield from iter_commands(cmd.els)
    elif isinstance(cmd, While):
        yield from iter_commands(cmd.body)


def _expr_vars(expr: Expr) -> Iterator[Var]:
    if isinstance(expr, Var):
        yield expr
    elif isinstance(expr, BinaryOp):
        yield from _expr_vars(expr.left)
        yield from _expr_vars(expr.right)


def collect_vars(cmd: Command) -> list[Var]:
    """Variables mentioned anywhere in a program, ordered by index."""
    found: dict[int, Var] = {}
    for node in iter_commands(cmd):
        if isinstance(node, (Assign, Input)):
            found.setdefault(node.var.index, node.var)
        if isinstance(node, Assign):
            for v in _expr_vars(node.expr):
                found.setdefault(v.index, v)
        if isinstance(node, (If, While)):
            found.setdefault(node.cond.left.index, node.cond.left)
    return [found[i] for i in sorted(found)]


# ---------------------------------------------------------------------------
# Expression and condition helpers
# ---------------------------------------------------------------------------

Operand = Union[Expr, int]


def _as_expr(value: Operand) -> Expr:
    if isinstance(value, Expr):
        return value
    return Const(value)


def const(n: int) -> Const:
    return Const(n)


def add(left: Operand, right: Operand) -> BinaryOp:
    return BinaryOp(BinOp.ADD, _as_expr(left), _as_expr(right))


def sub(left: Operand, right: Operand) -> BinaryOp:
    return BinaryOp(BinOp.SUB, _as_expr(left), _as_expr(right))


def mul(left: Operand, right: Operand) -> BinaryOp:
    return BinaryOp(BinOp.MUL, _as_expr(left), _as_expr(right))


def le(var: Var, n: int) -> Cond:
    return Cond(Rel.LE, var, Const(n))


def gt(var: Var, n: int) -> Cond:
    return Cond(Rel.GT, var, Const(n))


# ---------------------------------------------------------------------------
# Program construction
# ---------------------------------------------------------------------------

class VarAllocator:
    """Hands out variables with consecutive indices."""

    def __init__(self, start: int = 0):
        self._next = start

    def fresh(self, name: str = "") -> Var:
        var = Var(self._next, name)
        self._next += 1
        return var

    @property
    def allocated(self) -> int:
        return self._next


class ProgramBuilder:
    """Builds command trees with fresh variables and distinct labels."""

    def __init__(self):
        self.vars = VarAllocator()
        self._next_label = 1

    def var(self, name: str = "") -> Var:
        return self.vars.fresh(name)

    def _label(self) -> Label:
        label = Label(self._next_label)
        self._next_label += 1
        return label

    def skip(self) -> Skip:
        return Skip(self._label())

    def assign(self, var: Var, expr: Operand) -> Assign:
        return Assign(self._label(), var, _as_expr(expr))

    def assign_const(self, var: Var, n: int) -> Assign:
        return Assign(self._label(), var, Const(n))

    def input(self, var: Var) -> Input:
        return Input(self._label(), var)

    def seq(self, *commands: Command) -> Command:
        """Right-nested sequence: seq(a, b, c) == Seq(a, Seq(b, c))."""
        if not commands:
            return self.skip()
        if len(commands) == 1:
            return commands[0]
        return Seq(self._label(), commands[0], self.seq(*commands[1:]))

    def if_(self, cond: Cond, then: Command, els: Optional[Command] = None) -> If:
        return If(self._label(), cond, then, els)

    def while_(self, cond: Cond, body: Command) -> While:
        return While(self._label(), cond, body)
