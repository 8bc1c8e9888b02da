"""absint Output Formatters — Human-friendly terminal output.

Two output modes for every command:
    pretty   — colored text (default)
    json     — machine-readable
"""

from __future__ import annotations

import json
import os
import sys
from typing import Iterable, List, Sequence

from absint.ast_nodes import Var
from absint.engines.abstract_interp import TraceStep
from absint.engines.soundness import SoundnessViolation
from absint.examples import ExampleResult


# ── ANSI color helpers ───────────────────────────────────────────────────

def _no_color() -> bool:
    return os.environ.get("NO_COLOR") is not None or not sys.stdout.isatty()


def _c(code: str, text: str) -> str:
    if _no_color():
        return text
    return f"\033[{code}m{text}\033[0m"


def red(t: str) -> str:
    return _c("31", t)


def green(t: str) -> str:
    return _c("32", t)


def cyan(t: str) -> str:
    return _c("36", t)


def bold(t: str) -> str:
    return _c("1", t)


def dim(t: str) -> str:
    return _c("2", t)


def icon_ok() -> str:
    return green("✔")


def icon_error() -> str:
    return red("✖")


# ── Example runs ────────────────────────────────────────────────────────

def format_results_pretty(results: Sequence[ExampleResult]) -> str:
    lines: List[str] = []
    for r in results:
        icon = icon_ok() if r.sound else icon_error()
        lines.append(f"  {icon} {bold(r.name)}")
        lines.append(f"      Result is {r.concrete}")
        lines.append(f"      Abstract result is {cyan(str(r.abstract))}")
    return "\n".join(lines)


def format_results_json(results: Sequence[ExampleResult]) -> str:
    return json.dumps([r.to_dict() for r in results], indent=2)


# ── Traces ──────────────────────────────────────────────────────────────

def _step_label(step: TraceStep) -> str:
    if step.iteration is not None:
        return f"L{step.label} {step.kind} #{step.iteration}"
    return f"L{step.label} {step.kind}"


def format_trace_pretty(name: str, steps: Sequence[TraceStep], variables: Iterable[Var]) -> str:
    variables = list(variables)
    lines = [f"\n  {bold('Abstract trace')} — {name}", f"  {dim('─' * 50)}"]
    for step in steps:
        lines.append(f"  [{_step_label(step)}] {step.env.format(variables)}")
    return "\n".join(lines)


def format_trace_json(name: str, steps: Sequence[TraceStep], variables: Iterable[Var]) -> str:
    variables = list(variables)
    payload = {
        "name": name,
        "steps": [
            {
                "label": s.label,
                "kind": s.kind,
                "iteration": s.iteration,
                "bottom": s.env.is_bottom(),
                "state": s.env.as_dict(variables),
            }
            for s in steps
        ],
    }
    return json.dumps(payload, indent=2)


# ── Transfer-function verification ──────────────────────────────────────

def format_violations_pretty(violations: Sequence[SoundnessViolation]) -> str:
    if not violations:
        return f"  {icon_ok()} every transfer-table entry is sound"
    lines = [f"  {icon_error()} {len(violations)} unsound transfer-table entr"
             f"{'y' if len(violations) == 1 else 'ies'}:"]
    for v in violations:
        lines.append(f"      {v}")
    return "\n".join(lines)


def format_violations_json(violations: Sequence[SoundnessViolation]) -> str:
    return json.dumps([v.to_error().to_dict() for v in violations], indent=2)
