"""absint CLI — Command-line driver for the sign-domain analyzer.

Commands:
  absint list                        — List the example programs
  absint run [NAME ...]              — Run examples through both semantics
  absint trace NAME                  — Per-label abstract states of one example
  absint verify-domain               — Check the sign transfer tables with Z3
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from absint import __version__
from absint.ast_nodes import collect_vars, format_command
from absint.config import AnalysisConfig, load_config
from absint.engines.abstract_interp import analyze_with_trace
from absint.engines.soundness import verify_transfer_functions
from absint.environment import AbstractEnvironment
from absint.errors import EngineError
from absint.examples import get_example, list_examples, run_example
from absint.formatters import (
    bold, dim,
    format_results_json, format_results_pretty,
    format_trace_json, format_trace_pretty,
    format_violations_json, format_violations_pretty,
)


def _output_format(args: argparse.Namespace, config: AnalysisConfig) -> str:
    return getattr(args, "format", None) or config.format


def cmd_list(args: argparse.Namespace, config: AnalysisConfig) -> int:
    """Print every example with its description."""
    print(f"\n {bold('absint examples')}")
    print(f" {dim('─' * 45)}")
    for name in list_examples():
        ex = get_example(name)
        print(f"   {name:20s} {ex.description}")
    print()
    return 0


def cmd_run(args: argparse.Namespace, config: AnalysisConfig) -> int:
    """Run examples concretely and abstractly; exit 1 on an unsound result."""
    names = args.names or list_examples()
    unknown = [n for n in names if n not in list_examples()]
    if unknown:
        print(json.dumps({"error": f"Unknown example(s): {', '.join(unknown)}",
                          "available": list_examples()}))
        return 1
    results = [run_example(get_example(name), config) for name in names]

    if _output_format(args, config) == "json":
        print(format_results_json(results))
    else:
        print(format_results_pretty(results))

    return 0 if all(r.sound for r in results) else 1


def cmd_trace(args: argparse.Namespace, config: AnalysisConfig) -> int:
    """Show how the abstract state evolves label by label."""
    ex = get_example(args.name)
    variables = collect_vars(ex.program)
    _, steps = analyze_with_trace(ex.program, AbstractEnvironment(config.memory_size), config)

    if _output_format(args, config) == "json":
        print(format_trace_json(ex.name, steps, variables))
        return 0

    print(format_command(ex.program, indent=1))
    print(format_trace_pretty(ex.name, steps, variables))
    return 0


def cmd_verify_domain(args: argparse.Namespace, config: AnalysisConfig) -> int:
    """Check every lattice transfer-table entry; exit 1 on violations."""
    violations = verify_transfer_functions()
    if _output_format(args, config) == "json":
        print(format_violations_json(violations))
    else:
        print(format_violations_pretty(violations))
    return 1 if violations else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="absint",
        description="absint — sign-domain abstract interpreter for a toy imperative language",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="Path to .absintrc.yml / .absintrc.json")
    parser.add_argument("--log-level", dest="log_level",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Override the configured log level")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    p_list = subparsers.add_parser("list", help="List example programs")
    p_list.set_defaults(func=cmd_list)

    p_run = subparsers.add_parser("run", help="Run examples through both semantics")
    p_run.add_argument("names", nargs="*", metavar="NAME", help="Examples to run (default: all)")
    p_run.add_argument("--format", choices=["pretty", "json"], help="Output format")
    p_run.set_defaults(func=cmd_run)

    p_trace = subparsers.add_parser("trace", help="Per-label abstract states of one example")
    p_trace.add_argument("name", choices=list_examples(), metavar="NAME", help="Example to trace")
    p_trace.add_argument("--format", choices=["pretty", "json"], help="Output format")
    p_trace.set_defaults(func=cmd_trace)

    p_verify = subparsers.add_parser("verify-domain", help="Check sign transfer tables with Z3")
    p_verify.add_argument("--format", choices=["pretty", "json"], help="Output format")
    p_verify.set_defaults(func=cmd_verify_domain)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = load_config(args.config)
    except EngineError as e:
        print(e.to_json())
        return 1

    logging.basicConfig(
        level=getattr(logging, args.log_level or config.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args, config)
    except EngineError as e:
        print(e.to_json())
        return 1


if __name__ == "__main__":
    sys.exit(main())
