#!/usr/bin/env python3
"""
Solve a single DIMACS CNF file.

Exit status follows the SAT competition convention: 10 satisfiable,
20 unsatisfiable, 1 for unreadable or malformed input.
"""

import argparse
import logging
import sys

from dimacs import format_result, load_dimacs
from dpll_sat import HEURISTICS, DPLLSolver, InputError, SolverConfig

logger = logging.getLogger(__name__)

EXIT_SAT = 10
EXIT_UNSAT = 20
EXIT_INPUT_ERROR = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="DPLL SAT solver for DIMACS CNF files.")
    parser.add_argument("cnf_file", type=str, help='DIMACS CNF file (optionally .gz)')
    parser.add_argument("--heuristic", type=str, default='order', choices=HEURISTICS,
                        help='Branching heuristic')
    parser.add_argument("--no_pure_literals", action='store_true', default=False,
                        help='Disable pure-literal elimination')
    parser.add_argument("--no_verify", action='store_true', default=False,
                        help='Skip checking the model against the formula')
    parser.add_argument("--stats", action='store_true', default=False,
                        help='Print search statistics')
    parser.add_argument("--verbose", action='store_true', default=False)
    return parser


def main(argv=None) -> int:
    opts = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if opts.verbose else logging.INFO,
                        format='%(message)s')

    try:
        formula = load_dimacs(opts.cnf_file)
    except (InputError, OSError, UnicodeDecodeError) as e:
        print(f"error: {opts.cnf_file}: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR
    logger.debug("read %r from %s", formula, opts.cnf_file)

    config = SolverConfig(heuristic=opts.heuristic,
                          pure_literals=not opts.no_pure_literals,
                          verify=not opts.no_verify)
    result = DPLLSolver(formula, config).solve()

    print(format_result(result))
    if opts.stats:
        for name, value in result.stats.as_dict().items():
            print(f"c {name}: {value}")

    return EXIT_SAT if result.satisfiable else EXIT_UNSAT


if __name__ == "__main__":
    sys.exit(main())
