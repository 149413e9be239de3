#!/usr/bin/env python3
"""
Benchmark harness: solve every CNF file of a directory and time each solve.

SATLIB instance names carry their expected verdict (uf* satisfiable, uuf*
unsatisfiable); any disagreement is reported as a mismatch.
"""

import argparse
import glob
import logging
import os
import sys
from collections import namedtuple
from typing import List, Optional

from tqdm import tqdm

import util
from dimacs import load_dimacs
from dpll_sat import (HEURISTICS, SATISFIABLE, UNSATISFIABLE, DPLLSolver,
                      InputError, SolverConfig)

logger = logging.getLogger(__name__)

BenchmarkRecord = namedtuple('BenchmarkRecord',
                             ['path', 'status', 'seconds', 'expected', 'stats', 'error'])


def collect_files(directory: str, pattern: str = '*.cnf',
                  sample_size: Optional[int] = None) -> List[str]:
    files = sorted(glob.glob(os.path.join(directory, pattern)))
    if sample_size is not None and len(files) > sample_size:
        files = files[:sample_size]
    return files


def expected_status(path: str) -> Optional[str]:
    name = os.path.basename(path).lower()
    if name.startswith('uuf'):
        return UNSATISFIABLE
    if name.startswith('uf'):
        return SATISFIABLE
    return None


def is_mismatch(record: BenchmarkRecord) -> bool:
    return record.expected is not None and record.status is not None \
        and record.status != record.expected


def run_benchmark(paths: List[str], config: Optional[SolverConfig] = None,
                  progress: bool = True) -> List[BenchmarkRecord]:
    """
    Load and solve each file, timing the solve only.

    Files that fail to parse are recorded with `error` set instead of
    aborting the run.
    """
    records = []
    for path in tqdm(paths, desc="Solving", dynamic_ncols=True, disable=not progress):
        expected = expected_status(path)
        try:
            formula = load_dimacs(path)
        except (InputError, OSError, UnicodeDecodeError) as e:
            logger.warning("skipping %s: %s", path, e)
            records.append(BenchmarkRecord(path, None, 0.0, expected, None, str(e)))
            continue

        result, seconds = util.timeit(DPLLSolver(formula, config).solve)
        record = BenchmarkRecord(path, result.status, seconds, expected,
                                 result.stats.as_dict(), None)
        if is_mismatch(record):
            logger.warning("%s: expected %s, got %s", path, expected, result.status)
        records.append(record)
    return records


def summarize(records: List[BenchmarkRecord]) -> dict:
    solved = [r for r in records if r.error is None]
    summary = {
        'files': len(records),
        'sat': sum(1 for r in solved if r.status == SATISFIABLE),
        'unsat': sum(1 for r in solved if r.status == UNSATISFIABLE),
        'errors': len(records) - len(solved),
        'mismatches': sum(1 for r in solved if is_mismatch(r)),
    }
    summary.update(util.summarize_times([r.seconds for r in solved]))
    return summary


def format_record(record: BenchmarkRecord) -> str:
    name = os.path.basename(record.path)
    if record.error is not None:
        return f"{name:<30} ERROR {record.error}"
    line = f"{name:<30} {record.status:<14} {record.seconds:10.4f}s"
    if is_mismatch(record):
        line += f"  (expected {record.expected})"
    return line


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Solve and time every CNF file in a directory.")
    parser.add_argument("directory", type=str, help='Directory with CNF files')
    parser.add_argument("--pattern", type=str, default='*.cnf',
                        help='Glob pattern for the instance files')
    parser.add_argument("--sample_size", type=int, default=None,
                        help='The number of instances to solve')
    parser.add_argument("--heuristic", type=str, default='order', choices=HEURISTICS)
    parser.add_argument("--no_pure_literals", action='store_true', default=False)
    parser.add_argument("--no_verify", action='store_true', default=False)
    parser.add_argument("--no_progress", action='store_true', default=False)
    parser.add_argument("--verbose", action='store_true', default=False)
    opts = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if opts.verbose else logging.INFO,
                        format='%(message)s')

    paths = collect_files(opts.directory, opts.pattern, opts.sample_size)
    if not paths:
        print(f"No files matching {opts.pattern} in {opts.directory}")
        return 1

    config = SolverConfig(heuristic=opts.heuristic,
                          pure_literals=not opts.no_pure_literals,
                          verify=not opts.no_verify)
    records = run_benchmark(paths, config, progress=not opts.no_progress)

    for record in records:
        print(format_record(record))

    summary = summarize(records)
    print("=" * 60)
    print(f"{summary['files']} files: {summary['sat']} SAT, {summary['unsat']} UNSAT, "
          f"{summary['errors']} errors, {summary['mismatches']} mismatches")
    print(f"total {summary['total']:.4f}s, mean {summary['mean']:.4f}s, "
          f"median {summary['median']:.4f}s, max {summary['max']:.4f}s")

    return 1 if summary['errors'] or summary['mismatches'] else 0


if __name__ == "__main__":
    sys.exit(main())
