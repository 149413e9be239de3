"""
DIMACS CNF reading and writing.

    c comment
    p cnf <num_variables> <num_clauses>
    1 -2 0
    2 3 0
"""

import gzip
import logging
from typing import Iterable, List, Optional

from dpll_sat import CNFFormula, InputError, SolveResult

logger = logging.getLogger(__name__)


def _parse_header(line: str, line_no: int):
    parts = line.split()
    if len(parts) != 4 or parts[1] != 'cnf':
        raise InputError(f"malformed problem line {line.strip()!r}", line_no)
    try:
        num_variables, num_clauses = int(parts[2]), int(parts[3])
    except ValueError:
        raise InputError(f"malformed problem line {line.strip()!r}", line_no) from None
    if num_variables < 0 or num_clauses < 0:
        raise InputError(f"negative count in problem line {line.strip()!r}", line_no)
    return num_variables, num_clauses


def parse_dimacs(text: str) -> CNFFormula:
    """
    Parse a CNF formula in DIMACS format.

    Clauses may span several lines or share one; each ends with 0. A line
    starting with '%' ends the input, as in the SATLIB benchmark files.

    Args:
        text: DIMACS format text

    Returns:
        CNFFormula object

    Raises:
        InputError: on a malformed header, a non-integer token, a literal
            outside the declared range or a clause count that does not match
            the header.
    """
    header = None
    clauses: List[List[int]] = []
    current: List[int] = []
    current_start = None

    for line_no, line in enumerate(text.splitlines(), start=1):
        line = line.strip()

        # Skip comments and blank lines
        if not line or line.startswith('c'):
            continue
        if line.startswith('%'):
            break

        if line.startswith('p'):
            if header is not None:
                raise InputError("duplicate problem line", line_no)
            if clauses or current:
                raise InputError("problem line after clauses", line_no)
            header = _parse_header(line, line_no)
            continue

        for token in line.split():
            try:
                lit = int(token)
            except ValueError:
                raise InputError(f"invalid literal {token!r}", line_no) from None
            if current_start is None:
                current_start = line_no
            if lit == 0:
                clauses.append(current)
                current = []
                current_start = None
                continue
            if header is not None and abs(lit) > header[0]:
                raise InputError(f"literal {lit} outside [1, {header[0]}]", line_no)
            current.append(lit)

    # last clause without its terminating 0
    if current:
        logger.debug("clause starting on line %d has no terminating 0", current_start)
        clauses.append(current)

    if header is None:
        return CNFFormula(clauses)

    num_variables, num_clauses = header
    if len(clauses) != num_clauses:
        raise InputError(f"problem line declares {num_clauses} clauses, found {len(clauses)}")
    return CNFFormula(clauses, num_variables)


def load_dimacs(path: str) -> CNFFormula:
    """Read a DIMACS file, decompressing it first if it ends in .gz."""
    if path.endswith('.gz'):
        with gzip.open(path, 'rt') as f:
            text = f.read()
    else:
        with open(path, 'r') as f:
            text = f.read()
    return parse_dimacs(text)


def to_dimacs(formula: CNFFormula, comments: Iterable[str] = ()) -> str:
    lines = [f"c {comment}" for comment in comments]
    lines.append(f"p cnf {formula.num_variables} {formula.num_clauses}")
    for clause in formula.clauses:
        lines.append(' '.join(str(lit) for lit in clause + (0,)))
    return '\n'.join(lines) + '\n'


def format_result(result: SolveResult, width: Optional[int] = 10) -> str:
    """
    Render a result in SAT competition output format.

    Satisfiable results list the model on 'v' lines, `width` literals per
    line, terminated by 0.
    """
    if not result.satisfiable:
        return "s UNSATISFIABLE"
    literals = [str(lit) for lit in result.to_literals()] + ['0']
    if not width:
        width = len(literals)
    lines = ["s SATISFIABLE"]
    for start in range(0, len(literals), width):
        lines.append("v " + ' '.join(literals[start:start + width]))
    return '\n'.join(lines)
