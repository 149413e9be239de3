#!/usr/bin/env python3
"""
DPLL SAT Solver

Decides satisfiability of a CNF formula with the Davis-Putnam-Logemann-Loveland
procedure: depth-first search over partial assignments, pruned by unit
propagation and pure-literal elimination before every branch.

The search state is an assignment trail that only grows during propagation and
is truncated back to a checkpoint on backtracking, so every branch of the
search tree starts from exactly the state its parent left behind.
"""

import logging
import numbers
from collections import defaultdict, namedtuple
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

Literal = int
Variable = int

# Verdicts
SATISFIABLE = 'SATISFIABLE'
UNSATISFIABLE = 'UNSATISFIABLE'

# Trail entry kinds
DECISION = 'decision'
FORCED = 'forced'

# Clause status relative to a partial assignment
SATISFIED = 'SATISFIED'
FALSIFIED = 'FALSIFIED'
UNIT = 'UNIT'
UNDETERMINED = 'UNDETERMINED'

# Propagation outcomes
CONFLICT = 'conflict'
FIXPOINT = 'fixpoint'

HEURISTICS = ('order', 'most_literal', 'most_variable', 'polarity', 'min_clause_length')

# clause sizes examined, shortest first, by the min_clause_length heuristic
SHORT_CLAUSE_SIZES = (2, 3, 4)
# weights of the dominant and the minority polarity in its score
ALPHA = 1
BETA = 1


class SATSolverError(Exception):
    """Base class for every error raised by the solver."""


class InputError(SATSolverError, ValueError):
    """The formula handed to the solver is malformed."""

    def __init__(self, message: str, line: Optional[int] = None):
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line


class InternalSolverError(SATSolverError, RuntimeError):
    """An invariant of the search was violated. Always a bug."""


SolverConfig = namedtuple('SolverConfig', ['heuristic', 'pure_literals', 'verify'],
                          defaults=('order', True, True))

TrailEntry = namedtuple('TrailEntry', ['variable', 'value', 'kind'])

# one open branch point of the search: the trail length before the decision,
# the decided variable, and the polarity still to try (None once both are done)
_Frame = namedtuple('_Frame', ['checkpoint', 'variable', 'pending_value'])


class CNFFormula:
    """Represents an immutable CNF (Conjunctive Normal Form) formula."""

    def __init__(self, clauses: Iterable[Sequence[int]], num_variables: Optional[int] = None):
        """
        Initialize CNF formula.

        Args:
            clauses: Iterable of clauses, where each clause is a sequence of literals.
                    A literal is a non-zero integer (positive or negative).
                    Variable n is represented by n, and its negation by -n.
            num_variables: Declared number of variables. Inferred from the
                    largest variable referenced when omitted.

        Raises:
            InputError: if the variable count is invalid or a literal is zero,
                    not an integer, or outside [1, num_variables].
        """
        normalized = []
        for index, clause in enumerate(clauses):
            literals = []
            for lit in clause:
                if isinstance(lit, bool) or not isinstance(lit, numbers.Integral):
                    raise InputError(f"clause {index}: literal {lit!r} is not an integer")
                lit = int(lit)
                if lit == 0:
                    raise InputError(f"clause {index}: literal 0 is not allowed inside a clause")
                if lit not in literals:
                    literals.append(lit)
            normalized.append(tuple(literals))
        self.clauses: Tuple[Tuple[int, ...], ...] = tuple(normalized)

        if num_variables is None:
            num_variables = self._compute_num_variables()
        elif isinstance(num_variables, bool) or not isinstance(num_variables, numbers.Integral):
            raise InputError(f"variable count {num_variables!r} is not an integer")
        num_variables = int(num_variables)
        if num_variables < 0:
            raise InputError(f"variable count must be non-negative, got {num_variables}")
        self.num_variables = num_variables

        for index, clause in enumerate(self.clauses):
            for lit in clause:
                if abs(lit) > num_variables:
                    raise InputError(
                        f"clause {index}: literal {lit} references variable {abs(lit)} "
                        f"outside [1, {num_variables}]")

        self.has_empty_clause = any(len(clause) == 0 for clause in self.clauses)
        self.polarity_scores: Dict[int, int] = self._compute_polarity_scores()

    @property
    def num_clauses(self) -> int:
        return len(self.clauses)

    def _compute_num_variables(self) -> int:
        """Compute the number of variables as the largest variable referenced."""
        return max((abs(lit) for clause in self.clauses for lit in clause), default=0)

    def _compute_polarity_scores(self) -> Dict[int, int]:
        """
        Compute polarity scores for all variables.

        Polarity score = (positive occurrences) - (negative occurrences)
        """
        scores = defaultdict(int)
        for clause in self.clauses:
            for lit in clause:
                scores[abs(lit)] += 1 if lit > 0 else -1
        return dict(scores)

    def is_satisfied(self, assignment: Dict[int, bool]) -> bool:
        """Check if every clause has a literal made true by the given assignment."""
        for clause in self.clauses:
            clause_satisfied = False
            for lit in clause:
                var = abs(lit)
                if var in assignment and assignment[var] == (lit > 0):
                    clause_satisfied = True
                    break
            if not clause_satisfied:
                return False
        return True

    def __repr__(self):
        return f"CNFFormula(num_variables={self.num_variables}, num_clauses={self.num_clauses})"


class AssignmentTrail:
    """
    Ordered log of variable assignments supporting checkpoints and backtracking.

    Values are kept in a list indexed by variable (index 0 unused) so lookups
    are O(1); the entry list records the order in which they were made.
    """

    def __init__(self, num_variables: int):
        self.num_variables = num_variables
        self._values: List[Optional[bool]] = [None] * (num_variables + 1)
        self._entries: List[TrailEntry] = []
        self._num_decisions = 0

    def assign(self, var: int, value: bool, kind: str) -> None:
        if not 1 <= var <= self.num_variables:
            raise InternalSolverError(f"variable {var} outside [1, {self.num_variables}]")
        if kind not in (DECISION, FORCED):
            raise InternalSolverError(f"unknown assignment kind {kind!r}")
        if self._values[var] is not None:
            raise InternalSolverError(f"variable {var} is already assigned")
        self._values[var] = value
        self._entries.append(TrailEntry(var, value, kind))
        if kind == DECISION:
            self._num_decisions += 1

    def checkpoint(self) -> int:
        return len(self._entries)

    def backtrack_to(self, token: int) -> None:
        """Unassign every variable recorded at or after the checkpoint `token`."""
        if not 0 <= token <= len(self._entries):
            raise InternalSolverError(
                f"cannot backtrack to {token}, trail holds {len(self._entries)} entries")
        while len(self._entries) > token:
            entry = self._entries.pop()
            self._values[entry.variable] = None
            if entry.kind == DECISION:
                self._num_decisions -= 1

    def value_of(self, var: int) -> Optional[bool]:
        return self._values[var]

    def literal_value(self, lit: int) -> Optional[bool]:
        """True/False if the literal is satisfied/falsified, None if unassigned."""
        value = self._values[abs(lit)]
        if value is None:
            return None
        return value == (lit > 0)

    def is_complete(self) -> bool:
        return len(self._entries) == self.num_variables

    @property
    def decision_level(self) -> int:
        return self._num_decisions

    @property
    def entries(self) -> Tuple[TrailEntry, ...]:
        return tuple(self._entries)

    def as_dict(self) -> Dict[int, bool]:
        return {entry.variable: entry.value for entry in self._entries}

    def __len__(self):
        return len(self._entries)


class SolverStats:
    """Counters collected during one solve."""

    def __init__(self):
        self.decisions = 0
        self.propagations = 0
        self.pure_literals = 0
        self.conflicts = 0
        self.backtracks = 0
        self.max_depth = 0

    def as_dict(self) -> Dict[str, int]:
        return dict(vars(self))

    def __repr__(self):
        fields = ', '.join(f"{k}={v}" for k, v in self.as_dict().items())
        return f"SolverStats({fields})"


class SolveResult(namedtuple('SolveResult', ['status', 'assignment', 'stats'])):
    """
    Outcome of one solve.

    `assignment` maps every variable in [1, N] to a bool when the formula is
    satisfiable and is None otherwise.
    """

    __slots__ = ()

    @property
    def satisfiable(self) -> bool:
        return self.status == SATISFIABLE

    def to_literals(self) -> List[int]:
        """Model as signed literals in ascending variable order."""
        if self.assignment is None:
            return []
        return [var if value else -var for var, value in sorted(self.assignment.items())]


class PropagationEngine:
    """
    Drives the trail toward a fixpoint under unit propagation and
    pure-literal elimination.
    """

    def __init__(self, formula: CNFFormula, trail: AssignmentTrail,
                 eliminate_pure_literals: bool = True, stats: Optional[SolverStats] = None):
        self.formula = formula
        self.trail = trail
        self.use_pure_literals = eliminate_pure_literals
        self.stats = stats if stats is not None else SolverStats()

    def clause_status(self, clause: Sequence[int]) -> Tuple[str, Optional[int]]:
        """
        Classify a clause under the current partial assignment.

        Returns:
            (status, unit_literal) where unit_literal is only set for UNIT clauses.
        """
        unit_lit = None
        num_unassigned = 0
        for lit in clause:
            value = self.trail.literal_value(lit)
            if value is True:
                return SATISFIED, None
            if value is None:
                unit_lit = lit
                num_unassigned += 1
        if num_unassigned == 0:
            return FALSIFIED, None
        if num_unassigned == 1:
            return UNIT, unit_lit
        return UNDETERMINED, None

    def unit_propagate(self) -> str:
        """
        Repeatedly force the single unassigned literal of every unit clause.

        Returns:
            CONFLICT if some clause is falsified, FIXPOINT once no clause is unit.
        """
        changed = True
        while changed:
            changed = False
            for clause in self.formula.clauses:
                status, lit = self.clause_status(clause)
                if status == FALSIFIED:
                    return CONFLICT
                if status == UNIT:
                    self.trail.assign(abs(lit), lit > 0, FORCED)
                    self.stats.propagations += 1
                    changed = True
        return FIXPOINT

    def eliminate_pure_literals(self) -> int:
        """
        Assign every literal whose complement does not occur among the
        unassigned literals of the clauses not yet satisfied.

        Returns:
            Number of variables assigned.
        """
        literals = set()
        for clause in self.formula.clauses:
            status, _ = self.clause_status(clause)
            if status == SATISFIED:
                continue
            for lit in clause:
                if self.trail.literal_value(lit) is None:
                    literals.add(lit)

        pure = sorted((lit for lit in literals if -lit not in literals), key=abs)
        for lit in pure:
            self.trail.assign(abs(lit), lit > 0, FORCED)
        self.stats.pure_literals += len(pure)
        return len(pure)

    def propagate(self) -> str:
        """Run both simplification rules until neither makes progress."""
        while True:
            if self.unit_propagate() == CONFLICT:
                return CONFLICT
            if not self.use_pure_literals or self.eliminate_pure_literals() == 0:
                return FIXPOINT

    def all_satisfied(self) -> bool:
        return all(self.clause_status(clause)[0] == SATISFIED
                   for clause in self.formula.clauses)


class DPLLSolver:
    """
    A DPLL-based SAT solver with unit propagation, pure-literal elimination
    and a configurable branching heuristic.
    """

    def __init__(self, formula: CNFFormula, config: Optional[SolverConfig] = None):
        """Initialize the solver with a CNF formula."""
        config = config or SolverConfig()
        if config.heuristic not in HEURISTICS:
            raise InputError(f"unknown heuristic {config.heuristic!r}, "
                             f"expected one of {', '.join(HEURISTICS)}")
        self.formula = formula
        self.config = config
        self._choose = {
            'order': self._choose_ordered,
            'most_literal': self._choose_most_literal,
            'most_variable': self._choose_most_variable,
            'polarity': self._choose_polarity_aware,
            'min_clause_length': self._choose_min_clause_length,
        }[config.heuristic]

    def solve(self) -> SolveResult:
        """
        Solve the SAT problem.

        Every call starts from an empty trail, so repeated calls are
        independent and give the same result.
        """
        formula = self.formula
        stats = SolverStats()
        logger.debug("solving %d variables, %d clauses (heuristic=%s, pure_literals=%s)",
                     formula.num_variables, formula.num_clauses,
                     self.config.heuristic, self.config.pure_literals)

        if formula.has_empty_clause:
            logger.debug("empty clause in input, UNSAT without search")
            return SolveResult(UNSATISFIABLE, None, stats)

        trail = AssignmentTrail(formula.num_variables)
        engine = PropagationEngine(formula, trail, self.config.pure_literals, stats)
        model = self._search(trail, engine, stats)

        if model is None:
            logger.debug("UNSAT %s", stats)
            return SolveResult(UNSATISFIABLE, None, stats)

        if self.config.verify and not formula.is_satisfied(model):
            raise InternalSolverError("search returned an assignment that falsifies the formula")
        logger.debug("SAT %s", stats)
        return SolveResult(SATISFIABLE, model, stats)

    def _search(self, trail: AssignmentTrail, engine: PropagationEngine,
                stats: SolverStats) -> Optional[Dict[int, bool]]:
        """
        Depth-first search over decisions with chronological backtracking.

        Each frame on the stack is one decision level; popping a frame undoes
        the decision and everything propagated beneath it.
        """
        root = trail.checkpoint()
        stack: List[_Frame] = []

        while True:
            if engine.propagate() == FIXPOINT:
                if trail.is_complete() or engine.all_satisfied():
                    return self._complete_model(trail)
                var, value = self._choose(trail)
                stack.append(_Frame(trail.checkpoint(), var, not value))
                trail.assign(var, value, DECISION)
                stats.decisions += 1
                stats.max_depth = max(stats.max_depth, len(stack))
                continue

            stats.conflicts += 1
            while stack:
                frame = stack.pop()
                trail.backtrack_to(frame.checkpoint)
                stats.backtracks += 1
                if frame.pending_value is not None:
                    stack.append(frame._replace(pending_value=None))
                    trail.assign(frame.variable, frame.pending_value, DECISION)
                    stats.decisions += 1
                    break
            else:
                trail.backtrack_to(root)
                return None

    def _complete_model(self, trail: AssignmentTrail) -> Dict[int, bool]:
        """Extend the trail to a total assignment; free variables default to True."""
        return {var: True if trail.value_of(var) is None else trail.value_of(var)
                for var in range(1, self.formula.num_variables + 1)}

    def _occurrences(self, trail: AssignmentTrail, size: Optional[int] = None) -> Dict[int, int]:
        """
        Count unassigned literal occurrences in the clauses not yet satisfied.

        With `size`, only clauses with exactly that many unassigned literals count.
        """
        counts = defaultdict(int)
        for clause in self.formula.clauses:
            if any(trail.literal_value(lit) is True for lit in clause):
                continue
            free = [lit for lit in clause if trail.value_of(abs(lit)) is None]
            if size is not None and len(free) != size:
                continue
            for lit in free:
                counts[lit] += 1
        return counts

    def _first_unassigned(self, trail: AssignmentTrail) -> int:
        for var in range(1, self.formula.num_variables + 1):
            if trail.value_of(var) is None:
                return var
        raise InternalSolverError("no unassigned variable left to branch on")

    def _choose_ordered(self, trail: AssignmentTrail) -> Tuple[int, bool]:
        return self._first_unassigned(trail), True

    def _choose_most_literal(self, trail: AssignmentTrail) -> Tuple[int, bool]:
        """Literal occurring most often in unresolved clauses, its polarity first."""
        counts = self._occurrences(trail)
        if not counts:
            return self._first_unassigned(trail), True
        # ties go to the lower variable, positive before negative
        lit = max(counts, key=lambda l: (counts[l], -abs(l), l > 0))
        return abs(lit), lit > 0

    def _choose_most_variable(self, trail: AssignmentTrail) -> Tuple[int, bool]:
        counts = self._occurrences(trail)
        var_freq = defaultdict(int)
        for lit, count in counts.items():
            var_freq[abs(lit)] += count
        if not var_freq:
            return self._first_unassigned(trail), True
        return max(var_freq, key=lambda v: (var_freq[v], -v)), True

    def _choose_polarity_aware(self, trail: AssignmentTrail) -> Tuple[int, bool]:
        """
        Choose the most frequent variable and try its predominant polarity
        in the whole formula first.
        """
        var, _ = self._choose_most_variable(trail)
        return var, self._get_preferred_polarity(var)

    def _choose_min_clause_length(self, trail: AssignmentTrail) -> Tuple[int, bool]:
        """
        Prefer variables that occur most in the shortest unresolved clauses.

        Candidates are scored on binary clauses first; ties are narrowed on
        ternary clauses, then on clauses of four, stopping as soon as one
        variable is left. Remaining ties go to the lowest variable, which is
        tried with the polarity that occurs more often in unresolved clauses
        (negative on a tie).
        """
        candidates = [var for var in range(1, self.formula.num_variables + 1)
                      if trail.value_of(var) is None]
        if not candidates:
            raise InternalSolverError("no unassigned variable left to branch on")

        for size in SHORT_CLAUSE_SIZES:
            counts = self._occurrences(trail, size)
            scores = {}
            for var in candidates:
                pos, neg = counts.get(var, 0), counts.get(-var, 0)
                scores[var] = ALPHA * max(pos, neg) + BETA * min(pos, neg)
            best = max(scores.values())
            candidates = [var for var in candidates if scores[var] == best]
            if len(candidates) == 1:
                break

        var = candidates[0]
        counts = self._occurrences(trail)
        return var, counts.get(var, 0) > counts.get(-var, 0)

    def _get_preferred_polarity(self, var: int) -> bool:
        score = self.formula.polarity_scores.get(var, 0)
        return score >= 0


def solve(num_variables: int, clauses: Iterable[Sequence[int]],
          config: Optional[SolverConfig] = None) -> SolveResult:
    """
    Decide satisfiability of `clauses` over variables [1, num_variables].

    Raises:
        InputError: if the formula is malformed.
    """
    formula = CNFFormula(clauses, num_variables)
    return DPLLSolver(formula, config).solve()


def solve_sat(clauses: Iterable[Sequence[int]], num_variables: Optional[int] = None,
              **options) -> Optional[Dict[int, bool]]:
    """
    Convenience function to solve a SAT problem.

    Args:
        clauses: List of clauses in CNF format
        num_variables: Declared variable count, inferred when omitted
        **options: SolverConfig fields (heuristic, pure_literals, verify)

    Returns:
        Satisfying assignment if SAT, None if UNSAT
    """
    formula = CNFFormula(clauses, num_variables)
    return DPLLSolver(formula, SolverConfig(**options)).solve().assignment
