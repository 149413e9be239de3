#!/usr/bin/env python3
"""
CNF encoders and examples for the DPLL SAT Solver
"""

from itertools import combinations
from typing import List, Sequence, Tuple

from dimacs import format_result, parse_dimacs
from dpll_sat import HEURISTICS, DPLLSolver, SolverConfig, solve, solve_sat


def at_most_one(literals: Sequence[int]) -> List[List[int]]:
    """Pairwise encoding: no two of the literals are true together."""
    return [[-a, -b] for a, b in combinations(literals, 2)]


def pigeonhole_clauses(n_pigeons: int, n_holes: int) -> Tuple[int, List[List[int]]]:
    """
    Pigeonhole principle: every pigeon sits in a hole, no hole holds two.

    Pigeon p in hole h is variable p * n_holes + h + 1. Unsatisfiable
    whenever n_pigeons > n_holes.

    Returns:
        (num_variables, clauses)
    """
    def var(pigeon, hole):
        return pigeon * n_holes + hole + 1

    clauses = []

    # Each pigeon must be in at least one hole
    for pigeon in range(n_pigeons):
        clauses.append([var(pigeon, hole) for hole in range(n_holes)])

    # At most one pigeon per hole
    for hole in range(n_holes):
        clauses.extend(at_most_one([var(pigeon, hole) for pigeon in range(n_pigeons)]))

    return n_pigeons * n_holes, clauses


def coloring_clauses(n_vertices: int, edges: Sequence[Tuple[int, int]],
                     n_colors: int) -> Tuple[int, List[List[int]]]:
    """
    Graph coloring: vertex v (0-based) has color c is variable v * n_colors + c + 1.

    Returns:
        (num_variables, clauses)
    """
    def var(vertex, color):
        return vertex * n_colors + color + 1

    clauses = []
    for vertex in range(n_vertices):
        colors = [var(vertex, color) for color in range(n_colors)]
        clauses.append(colors)
        clauses.extend(at_most_one(colors))

    # Adjacent vertices have different colors
    for u, v in edges:
        for color in range(n_colors):
            clauses.append([-var(u, color), -var(v, color)])

    return n_vertices * n_colors, clauses


def example_3_coloring():
    """
    Graph 3-coloring of a triangle (satisfiable) and of K4 (unsatisfiable).
    """
    print("\n" + "="*60)
    print("Example: Graph 3-Coloring")
    print("="*60)

    triangle = [(0, 1), (0, 2), (1, 2)]
    num_variables, clauses = coloring_clauses(3, triangle, 3)
    result = solve(num_variables, clauses)

    if result.satisfiable:
        print("Triangle: SAT - 3-coloring exists!")
        for vertex in range(3):
            for color in range(3):
                if result.assignment[vertex * 3 + color + 1]:
                    print(f"  Vertex {vertex + 1}: Color {color + 1}")
    else:
        print("Triangle: UNSAT - No 3-coloring exists")

    k4 = list(combinations(range(4), 2))
    num_variables, clauses = coloring_clauses(4, k4, 3)
    result = solve(num_variables, clauses)
    print(f"K4: {result.status}")


def example_sudoku_cell():
    """
    Mini Sudoku: single cell must hold exactly one value 1-4, and 2 or 3.
    """
    print("\n" + "="*60)
    print("Example: Mini Sudoku Cell (1-4)")
    print("="*60)

    clauses = [[1, 2, 3, 4]] + at_most_one([1, 2, 3, 4])
    # value must be 2 or 3 (from other cells)
    clauses.append([2, 3])

    result = solve_sat(clauses)

    if result:
        print("SAT - Valid assignment exists!")
        for val in range(1, 5):
            if result[val]:
                print(f"  Cell value: {val}")
    else:
        print("UNSAT")


def example_heuristics():
    """
    Same formula under every branching heuristic.
    """
    print("\n" + "="*60)
    print("Example: Branching Heuristics")
    print("="*60)

    num_variables, clauses = pigeonhole_clauses(5, 4)
    for heuristic in HEURISTICS:
        config = SolverConfig(heuristic=heuristic)
        result = solve(num_variables, clauses, config)
        print(f"  {heuristic:<18} {result.status:<14} decisions={result.stats.decisions} "
              f"conflicts={result.stats.conflicts}")


def example_dimacs_format():
    """
    Example using DIMACS format.
    """
    print("\n" + "="*60)
    print("Example: DIMACS Format")
    print("="*60)

    dimacs = """
    c Example CNF formula in DIMACS format
    c (x1 | -x2) & (x2 | x3) & (-x1 | -x3)
    p cnf 3 3
    1 -2 0
    2 3 0
    -1 -3 0
    """

    print("\nDIMACS input:")
    print(dimacs)

    formula = parse_dimacs(dimacs)
    result = DPLLSolver(formula).solve()
    print(format_result(result))


def example_pigeonhole():
    """
    Pigeonhole principle: n+1 pigeons in n holes.
    This is a classic UNSAT problem.
    """
    print("\n" + "="*60)
    print("Example: Pigeonhole Principle (4 pigeons, 3 holes)")
    print("="*60)

    num_variables, clauses = pigeonhole_clauses(4, 3)
    print(f"\n{len(clauses)} clauses generated")

    result = solve(num_variables, clauses)

    if result.satisfiable:
        print("SAT - Assignment found (unexpected!)")
    else:
        print("UNSAT - Cannot fit 4 pigeons in 3 holes (as expected)")
    print(f"  {result.stats}")


if __name__ == "__main__":
    print("\nDPLL SAT Solver - Examples")
    print("="*60)

    example_3_coloring()
    example_sudoku_cell()
    example_heuristics()
    example_dimacs_format()
    example_pigeonhole()

    print("\n" + "="*60)
    print("All examples completed!")
    print("="*60)
