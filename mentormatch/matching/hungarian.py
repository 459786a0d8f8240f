"""Hungarian (Kuhn-Munkres) assignment solver.

Solves the rectangular assignment problem: given an m x n matrix, pick at
most one entry per row and per column so that the sum of picked entries is
maximal (or minimal). Two modes are available:

APPROXIMATE
    A single row/column reduction, greedy assignment on zeros, then one
    augmenting-path pass over the zero cells. The matrix is never
    re-reduced, so when an unassigned row has no augmenting path over the
    existing zeros it stays unassigned. Fast, but the result can be
    sub-optimal or cover fewer than min(m, n) rows.

OPTIMAL
    Full Kuhn-Munkres with row/column potentials (shortest augmenting
    paths, O(n^3)). Always returns an optimal assignment of size min(m, n).
"""

import logging
from enum import Enum
from typing import Dict, List, NamedTuple, Sequence

logger = logging.getLogger(__name__)

# Cells within this distance of zero count as zero
ZERO_EPSILON = 1e-4


class SolverMode(str, Enum):
    """Which algorithm ``HungarianSolver`` runs."""
    APPROXIMATE = "approximate"
    OPTIMAL = "optimal"


class Assignment(NamedTuple):
    """One selected matrix cell."""
    row: int
    column: int


class HungarianSolver:
    """Computes optimal (or fast approximate) one-to-one assignments."""

    def __init__(
        self,
        mode: SolverMode = SolverMode.OPTIMAL,
        epsilon: float = ZERO_EPSILON
    ):
        self.mode = SolverMode(mode)
        self.epsilon = epsilon

    def solve(
        self,
        matrix: Sequence[Sequence[float]],
        maximize: bool = True
    ) -> List[Assignment]:
        """Solve the assignment problem.

        Args:
            matrix: Rectangular matrix; ``matrix[i][j]`` is the score (or cost)
                of assigning row i to column j
            maximize: Maximize the sum when True (scores), minimize when False (costs)

        Returns:
            Assignments sorted by row; every row and column appears at most once

        Raises:
            ValueError: If the rows have different lengths
        """
        rows = len(matrix)
        if rows == 0:
            return []
        cols = len(matrix[0])
        if cols == 0:
            return []
        if any(len(row) != cols for row in matrix):
            raise ValueError("Assignment matrix rows must all have the same length")

        costs = [[float(value) for value in row] for row in matrix]

        # Convert to a minimization problem
        if maximize:
            global_max = max(max(row) for row in costs)
            costs = [[global_max - value for value in row] for row in costs]

        square = self._pad_square(costs, rows, cols)

        if self.mode == SolverMode.APPROXIMATE:
            row_to_col = self._solve_approximate(square)
        else:
            row_to_col = self._solve_optimal(square)

        # Drop dummy rows/columns introduced by padding
        assignments = sorted(
            Assignment(row, col)
            for row, col in row_to_col.items()
            if row < rows and col < cols
        )
        logger.debug(
            f"Solved {rows}x{cols} assignment ({self.mode.value}): "
            f"{len(assignments)} pairs"
        )
        return assignments

    def _pad_square(self, costs: List[List[float]], rows: int, cols: int) -> List[List[float]]:
        """Pad to max(rows, cols) square with a cost no real cell can beat."""
        size = max(rows, cols)
        if rows == cols:
            return costs

        largest = max(abs(value) for row in costs for value in row)
        dummy = 2 * largest + 1.0

        square = [[dummy] * size for _ in range(size)]
        for i in range(rows):
            square[i][:cols] = costs[i]
        return square

    # APPROXIMATE

    def _solve_approximate(self, square: List[List[float]]) -> Dict[int, int]:
        n = len(square)
        reduced = [row[:] for row in square]

        # Subtract row minimums
        for i in range(n):
            row_min = min(reduced[i])
            reduced[i] = [value - row_min for value in reduced[i]]

        # Subtract column minimums
        for j in range(n):
            col_min = min(reduced[i][j] for i in range(n))
            if col_min > 0:
                for i in range(n):
                    reduced[i][j] -= col_min

        row_to_col: Dict[int, int] = {}
        col_to_row: Dict[int, int] = {}

        # Greedy matching on zeros
        for i in range(n):
            for j in range(n):
                if i in row_to_col:
                    break
                if j not in col_to_row and self._is_zero(reduced[i][j]):
                    row_to_col[i] = j
                    col_to_row[j] = i

        if len(row_to_col) == n:
            return row_to_col

        for row in range(n):
            if row not in row_to_col:
                self._augment(reduced, row, row_to_col, col_to_row)

        return row_to_col

    def _augment(
        self,
        reduced: List[List[float]],
        start: int,
        row_to_col: Dict[int, int],
        col_to_row: Dict[int, int]
    ) -> bool:
        """Depth-first search for an augmenting path over zero cells.

        On success the alternating chain is flipped in place, growing the
        matching by one pair.
        """
        n = len(reduced)
        visited_rows = {start}
        visited_cols = set()

        # stack[k] = [row, next column to try]; path_cols[k] leads from stack[k] to stack[k + 1]
        stack = [[start, 0]]
        path_cols: List[int] = []

        while stack:
            frame = stack[-1]
            row = frame[0]
            advanced = False

            while frame[1] < n:
                col = frame[1]
                frame[1] += 1
                if col in visited_cols or not self._is_zero(reduced[row][col]):
                    continue
                visited_cols.add(col)

                owner = col_to_row.get(col)
                if owner is None:
                    path_cols.append(col)
                    for (path_row, _), path_col in zip(stack, path_cols):
                        row_to_col[path_row] = path_col
                        col_to_row[path_col] = path_row
                    return True

                if owner not in visited_rows:
                    visited_rows.add(owner)
                    path_cols.append(col)
                    stack.append([owner, 0])
                    advanced = True
                    break

            if not advanced:
                stack.pop()
                if path_cols:
                    path_cols.pop()

        return False

    def _is_zero(self, value: float) -> bool:
        return abs(value) < self.epsilon

    # OPTIMAL

    def _solve_optimal(self, square: List[List[float]]) -> Dict[int, int]:
        """Kuhn-Munkres with potentials; indices below are 1-based, 0 is a sentinel."""
        n = len(square)
        inf = float("inf")

        u = [0.0] * (n + 1)      # row potentials
        v = [0.0] * (n + 1)      # column potentials
        owner = [0] * (n + 1)    # owner[j] = row assigned to column j
        way = [0] * (n + 1)

        for i in range(1, n + 1):
            owner[0] = i
            j0 = 0
            min_slack = [inf] * (n + 1)
            used = [False] * (n + 1)

            while True:
                used[j0] = True
                i0 = owner[j0]
                delta = inf
                j1 = 0

                for j in range(1, n + 1):
                    if used[j]:
                        continue
                    slack = square[i0 - 1][j - 1] - u[i0] - v[j]
                    if slack < min_slack[j]:
                        min_slack[j] = slack
                        way[j] = j0
                    if min_slack[j] < delta:
                        delta = min_slack[j]
                        j1 = j

                for j in range(n + 1):
                    if used[j]:
                        u[owner[j]] += delta
                        v[j] -= delta
                    else:
                        min_slack[j] -= delta

                j0 = j1
                if owner[j0] == 0:
                    break

            # Flip the augmenting path
            while True:
                j1 = way[j0]
                owner[j0] = owner[j1]
                j0 = j1
                if j0 == 0:
                    break

        return {owner[j] - 1: j - 1 for j in range(1, n + 1)}
