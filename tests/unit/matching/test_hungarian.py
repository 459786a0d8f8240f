"""Tests for the Hungarian assignment solver."""

import itertools
import random

import pytest

from mentormatch.matching.hungarian import Assignment, HungarianSolver, SolverMode


def brute_force_best(matrix, maximize=True):
    """Best achievable total over every assignment of size min(rows, cols)."""
    rows, cols = len(matrix), len(matrix[0])
    pick = max if maximize else min
    if rows <= cols:
        totals = (
            sum(matrix[r][c] for r, c in enumerate(perm))
            for perm in itertools.permutations(range(cols), rows)
        )
    else:
        totals = (
            sum(matrix[r][c] for c, r in enumerate(perm))
            for perm in itertools.permutations(range(rows), cols)
        )
    return pick(totals)


def random_matrix(rng, rows, cols):
    return [[round(rng.random(), 2) for _ in range(cols)] for _ in range(rows)]


def total(matrix, assignments):
    return sum(matrix[a.row][a.column] for a in assignments)


def assert_one_to_one(assignments):
    rows = [a.row for a in assignments]
    cols = [a.column for a in assignments]
    assert len(set(rows)) == len(rows)
    assert len(set(cols)) == len(cols)


# Maximizing this matrix, the single reduction pass leaves row 2 without an
# augmenting path over zeros.
COUNTER_EXAMPLE = [
    [8, 7, 6],
    [7, 5, 3],
    [6, 3, 0],
]


class TestDegenerateInput:
    @pytest.mark.parametrize("mode", list(SolverMode))
    def test_empty_matrix(self, mode):
        solver = HungarianSolver(mode)
        assert solver.solve([]) == []
        assert solver.solve([[], []]) == []

    @pytest.mark.parametrize("mode", list(SolverMode))
    def test_ragged_matrix_rejected(self, mode):
        with pytest.raises(ValueError):
            HungarianSolver(mode).solve([[1.0, 2.0], [3.0]])

    @pytest.mark.parametrize("mode", list(SolverMode))
    def test_single_cell(self, mode):
        assert HungarianSolver(mode).solve([[0.3]]) == [Assignment(0, 0)]

    def test_mode_from_string(self):
        assert HungarianSolver("approximate").mode is SolverMode.APPROXIMATE
        assert HungarianSolver().mode is SolverMode.OPTIMAL


class TestOptimalSolver:
    def setup_method(self):
        self.solver = HungarianSolver(SolverMode.OPTIMAL)

    def test_simple_maximization(self):
        matrix = [[0.9, 0.1], [0.2, 0.8]]
        result = self.solver.solve(matrix)
        assert result == [Assignment(0, 0), Assignment(1, 1)]
        assert result[1].row == 1 and result[1].column == 1

    def test_simple_minimization(self):
        matrix = [[4, 1, 3], [2, 0, 5], [3, 2, 2]]
        result = self.solver.solve(matrix, maximize=False)
        assert total(matrix, result) == 5

    def test_counter_example_is_solved_optimally(self):
        result = self.solver.solve(COUNTER_EXAMPLE)
        assert total(COUNTER_EXAMPLE, result) == 17
        assert result == [Assignment(0, 2), Assignment(1, 1), Assignment(2, 0)]

    @pytest.mark.parametrize("rows,cols", [(2, 5), (5, 2), (3, 3), (4, 6), (6, 4), (6, 6)])
    def test_matches_brute_force(self, rows, cols):
        rng = random.Random(rows * 10 + cols)
        for _ in range(5):
            matrix = random_matrix(rng, rows, cols)
            for maximize in (True, False):
                result = self.solver.solve(matrix, maximize=maximize)
                assert len(result) == min(rows, cols)
                assert_one_to_one(result)
                assert total(matrix, result) == pytest.approx(brute_force_best(matrix, maximize))

    def test_results_sorted_by_row(self):
        matrix = random_matrix(random.Random(7), 6, 3)
        result = self.solver.solve(matrix)
        assert [a.row for a in result] == sorted(a.row for a in result)

    def test_deterministic_on_ties(self):
        matrix = [[0.5] * 4 for _ in range(4)]
        first = self.solver.solve(matrix)
        assert len(first) == 4
        assert_one_to_one(first)
        assert self.solver.solve(matrix) == first


class TestApproximateSolver:
    def setup_method(self):
        self.solver = HungarianSolver(SolverMode.APPROXIMATE)

    def test_easy_matrix_is_optimal(self):
        assert self.solver.solve([[0.9, 0.1], [0.2, 0.8]]) == [Assignment(0, 0), Assignment(1, 1)]

    def test_augmenting_path_repairs_greedy_choice(self):
        # Greedy takes (0, 0); row 1 only has a zero in column 0
        matrix = [[1.0, 1.0], [1.0, 0.0]]
        assert self.solver.solve(matrix) == [Assignment(0, 1), Assignment(1, 0)]

    def test_counter_example_leaves_row_unassigned(self):
        result = self.solver.solve(COUNTER_EXAMPLE)
        assert result == [Assignment(0, 1), Assignment(1, 0)]
        assert total(COUNTER_EXAMPLE, result) == 14

    def test_never_double_books(self):
        rng = random.Random(42)
        for _ in range(20):
            matrix = random_matrix(rng, rng.randint(1, 6), rng.randint(1, 6))
            result = self.solver.solve(matrix)
            assert_one_to_one(result)
            assert len(result) <= min(len(matrix), len(matrix[0]))
