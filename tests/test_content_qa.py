import unittest

from puzzle_factory import make_puzzle

from wordpath.core.constants import SelectionModel
from wordpath.engine.content_qa import (
    QaCode,
    coverage_threshold,
    evaluate_puzzle,
    min_intersections,
    min_route_length,
)


class ThresholdTests(unittest.TestCase):
    def test_coverage_table_and_fallback(self) -> None:
        self.assertEqual(coverage_threshold(6, 6), 10)
        self.assertEqual(coverage_threshold(12, 12), 20)
        self.assertEqual(coverage_threshold(9, 9), 13)
        self.assertEqual(coverage_threshold(4, 4), 8)

    def test_intersections_and_route(self) -> None:
        self.assertEqual(min_intersections(3), 2)
        self.assertEqual(min_intersections(6), 4)
        self.assertEqual(min_route_length(6), 4)
        self.assertEqual(min_route_length(10), 6)


class EvaluatePuzzleTests(unittest.TestCase):
    def test_touch_only_rows_are_flagged(self) -> None:
        puzzle = make_puzzle(
            6,
            6,
            path=[
                ("ONE", ["c0", "c1", "c2"]),
                ("TWO", ["c6", "c7", "c8"]),
                ("SIX", ["c12", "c13", "c14"]),
                ("TEN", ["c33", "c34", "c35"]),
            ],
            start="c0",
            end="c35",
        )
        codes = [issue.code for issue in evaluate_puzzle(puzzle, "EASY_DAILY_V1")]
        self.assertIn(QaCode.PATH_INTERSECTIONS_TOO_LOW, codes)
        self.assertIn(QaCode.TOUCH_ONLY_CONNECTION, codes)
        self.assertIn(QaCode.ROUTE_TOO_SHORT, codes)
        self.assertNotIn(QaCode.COVERAGE_TOO_LOW, codes)

    def test_well_connected_staircase(self) -> None:
        puzzle = make_puzzle(
            6,
            6,
            path=[
                ("CAT", ["c0", "c1", "c2"]),
                ("TOP", ["c2", "c8", "c14"]),
                ("PEN", ["c14", "c15", "c16"]),
                ("NEST", ["c16", "c22", "c28", "c34"]),
            ],
            start="c0",
            end="c34",
            model=SelectionModel.RAY_4DIR,
        )
        self.assertEqual(evaluate_puzzle(puzzle), [])

    def test_small_path_lacks_coverage(self) -> None:
        puzzle = make_puzzle(6, 6, path=[("CAT", ["c0", "c1", "c2"])], start="c0", end="c2")
        codes = [issue.code for issue in evaluate_puzzle(puzzle)]
        self.assertIn(QaCode.COVERAGE_TOO_LOW, codes)

    def test_unknown_profile(self) -> None:
        puzzle = make_puzzle(6, 6, path=[("CAT", ["c0", "c1", "c2"])], start="c0", end="c2")
        with self.assertRaises(ValueError):
            evaluate_puzzle(puzzle, "HARD_WEEKLY")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
