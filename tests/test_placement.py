import random
import unittest

from wordpath.core.constants import FORWARD_STEPS, ORTHOGONAL_STEPS, PlacementGeometry
from wordpath.core.exceptions import SearchExhausted
from wordpath.engine.grid import GridConfig, GridState
from wordpath.engine.placement import PlacementSolver


def make_solver(size: int, directions=ORTHOGONAL_STEPS, geometry=PlacementGeometry.RAY, seed: int = 7):
    grid = GridState(
        GridConfig(width=size, height=size, geometry=geometry, directions=directions),
        rng=random.Random(seed),
    )
    return grid, PlacementSolver(grid)


class PlaceChainTests(unittest.TestCase):
    def test_chain_words_share_their_joints(self) -> None:
        grid, solver = make_solver(5)
        words = solver.place_chain(["cat", "top", "pen"])

        self.assertEqual([word.text for word in words], ["CAT", "TOP", "PEN"])
        for previous, current in zip(words, words[1:]):
            self.assertEqual(previous.placement[-1], current.placement[0])
        for word in words:
            self.assertEqual(
                "".join(grid.cell_by_id(cell_id).value for cell_id in word.placement),
                word.text,
            )
        self.assertEqual(len(grid.commits), 3)

    def test_backtracks_out_of_dead_ends(self) -> None:
        # On a 3x3 forward-only grid most CAT placements leave TOP no room,
        # so the solver has to revert and retry CAT.
        for seed in range(10):
            grid, solver = make_solver(3, directions=FORWARD_STEPS, seed=seed)
            cat, top = solver.place_chain(["CAT", "TOP"])
            self.assertIn(
                (cat.placement, top.placement),
                [
                    (["r0c0", "r0c1", "r0c2"], ["r0c2", "r1c2", "r2c2"]),
                    (["r0c0", "r1c0", "r2c0"], ["r2c0", "r2c1", "r2c2"]),
                ],
            )
            self.assertEqual(len(grid.empty_cells()), 4)

    def test_snake_chain(self) -> None:
        grid, solver = make_solver(4, geometry=PlacementGeometry.SNAKE)
        words = solver.place_chain(["DOG", "GNAT", "TOAD"])
        self.assertEqual(words[1].placement[0], words[0].placement[-1])
        self.assertEqual(words[2].placement[0], words[1].placement[-1])

    def test_exhaustion_raises(self) -> None:
        _, solver = make_solver(2)
        with self.assertRaises(SearchExhausted):
            solver.place_chain(["CAT", "TOP", "PEN"])

    def test_empty_chain(self) -> None:
        _, solver = make_solver(3)
        self.assertEqual(solver.place_chain([]), [])


class PlaceBonusTests(unittest.TestCase):
    def setUp(self) -> None:
        self.grid, self.solver = make_solver(5)
        self.grid.commit_path("CAT", "CAT", ["r2c0", "r2c1", "r2c2"])
        self.grid.commit_path("TOP", "TOP", ["r2c2", "r3c2", "r4c2"], overlap_cell_id="r2c2")
        self.path = {"r2c0", "r2c1", "r2c2", "r3c2", "r4c2"}

    def test_places_one_bonus_word_with_hint(self) -> None:
        bonus = self.solver.place_bonus(["xyz", "oak"], self.path)
        self.assertEqual(bonus.text, "OAK")
        self.assertIn(bonus.hint_cell_id, self.path)
        self.assertIn(bonus.hint_cell_id, bonus.placement)

    def test_excluded_candidates_are_skipped(self) -> None:
        with self.assertRaises(SearchExhausted):
            self.solver.place_bonus(["OAK", "xyz"], self.path, exclude_words=["oak"])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
