import random
import unittest

from wordpath.core.constants import FORWARD_STEPS, ORTHOGONAL_STEPS, PlacementGeometry
from wordpath.engine.grid import GridConfig, GridState


def ray_grid(size: int, directions=ORTHOGONAL_STEPS, seed: int = 1) -> GridState:
    config = GridConfig(width=size, height=size, geometry=PlacementGeometry.RAY, directions=directions)
    return GridState(config, rng=random.Random(seed))


def snake_grid(size: int, seed: int = 1) -> GridState:
    config = GridConfig(width=size, height=size, geometry=PlacementGeometry.SNAKE)
    return GridState(config, rng=random.Random(seed))


def steps(grid: GridState, placement):
    cells = [grid.cell_by_id(cell_id) for cell_id in placement]
    return [(b.x - a.x, b.y - a.y) for a, b in zip(cells, cells[1:])]


def letters(grid: GridState, placement) -> str:
    return "".join(grid.cell_by_id(cell_id).value for cell_id in placement)


class RayPlacementTests(unittest.TestCase):
    def test_ray_options_are_straight_and_contiguous(self) -> None:
        grid = ray_grid(5)
        options = grid.find_all_path_options("CAT")
        self.assertTrue(options)
        for option in options:
            vectors = steps(grid, option)
            self.assertTrue(all(abs(dx) + abs(dy) == 1 for dx, dy in vectors))
            self.assertEqual(len(set(vectors)), 1)

    def test_every_start_and_direction_is_found(self) -> None:
        # 3 cells per row/column: one start per row for each horizontal
        # direction, same for columns.
        grid = ray_grid(3)
        self.assertEqual(len(grid.find_all_path_options("CAT")), 12)

    def test_pinned_start_in_forward_model(self) -> None:
        grid = ray_grid(3, directions=FORWARD_STEPS)
        options = grid.find_all_path_options("CAT", start_cell_id="r0c0")
        self.assertEqual(
            sorted(options),
            [["r0c0", "r0c1", "r0c2"], ["r0c0", "r1c0", "r2c0"]],
        )

    def test_letter_conflicts_prune_options(self) -> None:
        grid = ray_grid(3, directions=FORWARD_STEPS)
        grid.commit_path("CAT", "CAT", ["r0c0", "r0c1", "r0c2"])
        self.assertEqual(
            grid.find_all_path_options("TOP", start_cell_id="r0c2"),
            [["r0c2", "r1c2", "r2c2"]],
        )
        self.assertEqual(grid.find_all_path_options("DOG", start_cell_id="r0c0"), [])

    def test_unknown_start_cell_has_no_options(self) -> None:
        self.assertEqual(ray_grid(3).find_all_path_options("CAT", start_cell_id="r9c9"), [])


class SnakePlacementTests(unittest.TestCase):
    def test_snake_options_walk_orthogonally_without_revisits(self) -> None:
        grid = snake_grid(3)
        options = grid.find_all_path_options("CATS", start_cell_id="r1c1")
        self.assertTrue(options)
        for option in options:
            self.assertEqual(option[0], "r1c1")
            self.assertEqual(len(set(option)), 4)
            self.assertTrue(all(abs(dx) + abs(dy) == 1 for dx, dy in steps(grid, option)))

    def test_snake_search_is_capped(self) -> None:
        config = GridConfig(width=5, height=5, snake_subtree_limit=3, snake_total_limit=10)
        grid = GridState(config, rng=random.Random(4))
        options = grid.find_all_path_options("ABCDEF")
        # The last start searched may push past the total cap by one capped batch.
        self.assertLess(len(options), 40)


class CommitUndoTests(unittest.TestCase):
    def test_remove_path_keeps_the_overlap_cell(self) -> None:
        grid = ray_grid(5)
        grid.commit_path("CAT", "CAT", ["r0c0", "r0c1", "r0c2"])
        before = len(grid.find_all_path_options("TOP", start_cell_id="r0c2"))
        grid.commit_path("TOP", "TOP", ["r0c2", "r1c2", "r2c2"], overlap_cell_id="r0c2")

        grid.remove_path(["r0c2", "r1c2", "r2c2"])

        self.assertEqual(grid.cell_by_id("r0c2").value, "T")
        self.assertTrue(grid.cell_by_id("r1c2").is_empty())
        self.assertTrue(grid.cell_by_id("r2c2").is_empty())
        self.assertEqual([record.word_id for record in grid.commits], ["CAT"])
        after = len(grid.find_all_path_options("TOP", start_cell_id="r0c2"))
        self.assertGreaterEqual(after, before)

    def test_remove_path_is_idempotent(self) -> None:
        grid = ray_grid(4)
        grid.commit_path("CAT", "CAT", ["r0c0", "r0c1", "r0c2"])
        grid.remove_path(["r0c0", "r0c1", "r0c2"])
        grid.remove_path(["r0c0", "r0c1", "r0c2"])
        self.assertEqual(len(grid.empty_cells()), 16)

    def test_undo_reverts_only_written_cells(self) -> None:
        grid = ray_grid(4)
        grid.commit_path("CAT", "CAT", ["r0c0", "r0c1", "r0c2"])
        record = grid.commit_path("TEN", "TEN", ["r0c2", "r1c2", "r2c2"], overlap_cell_id="r0c2")
        self.assertEqual(record.written_cell_ids, ["r1c2", "r2c2"])

        undone = grid.undo()
        self.assertIs(undone, record)
        self.assertEqual(letters(grid, ["r0c0", "r0c1", "r0c2"]), "CAT")
        self.assertEqual(len(grid.empty_cells()), 13)

        grid.undo()
        self.assertEqual(len(grid.empty_cells()), 16)
        self.assertIsNone(grid.undo())

    def test_undo_follows_the_commit_record(self) -> None:
        grid = ray_grid(4)
        grid.commit_path("CAT", "CAT", ["r0c0", "r0c1", "r0c2"])
        grid.commit_path("TEN", "TEN", ["r0c2", "r1c2", "r2c2"], overlap_cell_id="r0c2")
        inner = grid.commit_path("AT", "AT", ["r0c1", "r0c2"])
        self.assertEqual(inner.written_cell_ids, [])

        grid.undo()
        self.assertEqual(letters(grid, ["r0c1", "r0c2"]), "AT")
        self.assertEqual(grid.cell_by_id("r0c2").part_of_word_ids, {"CAT", "TEN"})

        grid.undo()
        self.assertEqual(grid.cell_by_id("r0c2").value, "T")
        self.assertEqual(grid.cell_by_id("r0c2").part_of_word_ids, {"CAT"})
        for cell_id in ("r1c2", "r2c2"):
            self.assertTrue(grid.cell_by_id(cell_id).is_empty())
            self.assertEqual(grid.cell_by_id(cell_id).part_of_word_ids, set())

    def test_conflicting_commit_leaves_grid_untouched(self) -> None:
        grid = ray_grid(4)
        grid.commit_path("CAT", "CAT", ["r0c0", "r0c1", "r0c2"])
        with self.assertRaises(ValueError):
            grid.commit_path("DOG", "DOG", ["r1c0", "r1c1", "r0c1"])
        self.assertTrue(grid.cell_by_id("r1c0").is_empty())
        self.assertEqual(len(grid.commits), 1)

    def test_commit_rejects_length_mismatch(self) -> None:
        with self.assertRaises(ValueError):
            ray_grid(4).commit_path("CAT", "CAT", ["r0c0", "r0c1"])


class BonusPlacementTests(unittest.TestCase):
    def setUp(self) -> None:
        self.grid = ray_grid(5, seed=3)
        self.grid.commit_path("CAT", "CAT", ["r2c0", "r2c1", "r2c2"])
        self.grid.commit_path("TOP", "TOP", ["r2c2", "r3c2", "r4c2"], overlap_cell_id="r2c2")
        self.path = {"r2c0", "r2c1", "r2c2", "r3c2", "r4c2"}

    def test_bonus_word_crosses_path_once(self) -> None:
        placement, hint = self.grid.try_place_bonus_word("OAK", self.path)
        self.assertIn(hint, placement)
        self.assertEqual(set(placement) & self.path, {hint})
        self.assertEqual(letters(self.grid, placement), "OAK")
        self.assertEqual(len(set(steps(self.grid, placement))), 1)

    def test_bonus_word_without_shared_letter(self) -> None:
        self.assertIsNone(self.grid.try_place_bonus_word("XYZ", self.path))
        self.assertEqual(len(self.grid.commits), 2)

    def test_snake_bonus_word(self) -> None:
        grid = snake_grid(4, seed=5)
        grid.commit_path("CAT", "CAT", ["r1c0", "r1c1", "r1c2"])
        path = {"r1c0", "r1c1", "r1c2"}
        placement, hint = grid.try_place_bonus_word("BAD", path)
        self.assertEqual(hint, "r1c1")
        self.assertEqual(set(placement) & path, {"r1c1"})
        self.assertEqual(letters(grid, placement), "BAD")
        self.assertTrue(all(abs(dx) + abs(dy) == 1 for dx, dy in steps(grid, placement)))


class FinishingTests(unittest.TestCase):
    def test_distractors_fill_every_empty_cell(self) -> None:
        grid = ray_grid(4)
        grid.commit_path("CAT", "CAT", ["r0c0", "r0c1", "r0c2"])
        self.assertEqual(grid.fill_distractors(), 13)
        self.assertEqual(grid.empty_cells(), [])
        self.assertEqual(letters(grid, ["r0c0", "r0c1", "r0c2"]), "CAT")

    def test_frozen_grid_rejects_mutation(self) -> None:
        grid = ray_grid(3)
        with self.assertRaises(RuntimeError):
            grid.export_grid("r0c0", "r0c2")
        grid.fill_distractors()
        grid.freeze()
        with self.assertRaises(RuntimeError):
            grid.commit_path("CAT", "CAT", ["r0c0", "r0c1", "r0c2"])

        exported = grid.export_grid("r0c0", "r0c2")
        self.assertEqual(len(exported.cells), 9)
        self.assertEqual(exported.start_cell_id, "r0c0")
        self.assertTrue(all(cell.part_of_word_ids == set() for cell in exported.cells))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
