import random
import unittest

from wordpath.core.exceptions import ChainBuildError, SearchExhausted
from wordpath.engine.chain import ChainConfig, ChainPlanner


WORDS = ["cat", "top", "pen", "net", "Ten", "pan", "nap"]


class ChainPlannerTests(unittest.TestCase):
    def test_chain_links_last_letter_to_first(self) -> None:
        for seed in range(20):
            chain = ChainPlanner(rng=random.Random(seed)).plan(WORDS)
            self.assertGreaterEqual(len(chain), 3)
            self.assertLessEqual(len(chain), 4)
            self.assertEqual(len(set(chain)), len(chain))
            self.assertLessEqual(sum(len(word) for word in chain), 25)
            for current, following in zip(chain, chain[1:]):
                self.assertEqual(current[-1], following[0])

    def test_same_seed_same_chain(self) -> None:
        first = ChainPlanner(rng=random.Random(42)).plan(WORDS)
        second = ChainPlanner(rng=random.Random(42)).plan(WORDS)
        self.assertEqual(first, second)

    def test_excluded_words_are_never_chosen(self) -> None:
        for seed in range(20):
            chain = ChainPlanner(rng=random.Random(seed)).plan(WORDS, exclude_words=["cat", "NAP"])
            self.assertNotIn("CAT", chain)
            self.assertNotIn("NAP", chain)

    def test_candidate_pool_filters_and_dedupes(self) -> None:
        planner = ChainPlanner()
        pool = planner.candidate_pool(["at", "Cat", "CAT", "elephant", "ostrich", "dog"], exclude_words=["dog"])
        self.assertEqual(pool, ["CAT", "OSTRICH"])

    def test_long_words_cannot_start_a_chain(self) -> None:
        with self.assertRaises(ChainBuildError):
            ChainPlanner().plan(["OSTRICH", "HABITAT"])

    def test_unchainable_words_exhaust_attempts(self) -> None:
        planner = ChainPlanner(ChainConfig(max_attempts=5), rng=random.Random(1))
        with self.assertRaises(SearchExhausted) as ctx:
            planner.plan(["CAT", "DOG", "EMU"])
        self.assertIn("5 attempts", str(ctx.exception))

    def test_overshooting_word_closes_the_chain(self) -> None:
        words = ["ABCDEF", "FGHIJKL", "LMNOPQR", "RSTUVWX"]
        chain = ChainPlanner(rng=random.Random(0)).plan(words)
        self.assertEqual(chain, ["ABCDEF", "FGHIJKL", "LMNOPQR"])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
