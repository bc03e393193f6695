import unittest

import torch

from kohonen_map import InsufficientAliveNeuronsError
from kohonen_map.lattice import Lattice
from kohonen_map.report import format_report, rank_by_popularity, top_neurons


class TestRanking(unittest.TestCase):

    def setUp(self):
        self.lattice = Lattice(2, 2, random_seed=0)

    def test_descending_by_popularity(self):
        alive = {(0, 0): [0, 1, 2], (1, 1): [3, 4, 5, 6, 7], (0, 1): [8, 9, 10, 11]}
        ranked = [coord for coord, _ in rank_by_popularity(alive, self.lattice)]
        self.assertEqual(ranked, [(1, 1), (0, 1), (0, 0)])

    def test_ties_keep_row_major_order(self):
        # insertion order differs from row-major order on purpose
        alive = {(1, 1): [1, 2, 3], (0, 1): [4, 5, 6], (1, 0): [7, 8, 9], (0, 0): [10, 11, 12, 13]}
        ranked = [coord for coord, _ in rank_by_popularity(alive, self.lattice)]
        self.assertEqual(ranked, [(0, 0), (0, 1), (1, 0), (1, 1)])


class TestTopNeurons(unittest.TestCase):

    def setUp(self):
        self.lattice = Lattice(2, 2, random_seed=0)
        self.lattice.weights.copy_(torch.tensor([[0.0, 0.5], [1.0, 1.5], [2.0, 2.5], [3.0, 3.5]], dtype=torch.float64))

    def test_class_representation(self):
        alive = {(0, 0): [0, 1, 2, 3], (0, 1): [4, 5, 6], (1, 1): [7, 8, 9]}
        outputs = [[1, 0], [1, 0], [0, 1], [1, 0], [0, 1], [0, 1], [0, 1], [1, 1], [1, 0], [1, 0]]

        reports = top_neurons(alive, self.lattice, outputs)

        self.assertEqual(len(reports), 3)
        self.assertEqual(reports[0].coord, (0, 0))
        self.assertEqual(reports[0].weights, [0.0, 0.5])
        self.assertEqual(reports[0].observations, [0, 1, 2, 3])
        self.assertEqual(reports[0].class_representation, [75.0, 25.0])
        self.assertEqual(reports[1].class_representation, [0.0, 100.0])
        self.assertEqual(reports[2].weights, [3.0, 3.5])
        self.assertEqual(reports[2].class_representation, [100.0, 100.0 / 3])

    def test_only_top_three_are_reported(self):
        alive = {(0, 0): [0, 1, 2], (0, 1): [3, 4, 5], (1, 0): [6, 7, 8], (1, 1): [9, 10, 11, 12]}
        outputs = [[1]] * 13
        reports = top_neurons(alive, self.lattice, outputs)
        self.assertEqual([r.coord for r in reports], [(1, 1), (0, 0), (0, 1)])

    def test_too_few_alive_neurons(self):
        alive = {(0, 0): [0, 1, 2], (1, 1): [3, 4, 5]}
        with self.assertRaises(InsufficientAliveNeuronsError) as ctx:
            top_neurons(alive, self.lattice, [[1]] * 6)
        self.assertEqual(ctx.exception.required, 3)
        self.assertEqual(ctx.exception.alive, 2)

    def test_format_report(self):
        alive = {(0, 0): [0, 1, 2, 3], (0, 1): [4, 5, 6], (1, 1): [7, 8, 9]}
        outputs = [[1, 0], [1, 0], [0, 1], [1, 0]] + [[0, 1]] * 6
        text = format_report(top_neurons(alive, self.lattice, outputs))
        lines = text.splitlines()
        self.assertEqual(lines[0], "Top 3 neuron weights by popularity:")
        self.assertEqual(lines[1], "0 0.5")
        self.assertEqual(lines[2], "Class representation: 75% 25%")


class TestLabelWidthByRank(unittest.TestCase):
    """
    Known discrepancy, pending clarification: the number of label dimensions
    of the neuron ranked `r` is read from the label vector of observation `r`
    rather than from the neuron's own observations.
    """

    def setUp(self):
        self.lattice = Lattice(2, 2, random_seed=0)
        self.alive = {(0, 0): [1, 2, 3, 4], (0, 1): [5, 6, 7], (1, 0): [8, 9, 10]}
        # observation 0 carries a shorter label vector than everyone else
        self.outputs = [[1]] + [[1, 0], [0, 1], [1, 0], [1, 0]] + [[0, 1]] * 6

    def test_label_width_taken_from_rank_position(self):
        reports = top_neurons(self.alive, self.lattice, self.outputs)
        self.assertEqual(reports[0].class_representation, [75.0])
        self.assertEqual(reports[1].class_representation, [0.0, 100.0])

    @unittest.expectedFailure
    def test_label_width_taken_from_assigned_observations(self):
        reports = top_neurons(self.alive, self.lattice, self.outputs)
        self.assertEqual(reports[0].class_representation, [75.0, 25.0])


if __name__ == '__main__':
    unittest.main()
