import unittest

import torch

from kohonen_map import IterativeSOM
from kohonen_map.lattice import Coord
from kohonen_map.proximity import best_match, proximity_matrix


def three_clusters(jitter: float = 0.01, seed: int = 0) -> torch.Tensor:
    generator = torch.Generator().manual_seed(seed)
    centers = torch.tensor([[0.0, 0.0], [5.0, 5.0], [10.0, 10.0]], dtype=torch.float64)
    points = centers.repeat_interleave(3, dim=0)
    return points + jitter * torch.randn(9, 2, generator=generator, dtype=torch.float64)


class TestIterativeSweep(unittest.TestCase):

    def test_winner_weights_are_taken_after_each_update(self):
        torch.manual_seed(3)
        data = torch.rand(12, 2, dtype=torch.float64)
        som = IterativeSOM(3, 2, training_error=0.0, max_epochs=1, random_seed=3)
        weights = som.get_weights()

        result = som.run(data)

        # Replay the sweep one neuron at a time with the scalar update law.
        expected_winner_weights = torch.zeros_like(data)
        expected_assignments = {coord: [] for coord in som.lattice.coords()}
        for index, observation in enumerate(data):
            winner = best_match(proximity_matrix(observation, weights.view(3, 3, 2)))
            for neuron in range(9):
                coef = som.schedule.update_coefficient(winner, Coord.from_index(neuron, 3), 0)
                weights[neuron] = weights[neuron] + coef * (observation - weights[neuron])
            expected_winner_weights[index] = weights[winner.linear_index(3)]
            expected_assignments[winner].append(index)

        self.assertEqual(result.assignments, expected_assignments)
        self.assertTrue(torch.allclose(result.winner_weights, expected_winner_weights, atol=1e-12))
        self.assertTrue(torch.allclose(som.lattice.weights, weights, atol=1e-12))

    def test_last_winner_weights_equal_final_lattice_weights(self):
        torch.manual_seed(4)
        data = torch.rand(8, 3, dtype=torch.float64)
        som = IterativeSOM(3, 3, training_error=0.0, max_epochs=1, random_seed=4)
        result = som.run(data)
        last_winner = next(coord for coord, indices in result.assignments.items() if 7 in indices)
        self.assertTrue(torch.equal(result.winner_weights[7], som.lattice.get(last_winner).weights))

    def test_every_neuron_moves(self):
        som = IterativeSOM(3, 2, training_error=0.0, max_epochs=1, random_seed=5)
        before = som.get_weights()
        som.run(torch.tensor([[0.5, 0.5]], dtype=torch.float64))
        self.assertTrue(torch.all(torch.any(som.lattice.weights != before, dim=1)))

    def test_vanishing_radius_moves_only_the_winner(self):
        som = IterativeSOM(20, 2, epochs_number=10, random_seed=7)
        before = som.get_weights()
        data = torch.tensor([[0.5, 0.5]], dtype=torch.float64)
        assignments = som.new_assignment_table()
        winner_weights = torch.zeros_like(data)

        som._train_epoch(data, assignments, winner_weights, 400)

        self.assertFalse(torch.any(torch.isnan(som.lattice.weights)))
        moved = torch.any(som.lattice.weights != before, dim=1)
        self.assertEqual(moved.sum().item(), 1)
        (winner,) = [coord for coord, indices in assignments.items() if indices]
        self.assertTrue(moved[som.lattice.index(winner)])

    def test_assignments_are_cleared_between_sweeps(self):
        torch.manual_seed(6)
        data = torch.rand(10, 2, dtype=torch.float64)
        result = IterativeSOM(3, 2, training_error=0.0, max_epochs=4, random_seed=6).run(data)
        assigned = sorted(index for indices in result.assignments.values() for index in indices)
        self.assertEqual(assigned, list(range(10)))


class TestIterativeConvergence(unittest.TestCase):

    def test_repeated_observation_converges_quickly(self):
        data = torch.full((50, 2), 0.5, dtype=torch.float64)
        result = IterativeSOM(3, 2, random_seed=0).run(data)
        self.assertTrue(result.converged)
        self.assertLessEqual(result.epochs, 5)
        self.assertLess(result.error, 1e-3)
        winners = [coord for coord, indices in result.assignments.items() if indices]
        self.assertEqual(len(winners), 1)

    def test_three_clusters_map_to_separate_neurons(self):
        data = three_clusters()
        som = IterativeSOM(3, 2, max_epochs=5000, random_seed=0)
        result = som.run(data)

        winners = {}
        for coord, indices in result.assignments.items():
            for index in indices:
                winners[index] = coord
        cluster_winners = [{winners[i] for i in range(start, start + 3)} for start in (0, 3, 6)]
        for cluster in cluster_winners:
            self.assertEqual(len(cluster), 1)
        self.assertNotEqual(cluster_winners[0], cluster_winners[2])

        (low_coord,), (high_coord,) = cluster_winners[0], cluster_winners[2]
        low = som.lattice.get(low_coord).weights
        high = som.lattice.get(high_coord).weights
        origin = torch.zeros(2, dtype=torch.float64)
        far = torch.full((2,), 10.0, dtype=torch.float64)
        self.assertLess(torch.linalg.norm(low - origin), torch.linalg.norm(low - far))
        self.assertLess(torch.linalg.norm(high - far), torch.linalg.norm(high - origin))


if __name__ == '__main__':
    unittest.main()
