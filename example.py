import argparse
import logging

import torch
from kohonen_map import BatchSOM, IterativeSOM, format_report, read_dataset


def make_clustered_data(num_per_cluster: int = 30, seed: int = 0):
    """
    Three tight 2D clusters around (0, 0), (5, 5) and (10, 10), labelled
    with one-hot label vectors.
    """
    generator = torch.Generator().manual_seed(seed)
    inputs, outputs = [], []
    for label, center in enumerate((0.0, 5.0, 10.0)):
        points = center + 0.1 * torch.randn(num_per_cluster, 2, generator=generator, dtype=torch.float64)
        inputs.extend(points.tolist())
        outputs.extend([[int(label == i) for i in range(3)]] * num_per_cluster)
    return inputs, outputs


def run_som_example(args: argparse.Namespace):
    """
    Demonstrates the basic usage of the kohonen_map library.
    """
    print("--- Running SOM Library Example ---")

    # 1. Load or generate data
    if args.dataset:
        dataset = read_dataset(args.dataset)
        inputs, outputs, features_count = dataset.input_tensor(), dataset.outputs, dataset.features_count
    else:
        inputs, outputs = make_clustered_data(seed=args.seed)
        features_count = 2
    print(f"Configuration: Samples={len(inputs)}, Features={features_count}, "
          f"Lattice={args.lattice_size}x{args.lattice_size}, Algorithm={args.algorithm}")

    # 2. Initialize the SOM
    som_class = BatchSOM if args.algorithm == 'batch' else IterativeSOM
    som_model = som_class(args.lattice_size, features_count, max_epochs=args.max_epochs, random_seed=args.seed)

    # 3. Train
    print("\nTraining...")
    result = som_model.run(inputs, outputs if args.algorithm == 'batch' else None)
    status = "converged" if result.converged else "stopped at the epoch limit"
    print(f"Training {status} after {result.epochs} epochs, training error {result.error:.6f}")

    # 4. Report the most popular neurons
    if args.algorithm == 'batch':
        print(f"Training error after excluding dead neurons: {result.pruned_error:.6f}")
        print(f"Alive neurons: {len(result.alive_neurons)}\n")
        print(format_report(result.report))
    else:
        for coord, indices in result.assignments.items():
            if indices:
                print(f"  Neuron ({coord.row}, {coord.col}): {len(indices)} observations")

    # 5. Export weights
    if args.weights:
        som_model.store_weights(args.weights)
        print(f"Weights written to {args.weights}")

    print("\n--- SOM Library Example Finished ---")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Train a Kohonen map and print its most popular neurons.")
    parser.add_argument('dataset', nargs='?', help="dataset file; synthetic clusters when omitted")
    parser.add_argument('-s', '--lattice-size', type=int, default=3)
    parser.add_argument('-a', '--algorithm', choices=('batch', 'iterative'), default='batch')
    parser.add_argument('--seed', type=int, default=42)
    parser.add_argument('--max-epochs', type=int, default=None)
    parser.add_argument('-w', '--weights', help="file to store the trained weights in")
    parser.add_argument('-v', '--verbose', action='store_true')
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run_som_example(args)
