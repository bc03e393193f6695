import argparse
import time

import torch
from kohonen_map import BatchSOM, IterativeSOM, read_dataset

# --- Configuration ---
LATTICE_SIZE = 3
NUM_SAMPLES = 300
NUM_FEATURES = 9

# --- Benchmarking Parameters ---
REPEATS = 5  # the first run is a warm-up and is discarded


def benchmark_som(som_class, name: str, inputs, features_count: int, repeats: int = REPEATS):
    """
    Times `repeats` complete training runs of a SOM implementation and
    reports mean +- sample standard deviation of the warm runs.
    """
    print(f"\n--- Benchmarking {name} ---")
    timings_ms = []
    for repeat in range(repeats):
        som_instance = som_class(LATTICE_SIZE, features_count)
        start = time.perf_counter()
        result = som_instance.run(inputs)
        elapsed_ms = (time.perf_counter() - start) * 1000
        print(f"  Run {repeat}: {elapsed_ms:.2f} ms, {result.epochs} epochs")
        timings_ms.append(elapsed_ms)

    warm = torch.tensor(timings_ms[1:], dtype=torch.float64)
    if len(warm) < 2:
        print("  > Not enough warm runs for statistics")
        return None

    mean = warm.mean().item()
    std = warm.std().item()  # sample standard deviation
    low = max(0.0, round(mean - std, 3))
    high = round(mean + std, 3)
    print(f"  > Execution time: {mean:.3f} +- {std:.3f} ms, interval [{low}, {high}]")
    return mean, std


def main():
    """Main execution function."""
    parser = argparse.ArgumentParser(description="Time iterative and batch Kohonen map training.")
    parser.add_argument('dataset', nargs='?')
    parser.add_argument('--repeats', type=int, default=REPEATS)
    args = parser.parse_args()

    print("--- Setting up SOM Benchmark ---")
    if args.dataset:
        dataset = read_dataset(args.dataset)
        inputs, features_count = dataset.input_tensor(), dataset.features_count
    else:
        inputs, features_count = torch.rand(NUM_SAMPLES, NUM_FEATURES, dtype=torch.float64), NUM_FEATURES

    print(f"Data: {len(inputs)} samples, {features_count} features")
    print(f"SOM Grid: {LATTICE_SIZE}x{LATTICE_SIZE} ({LATTICE_SIZE * LATTICE_SIZE} neurons)")

    iterative = benchmark_som(IterativeSOM, "Iterative learning", inputs, features_count, args.repeats)
    batch = benchmark_som(BatchSOM, "Batch learning", inputs, features_count, args.repeats)

    if iterative is not None and batch is not None:
        print("\n--- Comparison Summary ---")
        print(f"Speedup (batch vs iterative): {iterative[0] / batch[0]:.2f}x")


if __name__ == "__main__":
    main()
