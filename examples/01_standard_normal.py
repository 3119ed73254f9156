"""
Example 1: Standard Normal by Adaptive Rejection Sampling

Draw from a standard normal with the Metropolis correction switched off.
The log density is concave, so every accepted value is an exact,
independent draw, and the envelope tightens as sampling proceeds.

Target:
    log p(x) = -x² / 2
"""

import math

import numpy as np
import matplotlib.pyplot as plt
from mlx_arms import ARMS


def main():
    print("\n" + "="*70)
    print("Example 1: Standard Normal")
    print("="*70 + "\n")

    def log_prob(x):
        return -0.5 * x * x

    sampler = ARMS(log_prob, xinit=(-1.0, 0.0, 1.0), metropolis=False)

    print("Envelope after the first draw:")
    sampler.draw()
    sampler.envelope.display()

    samples = sampler.run(num_samples=20000, random_seed=42)
    sampler.print_summary()

    print("\nComparison to true values:")
    summary = sampler.summary()
    print(f"  mean: true=0.000, estimated={summary['mean']:.3f}")
    print(f"  std:  true=1.000, estimated={summary['std']:.3f}")
    print(f"  envelope points used: {summary['envelope_points']}")

    # Visualize results
    print("\nCreating visualization...")
    fig, axes = plt.subplots(1, 2, figsize=(14, 5))

    grid = np.linspace(-4, 4, 400)
    axes[0].hist(samples, bins=80, alpha=0.7, density=True,
                 edgecolor='black', linewidth=0.5, label='ARMS samples')
    axes[0].plot(grid, np.exp(-0.5 * grid**2) / math.sqrt(2 * math.pi),
                 color='red', linewidth=2, label='N(0, 1)')
    axes[0].set_xlabel('x')
    axes[0].set_ylabel('Density')
    axes[0].set_title('Samples vs Target')
    axes[0].legend()
    axes[0].grid(alpha=0.3)

    points = sampler.envelope.ordered()
    xs = [p.x for p in points if -4 <= p.x <= 4]
    ys = [p.y for p in points if -4 <= p.x <= 4]
    axes[1].plot(grid, -0.5 * grid**2, color='red', linewidth=2,
                 label='log density')
    axes[1].plot(xs, ys, color='blue', linewidth=1, marker='.',
                 label='Envelope')
    axes[1].set_xlabel('x')
    axes[1].set_ylabel('log p(x)')
    axes[1].set_title('Final Envelope')
    axes[1].legend()
    axes[1].grid(alpha=0.3)

    plt.suptitle('MLX-ARMS: Standard Normal', fontsize=16, y=0.995)
    plt.tight_layout()

    output_file = '01_standard_normal_results.png'
    plt.savefig(output_file, dpi=150, bbox_inches='tight')
    print(f"Saved visualization to: {output_file}")

    print("\n" + "="*70)
    print("✅ Example completed successfully!")
    print("="*70 + "\n")


if __name__ == "__main__":
    main()
