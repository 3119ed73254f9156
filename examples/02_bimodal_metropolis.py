"""
Example 2: Bimodal Target with the Metropolis Correction

A two-component normal mixture is not log-concave, so plain adaptive
rejection sampling cannot bound it. With the Metropolis correction the
sampler still converges to the right distribution; the output is then a
Markov chain, so a short warmup is discarded.

Target:
    p(x) = 0.5 N(x | -2, 1) + 0.5 N(x | 2, 1)
"""

import math

import numpy as np
import matplotlib.pyplot as plt
from mlx_arms import ARMS, EnvelopeViolation


def log_prob(x):
    a = -0.5 * (x + 2.0) ** 2
    b = -0.5 * (x - 2.0) ** 2
    m = max(a, b)
    return m + math.log(math.exp(a - m) + math.exp(b - m))


def main():
    print("\n" + "="*70)
    print("Example 2: Bimodal Target")
    print("="*70 + "\n")

    print("Trying pure rejection sampling first...")
    try:
        ARMS(log_prob, xinit=(-3.0, 0.0, 3.0), xl=-10.0, xr=10.0,
             metropolis=False).run(num_samples=100, verbose=False)
    except EnvelopeViolation as err:
        print(f"  Refused as expected: {err}\n")

    sampler = ARMS(log_prob, xinit=(-3.0, 0.0, 3.0), xl=-10.0, xr=10.0,
                   metropolis=True)
    samples = sampler.run(num_samples=20000, num_warmup=500, random_seed=0)
    sampler.print_summary()

    left_share = np.mean(samples < 0)
    print(f"\nShare of samples in the left mode: {left_share:.3f} (true: 0.500)")

    # Visualize results
    print("\nCreating visualization...")
    fig, axes = plt.subplots(1, 2, figsize=(14, 5))

    axes[0].plot(samples[:2000], alpha=0.7, linewidth=0.5)
    axes[0].set_xlabel('Iteration')
    axes[0].set_ylabel('x')
    axes[0].set_title('Trace Plot (first 2000 draws)')
    axes[0].grid(alpha=0.3)

    grid = np.linspace(-6, 6, 400)
    density = 0.5 * (np.exp(-0.5 * (grid + 2)**2)
                     + np.exp(-0.5 * (grid - 2)**2)) / math.sqrt(2 * math.pi)
    axes[1].hist(samples, bins=100, alpha=0.7, density=True,
                 edgecolor='black', linewidth=0.5, label='ARMS samples')
    axes[1].plot(grid, density, color='red', linewidth=2, label='Target')
    axes[1].set_xlabel('x')
    axes[1].set_ylabel('Density')
    axes[1].set_title('Samples vs Target')
    axes[1].legend()
    axes[1].grid(alpha=0.3)

    plt.suptitle('MLX-ARMS: Bimodal Mixture', fontsize=16, y=0.995)
    plt.tight_layout()

    output_file = '02_bimodal_metropolis_results.png'
    plt.savefig(output_file, dpi=150, bbox_inches='tight')
    print(f"Saved visualization to: {output_file}")

    print("\n" + "="*70)
    print("✅ Example completed successfully!")
    print("="*70 + "\n")


if __name__ == "__main__":
    main()
