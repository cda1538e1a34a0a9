"""
Example 2: Three-way interaction
Synthetic data with a {-1, +1} coded group, two continuous predictors
and an intercept as nuisance

Demonstrates:
- Recursive split on the last two-level main effect
- Level-dependent orientation of the product-term mesh (sign of the level)
- Inspecting pruned near-collinear columns per level
- ``UndefinedSplitError`` when no main effect has two levels
"""

import warnings
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np

from interaction_plots import (
    InteractionPlotter,
    SingularDesignWarning,
    UndefinedSplitError,
)

OUT_DIR = Path(__file__).resolve().parent / "figures"
OUT_DIR.mkdir(exist_ok=True)

rng = np.random.default_rng(11)
n = 400
group = np.where(rng.random(n) < 0.5, -1.0, 1.0)
x1 = rng.standard_normal(n)
x2 = rng.standard_normal(n)
interaction = x1 * x2 * group
Z = np.ones((n, 1))
y = x1 + x2 + 0.8 * interaction + rng.standard_normal(n)

X = np.column_stack([x1, x2, group])

plotter = InteractionPlotter(
    resolution=20,
    labels={"title": "x1 × x2 × group", "xlabel": "x1", "ylabel": "x2", "zlabel": "y"},
)

with warnings.catch_warnings(record=True) as caught:
    warnings.simplefilter("always", SingularDesignWarning)
    result = plotter.plot(y, X, I=interaction, Z=Z)

data = result.data
print(f"Split on column {data.split_column}, levels {data.levels}")
for level, child, gone_x, gone_z in zip(
    data.levels, data.children, data.dropped_main_effects, data.dropped_nuisance
):
    print(
        f"  level {level:+g}: n={child.n_observations}, variant {child.variant.value}, "
        f"mesh scale {child.option.factor:+g}, dropped X={gone_x} Z={gone_z}"
    )
for w in caught:
    print(f"  warning: {w.message}")

plt.savefig(OUT_DIR / "three_way.png", dpi=150)
plt.close("all")

# No two-level column: the split is undefined.
try:
    plotter.compute(y, np.column_stack([x1, x2, rng.standard_normal(n)]), I=interaction)
except UndefinedSplitError as exc:
    print(f"UndefinedSplitError: {exc}")
