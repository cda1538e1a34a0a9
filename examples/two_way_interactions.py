"""
Example 1: Two-way interactions
Synthetic dose-response data with an intercept and age as nuisance

Demonstrates:
- Binary-by-continuous interaction → grouped scatter with per-group lines
- Binary-by-binary interaction → 2×2 cell means with standard errors
- Continuous-by-continuous interaction → product-term mesh and the
  ``opt="poly22"`` quadratic surface
- ``render=False`` and drawing into your own Axes via ``display``
"""

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np

from interaction_plots import PlotLabels, plot_interaction
from interaction_plots.display import plot_grouped_scatter

OUT_DIR = Path(__file__).resolve().parent / "figures"
OUT_DIR.mkdir(exist_ok=True)

# ============================================================================
# Simulate data
# ============================================================================

rng = np.random.default_rng(2018)
n = 300
treated = rng.integers(0, 2, n).astype(float)
female = rng.integers(0, 2, n).astype(float)
dose = rng.uniform(0, 10, n)
weight = rng.normal(70, 12, n)
age = rng.normal(45, 10, n)
Z = np.column_stack([np.ones(n), age])

response = (
    0.4 * dose
    + 1.5 * treated * dose
    + 2.0 * treated * female
    + 0.02 * dose * weight
    + 0.1 * age
    + rng.standard_normal(n)
)

# ============================================================================
# Binary × continuous
# ============================================================================

labels = PlotLabels(
    title="Treatment × dose",
    ylabel="Dose (residualised)",
    zlabel="Response (residualised)",
    xnames=("placebo", "treated"),
    legend_location="upper left",
)
result = plot_interaction(
    response,
    np.column_stack([treated, dose]),
    I=treated * dose,
    Z=Z,
    labels=labels,
)
print(f"Variant {result.variant.value}: slopes per group = {result.data.slopes}")
plt.savefig(OUT_DIR / "treatment_by_dose.png", dpi=150)
plt.close("all")

# ============================================================================
# Binary × binary
# ============================================================================

result = plot_interaction(
    response,
    np.column_stack([treated, female]),
    I=treated * female,
    Z=Z,
    labels={
        "title": "Treatment × sex",
        "xlabel": "Treatment",
        "zlabel": "Mean response",
        "xnames": ["placebo", "treated"],
        "ynames": ["male", "female"],
    },
)
print("Cell means:\n", result.data.means)
print("Cell counts:\n", result.data.counts)
plt.savefig(OUT_DIR / "treatment_by_sex.png", dpi=150)
plt.close("all")

# ============================================================================
# Continuous × continuous
# ============================================================================

for opt in (1.0, "poly22"):
    result = plot_interaction(
        response,
        np.column_stack([dose, weight]),
        I=dose * weight,
        Z=Z,
        resolution=25,
        opt=opt,
        labels={"xlabel": "Dose", "ylabel": "Weight", "zlabel": "Response"},
    )
    print(f"opt={opt!r}: interaction coefficient = {result.fit.interaction_coef:.4f}")
    plt.savefig(OUT_DIR / f"dose_by_weight_{opt}.png", dpi=150)
    plt.close("all")

# ============================================================================
# Compute only, then draw into an existing figure
# ============================================================================

fig, axes = plt.subplots(1, 2, figsize=(10, 4))
for ax, covariates in zip(axes, (None, Z)):
    result = plot_interaction(
        response,
        np.column_stack([treated, dose]),
        I=treated * dose,
        Z=covariates,
        render=False,
    )
    plot_grouped_scatter(result.data, labels, ax=ax)
axes[0].set_title("Without nuisance")
axes[1].set_title("Age and intercept removed")
fig.tight_layout()
fig.savefig(OUT_DIR / "with_and_without_nuisance.png", dpi=150)
plt.close(fig)
