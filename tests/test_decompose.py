"""Tests for near-collinear pruning and 3-way decomposition."""

import numpy as np
import pytest

from interaction_plots import (
    InteractionPlotter,
    MeshScale,
    PlotVariant,
    Poly22,
    SingularDesignWarning,
    UndefinedSplitError,
    plot_interaction,
)
from interaction_plots.decompose import (
    COLLINEARITY_THRESHOLD,
    decompose_three_way,
    drop_near_collinear,
    find_split_column,
)

# ── Fixtures ─────────────────────────────────────────────────────── #


def _three_way_data(n=200, seed=42):
    """Columns with 2, 3 and 5 distinct values plus a continuous nuisance."""
    rng = np.random.default_rng(seed)
    a = rng.integers(0, 3, n).astype(float)
    b = rng.integers(0, 5, n).astype(float)
    c = np.where(rng.random(n) < 0.5, -1.0, 1.0)
    X = np.column_stack([c, a, b])
    I = (a * b)[:, None]  # noqa: E741
    Z = np.column_stack([np.ones(n), rng.standard_normal(n)])
    y = 0.5 * a + 0.3 * b + 0.2 * a * b * c + rng.standard_normal(n)
    return y, X, I, Z


# ── TestDropNearCollinear ────────────────────────────────────────── #


class TestDropNearCollinear:
    def test_threshold_value(self):
        assert COLLINEARITY_THRESHOLD == 1.0 - 10.0 * np.finfo(float).eps

    def test_drops_copies_of_reference(self):
        rng = np.random.default_rng(0)
        ref = rng.standard_normal((50, 1))
        cand = np.column_stack([rng.standard_normal(50), 2.0 * ref[:, 0] + 1.0, -ref[:, 0]])
        np.testing.assert_array_equal(drop_near_collinear(cand, ref), [True, False, False])

    def test_keeps_merely_correlated(self):
        rng = np.random.default_rng(1)
        ref = rng.standard_normal((50, 1))
        cand = ref + 0.01 * rng.standard_normal((50, 1))
        assert drop_near_collinear(cand, ref).all()

    def test_constant_column_kept(self):
        rng = np.random.default_rng(2)
        cand = np.column_stack([np.ones(30), rng.standard_normal(30)])
        ref = np.ones((30, 1))
        assert drop_near_collinear(cand, ref).all()

    def test_empty_reference_keeps_all(self):
        cand = np.arange(20.0).reshape(10, 2)
        assert drop_near_collinear(cand, np.empty((10, 0))).all()

    def test_empty_candidates(self):
        assert drop_near_collinear(np.empty((10, 0)), np.ones((10, 1))).size == 0

    def test_self_pruning_keeps_last_duplicate(self):
        rng = np.random.default_rng(3)
        z = rng.standard_normal(40)
        cand = np.column_stack([z, rng.standard_normal(40), 3.0 * z])
        np.testing.assert_array_equal(drop_near_collinear(cand), [False, True, True])

    def test_self_pruning_ignores_diagonal(self):
        rng = np.random.default_rng(4)
        cand = rng.standard_normal((40, 3))
        assert drop_near_collinear(cand).all()


# ── TestFindSplitColumn ──────────────────────────────────────────── #


class TestFindSplitColumn:
    def test_single_binary_column(self):
        y, X, I, Z = _three_way_data()
        assert find_split_column(X) == 0

    def test_last_binary_column_wins(self):
        X = np.column_stack([[0, 1, 0, 1], [5, 5, 6, 6], [1, 2, 3, 4]])
        assert find_split_column(X) == 1

    def test_no_binary_column_raises(self):
        X = np.column_stack([np.arange(6), np.arange(6) % 3, np.ones(6)])
        with pytest.raises(UndefinedSplitError, match="exactly two distinct values"):
            find_split_column(X)


# ── TestDecomposeThreeWay ────────────────────────────────────────── #


class TestDecomposeThreeWay:
    def _record_children(self, y, X, I, Z, option):  # noqa: E741
        calls = []

        def child(Yu, Xu, Zu, Iu, opt, depth):
            calls.append(
                {"n": Yu.shape[0], "j": Xu.shape[1], "k": Zu.shape[1], "opt": opt, "depth": depth}
            )
            return len(calls)

        data = decompose_three_way(
            y[:, None], X, Z, I, option, compute_child=child, depth=0
        )
        return data, calls

    def test_exactly_two_children(self):
        y, X, I, Z = _three_way_data()
        data, calls = self._record_children(y, X, I, Z, MeshScale(2.0))
        assert len(calls) == 2
        assert data.children == (1, 2)
        assert data.split_column == 0
        np.testing.assert_array_equal(data.levels, [-1.0, 1.0])

    def test_children_partition_rows(self):
        y, X, I, Z = _three_way_data()
        _, calls = self._record_children(y, X, I, Z, MeshScale())
        assert sum(c["n"] for c in calls) == len(y)
        assert all(c["j"] == 2 for c in calls)
        assert all(c["depth"] == 1 for c in calls)

    def test_numeric_option_becomes_level_sign(self):
        y, X, I, Z = _three_way_data()
        _, calls = self._record_children(y, X, I, Z, MeshScale(5.0))
        assert [c["opt"] for c in calls] == [MeshScale(-1.0), MeshScale(1.0)]

    def test_poly22_propagates(self):
        y, X, I, Z = _three_way_data()
        _, calls = self._record_children(y, X, I, Z, Poly22())
        assert all(c["opt"] == Poly22() for c in calls)

    def test_prunes_main_effect_collinear_with_interaction(self):
        """I equal to a remaining main effect within a level is dropped."""
        rng = np.random.default_rng(5)
        n = 80
        c = np.tile([0.0, 1.0], n // 2)
        a = rng.standard_normal(n)
        b = rng.standard_normal(n)
        X = np.column_stack([a, b, c])
        I = np.where(c == 1, a, b)[:, None]  # noqa: E741
        Z = np.empty((n, 0))
        with pytest.warns(SingularDesignWarning, match="near-collinear"):
            data, calls = self._record_children(rng.standard_normal(n), X, I, Z, MeshScale())
        assert data.dropped_main_effects == ((1,), (0,))
        assert [c["j"] for c in calls] == [1, 1]

    def test_prunes_duplicate_nuisance(self):
        rng = np.random.default_rng(6)
        n = 60
        X = np.column_stack(
            [np.tile([0.0, 1.0], n // 2), rng.standard_normal(n), rng.standard_normal(n)]
        )
        z = rng.standard_normal(n)
        Z = np.column_stack([np.ones(n), z, -2.0 * z])
        with pytest.warns(SingularDesignWarning):
            data, calls = self._record_children(rng.standard_normal(n), X, None, Z, MeshScale())
        assert data.dropped_nuisance == ((1,), (1,))
        assert [c["k"] for c in calls] == [2, 2]

    def test_prunes_nuisance_collinear_with_main_effect(self):
        rng = np.random.default_rng(7)
        n = 60
        a = rng.standard_normal(n)
        X = np.column_stack([a, rng.standard_normal(n), np.tile([0.0, 1.0], n // 2)])
        Z = np.column_stack([np.ones(n), a + 4.0])
        with pytest.warns(SingularDesignWarning):
            data, _ = self._record_children(rng.standard_normal(n), X, None, Z, MeshScale())
        assert data.dropped_nuisance == ((1,), (1,))
        assert data.dropped_main_effects == ((), ())


# ── TestRecursiveEndToEnd ────────────────────────────────────────── #


@pytest.mark.filterwarnings("ignore::UserWarning")
class TestRecursiveEndToEnd:
    def test_two_children_never_three_way(self):
        y, X, I, Z = _three_way_data()
        result = InteractionPlotter().compute(y, X, I=I, Z=Z)
        assert result.variant is PlotVariant.THREE_WAY
        children = result.data.children
        assert len(children) == 2
        for child in children:
            assert child.variant is not PlotVariant.THREE_WAY
            assert child.depth == 1
            assert len(child.classes) == 2
        assert sum(ch.n_observations for ch in children) == len(y)

    def test_cardinalities_2_3_5_split_on_binary(self):
        """Remaining columns have 3 and 5 levels, so each half is a surface."""
        y, X, I, Z = _three_way_data()
        result = InteractionPlotter().compute(y, X, I=I, Z=Z)
        assert result.data.split_column == 0
        for child in result.data.children:
            assert child.variant is PlotVariant.SURFACE
            assert 50 < child.n_observations < 150

    def test_child_options_follow_level_sign(self):
        y, X, I, Z = _three_way_data()
        result = InteractionPlotter(opt=3.0).compute(y, X, I=I, Z=Z)
        assert [ch.option for ch in result.data.children] == [MeshScale(-1.0), MeshScale(1.0)]

    def test_labels_propagate(self):
        y, X, I, Z = _three_way_data()
        result = InteractionPlotter(labels={"title": "T"}).compute(y, X, I=I, Z=Z)
        assert all(ch.labels.title == "T" for ch in result.data.children)

    def test_binary_split_with_binary_remaining_gives_cell_means(self):
        rng = np.random.default_rng(8)
        n = 120
        X = np.column_stack(
            [rng.integers(0, 2, n), rng.integers(0, 2, n), np.tile([0.0, 1.0], n // 2)]
        ).astype(float)
        I = (X[:, 0] * X[:, 1] * X[:, 2])[:, None]  # noqa: E741
        result = InteractionPlotter().compute(rng.standard_normal(n), X, I=I)
        assert result.data.split_column == 2
        assert [ch.variant for ch in result.data.children] == [
            PlotVariant.CELL_MEANS,
            PlotVariant.CELL_MEANS,
        ]

    def test_no_binary_column_raises(self):
        rng = np.random.default_rng(9)
        X = rng.standard_normal((30, 3))
        with pytest.raises(UndefinedSplitError):
            InteractionPlotter().compute(rng.standard_normal(30), X, I=X[:, 0])


# ── TestWarningLocation ──────────────────────────────────────────── #


class TestWarningLocation:
    """Warnings raised inside the recursion are attributed to the caller."""

    def test_pruning_warning_points_at_caller(self):
        rng = np.random.default_rng(6)
        n = 60
        X = np.column_stack(
            [np.tile([0.0, 1.0], n // 2), rng.standard_normal(n), rng.standard_normal(n)]
        )
        z = rng.standard_normal(n)
        Z = np.column_stack([np.ones(n), z, -2.0 * z])
        with pytest.warns(SingularDesignWarning, match="near-collinear") as record:
            plot_interaction(rng.standard_normal(n), X, Z=Z, opt="poly22", render=False)
        assert len(record) >= 2
        assert all(w.filename == __file__ for w in record)

    def test_child_rank_warning_points_at_caller(self):
        """At level 0 of a 0/1 split the interaction is all zero."""
        y, X, I, Z = _three_way_data()
        X = X.copy()
        X[:, 0] = (X[:, 0] > 0).astype(float)
        I = X[:, :1] * X[:, 1:2] * X[:, 2:3]  # noqa: E741
        with pytest.warns(SingularDesignWarning, match="rank-deficient") as record:
            InteractionPlotter().compute(y, X, I=I, Z=Z)
        assert all(w.filename == __file__ for w in record)
