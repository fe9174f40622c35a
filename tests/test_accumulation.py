import numpy as np
import pytest

from slabmc.mc.tallies import AccumulationGrid
from slabmc.models.materials import SlabOpticalProps
from slabmc.models.slab import Slab
from slabmc.simulation.run_pass import PassConfig, run_pass

PROPS = SlabOpticalProps(mu_a=1.0, mu_s=2.0, g=0.75)
SLAB = Slab(d=0.5, slab_size=2.0)
CFG = PassConfig(n_photons=500)


def test_grid_starts_at_zero():
    grid = AccumulationGrid(8)
    assert grid.records.shape == (8, 8)
    assert not grid.records.any()
    assert grid.n_passes == 0
    assert not grid.normalized().any()


def test_normalized_is_cumulative_sum_over_pass_count():
    grid = AccumulationGrid(2)
    grid.deposit(0, 1, 3.0)
    grid.end_pass()
    assert grid.normalized()[0, 1] == 3.0
    grid.deposit(0, 1, 1.0)
    grid.end_pass()
    # (3 + 1) / 2，不是滑动平均
    assert grid.normalized()[0, 1] == 2.0
    assert grid.records[0, 1] == 4.0


@pytest.mark.parametrize("size", [0, -3])
def test_grid_rejects_non_positive_size(size):
    with pytest.raises(ValueError):
        AccumulationGrid(size)


def test_persistent_grid_equals_sum_of_pass_grids():
    k = 3

    persistent = AccumulationGrid(16)
    rng = np.random.default_rng(123)
    for _ in range(k):
        run_pass(PROPS, SLAB, CFG, persistent, rng)

    summed = AccumulationGrid(16)
    rng = np.random.default_rng(123)
    for _ in range(k):
        single = AccumulationGrid(16)
        run_pass(PROPS, SLAB, CFG, single, rng)
        summed.merge(single)

    assert summed.n_passes == persistent.n_passes == k
    assert np.allclose(summed.records, persistent.records, rtol=1e-12, atol=1e-12)


def test_grid_values_never_decrease_across_passes():
    grid = AccumulationGrid(16)
    rng = np.random.default_rng(4)
    prev = grid.records.copy()
    for _ in range(4):
        run_pass(PROPS, SLAB, CFG, grid, rng)
        assert np.all(grid.records >= prev)
        prev = grid.records.copy()
    assert grid.records.sum() > 0.0


def test_pass_aggregates_reset_but_grid_persists():
    grid = AccumulationGrid(16)
    rng = np.random.default_rng(5)
    r1 = run_pass(PROPS, SLAB, CFG, grid, rng)
    after_first = grid.records.sum()
    r2 = run_pass(PROPS, SLAB, CFG, grid, rng)

    # 每个 pass 的 T_d 只统计本 pass；网格是两个 pass 的累计
    assert r2.T_d <= CFG.n_photons
    assert 0.0 < after_first <= r1.T_d + 1e-9
    assert after_first < grid.records.sum() <= after_first + r2.T_d + 1e-9
    assert grid.n_passes == 2


def test_merge_and_copy():
    a = AccumulationGrid(3)
    a.deposit(1, 1, 2.0)
    a.end_pass()
    b = a.copy()
    b.deposit(1, 1, 1.0)
    assert a.records[1, 1] == 2.0
    a.merge(b)
    assert a.records[1, 1] == 5.0
    assert a.n_passes == 2
    with pytest.raises(ValueError):
        a.merge(AccumulationGrid(4))
