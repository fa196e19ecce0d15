# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import numpy as np
import pytest

from eigengene.backing import ArrayMatrix


class CountingMatrix(ArrayMatrix):
    """ArrayMatrix that records which columns were read."""

    def __init__(self, data):
        super().__init__(data)
        self.reads = []

    def read_column(self, j):
        self.reads.append(j)
        return super().read_column(j)


def make_modules(n_samples=60, sizes=(8, 5), noise=0.3, seed=0):
    """
    Data whose columns come in blocks; each block follows one latent
    profile plus noise. Returns (data, {label: 1-based indices}).
    """
    rng = np.random.default_rng(seed)
    blocks, modules, start = [], {}, 1
    for m, size in enumerate(sizes):
        profile = rng.normal(size=n_samples)
        loadings = rng.uniform(0.5, 2.0, size=size)
        blocks.append(np.outer(profile, loadings) + noise * rng.normal(size=(n_samples, size)))
        modules[f"m{m}"] = list(range(start, start + size))
        start += size
    return np.column_stack(blocks), modules


@pytest.fixture
def scenario():
    """Columns 1 and 2 perfectly correlated, column 3 constant."""
    return np.array([[1, 2, 5], [2, 4, 5], [3, 6, 5], [4, 8, 5]], dtype=float)


@pytest.fixture
def counting(scenario):
    return CountingMatrix(scenario)


@pytest.fixture
def counting_matrix():
    return CountingMatrix


@pytest.fixture
def module_data():
    return make_modules
