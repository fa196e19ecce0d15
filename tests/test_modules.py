# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import numpy as np
import pytest

from eigengene import (
    OutOfRangeError,
    SummaryConfig,
    compute_subset_eigen_summary,
    module_coherence,
    node_contribution,
    summarize_modules,
)


def test_summarize_modules_matches_single_calls(module_data):
    data, modules = module_data(sizes=(8, 5, 6), seed=2)
    summaries = summarize_modules(data, modules)

    assert [s.module for s in summaries] == ["m0", "m1", "m2"]
    for s in summaries:
        single = compute_subset_eigen_summary(data, modules[s.module])
        np.testing.assert_array_equal(s.eigenvector, single.eigenvector)
        assert s.variance_explained == single.variance_explained
        np.testing.assert_array_equal(s.indices, modules[s.module])
        assert s.contribution.shape == (len(modules[s.module]),)


def test_planted_modules_are_coherent(module_data):
    data, modules = module_data(n_samples=100, sizes=(10, 10), noise=0.2, seed=8)
    for s in summarize_modules(data, modules):
        assert s.variance_explained > 0.8
        assert s.coherence > 0.8
        # loadings are all positive, so every node follows the eigengene
        assert np.all(s.contribution > 0.8)


def test_bad_module_fails_before_any_read(counting_matrix, module_data):
    data, modules = module_data(seed=1)
    modules["broken"] = [1, data.shape[1] + 1]
    matrix = counting_matrix(data)
    with pytest.raises(OutOfRangeError):
        summarize_modules(matrix, modules)
    assert matrix.reads == []


def test_degenerate_module_with_zero_fallback():
    data = np.column_stack([np.arange(6.0), np.arange(6.0) ** 2, np.full(6, 3.0)])
    summaries = summarize_modules(
        data, {"a": [1, 2], "flat": [3]}, SummaryConfig(on_degenerate="zero")
    )
    flat = summaries[1]
    assert flat.variance_explained == 0.0
    np.testing.assert_array_equal(flat.contribution, [0.0])
    assert flat.coherence == 0.0


def test_node_contribution():
    e = np.array([-3.0, -1.0, 1.0, 3.0])
    W = np.column_stack([2 * e + 1, -e, np.full(4, 7.0)])
    np.testing.assert_allclose(node_contribution(W, e), [1.0, -1.0, 0.0])


def test_module_coherence():
    assert module_coherence(np.array([1.0, -1.0])) == 1.0
    assert module_coherence(np.array([0.5, 0.5])) == 0.25
    assert np.isnan(module_coherence(np.array([])))
