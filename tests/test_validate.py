# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import numpy as np
import pytest

from eigengene.config import SummaryConfig
from eigengene.errors import DuplicateIndexError, OutOfRangeError
from eigengene.validate import check_subset_indices


def test_converts_to_zero_based_in_order():
    pos = check_subset_indices([3, 1, 2], n_cols=3)
    assert pos.dtype == np.int64
    np.testing.assert_array_equal(pos, [2, 0, 1])


def test_reports_every_bad_index():
    with pytest.raises(OutOfRangeError) as info:
        check_subset_indices(np.array([0, 2, 5, -3, 4]), n_cols=4)
    assert info.value.bad == (0, 5, -3)
    assert "1..4" in str(info.value)


def test_long_lists_are_truncated_in_message():
    with pytest.raises(OutOfRangeError) as info:
        check_subset_indices(list(range(10, 40)), n_cols=5)
    assert len(info.value.bad) == 30
    assert str(info.value).endswith("...")


def test_duplicates():
    with pytest.raises(DuplicateIndexError) as info:
        check_subset_indices([2, 2, 3, 3, 1], n_cols=3)
    assert info.value.duplicated == (2, 3)
    pos = check_subset_indices([2, 2], n_cols=3, allow_duplicates=True)
    np.testing.assert_array_equal(pos, [1, 1])


def test_bounds_checked_before_duplicates():
    with pytest.raises(OutOfRangeError):
        check_subset_indices([9, 9], n_cols=3)


def test_rejects_two_dimensional_indices():
    with pytest.raises(ValueError):
        check_subset_indices([[1, 2]], n_cols=3)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"method": "lanczos"},
        {"on_degenerate": "nan"},
        {"center": False, "scale": True},
        {"max_iter": 0},
        {"tol": 0.0},
    ],
)
def test_config_rejects_bad_values(kwargs):
    with pytest.raises(ValueError):
        SummaryConfig(**kwargs)


def test_config_with_options():
    cfg = SummaryConfig().with_options(method="svd")
    assert cfg.method == "svd"
    assert cfg.center
